"""Process-level boot runtime: registry, orchestrator, readiness, scenes."""
