"""Application bootstrap: single orchestrator, readiness wait, one-time gates."""

__version__ = "0.1.0"
