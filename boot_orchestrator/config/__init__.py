"""Configuration loading and schema.

- YAML-first configuration under configs/*.yaml
- Strict ${ENV_VAR} expansion (missing/empty env vars are errors)
- Typed, frozen view over the merged mapping (`BootConfig`)
"""

from __future__ import annotations

from boot_orchestrator.config.loader import load_config, resolve_profile_configs
from boot_orchestrator.config.model import (
    BootConfig,
    BootSection,
    ConsentSection,
    GateSection,
    SceneNames,
    StateSection,
)
from boot_orchestrator.core.errors import ConfigError

__all__ = [
    "BootConfig",
    "BootSection",
    "ConfigError",
    "ConsentSection",
    "GateSection",
    "SceneNames",
    "StateSection",
    "load_config",
    "resolve_profile_configs",
]
