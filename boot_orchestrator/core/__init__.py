from __future__ import annotations

from .errors import (
    BootError,
    ConfigError,
    DebugSurfaceUnavailable,
    MissingDependencyError,
    ReadinessTimeoutError,
)

__all__ = [
    "BootError",
    "ConfigError",
    "DebugSurfaceUnavailable",
    "MissingDependencyError",
    "ReadinessTimeoutError",
]
