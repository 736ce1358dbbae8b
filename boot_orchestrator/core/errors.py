from __future__ import annotations

from typing import Sequence


class BootError(Exception):
    """Base exception for this project."""


class ConfigError(BootError):
    """Raised when configuration is invalid or incomplete."""

    def __init__(self, message: str, *, path: str | None = None):
        super().__init__(f"{path}: {message}" if path else message)
        self.path = path


class MissingDependencyError(BootError):
    """A required collaborator could not be located during binding."""

    def __init__(self, missing: Sequence[str]):
        self.missing = tuple(missing)
        super().__init__(f"Missing required services: {', '.join(self.missing)}")


class ReadinessTimeoutError(BootError):
    """The orchestrator did not report ready before the deadline."""

    def __init__(self, *, timeout_s: float, elapsed_s: float):
        self.timeout_s = float(timeout_s)
        self.elapsed_s = float(elapsed_s)
        super().__init__(
            f"Orchestrator not ready after {self.elapsed_s:.3f}s (timeout {self.timeout_s:.3f}s)"
        )


class DebugSurfaceUnavailable(BootError):
    """Debug-only operation invoked in a release build."""
