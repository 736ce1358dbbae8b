from __future__ import annotations

import logging
from typing import Protocol


logger = logging.getLogger(__name__)


class SceneSink(Protocol):
    """Fire-and-forget scene transition target."""

    def load_scene(self, name: str) -> None: ...


class LoggingSceneSink:
    """Sink for headless runs: records transitions and logs them."""

    def __init__(self) -> None:
        self.loaded: list[str] = []

    def load_scene(self, name: str) -> None:
        self.loaded.append(name)
        logger.info("scene_transition", extra={"scene": name})

    @property
    def last(self) -> str | None:
        return self.loaded[-1] if self.loaded else None
