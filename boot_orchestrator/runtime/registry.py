from __future__ import annotations

import logging
import threading
from typing import Generic, TypeVar


logger = logging.getLogger(__name__)

T = TypeVar("T")


class SingletonRegistry(Generic[T]):
    """Holds zero or one live instance; first registration wins."""

    def __init__(self, name: str = "orchestrator") -> None:
        self._name = name
        self._lock = threading.Lock()
        self._occupant: T | None = None

    def try_register(self, instance: T) -> bool:
        with self._lock:
            if self._occupant is None:
                self._occupant = instance
                return True
            won = self._occupant is instance

        if not won:
            logger.warning("duplicate_instance_rejected", extra={"slot": self._name})
        return won

    def release(self, instance: T) -> bool:
        """Clear the slot if `instance` occupies it."""

        with self._lock:
            if self._occupant is not instance:
                return False
            self._occupant = None
        logger.debug("singleton_released", extra={"slot": self._name})
        return True

    def current(self) -> T | None:
        with self._lock:
            return self._occupant

    def owns(self, instance: T) -> bool:
        with self._lock:
            return self._occupant is instance
