from __future__ import annotations

import logging
import threading
from typing import Any


logger = logging.getLogger(__name__)


class ServiceLocator:
    """Explicit registration point for collaborator singletons.

    Each collaborator registers itself under a kind (e.g. "save_manager") when
    it is constructed. `get(kind)` returns the live handle or None; None is the
    only absence signal the orchestrator interprets.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._services: dict[str, Any] = {}

    def register(self, kind: str, handle: Any) -> None:
        if handle is None:
            raise ValueError(f"Cannot register None for service kind {kind!r}")
        with self._lock:
            replaced = kind in self._services
            self._services[kind] = handle
        logger.debug("service_registered", extra={"kind": kind, "replaced": replaced})

    def unregister(self, kind: str) -> None:
        with self._lock:
            self._services.pop(kind, None)

    def get(self, kind: str) -> Any | None:
        with self._lock:
            return self._services.get(kind)

    def kinds(self) -> list[str]:
        with self._lock:
            return sorted(self._services)
