"""One-time gate: a persisted Unseen -> Seen switch that picks one transition.

Precedence, first match wins:
1. feature disabled          -> FEATURE_DISABLED
2. debug force-skip (dev)    -> DEBUG_SKIP
3. flag already set          -> RETURNING
4. otherwise                 -> FIRST_TIME

A gate instance fires at most once; subclasses persist the flag before the
first-time transition becomes observable.
"""

from __future__ import annotations

import logging
from enum import Enum

from boot_orchestrator.core.errors import BootError, DebugSurfaceUnavailable
from boot_orchestrator.state.flag_store import PersistedFlagStore


logger = logging.getLogger(__name__)


class GateReason(str, Enum):
    FEATURE_DISABLED = "feature_disabled"
    DEBUG_SKIP = "debug_skip"
    RETURNING = "returning"
    FIRST_TIME = "first_time"


class GateAlreadyFired(BootError):
    """Raised when a gate instance is asked to fire a second time."""


def decide(*, enabled: bool, force_skip: bool, seen: bool, debug_enabled: bool) -> GateReason:
    if not enabled:
        return GateReason.FEATURE_DISABLED
    if debug_enabled and force_skip:
        return GateReason.DEBUG_SKIP
    if seen:
        return GateReason.RETURNING
    return GateReason.FIRST_TIME


class OneTimeGate:
    def __init__(
        self,
        store: PersistedFlagStore,
        flag_key: str,
        *,
        name: str,
        enabled: bool = True,
        force_skip: bool = False,
        debug_enabled: bool = False,
    ) -> None:
        store.get(flag_key)  # unknown keys fail here, not at fire time
        self._store = store
        self._flag_key = flag_key
        self.name = name
        self._enabled = enabled
        self._force_skip = force_skip
        self._debug_enabled = debug_enabled
        self._fired = False

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def seen(self) -> bool:
        return self._store.get(self._flag_key)

    @property
    def fired(self) -> bool:
        return self._fired

    def decide(self) -> GateReason:
        reason = decide(
            enabled=self._enabled,
            force_skip=self._force_skip,
            seen=self.seen,
            debug_enabled=self._debug_enabled,
        )
        logger.info("gate_decision", extra={"gate": self.name, "reason": reason.value})
        return reason

    def mark_seen(self) -> bool:
        return self._store.set(self._flag_key, True)

    def _claim(self) -> None:
        if self._fired:
            raise GateAlreadyFired(f"{self.name} gate has already fired")
        self._fired = True

    # Debug surface (dev builds only).

    def _require_debug(self, op: str) -> None:
        if not self._debug_enabled:
            raise DebugSurfaceUnavailable(f"{self.name}.{op} is only available in dev builds")

    def reset(self) -> None:
        """Forget the persisted flag and allow this instance to fire again."""

        self._require_debug("reset")
        self._store.reset(self._flag_key)
        self._fired = False

    def force_seen(self) -> None:
        self._require_debug("force_seen")
        self.mark_seen()

    def toggle_enabled(self) -> bool:
        self._require_debug("toggle_enabled")
        self._enabled = not self._enabled
        logger.info("gate_toggled", extra={"gate": self.name, "enabled": self._enabled})
        return self._enabled
