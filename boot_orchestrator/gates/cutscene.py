from __future__ import annotations

import logging

from boot_orchestrator.gates.gate import GateReason, OneTimeGate
from boot_orchestrator.runtime.scenes import SceneSink
from boot_orchestrator.state.flag_store import CUTSCENE_SEEN, PersistedFlagStore


logger = logging.getLogger(__name__)


class CutsceneGate(OneTimeGate):
    """Intro cutscene on first boot, lockscreen on every other."""

    def __init__(
        self,
        store: PersistedFlagStore,
        *,
        sink: SceneSink,
        cutscene_scene: str = "02_Cutscene",
        lockscreen_scene: str = "03_Lockscreen",
        enabled: bool = True,
        force_skip: bool = False,
        debug_enabled: bool = False,
    ) -> None:
        super().__init__(
            store,
            CUTSCENE_SEEN,
            name="cutscene",
            enabled=enabled,
            force_skip=force_skip,
            debug_enabled=debug_enabled,
        )
        self._sink = sink
        self._cutscene_scene = cutscene_scene
        self._lockscreen_scene = lockscreen_scene

    def run(self) -> str:
        """Fire the gate and return the scene that was requested."""

        self._claim()
        if self.decide() is GateReason.FIRST_TIME:
            # Persist first: a crash after this point must not replay the cutscene.
            self.mark_seen()
            destination = self._cutscene_scene
        else:
            destination = self._lockscreen_scene

        logger.info("cutscene_gate_transition", extra={"scene": destination})
        self._sink.load_scene(destination)
        return destination
