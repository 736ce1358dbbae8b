from __future__ import annotations

import logging

from boot_orchestrator.gates.cutscene import CutsceneGate
from boot_orchestrator.runtime.orchestrator import PROFILE_MANAGER
from boot_orchestrator.runtime.readiness import ReadinessPoller


logger = logging.getLogger(__name__)


class BootSequence:
    """Bootstrap scene driver: wait for readiness, then hand off to the cutscene gate."""

    def __init__(
        self,
        *,
        poller: ReadinessPoller,
        cutscene_gate: CutsceneGate,
        requires: str = PROFILE_MANAGER,
    ) -> None:
        self._poller = poller
        self._gate = cutscene_gate
        self._requires = requires

    async def run(self) -> str | None:
        """Return the scene handed to the sink, or None if boot stopped short.

        Raises:
            ReadinessTimeoutError: The orchestrator never reported ready.
        """

        logger.info("boot_sequence_started", extra={"timeout_s": self._poller.timeout_s})
        orch = await self._poller.wait()

        if orch.service(self._requires) is None:
            logger.error("boot_service_unavailable", extra={"kind": self._requires})
            return None

        destination = self._gate.run()
        orch.on_scene_loaded(destination)
        return destination
