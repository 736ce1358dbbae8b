from __future__ import annotations

import asyncio
import logging
from typing import Callable

from boot_orchestrator.core.clock import Stopwatch
from boot_orchestrator.core.errors import ReadinessTimeoutError
from boot_orchestrator.runtime.orchestrator import BootOrchestrator


logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 5.0


class ReadinessPoller:
    """Waits, with a deadline, for the current orchestrator to report ready.

    The poller holds no orchestrator reference up front; `lookup` is asked
    once per tick (it may return None until the orchestrator exists).
    A timeout is reported once and not retried. Cancelling the waiting task
    ends the wait immediately.
    """

    def __init__(
        self,
        lookup: Callable[[], BootOrchestrator | None],
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        poll_interval_s: float = 1 / 60,
    ) -> None:
        if timeout_s <= 0:
            raise ValueError("timeout_s must be > 0")
        if poll_interval_s <= 0:
            raise ValueError("poll_interval_s must be > 0")
        self._lookup = lookup
        self._timeout_s = float(timeout_s)
        self._poll_interval_s = float(poll_interval_s)

    @property
    def timeout_s(self) -> float:
        return self._timeout_s

    async def wait(self) -> BootOrchestrator:
        watch = Stopwatch()
        polls = 0
        try:
            async with asyncio.timeout(self._timeout_s):
                while True:
                    polls += 1
                    orch = self._lookup()
                    if orch is not None and orch.is_ready:
                        logger.info(
                            "readiness_observed",
                            extra={"elapsed_ms": watch.elapsed_ms(), "polls": polls},
                        )
                        return orch
                    await asyncio.sleep(self._poll_interval_s)
        except TimeoutError as e:
            elapsed = watch.elapsed_s()
            logger.error(
                "readiness_timeout",
                extra={"timeout_s": self._timeout_s, "elapsed_ms": int(elapsed * 1000), "polls": polls},
            )
            raise ReadinessTimeoutError(timeout_s=self._timeout_s, elapsed_s=elapsed) from e
