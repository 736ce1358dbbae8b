from __future__ import annotations

import time
from dataclasses import dataclass, field


def monotonic_s() -> float:
    """Monotonic clock in seconds.

    Use this for elapsed-time measurements.
    """

    return time.monotonic()


@dataclass(slots=True)
class Stopwatch:
    """Elapsed-time marker started at construction."""

    started_s: float = field(default_factory=monotonic_s)

    def elapsed_s(self) -> float:
        return monotonic_s() - self.started_s

    def elapsed_ms(self) -> int:
        return int(self.elapsed_s() * 1000)
