from __future__ import annotations

from .consent import ConsentGate, ConsentOutcome, ConsentText
from .cutscene import CutsceneGate
from .gate import GateAlreadyFired, GateReason, OneTimeGate, decide

__all__ = [
    "ConsentGate",
    "ConsentOutcome",
    "ConsentText",
    "CutsceneGate",
    "GateAlreadyFired",
    "GateReason",
    "OneTimeGate",
    "decide",
]
