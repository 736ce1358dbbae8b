"""Age verification / content warning gate.

Shown until the player accepts. Declining ends the session without writing
anything, so the prompt comes back on the next launch.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Protocol, TextIO

from boot_orchestrator.gates.gate import GateReason, OneTimeGate
from boot_orchestrator.runtime.scenes import SceneSink
from boot_orchestrator.state.flag_store import CONSENT_ACCEPTED, PersistedFlagStore


logger = logging.getLogger(__name__)

DEFAULT_TITLE = "Disclaimer & Age Verification"

DEFAULT_BODY = (
    "Warning: NSFW Content\n\n"
    "This game contains adult content intended for mature audiences only.\n\n"
    "All characters, events, and locations in this game are entirely fictional. "
    "Any resemblance to real persons or events is purely coincidental.\n\n"
    'By clicking "I am 18+", you explicitly confirm that you are at least 18 years old '
    "(or the legal age in your country) and consent to view adult content.\n\n"
    "Terms Agreement\n"
    "By entering the game, you agree to these terms and acknowledge that the game saves "
    "your progress locally on your device. No personal information is collected."
)

DEFAULT_AGREE_LABEL = "I am 18+"
DEFAULT_EXIT_LABEL = "Exit Game"


@dataclass(frozen=True)
class ConsentText:
    title: str = DEFAULT_TITLE
    body: str = DEFAULT_BODY
    agree_label: str = DEFAULT_AGREE_LABEL
    exit_label: str = DEFAULT_EXIT_LABEL

    @classmethod
    def with_custom_body(cls, body: str | None) -> "ConsentText":
        return cls(body=body) if body else cls()


class ConsentOutcome(str, Enum):
    ALREADY_ACCEPTED = "already_accepted"
    SKIPPED = "skipped"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class ConsentPrompt(Protocol):
    def ask(self, text: ConsentText) -> bool:
        """Show the consent screen; True for agree, False for exit."""
        ...


class FixedAnswerPrompt:
    """Answers without asking (non-interactive runs)."""

    def __init__(self, accept: bool) -> None:
        self.accept = accept
        self.shown: list[ConsentText] = []

    def ask(self, text: ConsentText) -> bool:
        self.shown.append(text)
        return self.accept


class ConsolePrompt:
    def __init__(self, *, stdin: TextIO | None = None, stdout: TextIO | None = None) -> None:
        self._stdin = stdin or sys.stdin
        self._stdout = stdout or sys.stdout

    def ask(self, text: ConsentText) -> bool:
        out = self._stdout
        out.write(f"\n{text.title}\n{'=' * len(text.title)}\n\n{text.body}\n\n")
        out.write(f"[y] {text.agree_label}   [n] {text.exit_label}\n")
        while True:
            out.write("> ")
            out.flush()
            line = self._stdin.readline()
            if not line:
                return False
            answer = line.strip().lower()
            if answer in {"y", "yes"}:
                return True
            if answer in {"n", "no"}:
                return False


class ConsentGate(OneTimeGate):
    def __init__(
        self,
        store: PersistedFlagStore,
        *,
        sink: SceneSink,
        prompt: ConsentPrompt,
        bootstrap_scene: str = "01_Bootstrap",
        text: ConsentText | None = None,
        enabled: bool = True,
        force_skip: bool = False,
        debug_enabled: bool = False,
        on_decline: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(
            store,
            CONSENT_ACCEPTED,
            name="consent",
            enabled=enabled,
            force_skip=force_skip,
            debug_enabled=debug_enabled,
        )
        self._sink = sink
        self._prompt = prompt
        self._bootstrap_scene = bootstrap_scene
        self.text = text or ConsentText()
        self._on_decline = on_decline

    def run(self) -> ConsentOutcome:
        self._claim()
        reason = self.decide()

        if reason is not GateReason.FIRST_TIME:
            outcome = ConsentOutcome.ALREADY_ACCEPTED if reason is GateReason.RETURNING else ConsentOutcome.SKIPPED
            self._sink.load_scene(self._bootstrap_scene)
            return outcome

        logger.info("consent_prompt_shown")
        if not self._prompt.ask(self.text):
            logger.info("consent_declined")
            if self._on_decline is not None:
                self._on_decline()
            return ConsentOutcome.DECLINED

        self.mark_seen()
        logger.info("consent_accepted")
        self._sink.load_scene(self._bootstrap_scene)
        return ConsentOutcome.ACCEPTED
