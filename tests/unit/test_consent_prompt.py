from __future__ import annotations

import io

from boot_orchestrator.gates.consent import ConsentText, ConsolePrompt


def test_console_prompt_retries_until_valid_answer() -> None:
    out = io.StringIO()
    prompt = ConsolePrompt(stdin=io.StringIO("maybe\nY\n"), stdout=out)

    assert prompt.ask(ConsentText()) is True
    text = out.getvalue()
    assert "Disclaimer & Age Verification" in text
    assert "[n] Exit Game" in text
    assert text.count("> ") == 2


def test_console_prompt_decline_and_eof() -> None:
    assert ConsolePrompt(stdin=io.StringIO("no\n"), stdout=io.StringIO()).ask(ConsentText()) is False
    assert ConsolePrompt(stdin=io.StringIO(""), stdout=io.StringIO()).ask(ConsentText()) is False
