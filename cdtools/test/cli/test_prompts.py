from __future__ import annotations

from collections.abc import Iterator

import pytest
import typer

from cdtools.cli.prompts import TyperPrompt
from cdtools.output.console import MockConsole

LEVELS = [("patch", "patch"), ("minor", "minor"), ("major", "major")]


def _feed(monkeypatch: pytest.MonkeyPatch, *answers: str) -> list[str]:
    """Replace typer.prompt with canned answers; returns the defaults it was offered."""
    replies: Iterator[str] = iter(answers)
    defaults: list[str] = []

    def fake_prompt(_text: str, default: object = None, **_kwargs: object) -> str:
        defaults.append(str(default))
        return next(replies)

    monkeypatch.setattr(typer, "prompt", fake_prompt)
    return defaults


def test_choose_by_number(monkeypatch: pytest.MonkeyPatch) -> None:
    _feed(monkeypatch, "2")
    console = MockConsole()

    assert TyperPrompt(console).choose("Version bump", LEVELS) == "minor"
    assert console.messages[0] == "Version bump"
    assert " 3. major" in console.messages


def test_choose_offers_default_index(monkeypatch: pytest.MonkeyPatch) -> None:
    defaults = _feed(monkeypatch, "3")
    TyperPrompt(MockConsole()).choose("Version bump", LEVELS, default="major")
    assert defaults == ["3"]


def test_choose_retries_bad_input(monkeypatch: pytest.MonkeyPatch) -> None:
    _feed(monkeypatch, "x", "9", "1")
    console = MockConsole()

    assert TyperPrompt(console).choose("Version bump", LEVELS) == "patch"
    assert console.find("invalid number")
    assert console.find("out of range")


def test_abort_cancels(monkeypatch: pytest.MonkeyPatch) -> None:
    def abort(*_args: object, **_kwargs: object) -> str:
        raise typer.Abort()

    monkeypatch.setattr(typer, "prompt", abort)
    monkeypatch.setattr(typer, "confirm", abort)
    prompt = TyperPrompt(MockConsole())

    assert prompt.choose("Version bump", LEVELS) is None
    assert prompt.text("Branch name") is None
    assert prompt.confirm("Merge?") is False


def test_text(monkeypatch: pytest.MonkeyPatch) -> None:
    defaults = _feed(monkeypatch, "feat/login")
    assert TyperPrompt(MockConsole()).text("Branch name", default="feat/release") == "feat/login"
    assert defaults == ["feat/release"]
