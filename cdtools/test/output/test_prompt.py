from __future__ import annotations

import pytest

from cdtools.output.prompt import PromptProtocol, ScriptedPrompt

LEVELS = [("patch", "patch"), ("minor", "minor"), ("major", "major")]


def test_answers_are_replayed_in_order() -> None:
    prompt = ScriptedPrompt(answers=["minor", True, "feat/x"])

    assert prompt.choose("Bump", LEVELS) == "minor"
    assert prompt.confirm("Sure?") is True
    assert prompt.text("Branch name") == "feat/x"
    assert prompt.questions == ["Bump", "Sure?", "Branch name"]


def test_defaults_when_script_is_exhausted() -> None:
    prompt = ScriptedPrompt()

    assert prompt.choose("Bump", LEVELS, default="major") == "major"
    assert prompt.choose("Bump again", LEVELS) == "patch"
    assert prompt.confirm("Sure?") is False
    assert prompt.confirm("Really?", default=True) is True
    assert prompt.text("Name", default="feat/release") == "feat/release"
    assert prompt.text("Other") is None


def test_none_cancels() -> None:
    prompt = ScriptedPrompt(answers=[None])
    assert prompt.choose("Bump", LEVELS) is None


def test_unknown_choice_is_a_test_bug() -> None:
    prompt = ScriptedPrompt(answers=["huge"])
    with pytest.raises(AssertionError, match="not an option"):
        prompt.choose("Bump", LEVELS)


def test_records_answers() -> None:
    prompt: PromptProtocol = ScriptedPrompt(answers=["major"])
    prompt.choose("Bump", LEVELS)
    assert isinstance(prompt, ScriptedPrompt)
    assert prompt.asked[0].answer == "major"
