"""Interactive question abstraction.

Commands ask through ``PromptProtocol``; the CLI wires in a terminal
implementation and tests replay canned answers with ``ScriptedPrompt``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol, TypeVar

__all__ = [
    "PromptProtocol",
    "PromptRecord",
    "ScriptedPrompt",
]

T = TypeVar("T")


class PromptProtocol(Protocol):
    def choose(
        self, question: str, options: Sequence[tuple[T, str]], default: T | None = None
    ) -> T | None:
        """Pick one of ``(value, label)`` options; None when cancelled."""
        ...

    def confirm(self, question: str, default: bool = False) -> bool: ...

    def text(self, question: str, default: str | None = None) -> str | None:
        """Free-form answer; None when cancelled."""
        ...


@dataclass
class PromptRecord:
    question: str
    answer: object


def _empty_answers() -> list[object]:
    return []


def _empty_records() -> list[PromptRecord]:
    return []


@dataclass
class ScriptedPrompt:
    """Prompt that replays ``answers`` in order.

    When the script runs out, each question gets its default. A ``choose``
    answer must be one of the offered values (or None to cancel).
    """

    answers: list[object] = field(default_factory=_empty_answers)
    asked: list[PromptRecord] = field(default_factory=_empty_records)

    def _next(self, question: str, default: object) -> object:
        answer = self.answers.pop(0) if self.answers else default
        self.asked.append(PromptRecord(question, answer))
        return answer

    def choose(
        self, question: str, options: Sequence[tuple[T, str]], default: T | None = None
    ) -> T | None:
        fallback = default if default is not None else (options[0][0] if options else None)
        answer = self._next(question, fallback)
        if answer is None:
            return None
        for value, _label in options:
            if value == answer:
                return value
        raise AssertionError(f"scripted answer {answer!r} is not an option for: {question}")

    def confirm(self, question: str, default: bool = False) -> bool:
        return bool(self._next(question, default))

    def text(self, question: str, default: str | None = None) -> str | None:
        answer = self._next(question, default)
        return None if answer is None else str(answer)

    @property
    def questions(self) -> list[str]:
        return [r.question for r in self.asked]
