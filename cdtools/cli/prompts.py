"""Terminal prompts built on typer."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

import typer

from cdtools.output.console import ConsoleProtocol, Style

T = TypeVar("T")


class TyperPrompt:
    """Numbered menus and yes/no questions on the terminal.

    Ctrl-C at a prompt counts as cancelling that question.
    """

    def __init__(self, console: ConsoleProtocol) -> None:
        self._console = console

    def choose(
        self, question: str, options: Sequence[tuple[T, str]], default: T | None = None
    ) -> T | None:
        if not options:
            return None

        default_idx = 1
        for i, (value, _label) in enumerate(options, start=1):
            if value == default:
                default_idx = i
                break

        self._console.print(question)
        for i, (_value, label) in enumerate(options, start=1):
            self._console.print(f"{i:2}. {label}", Style.DIM)

        while True:
            try:
                raw = typer.prompt("Pick number", default=str(default_idx))
            except typer.Abort:
                return None
            try:
                idx = int(raw)
            except ValueError:
                self._console.error("invalid number")
                continue
            if idx < 1 or idx > len(options):
                self._console.error("out of range")
                continue
            return options[idx - 1][0]

    def confirm(self, question: str, default: bool = False) -> bool:
        try:
            return typer.confirm(question, default=default)
        except typer.Abort:
            return False

    def text(self, question: str, default: str | None = None) -> str | None:
        try:
            answer: str = typer.prompt(
                question,
                default=default if default is not None else "",
                show_default=default is not None,
            )
        except typer.Abort:
            return None
        return answer
