"""Output abstraction layer."""

from .console import (
    ConsoleProtocol,
    MockConsole,
    OutputRecord,
    RichConsole,
    Style,
)
from .prompt import PromptProtocol, PromptRecord, ScriptedPrompt

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "OutputRecord",
    "PromptProtocol",
    "PromptRecord",
    "RichConsole",
    "ScriptedPrompt",
    "Style",
]
