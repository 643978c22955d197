from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from cdtools.cli.prompts import TyperPrompt
from cdtools.git.repository import Repository
from cdtools.github.forge import GitHub
from cdtools.output.console import ConsoleProtocol, RichConsole
from cdtools.output.prompt import PromptProtocol
from cdtools.services.context import ForgeProtocol, GitProtocol, ServiceContext

ROOT_ENV = "CDTOOLS_ROOT"


@dataclass(frozen=True, slots=True)
class CLIContext:
    root: Path
    console: ConsoleProtocol
    prompt: PromptProtocol
    git: GitProtocol
    forge: ForgeProtocol

    def services(self) -> ServiceContext:
        return ServiceContext(
            root=self.root,
            console=self.console,
            prompt=self.prompt,
            git=self.git,
            forge=self.forge,
        )


def resolve_root() -> Path:
    """``$CDTOOLS_ROOT`` (set by ``--root``), else the current directory."""
    configured = os.environ.get(ROOT_ENV, "").strip()
    return Path(configured).expanduser().resolve() if configured else Path.cwd()


def build_context() -> CLIContext:
    root = resolve_root()
    console = RichConsole()
    return CLIContext(
        root=root,
        console=console,
        prompt=TyperPrompt(console),
        git=Repository(root, console),
        forge=GitHub(root, console),
    )
