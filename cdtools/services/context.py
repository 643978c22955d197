"""What a release command needs from the outside world."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Protocol

from cdtools.core.result import Result
from cdtools.git.repository import GitError
from cdtools.github.gh import ForgeError, PrStatus
from cdtools.output.console import ConsoleProtocol
from cdtools.output.prompt import PromptProtocol


class GitProtocol(Protocol):
    def current_branch(self) -> Result[str, GitError]: ...

    def validate_branch_name(self, name: str) -> Result[None, GitError]: ...

    def pull_latest(self, branch: str) -> Result[None, GitError]: ...

    def create_and_checkout_branch(self, name: str) -> Result[None, GitError]: ...

    def switch_to(self, branch: str) -> Result[None, GitError]: ...

    def delete_local_branch(self, name: str, *, force: bool = False) -> Result[None, GitError]: ...

    def list_branches(self) -> Result[list[str], GitError]: ...

    def changed_files(self, parent_branch: str) -> Result[list[str], GitError]: ...

    def commit_all(self, message: str) -> Result[None, GitError]: ...

    def push(self, branch: str | None = None) -> Result[None, GitError]: ...

    def tags_matching(self, pattern: str) -> Result[list[str], GitError]: ...


class ForgeProtocol(Protocol):
    def ensure_ready(self) -> Result[None, ForgeError]: ...

    def pr_exists(self) -> Result[bool, ForgeError]: ...

    def current_pr_url(self) -> Result[str | None, ForgeError]: ...

    def pr_status(self) -> Result[PrStatus, ForgeError]: ...

    def create_pull_request(
        self, title: str, body: str, base_branch: str
    ) -> Result[str, ForgeError]: ...

    def merge_pull_request(self, pr_url: str) -> Result[None, ForgeError]: ...

    def create_release(
        self, tag: str, title: str, body: str, *, prerelease: bool = False
    ) -> Result[str, ForgeError]: ...


@dataclass(frozen=True, slots=True)
class ServiceContext:
    """Collaborators for one command run.

    ``now`` pins the clock for timestamps and suffixes; None means wall clock.
    """

    root: Path
    console: ConsoleProtocol
    prompt: PromptProtocol
    git: GitProtocol
    forge: ForgeProtocol
    now: datetime | None = None

    def clock(self) -> datetime:
        return self.now if self.now is not None else datetime.now(UTC)
