"""Forge collaborator bound to one working tree."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from cdtools.core.result import Err, Result
from cdtools.github import gh
from cdtools.github.gh import ForgeError, PrStatus

if TYPE_CHECKING:
    from cdtools.output.console import ConsoleProtocol


class GitHub:
    """The ``gh`` functions with ``workspace_root`` and ``console`` filled in."""

    def __init__(self, root: Path, console: ConsoleProtocol | None = None) -> None:
        self.root = root
        self._console = console

    def ensure_ready(self) -> Result[None, ForgeError]:
        """gh is installed and logged in."""
        available = gh.ensure_gh_available()
        if isinstance(available, Err):
            return available
        return gh.ensure_gh_auth(workspace_root=self.root)

    def pr_exists(self) -> Result[bool, ForgeError]:
        return gh.pr_exists(workspace_root=self.root)

    def current_pr_url(self) -> Result[str | None, ForgeError]:
        return gh.current_pr_url(workspace_root=self.root)

    def pr_status(self) -> Result[PrStatus, ForgeError]:
        return gh.pr_status(workspace_root=self.root)

    def create_pull_request(
        self, title: str, body: str, base_branch: str
    ) -> Result[str, ForgeError]:
        return gh.create_pull_request(
            workspace_root=self.root,
            title=title,
            body=body,
            base_branch=base_branch,
            console=self._console,
        )

    def merge_pull_request(self, pr_url: str) -> Result[None, ForgeError]:
        return gh.merge_pull_request(workspace_root=self.root, pr_url=pr_url, console=self._console)

    def create_release(
        self, tag: str, title: str, body: str, *, prerelease: bool = False
    ) -> Result[str, ForgeError]:
        return gh.create_release(
            workspace_root=self.root,
            tag=tag,
            title=title,
            body=body,
            prerelease=prerelease,
            console=self._console,
        )
