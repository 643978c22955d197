"""Git repository abstraction.

The version-control collaborator for release commands. Every operation
returns a Result; a GitError carries the full failing command line.

Usage:
    repo = Repository(Path("."))

    match repo.current_branch():
        case Ok(branch):
            print(f"Branch: {branch}")
        case Err(e):
            print(f"{e.command}: {e.message}")
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from cdtools.core.result import Err, Ok, Result
from cdtools.output.console import Style
from cdtools.platform.process import ProcessError
from cdtools.platform.process import run as run_process
from cdtools.platform.timeouts import GIT_NETWORK_TIMEOUT_SECONDS, GIT_TIMEOUT_SECONDS

if TYPE_CHECKING:
    from cdtools.output.console import ConsoleProtocol

__all__ = [
    "GitError",
    "Repository",
]

_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push", "clone"})


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    Attributes:
        command: The git command line that failed
        message: Error message (stderr, or a description)
        returncode: Process return code
    """

    command: str
    message: str
    returncode: int = 1

    @property
    def hint(self) -> str:
        return f"command: {self.command}"

    @classmethod
    def from_process(cls, error: ProcessError, *, fallback: str) -> GitError:
        return cls(
            command=error.command_line,
            message=error.stderr.strip() or error.stdout.strip() or fallback,
            returncode=error.returncode,
        )


def _lines(output: str) -> list[str]:
    return [ln.strip() for ln in output.splitlines() if ln.strip()]


class Repository:
    """Git operations on the working tree at ``path``.

    Mutating commands are echoed to ``console`` (when given) before they run.
    """

    def __init__(self, path: Path, console: ConsoleProtocol | None = None) -> None:
        self.path = path
        self._console = console

    def current_branch(self) -> Result[str, GitError]:
        """Name of the checked-out branch; Err on detached HEAD."""
        result = self._git(["branch", "--show-current"], fallback="failed to get current branch")
        if isinstance(result, Err):
            return result
        branch = result.value.strip()
        if not branch:
            return Err(
                GitError(
                    command="git branch --show-current",
                    message="HEAD is detached; check out a branch first",
                )
            )
        return Ok(branch)

    def validate_branch_name(self, name: str) -> Result[None, GitError]:
        result = self._git(
            ["check-ref-format", "--branch", name],
            fallback=f"invalid branch name: {name}",
        )
        if isinstance(result, Err):
            e = result.error
            return Err(GitError(command=e.command, message=f"invalid branch name: {name}"))
        return Ok(None)

    def pull_latest(self, branch: str) -> Result[None, GitError]:
        valid = self.validate_branch_name(branch)
        if isinstance(valid, Err):
            return valid
        return self._git(["pull", "origin", branch], fallback="pull failed", echo=True).map(
            lambda _: None
        )

    def create_and_checkout_branch(self, name: str) -> Result[None, GitError]:
        valid = self.validate_branch_name(name)
        if isinstance(valid, Err):
            return valid
        return self._git(
            ["checkout", "-b", name], fallback=f"failed to create branch {name}", echo=True
        ).map(lambda _: None)

    def switch_to(self, branch: str) -> Result[None, GitError]:
        return self._git(
            ["checkout", branch], fallback=f"failed to switch to {branch}", echo=True
        ).map(lambda _: None)

    def delete_local_branch(self, name: str, *, force: bool = False) -> Result[None, GitError]:
        flag = "-D" if force else "-d"
        return self._git(
            ["branch", flag, name], fallback=f"failed to delete branch {name}", echo=True
        ).map(lambda _: None)

    def list_branches(self) -> Result[list[str], GitError]:
        """Local branch names."""
        return self._git(
            ["branch", "--format=%(refname:short)"], fallback="failed to list branches"
        ).map(_lines)

    def changed_files(self, parent_branch: str) -> Result[list[str], GitError]:
        """Files changed on this branch relative to ``parent_branch``.

        Diffs against the merge base when one exists, else against the parent
        branch tip.
        """
        base = self._git(["merge-base", parent_branch, "HEAD"], fallback="merge-base failed")
        if isinstance(base, Ok) and base.value.strip():
            diff = self._git(
                ["diff", base.value.strip(), "--name-only"], fallback="diff failed"
            )
            if isinstance(diff, Ok):
                return Ok(_lines(diff.value))

        return self._git(["diff", parent_branch, "--name-only"], fallback="diff failed").map(_lines)

    def commit_all(self, message: str) -> Result[None, GitError]:
        """Stage everything and commit."""
        added = self._git(["add", "."], fallback="git add failed", echo=True)
        if isinstance(added, Err):
            return added
        return self._git(["commit", "-m", message], fallback="git commit failed", echo=True).map(
            lambda _: None
        )

    def push(self, branch: str | None = None) -> Result[None, GitError]:
        args = ["push", "-u", "origin", branch] if branch else ["push"]
        return self._git(args, fallback="push failed", echo=True).map(lambda _: None)

    def tags_matching(self, pattern: str) -> Result[list[str], GitError]:
        """Tags matching a glob such as ``*1.0.1-rc.*``."""
        return self._git(["tag", "-l", pattern], fallback="failed to list tags").map(_lines)

    def _git(self, args: list[str], *, fallback: str, echo: bool = False) -> Result[str, GitError]:
        if echo and self._console is not None:
            shown = " ".join(["git", *args[:3]])
            suffix = " ..." if len(args) > 3 else ""
            self._console.print(shown + suffix, Style.DIM)
        result = self._run(args)
        if isinstance(result, Err):
            return Err(GitError.from_process(result.error, fallback=fallback))
        return Ok(result.value)

    def _run(self, args: list[str]) -> Result[str, ProcessError]:
        """Run a git command in this repository."""
        command = args[0] if args else ""
        timeout = GIT_NETWORK_TIMEOUT_SECONDS if command in _NETWORK_COMMANDS else GIT_TIMEOUT_SECONDS
        return run_process(["git", *args], cwd=self.path, timeout=timeout)
