"""In-memory git and forge collaborators for exercising services without processes."""

from __future__ import annotations

from dataclasses import dataclass, field

from cdtools.core.result import Err, Ok, Result
from cdtools.git.repository import GitError
from cdtools.github.gh import ForgeError, PrStatus


def _str_list() -> list[str]:
    return []


def _git_errors() -> dict[str, GitError]:
    return {}


def _forge_errors() -> dict[str, ForgeError]:
    return {}


@dataclass
class MockGit:
    """Working tree state as plain fields; ``errors`` makes a method fail."""

    branch: str = "main"
    branches: list[str] = field(default_factory=_str_list)
    changed: list[str] = field(default_factory=_str_list)
    tags: list[str] = field(default_factory=_str_list)
    commits: list[str] = field(default_factory=_str_list)
    pushed: list[str] = field(default_factory=_str_list)
    pulled: list[str] = field(default_factory=_str_list)
    deleted: list[str] = field(default_factory=_str_list)
    errors: dict[str, GitError] = field(default_factory=_git_errors)

    def _fail(self, method: str) -> Err[GitError] | None:
        error = self.errors.get(method)
        return Err(error) if error is not None else None

    def current_branch(self) -> Result[str, GitError]:
        return self._fail("current_branch") or Ok(self.branch)

    def validate_branch_name(self, name: str) -> Result[None, GitError]:
        if failed := self._fail("validate_branch_name"):
            return failed
        if ".." in name or " " in name or name.endswith("/"):
            return Err(GitError(f"git check-ref-format --branch {name}", f"invalid branch name: {name}"))
        return Ok(None)

    def pull_latest(self, branch: str) -> Result[None, GitError]:
        if failed := self._fail("pull_latest"):
            return failed
        self.pulled.append(branch)
        return Ok(None)

    def create_and_checkout_branch(self, name: str) -> Result[None, GitError]:
        if failed := self._fail("create_and_checkout_branch"):
            return failed
        if name not in self.branches:
            self.branches.append(name)
        self.branch = name
        return Ok(None)

    def switch_to(self, branch: str) -> Result[None, GitError]:
        if failed := self._fail("switch_to"):
            return failed
        self.branch = branch
        return Ok(None)

    def delete_local_branch(self, name: str, *, force: bool = False) -> Result[None, GitError]:
        if failed := self._fail("delete_local_branch"):
            return failed
        self.deleted.append(name)
        if name in self.branches:
            self.branches.remove(name)
        return Ok(None)

    def list_branches(self) -> Result[list[str], GitError]:
        return self._fail("list_branches") or Ok(list(self.branches))

    def changed_files(self, parent_branch: str) -> Result[list[str], GitError]:
        return self._fail("changed_files") or Ok(list(self.changed))

    def commit_all(self, message: str) -> Result[None, GitError]:
        if failed := self._fail("commit_all"):
            return failed
        self.commits.append(message)
        return Ok(None)

    def push(self, branch: str | None = None) -> Result[None, GitError]:
        if failed := self._fail("push"):
            return failed
        self.pushed.append(branch or self.branch)
        return Ok(None)

    def tags_matching(self, pattern: str) -> Result[list[str], GitError]:
        return self._fail("tags_matching") or Ok(list(self.tags))


@dataclass(frozen=True, slots=True)
class CreatedPullRequest:
    title: str
    body: str
    base_branch: str


@dataclass(frozen=True, slots=True)
class CreatedRelease:
    tag: str
    title: str
    body: str
    prerelease: bool


def _prs() -> list[CreatedPullRequest]:
    return []


def _releases() -> list[CreatedRelease]:
    return []


@dataclass
class MockForge:
    """A GitHub stand-in; ``pr_url`` is the PR of the current branch, if any."""

    pr_url: str | None = None
    status: PrStatus | None = None
    created: list[CreatedPullRequest] = field(default_factory=_prs)
    merged: list[str] = field(default_factory=_str_list)
    releases: list[CreatedRelease] = field(default_factory=_releases)
    errors: dict[str, ForgeError] = field(default_factory=_forge_errors)

    def _fail(self, method: str) -> Err[ForgeError] | None:
        error = self.errors.get(method)
        return Err(error) if error is not None else None

    def ensure_ready(self) -> Result[None, ForgeError]:
        return self._fail("ensure_ready") or Ok(None)

    def pr_exists(self) -> Result[bool, ForgeError]:
        return self._fail("pr_exists") or Ok(self.pr_url is not None)

    def current_pr_url(self) -> Result[str | None, ForgeError]:
        return self._fail("current_pr_url") or Ok(self.pr_url)

    def pr_status(self) -> Result[PrStatus, ForgeError]:
        if failed := self._fail("pr_status"):
            return failed
        if self.status is None:
            return Err(ForgeError(kind="pr_not_found", message="no pull request"))
        return Ok(self.status)

    def create_pull_request(self, title: str, body: str, base_branch: str) -> Result[str, ForgeError]:
        if failed := self._fail("create_pull_request"):
            return failed
        self.created.append(CreatedPullRequest(title, body, base_branch))
        self.pr_url = f"https://github.com/acme/repo/pull/{len(self.created)}"
        return Ok(self.pr_url)

    def merge_pull_request(self, pr_url: str) -> Result[None, ForgeError]:
        if failed := self._fail("merge_pull_request"):
            return failed
        self.merged.append(pr_url)
        return Ok(None)

    def create_release(
        self, tag: str, title: str, body: str, *, prerelease: bool = False
    ) -> Result[str, ForgeError]:
        if failed := self._fail("create_release"):
            return failed
        self.releases.append(CreatedRelease(tag, title, body, prerelease))
        return Ok(f"https://github.com/acme/repo/releases/tag/{tag}")
