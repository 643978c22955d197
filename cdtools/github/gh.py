from __future__ import annotations

import json
import re
import shutil
from dataclasses import dataclass
from pathlib import Path
from time import sleep
from typing import TYPE_CHECKING, Literal

from cdtools.core.result import Err, Ok, Result
from cdtools.core.structured import as_obj_list, as_str_dict, get_str
from cdtools.output.console import Style
from cdtools.platform.process import ProcessError
from cdtools.platform.process import run as run_process
from cdtools.platform.timeouts import (
    GH_READ_RETRY_ATTEMPTS,
    GH_READ_RETRY_DELAY_SECONDS,
    GH_TIMEOUT_SECONDS,
)

if TYPE_CHECKING:
    from cdtools.output.console import ConsoleProtocol

ForgeErrorKind = Literal[
    "gh_missing",
    "gh_auth_required",
    "pr_not_found",
    "pr_create_failed",
    "pr_merge_failed",
    "release_failed",
    "invalid_response",
]

_URL_RE = re.compile(r"https://github\.com/\S+")


@dataclass(frozen=True, slots=True)
class ForgeError:
    """A failed GitHub operation; distinct from git errors so callers can degrade."""

    kind: ForgeErrorKind
    message: str
    hint: str | None = None
    command: str | None = None


@dataclass(frozen=True, slots=True)
class PrCheck:
    name: str
    status: str


@dataclass(frozen=True, slots=True)
class PrStatus:
    state: str
    mergeable: bool
    checks: tuple[PrCheck, ...]


def _is_transient_gh_error(error: ProcessError) -> bool:
    text = f"{error.stderr}\n{error.stdout}".lower()
    markers = (
        "timed out",
        "timeout",
        "connection reset",
        "connection refused",
        "temporarily unavailable",
        "service unavailable",
        "bad gateway",
        "gateway timeout",
        "http 429",
        "http 502",
        "http 503",
        "http 504",
    )
    return any(marker in text for marker in markers)


def _forge_error(
    kind: ForgeErrorKind, message: str, error: ProcessError, hint: str | None = None
) -> ForgeError:
    return ForgeError(
        kind=kind,
        message=message,
        hint=error.stderr.strip() or hint,
        command=error.command_line,
    )


def run_gh_read(
    *,
    workspace_root: Path,
    cmd: list[str],
    kind: ForgeErrorKind,
    message: str,
    hint: str | None = None,
    retry_attempts: int = GH_READ_RETRY_ATTEMPTS,
) -> Result[str, ForgeError]:
    """Run a read-only gh command, retrying transient network failures."""
    attempts = max(1, retry_attempts)
    for attempt in range(attempts):
        result = run_process(cmd, cwd=workspace_root, timeout=GH_TIMEOUT_SECONDS)
        if isinstance(result, Ok):
            return result

        error = result.error
        if attempt < attempts - 1 and _is_transient_gh_error(error):
            sleep(GH_READ_RETRY_DELAY_SECONDS * (attempt + 1))
            continue

        return Err(_forge_error(kind, message, error, hint))

    return Err(ForgeError(kind=kind, message=message, hint=hint))


def _echo(console: ConsoleProtocol | None, cmd: list[str]) -> None:
    if console is not None:
        console.print(" ".join(cmd[:3]) + " ...", Style.DIM)


def ensure_gh_available() -> Result[None, ForgeError]:
    if shutil.which("gh") is None:
        return Err(
            ForgeError(
                kind="gh_missing",
                message="gh: missing",
                hint="Install GitHub CLI: https://cli.github.com/",
            )
        )
    return Ok(None)


def ensure_gh_auth(*, workspace_root: Path) -> Result[None, ForgeError]:
    result = run_process(["gh", "auth", "status"], cwd=workspace_root, timeout=GH_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(
            ForgeError(
                kind="gh_auth_required",
                message="gh auth required",
                hint="Run: gh auth login",
                command="gh auth status",
            )
        )
    return Ok(None)


def current_pr_url(*, workspace_root: Path) -> Result[str | None, ForgeError]:
    """URL of the open PR for the current branch, or None when there is none."""
    result = run_gh_read(
        workspace_root=workspace_root,
        cmd=["gh", "pr", "status", "--json", "url", "--jq", ".currentBranch.url"],
        kind="pr_not_found",
        message="failed to look up the pull request for the current branch",
        hint="Run `gh auth status` to check that you are logged in",
    )
    if isinstance(result, Err):
        return result
    url = result.value.strip()
    return Ok(url or None)


def pr_exists(*, workspace_root: Path) -> Result[bool, ForgeError]:
    return current_pr_url(workspace_root=workspace_root).map(lambda url: url is not None)


def pr_status(*, workspace_root: Path) -> Result[PrStatus, ForgeError]:
    """State, mergeability and check results of the current branch's PR."""
    result = run_gh_read(
        workspace_root=workspace_root,
        cmd=["gh", "pr", "view", "--json", "state,mergeable,statusCheckRollup"],
        kind="pr_not_found",
        message="failed to get pull request status",
    )
    if isinstance(result, Err):
        return result

    try:
        obj: object = json.loads(result.value)
    except json.JSONDecodeError as e:
        return Err(ForgeError(kind="invalid_response", message=f"invalid JSON from gh pr view: {e}"))

    data = as_str_dict(obj)
    if data is None:
        return Err(ForgeError(kind="invalid_response", message="unexpected gh pr view payload"))

    checks: list[PrCheck] = []
    for item in as_obj_list(data.get("statusCheckRollup")) or []:
        check = as_str_dict(item)
        if check is None:
            continue
        # CheckRun has name/status/conclusion; StatusContext has context/state.
        name = get_str(check, "name") or get_str(check, "context") or "?"
        status = get_str(check, "conclusion") or get_str(check, "state") or get_str(check, "status")
        checks.append(PrCheck(name=name, status=status or "PENDING"))

    return Ok(
        PrStatus(
            state=get_str(data, "state") or "UNKNOWN",
            mergeable=get_str(data, "mergeable") == "MERGEABLE",
            checks=tuple(checks),
        )
    )


def create_pull_request(
    *,
    workspace_root: Path,
    title: str,
    body: str,
    base_branch: str,
    console: ConsoleProtocol | None = None,
) -> Result[str, ForgeError]:
    """Open a PR from the current branch; returns its URL."""
    cmd = ["gh", "pr", "create", "--title", title, "--body", body, "--base", base_branch]
    _echo(console, cmd)

    result = run_process(cmd, cwd=workspace_root, timeout=GH_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(
            _forge_error(
                "pr_create_failed",
                "failed to create pull request",
                result.error,
                hint="Run `gh auth status` to check that you are logged in",
            )
        )

    m = _URL_RE.search(result.value)
    return Ok(m.group(0) if m else result.value.strip())


def merge_pull_request(
    *,
    workspace_root: Path,
    pr_url: str,
    console: ConsoleProtocol | None = None,
) -> Result[None, ForgeError]:
    """Squash-merge with auto-merge enabled, deleting the remote branch."""
    cmd = ["gh", "pr", "merge", "--auto", "--delete-branch", "--squash", pr_url]
    _echo(console, cmd)

    result = run_process(cmd, cwd=workspace_root, timeout=GH_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(
            _forge_error(
                "pr_merge_failed",
                "failed to merge pull request",
                result.error,
                hint='Enable "Allow auto-merge" and "Allow squash merging" in the repository settings',
            )
        )
    return Ok(None)


def create_release(
    *,
    workspace_root: Path,
    tag: str,
    title: str,
    body: str,
    prerelease: bool = False,
    console: ConsoleProtocol | None = None,
) -> Result[str, ForgeError]:
    """Create a GitHub release (and its tag); returns the release URL."""
    cmd = ["gh", "release", "create", tag, "--title", title, "--notes", body]
    if prerelease:
        cmd.append("--prerelease")
    _echo(console, cmd)

    result = run_process(cmd, cwd=workspace_root, timeout=GH_TIMEOUT_SECONDS)
    if isinstance(result, Err):
        return Err(_forge_error("release_failed", f"failed to create release {tag}", result.error))

    m = _URL_RE.search(result.value)
    return Ok(m.group(0) if m else result.value.strip())
