from __future__ import annotations

import json
from pathlib import Path

import pytest

from cdtools.core.result import Err, Ok, Result
from cdtools.github import gh as gh_mod
from cdtools.github.forge import GitHub
from cdtools.output.console import MockConsole
from cdtools.platform.process import ProcessError


def _err(*, stderr: str, returncode: int = 1) -> Err[ProcessError]:
    return Err(
        ProcessError(
            command=("gh", "pr", "status"),
            returncode=returncode,
            stdout="",
            stderr=stderr,
        )
    )


def _no_sleep(seconds: float) -> None:
    del seconds


class Recorder:
    def __init__(self, *responses: Result[str, ProcessError]) -> None:
        self.responses = list(responses)
        self.calls: list[list[str]] = []

    def __call__(
        self, cmd: list[str], cwd: Path, env: object = None, *, timeout: float | None = None
    ) -> Result[str, ProcessError]:
        del cwd, env, timeout
        self.calls.append(cmd)
        return self.responses.pop(0) if self.responses else Ok("")


@pytest.fixture(autouse=True)
def _patch_sleep(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(gh_mod, "sleep", _no_sleep)


def test_current_pr_url(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = Recorder(Ok("https://github.com/acme/repo/pull/7\n"))
    monkeypatch.setattr(gh_mod, "run_process", fake)

    result = gh_mod.current_pr_url(workspace_root=tmp_path)
    assert result == Ok("https://github.com/acme/repo/pull/7")
    assert fake.calls[0][:3] == ["gh", "pr", "status"]


def test_current_pr_url_none_when_empty(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(gh_mod, "run_process", Recorder(Ok("\n")))
    assert gh_mod.current_pr_url(workspace_root=tmp_path) == Ok(None)
    monkeypatch.setattr(gh_mod, "run_process", Recorder(Ok("")))
    assert gh_mod.pr_exists(workspace_root=tmp_path) == Ok(False)


def test_read_retries_transient_error(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = Recorder(_err(stderr="HTTP 503 Service Unavailable"), Ok("https://github.com/a/b/pull/1"))
    monkeypatch.setattr(gh_mod, "run_process", fake)

    assert gh_mod.pr_exists(workspace_root=tmp_path) == Ok(True)
    assert len(fake.calls) == 2


def test_read_does_not_retry_permanent_error(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    fake = Recorder(_err(stderr="HTTP 404 Not Found"), Ok("unused"))
    monkeypatch.setattr(gh_mod, "run_process", fake)

    result = gh_mod.current_pr_url(workspace_root=tmp_path)
    assert isinstance(result, Err)
    assert result.error.kind == "pr_not_found"
    assert result.error.command == "gh pr status"
    assert len(fake.calls) == 1


def test_read_gives_up_after_attempts(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = Recorder(*[_err(stderr="connection reset by peer") for _ in range(5)])
    monkeypatch.setattr(gh_mod, "run_process", fake)

    result = gh_mod.current_pr_url(workspace_root=tmp_path)
    assert isinstance(result, Err)
    assert len(fake.calls) == 3


def test_pr_status(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    payload = {
        "state": "OPEN",
        "mergeable": "MERGEABLE",
        "statusCheckRollup": [
            {"__typename": "CheckRun", "name": "test", "status": "COMPLETED", "conclusion": "SUCCESS"},
            {"__typename": "CheckRun", "name": "lint", "status": "IN_PROGRESS", "conclusion": ""},
            {"__typename": "StatusContext", "context": "ci/legacy", "state": "FAILURE"},
        ],
    }
    monkeypatch.setattr(gh_mod, "run_process", Recorder(Ok(json.dumps(payload))))

    result = gh_mod.pr_status(workspace_root=tmp_path)
    assert isinstance(result, Ok)
    status = result.value
    assert status.state == "OPEN"
    assert status.mergeable is True
    assert [(c.name, c.status) for c in status.checks] == [
        ("test", "SUCCESS"),
        ("lint", "IN_PROGRESS"),
        ("ci/legacy", "FAILURE"),
    ]


def test_pr_status_invalid_json(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(gh_mod, "run_process", Recorder(Ok("not json")))
    result = gh_mod.pr_status(workspace_root=tmp_path)
    assert isinstance(result, Err)
    assert result.error.kind == "invalid_response"


def test_create_pull_request_extracts_url(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    out = "Creating pull request for feat/x(alpha) into main\n\nhttps://github.com/acme/repo/pull/12\n"
    fake = Recorder(Ok(out))
    monkeypatch.setattr(gh_mod, "run_process", fake)
    console = MockConsole()

    result = gh_mod.create_pull_request(
        workspace_root=tmp_path,
        title="Release: web(1.0.1-alpha.1)",
        body="Release PR for:",
        base_branch="main",
        console=console,
    )
    assert result == Ok("https://github.com/acme/repo/pull/12")
    assert fake.calls[0] == [
        "gh", "pr", "create",
        "--title", "Release: web(1.0.1-alpha.1)",
        "--body", "Release PR for:",
        "--base", "main",
    ]
    assert console.messages == ["gh pr create ..."]


def test_create_pull_request_failure(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(gh_mod, "run_process", Recorder(_err(stderr="a pull request already exists")))
    result = gh_mod.create_pull_request(
        workspace_root=tmp_path, title="t", body="b", base_branch="main"
    )
    assert isinstance(result, Err)
    assert result.error.kind == "pr_create_failed"
    assert result.error.hint == "a pull request already exists"


def test_merge_command(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = Recorder(Ok(""))
    monkeypatch.setattr(gh_mod, "run_process", fake)

    url = "https://github.com/acme/repo/pull/12"
    assert gh_mod.merge_pull_request(workspace_root=tmp_path, pr_url=url) == Ok(None)
    assert fake.calls[0] == ["gh", "pr", "merge", "--auto", "--delete-branch", "--squash", url]


def test_merge_failure_is_forge_error(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(gh_mod, "run_process", Recorder(_err(stderr="")))
    result = gh_mod.merge_pull_request(workspace_root=tmp_path, pr_url="u")
    assert isinstance(result, Err)
    assert result.error.kind == "pr_merge_failed"
    assert result.error.hint is not None
    assert "auto-merge" in result.error.hint


def test_create_release_prerelease_flag(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    fake = Recorder(Ok("https://github.com/acme/repo/releases/tag/web-1.0.1\n"))
    monkeypatch.setattr(gh_mod, "run_process", fake)

    result = gh_mod.create_release(
        workspace_root=tmp_path, tag="web-1.0.1", title="web-1.0.1", body="notes", prerelease=True
    )
    assert result == Ok("https://github.com/acme/repo/releases/tag/web-1.0.1")
    assert fake.calls[0] == [
        "gh", "release", "create", "web-1.0.1",
        "--title", "web-1.0.1",
        "--notes", "notes",
        "--prerelease",
    ]


def test_ensure_gh_available(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(gh_mod.shutil, "which", lambda name: None)
    result = gh_mod.ensure_gh_available()
    assert isinstance(result, Err)
    assert result.error.kind == "gh_missing"


def test_ensure_gh_auth(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(gh_mod, "run_process", Recorder(_err(stderr="You are not logged in")))
    result = gh_mod.ensure_gh_auth(workspace_root=tmp_path)
    assert isinstance(result, Err)
    assert result.error.kind == "gh_auth_required"
    assert result.error.hint == "Run: gh auth login"


def test_forge_binds_root(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(gh_mod.shutil, "which", lambda name: "/usr/bin/gh")
    fake = Recorder(Ok("Logged in"), Ok("https://github.com/a/b/pull/3"))
    monkeypatch.setattr(gh_mod, "run_process", fake)

    forge = GitHub(tmp_path)
    assert forge.ensure_ready() == Ok(None)
    assert forge.current_pr_url() == Ok("https://github.com/a/b/pull/3")
    assert fake.calls[0] == ["gh", "auth", "status"]
