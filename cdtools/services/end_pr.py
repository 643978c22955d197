from __future__ import annotations

from dataclasses import dataclass

from cdtools.core.result import Err, Ok, Result
from cdtools.github.gh import PrStatus
from cdtools.manifest.updater import update_project_versions
from cdtools.output.console import Style
from cdtools.services.common import BranchState, format_entries, require_branch_state
from cdtools.services.context import ServiceContext
from cdtools.services.errors import CommandError
from cdtools.state.model import Config, is_stable
from cdtools.state.store import delete_branch_info, save_config
from cdtools.version.manager import VersionManager
from cdtools.version.planner import calculate_transition_versions


@dataclass(frozen=True, slots=True)
class ReleaseTarget:
    tag: str
    title: str
    body: str


@dataclass(frozen=True, slots=True)
class EndOutcome:
    pr_url: str
    next_tag: str | None
    versions: dict[str, str]
    releases: tuple[str, ...] = ()


def render_release_notes(template: str, *, project: str, version: str) -> str:
    return template.replace("{project}", project).replace("{version}", version)


def release_targets(config: Config, versions: dict[str, str]) -> list[ReleaseTarget]:
    """GitHub releases to create for versions that just became stable.

    Fixed strategy: one release tagged with the first project's version. The
    body names every project with its own version, one line each, unless
    they all share that version. Independent: one per project tagged
    ``<project-name>-<version>``.
    """
    notes = config.release_notes
    if notes is None or not notes.enabled or not versions:
        return []

    if config.versioning_strategy == "fixed":
        version = next(iter(versions.values()))
        if len(set(versions.values())) == 1:
            body = render_release_notes(notes.template, project=", ".join(versions), version=version)
        else:
            body = "\n".join(
                render_release_notes(notes.template, project=path, version=v) for path, v in versions.items()
            )
        return [ReleaseTarget(tag=version, title=version, body=body)]

    targets: list[ReleaseTarget] = []
    for path, version in versions.items():
        project = config.project(path)
        name = project.name if project is not None else path
        tag = f"{name}-{version}"
        body = render_release_notes(notes.template, project=name, version=version)
        targets.append(ReleaseTarget(tag=tag, title=tag, body=body))
    return targets


def _show_status(ctx: ServiceContext, status: PrStatus) -> None:
    console = ctx.console
    console.print(f"state: {status.state}", Style.DIM)
    console.print(f"mergeable: {'yes' if status.mergeable else 'no'}", Style.DIM)
    for check in status.checks:
        console.print(f"  {check.name}: {check.status}", Style.DIM)


def _commit_and_push(ctx: ServiceContext, state: BranchState, message: str) -> Result[None, CommandError]:
    committed = ctx.git.commit_all(message)
    if isinstance(committed, Err):
        return Err(CommandError.from_git(committed.error))
    pushed = ctx.git.push(state.branch)
    if isinstance(pushed, Err):
        return Err(CommandError.from_git(pushed.error))
    return Ok(None)


def _save_base_versions(
    ctx: ServiceContext, state: BranchState, versions: dict[str, str]
) -> Result[None, CommandError]:
    saved = save_config(ctx.root, state.config.with_base_versions(versions))
    if isinstance(saved, Err):
        return Err(CommandError.from_state(saved.error))
    return Ok(None)


def _transition(
    ctx: ServiceContext, state: BranchState, manager: VersionManager, next_tag: str
) -> Result[dict[str, str], CommandError]:
    """Move every bumped project to ``next_tag`` and commit the result.

    The branch ledger is not rewritten: cleanup deletes it right after.
    """
    versions = calculate_transition_versions(manager, state.info)
    if not versions:
        ctx.console.info("No project versions recorded on this branch; nothing to transition")
        return Ok({})

    written = update_project_versions(ctx.root, state.config.projects, versions)
    if isinstance(written, Err):
        return Err(CommandError.from_manifest(written.error))

    if is_stable(next_tag):
        saved = _save_base_versions(ctx, state, versions)
        if isinstance(saved, Err):
            return saved

    done = _commit_and_push(ctx, state, f"prepare next release: {format_entries(versions)}")
    if isinstance(done, Err):
        return done

    for path, version in versions.items():
        ctx.console.print(f"  {path}: {version}")
    return Ok(versions)


def _finalize_stable(ctx: ServiceContext, state: BranchState) -> Result[dict[str, str], CommandError]:
    """Record the versions pushed on a ``stable`` branch as the new base versions.

    Manifests already carry these versions; only the config changes.
    """
    ledger = state.info.project_updated or {}
    versions = {path: entry.version for path, entry in ledger.items()}
    if not versions:
        ctx.console.info("No project versions recorded on this branch; nothing to release")
        return Ok({})

    saved = _save_base_versions(ctx, state, versions)
    if isinstance(saved, Err):
        return saved

    done = _commit_and_push(ctx, state, f"record stable versions: {format_entries(versions)}")
    if isinstance(done, Err):
        return done

    for path, version in versions.items():
        ctx.console.print(f"  {path}: {version}")
    return Ok(versions)


def _cleanup(ctx: ServiceContext, state: BranchState) -> Result[None, CommandError]:
    deleted = delete_branch_info(ctx.root, state.branch)
    if isinstance(deleted, Err):
        return Err(CommandError.from_state(deleted.error))
    return _commit_and_push(ctx, state, "cleanup: remove branch info file")

def run_end_pr(ctx: ServiceContext) -> Result[EndOutcome | None, CommandError]:
    """Finalize the release branch and merge its PR.

    Returns Ok(None) when the user declines the merge; nothing is changed
    in that case.
    """
    console = ctx.console
    console.header("Finalizing release PR")

    state_r = require_branch_state(ctx)
    if isinstance(state_r, Err):
        return state_r
    state = state_r.value

    url_r = ctx.forge.current_pr_url()
    if isinstance(url_r, Err):
        return Err(CommandError.from_forge(url_r.error))
    pr_url = url_r.value
    if pr_url is None:
        return Err(
            CommandError(
                f"no pull request found for branch {state.branch}",
                hint="Run: cd-tools push-pr",
            )
        )
    console.print(f"pull request: {pr_url}", Style.DIM)

    status = ctx.forge.pr_status()
    if isinstance(status, Err):
        console.warning(f"could not get pull request status: {status.error.message}")
    else:
        _show_status(ctx, status.value)

    if not ctx.prompt.confirm(f"Finalize and merge {pr_url}?"):
        console.print("Merge cancelled.", Style.DIM)
        return Ok(None)

    manager = VersionManager(state.config, ctx.git.tags_matching, now=ctx.now, console=console)
    next_tag = manager.next_tag(state.info.tag)

    # A branch started on stable has no next tag; its pushed versions are final.
    reached = next_tag if next_tag is not None else state.info.tag
    moved: Result[dict[str, str], CommandError]
    if next_tag is not None:
        console.info(f"transition {state.info.tag} -> {next_tag}")
        moved = _transition(ctx, state, manager, next_tag)
    elif is_stable(reached):
        moved = _finalize_stable(ctx, state)
    else:
        moved = Ok({})
    if isinstance(moved, Err):
        return moved
    versions = moved.value

    cleaned = _cleanup(ctx, state)
    if isinstance(cleaned, Err):
        return cleaned

    merged = ctx.forge.merge_pull_request(pr_url)
    if isinstance(merged, Err):
        return Err(
            CommandError.from_forge(
                merged.error,
                hint=f"Merge manually: gh pr merge --squash {pr_url}",
            )
        )
    console.success(f"merge requested: {pr_url}")

    releases: list[str] = []
    if is_stable(reached):
        for target in release_targets(state.config, versions):
            created = ctx.forge.create_release(target.tag, target.title, target.body)
            if isinstance(created, Err):
                console.warning(f"release {target.tag} not created: {created.error.message}")
                continue
            releases.append(created.value)
            console.success(f"release created: {created.value}")

    parent = state.info.parent_branch
    if ctx.prompt.confirm(f"Switch to {parent} and delete local branch {state.branch}?", default=True):
        switched = ctx.git.switch_to(parent)
        if isinstance(switched, Err):
            return Err(CommandError.from_git(switched.error))
        deleted = ctx.git.delete_local_branch(state.branch, force=True)
        if isinstance(deleted, Err):
            return Err(CommandError.from_git(deleted.error))

    return Ok(EndOutcome(pr_url=pr_url, next_tag=next_tag, versions=versions, releases=tuple(releases)))
