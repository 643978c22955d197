from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import cast

from cdtools.core.result import Err, Ok, Result
from cdtools.manifest.updater import update_project_versions
from cdtools.output.console import Style
from cdtools.services.common import BranchState, format_entries, require_branch_state
from cdtools.services.context import ServiceContext
from cdtools.services.errors import CommandError
from cdtools.state.model import Config, merge_project_updated
from cdtools.state.store import update_branch_info
from cdtools.version.manager import VersionManager
from cdtools.version.planner import (
    DEFAULT_BUMP_POLICY,
    BumpChoice,
    BumpPolicy,
    calculate_new_versions,
    classify_changes,
    determine_projects_to_update,
    fixed_bump_selections,
    resolve_bump_selections,
)
from cdtools.version.semver import BumpLevel

# ':' cannot appear in a git ref, so it never collides with a branch name.
_NEW_BRANCH = ":new"
_AUTO = "auto"

_LEVEL_OPTIONS: list[tuple[str, str]] = [
    ("patch", "patch (1.0.0 -> 1.0.1)"),
    ("minor", "minor (1.0.0 -> 1.1.0)"),
    ("major", "major (1.0.0 -> 2.0.0)"),
]


@dataclass(frozen=True, slots=True)
class PushOutcome:
    versions: dict[str, str]
    pr_url: str | None = None
    pr_created: bool = False


def pr_title(versions: Mapping[str, str]) -> str:
    return f"Release: {format_entries(dict(versions))}"


def pr_body(config: Config, versions: Mapping[str, str]) -> str:
    lines = ["Release PR for:", ""]
    lines.extend(f"- {path}: {version}" for path, version in versions.items())

    registries: list[str] = []
    for path in versions:
        project = config.project(path)
        if project is None:
            continue
        for registry in project.registries:
            if registry not in registries:
                registries.append(registry)
    if registries:
        lines.extend(["", f"Registries: {', '.join(registries)}"])
    return "\n".join(lines)


def _select_bumps(
    ctx: ServiceContext,
    config: Config,
    changed_files: list[str],
    policy: BumpPolicy,
) -> dict[str, BumpLevel] | None:
    if config.versioning_strategy == "fixed":
        level = ctx.prompt.choose("Version bump for all projects", _LEVEL_OPTIONS, default="patch")
        if level is None:
            return None
        return fixed_bump_selections(config, cast(BumpLevel, level))

    kinds = classify_changes(config, changed_files)
    dependency_only = {path for path, kind in kinds.items() if kind == "dependency"}

    choices: dict[str, BumpChoice | None] = {}
    for project in config.projects:
        options: list[tuple[str, str]] = [("skip", "skip (no changes)"), *_LEVEL_OPTIONS]
        default = "skip"
        if policy.auto_patch_dependency_only and project.path in dependency_only:
            options.insert(0, (_AUTO, "auto (patch, dependency changes only)"))
            default = _AUTO

        picked = ctx.prompt.choose(f"Version bump for '{project.path}'", options, default=default)
        if picked is None:
            return None
        choices[project.path] = None if picked == _AUTO else cast(BumpChoice, picked)

    return resolve_bump_selections(config, choices, dependency_only=dependency_only, policy=policy)


def _choose_base_branch(ctx: ServiceContext, state: BranchState) -> str | None:
    parent = state.info.parent_branch
    options: list[tuple[str, str]] = [(parent, f"{parent} (parent branch)")]

    branches = ctx.git.list_branches()
    if isinstance(branches, Ok):
        options.extend((b, b) for b in branches.value if b not in (parent, state.branch))
    else:
        ctx.console.warning(f"could not list branches: {branches.error.message}")
    options.append((_NEW_BRANCH, "enter another branch name"))

    picked = ctx.prompt.choose("Base branch for the pull request", options, default=parent)
    if picked != _NEW_BRANCH:
        return picked

    typed = ctx.prompt.text("Base branch name")
    typed = typed.strip() if typed is not None else ""
    return typed or None


def run_push_pr(
    ctx: ServiceContext, *, policy: BumpPolicy = DEFAULT_BUMP_POLICY
) -> Result[PushOutcome, CommandError]:
    """Bump versions of affected projects, commit, push and open the PR."""
    console = ctx.console
    console.header("Updating versions")

    state_r = require_branch_state(ctx)
    if isinstance(state_r, Err):
        return state_r
    state = state_r.value
    config = state.config

    console.print(f"branch: {state.branch}", Style.DIM)
    console.print(f"tag: {state.info.tag}", Style.DIM)
    console.print(f"parent branch: {state.info.parent_branch}", Style.DIM)

    changed = ctx.git.changed_files(state.info.parent_branch)
    if isinstance(changed, Err):
        return Err(CommandError.from_git(changed.error))

    selections = _select_bumps(ctx, config, changed.value, policy)
    if selections is None:
        return Err(CommandError("Operation cancelled"))

    manager = VersionManager(config, ctx.git.tags_matching, now=ctx.now, console=console)
    new_versions = calculate_new_versions(manager, state.info, selections)

    to_update = determine_projects_to_update(config, changed.value, new_versions)
    versions = {path: new_versions[path] for path in to_update if path in new_versions}
    if not versions:
        console.info("No projects need version updates")
        return Ok(PushOutcome(versions={}))

    console.newline()
    for path, version in versions.items():
        console.print(f"  {path}: {version}")

    written = update_project_versions(ctx.root, config.projects, versions)
    if isinstance(written, Err):
        return Err(CommandError.from_manifest(written.error))

    ledger = merge_project_updated(state.info.project_updated, versions, ctx.clock())
    updated = update_branch_info(ctx.root, state.branch, ledger)
    if isinstance(updated, Err):
        return Err(CommandError.from_state(updated.error))

    committed = ctx.git.commit_all(f"commit for {format_entries(versions)}")
    if isinstance(committed, Err):
        return Err(CommandError.from_git(committed.error))

    pushed = ctx.git.push(state.branch)
    if isinstance(pushed, Err):
        return Err(CommandError.from_git(pushed.error))

    exists = ctx.forge.pr_exists()
    if isinstance(exists, Err):
        return Err(CommandError.from_forge(exists.error))
    if exists.value:
        console.info("Pull request already exists, updated with new commits")
        return Ok(PushOutcome(versions=versions))

    base = _choose_base_branch(ctx, state)
    if base is None:
        return Err(CommandError("No base branch selected", hint="Run: gh pr create"))

    url = ctx.forge.create_pull_request(pr_title(versions), pr_body(config, versions), base)
    if isinstance(url, Err):
        return Err(CommandError.from_forge(url.error))

    console.success(f"pull request created: {url.value}")
    return Ok(PushOutcome(versions=versions, pr_url=url.value, pr_created=True))
