from __future__ import annotations

from cdtools.core.result import Err, Ok, Result
from cdtools.output.console import Style
from cdtools.services.common import require_config
from cdtools.services.context import ServiceContext
from cdtools.services.errors import CommandError
from cdtools.state.model import ReleaseBranch, available_tags, is_stable
from cdtools.state.store import create_branch_info

DEFAULT_BRANCH_SLUG = "feat/release"


def run_start_pr(ctx: ServiceContext) -> Result[ReleaseBranch, CommandError]:
    """Create and check out ``<slug>(<tag>)`` with a fresh branch ledger."""
    console = ctx.console
    console.header("Starting release PR")

    config = require_config(ctx)
    if isinstance(config, Err):
        return config

    parent = ctx.git.current_branch()
    if isinstance(parent, Err):
        return Err(CommandError.from_git(parent.error))
    parent_branch = parent.value
    console.print(f"parent branch: {parent_branch}", Style.DIM)

    pulled = ctx.git.pull_latest(parent_branch)
    if isinstance(pulled, Err):
        return Err(CommandError.from_git(pulled.error))

    options = [
        (tag, f"{tag} (final release)" if is_stable(tag) else tag)
        for tag in available_tags(config.value)
    ]
    tag = ctx.prompt.choose("Release tag", options)
    if tag is None:
        return Err(CommandError("Operation cancelled"))

    slug = ctx.prompt.text("Branch name", default=DEFAULT_BRANCH_SLUG)
    slug = slug.strip() if slug is not None else ""
    if not slug:
        return Err(CommandError("Branch name must not be empty"))

    branch = ReleaseBranch(slug=slug, tag=tag)

    valid = ctx.git.validate_branch_name(branch.full_name)
    if isinstance(valid, Err):
        return Err(CommandError.from_git(valid.error))

    created = ctx.git.create_and_checkout_branch(branch.full_name)
    if isinstance(created, Err):
        return Err(CommandError.from_git(created.error))

    info = create_branch_info(ctx.root, branch, parent_branch)
    if isinstance(info, Err):
        return Err(CommandError.from_state(info.error))

    console.success(f"created branch {branch.full_name}")
    console.print("next: commit your changes, then run cd-tools push-pr", Style.DIM)
    return Ok(branch)
