"""Preconditions shared by the release commands."""

from __future__ import annotations

from dataclasses import dataclass

from cdtools.core.result import Err, Ok, Result
from cdtools.services.context import ServiceContext
from cdtools.services.errors import NO_BRANCH_INFO_HINT, NOT_INITIALIZED, CommandError
from cdtools.state.model import BranchInfo, Config
from cdtools.state.store import NotFoundError, is_initialized, load_branch_info, load_config


@dataclass(frozen=True, slots=True)
class BranchState:
    config: Config
    branch: str
    info: BranchInfo


def format_entries(versions: dict[str, str]) -> str:
    """``a(1.0.1), b(2.0.0)``"""
    return ", ".join(f"{path}({version})" for path, version in versions.items())


def require_config(ctx: ServiceContext) -> Result[Config, CommandError]:
    if not is_initialized(ctx.root):
        return Err(NOT_INITIALIZED)
    loaded = load_config(ctx.root)
    if isinstance(loaded, Err):
        return Err(
            CommandError.from_state(loaded.error, hint="Fix .cdtools/config.json or run: cd-tools init")
        )
    return loaded


def require_branch_state(ctx: ServiceContext) -> Result[BranchState, CommandError]:
    """Config, current branch and its ledger; fails before any side effect."""
    config = require_config(ctx)
    if isinstance(config, Err):
        return config

    branch = ctx.git.current_branch()
    if isinstance(branch, Err):
        return Err(CommandError.from_git(branch.error))

    info = load_branch_info(ctx.root, branch.value)
    if isinstance(info, Err):
        hint = NO_BRANCH_INFO_HINT if isinstance(info.error, NotFoundError) else None
        return Err(CommandError.from_state(info.error, hint=hint))

    return Ok(BranchState(config=config.value, branch=branch.value, info=info.value))
