"""push-pr command - bump versions, push, open the PR."""

from __future__ import annotations

from cdtools.cli.commands._helpers import exit_on_error
from cdtools.cli.context import build_context
from cdtools.services.push_pr import run_push_pr


def push_pr() -> None:
    """Bump changed projects, commit, push and create the pull request."""
    ctx = build_context()
    exit_on_error(ctx.forge.ensure_ready(), ctx)
    exit_on_error(run_push_pr(ctx.services()), ctx)
