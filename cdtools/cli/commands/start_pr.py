"""start-pr command - open a release branch."""

from __future__ import annotations

from cdtools.cli.commands._helpers import exit_on_error
from cdtools.cli.context import build_context
from cdtools.services.start_pr import run_start_pr


def start_pr() -> None:
    """Create a <name>(<tag>) release branch from the current branch."""
    ctx = build_context()
    exit_on_error(run_start_pr(ctx.services()), ctx)
