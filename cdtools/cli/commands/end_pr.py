"""end-pr command - move to the next tag and merge."""

from __future__ import annotations

from cdtools.cli.commands._helpers import exit_on_error
from cdtools.cli.context import build_context
from cdtools.services.end_pr import run_end_pr


def end_pr() -> None:
    """Finalize the release branch and merge its pull request."""
    ctx = build_context()
    exit_on_error(ctx.forge.ensure_ready(), ctx)
    exit_on_error(run_end_pr(ctx.services()), ctx)
