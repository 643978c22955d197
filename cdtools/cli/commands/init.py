"""init command - write a default release configuration."""

from __future__ import annotations

from cdtools.cli.commands._helpers import exit_on_error
from cdtools.cli.context import build_context
from cdtools.services.init import run_init


def init() -> None:
    """Create .cdtools/config.json for this repository."""
    ctx = build_context()
    exit_on_error(run_init(ctx.services()), ctx)
