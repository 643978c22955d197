from __future__ import annotations

import os
from pathlib import Path

import typer

from cdtools import __version__
from cdtools.cli.commands.end_pr import end_pr
from cdtools.cli.commands.init import init
from cdtools.cli.commands.push_pr import push_pr
from cdtools.cli.commands.start_pr import start_pr
from cdtools.cli.context import ROOT_ENV
from cdtools.core.errors import ErrorCode

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help="Release PR workflow for multi-project repositories.",
)


# Commands
app.command()(init)
app.command("start-pr")(start_pr)
app.command("push-pr")(push_pr)
app.command("end-pr")(end_pr)


def _show_version(value: bool) -> None:
    # Eager, so it runs even without a subcommand.
    if value:
        typer.echo(__version__)
        raise typer.Exit(code=0)


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    version: bool = typer.Option(
        False, "--version", callback=_show_version, is_eager=True, help="Show version and exit."
    ),
    root: Path | None = typer.Option(
        None,
        "--root",
        envvar=ROOT_ENV,
        help="Repository root holding .cdtools/ (default: current directory)",
    ),
) -> None:
    if root is not None:
        try:
            resolved = root.expanduser().resolve()
        except OSError as e:
            typer.echo(f"error: invalid --root: {e}", err=True)
            raise typer.Exit(code=int(ErrorCode.FAILURE))

        if not resolved.is_dir():
            typer.echo(f"error: --root '{resolved}' is not a directory", err=True)
            raise typer.Exit(code=int(ErrorCode.FAILURE))

        os.environ[ROOT_ENV] = str(resolved)


def main() -> None:
    app()
