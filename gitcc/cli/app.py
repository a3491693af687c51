from __future__ import annotations

import logging
import os
from pathlib import Path

import typer

from gitcc import __version__
from gitcc.cli.commands.changes import abort, discard, stage, unstage
from gitcc.cli.commands.checkout import checkout, commit, detach
from gitcc.cli.commands.manage import branches_app, stashes_app, worktrees_app
from gitcc.cli.commands.remote import fetch, pull, push, sync
from gitcc.cli.commands.status import repos, status
from gitcc.cli.commands.views import history, log, show
from gitcc.cli.commands.watch import watch
from gitcc.core.errors import ErrorCode

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    invoke_without_command=True,
    rich_markup_mode="rich",
)


# Commands
app.command()(status)
app.command()(repos)
app.command()(log)
app.command()(history)
app.command()(show)
app.command()(fetch)
app.command()(pull)
app.command()(push)
app.command()(sync)
app.command()(checkout)
app.command()(detach)
app.command()(commit)
app.command()(stage)
app.command()(unstage)
app.command()(discard)
app.command()(abort)
app.command()(watch)

# Command groups
app.add_typer(branches_app, name="branches")
app.add_typer(stashes_app, name="stashes")
app.add_typer(worktrees_app, name="worktrees")


def configure_logging(verbose: bool) -> None:
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(show_path=verbose, rich_tracebacks=True)],
        force=True,
    )


@app.callback()
def _main(  # pyright: ignore[reportUnusedFunction]
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show version and exit."),
    config: Path | None = typer.Option(
        None,
        "--config",
        help="Config file (overrides $GITCC_CONFIG)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log git invocations and refresh passes."),
) -> None:
    if version:
        typer.echo(__version__)
        raise typer.Exit(code=0)

    configure_logging(verbose)

    if config is not None:
        path = config.expanduser()
        if not path.is_file():
            typer.echo(f"error: --config '{path}' does not exist", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        os.environ["GITCC_CONFIG"] = str(path.resolve())

    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit(code=0)


def main() -> None:
    app()
