"""Commands that talk to the remote: fetch, pull, push, sync."""

from __future__ import annotations

from pathlib import Path

import typer

from gitcc.cli.commands._helpers import exit_on_git_error, handle_failure
from gitcc.cli.context import build_context
from gitcc.core.errors import ErrorCode
from gitcc.core.result import Err
from gitcc.workflows.commit import force_push_with_lease
from gitcc.workflows.errors import WorkflowFailure
from gitcc.workflows.sync import SyncWorkflow

_REPO_OPTION = typer.Option(None, "--repo", "-C", help="Repository path (default: cwd)")


def fetch(
    repo: Path | None = _REPO_OPTION,
    remote: str | None = typer.Option(None, "--remote", help="Remote (default: config default_remote)"),
    prune: bool = typer.Option(True, "--prune/--no-prune", help="Prune stale remote-tracking refs"),
) -> None:
    """Fetch from a remote."""
    ctx = build_context()
    active = ctx.active_repository(repo)
    target = remote or ctx.config.default_remote
    exit_on_git_error(ctx.service.fetch(active.root, target, prune=prune), ctx, "Fetch")
    ctx.console.success(f"Fetched {target}.")


def pull(
    repo: Path | None = _REPO_OPTION,
    rebase: bool | None = typer.Option(None, "--rebase/--merge", help="Override config pull_rebase"),
) -> None:
    """Pull the current branch."""
    ctx = build_context()
    active = ctx.active_repository(repo)
    use_rebase = ctx.config.pull_rebase if rebase is None else rebase
    result = ctx.service.pull(active.root, rebase=use_rebase, remote=ctx.config.default_remote)
    if isinstance(result, Err):
        handle_failure(WorkflowFailure.from_git_error("Pull", result.error), ctx, active.root)
    ctx.console.success("Pull complete.")


def push(
    repo: Path | None = _REPO_OPTION,
    force_with_lease: bool = typer.Option(False, "--force-with-lease", help="Overwrite remote history safely"),
) -> None:
    """Push the current branch; on rejection offer recovery actions."""
    ctx = build_context()
    active = ctx.active_repository(repo)

    if force_with_lease:
        forced = force_push_with_lease(ctx.workflow(), active.root)
        if isinstance(forced, Err):
            handle_failure(forced.error, ctx, active.root)
        if not forced.value:
            raise typer.Exit(code=int(ErrorCode.CANCELLED))
        return

    result = ctx.service.push(active.root, ctx.config.default_remote)
    if isinstance(result, Err):
        handle_failure(WorkflowFailure.from_git_error("Push", result.error), ctx, active.root)
    ctx.console.success("Push complete.")


def sync(repo: Path | None = _REPO_OPTION) -> None:
    """Fetch, reconcile with upstream, and push if ahead."""
    ctx = build_context()
    active = ctx.active_repository(repo)

    result = SyncWorkflow(ctx.workflow()).run(active.root)
    if isinstance(result, Err):
        handle_failure(result.error, ctx, active.root)
    if not result.value.completed:
        raise typer.Exit(code=int(ErrorCode.CANCELLED))
