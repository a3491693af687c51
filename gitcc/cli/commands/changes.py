"""Index and working-tree commands: stage, unstage, discard, abort."""

from __future__ import annotations

from pathlib import Path

import typer

from gitcc.cli.commands._helpers import exit_on_git_error
from gitcc.cli.context import build_context
from gitcc.core.errors import ErrorCode

_REPO_OPTION = typer.Option(None, "--repo", "-C", help="Repository path (default: cwd)")


def stage(
    paths: list[str] | None = typer.Argument(None, help="Paths to stage"),
    all_changes: bool = typer.Option(False, "--all", "-A", help="Stage every change"),
    repo: Path | None = _REPO_OPTION,
) -> None:
    """Stage paths; staging a conflicted file marks it resolved."""
    ctx = build_context()
    active = ctx.active_repository(repo)
    if all_changes:
        exit_on_git_error(ctx.service.stage_all(active.root), ctx, "Stage")
    elif paths:
        for path in paths:
            exit_on_git_error(ctx.service.stage(active.root, path), ctx, "Stage")
    else:
        ctx.console.error("nothing to stage: pass paths or --all")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if exit_on_git_error(ctx.service.has_conflicts(active.root), ctx, "Stage"):
        ctx.console.warning("unmerged paths remain")
    else:
        ctx.console.success("Staged.")


def unstage(
    paths: list[str] | None = typer.Argument(None, help="Paths to unstage (default: everything)"),
    repo: Path | None = _REPO_OPTION,
) -> None:
    """Move staged changes back to the working tree."""
    ctx = build_context()
    active = ctx.active_repository(repo)
    if paths:
        for path in paths:
            exit_on_git_error(ctx.service.unstage(active.root, path), ctx, "Unstage")
    else:
        exit_on_git_error(ctx.service.unstage_all(active.root), ctx, "Unstage")
    ctx.console.success("Unstaged.")


def discard(
    paths: list[str] | None = typer.Argument(None, help="Paths to restore"),
    all_changes: bool = typer.Option(False, "--all", help="Restore tracked files and delete untracked ones"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt"),
    repo: Path | None = _REPO_OPTION,
) -> None:
    """Throw away working-tree changes."""
    ctx = build_context()
    active = ctx.active_repository(repo)
    if not all_changes and not paths:
        ctx.console.error("nothing to discard: pass paths or --all")
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    what = "all local changes, including untracked files" if all_changes else ", ".join(paths or [])
    if not (yes or ctx.prompter.confirm(f"Discard {what}? This cannot be undone.")):
        raise typer.Exit(code=int(ErrorCode.CANCELLED))

    if all_changes:
        exit_on_git_error(ctx.service.discard_all(active.root), ctx, "Discard")
    else:
        for path in paths or []:
            exit_on_git_error(ctx.service.discard(active.root, path), ctx, "Discard")
    ctx.console.success("Discarded.")


def abort(repo: Path | None = _REPO_OPTION) -> None:
    """Abort the merge or rebase in progress."""
    ctx = build_context()
    active = ctx.active_repository(repo)
    merging = ctx.service.merge_in_progress(active.root)
    exit_on_git_error(ctx.service.abort_merge_or_rebase(active.root), ctx, "Abort")
    ctx.console.success("Merge aborted." if merging else "Rebase aborted.")
