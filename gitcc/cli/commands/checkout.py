"""Branch switching, detached checkout and commit commands."""

from __future__ import annotations

from pathlib import Path

import typer

from gitcc.cli.commands._helpers import exit_on_git_error, handle_failure
from gitcc.cli.context import build_context
from gitcc.core.errors import ErrorCode
from gitcc.core.result import Err
from gitcc.git.models import CommitOptions
from gitcc.output.prompt import PromptOption
from gitcc.workflows.checkout import CONFLICTS_MESSAGE, SmartCheckoutWorkflow
from gitcc.workflows.commit import CommitWorkflow

_REPO_OPTION = typer.Option(None, "--repo", "-C", help="Repository path (default: cwd)")


def checkout(
    branch: str | None = typer.Argument(None, help="Target branch (prompted when omitted)"),
    repo: Path | None = _REPO_OPTION,
) -> None:
    """Switch branches, stashing local changes when needed."""
    ctx = build_context()
    active = ctx.active_repository(repo)

    target = branch
    if target is None:
        found = exit_on_git_error(ctx.service.branches(active.root, active.current_branch), ctx, "Checkout")
        recents = ctx.memory.recents(active.id)
        local = sorted(
            (b for b in found if b.kind == "local" and not b.is_current),
            key=lambda b: (recents.index(b.short_name) if b.short_name in recents else len(recents), b.short_name),
        )
        target = ctx.prompter.choose(
            "Smart checkout target branch",
            [PromptOption(value=b.short_name, label=b.short_name) for b in local],
        )
        if target is None:
            raise typer.Exit(code=int(ErrorCode.CANCELLED))

    result = SmartCheckoutWorkflow(ctx.workflow()).run(active.root, target)
    if isinstance(result, Err):
        handle_failure(result.error, ctx, active.root)
    if result.value.result != "switched":
        raise typer.Exit(code=int(ErrorCode.CANCELLED))


def commit(
    message: str | None = typer.Option(None, "--message", "-m", help="Commit message"),
    stage_all: bool = typer.Option(False, "--all", "-a", help="Stage all changes first"),
    amend: bool = typer.Option(False, "--amend", help="Amend the previous commit"),
    signoff: bool = typer.Option(False, "--signoff", "-s", help="Add Signed-off-by"),
    sign: bool = typer.Option(False, "--gpg-sign", "-S", help="GPG-sign the commit"),
    no_verify: bool = typer.Option(False, "--no-verify", help="Skip commit hooks"),
    push_after: bool = typer.Option(False, "--push", help="Push after committing"),
    sync_after: bool = typer.Option(False, "--sync", help="Sync after committing"),
    repo: Path | None = _REPO_OPTION,
) -> None:
    """Commit staged changes, then optionally push or sync."""
    ctx = build_context()
    active = ctx.active_repository(repo)

    text = message
    if text is None:
        text = typer.prompt("Commit message", default=ctx.config.commit_template or "", show_default=False)

    if stage_all:
        exit_on_git_error(ctx.service.stage_all(active.root), ctx, "Commit")

    options = CommitOptions(
        amend=amend,
        signoff=signoff,
        sign=sign,
        no_verify=no_verify,
        push_after=push_after,
        sync_after=sync_after,
    )
    result = CommitWorkflow(ctx.workflow()).run(active.root, text, options)
    if isinstance(result, Err):
        handle_failure(result.error, ctx, active.root)


def detach(
    commit: str = typer.Argument(..., help="Commit to check out"),
    repo: Path | None = _REPO_OPTION,
) -> None:
    """Check out a commit with a detached HEAD."""
    ctx = build_context()
    active = ctx.active_repository(repo)
    if exit_on_git_error(ctx.service.has_conflicts(active.root), ctx, "Detach"):
        ctx.console.error(CONFLICTS_MESSAGE)
        raise typer.Exit(code=int(ErrorCode.PRECONDITION))
    exit_on_git_error(ctx.service.checkout_commit(active.root, commit), ctx, "Detach")
    ctx.console.success(f"HEAD is now at {commit}.")
