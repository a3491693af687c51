"""Read-only listing commands: branches, stashes, worktrees, log, history, show."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.text import Text

from gitcc.cli.commands._helpers import exit_on_git_error
from gitcc.cli.commands.status import render_divergence
from gitcc.cli.context import build_context
from gitcc.git.models import BranchInfo
from gitcc.output.console import ConsoleProtocol
from gitcc.services.views import BranchGroups

_REPO_OPTION = typer.Option(None, "--repo", "-C", help="Repository path (default: cwd)")


def _branch_line(branch: BranchInfo, *, favorite: bool = False) -> Text:
    text = Text("    ")
    text.append("* " if branch.is_current else "  ", style="bold green")
    text.append(branch.short_name, style="bold" if branch.is_current else "")
    if favorite:
        text.append(" [pinned]", style="magenta")
    if branch.upstream:
        text.append(f" -> {branch.upstream}", style="dim")
    divergence = render_divergence(branch.ahead, branch.behind)
    if divergence:
        text.append(" ")
        text.append_text(divergence)
    if branch.stale:
        text.append(" (no upstream)", style="dim")
    return text


def _render_groups(out: ConsoleProtocol, groups: BranchGroups, favorites: set[str]) -> None:
    if groups.favorites:
        out.show(Text("FAVORITES", style="bold"))
        for branch in groups.favorites:
            out.show(_branch_line(branch, favorite=True))
    if groups.recents:
        out.show(Text("RECENT", style="bold"))
        for branch in groups.recents:
            out.show(_branch_line(branch))
    out.show(Text("LOCAL", style="bold"))
    for group, branches in groups.local.items():
        out.show(Text(f"  {group}", style="cyan"))
        for branch in branches:
            out.show(_branch_line(branch, favorite=branch.short_name in favorites))
    if groups.remote:
        out.show(Text("REMOTE", style="bold"))
        for group, branches in groups.remote.items():
            out.show(Text(f"  {group}", style="cyan"))
            for branch in branches:
                out.show(_branch_line(branch))


def branches(
    repo: Path | None = _REPO_OPTION,
    pin: str | None = typer.Option(None, "--pin", help="Pin a branch to favorites"),
    unpin: str | None = typer.Option(None, "--unpin", help="Remove a branch from favorites"),
) -> None:
    """List branches grouped by prefix, with favorites and recents."""
    ctx = build_context()
    active = ctx.active_repository(repo)
    if pin:
        ctx.memory.pin(active.id, pin)
    if unpin:
        ctx.memory.unpin(active.id, unpin)

    found = exit_on_git_error(ctx.service.branches(active.root, active.current_branch), ctx, "Branches")
    favorites = ctx.memory.favorites(active.id)
    groups = BranchGroups.build(
        found,
        favorites=favorites,
        recents=ctx.memory.recents(active.id),
        config=ctx.config,
    )
    _render_groups(ctx.console, groups, set(favorites))


def stashes(repo: Path | None = _REPO_OPTION) -> None:
    """List stash entries."""
    ctx = build_context()
    active = ctx.active_repository(repo)
    entries = exit_on_git_error(ctx.service.stashes(active.root), ctx, "Stashes")
    if not entries:
        ctx.console.info("no stashes")
        return

    for entry in entries:
        line = Text(f"{entry.ref}  ", style="cyan")
        if entry.branch:
            line.append(f"[{entry.branch}] ", style="yellow")
        line.append(entry.message)
        if entry.date:
            line.append(f"  {entry.date}", style="dim")
        ctx.console.show(line)


def worktrees(
    repo: Path | None = _REPO_OPTION,
    prune: bool = typer.Option(False, "--prune", help="Prune stale worktree metadata first"),
) -> None:
    """List linked worktrees."""
    ctx = build_context()
    active = ctx.active_repository(repo)
    if prune:
        exit_on_git_error(ctx.service.prune_worktrees(active.root), ctx, "Prune Worktrees")

    for tree in exit_on_git_error(ctx.service.worktrees(active.root), ctx, "Worktrees"):
        line = Text(tree.path, style="bold")
        line.append(f"  {tree.head[:8]}", style="dim")
        if tree.bare:
            line.append("  (bare)", style="dim")
        elif tree.detached or tree.branch is None:
            line.append("  (detached)", style="yellow")
        else:
            line.append(f"  [{tree.branch}]", style="green")
        if tree.prunable is not None:
            line.append(f"  prunable: {tree.prunable or 'yes'}", style="red")
        ctx.console.show(line)


def log(
    ref: str = typer.Argument("HEAD", help="Revision to start from"),
    limit: int = typer.Option(20, "--limit", "-n", min=1, help="Number of commits"),
    repo: Path | None = _REPO_OPTION,
) -> None:
    """Show a compact commit log."""
    ctx = build_context()
    active = ctx.active_repository(repo)
    entries = exit_on_git_error(ctx.service.mini_log(active.root, ref, limit), ctx, "Log")

    for entry in entries:
        line = Text(entry.short_hash, style="yellow")
        line.append(f"  {entry.subject}")
        line.append(f"  {entry.author}, {entry.relative_date}", style="dim")
        ctx.console.show(line)


def history(
    path: str | None = typer.Argument(None, help="Only commits touching this path"),
    repo: Path | None = _REPO_OPTION,
) -> None:
    """Show the last 100 commits with their refs."""
    ctx = build_context()
    active = ctx.active_repository(repo)
    output = exit_on_git_error(ctx.service.view_log(active.root, path), ctx, "History")
    ctx.console.show(Text(output))


def show(
    commit: str = typer.Argument("HEAD", help="Commit to inspect"),
    repo: Path | None = _REPO_OPTION,
) -> None:
    """Show a commit's message, diffstat and patch."""
    ctx = build_context()
    active = ctx.active_repository(repo)
    output = exit_on_git_error(ctx.service.commit_details(active.root, commit), ctx, "Show Commit")
    ctx.console.show(Text(output))
