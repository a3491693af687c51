"""Branch, stash and worktree management sub-commands.

Each group lists its items when invoked bare (``gitcc branches``) and
exposes mutations as sub-commands (``gitcc branches create dev``).
"""

from __future__ import annotations

from pathlib import Path

import typer
from rich.text import Text

from gitcc.cli.commands import views
from gitcc.cli.commands._helpers import exit_on_git_error
from gitcc.cli.context import build_context
from gitcc.core.errors import ErrorCode

_REPO_OPTION = typer.Option(None, "--repo", "-C", help="Repository path (default: cwd)")
_YES_OPTION = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt")

branches_app = typer.Typer(add_completion=False, no_args_is_help=False, rich_markup_mode="rich")
stashes_app = typer.Typer(add_completion=False, no_args_is_help=False, rich_markup_mode="rich")
worktrees_app = typer.Typer(add_completion=False, no_args_is_help=False, rich_markup_mode="rich")


# -----------------------------------------------------------------------------
# Branches
# -----------------------------------------------------------------------------


@branches_app.callback(invoke_without_command=True)
def branches_group(
    ctx: typer.Context,
    repo: Path | None = _REPO_OPTION,
    pin: str | None = typer.Option(None, "--pin", help="Pin a branch to favorites"),
    unpin: str | None = typer.Option(None, "--unpin", help="Remove a branch from favorites"),
) -> None:
    """List branches grouped by prefix, with favorites and recents."""
    if ctx.invoked_subcommand is not None:
        return
    views.branches(repo=repo, pin=pin, unpin=unpin)


@branches_app.command("create")
def create_branch(
    name: str = typer.Argument(..., help="New branch name"),
    from_ref: str | None = typer.Option(None, "--from", help="Start point (default: HEAD)"),
    checkout: bool = typer.Option(True, "--checkout/--no-checkout", help="Switch to the new branch"),
    repo: Path | None = _REPO_OPTION,
) -> None:
    """Create a branch, optionally from another ref."""
    c = build_context()
    active = c.active_repository(repo)
    if from_ref:
        result = c.service.create_branch_from(active.root, name, from_ref)
    else:
        result = c.service.create_branch(active.root, name, checkout=checkout)
    exit_on_git_error(result, c, "Create Branch")
    if from_ref or checkout:
        c.memory.record_checkout(active.id, name)
    c.console.success(f"Created {name}.")


@branches_app.command("rename")
def rename_branch(
    old: str = typer.Argument(..., help="Current branch name"),
    new: str = typer.Argument(..., help="New branch name"),
    repo: Path | None = _REPO_OPTION,
) -> None:
    """Rename a local branch."""
    c = build_context()
    active = c.active_repository(repo)
    exit_on_git_error(c.service.rename_branch(active.root, old, new), c, "Rename Branch")
    c.console.success(f"Renamed {old} to {new}.")


@branches_app.command("delete")
def delete_branch(
    name: str = typer.Argument(..., help="Branch to delete"),
    yes: bool = _YES_OPTION,
    repo: Path | None = _REPO_OPTION,
) -> None:
    """Force-delete a local branch."""
    c = build_context()
    active = c.active_repository(repo)
    if name == active.current_branch:
        c.console.error(f"cannot delete the checked-out branch {name}")
        raise typer.Exit(code=int(ErrorCode.PRECONDITION))
    if not (yes or c.prompter.confirm(f"Delete branch {name}? Unmerged commits are lost.")):
        raise typer.Exit(code=int(ErrorCode.CANCELLED))
    exit_on_git_error(c.service.delete_branch(active.root, name), c, "Delete Branch")
    c.memory.unpin(active.id, name)
    c.console.success(f"Deleted {name}.")


@branches_app.command("diff")
def diff_branches(
    left: str = typer.Argument(..., help="Branch to compare"),
    right: str = typer.Argument("HEAD", help="Branch to compare against"),
    repo: Path | None = _REPO_OPTION,
) -> None:
    """Show commits unique to each side and a diffstat."""
    c = build_context()
    active = c.active_repository(repo)
    comparison = exit_on_git_error(c.service.compare_branches(active.root, left, right), c, "Compare Branches")
    stat = exit_on_git_error(c.service.diff_summary(active.root, right, left), c, "Compare Branches")

    c.console.show(Text(f"{left}: {comparison.ahead} ahead, {comparison.behind} behind {right}", style="bold"))
    for title, entries in ((f"only in {left}", comparison.left_only), (f"only in {right}", comparison.right_only)):
        if not entries:
            continue
        c.console.show(Text(title, style="cyan"))
        for entry in entries:
            line = Text(f"  {entry.short_hash}", style="yellow")
            line.append(f"  {entry.subject}")
            c.console.show(line)
    if stat:
        c.console.show(Text(stat))


# -----------------------------------------------------------------------------
# Stashes
# -----------------------------------------------------------------------------


@stashes_app.callback(invoke_without_command=True)
def stashes_group(ctx: typer.Context, repo: Path | None = _REPO_OPTION) -> None:
    """List stash entries."""
    if ctx.invoked_subcommand is not None:
        return
    views.stashes(repo=repo)


@stashes_app.command("apply")
def apply_stash(
    ref: str = typer.Argument("stash@{0}", help="Stash entry"),
    repo: Path | None = _REPO_OPTION,
) -> None:
    """Apply a stash entry and keep it."""
    c = build_context()
    active = c.active_repository(repo)
    exit_on_git_error(c.service.stash_apply(active.root, ref, pop=False), c, "Apply Stash")
    c.console.success(f"Applied {ref}.")


@stashes_app.command("pop")
def pop_stash(
    ref: str = typer.Argument("stash@{0}", help="Stash entry"),
    repo: Path | None = _REPO_OPTION,
) -> None:
    """Apply a stash entry and drop it."""
    c = build_context()
    active = c.active_repository(repo)
    exit_on_git_error(c.service.stash_apply(active.root, ref, pop=True), c, "Pop Stash")
    c.console.success(f"Popped {ref}.")


@stashes_app.command("drop")
def drop_stash(
    ref: str = typer.Argument(..., help="Stash entry"),
    yes: bool = _YES_OPTION,
    repo: Path | None = _REPO_OPTION,
) -> None:
    """Delete a stash entry."""
    c = build_context()
    active = c.active_repository(repo)
    if not (yes or c.prompter.confirm(f"Drop {ref}?")):
        raise typer.Exit(code=int(ErrorCode.CANCELLED))
    exit_on_git_error(c.service.stash_drop(active.root, ref), c, "Drop Stash")
    c.console.success(f"Dropped {ref}.")


@stashes_app.command("show")
def show_stash(
    ref: str = typer.Argument("stash@{0}", help="Stash entry"),
    repo: Path | None = _REPO_OPTION,
) -> None:
    """Print the patch stored in a stash entry."""
    c = build_context()
    active = c.active_repository(repo)
    patch = exit_on_git_error(c.service.stash_show_patch(active.root, ref), c, "Show Stash")
    c.console.show(Text(patch))


@stashes_app.command("branch")
def branch_from_stash(
    branch: str = typer.Argument(..., help="New branch name"),
    ref: str = typer.Argument("stash@{0}", help="Stash entry"),
    repo: Path | None = _REPO_OPTION,
) -> None:
    """Create a branch at the stash's base commit and pop the stash onto it."""
    c = build_context()
    active = c.active_repository(repo)
    exit_on_git_error(c.service.stash_branch(active.root, branch, ref), c, "Stash Branch")
    c.memory.record_checkout(active.id, branch)
    c.console.success(f"Created {branch} from {ref}.")


# -----------------------------------------------------------------------------
# Worktrees
# -----------------------------------------------------------------------------


@worktrees_app.callback(invoke_without_command=True)
def worktrees_group(
    ctx: typer.Context,
    repo: Path | None = _REPO_OPTION,
    prune: bool = typer.Option(False, "--prune", help="Prune stale worktree metadata first"),
) -> None:
    """List linked worktrees."""
    if ctx.invoked_subcommand is not None:
        return
    views.worktrees(repo=repo, prune=prune)


@worktrees_app.command("add")
def add_worktree(
    path: Path = typer.Argument(..., help="Directory for the new worktree"),
    branch: str = typer.Argument(..., help="Branch to check out there"),
    repo: Path | None = _REPO_OPTION,
) -> None:
    """Check out a branch into a new linked worktree."""
    c = build_context()
    active = c.active_repository(repo)
    target = path.expanduser()
    if not target.is_absolute():
        target = active.root / target
    exit_on_git_error(c.service.create_worktree(active.root, target, branch), c, "Add Worktree")
    c.console.success(f"Checked out {branch} in {target}.")
