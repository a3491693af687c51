"""Status and repository overview commands."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.table import Table
from rich.text import Text

from gitcc.cli.commands._helpers import exit_on_git_error
from gitcc.cli.context import build_context
from gitcc.git.models import FileChange, RepositoryInfo, StatusInfo
from gitcc.output.console import ConsoleProtocol

_SECTION_STYLES = {
    "conflicts": "bold red",
    "staged": "green",
    "unstaged": "yellow",
    "untracked": "cyan",
}


def render_divergence(ahead: int, behind: int) -> Text:
    """Render ahead/behind as ``2^ 1v``."""
    text = Text()
    if ahead:
        text.append(f"{ahead}", style="green")
        text.append("^", style="green dim")
    if ahead and behind:
        text.append(" ")
    if behind:
        text.append(f"{behind}", style="red")
        text.append("v", style="red dim")
    return text


def _render_entry(change: FileChange) -> Text:
    text = Text("    ")
    text.append(f"{change.xy} ", style=_SECTION_STYLES[change.section])
    if change.original_path:
        text.append(f"{change.original_path} -> ", style="dim")
    text.append(change.path)
    return text


def _render_status(out: ConsoleProtocol, status: StatusInfo) -> None:
    head = Text(status.branch, style="bold")
    if status.upstream:
        head.append(f" -> {status.upstream}", style="dim")
    divergence = render_divergence(status.ahead, status.behind)
    if divergence:
        head.append("  ")
        head.append_text(divergence)
    out.show(head)

    if not status.is_dirty:
        out.show(Text("  clean", style="dim"))
        return

    sections: list[tuple[str, tuple[FileChange, ...]]] = [
        ("conflicts", status.conflicts),
        ("staged", status.staged),
        ("unstaged", status.unstaged),
        ("untracked", status.untracked),
    ]
    for name, changes in sections:
        if not changes:
            continue
        out.show(Text(f"  {name} ({len(changes)})", style=_SECTION_STYLES[name]))
        for change in changes:
            out.show(_render_entry(change))


def status(
    repo: Path | None = typer.Option(None, "--repo", "-C", help="Repository path (default: cwd)"),
) -> None:
    """Show branch, divergence and changes of the current repository."""
    ctx = build_context()
    active = ctx.active_repository(repo)
    info = exit_on_git_error(ctx.service.status(active.root), ctx, "Status")
    _render_status(ctx.console, info)


def _repo_row(info: RepositoryInfo, active_id: str | None) -> list[Text | str]:
    marker = Text("*", style="bold green") if info.id == active_id else Text(" ")
    branch = Text(info.current_branch, style="yellow" if info.detached else "")
    dirty = Text(str(info.dirty_count), style="yellow") if info.dirty_count else Text("-", style="dim")
    return [marker, info.name, branch, render_divergence(info.ahead, info.behind), dirty, str(info.root)]


def repos(
    path: Path | None = typer.Argument(None, help="Folder to scan (default: cwd)"),
) -> None:
    """List repositories found under a folder."""
    ctx = build_context(path)
    found = ctx.registry.refresh(force=True)
    if not found:
        ctx.console.warning(f"no repositories under {ctx.workspace}")
        return

    ctx.registry.set_active_repository_for_path(Path.cwd())
    active = ctx.registry.active_repository
    table = Table(box=None, pad_edge=False)
    for column in ("", "name", "branch", "sync", "dirty", "path"):
        table.add_column(column)
    for info in found:
        table.add_row(*_repo_row(info, active.id if active else None))
    ctx.console.show(table)
