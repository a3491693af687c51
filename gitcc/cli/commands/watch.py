"""Keep repository summaries fresh until interrupted."""

from __future__ import annotations

import time
from pathlib import Path

import typer
from rich.text import Text

from gitcc.cli.commands.status import render_divergence
from gitcc.cli.context import build_context
from gitcc.git.models import RepositoryInfo
from gitcc.output.console import ConsoleProtocol
from gitcc.services.refresh import RefreshOrchestrator
from gitcc.services.scheduler import ThreadingScheduler
from gitcc.services.views import ActiveRepositoryView, BranchesView
from gitcc.services.watcher import WorkspaceWatcher
from gitcc.state.registry import RepositoryRegistry

class SummaryPrinter:
    """Prints one line per repository whenever its summary changes."""

    def __init__(self, registry: RepositoryRegistry, out: ConsoleProtocol) -> None:
        self._registry = registry
        self._out = out
        self._last: dict[str, RepositoryInfo] = {}

    def refresh(self) -> None:
        current = {repo.id: repo for repo in self._registry.repositories}
        for repo_id, info in current.items():
            if self._last.get(repo_id) != info:
                self._out.show(_summary_line(info))
        for repo_id in self._last.keys() - current.keys():
            self._out.show(Text(f"- {self._last[repo_id].name} (gone)", style="dim"))
        self._last = current


def _summary_line(info: RepositoryInfo) -> Text:
    line = Text(time.strftime("%H:%M:%S "), style="dim")
    line.append(info.name, style="bold")
    line.append(f" [{info.current_branch}]", style="yellow" if info.detached else "green")
    divergence = render_divergence(info.ahead, info.behind)
    if divergence:
        line.append(" ")
        line.append_text(divergence)
    if info.dirty_count:
        line.append(f" {info.dirty_count} changed", style="yellow")
    return line


def watch(
    path: Path | None = typer.Argument(None, help="Folder to watch (default: cwd)"),
    interval: int | None = typer.Option(None, "--interval", min=5, max=60, help="Refresh interval in seconds"),
) -> None:
    """Refresh repository summaries periodically and on file changes."""
    ctx = build_context(path)
    views = [
        ActiveRepositoryView(ctx.registry, ctx.service),
        BranchesView(ctx.registry, ctx.service, ctx.memory, ctx.config),
        SummaryPrinter(ctx.registry, ctx.console),
    ]
    orchestrator = RefreshOrchestrator(ctx.registry, views, ThreadingScheduler(), ctx.config)
    watcher = WorkspaceWatcher(ctx.registry, orchestrator.trigger_debounced)
    if interval is not None:
        orchestrator.reschedule(interval)

    ctx.console.info(f"watching {ctx.workspace} every {orchestrator.interval:g}s (Ctrl+C to stop)")
    orchestrator.start()
    watcher.start()
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        ctx.console.newline()
    finally:
        watcher.stop()
        orchestrator.stop()
