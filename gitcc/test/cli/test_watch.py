from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from gitcc.cli.commands.watch import SummaryPrinter
from gitcc.cli.context import CLIContext
from gitcc.core.config import Config
from gitcc.git.runner import ScriptedGitRunner
from gitcc.git.service import GitService
from gitcc.output.console import MockConsole
from gitcc.output.prompt import MockPrompter
from gitcc.services.branch_memory import BranchMemory
from gitcc.services.refresh import RefreshOrchestrator
from gitcc.state.registry import RepositoryRegistry


def test_summary_printer_reports_changes_only(tmp_path: Path) -> None:
    roots = [tmp_path / "a", tmp_path / "b"]
    for root in roots:
        root.mkdir()
    discovered = list(roots)
    registry = RepositoryRegistry(GitService(ScriptedGitRunner({"status": "# branch.head main"})), lambda: list(discovered))
    out = MockConsole()
    printer = SummaryPrinter(registry, out)

    registry.refresh()
    printer.refresh()
    assert len(out.find("a [main]")) == 1
    assert len(out.find("b [main]")) == 1

    registry.refresh(force=True)
    printer.refresh()
    assert len(out.outputs) == 2

    discovered.pop()
    registry.refresh(force=True)
    printer.refresh()
    assert out.messages[-1] == "- b (gone)"


def test_watch_feeds_file_events_into_debounced_refresh(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import gitcc.cli.commands.watch as watch_cmd

    root = tmp_path / "app"
    root.mkdir()
    service = GitService(ScriptedGitRunner({"status": "# branch.head main"}))
    ctx = CLIContext(
        config=Config(),
        console=MockConsole(),
        prompter=MockPrompter(),
        service=service,
        registry=RepositoryRegistry(service, lambda: [root]),
        memory=BranchMemory(),
        workspace=tmp_path,
    )
    watchers: list[_RecordingWatcher] = []

    class _RecordingWatcher:
        def __init__(self, registry: RepositoryRegistry, on_change: Callable[[], None]) -> None:
            self.on_change = on_change
            self.calls: list[str] = []
            watchers.append(self)

        def start(self) -> None:
            self.calls.append("start")

        def stop(self) -> None:
            self.calls.append("stop")

    def interrupt(_seconds: float) -> None:
        raise KeyboardInterrupt

    monkeypatch.setattr(watch_cmd, "build_context", lambda *_: ctx)
    monkeypatch.setattr(watch_cmd, "WorkspaceWatcher", _RecordingWatcher)
    monkeypatch.setattr(watch_cmd.time, "sleep", interrupt)

    watch_cmd.watch(path=None, interval=None)

    [watcher] = watchers
    assert watcher.calls == ["start", "stop"]
    bound = watcher.on_change
    assert getattr(bound, "__func__", None) is RefreshOrchestrator.trigger_debounced
    assert isinstance(ctx.console, MockConsole)
    assert ctx.console.find("app [main]")
