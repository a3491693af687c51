"""Tests for gitcc.services.watcher."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest
from watchdog.events import (
    DirModifiedEvent,
    FileClosedEvent,
    FileCreatedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileOpenedEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)

from gitcc.git.runner import ScriptedGitRunner
from gitcc.git.service import GitService
from gitcc.services.watcher import RepositoryEventHandler, WorkspaceWatcher, is_git_noise
from gitcc.state.registry import RepositoryRegistry


class _FakeObserver:
    def __init__(self, missing: set[str] | None = None) -> None:
        self.scheduled: list[tuple[str, bool]] = []
        self.unscheduled: list[str] = []
        self.started = False
        self.stopped = False
        self.joined = False
        self.handler: FileSystemEventHandler | None = None
        self._missing = missing or set()

    def schedule(self, handler: FileSystemEventHandler, path: str, recursive: bool = False) -> str:
        if path in self._missing:
            raise FileNotFoundError(2, "No such file or directory", path)
        self.handler = handler
        self.scheduled.append((path, recursive))
        return path

    def unschedule(self, watch: str) -> None:
        self.unscheduled.append(watch)

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True

    def join(self, timeout: float | None = None) -> None:
        self.joined = True


def _registry(discovered: list[Path]) -> RepositoryRegistry:
    service = GitService(ScriptedGitRunner({"status": "# branch.head main"}))
    return RepositoryRegistry(service, lambda: list(discovered))


def _roots(tmp_path: Path, *names: str) -> list[Path]:
    roots = [tmp_path / name for name in names]
    for root in roots:
        root.mkdir()
    return roots


class TestIsGitNoise:
    @pytest.mark.parametrize(
        "path",
        [
            "/w/app/.git",
            "/w/app/.git/objects/ab/cdef",
            "/w/app/.git/logs/HEAD",
            "/w/app/.git/index.lock",
            "/w/app/.git/refs/heads/main.lock",
            "/w/app/.git/COMMIT_EDITMSG",
        ],
    )
    def test_ignored(self, path: str) -> None:
        assert is_git_noise(path)

    @pytest.mark.parametrize(
        "path",
        [
            "/w/app/src/main.py",
            "/w/app/poetry.lock",
            "/w/app/.git/HEAD",
            "/w/app/.git/index",
            "/w/app/.git/refs/heads/feature/x",
            "/w/app/.git/FETCH_HEAD",
        ],
    )
    def test_relevant(self, path: str) -> None:
        assert not is_git_noise(path)


class TestRepositoryEventHandler:
    @pytest.mark.parametrize(
        "event",
        [
            FileModifiedEvent("/w/app/src/main.py"),
            FileCreatedEvent("/w/app/.git/refs/heads/dev"),
            FileMovedEvent("/w/app/.git/index.lock", "/w/app/.git/index"),
        ],
    )
    def test_triggers(self, event: FileSystemEvent) -> None:
        calls: list[None] = []
        RepositoryEventHandler(lambda: calls.append(None)).dispatch(event)
        assert len(calls) == 1

    @pytest.mark.parametrize(
        "event",
        [
            DirModifiedEvent("/w/app/src"),
            FileOpenedEvent("/w/app/.git/index"),
            FileClosedEvent("/w/app/src/main.py"),
            FileModifiedEvent("/w/app/.git/objects/ab/cdef"),
            FileCreatedEvent("/w/app/.git/index.lock"),
            FileMovedEvent("/w/app/.git/refs/heads/main", "/w/app/.git/refs/heads/main.lock"),
        ],
    )
    def test_ignores(self, event: FileSystemEvent) -> None:
        calls: list[None] = []
        RepositoryEventHandler(lambda: calls.append(None)).dispatch(event)
        assert calls == []


class TestWorkspaceWatcher:
    def test_schedules_each_root_recursively(self, tmp_path: Path) -> None:
        roots = _roots(tmp_path, "a", "b")
        registry = _registry(roots)
        registry.refresh()
        observer = _FakeObserver()
        watcher = WorkspaceWatcher(registry, lambda: None, observer_factory=lambda: observer)

        watcher.start()

        assert observer.started
        assert sorted(observer.scheduled) == [(str(roots[0]), True), (str(roots[1]), True)]
        assert watcher.watched == roots

    def test_follows_registry_changes(self, tmp_path: Path) -> None:
        a, b, c = _roots(tmp_path, "a", "b", "c")
        discovered = [a, b]
        registry = _registry(discovered)
        registry.refresh()
        observer = _FakeObserver()
        watcher = WorkspaceWatcher(registry, lambda: None, observer_factory=lambda: observer)
        watcher.start()

        discovered[:] = [b, c]
        registry.refresh(force=True)

        assert observer.unscheduled == [str(a)]
        assert watcher.watched == [b, c]

    def test_events_reach_callback(self, tmp_path: Path) -> None:
        [root] = _roots(tmp_path, "app")
        registry = _registry([root])
        registry.refresh()
        observer = _FakeObserver()
        triggers: list[None] = []
        watcher = WorkspaceWatcher(registry, lambda: triggers.append(None), observer_factory=lambda: observer)
        watcher.start()

        assert observer.handler is not None
        observer.handler.dispatch(FileModifiedEvent(str(root / "main.py")))

        assert len(triggers) == 1

    def test_unwatchable_root_is_skipped(self, tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
        a, b = _roots(tmp_path, "a", "b")
        registry = _registry([a, b])
        registry.refresh()
        observer = _FakeObserver(missing={str(a)})
        watcher = WorkspaceWatcher(registry, lambda: None, observer_factory=lambda: observer)

        watcher.start()

        assert watcher.watched == [b]
        assert "cannot watch" in caplog.text

    def test_stop_joins_observer_and_unsubscribes(self, tmp_path: Path) -> None:
        a, b = _roots(tmp_path, "a", "b")
        discovered = [a]
        registry = _registry(discovered)
        registry.refresh()
        observer = _FakeObserver()
        watcher = WorkspaceWatcher(registry, lambda: None, observer_factory=lambda: observer)
        watcher.start()

        watcher.stop()
        discovered.append(b)
        registry.refresh(force=True)

        assert observer.stopped and observer.joined
        assert watcher.watched == []
        assert observer.scheduled == [(str(a), True)]

    def test_real_observer_sees_file_save(self, tmp_path: Path) -> None:
        [root] = _roots(tmp_path, "app")
        registry = _registry([root])
        registry.refresh()
        seen = threading.Event()
        watcher = WorkspaceWatcher(registry, seen.set)

        watcher.start()
        try:
            (root / "main.py").write_text("print('hi')\n", encoding="utf-8")
            assert seen.wait(timeout=10)
        finally:
            watcher.stop()
