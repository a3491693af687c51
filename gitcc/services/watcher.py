"""Filesystem events that feed debounced refreshes.

One recursive watchdog watch is scheduled per known repository root.
Working-tree saves trigger a refresh, as do writes to the parts of
``.git`` that change what gitcc shows (HEAD, the index, refs). Object
storage, reflogs and ``*.lock`` scratch files inside ``.git`` are
ignored, as are open/close notifications, so the ``git status`` calls a
refresh makes do not retrigger it.
"""

from __future__ import annotations

import logging
import os
import threading
from collections.abc import Callable, Iterable
from pathlib import Path, PurePath

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver, ObservedWatch

from gitcc.state.registry import RepositoryRegistry

__all__ = ["RepositoryEventHandler", "WorkspaceWatcher", "is_git_noise"]

logger = logging.getLogger(__name__)

_CHANGE_EVENTS = frozenset({EVENT_TYPE_CREATED, EVENT_TYPE_DELETED, EVENT_TYPE_MODIFIED, EVENT_TYPE_MOVED})

# Top-level entries of .git whose changes show up in status or branch views.
_GIT_STATE_ENTRIES = frozenset(
    {"HEAD", "index", "FETCH_HEAD", "ORIG_HEAD", "MERGE_HEAD", "REBASE_HEAD", "packed-refs", "refs"}
)


def is_git_noise(path: str) -> bool:
    """True for paths inside ``.git`` that do not affect any view."""
    parts = PurePath(path).parts
    if ".git" not in parts:
        return False
    inner = parts[parts.index(".git") + 1 :]
    if not inner:
        return True
    return inner[0] not in _GIT_STATE_ENTRIES or inner[-1].endswith(".lock")


class RepositoryEventHandler(FileSystemEventHandler):
    """Calls ``on_change`` for every event that may change repository state."""

    def __init__(self, on_change: Callable[[], None]) -> None:
        super().__init__()
        self._on_change = on_change

    def on_any_event(self, event: FileSystemEvent) -> None:
        if event.is_directory or event.event_type not in _CHANGE_EVENTS:
            return
        # git replaces index and refs by renaming a .lock file onto them
        raw = event.dest_path if event.event_type == EVENT_TYPE_MOVED else event.src_path
        path = os.fsdecode(raw)
        if is_git_noise(path):
            return
        logger.debug("%s %s", event.event_type, path)
        self._on_change()


class WorkspaceWatcher:
    """Keeps one recursive watch per repository in the registry.

    While started it follows registry updates, watching repositories that
    appear and dropping those that disappear.

    Args:
        registry: Source of repository roots
        on_change: Called from the observer thread for relevant events
        observer_factory: Creates the watchdog observer
    """

    def __init__(
        self,
        registry: RepositoryRegistry,
        on_change: Callable[[], None],
        *,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ) -> None:
        self._registry = registry
        self._handler = RepositoryEventHandler(on_change)
        self._observer_factory = observer_factory
        self._observer: BaseObserver | None = None
        self._watches: dict[Path, ObservedWatch] = {}
        self._unsubscribe: Callable[[], None] | None = None
        self._lock = threading.Lock()

    @property
    def watched(self) -> list[Path]:
        with self._lock:
            return sorted(self._watches)

    def start(self) -> None:
        with self._lock:
            if self._observer is not None:
                return
            self._observer = self._observer_factory()
            self._observer.start()
        self._unsubscribe = self._registry.subscribe(self.refresh)
        self.refresh()

    def stop(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        with self._lock:
            observer, self._observer = self._observer, None
            self._watches.clear()
        if observer is not None:
            observer.stop()
            observer.join()

    def refresh(self) -> None:
        self._sync(repo.root for repo in self._registry.repositories)

    def _sync(self, roots: Iterable[Path]) -> None:
        wanted = set(roots)
        with self._lock:
            observer = self._observer
            if observer is None:
                return
            for root in self._watches.keys() - wanted:
                observer.unschedule(self._watches.pop(root))
                logger.debug("stopped watching %s", root)
            for root in sorted(wanted - self._watches.keys()):
                try:
                    self._watches[root] = observer.schedule(self._handler, str(root), recursive=True)
                except OSError as e:
                    logger.warning("cannot watch %s: %s", root, e)
                    continue
                logger.debug("watching %s", root)
