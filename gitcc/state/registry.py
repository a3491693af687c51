"""The set of known repositories and which one is active.

``RepositoryRegistry`` is the single owner of the repository collection
and the active selection. All mutation goes through its methods and
every mutation notifies subscribers. Subscribers receive no payload;
they read a fresh snapshot through ``repositories`` or
``active_repository``.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING

from gitcc.core.result import Err, Ok
from gitcc.git.models import RepositoryInfo, repository_id
from gitcc.state.cache import StateStore

if TYPE_CHECKING:
    from gitcc.git.service import GitService

__all__ = ["SUMMARY_MAX_AGE", "RegistryListener", "RepositoryRegistry"]

logger = logging.getLogger(__name__)

SUMMARY_MAX_AGE = 3.0

RegistryListener = Callable[[], None]


class RepositoryRegistry:
    """Discovers repositories and tracks the active one.

    Args:
        service: Computes ``RepositoryInfo`` summaries
        discover: Returns candidate repository roots (workspace scanning)
        max_workers: Repositories summarized concurrently during refresh
        clock: Time source for summary freshness
    """

    def __init__(
        self,
        service: GitService,
        discover: Callable[[], list[Path]],
        *,
        max_workers: int = 4,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._service = service
        self._discover = discover
        self._max_workers = max(1, max_workers)
        self._cache: StateStore[RepositoryInfo] = StateStore(clock=clock)
        self._repositories: tuple[RepositoryInfo, ...] = ()
        self._active_id: str | None = None
        self._listeners: list[RegistryListener] = []
        self._lock = threading.Lock()

        service.add_mutation_listener(lambda root: self.invalidate(repository_id(root)))

    # -------------------------------------------------------------------------
    # Snapshots
    # -------------------------------------------------------------------------

    @property
    def repositories(self) -> tuple[RepositoryInfo, ...]:
        with self._lock:
            return self._repositories

    @property
    def active_id(self) -> str | None:
        with self._lock:
            return self._active_id

    @property
    def active_repository(self) -> RepositoryInfo | None:
        """The active repository, falling back to the first known one."""
        with self._lock:
            repos = self._repositories
            active = self._active_id
        for repo in repos:
            if repo.id == active:
                return repo
        return repos[0] if repos else None

    def get(self, repo_id: str) -> RepositoryInfo | None:
        for repo in self.repositories:
            if repo.id == repo_id:
                return repo
        return None

    # -------------------------------------------------------------------------
    # Subscriptions
    # -------------------------------------------------------------------------

    def subscribe(self, listener: RegistryListener) -> Callable[[], None]:
        """Register ``listener`` for change notifications; returns an unsubscribe."""
        with self._lock:
            self._listeners.append(listener)

        def unsubscribe() -> None:
            with self._lock:
                if listener in self._listeners:
                    self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener()

    # -------------------------------------------------------------------------
    # Active selection
    # -------------------------------------------------------------------------

    def set_active_repository(self, repo_id: str) -> bool:
        """Make ``repo_id`` active. Returns False for an unknown id."""
        with self._lock:
            if not any(repo.id == repo_id for repo in self._repositories):
                return False
            self._active_id = repo_id
        self._notify()
        return True

    def set_active_repository_for_path(self, path: Path) -> bool:
        """Activate the most specific repository containing ``path``.

        Returns True only when the active repository actually changed, so
        callers can choose between a full refresh and a lighter one.
        """
        target = path.resolve()
        with self._lock:
            matches = [
                repo
                for repo in self._repositories
                if target == repo.root.resolve() or repo.root.resolve() in target.parents
            ]
            if not matches:
                return False
            best = max(matches, key=lambda repo: len(repo.root.resolve().parts))
            if best.id == self._active_id:
                return False
            self._active_id = best.id
        logger.debug("active repository -> %s", best.id)
        self._notify()
        return True

    # -------------------------------------------------------------------------
    # Refresh
    # -------------------------------------------------------------------------

    def invalidate(self, repo_id: str | None = None) -> None:
        """Drop the cached summary for one repository, or for all."""
        self._cache.invalidate(repo_id)

    def refresh(self, force: bool = False) -> tuple[RepositoryInfo, ...]:
        """Rediscover repositories and replace the collection atomically.

        Summaries stored less than ``SUMMARY_MAX_AGE`` seconds ago are
        reused unless ``force`` is set. Stale ones are recomputed with
        bounded concurrency; a repository whose summary fails is left out
        of the new collection.
        """
        roots = self._discover()
        summaries: dict[str, RepositoryInfo] = {}
        stale: list[Path] = []

        for root in roots:
            key = repository_id(root)
            cached = None if force else self._cache.get_fresh(key, SUMMARY_MAX_AGE)
            if cached is not None:
                summaries[key] = cached
            else:
                stale.append(root)

        if stale:
            workers = min(self._max_workers, len(stale))
            with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="gitcc-refresh") as pool:
                for root, result in zip(stale, pool.map(self._service.repository_info, stale)):
                    match result:
                        case Ok(info):
                            self._cache.set(info.id, info)
                            summaries[info.id] = info
                        case Err(e):
                            logger.warning("skipping %s: %s", root, e.message)

        ordered = tuple(
            summaries[repository_id(root)] for root in roots if repository_id(root) in summaries
        )

        with self._lock:
            self._repositories = ordered
            known = {repo.id for repo in ordered}
            if self._active_id not in known:
                self._active_id = ordered[0].id if ordered else None

        logger.debug("registry refreshed: %d repositories (%d recomputed)", len(ordered), len(stale))
        self._notify()
        return ordered
