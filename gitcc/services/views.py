"""Read-only snapshots refreshed after each registry pass.

Views pull from the registry and ``GitService`` and keep the latest
result for renderers. They never mutate the registry.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Sequence
from dataclasses import dataclass, field

from gitcc.core.config import Config
from gitcc.core.result import Err, Ok
from gitcc.git.models import BranchInfo, MiniLogEntry, RepositoryInfo, StashEntry, StatusInfo
from gitcc.git.service import GitService
from gitcc.services.branch_memory import BranchMemory
from gitcc.state.registry import RepositoryRegistry

__all__ = [
    "ActiveRepositoryView",
    "BranchGroups",
    "BranchesView",
    "group_local_branches",
    "group_remote_branches",
]

logger = logging.getLogger(__name__)

OTHER_GROUP = "other"
UNKNOWN_REMOTE = "unknown"


def group_local_branches(
    branches: Sequence[BranchInfo], prefixes: Sequence[str]
) -> dict[str, list[BranchInfo]]:
    """Group by the first matching prefix (``feature/`` -> ``feature``)."""
    groups: dict[str, list[BranchInfo]] = {}
    for branch in branches:
        prefix = next((p for p in prefixes if branch.short_name.startswith(p)), None)
        name = prefix.replace("/", "", 1) if prefix else OTHER_GROUP
        groups.setdefault(name, []).append(branch)
    return groups


def group_remote_branches(branches: Sequence[BranchInfo]) -> dict[str, list[BranchInfo]]:
    groups: dict[str, list[BranchInfo]] = {}
    for branch in branches:
        groups.setdefault(branch.remote_name or UNKNOWN_REMOTE, []).append(branch)
    return groups


def _empty_groups() -> dict[str, list[BranchInfo]]:
    return {}


@dataclass(frozen=True, slots=True)
class BranchGroups:
    """Branch list of one repository, arranged for display.

    Favorites and recents keep branch-memory order and only list
    branches that still exist locally.
    """

    favorites: tuple[BranchInfo, ...] = ()
    recents: tuple[BranchInfo, ...] = ()
    local: dict[str, list[BranchInfo]] = field(default_factory=_empty_groups)
    remote: dict[str, list[BranchInfo]] = field(default_factory=_empty_groups)

    @classmethod
    def build(
        cls,
        branches: Sequence[BranchInfo],
        *,
        favorites: Sequence[str],
        recents: Sequence[str],
        config: Config,
    ) -> BranchGroups:
        locals_ = [b for b in branches if b.kind == "local"]
        remotes = [b for b in branches if b.kind == "remote"] if config.show_remote_branches else []
        by_name = {b.short_name: b for b in locals_}
        return cls(
            favorites=tuple(by_name[name] for name in favorites if name in by_name),
            recents=tuple(by_name[name] for name in recents if name in by_name),
            local=group_local_branches(locals_, config.branch_grouping_prefixes),
            remote=group_remote_branches(remotes),
        )


class ActiveRepositoryView:
    """Status and mini-log of the active repository."""

    def __init__(self, registry: RepositoryRegistry, service: GitService, *, log_limit: int = 20) -> None:
        self._registry = registry
        self._service = service
        self._log_limit = log_limit
        self._lock = threading.Lock()
        self.repository: RepositoryInfo | None = None
        self.status: StatusInfo | None = None
        self.log: tuple[MiniLogEntry, ...] = ()
        self.stashes: tuple[StashEntry, ...] = ()

    def refresh(self) -> None:
        repo = self._registry.active_repository
        if repo is None:
            with self._lock:
                self.repository, self.status, self.log, self.stashes = None, None, (), ()
            return

        status: StatusInfo | None = None
        match self._service.status(repo.root):
            case Ok(value):
                status = value
            case Err(e):
                logger.warning("status failed for %s: %s", repo.name, e.message)

        log = self._service.mini_log(repo.root, limit=self._log_limit)
        stashes = self._service.stashes(repo.root)
        with self._lock:
            self.repository = repo
            self.status = status
            self.log = tuple(log.unwrap_or([]))
            self.stashes = tuple(stashes.unwrap_or([]))


class BranchesView:
    """Grouped branches of the active repository."""

    def __init__(
        self,
        registry: RepositoryRegistry,
        service: GitService,
        memory: BranchMemory,
        config: Config,
    ) -> None:
        self._registry = registry
        self._service = service
        self._memory = memory
        self._config = config
        self.groups = BranchGroups()

    def refresh(self) -> None:
        repo = self._registry.active_repository
        if repo is None:
            self.groups = BranchGroups()
            return

        match self._service.branches(repo.root, repo.current_branch):
            case Ok(branches):
                self.groups = BranchGroups.build(
                    branches,
                    favorites=self._memory.favorites(repo.id),
                    recents=self._memory.recents(repo.id),
                    config=self._config,
                )
            case Err(e):
                logger.warning("branches failed for %s: %s", repo.name, e.message)
                self.groups = BranchGroups()
