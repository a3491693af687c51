"""Per-repository favourite and recently checked-out branches.

State is kept in memory and, when a path is given, mirrored to a JSON
file after every change.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from pathlib import Path

from gitcc.core.result import Err
from gitcc.core.structured import as_str_dict, get_str_list
from gitcc.platform.files import read_json, write_json

__all__ = ["MAX_FAVORITES", "MAX_RECENTS", "BranchMemory", "RepoBranchMemory"]

logger = logging.getLogger(__name__)

MAX_FAVORITES = 50
MAX_RECENTS = 10


def _empty() -> list[str]:
    return []


@dataclass
class RepoBranchMemory:
    favorites: list[str] = field(default_factory=_empty)
    recents: list[str] = field(default_factory=_empty)


class BranchMemory:
    """Branch recency and pinning, keyed by repository id."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path
        self._lock = threading.Lock()
        self._repos: dict[str, RepoBranchMemory] = self._load() if path is not None else {}

    def pin(self, repo_key: str, branch: str) -> None:
        with self._lock:
            memory = self._repos.setdefault(repo_key, RepoBranchMemory())
            if branch in memory.favorites:
                return
            memory.favorites = [branch, *memory.favorites][:MAX_FAVORITES]
        self._save()

    def unpin(self, repo_key: str, branch: str) -> None:
        with self._lock:
            memory = self._repos.setdefault(repo_key, RepoBranchMemory())
            memory.favorites = [name for name in memory.favorites if name != branch]
        self._save()

    def record_checkout(self, repo_key: str, branch: str) -> None:
        """Move ``branch`` to the front of the recents list."""
        with self._lock:
            memory = self._repos.setdefault(repo_key, RepoBranchMemory())
            others = [name for name in memory.recents if name != branch]
            memory.recents = [branch, *others][:MAX_RECENTS]
        self._save()

    def favorites(self, repo_key: str) -> list[str]:
        with self._lock:
            memory = self._repos.get(repo_key)
            return list(memory.favorites) if memory else []

    def recents(self, repo_key: str) -> list[str]:
        with self._lock:
            memory = self._repos.get(repo_key)
            return list(memory.recents) if memory else []

    def is_favorite(self, repo_key: str, branch: str) -> bool:
        return branch in self.favorites(repo_key)

    def _load(self) -> dict[str, RepoBranchMemory]:
        assert self._path is not None
        result = read_json(self._path)
        if isinstance(result, Err):
            # Corrupted memory file, start fresh
            logger.warning("ignoring unreadable branch memory %s: %s", result.error.path, result.error.message)
            return {}

        data = result.value
        root = as_str_dict(data)
        if root is None:
            if data is not None:
                logger.warning("ignoring branch memory %s: top level is not an object", self._path)
            return {}

        repos: dict[str, RepoBranchMemory] = {}
        for key, value in root.items():
            table = as_str_dict(value)
            if table is None:
                continue
            repos[key] = RepoBranchMemory(
                favorites=get_str_list(table, "favorites") or [],
                recents=get_str_list(table, "recents") or [],
            )
        return repos

    def _save(self) -> None:
        if self._path is None:
            return
        with self._lock:
            data = {
                key: {"favorites": list(memory.favorites), "recents": list(memory.recents)}
                for key, memory in self._repos.items()
            }
        saved = write_json(self._path, data)
        if isinstance(saved, Err):
            # in-memory state stays authoritative for this session
            logger.warning("could not save branch memory %s: %s", saved.error.path, saved.error.message)
