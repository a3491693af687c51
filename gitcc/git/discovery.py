"""Find repository roots under workspace folders."""

from __future__ import annotations

import os
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol

__all__ = ["DEFAULT_MAX_REPOS", "TopLevelResolver", "discover_repositories", "find_repos"]

DEFAULT_MAX_REPOS = 100
_SKIP_DIRS = frozenset({"node_modules", ".git"})


class TopLevelResolver(Protocol):
    def top_level(self, path: Path) -> Path | None: ...


def find_repos(base: Path, *, limit: int = DEFAULT_MAX_REPOS) -> list[Path]:
    """Walk ``base`` for directories holding a ``.git`` entry.

    ``.git`` may be a directory (regular clone) or a file (linked worktree,
    submodule). ``node_modules`` trees are skipped. At most ``limit``
    repositories are returned.
    """
    if not base.is_dir():
        return []

    repos: list[Path] = []
    for dirpath, dirnames, filenames in os.walk(base):
        if ".git" in dirnames or ".git" in filenames:
            repos.append(Path(dirpath))
            if len(repos) >= limit:
                break
        dirnames[:] = sorted(d for d in dirnames if d not in _SKIP_DIRS)

    return repos


def discover_repositories(
    roots: Iterable[Path],
    resolver: TopLevelResolver | None = None,
    *,
    limit: int = DEFAULT_MAX_REPOS,
) -> list[Path]:
    """Collect repository roots for a set of workspace folders.

    A folder nested inside a repository contributes that repository's
    top level (when ``resolver`` is given), plus every repository found
    beneath it. The result is de-duplicated and sorted by path.
    """
    found: dict[str, Path] = {}

    for root in roots:
        if resolver is not None:
            top = resolver.top_level(root)
            if top is not None:
                found[str(top.resolve())] = top.resolve()

        for repo in find_repos(root, limit=limit):
            found[str(repo.resolve())] = repo.resolve()

    return [found[key] for key in sorted(found)]
