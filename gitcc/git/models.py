"""Immutable records describing repository state.

Every record is a frozen value snapshot. Consumers never mutate a record;
a refresh replaces the old snapshot with a new one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

__all__ = [
    "BranchComparison",
    "BranchInfo",
    "BranchKind",
    "ChangeSection",
    "CommitOptions",
    "FileChange",
    "MiniLogEntry",
    "RepositoryInfo",
    "StashEntry",
    "StatusInfo",
    "WorktreeInfo",
    "repository_id",
]

type BranchKind = Literal["local", "remote"]
type ChangeSection = Literal["staged", "unstaged", "untracked", "conflicts"]


def repository_id(root: Path) -> str:
    """Stable identity of a repository root for the life of the process."""
    return str(root.resolve())


@dataclass(frozen=True, slots=True)
class FileChange:
    """A single path-level change.

    Attributes:
        path: Path relative to the repository root
        section: Which set the change belongs to
        x: Index-side status character ("." when unchanged)
        y: Worktree-side status character ("." when unchanged)
        original_path: Rename/copy source, if any
    """

    path: str
    section: ChangeSection
    x: str
    y: str
    original_path: str | None = None

    @property
    def xy(self) -> str:
        return f"{self.x}{self.y}"


@dataclass(frozen=True, slots=True)
class StatusInfo:
    """Working tree and index snapshot from one status query."""

    branch: str = "HEAD"
    detached: bool = False
    upstream: str | None = None
    ahead: int = 0
    behind: int = 0
    staged: tuple[FileChange, ...] = field(default_factory=tuple)
    unstaged: tuple[FileChange, ...] = field(default_factory=tuple)
    untracked: tuple[FileChange, ...] = field(default_factory=tuple)
    conflicts: tuple[FileChange, ...] = field(default_factory=tuple)

    @property
    def dirty_count(self) -> int:
        return len(self.staged) + len(self.unstaged) + len(self.untracked) + len(self.conflicts)

    @property
    def is_dirty(self) -> bool:
        return self.dirty_count > 0

    @property
    def has_conflicts(self) -> bool:
        return len(self.conflicts) > 0

    @property
    def is_diverged(self) -> bool:
        return self.ahead > 0 and self.behind > 0


@dataclass(frozen=True, slots=True)
class RepositoryInfo:
    """Summary of one discovered repository root."""

    id: str
    root: Path
    name: str
    current_branch: str
    detached: bool = False
    upstream: str | None = None
    ahead: int = 0
    behind: int = 0
    dirty_count: int = 0
    has_submodules: bool = False


@dataclass(frozen=True, slots=True)
class BranchInfo:
    """A local or remote branch reference.

    Attributes:
        name: Full ref name (refs/heads/main, refs/remotes/origin/main)
        short_name: Ref name without its namespace prefix
        kind: "local" or "remote"
        remote_name: Owning remote for remote branches
        is_current: True only for the checked-out local branch
        upstream: Upstream short name, if configured
        ahead: Commits ahead of upstream
        behind: Commits behind upstream
        merged: In sync with a configured upstream
        stale: Local branch without upstream
        last_commit_epoch: Committer date as unix seconds
    """

    name: str
    short_name: str
    kind: BranchKind
    remote_name: str | None = None
    is_current: bool = False
    upstream: str | None = None
    ahead: int = 0
    behind: int = 0
    merged: bool = False
    stale: bool = False
    last_commit_epoch: int | None = None


@dataclass(frozen=True, slots=True)
class StashEntry:
    ref: str
    index: int
    message: str
    branch: str | None = None
    date: str | None = None


@dataclass(frozen=True, slots=True)
class WorktreeInfo:
    path: str
    head: str
    branch: str | None = None
    detached: bool = False
    bare: bool = False
    prunable: str | None = None


@dataclass(frozen=True, slots=True)
class MiniLogEntry:
    hash: str
    short_hash: str
    author: str
    relative_date: str
    subject: str


@dataclass(frozen=True, slots=True)
class BranchComparison:
    """Commits unique to each side of a two-branch comparison."""

    left: str
    right: str
    ahead: int
    behind: int
    left_only: tuple[MiniLogEntry, ...] = field(default_factory=tuple)
    right_only: tuple[MiniLogEntry, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class CommitOptions:
    amend: bool = False
    signoff: bool = False
    sign: bool = False
    no_verify: bool = False
    push_after: bool = False
    sync_after: bool = False
