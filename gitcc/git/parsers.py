"""Translators from git's machine-readable output to records.

Every parser is pure and total: a line it does not recognise is dropped,
it never aborts the whole parse. The input formats are the exact ones
produced by the argument vectors in ``gitcc.git.service``:

- ``status --porcelain=v2 -b``
- ``for-each-ref --format=%(refname)%09%(upstream:short)%09%(upstream:track)%09%(committerdate:unix)``
- ``stash list --date=relative``
- ``log --pretty=format:%H%x09%an%x09%ar%x09%s``
- ``worktree list --porcelain``
"""

from __future__ import annotations

import re
import time

from gitcc.git.models import (
    BranchInfo,
    BranchKind,
    FileChange,
    MiniLogEntry,
    StashEntry,
    StatusInfo,
    WorktreeInfo,
)

__all__ = [
    "DETACHED_BRANCH",
    "format_relative_age",
    "parse_branch_refs",
    "parse_left_right_count",
    "parse_mini_log",
    "parse_stash_list",
    "parse_status",
    "parse_worktrees",
]

DETACHED_BRANCH = "HEAD (detached)"
SHORT_HASH_LENGTH = 8

_LOCAL_PREFIX = "refs/heads/"
_REMOTE_PREFIX = "refs/remotes/"

_AB_AHEAD = re.compile(r"\+(\d+)")
_AB_BEHIND = re.compile(r"-(\d+)")
_TRACK_AHEAD = re.compile(r"(?:ahead |\+)(\d+)")
_TRACK_BEHIND = re.compile(r"(?:behind |-)(\d+)")
_STASH_LINE = re.compile(r"^stash@\{([^}]+)\}:(?:\s*On\s+([^:]+):)?\s*(.+)$")

# Number of space-separated fields preceding the path in each record type.
_PATH_FIELD = {"1": 8, "2": 9, "u": 10}


def _count(pattern: re.Pattern[str], text: str) -> int:
    match = pattern.search(text)
    return int(match.group(1)) if match else 0


def _is_conflict(x: str, y: str) -> bool:
    return x == "U" or y == "U" or (x == "A" and y == "A") or (x == "D" and y == "D")


# -----------------------------------------------------------------------------
# Status
# -----------------------------------------------------------------------------


def parse_status(output: str) -> StatusInfo:
    """Parse ``git status --porcelain=v2 -b`` output.

    Without a ``# branch.head`` header the branch is "HEAD"; without
    ``# branch.ab`` ahead and behind are zero. A file whose status pair
    is a conflict pattern lands in ``conflicts`` only. Otherwise a
    non-empty index side adds it to ``staged`` and a non-empty worktree
    side adds it to ``unstaged``, so a partially staged file is in both.
    """
    branch = "HEAD"
    detached = False
    upstream: str | None = None
    ahead = 0
    behind = 0

    staged: list[FileChange] = []
    unstaged: list[FileChange] = []
    untracked: list[FileChange] = []
    conflicts: list[FileChange] = []

    for line in output.splitlines():
        if not line.strip():
            continue

        if line.startswith("# branch.head "):
            head = line[len("# branch.head ") :].strip()
            detached = head == "(detached)"
            branch = DETACHED_BRANCH if detached else head
            continue

        if line.startswith("# branch.upstream "):
            upstream = line[len("# branch.upstream ") :].strip() or None
            continue

        if line.startswith("# branch.ab "):
            fragment = line[len("# branch.ab ") :]
            ahead = _count(_AB_AHEAD, fragment)
            behind = _count(_AB_BEHIND, fragment)
            continue

        if line.startswith("? "):
            path = line[2:].strip()
            if path:
                untracked.append(FileChange(path=path, section="untracked", x="?", y="?"))
            continue

        kind = line[:1]
        if kind not in _PATH_FIELD or line[1:2] != " ":
            continue

        change = _parse_change_record(line, kind)
        if change is None:
            continue

        if kind == "u" or _is_conflict(change.x, change.y):
            conflicts.append(_with_section(change, "conflicts"))
            continue
        if change.x != ".":
            staged.append(_with_section(change, "staged"))
        if change.y != ".":
            unstaged.append(_with_section(change, "unstaged"))

    return StatusInfo(
        branch=branch,
        detached=detached,
        upstream=upstream,
        ahead=ahead,
        behind=behind,
        staged=tuple(staged),
        unstaged=tuple(unstaged),
        untracked=tuple(untracked),
        conflicts=tuple(conflicts),
    )


def _parse_change_record(line: str, kind: str) -> FileChange | None:
    fields = line.split(" ", _PATH_FIELD[kind])
    if len(fields) <= _PATH_FIELD[kind]:
        return None

    xy = fields[1]
    if len(xy) != 2:
        return None

    path = fields[_PATH_FIELD[kind]]
    original_path: str | None = None
    if kind == "2" and "\t" in path:
        path, original_path = path.split("\t", 1)
    if not path:
        return None

    return FileChange(path=path, section="unstaged", x=xy[0], y=xy[1], original_path=original_path)


def _with_section(change: FileChange, section: str) -> FileChange:
    return FileChange(
        path=change.path,
        section=section,  # type: ignore[arg-type]
        x=change.x,
        y=change.y,
        original_path=change.original_path,
    )


# -----------------------------------------------------------------------------
# Branches
# -----------------------------------------------------------------------------


def parse_branch_refs(output: str, current_branch: str | None = None) -> list[BranchInfo]:
    """Parse tab-separated for-each-ref rows into branches.

    Rows are (refname, upstream short name or "-" / empty, tracking
    annotation, committer epoch). Rows without a usable ref name are
    skipped.
    """
    branches: list[BranchInfo] = []

    for line in output.splitlines():
        if not line:
            continue
        fields = line.split("\t")
        ref_name = fields[0].strip()
        if not ref_name.startswith("refs/"):
            continue

        upstream_raw = fields[1].strip() if len(fields) > 1 else ""
        track_raw = fields[2] if len(fields) > 2 else ""
        epoch_raw = fields[3].strip() if len(fields) > 3 else ""

        kind: BranchKind = "remote" if ref_name.startswith(_REMOTE_PREFIX) else "local"
        short = ref_name.removeprefix(_LOCAL_PREFIX).removeprefix(_REMOTE_PREFIX).strip()
        if not short:
            continue

        upstream = upstream_raw if upstream_raw and upstream_raw != "-" else None
        ahead = _count(_TRACK_AHEAD, track_raw)
        behind = _count(_TRACK_BEHIND, track_raw)

        branches.append(
            BranchInfo(
                name=ref_name,
                short_name=short,
                kind=kind,
                remote_name=short.split("/", 1)[0] if kind == "remote" else None,
                is_current=kind == "local" and short == current_branch,
                upstream=upstream,
                ahead=ahead,
                behind=behind,
                merged=ahead == 0 and behind == 0 and upstream is not None,
                stale=kind == "local" and upstream is None,
                last_commit_epoch=_parse_epoch(epoch_raw),
            )
        )

    return branches


def _parse_epoch(raw: str) -> int | None:
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value > 0 else None


# -----------------------------------------------------------------------------
# Stashes
# -----------------------------------------------------------------------------


def parse_stash_list(output: str) -> list[StashEntry]:
    """Parse ``git stash list`` lines of the form ``stash@{N}: [On b:] msg``.

    With ``--date=relative`` git renders the selector as a date
    (``stash@{2 hours ago}``). Such rows keep the date and take their
    index from their position, which is what git uses for ``stash@{N}``.
    """
    entries: list[StashEntry] = []

    for line in output.splitlines():
        match = _STASH_LINE.match(line)
        if match is None:
            continue

        selector, branch, message = match.group(1), match.group(2), match.group(3)
        date: str | None = None
        if selector.isdigit():
            index = int(selector)
        else:
            index = len(entries)
            date = selector

        entries.append(
            StashEntry(
                ref=f"stash@{{{index}}}",
                index=index,
                message=message.strip(),
                branch=branch.strip() if branch else None,
                date=date,
            )
        )

    return entries


# -----------------------------------------------------------------------------
# Log
# -----------------------------------------------------------------------------


def parse_mini_log(output: str) -> list[MiniLogEntry]:
    """Parse ``hash<TAB>author<TAB>age<TAB>subject`` rows."""
    entries: list[MiniLogEntry] = []

    for line in output.splitlines():
        if not line:
            continue
        fields = line.split("\t", 3)
        commit = fields[0].strip()
        if not commit:
            continue
        entries.append(
            MiniLogEntry(
                hash=commit,
                short_hash=commit[:SHORT_HASH_LENGTH],
                author=fields[1] if len(fields) > 1 else "unknown",
                relative_date=fields[2] if len(fields) > 2 else "unknown",
                subject=fields[3] if len(fields) > 3 else "",
            )
        )

    return entries


def format_relative_age(epoch_seconds: int | None, now: float | None = None) -> str:
    """Humanize an epoch as "42s", "5m", "3h" or "12d"."""
    if not epoch_seconds:
        return "unknown"

    current = time.time() if now is None else now
    diff = max(1, int(current - epoch_seconds))
    if diff < 60:
        return f"{diff}s"
    if diff < 3600:
        return f"{diff // 60}m"
    if diff < 86400:
        return f"{diff // 3600}h"
    return f"{diff // 86400}d"


def parse_left_right_count(output: str) -> tuple[int, int]:
    """Parse ``rev-list --left-right --count`` output ("3\t1")."""
    parts = output.split()
    try:
        left = int(parts[0]) if parts else 0
        right = int(parts[1]) if len(parts) > 1 else 0
    except ValueError:
        return (0, 0)
    return (left, right)


# -----------------------------------------------------------------------------
# Worktrees
# -----------------------------------------------------------------------------


def parse_worktrees(output: str) -> list[WorktreeInfo]:
    """Parse ``git worktree list --porcelain`` blocks.

    A block is emitted at a blank line or end of input, and only when it
    carried both a ``worktree`` path and a ``HEAD``.
    """
    worktrees: list[WorktreeInfo] = []
    current: dict[str, str | bool] = {}

    def flush() -> None:
        path = current.get("path")
        head = current.get("head")
        if isinstance(path, str) and isinstance(head, str):
            branch = current.get("branch")
            prunable = current.get("prunable")
            worktrees.append(
                WorktreeInfo(
                    path=path,
                    head=head,
                    branch=branch if isinstance(branch, str) else None,
                    detached=bool(current.get("detached")),
                    bare=bool(current.get("bare")),
                    prunable=prunable if isinstance(prunable, str) else None,
                )
            )
        current.clear()

    for line in output.splitlines():
        if not line.strip():
            flush()
            continue
        if line.startswith("worktree "):
            current["path"] = line[len("worktree ") :].strip()
        elif line.startswith("HEAD "):
            current["head"] = line[len("HEAD ") :].strip()
        elif line.startswith("branch "):
            current["branch"] = line[len("branch ") :].strip().removeprefix(_LOCAL_PREFIX)
        elif line == "detached":
            current["detached"] = True
        elif line == "bare":
            current["bare"] = True
        elif line.startswith("prunable"):
            current["prunable"] = line[len("prunable") :].strip()
    flush()

    return worktrees
