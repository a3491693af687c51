"""Per-repository git operations.

``GitService`` owns the argument vectors gitcc sends to git and feeds the
output through the parsers. Read queries that are expensive and polled
often (branch lists, log slices) are memoized for a few seconds. Any
mutating subcommand drops that repository's memoized entries and tells
mutation listeners (the registry) so their snapshots are recomputed.

Usage:
    service = GitService(GitRunner())
    match service.status(Path("/path/to/repo")):
        case Ok(status):
            print(status.branch, status.ahead, status.behind)
        case Err(e):
            print(e.message)
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

from gitcc.core.result import Err, Ok, Result
from gitcc.git.errors import GitError
from gitcc.git.models import (
    BranchComparison,
    BranchInfo,
    CommitOptions,
    MiniLogEntry,
    RepositoryInfo,
    StashEntry,
    StatusInfo,
    WorktreeInfo,
    repository_id,
)
from gitcc.git.parsers import (
    parse_branch_refs,
    parse_left_right_count,
    parse_mini_log,
    parse_stash_list,
    parse_status,
    parse_worktrees,
)
from gitcc.git.runner import GitRunnerProtocol
from gitcc.state.cache import StateStore

__all__ = ["MUTATING_COMMANDS", "GitService", "MutationListener", "is_mutating"]

logger = logging.getLogger(__name__)

MUTATING_COMMANDS = frozenset(
    {
        "checkout",
        "commit",
        "merge",
        "rebase",
        "pull",
        "push",
        "branch",
        "stash",
        "restore",
        "add",
        "clean",
        "fetch",
        "worktree",
    }
)

# Read-only forms of otherwise mutating subcommands.
_READ_ONLY_FORMS = frozenset({("stash", "list"), ("stash", "show"), ("worktree", "list")})

BRANCHES_MAX_AGE = 3.0
MINI_LOG_MAX_AGE = 4.0

BRANCH_FORMAT = "%(refname)%09%(upstream:short)%09%(upstream:track)%09%(committerdate:unix)"
LOG_FORMAT = "%H%x09%an%x09%ar%x09%s"

MutationListener = Callable[[Path], None]


class GitService:
    """Git operations for any number of repository roots."""

    def __init__(
        self,
        runner: GitRunnerProtocol,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._runner = runner
        self._branch_cache: StateStore[tuple[BranchInfo, ...]] = StateStore(clock=clock)
        self._log_cache: StateStore[tuple[MiniLogEntry, ...]] = StateStore(clock=clock)
        self._listeners: list[MutationListener] = []

    # -------------------------------------------------------------------------
    # Plumbing
    # -------------------------------------------------------------------------

    def add_mutation_listener(self, listener: MutationListener) -> Callable[[], None]:
        """Call ``listener(root)`` after every mutating git command."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def run(self, root: Path, args: list[str]) -> Result[str, GitError]:
        """Run git in ``root``, invalidating cached state on mutation."""
        mutating = is_mutating(args)
        if mutating:
            self.invalidate(root)

        result = self._runner.run(root, args)

        if mutating:
            self.invalidate(root)
            for listener in list(self._listeners):
                listener(root)
        return result

    def invalidate(self, root: Path) -> None:
        prefix = _key_prefix(root)
        dropped = self._branch_cache.invalidate_prefix(prefix)
        dropped += self._log_cache.invalidate_prefix(prefix)
        if dropped:
            logger.debug("dropped %d cached entries for %s", dropped, root)

    def _unit(self, root: Path, args: list[str]) -> Result[None, GitError]:
        return self.run(root, args).map(lambda _: None)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def status(self, root: Path) -> Result[StatusInfo, GitError]:
        return self.run(root, ["status", "--porcelain=v2", "-b"]).map(parse_status)

    def repository_info(self, root: Path) -> Result[RepositoryInfo, GitError]:
        """Compute the full summary for one repository root."""
        match self.status(root):
            case Err(e):
                return Err(e)
            case Ok(status):
                return Ok(
                    RepositoryInfo(
                        id=repository_id(root),
                        root=root,
                        name=root.name,
                        current_branch=status.branch,
                        detached=status.detached,
                        upstream=status.upstream,
                        ahead=status.ahead,
                        behind=status.behind,
                        dirty_count=status.dirty_count,
                        has_submodules=self.has_submodules(root),
                    )
                )

    def branches(
        self, root: Path, current_branch: str | None = None
    ) -> Result[list[BranchInfo], GitError]:
        key = f"{_key_prefix(root)}branches:{current_branch or ''}"
        cached = self._branch_cache.get_fresh(key, BRANCHES_MAX_AGE)
        if cached is not None:
            return Ok(list(cached))

        result = self.run(
            root,
            ["for-each-ref", f"--format={BRANCH_FORMAT}", "refs/heads", "refs/remotes"],
        )
        match result:
            case Err(e):
                return Err(e)
            case Ok(output):
                branches = parse_branch_refs(output, current_branch)
                self._branch_cache.set(key, tuple(branches))
                return Ok(branches)

    def mini_log(
        self, root: Path, ref: str = "HEAD", limit: int = 20
    ) -> Result[list[MiniLogEntry], GitError]:
        key = f"{_key_prefix(root)}minilog:{ref}:{limit}"
        cached = self._log_cache.get_fresh(key, MINI_LOG_MAX_AGE)
        if cached is not None:
            return Ok(list(cached))

        match self._log_range(root, ref, limit):
            case Err(e):
                return Err(e)
            case Ok(entries):
                self._log_cache.set(key, tuple(entries))
                return Ok(entries)

    def _log_range(self, root: Path, rev_range: str, limit: int) -> Result[list[MiniLogEntry], GitError]:
        return self.run(
            root,
            ["log", rev_range, "-n", str(limit), "--date=relative", f"--pretty=format:{LOG_FORMAT}"],
        ).map(parse_mini_log)

    def stashes(self, root: Path) -> Result[list[StashEntry], GitError]:
        return self.run(root, ["stash", "list", "--date=relative"]).map(parse_stash_list)

    def worktrees(self, root: Path) -> Result[list[WorktreeInfo], GitError]:
        return self.run(root, ["worktree", "list", "--porcelain"]).map(parse_worktrees)

    def compare_branches(
        self, root: Path, left: str, right: str, limit: int = 20
    ) -> Result[BranchComparison, GitError]:
        counts = self.run(root, ["rev-list", "--left-right", "--count", f"{left}...{right}"])
        if isinstance(counts, Err):
            return counts
        ahead, behind = parse_left_right_count(counts.value)

        left_only = self._log_range(root, f"{right}..{left}", limit)
        if isinstance(left_only, Err):
            return left_only
        right_only = self._log_range(root, f"{left}..{right}", limit)
        if isinstance(right_only, Err):
            return right_only

        return Ok(
            BranchComparison(
                left=left,
                right=right,
                ahead=ahead,
                behind=behind,
                left_only=tuple(left_only.value),
                right_only=tuple(right_only.value),
            )
        )

    def diff_summary(self, root: Path, left: str, right: str) -> Result[str, GitError]:
        return self.run(root, ["diff", "--stat", f"{left}..{right}"])

    def view_log(self, root: Path, scope: str | None = None) -> Result[str, GitError]:
        args = ["log", "--oneline", "--decorate", "-n", "100"]
        if scope:
            args += ["--", scope]
        return self.run(root, args)

    def commit_details(self, root: Path, commit: str) -> Result[str, GitError]:
        return self.run(root, ["show", "--stat", "--patch", "--decorate", commit])

    def stash_show_patch(self, root: Path, ref: str) -> Result[str, GitError]:
        return self.run(root, ["stash", "show", "-p", ref])

    def has_conflicts(self, root: Path) -> Result[bool, GitError]:
        return self.status(root).map(lambda s: s.has_conflicts)

    def merge_in_progress(self, root: Path) -> bool:
        return isinstance(self.run(root, ["rev-parse", "-q", "--verify", "MERGE_HEAD"]), Ok)

    def has_submodules(self, root: Path) -> bool:
        return (root / ".gitmodules").is_file()

    def top_level(self, path: Path) -> Path | None:
        """Repository root containing ``path``, or None outside a repository."""
        match self.run(path, ["rev-parse", "--show-toplevel"]):
            case Ok(output) if output.strip():
                return Path(output.strip())
            case _:
                return None

    # -------------------------------------------------------------------------
    # Remote
    # -------------------------------------------------------------------------

    def fetch(self, root: Path, remote: str | None = None, *, prune: bool = True) -> Result[None, GitError]:
        args = ["fetch"]
        if prune:
            args.append("--prune")
        if remote:
            args.append(remote)
        return self._unit(root, args)

    def pull(self, root: Path, *, rebase: bool, remote: str | None = None) -> Result[None, GitError]:
        args = ["pull"]
        if rebase:
            args.append("--rebase")
        if remote:
            args.append(remote)
        return self._unit(root, args)

    def push(
        self, root: Path, remote: str | None = None, *, force_with_lease: bool = False
    ) -> Result[None, GitError]:
        args = ["push"]
        if force_with_lease:
            args.append("--force-with-lease")
        if remote:
            args.append(remote)
        return self._unit(root, args)

    # -------------------------------------------------------------------------
    # Branches
    # -------------------------------------------------------------------------

    def checkout(self, root: Path, branch: str) -> Result[None, GitError]:
        return self._unit(root, ["checkout", branch])

    def checkout_commit(self, root: Path, commit: str) -> Result[None, GitError]:
        return self._unit(root, ["checkout", commit])

    def create_branch(self, root: Path, name: str, *, checkout: bool = True) -> Result[None, GitError]:
        args = ["checkout", "-b", name] if checkout else ["branch", name]
        return self._unit(root, args)

    def create_branch_from(self, root: Path, name: str, from_ref: str) -> Result[None, GitError]:
        return self._unit(root, ["checkout", "-b", name, from_ref])

    def rename_branch(self, root: Path, old: str, new: str) -> Result[None, GitError]:
        return self._unit(root, ["branch", "-m", old, new])

    def delete_branch(self, root: Path, name: str) -> Result[None, GitError]:
        return self._unit(root, ["branch", "-D", name])

    def merge_into_current(self, root: Path, ref: str) -> Result[None, GitError]:
        return self._unit(root, ["merge", "--no-ff", ref])

    def rebase_onto(self, root: Path, ref: str) -> Result[None, GitError]:
        return self._unit(root, ["rebase", ref])

    def set_upstream(self, root: Path, branch: str, upstream: str) -> Result[None, GitError]:
        return self._unit(root, ["branch", "--set-upstream-to", upstream, branch])

    def abort_merge_or_rebase(self, root: Path) -> Result[None, GitError]:
        merge = self._unit(root, ["merge", "--abort"])
        if isinstance(merge, Ok):
            return merge
        return self._unit(root, ["rebase", "--abort"])

    # -------------------------------------------------------------------------
    # Index and working tree
    # -------------------------------------------------------------------------

    def commit(self, root: Path, message: str, options: CommitOptions) -> Result[None, GitError]:
        args = ["commit", "-m", message]
        if options.amend:
            args.append("--amend")
        if options.signoff:
            args.append("--signoff")
        if options.sign:
            args.append("-S")
        if options.no_verify:
            args.append("--no-verify")
        return self._unit(root, args)

    def stage(self, root: Path, path: str) -> Result[None, GitError]:
        return self._unit(root, ["add", "--", path])

    def unstage(self, root: Path, path: str) -> Result[None, GitError]:
        return self._unit(root, ["restore", "--staged", "--", path])

    def stage_all(self, root: Path) -> Result[None, GitError]:
        return self._unit(root, ["add", "-A"])

    def unstage_all(self, root: Path) -> Result[None, GitError]:
        return self._unit(root, ["restore", "--staged", "."])

    def discard(self, root: Path, path: str) -> Result[None, GitError]:
        return self._unit(root, ["restore", "--", path])

    def discard_all(self, root: Path) -> Result[None, GitError]:
        restored = self._unit(root, ["restore", "--worktree", "--", "."])
        if isinstance(restored, Err):
            return restored
        return self._unit(root, ["clean", "-fd"])

    # -------------------------------------------------------------------------
    # Stash
    # -------------------------------------------------------------------------

    def stash_push(
        self,
        root: Path,
        message: str | None = None,
        *,
        keep_index: bool = False,
        include_untracked: bool = False,
    ) -> Result[None, GitError]:
        args = ["stash", "push"]
        if keep_index:
            args.append("--keep-index")
        if include_untracked:
            args.append("--include-untracked")
        if message:
            args += ["-m", message]
        return self._unit(root, args)

    def stash_apply(self, root: Path, ref: str, *, pop: bool) -> Result[None, GitError]:
        return self._unit(root, ["stash", "pop" if pop else "apply", ref])

    def stash_drop(self, root: Path, ref: str) -> Result[None, GitError]:
        return self._unit(root, ["stash", "drop", ref])

    def stash_branch(self, root: Path, branch: str, ref: str) -> Result[None, GitError]:
        return self._unit(root, ["stash", "branch", branch, ref])

    # -------------------------------------------------------------------------
    # Worktrees
    # -------------------------------------------------------------------------

    def prune_worktrees(self, root: Path) -> Result[None, GitError]:
        return self._unit(root, ["worktree", "prune"])

    def create_worktree(self, root: Path, target: Path, branch: str) -> Result[None, GitError]:
        return self._unit(root, ["worktree", "add", str(target), branch])


def is_mutating(args: list[str]) -> bool:
    if not args or args[0] not in MUTATING_COMMANDS:
        return False
    return tuple(args[:2]) not in _READ_ONLY_FORMS


def _key_prefix(root: Path) -> str:
    return f"{repository_id(root)}|"
