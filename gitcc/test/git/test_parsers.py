"""Tests for gitcc.git.parsers."""

from __future__ import annotations

import pytest

from gitcc.git.parsers import (
    DETACHED_BRANCH,
    format_relative_age,
    parse_branch_refs,
    parse_left_right_count,
    parse_mini_log,
    parse_stash_list,
    parse_status,
    parse_worktrees,
)

OID = "0" * 40

# =============================================================================
# Status
# =============================================================================


def _ordinary(xy: str, path: str) -> str:
    return f"1 {xy} N... 100644 100644 100644 {OID} {OID} {path}"


class TestParseStatus:
    def test_branch_headers(self) -> None:
        status = parse_status(
            "\n".join(
                [
                    f"# branch.oid {OID}",
                    "# branch.head main",
                    "# branch.upstream origin/main",
                    "# branch.ab +3 -1",
                ]
            )
        )
        assert status.branch == "main"
        assert status.upstream == "origin/main"
        assert (status.ahead, status.behind) == (3, 1)
        assert status.detached is False

    def test_missing_headers_default(self) -> None:
        status = parse_status(_ordinary("M.", "a.py"))
        assert status.branch == "HEAD"
        assert (status.ahead, status.behind) == (0, 0)
        assert status.upstream is None

    def test_detached_head(self) -> None:
        status = parse_status("# branch.head (detached)")
        assert status.detached is True
        assert status.branch == DETACHED_BRANCH

    def test_partially_staged_file_in_both_sections(self) -> None:
        status = parse_status(_ordinary("MM", "both.py"))
        assert [c.path for c in status.staged] == ["both.py"]
        assert [c.path for c in status.unstaged] == ["both.py"]
        assert status.staged[0].section == "staged"
        assert status.unstaged[0].section == "unstaged"

    def test_staged_and_unstaged_sides(self) -> None:
        status = parse_status("\n".join([_ordinary("A.", "new.py"), _ordinary(".M", "edit.py")]))
        assert [c.path for c in status.staged] == ["new.py"]
        assert [c.path for c in status.unstaged] == ["edit.py"]

    def test_staged_plus_unstaged_counts_non_empty_sides(self) -> None:
        lines = [_ordinary("M.", "a"), _ordinary(".D", "b"), _ordinary("RM", "c"), _ordinary("A.", "d")]
        status = parse_status("\n".join(lines))
        assert len(status.staged) + len(status.unstaged) == 5

    @pytest.mark.parametrize("xy", ["UU", "AA", "DD", "AU", "UD"])
    def test_conflict_patterns_are_exclusive(self, xy: str) -> None:
        status = parse_status(_ordinary(xy, "clash.py"))
        assert [c.path for c in status.conflicts] == ["clash.py"]
        assert status.staged == ()
        assert status.unstaged == ()

    def test_unmerged_record(self) -> None:
        line = f"u UU N... 100644 100644 100644 100644 {OID} {OID} {OID} merge me.py"
        status = parse_status(line)
        assert [c.path for c in status.conflicts] == ["merge me.py"]
        assert status.has_conflicts

    def test_rename_record(self) -> None:
        line = f"2 R. N... 100644 100644 100644 {OID} {OID} R100 new name.py\told.py"
        status = parse_status(line)
        assert len(status.staged) == 1
        assert status.staged[0].path == "new name.py"
        assert status.staged[0].original_path == "old.py"

    def test_untracked_and_ignored(self) -> None:
        status = parse_status("? notes.txt\n! build/")
        assert [c.path for c in status.untracked] == ["notes.txt"]
        assert status.dirty_count == 1

    def test_unknown_and_malformed_lines_skipped(self) -> None:
        status = parse_status("garbage\n1 M\n# branch.head dev\n")
        assert status.branch == "dev"
        assert status.dirty_count == 0

    def test_dirty_count_sums_sections(self) -> None:
        lines = [_ordinary("MM", "a"), _ordinary("UU", "b"), "? c"]
        status = parse_status("\n".join(lines))
        assert status.dirty_count == 4


# =============================================================================
# Branches
# =============================================================================


class TestParseBranchRefs:
    def test_local_with_upstream(self) -> None:
        [branch] = parse_branch_refs("refs/heads/main\torigin/main\t[ahead 2, behind 1]\t1700000000", "main")
        assert branch.kind == "local"
        assert branch.short_name == "main"
        assert branch.is_current is True
        assert branch.upstream == "origin/main"
        assert (branch.ahead, branch.behind) == (2, 1)
        assert branch.merged is False
        assert branch.stale is False
        assert branch.last_commit_epoch == 1700000000

    def test_placeholder_upstream_is_stale(self) -> None:
        [branch] = parse_branch_refs("refs/heads/feature/x\t-\t\t1700000000", "main")
        assert branch.upstream is None
        assert branch.stale is True
        assert branch.merged is False
        assert branch.is_current is False

    def test_in_sync_is_merged(self) -> None:
        [branch] = parse_branch_refs("refs/heads/main\torigin/main\t\t1", "main")
        assert branch.merged is True

    def test_remote_branch(self) -> None:
        [branch] = parse_branch_refs("refs/remotes/origin/main\t\t\t1700000000", "main")
        assert branch.kind == "remote"
        assert branch.short_name == "origin/main"
        assert branch.remote_name == "origin"
        assert branch.is_current is False
        assert branch.stale is False

    def test_plus_minus_tokens(self) -> None:
        [branch] = parse_branch_refs("refs/heads/dev\torigin/dev\t+4 -2\t", None)
        assert (branch.ahead, branch.behind) == (4, 2)
        assert branch.last_commit_epoch is None

    def test_malformed_rows_skipped(self) -> None:
        output = "\n".join(["", "not-a-ref\t-\t\t1", "refs/heads/\t-\t\t1", "refs/heads/ok\t-\t\t1"])
        assert [b.short_name for b in parse_branch_refs(output)] == ["ok"]


# =============================================================================
# Stashes
# =============================================================================


class TestParseStashList:
    def test_numeric_selector_with_branch(self) -> None:
        [entry] = parse_stash_list("stash@{0}: On main: auto: 2026-01-01T10-00-00.000Z main")
        assert entry.ref == "stash@{0}"
        assert entry.index == 0
        assert entry.branch == "main"
        assert entry.message == "auto: 2026-01-01T10-00-00.000Z main"

    def test_without_branch(self) -> None:
        [entry] = parse_stash_list("stash@{3}: WIP on dev: abc1234 subject")
        assert entry.index == 3
        assert entry.branch is None
        assert entry.message == "WIP on dev: abc1234 subject"

    def test_relative_date_selector_uses_position(self) -> None:
        entries = parse_stash_list("stash@{2 hours ago}: On main: first\nstash@{3 days ago}: On dev: second")
        assert [e.index for e in entries] == [0, 1]
        assert [e.ref for e in entries] == ["stash@{0}", "stash@{1}"]
        assert entries[1].date == "3 days ago"

    def test_non_matching_rows_skipped(self) -> None:
        assert parse_stash_list("nonsense\n\nstash: broken") == []


# =============================================================================
# Mini log
# =============================================================================


class TestParseMiniLog:
    def test_four_fields(self) -> None:
        commit = "a1b2c3d4e5f6" + "0" * 28
        [entry] = parse_mini_log(f"{commit}\tAda\t2 hours ago\tFix: tabs\tin subject")
        assert entry.short_hash == "a1b2c3d4"
        assert entry.hash.startswith(entry.short_hash)
        assert entry.author == "Ada"
        assert entry.relative_date == "2 hours ago"
        assert entry.subject == "Fix: tabs\tin subject"

    def test_missing_fields_filled(self) -> None:
        [entry] = parse_mini_log("deadbeefcafe")
        assert entry.author == "unknown"
        assert entry.relative_date == "unknown"
        assert entry.subject == ""

    def test_empty_hash_dropped(self) -> None:
        assert parse_mini_log("\tAda\tnow\tsubject") == []


class TestFormatRelativeAge:
    @pytest.mark.parametrize(
        ("age", "expected"),
        [(0, "1s"), (59, "59s"), (60, "1m"), (7200, "2h"), (3 * 86400, "3d")],
    )
    def test_buckets(self, age: int, expected: str) -> None:
        assert format_relative_age(1_000_000 - age, now=1_000_000) == expected

    def test_missing_epoch(self) -> None:
        assert format_relative_age(None) == "unknown"


class TestParseLeftRightCount:
    def test_counts(self) -> None:
        assert parse_left_right_count("3\t1") == (3, 1)

    def test_garbage(self) -> None:
        assert parse_left_right_count("x y") == (0, 0)
        assert parse_left_right_count("") == (0, 0)


# =============================================================================
# Worktrees
# =============================================================================


class TestParseWorktrees:
    def test_two_blocks(self) -> None:
        output = "\n".join(
            [
                "worktree /repo",
                f"HEAD {OID}",
                "branch refs/heads/main",
                "",
                "worktree /repo-hotfix",
                f"HEAD {'1' * 40}",
                "detached",
            ]
        )
        first, second = parse_worktrees(output)
        assert first.branch == "main"
        assert first.detached is False
        assert second.detached is True
        assert second.branch is None
        assert second.path == "/repo-hotfix"

    def test_block_without_head_dropped(self) -> None:
        output = "worktree /bare.git\nbare\n\nworktree /wt\nHEAD abc\nprunable gitdir file points to non-existent location\n"
        [tree] = parse_worktrees(output)
        assert tree.path == "/wt"
        assert tree.prunable == "gitdir file points to non-existent location"

    def test_empty_input(self) -> None:
        assert parse_worktrees("") == []
