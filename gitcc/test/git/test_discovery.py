"""Tests for gitcc.git.discovery."""

from __future__ import annotations

from pathlib import Path

from gitcc.git.discovery import discover_repositories, find_repos


def _make_repo(path: Path, *, worktree_file: bool = False) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    if worktree_file:
        (path / ".git").write_text("gitdir: /elsewhere/.git/worktrees/x\n", encoding="utf-8")
    else:
        (path / ".git").mkdir()
    return path


class _Resolver:
    def __init__(self, top: Path | None) -> None:
        self.top = top

    def top_level(self, path: Path) -> Path | None:
        return self.top


class TestFindRepos:
    def test_finds_dirs_and_git_files(self, tmp_path: Path) -> None:
        a = _make_repo(tmp_path / "a")
        b = _make_repo(tmp_path / "nested" / "b", worktree_file=True)
        (tmp_path / "plain").mkdir()

        assert sorted(find_repos(tmp_path)) == sorted([a, b])

    def test_skips_node_modules(self, tmp_path: Path) -> None:
        _make_repo(tmp_path / "node_modules" / "dep")
        assert find_repos(tmp_path) == []

    def test_limit(self, tmp_path: Path) -> None:
        for i in range(5):
            _make_repo(tmp_path / f"r{i}")
        assert len(find_repos(tmp_path, limit=3)) == 3

    def test_missing_base(self, tmp_path: Path) -> None:
        assert find_repos(tmp_path / "missing") == []


class TestDiscoverRepositories:
    def test_adds_enclosing_top_level_and_dedups(self, tmp_path: Path) -> None:
        outer = _make_repo(tmp_path / "outer")
        inner = _make_repo(outer / "libs" / "inner")

        found = discover_repositories([outer / "libs"], _Resolver(outer))

        assert found == sorted([outer.resolve(), inner.resolve()], key=str)

    def test_without_resolver(self, tmp_path: Path) -> None:
        repo = _make_repo(tmp_path / "solo")
        assert discover_repositories([tmp_path, tmp_path]) == [repo.resolve()]
