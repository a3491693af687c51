"""Tests for gitcc.state.registry."""

from __future__ import annotations

from pathlib import Path

from gitcc.core.result import Err, Result
from gitcc.git.errors import GitError
from gitcc.git.runner import ScriptedGitRunner
from gitcc.git.service import GitService
from gitcc.state.registry import RepositoryRegistry


class _Clock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def _status_count(runner: ScriptedGitRunner) -> int:
    return runner.subcommands().count("status")


class _FailingFor:
    def __init__(self, broken: Path, fallback: ScriptedGitRunner) -> None:
        self._broken = broken
        self._fallback = fallback

    def run(self, root: Path, args: list[str]) -> Result[str, GitError]:
        if root == self._broken:
            return Err(GitError(kind="execution", message="fatal: not a git repository"))
        return self._fallback.run(root, args)


class _Fixture:
    def __init__(self, tmp_path: Path, names: list[str], replies: dict[str, str | GitError] | None = None) -> None:
        self.roots = [tmp_path / name for name in names]
        for root in self.roots:
            root.mkdir(parents=True, exist_ok=True)
        self.runner = ScriptedGitRunner({"status": "# branch.head main", **(replies or {})})
        self.clock = _Clock()
        self.service = GitService(self.runner, clock=self.clock)
        self.discovered = list(self.roots)
        self.registry = RepositoryRegistry(
            self.service, lambda: list(self.discovered), max_workers=2, clock=self.clock
        )


class TestRefresh:
    def test_collection_in_discovery_order(self, tmp_path: Path) -> None:
        fx = _Fixture(tmp_path, ["b", "a"])
        repos = fx.registry.refresh()
        assert [r.name for r in repos] == ["b", "a"]
        assert fx.registry.repositories == repos

    def test_active_defaults_to_first(self, tmp_path: Path) -> None:
        fx = _Fixture(tmp_path, ["a", "b"])
        fx.registry.refresh()
        active = fx.registry.active_repository
        assert active is not None and active.name == "a"
        assert fx.registry.active_id == active.id

    def test_fresh_summaries_reused(self, tmp_path: Path) -> None:
        fx = _Fixture(tmp_path, ["a", "b"])
        fx.registry.refresh()
        fx.clock.now = 2.0
        fx.registry.refresh()
        assert _status_count(fx.runner) == 2

        fx.clock.now = 10.0
        fx.registry.refresh()
        assert _status_count(fx.runner) == 4

    def test_force_recomputes(self, tmp_path: Path) -> None:
        fx = _Fixture(tmp_path, ["a"])
        fx.registry.refresh()
        fx.registry.refresh(force=True)
        assert _status_count(fx.runner) == 2

    def test_failed_repository_dropped(self, tmp_path: Path) -> None:
        fx = _Fixture(tmp_path, ["a"])
        broken = tmp_path / "broken"
        broken.mkdir()
        fx.discovered.insert(0, broken)
        runner = _FailingFor(broken, fx.runner)
        registry = RepositoryRegistry(GitService(runner), lambda: list(fx.discovered))

        repos = registry.refresh()

        assert [r.name for r in repos] == ["a"]
        active = registry.active_repository
        assert active is not None and active.name == "a"

    def test_active_falls_back_when_removed(self, tmp_path: Path) -> None:
        fx = _Fixture(tmp_path, ["a", "b"])
        fx.registry.refresh()
        b_id = fx.registry.repositories[1].id
        assert fx.registry.set_active_repository(b_id)

        fx.discovered = [fx.roots[0]]
        fx.registry.refresh()

        active = fx.registry.active_repository
        assert active is not None and active.name == "a"

    def test_notifies_on_refresh(self, tmp_path: Path) -> None:
        fx = _Fixture(tmp_path, ["a"])
        calls: list[int] = []
        unsubscribe = fx.registry.subscribe(lambda: calls.append(1))
        fx.registry.refresh()
        unsubscribe()
        fx.registry.refresh()
        assert calls == [1]

    def test_mutation_invalidates_summary(self, tmp_path: Path) -> None:
        fx = _Fixture(tmp_path, ["a"])
        fx.registry.refresh()
        fx.service.checkout(fx.roots[0], "dev")
        fx.registry.refresh()
        assert _status_count(fx.runner) == 2


class TestActiveSelection:
    def test_unknown_id_rejected(self, tmp_path: Path) -> None:
        fx = _Fixture(tmp_path, ["a"])
        fx.registry.refresh()
        assert fx.registry.set_active_repository("/nowhere") is False

    def test_longest_prefix_wins(self, tmp_path: Path) -> None:
        fx = _Fixture(tmp_path, ["outer", "outer/vendor/inner"])
        fx.registry.refresh()

        file_in_inner = tmp_path / "outer" / "vendor" / "inner" / "src" / "x.py"
        assert fx.registry.set_active_repository_for_path(file_in_inner) is True
        active = fx.registry.active_repository
        assert active is not None and active.name == "inner"

    def test_no_switch_when_already_active(self, tmp_path: Path) -> None:
        fx = _Fixture(tmp_path, ["a", "b"])
        fx.registry.refresh()
        calls: list[int] = []
        fx.registry.subscribe(lambda: calls.append(1))

        assert fx.registry.set_active_repository_for_path(tmp_path / "a" / "file.txt") is False
        assert calls == []
        assert fx.registry.set_active_repository_for_path(tmp_path / "b") is True
        assert calls == [1]

    def test_path_outside_all_repositories(self, tmp_path: Path) -> None:
        fx = _Fixture(tmp_path, ["a"])
        fx.registry.refresh()
        assert fx.registry.set_active_repository_for_path(tmp_path / "elsewhere") is False
