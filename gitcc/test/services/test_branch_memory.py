"""Tests for gitcc.services.branch_memory."""

from __future__ import annotations

import json
from pathlib import Path

from gitcc.services.branch_memory import MAX_FAVORITES, MAX_RECENTS, BranchMemory

REPO = "/work/app"


class TestRecents:
    def test_most_recent_first_without_duplicates(self) -> None:
        memory = BranchMemory()
        for branch in ["main", "dev", "main", "feature/x"]:
            memory.record_checkout(REPO, branch)
        assert memory.recents(REPO) == ["feature/x", "main", "dev"]

    def test_capped(self) -> None:
        memory = BranchMemory()
        for i in range(MAX_RECENTS + 5):
            memory.record_checkout(REPO, f"b{i}")
        recents = memory.recents(REPO)
        assert len(recents) == MAX_RECENTS
        assert recents[0] == f"b{MAX_RECENTS + 4}"

    def test_per_repository(self) -> None:
        memory = BranchMemory()
        memory.record_checkout(REPO, "main")
        assert memory.recents("/work/other") == []


class TestFavorites:
    def test_pin_and_unpin(self) -> None:
        memory = BranchMemory()
        memory.pin(REPO, "main")
        memory.pin(REPO, "dev")
        memory.pin(REPO, "main")
        assert memory.favorites(REPO) == ["dev", "main"]
        assert memory.is_favorite(REPO, "dev")

        memory.unpin(REPO, "dev")
        assert memory.favorites(REPO) == ["main"]

    def test_capped(self) -> None:
        memory = BranchMemory()
        for i in range(MAX_FAVORITES + 1):
            memory.pin(REPO, f"b{i}")
        assert len(memory.favorites(REPO)) == MAX_FAVORITES


class TestPersistence:
    def test_round_trip_through_file(self, tmp_path: Path) -> None:
        path = tmp_path / "branch-memory.json"
        memory = BranchMemory(path)
        memory.pin(REPO, "main")
        memory.record_checkout(REPO, "dev")

        reloaded = BranchMemory(path)

        assert reloaded.favorites(REPO) == ["main"]
        assert reloaded.recents(REPO) == ["dev"]
        assert json.loads(path.read_text(encoding="utf-8"))[REPO]["recents"] == ["dev"]

    def test_corrupt_file_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "branch-memory.json"
        path.write_text("{not json", encoding="utf-8")
        memory = BranchMemory(path)
        assert memory.recents(REPO) == []
        memory.record_checkout(REPO, "main")
        assert BranchMemory(path).recents(REPO) == ["main"]
