from __future__ import annotations

import os
from pathlib import Path

import pytest
import typer
from typer.testing import CliRunner

from gitcc import __version__
from gitcc.cli.app import app
from gitcc.core.errors import ErrorCode

runner = CliRunner()


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_help_lists_commands() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    for name in ("status", "repos", "branches", "stashes", "worktrees", "stage", "discard", "show", "watch"):
        assert name in result.output


def test_missing_config_is_user_error(tmp_path: Path) -> None:
    result = runner.invoke(app, ["--config", str(tmp_path / "nope.toml"), "status"])
    assert result.exit_code == int(ErrorCode.USER_ERROR)


def test_config_option_sets_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import gitcc.cli.commands.status as status_cmd

    config = tmp_path / "gitcc.toml"
    config.write_text("[gitcc]\n", encoding="utf-8")
    monkeypatch.setenv("GITCC_CONFIG", str(tmp_path / "previous.toml"))
    seen: list[str | None] = []

    def fake_build_context(*_: object) -> None:
        seen.append(os.environ.get("GITCC_CONFIG"))
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    monkeypatch.setattr(status_cmd, "build_context", fake_build_context)
    result = runner.invoke(app, ["--config", str(config), "repos"])

    assert result.exit_code == int(ErrorCode.ENV_ERROR)
    assert seen == [str(config.resolve())]


def test_bare_group_lists(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    import gitcc.cli.commands.views as views_cmd

    seen: list[Path | None] = []
    monkeypatch.setattr(views_cmd, "stashes", lambda repo: seen.append(repo))

    result = runner.invoke(app, ["stashes", "-C", str(tmp_path)])

    assert result.exit_code == 0
    assert seen == [tmp_path]


def test_group_subcommand_skips_listing(monkeypatch: pytest.MonkeyPatch) -> None:
    import gitcc.cli.commands.manage as manage_cmd
    import gitcc.cli.commands.views as views_cmd

    listed: list[Path | None] = []
    monkeypatch.setattr(views_cmd, "stashes", lambda repo: listed.append(repo))

    def fake_build_context(*_: object) -> None:
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    monkeypatch.setattr(manage_cmd, "build_context", fake_build_context)
    result = runner.invoke(app, ["stashes", "drop", "stash@{0}", "--yes"])

    assert result.exit_code == int(ErrorCode.ENV_ERROR)
    assert listed == []
