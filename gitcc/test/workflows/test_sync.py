"""Tests for gitcc.workflows.sync."""

from __future__ import annotations

from pathlib import Path

from gitcc.core.config import Config
from gitcc.core.result import Err, Ok
from gitcc.git.classifier import RecoveryAction
from gitcc.git.errors import GitError
from gitcc.git.runner import ScriptedGitRunner, ScriptedReply
from gitcc.git.service import GitService
from gitcc.output.console import MockConsole
from gitcc.output.prompt import MockPrompter
from gitcc.workflows.context import WorkflowContext
from gitcc.workflows.sync import SyncWorkflow

ROOT = Path("/work/app")


def _status(ahead: int, behind: int, upstream: str | None = "origin/main") -> str:
    lines = ["# branch.head main"]
    if upstream is not None:
        lines += [f"# branch.upstream {upstream}", f"# branch.ab +{ahead} -{behind}"]
    return "\n".join(lines)


def _ctx(
    statuses: list[ScriptedReply],
    answers: list[object] | None = None,
    config: Config | None = None,
    **replies: ScriptedReply,
) -> tuple[WorkflowContext, ScriptedGitRunner, MockPrompter]:
    runner = ScriptedGitRunner({"status": statuses, **replies})
    prompter = MockPrompter(answers=list(answers or []))
    ctx = WorkflowContext(
        service=GitService(runner),
        config=config or Config(),
        prompter=prompter,
        console=MockConsole(),
    )
    return ctx, runner, prompter


def _mutations(runner: ScriptedGitRunner) -> list[str]:
    return [c for c in runner.commands if not c.startswith("status")]


class TestDiverged:
    def test_rebase_then_push(self) -> None:
        ctx, runner, prompter = _ctx([_status(2, 1), _status(3, 0)], answers=["Rebase onto upstream"])

        result = SyncWorkflow(ctx).run(ROOT)

        assert isinstance(result, Ok)
        assert result.value.resolution == "rebase"
        assert result.value.pushed is True
        assert _mutations(runner) == ["fetch --prune origin", "rebase origin/main", "push origin"]
        assert "diverged (2 ahead, 1 behind)" in prompter.questions[0]

    def test_merge_choice(self) -> None:
        ctx, runner, _ = _ctx([_status(1, 1), _status(2, 0)], answers=["Merge upstream into current"])

        result = SyncWorkflow(ctx).run(ROOT)

        assert isinstance(result, Ok)
        assert result.value.resolution == "merge"
        assert "merge --no-ff origin/main" in runner.commands

    def test_cancel_never_pushes(self) -> None:
        ctx, runner, _ = _ctx([_status(2, 1)], answers=["Cancel"])

        result = SyncWorkflow(ctx).run(ROOT)

        assert isinstance(result, Ok)
        assert result.value.completed is False
        assert result.value.pushed is False
        assert _mutations(runner) == ["fetch --prune origin"]

    def test_dismissed_prompt_cancels(self) -> None:
        ctx, runner, _ = _ctx([_status(2, 1)])
        result = SyncWorkflow(ctx).run(ROOT)
        assert isinstance(result, Ok)
        assert result.value.completed is False
        assert "push origin" not in runner.commands

    def test_missing_upstream_fails_before_prompt(self) -> None:
        status = "# branch.head main\n# branch.ab +2 -1"
        ctx, runner, prompter = _ctx([status])

        result = SyncWorkflow(ctx).run(ROOT)

        assert isinstance(result, Err)
        assert result.error.is_precondition
        assert result.error.actions == (RecoveryAction.SET_UPSTREAM,)
        assert prompter.questions == []
        assert _mutations(runner) == ["fetch --prune origin"]


class TestLinear:
    def test_behind_pulls_with_configured_mode(self) -> None:
        ctx, runner, _ = _ctx([_status(0, 3), _status(0, 0)], config=Config(pull_rebase=True))

        result = SyncWorkflow(ctx).run(ROOT)

        assert isinstance(result, Ok)
        assert result.value.resolution == "pull"
        assert result.value.pushed is False
        assert _mutations(runner) == ["fetch --prune origin", "pull --rebase origin"]

    def test_behind_merge_pull_by_default(self) -> None:
        ctx, runner, _ = _ctx([_status(0, 3), _status(0, 0)])
        SyncWorkflow(ctx).run(ROOT)
        assert "pull origin" in runner.commands

    def test_ahead_only_pushes(self) -> None:
        ctx, runner, prompter = _ctx([_status(2, 0)])

        result = SyncWorkflow(ctx).run(ROOT)

        assert isinstance(result, Ok)
        assert result.value.resolution == "none"
        assert result.value.pushed is True
        assert _mutations(runner) == ["fetch --prune origin", "push origin"]
        assert prompter.questions == []

    def test_up_to_date_does_nothing(self) -> None:
        ctx, runner, _ = _ctx([_status(0, 0)])
        result = SyncWorkflow(ctx).run(ROOT)
        assert isinstance(result, Ok)
        assert result.value.pushed is False
        assert _mutations(runner) == ["fetch --prune origin"]

    def test_custom_remote(self) -> None:
        ctx, runner, _ = _ctx([_status(1, 0)], config=Config(default_remote="upstream"))
        SyncWorkflow(ctx).run(ROOT)
        assert _mutations(runner) == ["fetch --prune upstream", "push upstream"]


class TestFailures:
    def test_fetch_failure_is_classified(self) -> None:
        ctx, runner, _ = _ctx(
            [_status(0, 0)],
            fetch=GitError(kind="execution", message="fatal: Authentication failed for 'x'"),
        )

        result = SyncWorkflow(ctx).run(ROOT)

        assert isinstance(result, Err)
        assert result.error.operation == "Sync"
        assert result.error.message == "Authentication failed. Check your git credentials."
        assert runner.subcommands() == ["fetch"]

    def test_push_rejection_offers_recovery(self) -> None:
        ctx, _, _ = _ctx(
            [_status(1, 0)],
            push=GitError(kind="execution", message="push failed", stderr="! [rejected] (non-fast-forward)"),
        )

        result = SyncWorkflow(ctx).run(ROOT)

        assert isinstance(result, Err)
        assert result.error.actions == (RecoveryAction.PULL_THEN_PUSH, RecoveryAction.FORCE_WITH_LEASE)

    def test_no_active_repository(self) -> None:
        ctx, runner, _ = _ctx([_status(0, 0)])
        result = SyncWorkflow(ctx).run()
        assert isinstance(result, Err)
        assert "No active repository" in result.error.message
        assert runner.calls == []
