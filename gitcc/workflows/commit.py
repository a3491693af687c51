"""Commit staged changes, then optionally push or sync.

Also hosts the guarded force push, which shares the push-side config.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from gitcc.core.config import PostCommitAction
from gitcc.core.result import Err, Ok, Result
from gitcc.git.errors import precondition
from gitcc.git.models import CommitOptions
from gitcc.workflows.context import WorkflowContext
from gitcc.workflows.errors import WorkflowFailure
from gitcc.workflows.sync import SyncOutcome, SyncWorkflow

__all__ = ["CommitOutcome", "CommitWorkflow", "force_push_with_lease", "post_commit_action"]


@dataclass(frozen=True, slots=True)
class CommitOutcome:
    root: Path
    message: str
    post_action: PostCommitAction = "none"
    pushed: bool = False
    sync: SyncOutcome | None = None


def post_commit_action(options: CommitOptions, configured: PostCommitAction) -> PostCommitAction:
    """Per-commit flags win over the configured default; sync beats push."""
    if options.sync_after:
        return "sync"
    if options.push_after:
        return "push"
    return configured


class CommitWorkflow:
    OPERATION = "Commit"

    def __init__(self, ctx: WorkflowContext) -> None:
        self._ctx = ctx

    def run(
        self,
        root: Path | None,
        message: str,
        options: CommitOptions | None = None,
    ) -> Result[CommitOutcome, WorkflowFailure]:
        options = options or CommitOptions()
        resolved = self._ctx.resolve_root(self.OPERATION, root)
        if isinstance(resolved, Err):
            return resolved
        repo = resolved.value

        text = message.strip()
        if not text:
            return self._precondition("Commit message is required.")

        match self._ctx.service.status(repo):
            case Err(e):
                return Err(WorkflowFailure.from_git_error(self.OPERATION, e))
            case Ok(status) if not status.staged:
                return self._precondition("Nothing staged. Stage files before committing.")
            case _:
                pass

        committed = self._ctx.service.commit(repo, text, options)
        if isinstance(committed, Err):
            return Err(WorkflowFailure.from_git_error(self.OPERATION, committed.error))

        action = post_commit_action(options, self._ctx.config.post_commit_action)
        outcome = CommitOutcome(root=repo, message=text, post_action=action)

        if action == "push":
            pushed = self._ctx.service.push(repo, self._ctx.config.default_remote)
            if isinstance(pushed, Err):
                return Err(WorkflowFailure.from_git_error(self.OPERATION, pushed.error))
            outcome = CommitOutcome(root=repo, message=text, post_action=action, pushed=True)
        elif action == "sync":
            synced = SyncWorkflow(self._ctx).run(repo)
            if isinstance(synced, Err):
                return synced
            outcome = CommitOutcome(
                root=repo,
                message=text,
                post_action=action,
                pushed=synced.value.pushed,
                sync=synced.value,
            )

        self._ctx.console.success("Commit complete.")
        return Ok(outcome)

    def _precondition(self, message: str) -> Result[CommitOutcome, WorkflowFailure]:
        return Err(WorkflowFailure.from_git_error(self.OPERATION, precondition(message, command="commit")))


def force_push_with_lease(ctx: WorkflowContext, root: Path | None = None) -> Result[bool, WorkflowFailure]:
    """Push with ``--force-with-lease``.

    When ``confirm_force_push`` is set the operator must confirm first.
    Returns ``Ok(False)`` if they decline.
    """
    operation = "Force Push with Lease"
    resolved = ctx.resolve_root(operation, root)
    if isinstance(resolved, Err):
        return resolved

    if ctx.config.confirm_force_push and not ctx.prompter.confirm(
        "Force push with lease can overwrite remote history. Continue?"
    ):
        ctx.console.warning("Force push cancelled.")
        return Ok(False)

    pushed = ctx.service.push(resolved.value, ctx.config.default_remote, force_with_lease=True)
    if isinstance(pushed, Err):
        return Err(WorkflowFailure.from_git_error(operation, pushed.error))
    ctx.console.success("Force push with lease complete.")
    return Ok(True)
