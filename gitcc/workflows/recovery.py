"""Run the follow-up an operator picked after a classified failure.

Each ``RecoveryAction`` resolves to a workflow or a single git command.
A label gitcc does not know is ignored.
"""

from __future__ import annotations

import logging
from pathlib import Path

from gitcc.core.result import Err, Ok, Result
from gitcc.git.classifier import RecoveryAction
from gitcc.output.prompt import PromptOption
from gitcc.workflows.checkout import SmartCheckoutWorkflow
from gitcc.workflows.commit import force_push_with_lease
from gitcc.workflows.context import WorkflowContext
from gitcc.workflows.errors import WorkflowFailure

__all__ = ["run_recovery"]

logger = logging.getLogger(__name__)


def run_recovery(
    action: RecoveryAction | str | None,
    ctx: WorkflowContext,
    root: Path | None = None,
) -> Result[bool, WorkflowFailure]:
    """Run ``action``. ``Ok(True)`` if something ran, ``Ok(False)`` otherwise."""
    if not action:
        return Ok(False)

    resolved = ctx.resolve_root(str(action), root)
    if isinstance(resolved, Err):
        return resolved
    repo = resolved.value

    match action:
        case RecoveryAction.SET_UPSTREAM:
            return _set_upstream(ctx, repo)
        case RecoveryAction.SMART_CHECKOUT:
            return _smart_checkout(ctx, repo)
        case RecoveryAction.PULL_THEN_PUSH:
            return _pull_then_push(ctx, repo)
        case RecoveryAction.FORCE_WITH_LEASE:
            return force_push_with_lease(ctx, repo)
        case _:
            logger.debug("ignoring unknown recovery action %r", action)
            return Ok(False)


def _set_upstream(ctx: WorkflowContext, root: Path) -> Result[bool, WorkflowFailure]:
    operation = str(RecoveryAction.SET_UPSTREAM)
    status = ctx.service.status(root)
    if isinstance(status, Err):
        return Err(WorkflowFailure.from_git_error(operation, status.error))
    if status.value.detached:
        return Ok(False)
    branch = status.value.branch

    branches = ctx.service.branches(root, branch)
    if isinstance(branches, Err):
        return Err(WorkflowFailure.from_git_error(operation, branches.error))

    upstream = ctx.prompter.choose(
        f"Select upstream for {branch}",
        [PromptOption(value=b.short_name, label=b.short_name) for b in branches.value if b.kind == "remote"],
    )
    if upstream is None:
        return Ok(False)

    done = ctx.service.set_upstream(root, branch, upstream)
    if isinstance(done, Err):
        return Err(WorkflowFailure.from_git_error(operation, done.error))
    ctx.console.success(f"{branch} now tracks {upstream}.")
    return Ok(True)


def _smart_checkout(ctx: WorkflowContext, root: Path) -> Result[bool, WorkflowFailure]:
    operation = str(RecoveryAction.SMART_CHECKOUT)
    status = ctx.service.status(root)
    if isinstance(status, Err):
        return Err(WorkflowFailure.from_git_error(operation, status.error))

    branches = ctx.service.branches(root, status.value.branch)
    if isinstance(branches, Err):
        return Err(WorkflowFailure.from_git_error(operation, branches.error))

    target = ctx.prompter.choose(
        "Smart checkout target branch",
        [
            PromptOption(value=b.short_name, label=b.short_name)
            for b in branches.value
            if b.kind == "local" and not b.is_current
        ],
    )
    if target is None:
        return Ok(False)

    return SmartCheckoutWorkflow(ctx).run(root, target).map(lambda outcome: outcome.result == "switched")


def _pull_then_push(ctx: WorkflowContext, root: Path) -> Result[bool, WorkflowFailure]:
    operation = str(RecoveryAction.PULL_THEN_PUSH)
    remote = ctx.config.default_remote

    pulled = ctx.service.pull(root, rebase=ctx.config.pull_rebase, remote=remote)
    if isinstance(pulled, Err):
        return Err(WorkflowFailure.from_git_error(operation, pulled.error))
    pushed = ctx.service.push(root, remote)
    if isinstance(pushed, Err):
        return Err(WorkflowFailure.from_git_error(operation, pushed.error))
    ctx.console.success("Pull then push complete.")
    return Ok(True)
