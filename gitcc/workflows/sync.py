"""Synchronize: fetch, reconcile with upstream, push if ahead.

    fetch -> classify -> {rebase | merge | pull | (nothing)} -> push_if_ahead -> done

Divergence (ahead and behind) asks the operator to rebase onto or merge
the upstream. The upstream is checked before that question is asked, so
a branch without one fails up front. Cancelling there ends the workflow
without pushing. Ahead/behind is recomputed after the fetch and again
after the corrective step; push only happens if still ahead.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import StrEnum
from pathlib import Path
from typing import Literal

from gitcc.core.result import Err, Ok, Result
from gitcc.git.errors import GitError, precondition
from gitcc.output.prompt import PromptOption
from gitcc.workflows.context import WorkflowContext
from gitcc.workflows.errors import WorkflowFailure
from gitcc.workflows.fsm import StepHandler, StepOutcome, advance, finish, run_state_machine

__all__ = ["SyncOutcome", "SyncStep", "SyncWorkflow"]

OPERATION = "Sync"

type Resolution = Literal["rebase", "merge", "pull", "none"]


class SyncStep(StrEnum):
    FETCH = "fetch"
    CLASSIFY = "classify"
    REBASE = "rebase"
    MERGE = "merge"
    PULL = "pull"
    PUSH_IF_AHEAD = "push_if_ahead"


@dataclass(frozen=True, slots=True)
class SyncOutcome:
    """Result of a sync run.

    Attributes:
        root: Repository root
        completed: False when the operator cancelled at the divergence prompt
        resolution: Corrective step taken after the fetch
        pushed: True if a push ran
        upstream: Upstream ref observed after the fetch
    """

    root: Path
    completed: bool = True
    resolution: Resolution = "none"
    pushed: bool = False
    upstream: str | None = None


@dataclass(frozen=True, slots=True)
class _Session:
    step: SyncStep
    outcome: SyncOutcome


type _Step = Result[StepOutcome[_Session], WorkflowFailure]


class SyncWorkflow:
    def __init__(self, ctx: WorkflowContext) -> None:
        self._ctx = ctx
        self._remote = ctx.config.default_remote

    def run(self, root: Path | None = None) -> Result[SyncOutcome, WorkflowFailure]:
        resolved = self._ctx.resolve_root(OPERATION, root)
        if isinstance(resolved, Err):
            return resolved

        handlers: dict[str, StepHandler[_Session]] = {
            SyncStep.FETCH: self._fetch,
            SyncStep.CLASSIFY: self._classify,
            SyncStep.REBASE: self._rebase,
            SyncStep.MERGE: self._merge,
            SyncStep.PULL: self._pull,
            SyncStep.PUSH_IF_AHEAD: self._push_if_ahead,
        }
        result = run_state_machine(
            operation=OPERATION,
            initial_state=_Session(step=SyncStep.FETCH, outcome=SyncOutcome(root=resolved.value)),
            get_step=lambda s: s.step,
            handlers=handlers,
        )
        return result.map(lambda s: s.outcome)

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def _fetch(self, s: _Session) -> _Step:
        self._ctx.console.info(f"Fetching {self._remote}...")
        fetched = self._ctx.service.fetch(s.outcome.root, self._remote, prune=True)
        if isinstance(fetched, Err):
            return self._fail(fetched.error)
        return advance(replace(s, step=SyncStep.CLASSIFY))

    def _classify(self, s: _Session) -> _Step:
        status_r = self._ctx.service.status(s.outcome.root)
        if isinstance(status_r, Err):
            return self._fail(status_r.error)
        status = status_r.value
        outcome = replace(s.outcome, upstream=status.upstream)

        if status.is_diverged:
            if status.upstream is None:
                return self._fail(precondition("no upstream configured", command="sync"))
            choice = self._ctx.prompter.choose(
                f"Branch is diverged ({status.ahead} ahead, {status.behind} behind). "
                "Choose a sync strategy.",
                [
                    PromptOption(value=SyncStep.REBASE, label="Rebase onto upstream"),
                    PromptOption(value=SyncStep.MERGE, label="Merge upstream into current"),
                    PromptOption(value=None, label="Cancel"),
                ],
            )
            if choice is None:
                self._ctx.console.warning("Sync cancelled.")
                return finish(replace(s, outcome=replace(outcome, completed=False)))
            resolution: Resolution = "rebase" if choice == SyncStep.REBASE else "merge"
            return advance(_Session(step=choice, outcome=replace(outcome, resolution=resolution)))

        if status.behind > 0:
            return advance(
                _Session(step=SyncStep.PULL, outcome=replace(outcome, resolution="pull"))
            )

        return advance(_Session(step=SyncStep.PUSH_IF_AHEAD, outcome=outcome))

    def _rebase(self, s: _Session) -> _Step:
        upstream = s.outcome.upstream
        if upstream is None:
            return self._fail(precondition("no upstream configured", command="rebase"))
        self._ctx.console.info(f"Rebasing onto {upstream}...")
        rebased = self._ctx.service.rebase_onto(s.outcome.root, upstream)
        if isinstance(rebased, Err):
            return self._fail(rebased.error)
        return advance(replace(s, step=SyncStep.PUSH_IF_AHEAD))

    def _merge(self, s: _Session) -> _Step:
        upstream = s.outcome.upstream
        if upstream is None:
            return self._fail(precondition("no upstream configured", command="merge"))
        self._ctx.console.info(f"Merging {upstream}...")
        merged = self._ctx.service.merge_into_current(s.outcome.root, upstream)
        if isinstance(merged, Err):
            return self._fail(merged.error)
        return advance(replace(s, step=SyncStep.PUSH_IF_AHEAD))

    def _pull(self, s: _Session) -> _Step:
        rebase = self._ctx.config.pull_rebase
        self._ctx.console.info("Pulling (rebase)..." if rebase else "Pulling...")
        pulled = self._ctx.service.pull(s.outcome.root, rebase=rebase, remote=self._remote)
        if isinstance(pulled, Err):
            return self._fail(pulled.error)
        return advance(replace(s, step=SyncStep.PUSH_IF_AHEAD))

    def _push_if_ahead(self, s: _Session) -> _Step:
        status_r = self._ctx.service.status(s.outcome.root)
        if isinstance(status_r, Err):
            return self._fail(status_r.error)
        if status_r.value.ahead <= 0:
            self._ctx.console.success("Sync complete.")
            return finish(s)

        self._ctx.console.info(f"Pushing {status_r.value.ahead} commit(s)...")
        pushed = self._ctx.service.push(s.outcome.root, self._remote)
        if isinstance(pushed, Err):
            return self._fail(pushed.error)
        self._ctx.console.success("Sync complete.")
        return finish(replace(s, outcome=replace(s.outcome, pushed=True)))

    def _fail(self, error: GitError) -> _Step:
        return Err(WorkflowFailure.from_git_error(OPERATION, error))
