"""Smart checkout: switch branches without losing uncommitted work.

    check_conflicts -> check_dirty -> [auto_stash] -> checkout -> [offer_restore] -> done

A dirty tree is resolved by the configured strategy. ``autoStash`` and
``cancel`` apply without asking; ``ask`` lets the operator pick between
auto-stash, the commit flow (which ends this workflow) and cancel.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from enum import StrEnum
from pathlib import Path
from typing import Literal

from gitcc.core.result import Err, Ok, Result
from gitcc.git.errors import GitError, precondition
from gitcc.output.prompt import PromptOption
from gitcc.workflows.context import WorkflowContext
from gitcc.workflows.errors import WorkflowFailure
from gitcc.workflows.fsm import StepHandler, StepOutcome, advance, finish, run_state_machine

__all__ = ["AUTO_STASH_PREFIX", "CheckoutOutcome", "CheckoutStep", "SmartCheckoutWorkflow", "auto_stash_message"]

OPERATION = "Smart Checkout"
AUTO_STASH_PREFIX = "auto:"
CONFLICTS_MESSAGE = "Resolve conflicts before switching branches."

type CheckoutResult = Literal["switched", "cancelled", "redirected_to_commit"]
type RestoreChoice = Literal["apply", "pop", "later"]


class CheckoutStep(StrEnum):
    CHECK_CONFLICTS = "check_conflicts"
    CHECK_DIRTY = "check_dirty"
    AUTO_STASH = "auto_stash"
    CHECKOUT = "checkout"
    OFFER_RESTORE = "offer_restore"


@dataclass(frozen=True, slots=True)
class CheckoutOutcome:
    """Result of a smart checkout.

    Attributes:
        root: Repository root
        target: Branch the operator asked for
        result: What happened to the working tree
        previous_branch: Branch checked out before the switch
        stash_message: Message of the safety stash, if one was created
        stash_ref: Stash reference the safety stash was found under
        restore: Operator's restore choice, None when no stash was offered
    """

    root: Path
    target: str
    result: CheckoutResult = "switched"
    previous_branch: str | None = None
    stash_message: str | None = None
    stash_ref: str | None = None
    restore: RestoreChoice | None = None


@dataclass(frozen=True, slots=True)
class _Session:
    step: CheckoutStep
    outcome: CheckoutOutcome
    dirty: bool = False


type _Step = Result[StepOutcome[_Session], WorkflowFailure]


def auto_stash_message(branch: str, now: datetime) -> str:
    """Safety stash message: ``auto: <timestamp> <branch>``.

    Colons in the timestamp are replaced so the message stays readable in
    places that split on ``:`` (stash list rows).
    """
    stamp = now.isoformat(timespec="milliseconds").replace("+00:00", "Z").replace(":", "-")
    return f"{AUTO_STASH_PREFIX} {stamp} {branch}"


class SmartCheckoutWorkflow:
    def __init__(
        self,
        ctx: WorkflowContext,
        *,
        now: Callable[[], datetime] = lambda: datetime.now(UTC),
    ) -> None:
        self._ctx = ctx
        self._now = now

    def run(self, root: Path | None, target: str) -> Result[CheckoutOutcome, WorkflowFailure]:
        resolved = self._ctx.resolve_root(OPERATION, root)
        if isinstance(resolved, Err):
            return resolved

        handlers: dict[str, StepHandler[_Session]] = {
            CheckoutStep.CHECK_CONFLICTS: self._check_conflicts,
            CheckoutStep.CHECK_DIRTY: self._check_dirty,
            CheckoutStep.AUTO_STASH: self._auto_stash,
            CheckoutStep.CHECKOUT: self._checkout,
            CheckoutStep.OFFER_RESTORE: self._offer_restore,
        }
        result = run_state_machine(
            operation=OPERATION,
            initial_state=_Session(
                step=CheckoutStep.CHECK_CONFLICTS,
                outcome=CheckoutOutcome(root=resolved.value, target=target),
            ),
            get_step=lambda s: s.step,
            handlers=handlers,
        )
        return result.map(lambda s: s.outcome)

    # -------------------------------------------------------------------------
    # Steps
    # -------------------------------------------------------------------------

    def _check_conflicts(self, s: _Session) -> _Step:
        status_r = self._ctx.service.status(s.outcome.root)
        if isinstance(status_r, Err):
            return self._fail(status_r.error)
        status = status_r.value
        if status.has_conflicts:
            return self._fail(precondition(CONFLICTS_MESSAGE, command="checkout"))

        return advance(
            _Session(
                step=CheckoutStep.CHECK_DIRTY,
                outcome=replace(s.outcome, previous_branch=status.branch),
                dirty=status.is_dirty,
            )
        )

    def _check_dirty(self, s: _Session) -> _Step:
        if not s.dirty:
            return advance(replace(s, step=CheckoutStep.CHECKOUT))

        strategy = self._ctx.config.smart_checkout_strategy
        if strategy == "autoStash":
            action: str | None = "auto"
        elif strategy == "cancel":
            action = None
        else:
            action = self._ctx.prompter.choose(
                "Working tree has changes. Choose a strategy.",
                [
                    PromptOption(value="auto", label="Auto-stash and checkout"),
                    PromptOption(value="commit", label="Open commit flow"),
                    PromptOption(value=None, label="Cancel"),
                ],
            )

        if action == "auto":
            return advance(replace(s, step=CheckoutStep.AUTO_STASH))
        if action == "commit":
            self._ctx.console.info("Commit your changes, then run the checkout again.")
            return finish(replace(s, outcome=replace(s.outcome, result="redirected_to_commit")))

        self._ctx.console.warning("Checkout cancelled.")
        return finish(replace(s, outcome=replace(s.outcome, result="cancelled")))

    def _auto_stash(self, s: _Session) -> _Step:
        message = auto_stash_message(s.outcome.previous_branch or "HEAD", self._now())
        stashed = self._ctx.service.stash_push(s.outcome.root, message, include_untracked=True)
        if isinstance(stashed, Err):
            return self._fail(stashed.error)
        self._ctx.console.info(f"Stashed local changes: {message}")
        return advance(
            replace(s, step=CheckoutStep.CHECKOUT, outcome=replace(s.outcome, stash_message=message))
        )

    def _checkout(self, s: _Session) -> _Step:
        root, target = s.outcome.root, s.outcome.target
        switched = self._ctx.service.checkout(root, target)
        if isinstance(switched, Err):
            return self._fail(switched.error)
        self._ctx.memory.record_checkout(self._ctx.repo_key(root), target)
        self._ctx.console.success(f"Switched to {target}.")

        if s.outcome.stash_message is None:
            return finish(s)
        return advance(replace(s, step=CheckoutStep.OFFER_RESTORE))

    def _offer_restore(self, s: _Session) -> _Step:
        ref = self._find_stash(s.outcome.root, s.outcome.stash_message)
        if ref is None:
            return finish(s)
        outcome = replace(s.outcome, stash_ref=ref)

        choice: RestoreChoice = (
            self._ctx.prompter.choose(
                "Auto-stash created. Apply stash now?",
                [
                    PromptOption(value="apply", label="Apply"),
                    PromptOption(value="pop", label="Pop"),
                    PromptOption(value="later", label="Later"),
                ],
            )
            or "later"
        )
        if choice != "later":
            applied = self._ctx.service.stash_apply(s.outcome.root, ref, pop=choice == "pop")
            if isinstance(applied, Err):
                return self._fail(applied.error)
        else:
            self._ctx.console.info(f"Stash kept as {ref}.")
        return finish(replace(s, outcome=replace(outcome, restore=choice)))

    def _find_stash(self, root: Path, message: str | None) -> str | None:
        if message is None:
            return None
        match self._ctx.service.stashes(root):
            case Err(e):
                self._ctx.console.warning(f"Could not list stashes: {e.message}")
                return None
            case Ok(entries):
                for entry in entries:
                    if entry.message == message or entry.message.endswith(message):
                        return entry.ref
        return None

    def _fail(self, error: GitError) -> _Step:
        return Err(WorkflowFailure.from_git_error(OPERATION, error))
