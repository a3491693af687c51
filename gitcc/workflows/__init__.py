"""Multi-step git workflows built on ``GitService``."""

from gitcc.workflows.checkout import CheckoutOutcome, SmartCheckoutWorkflow, auto_stash_message
from gitcc.workflows.commit import CommitOutcome, CommitWorkflow, force_push_with_lease
from gitcc.workflows.context import WorkflowContext
from gitcc.workflows.errors import WorkflowFailure
from gitcc.workflows.fsm import StepAdvance, StepFinish, advance, finish, run_state_machine
from gitcc.workflows.recovery import run_recovery
from gitcc.workflows.sync import SyncOutcome, SyncStep, SyncWorkflow

__all__ = [
    "CheckoutOutcome",
    "CommitOutcome",
    "CommitWorkflow",
    "SmartCheckoutWorkflow",
    "StepAdvance",
    "StepFinish",
    "SyncOutcome",
    "SyncStep",
    "SyncWorkflow",
    "WorkflowContext",
    "WorkflowFailure",
    "advance",
    "auto_stash_message",
    "finish",
    "force_push_with_lease",
    "run_recovery",
    "run_state_machine",
]
