"""Workflow boundary failures."""

from __future__ import annotations

from dataclasses import dataclass, field

from gitcc.git.classifier import RecoveryAction, classify
from gitcc.git.errors import GitError

__all__ = ["WorkflowFailure"]


@dataclass(frozen=True, slots=True)
class WorkflowFailure:
    """A classified failure ready for presentation.

    Attributes:
        operation: Workflow or command label ("Sync", "Smart Checkout")
        message: User-facing message
        actions: Suggested recovery actions, possibly empty
        error: The git error behind the failure, if any
    """

    operation: str
    message: str
    actions: tuple[RecoveryAction, ...] = field(default_factory=tuple)
    error: GitError | None = None

    @classmethod
    def from_git_error(cls, operation: str, error: GitError) -> WorkflowFailure:
        classification = classify(error)
        return cls(
            operation=operation,
            message=classification.message,
            actions=classification.actions,
            error=error,
        )

    @property
    def is_precondition(self) -> bool:
        return self.error is not None and self.error.kind == "precondition"

    def __str__(self) -> str:
        return f"{self.operation} failed: {self.message}"
