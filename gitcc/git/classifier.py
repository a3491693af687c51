"""Map git failures to user-facing messages and recovery actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum

from gitcc.git.errors import GitError

__all__ = ["Classification", "RecoveryAction", "classify", "classify_text"]


class RecoveryAction(StrEnum):
    """Follow-up an operator can pick after a failure."""

    SET_UPSTREAM = "Set Upstream"
    SMART_CHECKOUT = "Smart Checkout"
    PULL_THEN_PUSH = "Pull then Push"
    FORCE_WITH_LEASE = "Force with Lease"


@dataclass(frozen=True, slots=True)
class Classification:
    message: str
    actions: tuple[RecoveryAction, ...] = field(default_factory=tuple)


@dataclass(frozen=True, slots=True)
class _Rule:
    needles: tuple[str, ...]
    message: str
    actions: tuple[RecoveryAction, ...] = ()


# First match wins.
_RULES: tuple[_Rule, ...] = (
    _Rule(("not a git repository",), "Selected folder is not a Git repository."),
    _Rule(
        ("no upstream configured",),
        "No upstream configured for this branch.",
        (RecoveryAction.SET_UPSTREAM,),
    ),
    _Rule(
        ("could not read from remote repository", "authentication failed"),
        "Authentication failed. Check your git credentials.",
    ),
    _Rule(("pathspec",), "Branch or file was not found. Refresh and retry."),
    _Rule(("nothing to commit",), "Nothing to commit. Stage changes first."),
    _Rule(
        ("merge conflict",),
        "Repository has conflicts. Resolve conflicts before continuing.",
    ),
    _Rule(
        ("would be overwritten by checkout",),
        "Checkout would overwrite local changes.",
        (RecoveryAction.SMART_CHECKOUT,),
    ),
    _Rule(
        ("non-fast-forward",),
        "Push rejected (non-fast-forward).",
        (RecoveryAction.PULL_THEN_PUSH, RecoveryAction.FORCE_WITH_LEASE),
    ),
)


def classify_text(message: str, stderr: str = "") -> Classification:
    """Classify raw failure text; unmatched text passes through unchanged."""
    source = f"{message}\n{stderr}".casefold()
    for rule in _RULES:
        if any(needle in source for needle in rule.needles):
            return Classification(message=rule.message, actions=rule.actions)
    return Classification(message=message)


def classify(error: GitError) -> Classification:
    return classify_text(error.message, error.stderr)
