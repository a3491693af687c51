"""Typed git failures."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

__all__ = ["GitError", "GitErrorKind", "precondition"]

type GitErrorKind = Literal["execution", "precondition"]


@dataclass(frozen=True, slots=True)
class GitError:
    """Error from a git operation.

    ``execution`` errors come from a git process that failed to spawn or
    exited non-zero. ``precondition`` errors are detected before git is
    invoked (unresolved conflicts, missing upstream, nothing staged).

    Attributes:
        kind: Failure category
        message: Human-readable summary
        stderr: Captured standard error, empty for preconditions
        exit_code: Process exit code when one was produced
        command: The git subcommand line that failed
    """

    kind: GitErrorKind
    message: str
    stderr: str = ""
    exit_code: int | None = None
    command: str = ""

    def __str__(self) -> str:
        return self.message


def precondition(message: str, command: str = "") -> GitError:
    return GitError(kind="precondition", message=message, command=command)
