"""Shared helpers for CLI commands."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

import typer

from gitcc.core.errors import ErrorCode
from gitcc.core.result import Err, Ok, Result
from gitcc.output.prompt import PromptOption
from gitcc.workflows.errors import WorkflowFailure
from gitcc.workflows.recovery import run_recovery

if TYPE_CHECKING:
    from gitcc.cli.context import CLIContext
    from gitcc.git.errors import GitError


def failure_code(failure: WorkflowFailure) -> ErrorCode:
    return ErrorCode.for_failure(precondition=failure.is_precondition)


def exit_on_git_error[T](result: Result[T, GitError], ctx: CLIContext, operation: str) -> T:
    """Return the value of ``result`` or report the classified error and exit."""
    if isinstance(result, Err):
        exit_with_failure(WorkflowFailure.from_git_error(operation, result.error), ctx)
    return result.value


def exit_with_failure(failure: WorkflowFailure, ctx: CLIContext) -> NoReturn:
    ctx.console.error(str(failure))
    if failure.actions:
        ctx.console.hint(f"try {', '.join(failure.actions)}")
    raise typer.Exit(code=int(failure_code(failure)))


def handle_failure(failure: WorkflowFailure, ctx: CLIContext, root: Path) -> NoReturn:
    """Report ``failure``; when it suggests recovery actions, offer them.

    Exits OK if a chosen recovery ran, otherwise with the failure's code.
    """
    ctx.console.error(str(failure))
    if not failure.actions:
        raise typer.Exit(code=int(failure_code(failure)))

    action = ctx.prompter.choose(
        "Suggested follow-up",
        [PromptOption(value=a, label=str(a)) for a in failure.actions],
    )
    if action is None:
        raise typer.Exit(code=int(failure_code(failure)))

    match run_recovery(action, ctx.workflow(), root):
        case Ok(True):
            raise typer.Exit(code=int(ErrorCode.OK))
        case Ok(False):
            raise typer.Exit(code=int(ErrorCode.CANCELLED))
        case Err(follow_up):
            exit_with_failure(follow_up, ctx)
    raise typer.Exit(code=int(failure_code(failure)))
