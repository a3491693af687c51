"""Step-handler state machine shared by the workflows.

A workflow is a frozen session object plus a mapping from step name to
handler. Each handler inspects the session, performs at most one git
operation, and returns either ``advance(next_session)`` or
``finish(final_session)``. An ``Err`` stops the machine; steps that
already ran are not rolled back.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass

from gitcc.core.result import Err, Ok, Result
from gitcc.workflows.errors import WorkflowFailure


@dataclass(frozen=True, slots=True)
class StepAdvance[S]:
    session: S


@dataclass(frozen=True, slots=True)
class StepFinish[S]:
    session: S


type StepOutcome[S] = StepAdvance[S] | StepFinish[S]
type StepHandler[S] = Callable[[S], Result[StepOutcome[S], WorkflowFailure]]


def advance[S](session: S) -> Result[StepOutcome[S], WorkflowFailure]:
    return Ok(StepAdvance(session=session))


def finish[S](session: S) -> Result[StepOutcome[S], WorkflowFailure]:
    return Ok(StepFinish(session=session))


def run_state_machine[S](
    *,
    operation: str,
    initial_state: S,
    get_step: Callable[[S], str],
    handlers: Mapping[str, StepHandler[S]],
    max_steps: int = 32,
) -> Result[S, WorkflowFailure]:
    """Drive ``handlers`` from ``initial_state`` until a step finishes."""
    current = initial_state

    for _ in range(max_steps):
        step = get_step(current)
        handler = handlers.get(step)
        if handler is None:
            return Err(WorkflowFailure(operation=operation, message=f"unknown step: {step}"))

        outcome = handler(current)
        if isinstance(outcome, Err):
            return outcome

        current = outcome.value.session
        if isinstance(outcome.value, StepFinish):
            return Ok(current)

    return Err(WorkflowFailure(operation=operation, message=f"no terminal step after {max_steps} steps"))
