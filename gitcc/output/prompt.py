"""Operator prompts.

Workflows ask questions through ``PrompterProtocol``. A ``None`` answer
from ``choose`` means the operator dismissed the prompt and is treated
the same as an explicit cancel.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from typing import Protocol

__all__ = ["MockPrompter", "PromptOption", "PrompterProtocol", "TyperPrompter"]


@dataclass(frozen=True, slots=True)
class PromptOption[T]:
    value: T
    label: str


class PrompterProtocol(Protocol):
    def choose[T](self, title: str, options: Sequence[PromptOption[T]]) -> T | None:
        """Ask the operator to pick one option; None when dismissed."""
        ...

    def confirm(self, message: str) -> bool: ...


class TyperPrompter:
    """Numbered-list prompt on the terminal via ``typer.prompt``."""

    def choose[T](self, title: str, options: Sequence[PromptOption[T]]) -> T | None:
        import typer

        if not options:
            return None

        typer.echo(title)
        for i, option in enumerate(options, start=1):
            typer.echo(f"  {i:2}. {option.label}")

        while True:
            raw = typer.prompt("Choose (empty to cancel)", default="", show_default=False)
            if not raw.strip():
                return None
            try:
                idx = int(raw)
            except ValueError:
                typer.echo("invalid number", err=True)
                continue
            if 1 <= idx <= len(options):
                return options[idx - 1].value
            typer.echo("out of range", err=True)

    def confirm(self, message: str) -> bool:
        import typer

        return typer.confirm(message, default=False)


def _empty_answers() -> list[object]:
    return []


def _empty_questions() -> list[str]:
    return []


@dataclass
class MockPrompter:
    """Replays scripted answers and records every question asked.

    ``answers`` is consumed in order by both ``choose`` and ``confirm``.
    ``choose`` accepts either an option value or its label. Running out
    of answers behaves like a dismissed prompt.
    """

    answers: list[object] = field(default_factory=_empty_answers)
    questions: list[str] = field(default_factory=_empty_questions)

    def choose[T](self, title: str, options: Sequence[PromptOption[T]]) -> T | None:
        self.questions.append(title)
        if not self.answers:
            return None
        answer = self.answers.pop(0)
        for option in options:
            if answer == option.value or answer == option.label:
                return option.value
        return None

    def confirm(self, message: str) -> bool:
        self.questions.append(message)
        if not self.answers:
            return False
        return bool(self.answers.pop(0))
