"""Terminal output for commands and workflows.

Workflows report progress as short level-prefixed lines (``success``,
``warning``, ...). Commands additionally ``show`` rich renderables such
as status trees and repository tables. Both go through
``ConsoleProtocol`` so tests can swap in ``MockConsole`` and read back
plain text.
"""

from __future__ import annotations

import io
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Protocol

from rich.console import Console, RenderableType
from rich.theme import Theme

__all__ = [
    "GITCC_THEME",
    "ConsoleProtocol",
    "MockConsole",
    "OutputRecord",
    "RichConsole",
    "Style",
]


class Style(Enum):
    DEFAULT = auto()
    SUCCESS = auto()
    ERROR = auto()
    WARNING = auto()
    INFO = auto()
    DIM = auto()

    @property
    def theme_key(self) -> str:
        return f"gitcc.{self.name.lower()}"


GITCC_THEME = Theme(
    {
        Style.DEFAULT.theme_key: "none",
        Style.SUCCESS.theme_key: "green",
        Style.ERROR.theme_key: "bold red",
        Style.WARNING.theme_key: "yellow",
        Style.INFO.theme_key: "cyan",
        Style.DIM.theme_key: "dim",
    }
)

_PREFIXES = {
    Style.SUCCESS: "OK",
    Style.ERROR: "error:",
    Style.WARNING: "warning:",
    Style.INFO: "info:",
}


class ConsoleProtocol(Protocol):
    def print(self, message: str, style: Style = Style.DEFAULT) -> None: ...

    def success(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def info(self, message: str) -> None: ...

    def hint(self, message: str) -> None:
        """Dimmed follow-up line under an error."""
        ...

    def show(self, renderable: RenderableType) -> None:
        """Render a rich object (``Text``, ``Table``) as-is."""
        ...

    def newline(self) -> None: ...


class RichConsole:
    def __init__(self, *, stderr: bool = False, width: int | None = None) -> None:
        self._console = Console(
            stderr=stderr,
            width=width,
            theme=GITCC_THEME,
            highlight=False,
            legacy_windows=False,
        )

    @property
    def rich(self) -> Console:
        return self._console

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self._console.print(message, style=style.theme_key, markup=False)

    def _level(self, style: Style, message: str) -> None:
        self._console.print(f"[{style.theme_key}]{_PREFIXES[style]}[/] ", end="")
        self._console.print(message, markup=False)

    def success(self, message: str) -> None:
        self._level(Style.SUCCESS, message)

    def error(self, message: str) -> None:
        self._level(Style.ERROR, message)

    def warning(self, message: str) -> None:
        self._level(Style.WARNING, message)

    def info(self, message: str) -> None:
        self._level(Style.INFO, message)

    def hint(self, message: str) -> None:
        self.print(f"hint: {message}", Style.DIM)

    def show(self, renderable: RenderableType) -> None:
        self._console.print(renderable)

    def newline(self) -> None:
        self._console.line()


@dataclass(frozen=True, slots=True)
class OutputRecord:
    message: str
    style: Style


def _plain(renderable: RenderableType, width: int) -> str:
    buffer = io.StringIO()
    Console(file=buffer, width=width, color_system=None, legacy_windows=False).print(renderable)
    return buffer.getvalue().rstrip("\n")


@dataclass
class MockConsole:
    """Records output as plain text; ``show`` renders at ``width`` columns."""

    width: int = 120
    outputs: list[OutputRecord] = field(default_factory=list)

    def print(self, message: str, style: Style = Style.DEFAULT) -> None:
        self.outputs.append(OutputRecord(message, style))

    def _level(self, style: Style, message: str) -> None:
        self.outputs.append(OutputRecord(f"{_PREFIXES[style]} {message}", style))

    def success(self, message: str) -> None:
        self._level(Style.SUCCESS, message)

    def error(self, message: str) -> None:
        self._level(Style.ERROR, message)

    def warning(self, message: str) -> None:
        self._level(Style.WARNING, message)

    def info(self, message: str) -> None:
        self._level(Style.INFO, message)

    def hint(self, message: str) -> None:
        self.print(f"hint: {message}", Style.DIM)

    def show(self, renderable: RenderableType) -> None:
        self.outputs.extend(OutputRecord(line, Style.DEFAULT) for line in _plain(renderable, self.width).splitlines())

    def newline(self) -> None:
        self.outputs.append(OutputRecord("", Style.DEFAULT))

    @property
    def messages(self) -> list[str]:
        return [o.message for o in self.outputs]

    @property
    def text(self) -> str:
        return "\n".join(self.messages)

    def has_error(self) -> bool:
        return any(o.style is Style.ERROR for o in self.outputs)

    def find(self, substring: str) -> list[OutputRecord]:
        return [o for o in self.outputs if substring in o.message]
