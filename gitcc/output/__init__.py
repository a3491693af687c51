"""Console output and operator prompts."""

from .console import ConsoleProtocol, MockConsole, RichConsole, Style
from .prompt import MockPrompter, PromptOption, PrompterProtocol, TyperPrompter

__all__ = [
    "ConsoleProtocol",
    "MockConsole",
    "MockPrompter",
    "PromptOption",
    "PrompterProtocol",
    "RichConsole",
    "Style",
    "TyperPrompter",
]
