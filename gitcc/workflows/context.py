"""Collaborators shared by every workflow."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from gitcc.core.config import Config
from gitcc.core.result import Err, Ok, Result
from gitcc.git.errors import precondition
from gitcc.git.models import RepositoryInfo, repository_id
from gitcc.git.service import GitService
from gitcc.output.console import ConsoleProtocol, MockConsole
from gitcc.output.prompt import PrompterProtocol
from gitcc.services.branch_memory import BranchMemory
from gitcc.state.registry import RepositoryRegistry
from gitcc.workflows.errors import WorkflowFailure

__all__ = ["WorkflowContext"]


@dataclass(frozen=True, slots=True)
class WorkflowContext:
    """Everything a workflow may touch.

    ``registry`` is optional: without it workflows need an explicit
    repository root.
    """

    service: GitService
    config: Config
    prompter: PrompterProtocol
    console: ConsoleProtocol = field(default_factory=MockConsole)
    memory: BranchMemory = field(default_factory=BranchMemory)
    registry: RepositoryRegistry | None = None

    def resolve_root(self, operation: str, root: Path | None) -> Result[Path, WorkflowFailure]:
        """Use ``root`` if given, else the registry's active repository."""
        if root is not None:
            return Ok(root)
        active: RepositoryInfo | None = (
            self.registry.active_repository if self.registry is not None else None
        )
        if active is None:
            return Err(
                WorkflowFailure.from_git_error(
                    operation,
                    precondition("No active repository. Open a folder with a git repository."),
                )
            )
        return Ok(active.root)

    @staticmethod
    def repo_key(root: Path) -> str:
        return repository_id(root)
