from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from gitcc.core.config import Config, default_config_path, load_config
from gitcc.core.errors import ErrorCode
from gitcc.core.result import Err
from gitcc.git.discovery import discover_repositories
from gitcc.git.models import RepositoryInfo
from gitcc.git.runner import GitRunner
from gitcc.git.service import GitService
from gitcc.output.console import ConsoleProtocol, RichConsole
from gitcc.output.prompt import PrompterProtocol, TyperPrompter
from gitcc.services.branch_memory import BranchMemory
from gitcc.state.registry import RepositoryRegistry
from gitcc.workflows.context import WorkflowContext

BRANCH_MEMORY_FILE = "branch-memory.json"


@dataclass(frozen=True, slots=True)
class CLIContext:
    config: Config
    console: ConsoleProtocol
    prompter: PrompterProtocol
    service: GitService
    registry: RepositoryRegistry
    memory: BranchMemory
    workspace: Path

    def workflow(self) -> WorkflowContext:
        return WorkflowContext(
            service=self.service,
            config=self.config,
            prompter=self.prompter,
            console=self.console,
            memory=self.memory,
            registry=self.registry,
        )

    def active_repository(self, path: Path | None = None) -> RepositoryInfo:
        """Refresh the registry and activate the repository holding ``path``.

        Exits with ENV_ERROR when no repository contains it.
        """
        target = (path or self.workspace).expanduser().resolve()
        self.registry.refresh(force=True)
        self.registry.set_active_repository_for_path(target)
        active = self.registry.active_repository
        if active is None or not _contains(active.root, target):
            self.console.error(f"not a git repository: {target}")
            raise typer.Exit(code=int(ErrorCode.ENV_ERROR))
        return active


def _contains(root: Path, target: Path) -> bool:
    root = root.resolve()
    return target == root or root in target.parents


def load_cli_config(console: ConsoleProtocol) -> Config:
    """Load the config file if present. A broken file is a user error."""
    path = default_config_path()
    if not path.exists():
        return Config()
    result = load_config(path)
    if isinstance(result, Err):
        console.error(result.error.message)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))
    return result.value


def build_context(workspace: Path | None = None) -> CLIContext:
    console = RichConsole()
    config = load_cli_config(console)

    runner = GitRunner()
    if not runner.available():
        console.error("git executable not found on PATH")
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    service = GitService(runner)
    root = (workspace or Path.cwd()).expanduser().resolve()
    registry = RepositoryRegistry(
        service,
        lambda: discover_repositories([root], service),
        max_workers=config.max_parallel_refresh,
    )
    memory = BranchMemory(default_config_path().parent / BRANCH_MEMORY_FILE)

    return CLIContext(
        config=config,
        console=console,
        prompter=TyperPrompter(),
        service=service,
        registry=registry,
        memory=memory,
        workspace=root,
    )
