"""Run the git binary against a repository root."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

from gitcc.core.result import Err, Ok, Result
from gitcc.git.errors import GitError
from gitcc.platform.process import ProcessError
from gitcc.platform.process import run as run_process

__all__ = ["GitRunner", "GitRunnerProtocol", "ScriptedGitRunner"]

logger = logging.getLogger(__name__)

_GIT_TIMEOUT_SECONDS = 30.0
_GIT_NETWORK_TIMEOUT_SECONDS = 3 * 60.0
_NETWORK_COMMANDS = frozenset({"fetch", "pull", "push", "clone"})


class GitRunnerProtocol(Protocol):
    def run(self, root: Path, args: list[str]) -> Result[str, GitError]:
        """Run ``git -C root *args`` and return right-stripped stdout."""
        ...


class GitRunner:
    """Subprocess-backed git executor.

    Never raises: spawn failures, timeouts, oversized output and non-zero
    exits all become ``Err(GitError(kind="execution"))``.
    """

    def __init__(self, binary: str = "git") -> None:
        self._binary = binary

    def available(self) -> bool:
        """True if the git binary can be executed."""
        return isinstance(run_process([self._binary, "--version"], cwd=Path.cwd()), Ok)

    def run(self, root: Path, args: list[str]) -> Result[str, GitError]:
        subcommand = args[0] if args else ""
        timeout = (
            _GIT_NETWORK_TIMEOUT_SECONDS if subcommand in _NETWORK_COMMANDS else _GIT_TIMEOUT_SECONDS
        )
        logger.debug("git -C %s %s", root, " ".join(args))
        result = run_process([self._binary, "-C", str(root), *args], cwd=root, timeout=timeout)
        match result:
            case Err(e):
                return Err(_to_git_error(e, args))
            case Ok(stdout):
                return Ok(stdout.rstrip())


def _to_git_error(error: ProcessError, args: list[str]) -> GitError:
    command = " ".join(args)
    stderr = error.stderr.strip()
    if error.reason != "exit":
        message = f"git {command}: {error.reason}, {stderr}"
    elif stderr:
        message = stderr.splitlines()[-1]
    else:
        message = f"git {command} failed (exit {error.returncode})"
    return GitError(
        kind="execution",
        message=message,
        stderr=error.stderr,
        exit_code=error.returncode,
        command=command,
    )


type ScriptedReply = str | GitError


class ScriptedGitRunner:
    """Replays canned git output, for tests and dry runs.

    ``replies`` maps a command prefix ("status", "stash push") to a reply
    or a list of replies consumed in order; the last one repeats. The
    longest matching prefix wins. Unscripted commands succeed with empty
    output. Every call is recorded in ``calls``.
    """

    def __init__(self, replies: dict[str, ScriptedReply | list[ScriptedReply]] | None = None) -> None:
        self._replies: dict[str, list[ScriptedReply]] = {
            prefix: list(reply) if isinstance(reply, list) else [reply]
            for prefix, reply in (replies or {}).items()
        }
        self.calls: list[tuple[Path, list[str]]] = []

    def run(self, root: Path, args: list[str]) -> Result[str, GitError]:
        self.calls.append((root, list(args)))
        line = " ".join(args)
        matches = [p for p in self._replies if line == p or line.startswith(f"{p} ")]
        if not matches:
            return Ok("")

        queue = self._replies[max(matches, key=len)]
        reply = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(reply, GitError):
            return Err(reply)
        return Ok(reply.rstrip())

    @property
    def commands(self) -> list[str]:
        """Recorded calls as joined argument strings."""
        return [" ".join(args) for _, args in self.calls]

    def subcommands(self) -> list[str]:
        return [args[0] for _, args in self.calls if args]
