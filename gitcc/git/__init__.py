"""Git layer: records, parsers, executor, classifier and service.

Usage:
    from gitcc.git import GitRunner, GitService

    service = GitService(GitRunner())
    match service.status(Path("/path/to/repo")):
        case Ok(status):
            print(f"Branch: {status.branch}")
        case Err(error):
            print(error.message)
"""

from gitcc.git.classifier import Classification, RecoveryAction, classify, classify_text
from gitcc.git.discovery import discover_repositories, find_repos
from gitcc.git.errors import GitError, precondition
from gitcc.git.models import (
    BranchComparison,
    BranchInfo,
    CommitOptions,
    FileChange,
    MiniLogEntry,
    RepositoryInfo,
    StashEntry,
    StatusInfo,
    WorktreeInfo,
    repository_id,
)
from gitcc.git.runner import GitRunner, GitRunnerProtocol, ScriptedGitRunner
from gitcc.git.service import GitService

__all__ = [
    # Records
    "BranchComparison",
    "BranchInfo",
    "CommitOptions",
    "FileChange",
    "MiniLogEntry",
    "RepositoryInfo",
    "StashEntry",
    "StatusInfo",
    "WorktreeInfo",
    "repository_id",
    # Errors
    "Classification",
    "GitError",
    "RecoveryAction",
    "classify",
    "classify_text",
    "precondition",
    # Execution
    "GitRunner",
    "GitRunnerProtocol",
    "GitService",
    "ScriptedGitRunner",
    # Discovery
    "discover_repositories",
    "find_repos",
]
