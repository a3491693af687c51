"""Process exit status of gitcc commands.

Scripts branch on these values, so they never change meaning. Anything
that is not ``OK`` means the repository was left as it was before the
command, except ``GIT_ERROR``, where git itself may have done part of
the work (a rebase stopped on a conflict, a push rejected after fetch).
"""

from __future__ import annotations

from enum import IntEnum

__all__ = ["ErrorCode"]


class ErrorCode(IntEnum):
    OK = 0
    USER_ERROR = 1  # unknown repository, branch or option
    ENV_ERROR = 2  # no git binary, not inside a repository, bad config
    GIT_ERROR = 3
    PRECONDITION = 4  # conflicts, missing upstream, nothing staged
    CANCELLED = 5

    @classmethod
    def for_failure(cls, *, precondition: bool) -> ErrorCode:
        """Exit status for a failed workflow."""
        return cls.PRECONDITION if precondition else cls.GIT_ERROR

    def __str__(self) -> str:
        return self.name.lower().replace("_", " ")
