"""Exceptions raised at the git boundary.

Any failure here is fatal for a run: callers must not build analysis results
from a partially read history.
"""

from typing import Sequence

from .base import ReviewMinerError


class GitQueryError(ReviewMinerError):
    """Raised when a git history or branch query fails."""

    def __init__(self, command: Sequence[str], reason: str):
        super().__init__(
            "git query failed",
            details={"command": " ".join(command), "reason": reason},
        )
        self.command = list(command)
        self.reason = reason


class GitNotFoundError(GitQueryError):
    """Raised when the git executable is not available."""

    def __init__(self, command: Sequence[str]):
        super().__init__(command, "git executable not found on PATH")
