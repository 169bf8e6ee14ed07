"""Query git history via subprocess."""

from __future__ import annotations

import re
import subprocess
from pathlib import Path
from typing import Protocol, Sequence

from ..exceptions import GitNotFoundError, GitQueryError
from ..logging_config import get_logger

logger = get_logger(__name__)

# hash | short date | subject, followed by --numstat lines
LOG_FORMAT = "%H|%ad|%s"


class HistorySource(Protocol):
    """The two read-only queries the pipeline needs from version control."""

    def query_commits(self, author: str, since: str, until: str) -> list[str]: ...

    def query_branch_containment(self, commit_hash: str, branch_pattern: str) -> bool: ...


class GitExtractor:
    """Run bounded history and branch queries against a local repository."""

    def __init__(self, repo_path: str, timeout_seconds: int = 60, git_binary: str = "git"):
        self.repo_path = str(Path(repo_path).resolve())
        self.timeout_seconds = timeout_seconds
        self.git_binary = git_binary

    def is_git_repo(self) -> bool:
        try:
            result = subprocess.run(
                [self.git_binary, "-C", self.repo_path, "rev-parse", "--git-dir"],
                capture_output=True,
                text=True,
                timeout=5,
            )
            return result.returncode == 0
        except (FileNotFoundError, subprocess.TimeoutExpired):
            return False

    def query_commits(self, author: str, since: str, until: str) -> list[str]:
        """Return raw ``git log --numstat`` lines for one author and window.

        Both bounds are whole days: ``since`` from 00:00:00 and ``until``
        through 23:59:59, local time. An author with no commits yields an
        empty list. Any git failure raises :class:`GitQueryError`.
        """
        args = [
            "log",
            f"--author={author}",
            f"--since={since} 00:00:00",
            f"--until={until} 23:59:59",
            "--date=short",
            f"--pretty=format:{LOG_FORMAT}",
            "--numstat",
        ]
        output = self._run(args)
        lines = output.splitlines()
        logger.debug("git log returned %d lines for %s", len(lines), author)
        return lines

    def query_branch_containment(self, commit_hash: str, branch_pattern: str) -> bool:
        """True if any local or remote branch matching ``branch_pattern`` contains the commit."""
        output = self._run(
            ["branch", "-a", "--contains", commit_hash, "--format=%(refname:short)"]
        )
        matcher = re.compile(branch_pattern, re.IGNORECASE)
        return any(matcher.search(name.strip()) for name in output.splitlines() if name.strip())

    def _run(self, args: Sequence[str]) -> str:
        cmd = [self.git_binary, "-C", self.repo_path, *args]
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout_seconds,
            )
        except FileNotFoundError:
            logger.warning("git executable not found")
            raise GitNotFoundError(cmd)
        except subprocess.TimeoutExpired:
            logger.warning("git command timed out after %ds", self.timeout_seconds)
            raise GitQueryError(cmd, f"timed out after {self.timeout_seconds}s")

        if result.returncode != 0:
            stderr = (result.stderr or "").strip()
            logger.warning("git command failed: %s", stderr)
            raise GitQueryError(cmd, stderr or f"exit status {result.returncode}")

        return result.stdout
