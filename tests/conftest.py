"""Shared test fixtures for Review Miner tests."""

import pytest

from review_miner.exceptions import GitQueryError


class FakeHistorySource:
    """In-memory stand-in for GitExtractor."""

    def __init__(self, lines=None, release_hashes=(), fail_on=None):
        self.lines = list(lines or [])
        self.release_hashes = set(release_hashes)
        self.fail_on = fail_on
        self.queries = []
        self.containment_queries = []

    def query_commits(self, author, since, until):
        self.queries.append((author, since, until))
        if self.fail_on == "log":
            raise GitQueryError(["git", "log"], "fatal: bad revision")
        return list(self.lines)

    def query_branch_containment(self, commit_hash, branch_pattern):
        self.containment_queries.append((commit_hash, branch_pattern))
        if self.fail_on == "branch":
            raise GitQueryError(["git", "branch"], "fatal: malformed object name")
        return commit_hash in self.release_hashes


@pytest.fixture
def fake_source():
    """Factory for FakeHistorySource instances."""
    return FakeHistorySource


@pytest.fixture
def sample_log_lines():
    """A small git log --numstat stream with two PR merges and a bug fix."""
    return [
        "a1b2c3d4e5f6a7b8c9d0a1b2c3d4e5f6a7b8c9d0|2024-01-03|Merged PR 100: Add billing export",
        "40\t10\tsrc/billing/export.py",
        "10\t0\ttests/test_export.py",
        "",
        "b1b2c3d4e5f6a7b8c9d0a1b2c3d4e5f6a7b8c9d0|2024-01-20|Fix null reference in login, related to auth cookie",
        "3\t1\tsrc/auth/session.py",
        "",
        "c1b2c3d4e5f6a7b8c9d0a1b2c3d4e5f6a7b8c9d0|2024-02-02|Merged PR 100: Add billing export",
        "5\t1\tsrc/billing/export.py",
        "-\t-\tdocs/diagram.png",
    ]
