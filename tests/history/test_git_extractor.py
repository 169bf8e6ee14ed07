"""Tests for the git subprocess boundary."""

import os
import shutil
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from review_miner.exceptions import GitNotFoundError, GitQueryError
from review_miner.history.git_extractor import GitExtractor


def completed(stdout="", returncode=0, stderr=""):
    return MagicMock(stdout=stdout, stderr=stderr, returncode=returncode)


@pytest.fixture
def extractor(tmp_path):
    return GitExtractor(str(tmp_path), timeout_seconds=7)


class TestQueryCommits:
    """Test GitExtractor.query_commits."""

    @patch("review_miner.history.git_extractor.subprocess.run")
    def test_builds_bounded_log_command(self, mock_run, extractor):
        """Author and window are passed to git log with numstat output."""
        mock_run.return_value = completed("")
        extractor.query_commits("alice@example.com", "2024-01-01", "2024-03-31")

        cmd = mock_run.call_args[0][0]
        assert cmd[:4] == ["git", "-C", extractor.repo_path, "log"]
        assert "--author=alice@example.com" in cmd
        assert "--since=2024-01-01 00:00:00" in cmd
        assert "--until=2024-03-31 23:59:59" in cmd
        assert "--numstat" in cmd
        assert "--date=short" in cmd
        assert "--pretty=format:%H|%ad|%s" in cmd
        assert mock_run.call_args[1]["timeout"] == 7

    @patch("review_miner.history.git_extractor.subprocess.run")
    def test_returns_lines(self, mock_run, extractor):
        """Output is split into lines."""
        mock_run.return_value = completed("abc1234|2024-01-01|x\n1\t2\ta.py\n")
        assert extractor.query_commits("a", "2024-01-01", "2024-01-31") == [
            "abc1234|2024-01-01|x",
            "1\t2\ta.py",
        ]

    @patch("review_miner.history.git_extractor.subprocess.run")
    def test_empty_history_is_not_an_error(self, mock_run, extractor):
        """No commits yields an empty list."""
        mock_run.return_value = completed("")
        assert extractor.query_commits("nobody", "2024-01-01", "2024-01-31") == []

    @patch("review_miner.history.git_extractor.subprocess.run")
    def test_nonzero_exit_raises(self, mock_run, extractor):
        """git failures surface as GitQueryError with stderr as reason."""
        mock_run.return_value = completed(returncode=128, stderr="fatal: not a git repository")
        with pytest.raises(GitQueryError) as exc:
            extractor.query_commits("a", "2024-01-01", "2024-01-31")
        assert exc.value.reason == "fatal: not a git repository"
        assert exc.value.command[0] == "git"

    @patch("review_miner.history.git_extractor.subprocess.run")
    def test_timeout_raises(self, mock_run, extractor):
        """A timed-out query is fatal."""
        mock_run.side_effect = subprocess.TimeoutExpired(cmd="git", timeout=7)
        with pytest.raises(GitQueryError, match="timed out"):
            extractor.query_commits("a", "2024-01-01", "2024-01-31")

    @patch("review_miner.history.git_extractor.subprocess.run")
    def test_missing_git_raises(self, mock_run, extractor):
        """A missing binary raises GitNotFoundError."""
        mock_run.side_effect = FileNotFoundError("git")
        with pytest.raises(GitNotFoundError):
            extractor.query_commits("a", "2024-01-01", "2024-01-31")


class TestQueryBranchContainment:
    """Test GitExtractor.query_branch_containment."""

    @patch("review_miner.history.git_extractor.subprocess.run")
    def test_matches_release_branch(self, mock_run, extractor):
        """A containing release branch makes the query true."""
        mock_run.return_value = completed("main\norigin/release/2.4\n")
        assert extractor.query_branch_containment("abc1234", r"(^|/)release") is True

        cmd = mock_run.call_args[0][0]
        assert "--contains" in cmd
        assert "abc1234" in cmd

    @patch("review_miner.history.git_extractor.subprocess.run")
    def test_no_matching_branch(self, mock_run, extractor):
        """Only non-release branches means false."""
        mock_run.return_value = completed("main\nfeature/prerelease-notes\n")
        assert extractor.query_branch_containment("abc1234", r"(^|/)release") is False

    @patch("review_miner.history.git_extractor.subprocess.run")
    def test_failure_raises(self, mock_run, extractor):
        """Unknown commit hashes are a fatal query failure."""
        mock_run.return_value = completed(returncode=129, stderr="error: malformed object name")
        with pytest.raises(GitQueryError):
            extractor.query_branch_containment("zzz", "release")


class TestIsGitRepo:
    """Test GitExtractor.is_git_repo."""

    @patch("review_miner.history.git_extractor.subprocess.run")
    def test_true_on_success(self, mock_run, extractor):
        mock_run.return_value = completed(".git")
        assert extractor.is_git_repo() is True

    @patch("review_miner.history.git_extractor.subprocess.run")
    def test_false_without_git(self, mock_run, extractor):
        mock_run.side_effect = FileNotFoundError("git")
        assert extractor.is_git_repo() is False


@pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
class TestQueryCommitsAgainstRepository:
    """Run query_commits against a real temporary repository."""

    @pytest.fixture
    def repo(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TZ", "UTC")
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
        repo = tmp_path / "repo"
        repo.mkdir()
        self._git(repo, "init", "-q")
        return repo

    @staticmethod
    def _git(repo, *args, env=None):
        subprocess.run(
            ["git", "-C", str(repo), "-c", "commit.gpgsign=false", *args],
            check=True,
            capture_output=True,
            env=env,
        )

    def _commit(self, repo, stamp, name):
        (repo / f"{name}.txt").write_text(name)
        self._git(repo, "add", ".")
        env = {
            **os.environ,
            "GIT_AUTHOR_NAME": "alice",
            "GIT_AUTHOR_EMAIL": "alice@example.com",
            "GIT_COMMITTER_NAME": "alice",
            "GIT_COMMITTER_EMAIL": "alice@example.com",
            "GIT_AUTHOR_DATE": stamp,
            "GIT_COMMITTER_DATE": stamp,
        }
        self._git(repo, "commit", "-q", "-m", name, env=env)

    def test_boundary_days_are_included(self, repo):
        """Commits early on the first day and late on the last day are in the window."""
        self._commit(repo, "2024-01-01T00:30:00+0000", "early")
        self._commit(repo, "2024-01-15T12:00:00+0000", "middle")
        self._commit(repo, "2024-01-31T23:30:00+0000", "late")

        lines = GitExtractor(str(repo)).query_commits("alice", "2024-01-01", "2024-01-31")
        dates = sorted(line.split("|")[1] for line in lines if "|" in line)

        assert dates == ["2024-01-01", "2024-01-15", "2024-01-31"]

    def test_days_outside_window_excluded(self, repo):
        self._commit(repo, "2023-12-31T23:30:00+0000", "before")
        self._commit(repo, "2024-01-10T09:00:00+0000", "inside")
        self._commit(repo, "2024-02-01T00:30:00+0000", "after")

        lines = GitExtractor(str(repo)).query_commits("alice", "2024-01-01", "2024-01-31")
        dates = [line.split("|")[1] for line in lines if "|" in line]

        assert dates == ["2024-01-10"]
