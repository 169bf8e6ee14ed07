"""End-to-end mining run: one history query in, all review facts out.

The run is a strictly sequential chain over a single batch query::

    query -> parse -> PR groups -> gaps / activity -> major PRs
                   -> bug patterns (+ branch containment)

Git failures propagate as :class:`GitQueryError` before any result object is
built, so callers never see partial output. An author with no commits in the
window is a normal, empty :class:`MiningResult`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from .analysis import (
    ActivityGap,
    ActivitySummary,
    BugAnalysis,
    MajorPR,
    PullRequestGroup,
    aggregate_pull_requests,
    analyze_bug_patterns,
    build_rules,
    detect_gaps,
    select_major_prs,
    summarize_activity,
)
from .config import MinerConfig, load_config
from .exceptions import GitQueryError, InvalidDateError
from .history import CommitRecord, GitExtractor, HistorySource, is_iso_date, parse_log_lines
from .logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class MiningResult:
    author: str
    since: str
    until: str
    commits: list[CommitRecord] = field(default_factory=list)
    pr_groups: list[PullRequestGroup] = field(default_factory=list)
    gaps: list[ActivityGap] = field(default_factory=list)
    bug_analysis: BugAnalysis = field(default_factory=BugAnalysis)
    major_prs: list[MajorPR] = field(default_factory=list)
    activity: ActivitySummary = field(default_factory=ActivitySummary)
    skipped_lines: int = 0

    @property
    def is_empty(self) -> bool:
        """True when the author had no commits in the window."""
        return not self.commits

    @property
    def total_lines_added(self) -> int:
        return sum(c.aggregate_added for c in self.commits)

    @property
    def total_lines_deleted(self) -> int:
        return sum(c.aggregate_deleted for c in self.commits)

    def to_dict(self) -> dict[str, Any]:
        return {
            "author": self.author,
            "since": self.since,
            "until": self.until,
            "commits": [c.to_dict() for c in self.commits],
            "pr_groups": [g.to_dict() for g in self.pr_groups],
            "gaps": [g.to_dict() for g in self.gaps],
            "bug_analysis": self.bug_analysis.to_dict(),
            "major_prs": [pr.to_dict() for pr in self.major_prs],
            "activity": self.activity.to_dict(),
            "diagnostics": {"skipped_lines": self.skipped_lines},
        }


class ReviewMiner:
    """Run the mining pipeline against any :class:`HistorySource`."""

    def __init__(self, source: HistorySource, config: Optional[MinerConfig] = None):
        self.source = source
        self.config = config or MinerConfig()

    def run(self, author: str, since: str, until: str) -> MiningResult:
        _validate_window(since, until)
        cfg = self.config

        lines = self.source.query_commits(author, since, until)
        parsed = parse_log_lines(lines)
        commits = parsed.commits
        logger.info("Parsed %d commits for %s (%s..%s)", parsed.total_commits, author, since, until)

        if not commits:
            logger.info("No activity for %s in window", author)
            return MiningResult(
                author=author, since=since, until=until, skipped_lines=parsed.skipped_lines
            )

        groups = aggregate_pull_requests(
            commits, build_rules(cfg.pr_patterns, cfg.include_github_merges)
        )
        dates = [c.date for c in commits]
        gaps = detect_gaps(dates, cfg.min_gap_days)
        major = select_major_prs(groups.values(), cfg.min_lines, cfg.major_pr_keywords)

        containment = self.source.query_branch_containment if cfg.detect_hotfixes else None
        bugs = analyze_bug_patterns(
            commits,
            containment=containment,
            keywords=cfg.bug_keywords,
            release_pattern=cfg.release_branch_pattern,
            thresholds=cfg.thresholds,
            workers=cfg.workers,
            hot_file_limit=cfg.hot_file_limit,
        )

        return MiningResult(
            author=author,
            since=since,
            until=until,
            commits=commits,
            pr_groups=list(groups.values()),
            gaps=gaps,
            bug_analysis=bugs,
            major_prs=major,
            activity=summarize_activity(dates),
            skipped_lines=parsed.skipped_lines,
        )


def _validate_window(since: str, until: str) -> None:
    for value in (since, until):
        if not is_iso_date(value):
            raise InvalidDateError(value, context="window bound")
    if since > until:
        raise InvalidDateError(f"{since}..{until}", context="date window")


def mine(
    repo_path: str,
    author: str,
    since: str,
    until: str,
    config_file: Optional[Path] = None,
    **overrides,
) -> MiningResult:
    """Mine ``author``'s history in the repository at ``repo_path``.

    Example:
        >>> result = mine(".", "alice@example.com", "2024-01-01", "2024-06-30")
        >>> [g.number for g in result.pr_groups]
    """
    config = load_config(config_file=config_file, **overrides)
    extractor = GitExtractor(repo_path, timeout_seconds=config.git_timeout_seconds)
    if not extractor.is_git_repo():
        raise GitQueryError(["git", "-C", extractor.repo_path, "rev-parse"], "not a git repository")
    return ReviewMiner(extractor, config).run(author, since, until)
