"""Group commits into pull requests by merge-message convention.

A commit joins the group of the first PR reference found in its message.
Rules are tried in order and the first rule that matches wins; within a rule
the leftmost match wins. A message that mentions several PRs is therefore
attributed to exactly one of them. This is a known source of misattribution
and is deliberately left as-is.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from ..exceptions import InvalidDateError
from ..history.models import CommitRecord, is_iso_date
from ..logging_config import get_logger
from .models import PullRequestGroup

logger = get_logger(__name__)


@dataclass(frozen=True)
class PRMatcher:
    """A named regex whose group 1 is the PR number and optional group 2 the title."""

    name: str
    pattern: re.Pattern

    @classmethod
    def compile(cls, name: str, pattern: str) -> "PRMatcher":
        return cls(name=name, pattern=re.compile(pattern, re.IGNORECASE))


# Azure DevOps squash/merge convention: "Merged PR 1234: Title"
AZURE_DEVOPS_RULE = PRMatcher.compile("azure-devops", r"Merged PR (\d+)(?::\s*(.+))?")
# GitHub merge commit: "Merge pull request #123 from owner/branch"
GITHUB_MERGE_RULE = PRMatcher.compile("github", r"Merge pull request #(\d+)")

DEFAULT_PR_RULES: tuple[PRMatcher, ...] = (AZURE_DEVOPS_RULE,)


def build_rules(
    extra_patterns: Iterable[str] = (), include_github_merges: bool = False
) -> tuple[PRMatcher, ...]:
    """Default rules, then the GitHub rule if enabled, then custom patterns."""
    rules = DEFAULT_PR_RULES
    if include_github_merges:
        rules += (GITHUB_MERGE_RULE,)
    extra = tuple(
        PRMatcher.compile(f"custom-{i}", pattern) for i, pattern in enumerate(extra_patterns, 1)
    )
    return rules + extra


def extract_pr_reference(
    message: str, rules: Sequence[PRMatcher] = DEFAULT_PR_RULES
) -> Optional[tuple[int, str]]:
    """Return ``(number, title)`` for the first matching rule, else None."""
    for rule in rules:
        match = rule.pattern.search(message)
        if match is None:
            continue
        title = ""
        if match.lastindex and match.lastindex >= 2 and match.group(2):
            title = match.group(2).strip()
        return int(match.group(1)), title
    return None


def aggregate_pull_requests(
    commits: Iterable[CommitRecord], rules: Sequence[PRMatcher] = DEFAULT_PR_RULES
) -> dict[int, PullRequestGroup]:
    """Build PR groups keyed by number, in first-sighting order.

    Commits without a PR reference are left out. Raises
    :class:`InvalidDateError` for commits whose date is not ``YYYY-MM-DD``.
    """
    groups: dict[int, PullRequestGroup] = {}

    for commit in commits:
        ref = extract_pr_reference(commit.message, rules)
        if ref is None:
            continue
        if not is_iso_date(commit.date):
            raise InvalidDateError(commit.date, context=f"date for commit {commit.hash}")

        number, title = ref
        group = groups.get(number)
        if group is None:
            group = PullRequestGroup(
                number=number,
                title=title,
                first_date=commit.date,
                last_date=commit.date,
            )
            groups[number] = group
        elif not group.title and title:
            group.title = title

        group.commits.append(commit)
        group.total_lines_added += commit.aggregate_added
        group.total_lines_deleted += commit.aggregate_deleted
        group.first_date = min(group.first_date, commit.date)
        group.last_date = max(group.last_date, commit.date)

    # Untitled references fall back to the first member's message
    for group in groups.values():
        if not group.title:
            group.title = group.commits[0].message

    logger.debug("Grouped commits into %d pull requests", len(groups))
    return groups
