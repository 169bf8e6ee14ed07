"""Derived review facts: PR groups, gaps, major PRs, bug patterns."""

from .bug_patterns import (
    DEFAULT_BUG_KEYWORDS,
    DEFAULT_CATEGORY_RULES,
    CategoryRule,
    RedFlagThresholds,
    analyze_bug_patterns,
    categorize,
    is_bug_related,
)
from .gaps import detect_gaps, summarize_activity
from .major_prs import classify_complexity, select_major_prs
from .models import (
    ActivityGap,
    ActivitySummary,
    BugAnalysis,
    BugOccurrence,
    ComplexityTier,
    MajorPR,
    MonthlyBucket,
    PullRequestGroup,
    RedFlag,
    RedFlagKind,
)
from .pr_groups import DEFAULT_PR_RULES, PRMatcher, aggregate_pull_requests, build_rules

__all__ = [
    "ActivityGap",
    "ActivitySummary",
    "BugAnalysis",
    "BugOccurrence",
    "CategoryRule",
    "ComplexityTier",
    "MajorPR",
    "MonthlyBucket",
    "PRMatcher",
    "PullRequestGroup",
    "RedFlag",
    "RedFlagKind",
    "RedFlagThresholds",
    "DEFAULT_BUG_KEYWORDS",
    "DEFAULT_CATEGORY_RULES",
    "DEFAULT_PR_RULES",
    "aggregate_pull_requests",
    "analyze_bug_patterns",
    "build_rules",
    "categorize",
    "classify_complexity",
    "detect_gaps",
    "is_bug_related",
    "select_major_prs",
    "summarize_activity",
]
