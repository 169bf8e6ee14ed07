"""Bug-fix commit classification, hotfix detection, and quality red flags.

A pure classify-then-aggregate pipeline:

1. keep commits whose message mentions a bug keyword
2. tag each with every matching category (non-exclusive)
3. ask version control whether a release branch contains it (hotfix)
4. bucket by month and derive threshold-based red flags

Categories are data (:data:`DEFAULT_CATEGORY_RULES`); adding one is a list
change, not a code change.
"""

from __future__ import annotations

import re
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Callable, Iterable, Optional, Sequence

from ..history.models import CommitRecord
from ..logging_config import get_logger
from .models import BugAnalysis, BugOccurrence, MonthlyBucket, RedFlag, RedFlagKind

logger = get_logger(__name__)

DEFAULT_BUG_KEYWORDS: tuple[str, ...] = (
    "fix",
    "bug",
    "hotfix",
    "bugfix",
    "issue",
    "crash",
    "error",
    "nre",
    "null",
)

GENERAL_CATEGORY = "General"

# Default release-branch naming: release/1.2, origin/release-2024, ...
DEFAULT_RELEASE_PATTERN = r"(^|/)release"

# (commit_hash, branch_pattern) -> contained in a matching branch?
ContainmentQuery = Callable[[str, str], bool]


@dataclass(frozen=True)
class CategoryRule:
    pattern: re.Pattern
    category: str

    @classmethod
    def compile(cls, pattern: str, category: str) -> "CategoryRule":
        return cls(pattern=re.compile(pattern, re.IGNORECASE), category=category)


DEFAULT_CATEGORY_RULES: tuple[CategoryRule, ...] = (
    CategoryRule.compile(r"null|\bnre\b|object reference", "NullReference"),
    CategoryRule.compile(r"seriali[sz]|\bjson\b|\bxml\b|\bparse", "Serialization"),
    CategoryRule.compile(r"config|appsettings|\bsettings?\b|\benv(ironment)? var", "Configuration"),
    CategoryRule.compile(r"auth|login|log in|sign[- ]?in|token|cookie|\bsso\b|password", "Authentication"),
    CategoryRule.compile(r"payment|invoice|billing|checkout|refund|subscription", "Payment"),
    CategoryRule.compile(r"\blog(s|ger|ging)?\b|telemetry|tracing", "Logging"),
    CategoryRule.compile(r"\btests?\b|unit test|\bspec\b|flaky", "Test"),
)


@dataclass(frozen=True)
class RedFlagThresholds:
    recurring_category: int = 3
    high_hotfix_count: int = 5
    bug_cluster: int = 5

    def __post_init__(self) -> None:
        for name in ("recurring_category", "high_hotfix_count", "bug_cluster"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1")


def is_bug_related(message: str, keywords: Sequence[str] = DEFAULT_BUG_KEYWORDS) -> bool:
    lowered = message.lower()
    return any(kw.lower() in lowered for kw in keywords if kw)


def categorize(message: str, rules: Sequence[CategoryRule] = DEFAULT_CATEGORY_RULES) -> tuple[str, ...]:
    """Every category whose pattern matches, in rule order; General if none."""
    matched = tuple(rule.category for rule in rules if rule.pattern.search(message))
    return matched or (GENERAL_CATEGORY,)


def build_monthly_series(commits: Iterable[CommitRecord]) -> list[MonthlyBucket]:
    counts = Counter(c.month for c in commits)
    return [MonthlyBucket(month=month, count=counts[month]) for month in sorted(counts)]


def derive_red_flags(
    category_counts: dict[str, int],
    hotfix_count: int,
    monthly: Sequence[MonthlyBucket],
    thresholds: RedFlagThresholds = RedFlagThresholds(),
) -> list[RedFlag]:
    """Inclusive threshold checks over the aggregated bug signals."""
    flags: list[RedFlag] = []

    for category, count in category_counts.items():
        if count >= thresholds.recurring_category:
            flags.append(
                RedFlag(
                    kind=RedFlagKind.RECURRING_CATEGORY,
                    subject=category,
                    count=count,
                    threshold=thresholds.recurring_category,
                    message=f"{category} issues recurred {count} times",
                )
            )

    if hotfix_count >= thresholds.high_hotfix_count:
        flags.append(
            RedFlag(
                kind=RedFlagKind.HIGH_HOTFIX_COUNT,
                subject="hotfixes",
                count=hotfix_count,
                threshold=thresholds.high_hotfix_count,
                message=f"{hotfix_count} fixes landed on release branches",
            )
        )

    for bucket in monthly:
        if bucket.count >= thresholds.bug_cluster:
            flags.append(
                RedFlag(
                    kind=RedFlagKind.BUG_CLUSTERING,
                    subject=bucket.month,
                    count=bucket.count,
                    threshold=thresholds.bug_cluster,
                    message=f"{bucket.count} bug fixes in {bucket.month}",
                )
            )

    return flags


def detect_hotfixes(
    commits: Sequence[CommitRecord],
    containment: ContainmentQuery,
    release_pattern: str = DEFAULT_RELEASE_PATTERN,
    workers: int = 1,
) -> list[bool]:
    """Hotfix flag per commit, in input order.

    Queries are independent and read-only, so with ``workers > 1`` they run
    on a thread pool; ``Executor.map`` keeps results aligned with inputs.
    Any query failure propagates.
    """
    if not commits:
        return []

    def query(commit: CommitRecord) -> bool:
        return containment(commit.hash, release_pattern)

    if workers <= 1:
        return [query(c) for c in commits]

    with ThreadPoolExecutor(max_workers=workers) as executor:
        return list(executor.map(query, commits))


def analyze_bug_patterns(
    commits: Iterable[CommitRecord],
    containment: Optional[ContainmentQuery] = None,
    keywords: Optional[Sequence[str]] = None,
    rules: Sequence[CategoryRule] = DEFAULT_CATEGORY_RULES,
    release_pattern: str = DEFAULT_RELEASE_PATTERN,
    thresholds: RedFlagThresholds = RedFlagThresholds(),
    workers: int = 1,
    hot_file_limit: int = 10,
) -> BugAnalysis:
    """Classify bug-related commits and derive quality signals.

    Without a ``containment`` query no commit is marked as a hotfix.
    """
    keywords = tuple(keywords) if keywords else DEFAULT_BUG_KEYWORDS
    bug_commits = [c for c in commits if is_bug_related(c.message, keywords)]
    if not bug_commits:
        return BugAnalysis()

    if containment is not None:
        hotfix_flags = detect_hotfixes(bug_commits, containment, release_pattern, workers)
    else:
        hotfix_flags = [False] * len(bug_commits)

    occurrences = [
        BugOccurrence(commit=commit, categories=categorize(commit.message, rules), is_hotfix=is_hotfix)
        for commit, is_hotfix in zip(bug_commits, hotfix_flags)
    ]

    # Rule order first, General last, only categories that occurred
    tally = Counter(cat for occ in occurrences for cat in occ.categories)
    order = [rule.category for rule in rules] + [GENERAL_CATEGORY]
    category_counts = {cat: tally[cat] for cat in dict.fromkeys(order) if tally[cat]}

    hotfix_count = sum(1 for occ in occurrences if occ.is_hotfix)
    monthly = build_monthly_series(bug_commits)

    file_tally = Counter(f.path for c in bug_commits for f in c.files)
    hot_files = file_tally.most_common(hot_file_limit) if hot_file_limit > 0 else []

    logger.debug(
        "Found %d bug-related commits (%d hotfixes) across %d months",
        len(occurrences),
        hotfix_count,
        len(monthly),
    )

    return BugAnalysis(
        occurrences=occurrences,
        hotfix_count=hotfix_count,
        monthly=monthly,
        red_flags=derive_red_flags(category_counts, hotfix_count, monthly, thresholds),
        category_counts=category_counts,
        hot_files=hot_files,
    )
