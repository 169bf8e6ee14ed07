"""Select and tier the pull requests worth discussing in a review."""

from __future__ import annotations

import re
from typing import Iterable, Optional, Sequence

from ..logging_config import get_logger
from .models import ComplexityTier, MajorPR, PullRequestGroup

logger = get_logger(__name__)

# (minimum total lines, tier), highest first
COMPLEXITY_BREAKPOINTS: tuple[tuple[int, ComplexityTier], ...] = (
    (500, ComplexityTier.VERY_HIGH),
    (200, ComplexityTier.HIGH),
    (100, ComplexityTier.MEDIUM),
)


def classify_complexity(total_lines: int) -> ComplexityTier:
    for minimum, tier in COMPLEXITY_BREAKPOINTS:
        if total_lines >= minimum:
            return tier
    return ComplexityTier.LOW


def _keyword_matcher(keyword: str) -> re.Pattern:
    try:
        return re.compile(keyword, re.IGNORECASE)
    except re.error:
        logger.debug("Keyword %r is not a valid regex, matching literally", keyword)
        return re.compile(re.escape(keyword), re.IGNORECASE)


def matching_keywords(title: str, keywords: Sequence[str]) -> list[str]:
    return [kw for kw in keywords if _keyword_matcher(kw).search(title)]


def select_major_prs(
    groups: Iterable[PullRequestGroup],
    min_lines: int,
    keywords: Optional[Sequence[str]] = None,
) -> list[MajorPR]:
    """PRs that are large enough OR whose title hits a keyword.

    Results are ordered by total lines changed, largest first; equal sizes
    keep their input order.
    """
    if min_lines < 0:
        raise ValueError("min_lines must be non-negative")

    keywords = [kw for kw in (keywords or []) if kw]
    selected: list[MajorPR] = []

    for group in groups:
        total = group.total_lines
        hits = matching_keywords(group.title, keywords)
        size_qualified = total >= min_lines
        if not size_qualified and not hits:
            continue
        selected.append(
            MajorPR(
                group=group,
                total_lines=total,
                complexity=classify_complexity(total),
                matched_keywords=hits,
                size_qualified=size_qualified,
            )
        )

    selected.sort(key=lambda pr: pr.total_lines, reverse=True)
    return selected
