"""Data models for derived review facts."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from ..history.models import CommitRecord


@dataclass
class PullRequestGroup:
    """All commits attributed to one merge-request number.

    ``first_date``/``last_date`` are tracked with plain string min/max, which
    is only valid for zero-padded ISO days.
    """

    number: int
    title: str
    commits: list[CommitRecord] = field(default_factory=list)
    first_date: str = ""
    last_date: str = ""
    total_lines_added: int = 0
    total_lines_deleted: int = 0

    @property
    def total_lines(self) -> int:
        return self.total_lines_added + self.total_lines_deleted

    def to_dict(self) -> dict[str, Any]:
        return {
            "number": self.number,
            "title": self.title,
            "commits": [c.hash for c in self.commits],
            "first_date": self.first_date,
            "last_date": self.last_date,
            "total_lines_added": self.total_lines_added,
            "total_lines_deleted": self.total_lines_deleted,
        }


@dataclass(frozen=True)
class ActivityGap:
    start_date: str
    end_date: str
    duration_days: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_date": self.start_date,
            "end_date": self.end_date,
            "duration_days": self.duration_days,
        }


@dataclass(frozen=True)
class ActivitySummary:
    active_days: int = 0
    first_date: Optional[str] = None
    last_date: Optional[str] = None
    span_days: int = 0  # inclusive of both ends

    def to_dict(self) -> dict[str, Any]:
        return {
            "active_days": self.active_days,
            "first_date": self.first_date,
            "last_date": self.last_date,
            "span_days": self.span_days,
        }


class ComplexityTier(str, Enum):
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    VERY_HIGH = "Very High"


@dataclass
class MajorPR:
    group: PullRequestGroup
    total_lines: int
    complexity: ComplexityTier
    matched_keywords: list[str] = field(default_factory=list)
    size_qualified: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.group.to_dict(),
            "total_lines": self.total_lines,
            "complexity": self.complexity.value,
            "matched_keywords": list(self.matched_keywords),
            "size_qualified": self.size_qualified,
        }


@dataclass(frozen=True)
class BugOccurrence:
    commit: CommitRecord
    categories: tuple[str, ...]  # rule order; ("General",) when nothing matched
    is_hotfix: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "hash": self.commit.hash,
            "date": self.commit.date,
            "message": self.commit.message,
            "categories": list(self.categories),
            "is_hotfix": self.is_hotfix,
        }


@dataclass(frozen=True)
class MonthlyBucket:
    month: str  # YYYY-MM
    count: int

    def to_dict(self) -> dict[str, Any]:
        return {"month": self.month, "count": self.count}


class RedFlagKind(str, Enum):
    RECURRING_CATEGORY = "recurring_category"
    HIGH_HOTFIX_COUNT = "high_hotfix_count"
    BUG_CLUSTERING = "bug_clustering"


@dataclass(frozen=True)
class RedFlag:
    kind: RedFlagKind
    subject: str  # category name, "hotfixes", or month key
    count: int
    threshold: int
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "subject": self.subject,
            "count": self.count,
            "threshold": self.threshold,
            "message": self.message,
        }


@dataclass
class BugAnalysis:
    occurrences: list[BugOccurrence] = field(default_factory=list)
    hotfix_count: int = 0
    monthly: list[MonthlyBucket] = field(default_factory=list)
    red_flags: list[RedFlag] = field(default_factory=list)
    category_counts: dict[str, int] = field(default_factory=dict)
    hot_files: list[tuple[str, int]] = field(default_factory=list)

    @property
    def total_bugs(self) -> int:
        return len(self.occurrences)

    def to_dict(self) -> dict[str, Any]:
        return {
            "occurrences": [o.to_dict() for o in self.occurrences],
            "hotfix_count": self.hotfix_count,
            "monthly": [m.to_dict() for m in self.monthly],
            "red_flags": [f.to_dict() for f in self.red_flags],
            "category_counts": dict(self.category_counts),
            "hot_files": [{"path": p, "count": n} for p, n in self.hot_files],
        }
