"""Data models for parsed git history."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Iterable, Optional

_ISO_DAY_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")

UNKNOWN = "unknown"


def is_iso_date(value: object) -> bool:
    """True for zero-padded ``YYYY-MM-DD`` strings naming a real calendar day."""
    if not isinstance(value, str) or not _ISO_DAY_RE.match(value):
        return False
    try:
        date.fromisoformat(value)
    except ValueError:
        return False
    return True


@dataclass(frozen=True)
class FileChange:
    path: str
    added: Optional[int]  # None = unknown (binary file)
    deleted: Optional[int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "added": UNKNOWN if self.added is None else self.added,
            "deleted": UNKNOWN if self.deleted is None else self.deleted,
        }


@dataclass(frozen=True)
class CommitRecord:
    """One commit with its per-file and aggregate line deltas.

    Use :meth:`build` rather than the constructor so the aggregates always
    match the file entries.
    """

    hash: str
    date: str  # YYYY-MM-DD
    message: str
    files: tuple[FileChange, ...] = ()
    aggregate_added: int = 0
    aggregate_deleted: int = 0

    @classmethod
    def build(cls, hash: str, date: str, message: str, files: Iterable[FileChange] = ()) -> "CommitRecord":
        files = tuple(files)
        return cls(
            hash=hash,
            date=date,
            message=message,
            files=files,
            aggregate_added=sum(f.added or 0 for f in files),
            aggregate_deleted=sum(f.deleted or 0 for f in files),
        )

    @property
    def total_lines(self) -> int:
        return self.aggregate_added + self.aggregate_deleted

    @property
    def month(self) -> str:
        return self.date[:7]

    def to_dict(self) -> dict[str, Any]:
        return {
            "hash": self.hash,
            "date": self.date,
            "message": self.message,
            "files": [f.to_dict() for f in self.files],
            "aggregate_added": self.aggregate_added,
            "aggregate_deleted": self.aggregate_deleted,
        }


@dataclass
class ParseResult:
    commits: list[CommitRecord] = field(default_factory=list)
    skipped_lines: int = 0  # lines matching neither header nor stat grammar

    @property
    def total_commits(self) -> int:
        return len(self.commits)
