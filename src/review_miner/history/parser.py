"""Parse ``git log --numstat`` output into commit records.

The input interleaves two kinds of line::

    <hash>|<YYYY-MM-DD>|<subject>
    <added>\t<deleted>\t<path>

Stat lines belong to the most recent header. Binary files report ``-`` for
both counts; those entries are kept with unknown counts and contribute 0 to
the aggregates.

Parsing is a fold over the lines with a ``(results, pending)`` state pair.
The pending commit is flushed when the next header arrives and once more,
unconditionally, after the last line, so the final commit is never lost.
"""

from __future__ import annotations

import re
from functools import reduce
from typing import Iterable, NamedTuple, Optional

from ..logging_config import get_logger
from .models import CommitRecord, FileChange, ParseResult, is_iso_date

logger = get_logger(__name__)

# Subject can contain | characters, so only the first two separators count
_HEADER_RE = re.compile(r"^([0-9a-fA-F]{7,40})\|([^|]*)\|(.*)$")
_STAT_RE = re.compile(r"^(\d+|-)\t(\d+|-)\t(.+)$")

BINARY_SENTINEL = "-"


class _Pending(NamedTuple):
    hash: str
    date: str
    message: str
    files: list[FileChange]


class _FoldState(NamedTuple):
    results: list[CommitRecord]
    pending: Optional[_Pending]
    skipped: int


def _count(value: str) -> Optional[int]:
    return None if value == BINARY_SENTINEL else int(value)


def _flush(state: _FoldState) -> _FoldState:
    if state.pending is None:
        return state
    p = state.pending
    state.results.append(CommitRecord.build(p.hash, p.date, p.message, p.files))
    return state._replace(pending=None)


def _step(state: _FoldState, raw_line: str) -> _FoldState:
    line = raw_line.rstrip("\r\n")
    if not line.strip():
        return state

    header = _HEADER_RE.match(line)
    if header:
        state = _flush(state)
        commit_hash, day, subject = header.groups()
        if not is_iso_date(day):
            # Stat lines after a rejected header are orphaned until the next header
            logger.debug("Skipping header with malformed date: %r", line)
            return state._replace(skipped=state.skipped + 1)
        return state._replace(pending=_Pending(commit_hash, day, subject.strip(), []))

    stat = _STAT_RE.match(line)
    if stat and state.pending is not None:
        added, deleted, path = stat.groups()
        state.pending.files.append(FileChange(path=path, added=_count(added), deleted=_count(deleted)))
        return state

    return state._replace(skipped=state.skipped + 1)


def parse_log_lines(lines: Iterable[str]) -> ParseResult:
    """Fold raw log lines into a :class:`ParseResult`, preserving input order."""
    initial = _FoldState(results=[], pending=None, skipped=0)
    final = _flush(reduce(_step, lines, initial))

    if final.skipped:
        logger.debug("Skipped %d unrecognised log lines", final.skipped)

    return ParseResult(commits=final.results, skipped_lines=final.skipped)


def parse_log(raw: str) -> ParseResult:
    """Parse a whole ``git log`` output string."""
    return parse_log_lines(raw.split("\n"))
