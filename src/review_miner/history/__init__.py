"""History extraction and parsing: git log in, commit records out."""

from .git_extractor import GitExtractor, HistorySource
from .models import CommitRecord, FileChange, ParseResult, is_iso_date
from .parser import parse_log, parse_log_lines

__all__ = [
    "CommitRecord",
    "FileChange",
    "ParseResult",
    "GitExtractor",
    "HistorySource",
    "is_iso_date",
    "parse_log",
    "parse_log_lines",
]
