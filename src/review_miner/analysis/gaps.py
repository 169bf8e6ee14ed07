"""Inactivity gaps between distinct commit days."""

from __future__ import annotations

from typing import Iterable

import numpy as np

from ..exceptions import InvalidDateError
from ..history.models import is_iso_date
from .models import ActivityGap, ActivitySummary


def _distinct_days(dates: Iterable[str]) -> np.ndarray:
    values = list(dates)
    for value in values:
        if not is_iso_date(value):
            raise InvalidDateError(value)
    # np.unique sorts ascending
    return np.unique(np.array(values, dtype="datetime64[D]"))


def detect_gaps(dates: Iterable[str], min_gap_days: int) -> list[ActivityGap]:
    """Report spans between consecutive active days of at least ``min_gap_days``.

    The threshold is inclusive. Nothing is reported before the first or
    after the last observed day.
    """
    if min_gap_days < 1:
        raise ValueError("min_gap_days must be at least 1")

    days = _distinct_days(dates)
    if days.size < 2:
        return []

    deltas = np.diff(days).astype(int)
    gaps: list[ActivityGap] = []
    for idx in np.flatnonzero(deltas >= min_gap_days):
        gaps.append(
            ActivityGap(
                start_date=str(days[idx]),
                end_date=str(days[idx + 1]),
                duration_days=int(deltas[idx]),
            )
        )
    return gaps


def summarize_activity(dates: Iterable[str]) -> ActivitySummary:
    """Distinct active days and the observed span."""
    days = _distinct_days(dates)
    if days.size == 0:
        return ActivitySummary()
    return ActivitySummary(
        active_days=int(days.size),
        first_date=str(days[0]),
        last_date=str(days[-1]),
        span_days=int((days[-1] - days[0]).astype(int)) + 1,
    )
