"""Overlap predicate shared by booking and availability enumeration."""

from datetime import datetime
from typing import Iterable

Interval = tuple[datetime, datetime]


def intervals_overlap(first_start: datetime, first_end: datetime, second_start: datetime, second_end: datetime) -> bool:
    # Half-open intervals: touching endpoints do not overlap.
    return first_start < second_end and first_end > second_start


def has_conflict(existing: Iterable[Interval], candidate_start: datetime, candidate_end: datetime) -> bool:
    """Return True when any existing [start, end) interval overlaps the candidate.

    Callers pass only the intervals that can block, i.e. non-cancelled
    appointments within the window being checked.
    """
    return any(
        intervals_overlap(existing_start, existing_end, candidate_start, candidate_end)
        for existing_start, existing_end in existing
    )
