"""
Calendar helpers for month-windowed earnings figures.
"""
from datetime import datetime, timezone
from typing import NamedTuple


class MonthWindows(NamedTuple):
    previous_start: datetime
    current_start: datetime
    next_start: datetime


def month_windows(now: datetime) -> MonthWindows:
    """Start instants of the previous, current and next calendar month.

    Callers filter with half-open ranges:
    current month = [current_start, next_start), previous = [previous_start, current_start).
    """
    current_start = datetime(now.year, now.month, 1)
    if now.month == 12:
        next_start = datetime(now.year + 1, 1, 1)
    else:
        next_start = datetime(now.year, now.month + 1, 1)
    if now.month == 1:
        previous_start = datetime(now.year - 1, 12, 1)
    else:
        previous_start = datetime(now.year, now.month - 1, 1)
    return MonthWindows(previous_start, current_start, next_start)


def utcnow() -> datetime:
    """Current UTC time as a naive datetime, matching the DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
