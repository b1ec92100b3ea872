"""
Reading streak calculations
"""
from datetime import date, timedelta
from typing import Iterable, Set

from ..core.clock import to_local_date


def _reading_days(session_dates: Iterable) -> Set[date]:
    return {to_local_date(value) for value in session_dates if value is not None}


def compute_streak(session_dates: Iterable, today: date) -> int:
    """
    Count consecutive reading days ending today, or yesterday if nothing
    has been read yet today.

    An unread today does not break a streak that ran through yesterday, but
    it does not count toward it either.
    """
    days = _reading_days(session_dates)
    if not days:
        return 0

    current = today if today in days else today - timedelta(days=1)

    streak = 0
    while current in days:
        streak += 1
        current -= timedelta(days=1)

    return streak


def longest_streak(session_dates: Iterable) -> int:
    """Longest run of consecutive reading days ever recorded"""
    days = sorted(_reading_days(session_dates))

    longest = 0
    run = 0
    previous = None
    for day in days:
        run = run + 1 if previous is not None and day - previous == timedelta(days=1) else 1
        longest = max(longest, run)
        previous = day

    return longest
