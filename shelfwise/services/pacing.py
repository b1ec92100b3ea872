"""
Pacing against a target finish date

Expected progress is the share of the reading window (start, or the moment
the target was set, up to the target date) that has already elapsed. Being
ahead or behind is expressed in days at the planned constant pace.
"""
import math
from datetime import datetime
from typing import Optional

from ..core.clock import localize
from ..models.book_state import BookState, DaysStatus, ShelfStatus
from .metrics import round_half_up

SECONDS_PER_DAY = 24 * 60 * 60


def _days_between(start: datetime, end: datetime) -> float:
    return (localize(end) - localize(start)).total_seconds() / SECONDS_PER_DAY


def compute_pacing(state: BookState, now: datetime) -> Optional[DaysStatus]:
    """
    Pacing for a book being read toward a target date.

    Returns None when the book is not on the reading shelf or has no target.
    """
    if state.status != ShelfStatus.READING or state.target_finish_date is None:
        return None

    target = state.target_finish_date
    actual = float(state.progress_percent or 0.0)
    remaining_percent = max(0.0, 100.0 - actual)

    days_remaining = math.ceil(_days_between(now, target))
    overdue = days_remaining <= 0
    percent_per_day_needed = None if overdue else remaining_percent / days_remaining

    anchor = state.start_date or state.target_set_at or now
    # A window shorter than a day (or reversed) is treated as one day long
    total_days = max(_days_between(anchor, target), 1.0)
    elapsed_days = min(max(_days_between(anchor, now), 0.0), total_days)

    expected = 100.0 * elapsed_days / total_days
    planned_rate = 100.0 / total_days
    days_difference = math.ceil(round_half_up((actual - expected) / planned_rate, 6))

    return DaysStatus(
        days_remaining=days_remaining,
        days_difference=days_difference,
        on_track=days_difference >= 0,
        expected_progress=round_half_up(expected, 1),
        actual_progress=actual,
        percent_per_day_needed=None if percent_per_day_needed is None else round_half_up(percent_per_day_needed, 2),
        overdue=overdue,
    )
