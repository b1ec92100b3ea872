"""
Analytics aggregator

Time-windowed rollups over the session ledger and shelf entries for the
reports page and the activity heatmap.
"""
import logging
from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from ..core import clock
from ..core.exceptions import ValidationException
from ..models.analytics import AnalyticsSummary, DailySummary, MonthlyPoint, YearlyStats, YearlySummary
from ..models.book_state import BookState
from ..models.reading_session import ReadingSession
from .book_state_service import BookStateTracker
from .goal_engine import GoalEngine
from .metrics import round_half_up, seconds_to_hours, seconds_to_minutes
from .session_ledger import SessionLedger
from .user_service import UserService

logger = logging.getLogger(__name__)


def seconds_by_day(sessions: Iterable[ReadingSession]) -> Dict[str, int]:
    totals: Dict[str, int] = defaultdict(int)
    for session in sessions:
        totals[clock.day_key(session.date)] += session.duration_seconds
    return totals


def seconds_by_month(sessions: Iterable[ReadingSession]) -> Dict[str, int]:
    totals: Dict[str, int] = defaultdict(int)
    for session in sessions:
        totals[clock.month_key(session.date)] += session.duration_seconds
    return totals


def daily_series(sessions: Iterable[ReadingSession]) -> List[MonthlyPoint]:
    """Minutes per reading day, oldest first"""
    totals = seconds_by_day(sessions)
    return [
        MonthlyPoint(date=day, minutes=seconds_to_minutes(seconds))
        for day, seconds in sorted(totals.items())
    ]


def pick_most_active_month(sessions: Iterable[ReadingSession]) -> Optional[str]:
    """Month with the most reading time; the earliest month wins a tie"""
    totals = seconds_by_month(sessions)
    if not totals:
        return None
    return min(totals, key=lambda month: (-totals[month], month))


def mean_rating(states: Iterable[BookState]) -> Optional[float]:
    ratings = [s.rating for s in states if s.rating is not None]
    if not ratings:
        return None
    return round_half_up(sum(ratings) / len(ratings), 1)


class AnalyticsAggregator:
    """Reading reports built from sessions and shelf entries"""

    def __init__(self, ledger: SessionLedger, tracker: BookStateTracker, users: UserService, goals: GoalEngine):
        self.ledger = ledger
        self.tracker = tracker
        self.users = users
        self.goals = goals

    async def daily_summary(self, user_id: str, now: datetime) -> DailySummary:
        return await self.goals.daily_goal_progress(user_id, now)

    async def yearly_summary(self, user_id: str, year: Optional[int], now: datetime) -> YearlySummary:
        """Totals and raw sessions for a year, never earlier than the user's registration"""
        requested = year if year is not None else clock.localize(now).year
        if not 1 <= requested <= clock.MAX_YEAR:
            raise ValidationException(
                f"year must be between 1 and {clock.MAX_YEAR}",
                details={"year": requested}
            )
        selected = max(requested, await self.users.registration_year(user_id, now))
        if selected != requested:
            logger.debug(f"Clamped yearly analytics for {user_id} from {requested} to {selected}")

        start, end = clock.year_bounds(selected)
        sessions = await self.ledger.sessions_between(user_id, start, end)
        finished = await self.tracker.finished_between(user_id, start, end)

        return YearlySummary(
            year=selected,
            sessions=sessions,
            total_hours=seconds_to_hours(sum(s.duration_seconds for s in sessions)),
            total_books=len(finished),
        )

    async def monthly_series(self, user_id: str, year: int, month: int) -> List[MonthlyPoint]:
        start, end = clock.month_bounds(year, month)
        return daily_series(await self.ledger.sessions_between(user_id, start, end))

    async def most_active_month(self, user_id: str, year: int) -> Optional[str]:
        start, end = clock.year_bounds(year)
        return pick_most_active_month(await self.ledger.sessions_between(user_id, start, end))

    async def average_rating(self, user_id: str, year: int) -> Optional[float]:
        """Mean rating of books finished during the year, None when none are rated"""
        start, end = clock.year_bounds(year)
        return mean_rating(await self.tracker.finished_between(user_id, start, end))

    async def summary(self, user_id: str, now: datetime) -> AnalyticsSummary:
        local_now = clock.localize(now)
        start, end = clock.year_bounds(local_now.year)
        finished = await self.tracker.finished_between(user_id, start, end)

        return AnalyticsSummary(
            monthly_data=await self.monthly_series(user_id, local_now.year, local_now.month),
            yearly_stats=YearlyStats(
                total_books_finished=len(finished),
                most_active_month=await self.most_active_month(user_id, local_now.year),
                average_rating=await self.average_rating(user_id, local_now.year),
            ),
        )
