"""
Streak and goal engine

Derives goal attainment from the session ledger and finished shelf
entries. Nothing here is persisted; every value is recomputed on request.
"""
import logging
from datetime import datetime
from typing import Optional

from ..core import clock
from ..core.config import GoalDefaults
from ..models.analytics import DailySummary, GoalProgress, GoalsOverview
from ..models.user import ReadingGoals
from .book_state_service import BookStateTracker
from .metrics import goal_percent, seconds_to_minutes
from .session_ledger import SessionLedger
from .streaks import compute_streak, longest_streak
from .user_service import UserService

logger = logging.getLogger(__name__)


class GoalEngine:
    """Computes daily, streak and books-per-year goal progress"""

    def __init__(
        self,
        ledger: SessionLedger,
        tracker: BookStateTracker,
        users: UserService,
        defaults: GoalDefaults,
    ):
        self.ledger = ledger
        self.tracker = tracker
        self.users = users
        self.defaults = defaults

    async def goals_for(self, user_id: str) -> ReadingGoals:
        data = await self.users.get_by_id(user_id)
        if data is None:
            return ReadingGoals.from_document({}, self.defaults)
        return ReadingGoals.from_document(data, self.defaults)

    async def daily_goal_progress(self, user_id: str, now: datetime, goals: Optional[ReadingGoals] = None) -> DailySummary:
        """Minutes read today against the daily goal"""
        goals = goals or await self.goals_for(user_id)
        seconds = await self.ledger.total_seconds_on(user_id, clock.to_local_date(now))
        minutes = seconds_to_minutes(seconds)
        return DailySummary(
            today_minutes=minutes,
            goal_minutes=goals.daily_goal_minutes,
            progress_percent=goal_percent(minutes, goals.daily_goal_minutes),
        )

    async def books_goal_progress(self, user_id: str, year: int, books_per_year_goal: int) -> GoalProgress:
        """Books finished during `year` against the yearly goal"""
        start, end = clock.year_bounds(year)
        finished = await self.tracker.finished_between(user_id, start, end)
        return GoalProgress(
            current=len(finished),
            goal=books_per_year_goal,
            progress_percent=goal_percent(len(finished), books_per_year_goal),
        )

    async def overview(self, user_id: str, now: datetime) -> GoalsOverview:
        goals = await self.goals_for(user_id)
        daily = await self.daily_goal_progress(user_id, now, goals)
        days = await self.ledger.reading_days(user_id)
        streak = compute_streak(days, clock.to_local_date(now))
        books = await self.books_goal_progress(user_id, clock.localize(now).year, goals.books_per_year_goal)

        return GoalsOverview(
            daily=GoalProgress(
                current=daily.today_minutes,
                goal=daily.goal_minutes,
                progress_percent=daily.progress_percent,
            ),
            streak=GoalProgress(
                current=streak,
                goal=goals.streak_goal,
                progress_percent=goal_percent(streak, goals.streak_goal),
            ),
            books=books,
            longest_streak=longest_streak(days),
        )
