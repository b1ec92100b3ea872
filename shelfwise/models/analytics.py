"""
Analytics response models
"""
from typing import List, Optional

from .base import ApiModel
from .reading_session import ReadingSession


class DailySummary(ApiModel):
    today_minutes: int
    goal_minutes: int
    progress_percent: int


class YearlySummary(ApiModel):
    year: int
    sessions: List[ReadingSession]
    total_hours: float
    total_books: int


class MonthlyPoint(ApiModel):
    date: str  # YYYY-MM-DD
    minutes: int


class YearlyStats(ApiModel):
    total_books_finished: int
    most_active_month: Optional[str] = None  # YYYY-MM
    average_rating: Optional[float] = None


class AnalyticsSummary(ApiModel):
    monthly_data: List[MonthlyPoint]
    yearly_stats: YearlyStats


class GoalProgress(ApiModel):
    current: int
    goal: int
    progress_percent: int


class GoalsOverview(ApiModel):
    daily: GoalProgress
    streak: GoalProgress
    books: GoalProgress
    longest_streak: int
