"""
Analytics endpoints
"""
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query

from ....core import clock
from ....models.analytics import AnalyticsSummary, DailySummary, GoalsOverview, YearlySummary
from ....services.analytics_service import AnalyticsAggregator
from ....services.goal_engine import GoalEngine
from ..deps import get_analytics, get_goal_engine, get_now
from .auth import get_current_user

router = APIRouter()


@router.get("/daily", response_model=DailySummary)
async def get_daily(
    current_user_id: str = Depends(get_current_user),
    analytics: AnalyticsAggregator = Depends(get_analytics),
    now: datetime = Depends(get_now),
):
    """Minutes read today against the daily goal"""
    return await analytics.daily_summary(current_user_id, now)


@router.get("/yearly", response_model=YearlySummary)
async def get_yearly(
    year: Optional[int] = Query(None, ge=1, le=clock.MAX_YEAR),
    current_user_id: str = Depends(get_current_user),
    analytics: AnalyticsAggregator = Depends(get_analytics),
    now: datetime = Depends(get_now),
):
    """Sessions and totals for the activity heatmap"""
    return await analytics.yearly_summary(current_user_id, year, now)


@router.get("/summary", response_model=AnalyticsSummary)
async def get_summary(
    current_user_id: str = Depends(get_current_user),
    analytics: AnalyticsAggregator = Depends(get_analytics),
    now: datetime = Depends(get_now),
):
    """
    Reports page data:
    - minutes per day for the current month
    - books finished, most active month and average rating this year
    """
    return await analytics.summary(current_user_id, now)


@router.get("/goals", response_model=GoalsOverview)
async def get_goal_progress(
    current_user_id: str = Depends(get_current_user),
    goals: GoalEngine = Depends(get_goal_engine),
    now: datetime = Depends(get_now),
):
    """Daily, streak and books-per-year goal progress"""
    return await goals.overview(current_user_id, now)
