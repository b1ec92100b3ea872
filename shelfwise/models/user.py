"""
User data models
"""
from pydantic import Field
from typing import Optional
from datetime import datetime

from .base import ApiModel
from ..core.config import GoalDefaults


class ReadingGoals(ApiModel):
    daily_goal_minutes: int = Field(..., ge=1)
    streak_goal: int = Field(..., ge=1)
    books_per_year_goal: int = Field(..., ge=1)

    @classmethod
    def from_document(cls, data: dict, defaults: GoalDefaults) -> "ReadingGoals":
        # Zero or missing values fall back to the defaults
        return cls(
            daily_goal_minutes=data.get("daily_goal_minutes") or defaults.daily_goal_minutes,
            streak_goal=data.get("streak_goal") or defaults.streak_goal,
            books_per_year_goal=data.get("books_per_year_goal") or defaults.books_per_year_goal,
        )


class GoalsUpdate(ApiModel):
    """Only supplied goals are changed; each must be at least 1"""
    daily_goal_minutes: Optional[int] = None
    streak_goal: Optional[int] = None
    books_per_year_goal: Optional[int] = None


class User(ApiModel):
    id: str
    email: str = ""
    name: str = "Reader"
    avatar_url: Optional[str] = None
    created_at: datetime
    updated_at: Optional[datetime] = None
    goals: ReadingGoals

