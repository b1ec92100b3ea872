"""
User profile and goals service
"""
import logging
from datetime import datetime
from typing import Optional

from pydantic.alias_generators import to_camel

from ..core import clock
from ..core.config import GoalDefaults, settings
from ..core.exceptions import ValidationException
from ..models.user import GoalsUpdate, ReadingGoals, User
from .base.firestore_service import FirestoreBaseService

logger = logging.getLogger(__name__)


class UserService(FirestoreBaseService):
    """Service for user profiles and their reading goals"""

    def __init__(self, db=None, goal_defaults: Optional[GoalDefaults] = None):
        super().__init__("users", db)
        self.goal_defaults = goal_defaults or settings.goal_defaults

    def _to_user(self, data: dict) -> User:
        return User(
            id=data["id"],
            email=data.get("email") or "",
            name=data.get("name") or "Reader",
            avatar_url=data.get("avatar_url"),
            created_at=data["created_at"],
            updated_at=data.get("updated_at"),
            goals=ReadingGoals.from_document(data, self.goal_defaults),
        )

    async def get_or_create(
        self,
        user_id: str,
        now: datetime,
        email: str = "",
        name: str = "Reader",
        avatar_url: Optional[str] = None,
        registered_at: Optional[datetime] = None,
    ) -> User:
        """
        Profile for a user, created with default goals on first sight.

        `created_at` is the account's registration time when known, else the
        first time the user was seen. A known registration time earlier than
        the stored one replaces it, so lazily created profiles are corrected
        on the next sync.
        """
        def build_changes(current):
            stored = current.get("created_at")
            if registered_at is not None and (stored is None or registered_at < stored):
                return {"created_at": registered_at}
            return {}

        def build_new():
            logger.info(f"Creating profile for user {user_id}")
            return {
                "email": email,
                "name": name,
                "avatar_url": avatar_url,
                "daily_goal_minutes": self.goal_defaults.daily_goal_minutes,
                "streak_goal": self.goal_defaults.streak_goal,
                "books_per_year_goal": self.goal_defaults.books_per_year_goal,
                "created_at": registered_at or now,
                "updated_at": now,
            }

        data = await self.read_modify_write(user_id, build_changes, build_new=build_new)
        data["id"] = user_id
        return self._to_user(data)

    async def get_goals(self, user_id: str, now: datetime) -> ReadingGoals:
        user = await self.get_or_create(user_id, now)
        return user.goals

    async def update_goals(self, user_id: str, update: GoalsUpdate, now: datetime) -> ReadingGoals:
        """Change the supplied goals; nothing is written if any value is invalid"""
        changes = {}
        for field, value in update.model_dump(exclude_unset=True).items():
            if value is None:
                continue
            if value < 1:
                raise ValidationException(
                    f"{to_camel(field)} must be at least 1",
                    details={field: value}
                )
            changes[field] = value

        await self.get_or_create(user_id, now)
        if changes:
            changes["updated_at"] = now
            await self.read_modify_write(user_id, lambda current: changes)
            logger.info(f"Updated goals for user {user_id}: {sorted(changes)}")

        return await self.get_goals(user_id, now)

    async def registration_year(self, user_id: str, now: datetime) -> int:
        user = await self.get_or_create(user_id, now)
        return clock.localize(user.created_at).year

    async def delete_profile(self, user_id: str) -> None:
        if await self.get_by_id(user_id) is not None:
            await self.delete(user_id)
