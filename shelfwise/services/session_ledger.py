"""
Session ledger

One document per (user, book, calendar day). Reading events for the same
day are added into it with a server-side increment, so repeated or racing
heartbeats sum instead of overwriting each other.
"""
import logging
from datetime import date, datetime
from typing import List, Optional, Set

from firebase_admin import firestore

from ..core import clock
from ..core.config import TrackingRules, settings
from ..core.exceptions import ValidationException
from ..models.reading_session import ReadingSession
from .base.firestore_service import FirestoreBaseService

logger = logging.getLogger(__name__)


def session_id(user_id: str, book_id: str, moment: datetime) -> str:
    return f"{user_id}_{book_id}_{clock.to_local_date(moment).strftime('%Y%m%d')}"


class SessionLedger(FirestoreBaseService):
    """Service for recording and querying reading sessions"""

    def __init__(self, db=None, rules: Optional[TrackingRules] = None, list_limit: Optional[int] = None):
        super().__init__("reading_sessions", db)
        self.rules = rules or settings.tracking_rules
        self.list_limit = list_limit or settings.SESSION_LIST_LIMIT

    def validate_duration(self, duration_seconds) -> int:
        if isinstance(duration_seconds, bool) or not isinstance(duration_seconds, int):
            raise ValidationException(
                "Valid durationSeconds is required",
                details={"duration_seconds": duration_seconds}
            )
        if duration_seconds < self.rules.min_session_seconds:
            raise ValidationException(
                f"durationSeconds must be at least {self.rules.min_session_seconds}",
                details={"duration_seconds": duration_seconds}
            )
        return duration_seconds

    async def record_session(
        self,
        user_id: str,
        book_id: str,
        duration_seconds: int,
        occurred_at: datetime,
    ) -> ReadingSession:
        """Add reading time to the day bucket containing `occurred_at`"""
        duration_seconds = self.validate_duration(duration_seconds)

        doc_id = session_id(user_id, book_id, occurred_at)
        data = await self.merge(doc_id, {
            "user_id": user_id,
            "book_id": book_id,
            "date": clock.day_start(occurred_at),
            "day": clock.day_key(occurred_at),
            "duration_seconds": firestore.Increment(duration_seconds),
            "updated_at": occurred_at,
        })

        logger.info(
            f"Recorded {duration_seconds}s for user {user_id} on book {book_id} "
            f"({data['day']}, total {data['duration_seconds']}s)"
        )
        return ReadingSession(**data)

    async def list_sessions(
        self,
        user_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> List[ReadingSession]:
        """Sessions newest first, optionally bounded by inclusive bucket dates"""
        filters = [("user_id", "==", user_id)]
        if start_date is not None:
            filters.append(("date", ">=", clock.localize(start_date)))
        if end_date is not None:
            filters.append(("date", "<=", clock.localize(end_date)))

        docs = await self.query(
            filters,
            order_by="date",
            limit=min(limit or self.list_limit, self.list_limit),
            direction=firestore.Query.DESCENDING,
        )
        return [ReadingSession(**doc) for doc in docs]

    async def sessions_between(self, user_id: str, start: datetime, end: datetime) -> List[ReadingSession]:
        """Sessions whose bucket falls in the half-open range [start, end), oldest first"""
        docs = await self.query([
            ("user_id", "==", user_id),
            ("date", ">=", start),
            ("date", "<", end),
        ])
        docs.sort(key=lambda doc: doc["date"])
        return [ReadingSession(**doc) for doc in docs]

    async def total_seconds_on(self, user_id: str, day: date) -> int:
        start, end = clock.day_bounds(day)
        sessions = await self.sessions_between(user_id, start, end)
        return sum(session.duration_seconds for session in sessions)

    async def reading_days(self, user_id: str) -> Set[date]:
        """Every calendar day with at least one recorded session"""
        docs = await self.get_all_by_user(user_id)
        return {clock.to_local_date(doc["date"]) for doc in docs if doc.get("duration_seconds", 0) > 0}
