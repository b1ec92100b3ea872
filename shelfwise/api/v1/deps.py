"""
Request-scoped dependencies shared by the endpoints
"""
from datetime import datetime
from fastapi import Depends

from ...core import clock
from ...core.config import settings
from ...core.firebase_config import get_db, initialize_firebase
from ...services.analytics_service import AnalyticsAggregator
from ...services.book_service import BookService
from ...services.book_state_service import BookStateTracker
from ...services.goal_engine import GoalEngine
from ...services.session_ledger import SessionLedger
from ...services.user_service import UserService


def get_firestore():
    initialize_firebase()
    return get_db()


def get_now() -> datetime:
    return clock.now()


def get_book_service(db=Depends(get_firestore)) -> BookService:
    return BookService(db)


def get_session_ledger(db=Depends(get_firestore)) -> SessionLedger:
    return SessionLedger(db, settings.tracking_rules, settings.SESSION_LIST_LIMIT)


def get_tracker(
    db=Depends(get_firestore),
    books: BookService = Depends(get_book_service),
) -> BookStateTracker:
    return BookStateTracker(db, settings.tracking_rules, books)


def get_user_service(db=Depends(get_firestore)) -> UserService:
    return UserService(db, settings.goal_defaults)


def get_goal_engine(
    ledger: SessionLedger = Depends(get_session_ledger),
    tracker: BookStateTracker = Depends(get_tracker),
    users: UserService = Depends(get_user_service),
) -> GoalEngine:
    return GoalEngine(ledger, tracker, users, settings.goal_defaults)


def get_analytics(
    ledger: SessionLedger = Depends(get_session_ledger),
    tracker: BookStateTracker = Depends(get_tracker),
    users: UserService = Depends(get_user_service),
    goals: GoalEngine = Depends(get_goal_engine),
) -> AnalyticsAggregator:
    return AnalyticsAggregator(ledger, tracker, users, goals)
