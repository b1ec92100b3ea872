"""
Reading session endpoints

The reader reports active time every heartbeat and once more on exit;
each call is folded into today's session and the book's shelf entry.
"""
from datetime import datetime
from typing import List, Optional
from fastapi import APIRouter, Depends, Query

from ....core import clock
from ....core.config import settings
from ....core.exceptions import ValidationException
from ....models.book_state import ProgressUpdate
from ....models.reading_session import HeartbeatPolicy, SessionRecordRequest, SessionResponse
from ....services.book_service import BookService
from ....services.book_state_service import BookStateTracker
from ....services.session_ledger import SessionLedger
from ....services.user_service import UserService
from ..deps import get_book_service, get_now, get_session_ledger, get_tracker, get_user_service
from .auth import get_current_user

router = APIRouter()


def _parse_date(name: str, value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return clock.localize(datetime.fromisoformat(value))
    except ValueError:
        raise ValidationException(f"{name} must be an ISO date", details={name: value})


@router.get("/policy", response_model=HeartbeatPolicy)
async def get_heartbeat_policy():
    """Parameters of `TrackingRules.reportable_seconds`, the rule readers follow when reporting"""
    rules = settings.tracking_rules
    return HeartbeatPolicy(
        heartbeat_interval_seconds=rules.heartbeat_interval_seconds,
        min_report_seconds=rules.heartbeat_min_report_seconds,
        exit_min_seconds=rules.min_session_seconds,
    )


@router.get("/sessions", response_model=List[SessionResponse])
async def list_sessions(
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    current_user_id: str = Depends(get_current_user),
    ledger: SessionLedger = Depends(get_session_ledger),
    books: BookService = Depends(get_book_service),
):
    """Reading sessions, newest first, with book title and author"""
    sessions = await ledger.list_sessions(
        current_user_id,
        start_date=_parse_date("startDate", start_date),
        end_date=_parse_date("endDate", end_date),
    )
    resolved = await books.get_books(s.book_id for s in sessions)
    return [
        SessionResponse(**session.model_dump(), book=resolved.get(session.book_id))
        for session in sessions
    ]


@router.post("/{book_id}/session", response_model=SessionResponse)
async def record_session(
    book_id: str,
    request: SessionRecordRequest,
    current_user_id: str = Depends(get_current_user),
    ledger: SessionLedger = Depends(get_session_ledger),
    tracker: BookStateTracker = Depends(get_tracker),
    books: BookService = Depends(get_book_service),
    users: UserService = Depends(get_user_service),
    now: datetime = Depends(get_now),
):
    """Add reading time to today's session and reconcile the reported position"""
    ledger.validate_duration(request.duration_seconds)
    await books.ensure_readable(current_user_id, book_id)

    # A profile's created_at is never later than the user's first session
    await users.get_or_create(current_user_id, now)

    session = await ledger.record_session(current_user_id, book_id, request.duration_seconds, now)

    await tracker.update_progress(
        current_user_id,
        book_id,
        ProgressUpdate(
            last_location=request.last_location,
            progress_percent=request.progress_percent,
        ),
        now,
    )

    return SessionResponse(**session.model_dump())
