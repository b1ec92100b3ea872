"""
Tracker endpoints
Per-book progress detail and target finish dates
"""
from datetime import datetime
from fastapi import APIRouter, Depends

from ....models.book_state import BookStateResponse, TargetDateRequest, TrackerResponse
from ....services.book_state_service import BookStateTracker
from ..deps import get_now, get_tracker
from .auth import get_current_user

router = APIRouter()


@router.put("/{book_id}/goal", response_model=BookStateResponse)
async def set_target_date(
    book_id: str,
    request: TargetDateRequest,
    current_user_id: str = Depends(get_current_user),
    tracker: BookStateTracker = Depends(get_tracker),
    now: datetime = Depends(get_now),
):
    """Set the date the user wants to finish the book by"""
    return await tracker.set_target_date(current_user_id, book_id, request.target_finish_date, now)


@router.get("/{book_id}", response_model=TrackerResponse)
async def get_tracker_detail(
    book_id: str,
    current_user_id: str = Depends(get_current_user),
    tracker: BookStateTracker = Depends(get_tracker),
    now: datetime = Depends(get_now),
):
    """
    Shelf entry with pacing:
    - days remaining until the target date
    - expected vs actual progress
    - days ahead (positive) or behind (negative)
    """
    return await tracker.get_tracker(current_user_id, book_id, now)
