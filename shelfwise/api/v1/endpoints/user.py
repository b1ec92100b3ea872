"""
User goals and account endpoints
"""
import logging
from datetime import datetime
from fastapi import APIRouter, Depends

from ....core.responses import SuccessResponse, success_response
from ....models.user import GoalsUpdate, ReadingGoals
from ....services.book_state_service import BookStateTracker
from ....services.session_ledger import SessionLedger
from ....services.user_service import UserService
from ..deps import get_now, get_session_ledger, get_tracker, get_user_service
from .auth import get_current_user

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/goals", response_model=ReadingGoals)
async def get_goals(
    current_user_id: str = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
    now: datetime = Depends(get_now),
):
    return await users.get_goals(current_user_id, now)


@router.put("/goals", response_model=ReadingGoals)
async def update_goals(
    request: GoalsUpdate,
    current_user_id: str = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
    now: datetime = Depends(get_now),
):
    """Update any of the daily, streak and books-per-year goals"""
    return await users.update_goals(current_user_id, request, now)


@router.delete("/me", response_model=SuccessResponse)
async def delete_account(
    current_user_id: str = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
    ledger: SessionLedger = Depends(get_session_ledger),
    tracker: BookStateTracker = Depends(get_tracker),
):
    """Delete the user's reading history, shelves and profile"""
    sessions = await ledger.delete_all_by_user(current_user_id)
    states = await tracker.delete_all_by_user(current_user_id)
    await users.delete_profile(current_user_id)

    logger.info(f"Deleted account {current_user_id} ({sessions} sessions, {states} shelf entries)")
    return success_response("Account and all data deleted successfully")
