"""
Shelf endpoints
Adding books to shelves, moving them between shelves, reviews and notes
"""
from datetime import datetime
from typing import List
from fastapi import APIRouter, Depends, status

from ....core.exceptions import ValidationException
from ....core.responses import SuccessResponse, success_response
from ....models.book_state import (
    BookNote, BookStateResponse, NoteCreate, ShelfEntryCreate, ShelfEntryUpdate, ShelfStatus,
)
from ....services.book_state_service import BookStateTracker
from ..deps import get_now, get_tracker
from .auth import get_current_user

router = APIRouter()


@router.post("/{book_id}", response_model=BookStateResponse, status_code=status.HTTP_201_CREATED)
async def add_to_shelf(
    book_id: str,
    request: ShelfEntryCreate,
    current_user_id: str = Depends(get_current_user),
    tracker: BookStateTracker = Depends(get_tracker),
    now: datetime = Depends(get_now),
):
    """Add a book to a shelf (want by default) or move it to the given shelf"""
    return await tracker.upsert_shelf_entry(current_user_id, book_id, request.status, now)


@router.put("/{book_id}", response_model=BookStateResponse)
async def update_shelf_entry(
    book_id: str,
    request: ShelfEntryUpdate,
    current_user_id: str = Depends(get_current_user),
    tracker: BookStateTracker = Depends(get_tracker),
    now: datetime = Depends(get_now),
):
    """Update status, progress, dates, rating or review of a shelved book"""
    return await tracker.update_entry(current_user_id, book_id, request, now)


@router.delete("/{book_id}", response_model=SuccessResponse)
async def remove_from_shelf(
    book_id: str,
    current_user_id: str = Depends(get_current_user),
    tracker: BookStateTracker = Depends(get_tracker),
):
    """Remove a book from the user's shelves; reading history is kept"""
    await tracker.delete_shelf_entry(current_user_id, book_id)
    return success_response("Book removed from shelf successfully", {"bookId": book_id})


@router.post("/{book_id}/notes", response_model=BookNote, status_code=status.HTTP_201_CREATED)
async def add_note(
    book_id: str,
    request: NoteCreate,
    current_user_id: str = Depends(get_current_user),
    tracker: BookStateTracker = Depends(get_tracker),
    now: datetime = Depends(get_now),
):
    return await tracker.add_note(current_user_id, book_id, request, now)


@router.delete("/{book_id}/notes/{note_id}", response_model=SuccessResponse)
async def remove_note(
    book_id: str,
    note_id: str,
    current_user_id: str = Depends(get_current_user),
    tracker: BookStateTracker = Depends(get_tracker),
    now: datetime = Depends(get_now),
):
    await tracker.remove_note(current_user_id, book_id, note_id, now)
    return success_response("Note removed successfully", {"noteId": note_id})


@router.get("/{shelf}", response_model=List[BookStateResponse])
async def list_shelf(
    shelf: str,
    current_user_id: str = Depends(get_current_user),
    tracker: BookStateTracker = Depends(get_tracker),
):
    """Books on one shelf; the reading shelf is ordered by most recent activity"""
    try:
        shelf_status = ShelfStatus(shelf)
    except ValueError:
        raise ValidationException(
            "Invalid status",
            details={"status": shelf, "allowed": [s.value for s in ShelfStatus]}
        )
    return await tracker.list_by_status(current_user_id, shelf_status)
