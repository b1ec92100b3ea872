"""
Book state (shelf entry) data models
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import Field

from .base import ApiModel
from .book import BookSummary


class ShelfStatus(str, Enum):
    WANT = "want"
    READING = "reading"
    FINISHED = "finished"
    DROPPED = "dropped"


class BookNote(ApiModel):
    id: str
    location: Optional[str] = None  # CFI the note is anchored to
    text: str = ""
    comment: Optional[str] = None
    created_at: Optional[datetime] = None


class BookState(ApiModel):
    """Per-user per-book shelf and progress record"""
    id: Optional[str] = None
    user_id: str
    book_id: str
    status: ShelfStatus = ShelfStatus.WANT
    last_location: Optional[str] = None
    progress_percent: float = Field(default=0.0, ge=0, le=100)
    start_date: Optional[datetime] = None
    finish_date: Optional[datetime] = None
    target_finish_date: Optional[datetime] = None
    target_set_at: Optional[datetime] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    review: Optional[str] = None
    notes: List[BookNote] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ShelfEntryCreate(ApiModel):
    status: Optional[ShelfStatus] = None


class ShelfEntryUpdate(ApiModel):
    """
    Partial update of a shelf entry.

    Only keys present in the request body are applied; see
    `model_fields_set`. An explicit null is distinct from an absent key.
    """
    status: Optional[ShelfStatus] = None
    progress_percent: Optional[float] = Field(default=None, ge=0, le=100)
    last_location: Optional[str] = None
    target_finish_date: Optional[datetime] = None
    finish_date: Optional[datetime] = None
    rating: Optional[int] = Field(default=None, ge=1, le=5)
    review: Optional[str] = Field(default=None, max_length=2000)


class ProgressUpdate(ApiModel):
    """Position reported alongside a reading session"""
    last_location: Optional[str] = None
    progress_percent: Optional[float] = Field(default=None, ge=0, le=100)


class TargetDateRequest(ApiModel):
    target_finish_date: Optional[datetime] = None


class NoteCreate(ApiModel):
    location: Optional[str] = None
    text: str = Field(..., min_length=1)
    comment: Optional[str] = None


class DaysStatus(ApiModel):
    """Pacing of a book against its target finish date"""
    days_remaining: int
    days_difference: int
    on_track: bool
    expected_progress: float
    actual_progress: float
    percent_per_day_needed: Optional[float] = None  # None when overdue
    overdue: bool = False


class BookStateResponse(BookState):
    book: Optional[BookSummary] = None


class TrackerResponse(BookStateResponse):
    days_status: Optional[DaysStatus] = None
