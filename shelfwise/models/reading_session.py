"""
Reading Session Models
"""
from datetime import datetime
from typing import Optional

from pydantic import Field

from .base import ApiModel
from .book import BookSummary


class ReadingSession(ApiModel):
    """Accumulated reading time for one (user, book, day)"""
    id: str
    user_id: str
    book_id: str
    duration_seconds: int = Field(default=0, ge=0)
    date: datetime  # start of the day bucket
    day: str  # YYYY-MM-DD of the bucket
    updated_at: Optional[datetime] = None


class SessionRecordRequest(ApiModel):
    """Heartbeat payload sent by the reader"""
    duration_seconds: int
    last_location: Optional[str] = None
    progress_percent: Optional[float] = Field(default=None, ge=0, le=100)


class SessionResponse(ReadingSession):
    book: Optional[BookSummary] = None


class HeartbeatPolicy(ApiModel):
    """How often and how much a client should report"""
    heartbeat_interval_seconds: int
    min_report_seconds: int
    exit_min_seconds: int
