"""
Book data models

Books are owned by the acquisition side of the system; this service only
reads the fields it needs to display shelves and sessions.
"""
from typing import Optional

from .base import ApiModel


class BookSummary(ApiModel):
    """Lightweight book reference populated into shelf entries and sessions"""
    id: str
    title: str
    author: str = "Unknown"
    cover_url: Optional[str] = None

    @classmethod
    def from_document(cls, book_id: str, data: dict) -> "BookSummary":
        return cls(
            id=book_id,
            title=data.get("title") or "Untitled",
            author=data.get("author") or "Unknown",
            cover_url=data.get("cover_url"),
        )
