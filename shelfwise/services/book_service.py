"""
Book lookup service

Books are created by the acquisition side; here they are only resolved
for display and checked for read access.
"""
import logging
from typing import Dict, Iterable, Optional

from ..core.exceptions import AuthorizationException
from ..models.book import BookSummary
from .base.firestore_service import FirestoreBaseService

logger = logging.getLogger(__name__)


class BookService(FirestoreBaseService):
    """Service for resolving books"""

    def __init__(self, db=None):
        super().__init__("books", db)

    async def get_book(self, book_id: str) -> Optional[BookSummary]:
        data = await self.get_by_id(book_id)
        if data is None:
            return None
        return BookSummary.from_document(book_id, data)

    async def get_books(self, book_ids: Iterable[str]) -> Dict[str, BookSummary]:
        """Resolve several books at once; unknown ids are left out"""
        books = {}
        for book_id in set(book_ids):
            book = await self.get_book(book_id)
            if book is not None:
                books[book_id] = book
        return books

    async def ensure_readable(self, user_id: str, book_id: str) -> None:
        """
        Reject reads of another user's private upload.

        Unknown books pass: the reader may hold content this service has not
        been told about, and recording time for it is harmless.
        """
        data = await self.get_by_id(book_id)
        if data is None:
            return
        if data.get("is_private") and data.get("owner_id") != user_id:
            logger.warning(f"User {user_id} denied access to private book {book_id}")
            raise AuthorizationException(
                "You do not have access to this book",
                details={"book_id": book_id}
            )
