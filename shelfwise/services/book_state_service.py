"""
Book-state tracker

Owns the per-user per-book shelf entry: status, position, progress, dates,
review and notes. Every write goes through a conditional read-modify-write
so concurrent heartbeats and user actions never clobber each other.
"""
import logging
import uuid
from datetime import datetime
from typing import List, Optional

from ..core.config import TrackingRules, settings
from ..core.exceptions import ResourceNotFoundException, ValidationException
from ..models.book_state import (
    BookNote, BookState, BookStateResponse, NoteCreate, ProgressUpdate,
    ShelfEntryUpdate, ShelfStatus, TrackerResponse,
)
from .base.firestore_service import FirestoreBaseService
from .book_service import BookService
from .pacing import compute_pacing
from .reconciliation import (
    entry_update_changes, new_state, progress_changes, session_changes,
    state_id, status_changes,
)

logger = logging.getLogger(__name__)


def _last_touched(state: BookState) -> float:
    moment = state.updated_at or state.created_at
    return moment.timestamp() if moment else 0.0


class BookStateTracker(FirestoreBaseService):
    """Service for shelf entries and reading progress"""

    def __init__(self, db=None, rules: Optional[TrackingRules] = None, books: Optional[BookService] = None):
        super().__init__("book_states", db)
        self.rules = rules or settings.tracking_rules
        self.books = books or BookService(self.db)

    def _not_on_shelf(self, book_id: str) -> ResourceNotFoundException:
        return ResourceNotFoundException("Book not on shelf", details={"book_id": book_id})

    async def _update_existing(self, user_id: str, book_id: str, build_changes) -> BookState:
        data = await self.read_modify_write(
            state_id(user_id, book_id),
            build_changes,
            missing_error=self._not_on_shelf(book_id),
        )
        return BookState(**data)

    async def _with_book(self, state: BookState) -> BookStateResponse:
        book = await self.books.get_book(state.book_id)
        return BookStateResponse(**state.model_dump(), book=book)

    async def get_entry(self, user_id: str, book_id: str) -> BookState:
        data = await self.get_by_id(state_id(user_id, book_id))
        if data is None:
            raise self._not_on_shelf(book_id)
        return BookState(**data)

    async def upsert_shelf_entry(
        self,
        user_id: str,
        book_id: str,
        status: Optional[ShelfStatus],
        now: datetime,
    ) -> BookStateResponse:
        """Put a book on a shelf, creating the entry if needed"""
        book = await self.books.get_book(book_id)
        if book is None:
            raise ResourceNotFoundException("Book not found", details={"book_id": book_id})

        def build_changes(current):
            if status is None:
                return {}
            changes = status_changes(current, status, now)
            if changes:
                changes["updated_at"] = now
            return changes

        data = await self.read_modify_write(
            state_id(user_id, book_id),
            build_changes,
            build_new=lambda: new_state(user_id, book_id, status or ShelfStatus.WANT, now),
        )
        logger.info(f"Shelf entry {user_id}/{book_id} is now '{data['status']}'")
        return BookStateResponse(**data, book=book)

    async def update_progress(
        self,
        user_id: str,
        book_id: str,
        update: ProgressUpdate,
        now: datetime,
    ) -> BookState:
        """
        Reconcile a position reported by the reader.

        A book read without a shelf entry is put on the reading shelf.
        """
        def build_new():
            data = new_state(user_id, book_id, ShelfStatus.READING, now)
            data.update(progress_changes(data, update, self.rules, now))
            return data

        data = await self.read_modify_write(
            state_id(user_id, book_id),
            lambda current: session_changes(current, update, self.rules, now),
            build_new=build_new,
        )
        state = BookState(**data)
        if state.status == ShelfStatus.FINISHED and state.finish_date == now:
            logger.info(f"Book {book_id} auto-finished for user {user_id} at {state.progress_percent}%")
        return state

    async def set_status(
        self,
        user_id: str,
        book_id: str,
        status: ShelfStatus,
        now: datetime,
        finish_date: Optional[datetime] = None,
    ) -> BookState:
        """Explicit shelf move by the user"""
        def build_changes(current):
            changes = status_changes(current, status, now, finish_date)
            if changes:
                changes["updated_at"] = now
            return changes

        return await self._update_existing(user_id, book_id, build_changes)

    async def update_entry(
        self,
        user_id: str,
        book_id: str,
        update: ShelfEntryUpdate,
        now: datetime,
    ) -> BookStateResponse:
        state = await self._update_existing(
            user_id, book_id,
            lambda current: entry_update_changes(current, update, self.rules, now),
        )
        return await self._with_book(state)

    async def set_target_date(
        self,
        user_id: str,
        book_id: str,
        target_finish_date: Optional[datetime],
        now: datetime,
    ) -> BookStateResponse:
        if target_finish_date is None:
            raise ValidationException("targetFinishDate is required")

        state = await self._update_existing(
            user_id, book_id,
            lambda current: {
                "target_finish_date": target_finish_date,
                "target_set_at": now,
                "updated_at": now,
            },
        )
        return await self._with_book(state)

    async def delete_shelf_entry(self, user_id: str, book_id: str) -> None:
        """Remove the shelf entry only; the book and its sessions stay"""
        try:
            await self.delete(state_id(user_id, book_id))
        except ResourceNotFoundException:
            raise self._not_on_shelf(book_id)
        logger.info(f"Removed {book_id} from shelves of user {user_id}")

    async def list_by_status(self, user_id: str, status: ShelfStatus) -> List[BookStateResponse]:
        """Entries on one shelf, with books populated; entries for deleted books are dropped"""
        docs = await self.query([
            ("user_id", "==", user_id),
            ("status", "==", status.value),
        ])
        states = [BookState(**doc) for doc in docs]

        if status == ShelfStatus.READING:
            # Most recently read first
            states.sort(key=_last_touched, reverse=True)

        books = await self.books.get_books(s.book_id for s in states)
        return [
            BookStateResponse(**state.model_dump(), book=books[state.book_id])
            for state in states
            if state.book_id in books
        ]

    async def get_tracker(self, user_id: str, book_id: str, now: datetime) -> TrackerResponse:
        """Shelf entry plus pacing against its target date"""
        state = await self.get_entry(user_id, book_id)
        book = await self.books.get_book(book_id)
        return TrackerResponse(
            **state.model_dump(),
            book=book,
            days_status=compute_pacing(state, now),
        )

    async def finished_between(self, user_id: str, start: datetime, end: datetime) -> List[BookState]:
        """Finished entries with a finish date in [start, end)"""
        docs = await self.query([
            ("user_id", "==", user_id),
            ("status", "==", ShelfStatus.FINISHED.value),
        ])
        states = [BookState(**doc) for doc in docs]
        return [s for s in states if s.finish_date is not None and start <= s.finish_date < end]

    async def add_note(self, user_id: str, book_id: str, note: NoteCreate, now: datetime) -> BookNote:
        created = BookNote(
            id=str(uuid.uuid4()),
            location=note.location,
            text=note.text,
            comment=note.comment,
            created_at=now,
        )
        await self._update_existing(
            user_id, book_id,
            lambda current: {
                "notes": list(current.get("notes") or []) + [created.model_dump()],
                "updated_at": now,
            },
        )
        return created

    async def remove_note(self, user_id: str, book_id: str, note_id: str, now: datetime) -> None:
        def build_changes(current):
            notes = list(current.get("notes") or [])
            remaining = [n for n in notes if n.get("id") != note_id]
            if len(remaining) == len(notes):
                raise ResourceNotFoundException("Note not found", details={"note_id": note_id})
            return {"notes": remaining, "updated_at": now}

        await self._update_existing(user_id, book_id, build_changes)
