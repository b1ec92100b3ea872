"""
Book-state transition rules

Pure functions over a stored book-state document (snake_case dict). Each
returns only the fields that must change, so callers can apply them as a
conditional partial update.
"""
from datetime import datetime
from typing import Any, Dict, Optional

from ..core.config import TrackingRules
from ..models.book_state import ProgressUpdate, ShelfEntryUpdate, ShelfStatus


def state_id(user_id: str, book_id: str) -> str:
    return f"{user_id}_{book_id}"


def new_state(user_id: str, book_id: str, status: ShelfStatus, now: datetime) -> Dict[str, Any]:
    """Initial document for a book entering a shelf"""
    return {
        "user_id": user_id,
        "book_id": book_id,
        "status": status.value,
        "last_location": None,
        "progress_percent": 0.0,
        "start_date": now if status == ShelfStatus.READING else None,
        "finish_date": now if status == ShelfStatus.FINISHED else None,
        "target_finish_date": None,
        "target_set_at": None,
        "rating": None,
        "review": None,
        "notes": [],
        "created_at": now,
        "updated_at": now,
    }


def status_changes(
    current: Dict[str, Any],
    status: ShelfStatus,
    now: datetime,
    finish_date: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Explicit shelf move. Start and finish dates are stamped once and never reset."""
    changes: Dict[str, Any] = {}
    if current.get("status") != status.value:
        changes["status"] = status.value
    if status == ShelfStatus.READING and not current.get("start_date"):
        changes["start_date"] = now
    if status == ShelfStatus.FINISHED and not current.get("finish_date"):
        changes["finish_date"] = finish_date or now
    return changes


def progress_changes(
    current: Dict[str, Any],
    update: ProgressUpdate,
    rules: TrackingRules,
    now: datetime,
) -> Dict[str, Any]:
    """
    Apply a reported position.

    An absent or blank location never clears a saved one. A present percent
    always overwrites, even 0. Crossing the auto-finish threshold moves the
    book to finished; nothing here ever moves it back.
    """
    changes: Dict[str, Any] = {}

    if update.last_location and update.last_location.strip():
        if update.last_location != current.get("last_location"):
            changes["last_location"] = update.last_location

    if update.progress_percent is not None:
        changes["progress_percent"] = float(update.progress_percent)

    progress = changes.get("progress_percent", current.get("progress_percent") or 0.0)
    if progress >= rules.auto_finish_threshold and current.get("status") != ShelfStatus.FINISHED.value:
        changes["status"] = ShelfStatus.FINISHED.value
        if not current.get("finish_date"):
            changes["finish_date"] = now

    return changes


def session_changes(
    current: Dict[str, Any],
    update: ProgressUpdate,
    rules: TrackingRules,
    now: datetime,
) -> Dict[str, Any]:
    """Changes caused by a reading session: opening a wanted book starts it"""
    changes: Dict[str, Any] = {}
    if current.get("status") == ShelfStatus.WANT.value:
        changes.update(status_changes(current, ShelfStatus.READING, now))

    changes.update(progress_changes({**current, **changes}, update, rules, now))
    changes["updated_at"] = now
    return changes


def entry_update_changes(
    current: Dict[str, Any],
    update: ShelfEntryUpdate,
    rules: TrackingRules,
    now: datetime,
) -> Dict[str, Any]:
    """Changes for an explicit partial update of a shelf entry"""
    fields = update.model_fields_set
    changes: Dict[str, Any] = {}

    explicit_finish = update.finish_date if "finish_date" in fields else None

    if "status" in fields and update.status is not None:
        changes.update(status_changes(current, update.status, now, explicit_finish))

    if "progress_percent" in fields or "last_location" in fields:
        progress = ProgressUpdate(
            last_location=update.last_location,
            progress_percent=update.progress_percent,
        )
        progress_update = progress_changes({**current, **changes}, progress, rules, now)
        if "status" in fields and update.status is not None:
            # An explicit status in the same request wins over auto-finish
            progress_update.pop("status", None)
            progress_update.pop("finish_date", None)
        changes.update(progress_update)

    if "target_finish_date" in fields:
        changes["target_finish_date"] = update.target_finish_date
        changes["target_set_at"] = now if update.target_finish_date else None

    if explicit_finish is not None:
        changes["finish_date"] = explicit_finish

    if "rating" in fields:
        changes["rating"] = update.rating

    if "review" in fields:
        changes["review"] = update.review

    if changes:
        changes["updated_at"] = now
    return changes
