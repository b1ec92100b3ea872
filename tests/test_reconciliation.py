"""Tests for book-state transition rules"""
from shelfwise.core.config import TrackingRules
from shelfwise.models.book_state import ProgressUpdate, ShelfEntryUpdate, ShelfStatus
from shelfwise.services.reconciliation import (
    entry_update_changes, new_state, progress_changes, session_changes, state_id, status_changes,
)
from tests.fakes import NOW, at

RULES = TrackingRules()
EARLIER = at(2026, 9, 1)


def reading_state(**fields):
    state = new_state("u", "b", ShelfStatus.READING, EARLIER)
    state.update(fields)
    return state


def test_state_id_is_deterministic():
    assert state_id("u", "b") == "u_b"


def test_new_state_stamps_dates_by_status():
    assert new_state("u", "b", ShelfStatus.WANT, NOW)["start_date"] is None
    assert new_state("u", "b", ShelfStatus.READING, NOW)["start_date"] == NOW

    finished = new_state("u", "b", ShelfStatus.FINISHED, NOW)
    assert finished["finish_date"] == NOW
    assert finished["start_date"] is None


class TestStatusChanges:
    def test_start_date_set_once(self):
        current = reading_state()
        changes = status_changes({**current, "status": "want"}, ShelfStatus.READING, NOW)
        assert changes == {"status": "reading"}

    def test_finish_date_uses_explicit_value(self):
        changes = status_changes(reading_state(), ShelfStatus.FINISHED, NOW, finish_date=EARLIER)
        assert changes == {"status": "finished", "finish_date": EARLIER}

    def test_moving_away_from_finished_keeps_finish_date(self):
        current = reading_state(status="finished", finish_date=EARLIER)
        assert status_changes(current, ShelfStatus.READING, NOW) == {"status": "reading"}

    def test_same_status_is_no_change(self):
        assert status_changes(reading_state(), ShelfStatus.READING, NOW) == {}


class TestProgressChanges:
    def test_blank_location_never_clears(self):
        current = reading_state(last_location="epubcfi(/6/4)")
        for location in (None, "", "   "):
            changes = progress_changes(current, ProgressUpdate(last_location=location), RULES, NOW)
            assert "last_location" not in changes

    def test_zero_percent_overwrites(self):
        changes = progress_changes(reading_state(progress_percent=40.0), ProgressUpdate(progress_percent=0), RULES, NOW)
        assert changes == {"progress_percent": 0.0}

    def test_threshold_auto_finishes(self):
        changes = progress_changes(reading_state(), ProgressUpdate(progress_percent=99.8), RULES, NOW)
        assert changes["status"] == "finished"
        assert changes["finish_date"] == NOW

    def test_just_below_threshold_does_not_finish(self):
        changes = progress_changes(reading_state(), ProgressUpdate(progress_percent=99.7), RULES, NOW)
        assert "status" not in changes

    def test_lower_progress_never_unfinishes(self):
        current = reading_state(status="finished", finish_date=EARLIER, progress_percent=100.0)
        changes = progress_changes(current, ProgressUpdate(progress_percent=10), RULES, NOW)
        assert changes == {"progress_percent": 10.0}

    def test_existing_finish_date_is_kept_on_auto_finish(self):
        current = reading_state(status="dropped", finish_date=EARLIER)
        changes = progress_changes(current, ProgressUpdate(progress_percent=100), RULES, NOW)
        assert changes == {"progress_percent": 100.0, "status": "finished"}


def test_session_starts_wanted_book():
    current = new_state("u", "b", ShelfStatus.WANT, EARLIER)
    changes = session_changes(current, ProgressUpdate(progress_percent=5), RULES, NOW)
    assert changes["status"] == "reading"
    assert changes["start_date"] == NOW
    assert changes["updated_at"] == NOW


def test_session_leaves_dropped_book_alone():
    current = reading_state(status="dropped")
    changes = session_changes(current, ProgressUpdate(), RULES, NOW)
    assert changes == {"updated_at": NOW}


class TestEntryUpdateChanges:
    def test_only_supplied_fields_change(self):
        update = ShelfEntryUpdate(rating=4)
        assert entry_update_changes(reading_state(), update, RULES, NOW) == {"rating": 4, "updated_at": NOW}

    def test_explicit_status_wins_over_auto_finish(self):
        update = ShelfEntryUpdate(status=ShelfStatus.READING, progress_percent=100)
        changes = entry_update_changes(reading_state(), update, RULES, NOW)
        assert "status" not in changes
        assert "finish_date" not in changes
        assert changes["progress_percent"] == 100.0

    def test_target_date_tracks_when_it_was_set(self):
        target = at(2026, 12, 1)
        changes = entry_update_changes(reading_state(), ShelfEntryUpdate(target_finish_date=target), RULES, NOW)
        assert changes["target_finish_date"] == target
        assert changes["target_set_at"] == NOW

    def test_explicit_null_clears_target_date(self):
        current = reading_state(target_finish_date=at(2026, 12, 1), target_set_at=EARLIER)
        update = ShelfEntryUpdate.model_validate({"targetFinishDate": None})
        changes = entry_update_changes(current, update, RULES, NOW)
        assert changes["target_finish_date"] is None
        assert changes["target_set_at"] is None

    def test_empty_update_changes_nothing(self):
        assert entry_update_changes(reading_state(), ShelfEntryUpdate(), RULES, NOW) == {}
