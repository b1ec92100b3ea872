"""Tests for the goal engine, analytics aggregator and user goals"""
import pytest

from shelfwise.core.exceptions import ValidationException
from shelfwise.models.book_state import BookState, ShelfEntryUpdate, ShelfStatus
from shelfwise.models.user import GoalsUpdate, ReadingGoals
from shelfwise.services.analytics_service import AnalyticsAggregator, mean_rating, pick_most_active_month
from tests.fakes import NOW, USER_ID, at, seed_book


@pytest.fixture
def analytics(ledger, tracker, users, goals):
    return AnalyticsAggregator(ledger, tracker, users, goals)


@pytest.fixture(autouse=True)
def library(db):
    for book_id in ("book-1", "book-2", "book-3"):
        seed_book(db, book_id)


async def finish(tracker, book_id, when, rating=None):
    await tracker.upsert_shelf_entry(USER_ID, book_id, ShelfStatus.FINISHED, when)
    if rating is not None:
        await tracker.update_entry(USER_ID, book_id, ShelfEntryUpdate(rating=rating), when)


class TestGoalEngine:
    async def test_daily_progress_is_clamped(self, goals, ledger):
        await ledger.record_session(USER_ID, "book-1", 45 * 60, at(2026, 10, 17, 9))

        daily = await goals.daily_goal_progress(USER_ID, NOW)
        assert daily.today_minutes == 45
        assert daily.goal_minutes == 30
        assert daily.progress_percent == 100

    async def test_daily_sums_all_books(self, goals, ledger):
        await ledger.record_session(USER_ID, "book-1", 5 * 60, at(2026, 10, 17, 8))
        await ledger.record_session(USER_ID, "book-2", 10 * 60, at(2026, 10, 17, 9))
        await ledger.record_session(USER_ID, "book-2", 60 * 60, at(2026, 10, 16, 9))

        daily = await goals.daily_goal_progress(USER_ID, NOW)
        assert daily.today_minutes == 15
        assert daily.progress_percent == 50

    async def test_goals_fall_back_to_defaults_without_profile(self, goals, db):
        assert await goals.goals_for(USER_ID) == ReadingGoals(daily_goal_minutes=30, streak_goal=7, books_per_year_goal=12)
        assert db.documents("users") == {}

    async def test_overview(self, goals, ledger, tracker):
        for day in (10, 11, 12, 15, 16, 17):
            await ledger.record_session(USER_ID, "book-1", 600, at(2026, 10, day))
        await finish(tracker, "book-1", at(2026, 3, 1))
        await finish(tracker, "book-2", at(2025, 12, 31))

        overview = await goals.overview(USER_ID, NOW)
        assert overview.streak.current == 3
        assert overview.streak.goal == 7
        assert overview.longest_streak == 3
        assert overview.books.current == 1
        assert overview.books.progress_percent == 8
        assert overview.daily.current == 10


class TestAnalytics:
    async def test_yearly_clamped_to_registration_year(self, analytics, users, ledger):
        await users.get_or_create(USER_ID, at(2024, 6, 1))
        await ledger.record_session(USER_ID, "book-1", 7200, at(2024, 7, 1))

        summary = await analytics.yearly_summary(USER_ID, 2000, NOW)
        assert summary.year == 2024
        assert summary.total_hours == 2.0
        assert len(summary.sessions) == 1

    async def test_yearly_defaults_to_current_year(self, analytics, users, ledger, tracker):
        await users.get_or_create(USER_ID, at(2024, 6, 1))
        await ledger.record_session(USER_ID, "book-1", 5400, at(2026, 2, 1))
        await ledger.record_session(USER_ID, "book-1", 3600, at(2025, 2, 1))
        await finish(tracker, "book-1", at(2026, 2, 2))

        summary = await analytics.yearly_summary(USER_ID, None, NOW)
        assert summary.year == 2026
        assert summary.total_hours == 1.5
        assert summary.total_books == 1

    @pytest.mark.parametrize("year", [0, 9999])
    async def test_yearly_rejects_unrepresentable_year(self, analytics, year):
        with pytest.raises(ValidationException):
            await analytics.yearly_summary(USER_ID, year, NOW)

    async def test_yearly_uses_registration_time_over_first_visit(self, analytics, users, ledger):
        await users.get_or_create(USER_ID, NOW)
        await users.get_or_create(USER_ID, NOW, registered_at=at(2025, 3, 1))
        await ledger.record_session(USER_ID, "book-1", 3600, at(2025, 6, 1))

        summary = await analytics.yearly_summary(USER_ID, 2025, NOW)
        assert summary.year == 2025
        assert summary.total_hours == 1.0

    async def test_summary(self, analytics, ledger, tracker):
        await ledger.record_session(USER_ID, "book-1", 600, at(2026, 10, 2))
        await ledger.record_session(USER_ID, "book-2", 300, at(2026, 10, 2))
        await ledger.record_session(USER_ID, "book-1", 1200, at(2026, 10, 5))
        await ledger.record_session(USER_ID, "book-1", 9000, at(2026, 4, 5))
        await finish(tracker, "book-1", at(2026, 5, 1), rating=4)
        await finish(tracker, "book-2", at(2026, 6, 1), rating=5)
        await finish(tracker, "book-3", at(2025, 6, 1), rating=1)

        summary = await analytics.summary(USER_ID, NOW)
        assert [(p.date, p.minutes) for p in summary.monthly_data] == [("2026-10-02", 15), ("2026-10-05", 20)]
        assert summary.yearly_stats.total_books_finished == 2
        assert summary.yearly_stats.most_active_month == "2026-04"
        assert summary.yearly_stats.average_rating == 4.5

    async def test_empty_summary(self, analytics):
        summary = await analytics.summary(USER_ID, NOW)
        assert summary.monthly_data == []
        assert summary.yearly_stats.total_books_finished == 0
        assert summary.yearly_stats.most_active_month is None
        assert summary.yearly_stats.average_rating is None


async def test_most_active_month_tie_goes_to_earliest(ledger):
    await ledger.record_session(USER_ID, "book-1", 600, at(2026, 5, 1))
    await ledger.record_session(USER_ID, "book-1", 600, at(2026, 3, 1))
    sessions = await ledger.list_sessions(USER_ID)

    assert pick_most_active_month(sessions) == "2026-03"


def test_mean_rating_ignores_unrated():
    unrated = BookState(user_id=USER_ID, book_id="book-1", status=ShelfStatus.FINISHED)
    rated = BookState(user_id=USER_ID, book_id="book-2", status=ShelfStatus.FINISHED, rating=3)

    assert mean_rating([unrated]) is None
    assert mean_rating([unrated, rated]) == 3.0


class TestUserGoals:
    async def test_profile_created_with_defaults(self, users, db):
        user = await users.get_or_create(USER_ID, NOW, email="r@example.com", name="Reader One")

        assert user.goals.daily_goal_minutes == 30
        assert user.created_at == NOW
        assert db.documents("users")[USER_ID]["email"] == "r@example.com"

    async def test_partial_goal_update(self, users):
        goals = await users.update_goals(USER_ID, GoalsUpdate(streak_goal=14), NOW)
        assert goals == ReadingGoals(daily_goal_minutes=30, streak_goal=14, books_per_year_goal=12)

    async def test_goal_below_one_is_rejected_without_writing(self, users):
        await users.update_goals(USER_ID, GoalsUpdate(daily_goal_minutes=20), NOW)

        with pytest.raises(ValidationException, match="booksPerYearGoal must be at least 1"):
            await users.update_goals(USER_ID, GoalsUpdate(daily_goal_minutes=45, books_per_year_goal=0), NOW)

        assert (await users.get_goals(USER_ID, NOW)).daily_goal_minutes == 20

    async def test_later_registration_time_does_not_move_created_at(self, users):
        await users.get_or_create(USER_ID, at(2024, 1, 1))
        user = await users.get_or_create(USER_ID, NOW, registered_at=at(2025, 1, 1))

        assert user.created_at == at(2024, 1, 1)
