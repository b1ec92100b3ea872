"""
Shared pytest fixtures.

Services run against an in-memory Firestore; the API client overrides the
Firestore client, the authenticated user and the request clock.
"""
import os

# Must be set before the settings module is first imported
os.environ["TIMEZONE"] = "UTC"
os.environ["RATE_LIMIT_CALLS"] = "100000"

import pytest
from fastapi.testclient import TestClient

from main import app
from shelfwise.api.v1.deps import get_firestore, get_now
from shelfwise.api.v1.endpoints.auth import get_current_user
from shelfwise.core.config import GoalDefaults, TrackingRules
from shelfwise.services.book_service import BookService
from shelfwise.services.book_state_service import BookStateTracker
from shelfwise.services.goal_engine import GoalEngine
from shelfwise.services.session_ledger import SessionLedger
from shelfwise.services.user_service import UserService
from tests.fakes import NOW, USER_ID, FakeFirestore


@pytest.fixture
def db():
    return FakeFirestore()


@pytest.fixture
def rules():
    return TrackingRules()


@pytest.fixture
def defaults():
    return GoalDefaults()


@pytest.fixture
def books(db):
    return BookService(db)


@pytest.fixture
def ledger(db, rules):
    return SessionLedger(db, rules, 365)


@pytest.fixture
def tracker(db, rules, books):
    return BookStateTracker(db, rules, books)


@pytest.fixture
def users(db, defaults):
    return UserService(db, defaults)


@pytest.fixture
def goals(ledger, tracker, users, defaults):
    return GoalEngine(ledger, tracker, users, defaults)


@pytest.fixture
def clock_now():
    """Mutable holder so a test can move the request clock"""
    return {"now": NOW}


@pytest.fixture
def current_user():
    return {"id": USER_ID}


@pytest.fixture
def client(db, clock_now, current_user):
    app.dependency_overrides[get_firestore] = lambda: db
    app.dependency_overrides[get_now] = lambda: clock_now["now"]
    app.dependency_overrides[get_current_user] = lambda: current_user["id"]

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
