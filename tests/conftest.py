"""Pytest configuration and shared fixtures for HabitLoop tests.

Database fixtures give every test an isolated SQLite file; factories create
users, habits and logs through the same repositories the app uses.
"""

from __future__ import annotations

import tempfile
from datetime import date
from pathlib import Path

import pytest
from sqlmodel import SQLModel, create_engine

# Import all models to ensure they're registered with SQLModel metadata
from habitloop import models  # noqa: F401
from habitloop.infra.database import create_session_factory
from habitloop.infra.repositories import SQLModelGroupRepository, SQLModelHabitRepository
from habitloop.models import Habit, HabitLog, User



# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database for each test.

    Yields:
        Engine: SQLModel engine connected to test database
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching what the app hands to repositories."""

    return create_session_factory(db_engine)


@pytest.fixture
def habit_repo(session_factory) -> SQLModelHabitRepository:
    return SQLModelHabitRepository(session_factory)


@pytest.fixture
def group_repo(session_factory) -> SQLModelGroupRepository:
    return SQLModelGroupRepository(session_factory)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def user_factory(session_factory):
    """Factory for creating users without going through password hashing."""

    def _create_user(username: str = "tester", display_name: str | None = None) -> User:
        with session_factory() as session:
            user = User(username=username, display_name=display_name, password_hash="dummy-hash")
            session.add(user)
            session.commit()
            session.refresh(user)
            session.expunge(user)
            return user

    return _create_user


@pytest.fixture
def user(user_factory) -> User:
    """Default user for scoping data."""

    return user_factory("tester", "Tester")


@pytest.fixture
def habit_factory(habit_repo, user):
    """Factory for creating test habits.

    Returns:
        Callable: Function that creates and persists Habit instances
    """

    def _create_habit(
        name: str = "Test Habit",
        category: str = "General",
        habit_type: str = "CHECKBOX",
        target_count: int | None = None,
        schedule_days: list[str] | None = None,
        owner: User | None = None,
    ) -> Habit:
        owner = owner or user
        habit = Habit(
            user_id=owner.id,
            name=name,
            category=category,
            habit_type=habit_type,
            target_count=target_count,
            schedule_days=schedule_days or [],
        )
        return habit_repo.create(habit, user_id=owner.id)

    return _create_habit


@pytest.fixture
def log_factory(habit_repo):
    """Factory for persisting a HabitLog for an existing habit."""

    def _create_log(
        habit: Habit,
        occurred_on: date,
        *,
        completed: bool = True,
        duration: int | None = None,
        count: int | None = None,
    ) -> HabitLog:
        log = HabitLog(
            habit_id=habit.id,
            user_id=habit.user_id,
            occurred_on=occurred_on,
            completed=completed,
            duration=duration,
            count=count,
        )
        return habit_repo.save_log(log, user_id=habit.user_id)

    return _create_log


# =============================================================================
# Flask Fixtures
# =============================================================================


@pytest.fixture
def app(tmp_path, monkeypatch):
    """Application wired to a throwaway data directory."""

    monkeypatch.setenv("HABITLOOP_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("HABITLOOP_DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("HABITLOOP_TIMEZONE", "UTC")

    from habitloop import create_app

    application = create_app("testing")
    yield application


@pytest.fixture
def client(app):
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def register(app):
    """Return a helper that signs up a user on a fresh client."""

    def _register(username: str = "alice", password: str = "correct-horse"):
        test_client = app.test_client()
        response = test_client.post(
            "/auth/register",
            json={"username": username, "password": password, "display_name": username.title()},
        )
        assert response.status_code == 201, response.get_json()
        return test_client, response.get_json()

    return _register


@pytest.fixture
def app_today(app) -> date:
    """The calendar day request handlers will use."""

    return app.config["HABITLOOP_CONFIG"].local_today()
