"""Pytest configuration and shared fixtures for HabitLoop tests.

This module provides database fixtures, service wiring and test data factories
for testing schedule logic, repositories and services against a throwaway
SQLite file instead of the real application database.
"""

from __future__ import annotations

from datetime import date
from typing import Any

import pytest

from habitloop.config import TestConfig
from habitloop.infra.database import bootstrap_database
from habitloop.infra.repositories import (
    SQLModelBadHabitRepository,
    SQLModelDistractionRepository,
    SQLModelHabitRepository,
    SQLModelNotificationRepository,
    SQLModelUserRepository,
)
from habitloop.models import Habit, User
from habitloop.services.connections import ConnectionDirectory
from habitloop.services.habits import HabitService
from habitloop.services.notifications import Notifier
from habitloop.services.shared_habits import SharedHabitService

# Fixed "today" for every service-level test; start dates are chosen relative to it.
TODAY = date(2024, 1, 15)


# =============================================================================
# Configuration & Database Fixtures
# =============================================================================


@pytest.fixture
def config(tmp_path, monkeypatch) -> TestConfig:
    """Test configuration pointing at a temporary data directory and database."""

    monkeypatch.setenv("HABITLOOP_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("HABITLOOP_DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("HABITLOOP_DEV_MODE", "true")
    monkeypatch.delenv("HABITLOOP_USER_HEADER", raising=False)
    monkeypatch.delenv("HABITLOOP_REMINDER_HOUR", raising=False)
    return TestConfig()


@pytest.fixture
def db(config):
    """Engine plus session factory with all tables created.

    Yields:
        tuple: (engine, session_factory)
    """
    engine, session_factory = bootstrap_database(config)
    yield engine, session_factory
    engine.dispose()


@pytest.fixture
def session_factory(db):
    return db[1]


@pytest.fixture
def today() -> date:
    return TODAY


# =============================================================================
# Repositories & Services
# =============================================================================


@pytest.fixture
def habit_repo(session_factory) -> SQLModelHabitRepository:
    return SQLModelHabitRepository(session_factory)


@pytest.fixture
def user_repo(session_factory) -> SQLModelUserRepository:
    return SQLModelUserRepository(session_factory)


@pytest.fixture
def notification_repo(session_factory) -> SQLModelNotificationRepository:
    return SQLModelNotificationRepository(session_factory)


@pytest.fixture
def bad_habit_repo(session_factory) -> SQLModelBadHabitRepository:
    return SQLModelBadHabitRepository(session_factory)


@pytest.fixture
def distraction_repo(session_factory) -> SQLModelDistractionRepository:
    return SQLModelDistractionRepository(session_factory)


@pytest.fixture
def connections() -> ConnectionDirectory:
    return ConnectionDirectory()


@pytest.fixture
def notifier(notification_repo, connections) -> Notifier:
    return Notifier(notification_repo, connections)


@pytest.fixture
def habit_service(habit_repo, notifier) -> HabitService:
    return HabitService(habit_repo, notifier)


@pytest.fixture
def shared_service(habit_repo, user_repo, notifier, session_factory, habit_service):
    return SharedHabitService(habit_repo, user_repo, notifier, session_factory, habit_service)


# =============================================================================
# Test Data Factories
# =============================================================================


@pytest.fixture
def user_factory(user_repo):
    """Factory for creating persisted users.

    Returns:
        Callable: Function that creates and persists User instances
    """

    def _create_user(username: str = "tester", display_name: str = "") -> User:
        return user_repo.save(
            User(username=username, display_name=display_name, password_hash="dummy-hash")
        )

    return _create_user


@pytest.fixture
def user(user_factory) -> User:
    """Default user for scoping data."""

    return user_factory("tester", "Tester")


@pytest.fixture
def other_user(user_factory) -> User:
    return user_factory("friend", "Friend")


@pytest.fixture
def habit_factory(habit_service, user, today):
    """Factory for creating habits through the service (so schedules are generated).

    Returns:
        Callable: Function that creates and persists Habit instances
    """

    def _create_habit(owner: User | None = None, **overrides: Any) -> Habit:
        data: dict[str, Any] = {"name": "Read", "start_date": today.isoformat()}
        data.update(overrides)
        return habit_service.create((owner or user).id, data, today=today)

    return _create_habit
