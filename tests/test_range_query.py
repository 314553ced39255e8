"""Tests for date-range habit queries."""

from __future__ import annotations

from datetime import date

import pytest

from habitloop.errors import InvalidDateFormat, ScheduleValidationError

TODAY = date(2024, 1, 15)


def d(value: str) -> date:
    return date.fromisoformat(value)


def test_occurrences_inside_window(habit_factory, habit_service, user):
    daily = habit_factory(name="Daily", repeat="daily", repeat_count=5)
    habit_factory(name="Once")

    views = habit_service.query_range(user.id, "2024-01-16", "2024-01-17")

    assert [view.habit.id for view in views] == [daily.id]
    assert views[0].dates_in_range == [d("2024-01-16"), d("2024-01-17")]
    assert views[0].is_repeated


def test_window_bounds_are_inclusive(habit_factory, habit_service, user):
    habit_factory(name="Once")
    views = habit_service.query_range(user.id, "2024-01-15", "2024-01-15")
    assert [view.dates_in_range for view in views] == [[TODAY]]


def test_completion_only_habits_are_included(habit_factory, habit_service, user):
    habit = habit_factory(name="Once")
    habit_service.track_completion(habit.id, user.id, "2024-01-10", today=TODAY)

    views = habit_service.query_range(user.id, "2024-01-08", "2024-01-12")

    assert len(views) == 1
    assert views[0].dates_in_range == [d("2024-01-10")]
    assert views[0].completion_dates_in_range == [d("2024-01-10")]


def test_other_users_habits_excluded(habit_factory, habit_service, other_user):
    habit_factory(name="Mine")
    assert habit_service.query_range(other_user.id, "2024-01-01", "2024-02-01") == []


def test_reversed_window_rejected(habit_service, user):
    with pytest.raises(ScheduleValidationError):
        habit_service.query_range(user.id, "2024-01-20", "2024-01-10")


def test_malformed_window_rejected(habit_service, user):
    with pytest.raises(InvalidDateFormat):
        habit_service.query_range(user.id, "soon", "2024-01-10")


def test_view_serializes_dates(habit_factory, habit_service, user):
    habit_factory(name="Daily", repeat="daily", repeat_count=2)
    payload = habit_service.query_range(user.id, "2024-01-15", "2024-01-16")[0].to_dict()
    assert payload["dates_in_range"] == ["2024-01-15", "2024-01-16"]
    assert payload["is_repeated"] is True
