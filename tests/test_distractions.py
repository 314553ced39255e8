"""Tests for distraction logging and analytics."""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from habitloop.errors import NotFoundError, RequestValidationError
from habitloop.services.distractions import DistractionService, timeframe_start

TODAY = date(2024, 3, 31)


def at(day: date) -> datetime:
    return datetime(day.year, day.month, day.day, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def service(distraction_repo) -> DistractionService:
    return DistractionService(distraction_repo)


@pytest.fixture
def logged(service, user):
    entries = [
        ("Social Media", 4, TODAY),
        ("Social Media", 2, TODAY),
        ("Mood", 5, TODAY - timedelta(days=1)),
        ("Health", 1, TODAY - timedelta(days=20)),
    ]
    return [
        service.log(user.id, {"category": c, "severity": s}, now=at(day)) for c, s, day in entries
    ]


def test_log_defaults_description(service, user):
    item = service.log(user.id, {"category": "Environment", "severity": 3}, now=at(TODAY))
    assert item.description == "Auto: Environment distraction"
    assert item.occurred_on == TODAY


@pytest.mark.parametrize(
    "payload",
    [
        {"category": "Boredom", "severity": 3},
        {"category": "Mood", "severity": 0},
        {"category": "Mood", "severity": 6},
        {"category": "Mood"},
        {"category": "Mood", "severity": 2, "description": "x" * 501},
    ],
)
def test_log_validation(service, user, payload):
    with pytest.raises(RequestValidationError):
        service.log(user.id, payload)


def test_timeframe_start():
    assert timeframe_start("day", TODAY) == TODAY
    assert timeframe_start("week", TODAY) == date(2024, 3, 24)
    assert timeframe_start("month", TODAY) == date(2024, 2, 29)
    assert timeframe_start("year", TODAY) == date(2023, 3, 31)
    with pytest.raises(RequestValidationError):
        timeframe_start("decade", TODAY)


def test_list_by_timeframe(service, logged, user):
    assert len(service.list_for_user(user.id)) == 4
    assert len(service.list_for_user(user.id, "day", today=TODAY)) == 2
    assert len(service.list_for_user(user.id, "week", today=TODAY)) == 3
    assert len(service.list_for_user(user.id, "month", today=TODAY)) == 4


def test_update_only_whitelisted_fields(service, logged, user):
    item = logged[0]
    updated = service.update(item.id, user.id, {"severity": 1, "user_id": 999})
    assert updated.severity == 1
    assert updated.user_id == user.id

    with pytest.raises(RequestValidationError):
        service.update(item.id, user.id, {"category": "Nope"})


def test_delete(service, logged, user, other_user):
    with pytest.raises(NotFoundError):
        service.delete(logged[0].id, other_user.id)
    service.delete(logged[0].id, user.id)
    assert len(service.list_for_user(user.id)) == 3


def test_counts(service, logged, user):
    counts = service.counts(user.id, today=TODAY)

    assert counts.timeframe == "week"
    assert counts.total_count == 3
    social = counts.category_counts[0]
    assert (social.category, social.count, social.avg_severity) == ("Social Media", 2, 3.0)
    assert (social.max_severity, social.min_severity) == (4, 2)
    assert counts.severity_distribution == {4: 1, 2: 1, 5: 1}
    payload = counts.to_dict()
    assert payload["date_range"] == {"start": "2024-03-24", "end": "2024-03-31"}
    assert [row["severity"] for row in payload["severity_distribution"]] == [2, 4, 5]


def test_trends(service, logged, user):
    points = service.trends(user.id, "month", today=TODAY)

    assert [p.day for p in points] == [
        TODAY - timedelta(days=20),
        TODAY - timedelta(days=1),
        TODAY,
    ]
    assert points[-1].count == 2
    assert points[-1].avg_severity == 3.0
    assert points[-1].categories == ["Social Media"]
