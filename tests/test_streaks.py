"""Tests for streak calculations and milestone messages."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from habitloop.services.streaks import (
    compute_streak,
    is_milestone,
    longest_streak,
    streak_message,
)

TODAY = date(2024, 1, 15)


def days_back(*offsets: int) -> list[date]:
    return [TODAY - timedelta(days=offset) for offset in offsets]


class TestCurrentStreak:
    def test_no_dates_returns_zero(self):
        assert compute_streak([], today=TODAY) == 0

    def test_today_only_returns_one(self):
        assert compute_streak(days_back(0), today=TODAY) == 1

    def test_yesterday_anchor_keeps_streak_alive(self):
        assert compute_streak(days_back(1, 2, 3), today=TODAY) == 3

    def test_older_than_yesterday_breaks_streak(self):
        assert compute_streak(days_back(2, 3, 4), today=TODAY) == 0

    def test_gap_ends_the_walk(self):
        assert compute_streak(days_back(0, 1, 3, 4, 5), today=TODAY) == 2

    def test_duplicates_and_order_are_ignored(self):
        dates = days_back(1, 0, 0, 2, 1)
        assert compute_streak(dates, today=TODAY) == 3


class TestLongestStreak:
    def test_empty(self):
        assert longest_streak([]) == 0

    def test_picks_the_longest_run(self):
        dates = days_back(0, 1, 5, 6, 7, 8, 20)
        assert longest_streak(dates) == 4


@pytest.mark.parametrize("streak", [3, 7, 14, 21, 30, 60, 90])
def test_milestones(streak):
    assert is_milestone(streak)


@pytest.mark.parametrize("streak", [0, 1, 2, 4, 29, 31])
def test_non_milestones(streak):
    assert not is_milestone(streak)


def test_streak_messages():
    assert streak_message(1).startswith("Great start")
    assert streak_message(7) == "One week streak! You're doing amazing!"
    assert streak_message(45) == "45 days! You're a habit champion!"
    assert streak_message(5) == "5 day streak! Keep it up!"
