"""Tests for occurrence generation across repeat rules."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from habitloop.errors import ScheduleComputationError
from habitloop.services.occurrences import (
    DEFAULT_MONTHLY_OCCURRENCES,
    MAX_DAILY_OCCURRENCES,
    MAX_WEEK_BLOCKS,
    generate_occurrences,
    resolve_month_day,
)


def d(value: str) -> date:
    return date.fromisoformat(value)


class TestNoRepeat:
    def test_single_occurrence_on_start(self):
        result = generate_occurrences("2024-01-15")
        assert result.repeat_dates == [d("2024-01-15")]
        assert result.reminders == []

    def test_reminders_before_start_are_dropped(self):
        result = generate_occurrences("2024-01-15", reminder_offsets=[1, 2])
        assert result.reminders == []


class TestDaily:
    def test_repeat_count_is_total_occurrences(self):
        result = generate_occurrences("2024-01-15", "daily", repeat_count=3)
        assert result.repeat_dates == [d("2024-01-15"), d("2024-01-16"), d("2024-01-17")]

    def test_end_date_bounds_output(self):
        result = generate_occurrences("2024-01-30", "daily", end_date="2024-02-02")
        assert result.repeat_dates == [
            d("2024-01-30"),
            d("2024-01-31"),
            d("2024-02-01"),
            d("2024-02-02"),
        ]

    def test_end_date_wins_over_repeat_count(self):
        result = generate_occurrences("2024-01-15", "daily", repeat_count=10, end_date="2024-01-16")
        assert result.repeat_dates == [d("2024-01-15"), d("2024-01-16")]

    def test_unbounded_daily_hits_ceiling(self):
        result = generate_occurrences("2024-01-15", "daily")
        assert len(result.repeat_dates) == MAX_DAILY_OCCURRENCES

    def test_reminders_follow_offsets(self):
        result = generate_occurrences(
            "2024-01-15", "daily", repeat_count=3, reminder_offsets=[1]
        )
        # The reminder for the start itself falls before the start and is dropped.
        assert result.reminders == [d("2024-01-15"), d("2024-01-16")]


class TestWeekly:
    def test_start_weekday_selected_lands_on_start(self):
        # 2024-01-15 is a Monday.
        result = generate_occurrences("2024-01-15", "weekly", ["Monday"], repeat_count=3)
        assert result.repeat_dates == [d("2024-01-15"), d("2024-01-22"), d("2024-01-29")]

    def test_start_not_forced_when_weekday_not_selected(self):
        result = generate_occurrences("2024-01-15", "weekly", ["Wednesday"], repeat_count=2)
        assert result.repeat_dates == [d("2024-01-17"), d("2024-01-24")]
        assert d("2024-01-15") not in result.repeat_dates

    def test_multiple_days_per_block(self):
        result = generate_occurrences(
            "2024-01-15", "weekly", ["friday", "Monday"], repeat_count=2
        )
        assert result.repeat_dates == [
            d("2024-01-15"),
            d("2024-01-19"),
            d("2024-01-22"),
            d("2024-01-26"),
        ]

    def test_frequency_skips_weeks(self):
        result = generate_occurrences(
            "2024-01-15", "weekly", ["Monday"], frequency="every 2 weeks", repeat_count=3
        )
        assert result.repeat_dates == [d("2024-01-15"), d("2024-01-29"), d("2024-02-12")]

    def test_end_date_bounds_blocks(self):
        result = generate_occurrences(
            "2024-01-15", "weekly", ["Monday", "Thursday"], end_date="2024-01-25"
        )
        assert result.repeat_dates == [
            d("2024-01-15"),
            d("2024-01-18"),
            d("2024-01-22"),
            d("2024-01-25"),
        ]

    def test_unbounded_weekly_hits_ceiling(self):
        result = generate_occurrences("2024-01-15", "weekly", ["Monday"])
        assert len(result.repeat_dates) == MAX_WEEK_BLOCKS

    def test_invalid_day_is_a_computation_error(self):
        with pytest.raises(ScheduleComputationError):
            generate_occurrences("2024-01-15", "weekly", ["Caturday"], repeat_count=1)

    def test_missing_days_is_a_computation_error(self):
        with pytest.raises(ScheduleComputationError):
            generate_occurrences("2024-01-15", "weekly", [], repeat_count=1)


class TestMonthly:
    def test_overflow_carries_into_next_month(self):
        result = generate_occurrences(
            "2024-01-31", "monthly", frequency=1, repeat_count=3, selected_monthly_dates=[31]
        )
        assert result.repeat_dates == [d("2024-01-31"), d("2024-03-02"), d("2024-03-31")]

    def test_day_before_start_in_first_month_is_skipped(self):
        result = generate_occurrences(
            "2024-01-20", "monthly", repeat_count=2, selected_monthly_dates=[10]
        )
        assert result.repeat_dates == [d("2024-02-10"), d("2024-03-10")]

    def test_default_occurrences_per_day(self):
        result = generate_occurrences("2024-01-01", "monthly", selected_monthly_dates=[1, 15])
        assert len(result.repeat_dates) == 2 * DEFAULT_MONTHLY_OCCURRENCES

    def test_full_date_selector_uses_its_day(self):
        result = generate_occurrences(
            "2024-01-01", "monthly", repeat_count=2, selected_monthly_dates=["2024-01-20"]
        )
        assert result.repeat_dates == [d("2024-01-20"), d("2024-02-20")]

    def test_frequency_skips_months(self):
        result = generate_occurrences(
            "2024-01-05", "monthly", frequency=3, repeat_count=3, selected_monthly_dates=[5]
        )
        assert result.repeat_dates == [d("2024-01-05"), d("2024-04-05"), d("2024-07-05")]

    def test_end_date_stops_generation(self):
        result = generate_occurrences(
            "2024-01-05", "monthly", end_date="2024-03-01", selected_monthly_dates=[5]
        )
        assert result.repeat_dates == [d("2024-01-05"), d("2024-02-05")]

    def test_overflow_into_selected_day_is_not_duplicated(self):
        # Day 31 of April overflows onto May 1st, which day 1 would produce again.
        result = generate_occurrences(
            "2024-04-01", "monthly", repeat_count=2, selected_monthly_dates=[31, 1]
        )
        assert result.repeat_dates == [
            d("2024-04-01"),
            d("2024-05-01"),
            d("2024-05-31"),
            d("2024-06-01"),
        ]

    def test_missing_selection_is_a_computation_error(self):
        with pytest.raises(ScheduleComputationError):
            generate_occurrences("2024-01-05", "monthly", selected_monthly_dates=[])


def test_resolve_month_day():
    assert resolve_month_day(2024, 4, 31) == d("2024-05-01")
    assert resolve_month_day(2023, 2, 30) == d("2023-03-02")
    assert resolve_month_day(2024, 12, 31) == d("2024-12-31")


@pytest.mark.parametrize(
    "args",
    [
        ("2024-01-15", "daily", None, None, 30, None, None, [1, 3]),
        ("2024-01-15", "weekly", ["Tuesday", "Saturday"], 2, 10, None, None, [2]),
        ("2024-01-31", "monthly", None, 1, 6, None, [31, 15], [5]),
    ],
)
def test_generation_is_deterministic_sorted_and_bounded(args):
    first = generate_occurrences(*args)
    second = generate_occurrences(*args)
    assert first == second
    assert first.repeat_dates == sorted(set(first.repeat_dates))
    assert first.reminders == sorted(set(first.reminders))
    start = d(args[0])
    assert all(day >= start for day in first.repeat_dates)
    assert all(day >= start for day in first.reminders)


def test_reminders_stay_inside_end_date():
    result = generate_occurrences(
        "2024-01-15", "daily", end_date="2024-01-20", reminder_offsets=[1, 5]
    )
    assert max(result.reminders) <= d("2024-01-20")
    assert min(result.reminders) >= d("2024-01-15")
    assert d("2024-01-15") + timedelta(days=4) in result.reminders
