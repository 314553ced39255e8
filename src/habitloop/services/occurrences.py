"""Occurrence generation for repeating habits.

Turns a repeat rule into the materialized ``repeat_dates`` and ``reminders``
lists stored on a habit. Output is always sorted, deduplicated and bounded by
``[start_date, end_date]``; hard ceilings guarantee termination for any input.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Sequence

from ..errors import HabitLoopError, ScheduleComputationError
from .dates import days_in_month, parse_calendar_date, parse_optional_date, shift_month, weekday_index
from .schedule import RepeatRule, parse_frequency, resolve_monthly_selector

DEFAULT_MONTHLY_OCCURRENCES = 5
MAX_MONTH_STEPS = 1000
MAX_DAILY_OCCURRENCES = 3650
MAX_WEEK_BLOCKS = 520


@dataclass(slots=True, frozen=True)
class Occurrences:
    """Generated schedule for a habit."""

    repeat_dates: list[date]
    reminders: list[date]


@dataclass(slots=True)
class _ScheduleBuilder:
    start: date
    end: date | None
    offsets: tuple[int, ...]
    dates: set[date] = field(default_factory=set)
    reminders: set[date] = field(default_factory=set)

    def in_bounds(self, day: date) -> bool:
        return day >= self.start and (self.end is None or day <= self.end)

    def add(self, day: date) -> bool:
        """Record an occurrence and its reminders; False when out of bounds."""

        if not self.in_bounds(day):
            return False
        self.dates.add(day)
        for offset in self.offsets:
            reminder = day - timedelta(days=offset)
            if self.in_bounds(reminder):
                self.reminders.add(reminder)
        return True

    def build(self) -> Occurrences:
        return Occurrences(repeat_dates=sorted(self.dates), reminders=sorted(self.reminders))


def resolve_month_day(year: int, month: int, day: int) -> date:
    """Place ``day`` in the given month, carrying overflow into the next month.

    Day 31 in a 30-day month becomes the 1st of the following month; day 30 in
    a 28-day February becomes March 2nd.
    """

    last_day = days_in_month(year, month)
    if day <= last_day:
        return date(year, month, day)
    next_year, next_month = shift_month(year, month, 1)
    return date(next_year, next_month, day - last_day)


def _positive_count(repeat_count: int | None) -> int | None:
    if repeat_count is None or repeat_count <= 0:
        return None
    return repeat_count


def _daily(builder: _ScheduleBuilder, count: int | None) -> None:
    if count is not None:
        limit = count
    elif builder.end is not None:
        limit = (builder.end - builder.start).days + 1
    else:
        limit = MAX_DAILY_OCCURRENCES

    for index in range(limit):
        if not builder.add(builder.start + timedelta(days=index)):
            break


def _weekly(
    builder: _ScheduleBuilder, repeat_days: Sequence[str], interval: int, count: int | None
) -> None:
    try:
        indexes = sorted({weekday_index(day) for day in repeat_days})
    except (ValueError, AttributeError) as exc:
        raise ScheduleComputationError(str(exc)) from exc
    if not indexes:
        raise ScheduleComputationError("Weekly repetition requires at least one repeat day")

    start = builder.start
    # A selected weekday equal to the start's weekday lands on the start itself.
    first_dates = [start + timedelta(days=(index - start.weekday()) % 7) for index in indexes]

    if count is not None:
        max_blocks = count
    elif builder.end is None:
        max_blocks = MAX_WEEK_BLOCKS
    else:
        max_blocks = None

    blocks = 0
    while max_blocks is None or blocks < max_blocks:
        shift = timedelta(weeks=blocks * interval)
        added = [builder.add(first + shift) for first in first_dates]
        if not any(added):
            break
        blocks += 1


def _monthly_day(value: object) -> int:
    try:
        resolved = resolve_monthly_selector(value)
    except HabitLoopError as exc:
        raise ScheduleComputationError(exc.message) from exc
    return resolved if isinstance(resolved, int) else resolved.day


def _monthly(
    builder: _ScheduleBuilder, selected: Sequence[object] | None, interval: int, count: int | None
) -> None:
    if not selected:
        raise ScheduleComputationError("At least one date must be selected for monthly repetition")

    days = [_monthly_day(value) for value in selected]
    per_day = count if count is not None else DEFAULT_MONTHLY_OCCURRENCES
    start = builder.start
    processed: set[date] = set()

    for day in days:
        occurrences = 0
        step = 0
        while occurrences < per_day and step < MAX_MONTH_STEPS:
            year, month = shift_month(start.year, start.month, step * interval)
            step += 1
            candidate = resolve_month_day(year, month, day)
            if builder.end is not None and candidate > builder.end:
                # Candidates only grow from here on.
                break
            if candidate in processed:
                continue
            if builder.add(candidate):
                processed.add(candidate)
                occurrences += 1


def generate_occurrences(
    start_date: object,
    repeat: RepeatRule | str | None = None,
    repeat_days: Sequence[str] | None = None,
    frequency: object = None,
    repeat_count: int | None = None,
    end_date: object = None,
    selected_monthly_dates: Sequence[object] | None = None,
    reminder_offsets: Sequence[int] | None = None,
) -> Occurrences:
    """Compute the ordered occurrence and reminder dates for a schedule.

    ``repeat_count`` means total occurrences for daily rules, contributing
    week-blocks for weekly rules and occurrences per selected day for monthly
    rules. Raises ``ScheduleComputationError`` when the inputs cannot be
    turned into a schedule; validated input never triggers it.
    """

    try:
        start = parse_calendar_date(start_date)
        end = parse_optional_date(end_date)
        rule = RepeatRule.coerce(repeat)
        interval = parse_frequency(frequency)
    except HabitLoopError as exc:
        raise ScheduleComputationError(exc.message) from exc

    builder = _ScheduleBuilder(start=start, end=end, offsets=tuple(reminder_offsets or ()))
    count = _positive_count(repeat_count)

    if rule is RepeatRule.NONE:
        builder.add(start)
    elif rule is RepeatRule.DAILY:
        _daily(builder, count)
    elif rule is RepeatRule.WEEKLY:
        _weekly(builder, repeat_days or (), interval, count)
    elif rule is RepeatRule.MONTHLY:
        _monthly(builder, selected_monthly_dates, interval, count)
    else:  # pragma: no cover - RepeatRule is exhaustive
        raise ScheduleComputationError(f"Unsupported repeat rule: {rule}")

    return builder.build()


__all__ = [
    "DEFAULT_MONTHLY_OCCURRENCES",
    "MAX_DAILY_OCCURRENCES",
    "MAX_MONTH_STEPS",
    "MAX_WEEK_BLOCKS",
    "Occurrences",
    "generate_occurrences",
    "resolve_month_day",
]
