"""Schedule vocabulary and validation for habit definitions.

Validation runs before anything is generated or persisted. Every failure is a
``ScheduleValidationError`` whose message is shown to the client verbatim.
"""

from __future__ import annotations

import re
from datetime import date
from enum import Enum
from typing import Iterable, Sequence

from ..errors import InvalidDateFormat, ScheduleValidationError
from .dates import WEEKDAY_NAMES, parse_calendar_date, parse_optional_date
from .dates import today as local_today

MIN_REMINDER_OFFSET = 1
MAX_REMINDER_OFFSET = 5
MIN_REPEAT_COUNT = 1
MAX_REPEAT_COUNT = 365

# Any change to one of these invalidates the cached repeat_dates/reminders.
SCHEDULE_FIELDS = (
    "start_date",
    "end_date",
    "repeat",
    "repeat_days",
    "frequency",
    "repeat_count",
    "selected_monthly_dates",
    "reminder_offsets",
)

_FREQUENCY_RE = re.compile(r"\d+")
_DAY_NUMBER_RE = re.compile(r"^\d{1,2}$")


class RepeatRule(str, Enum):
    """Supported repeat rules for a habit schedule."""

    NONE = "none"
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @classmethod
    def coerce(cls, value: "RepeatRule | str | None") -> "RepeatRule":
        """Map stored/incoming values (``None`` included) onto a rule."""

        if value is None or value == "":
            return cls.NONE
        if isinstance(value, RepeatRule):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as exc:
            raise ScheduleValidationError(f"Invalid repeat rule: {value}") from exc


def parse_frequency(value: object) -> int:
    """Return the interval multiplier for ``"every N weeks"`` style values.

    ``None``, empty strings and bare rule names (``"weekly"``) mean 1.
    """

    if value is None or value == "":
        return 1
    if isinstance(value, bool):
        raise ScheduleValidationError(f"Invalid frequency: {value}")
    if isinstance(value, int):
        interval = value
    elif isinstance(value, str):
        match = _FREQUENCY_RE.search(value)
        interval = int(match.group(0)) if match else 1
    else:
        raise ScheduleValidationError(f"Invalid frequency: {value}")
    if interval < 1:
        raise ScheduleValidationError("Frequency must be at least 1")
    return interval


def resolve_monthly_selector(value: object) -> int | date:
    """Return a day-of-month number or a full calendar date.

    Day numbers come in as ints or digit strings (``"30"``); anything else
    must parse as a calendar date.
    """

    if isinstance(value, bool):
        raise ScheduleValidationError("Invalid date format in selectedMonthlyDates")
    if isinstance(value, int) or (isinstance(value, str) and _DAY_NUMBER_RE.match(value.strip())):
        day = int(value)
        if not 1 <= day <= 31:
            raise ScheduleValidationError("Monthly date day number must be between 1 and 31")
        return day
    try:
        return parse_calendar_date(value)
    except InvalidDateFormat as exc:
        raise ScheduleValidationError("Invalid date format in selectedMonthlyDates") from exc


def _validate_offsets(reminder_offsets: Sequence[object]) -> None:
    for offset in reminder_offsets:
        if (
            isinstance(offset, bool)
            or not isinstance(offset, int)
            or not MIN_REMINDER_OFFSET <= offset <= MAX_REMINDER_OFFSET
        ):
            raise ScheduleValidationError(
                f"Each reminder offset must be an integer between "
                f"{MIN_REMINDER_OFFSET} and {MAX_REMINDER_OFFSET}"
            )
    if len(set(reminder_offsets)) != len(reminder_offsets):
        raise ScheduleValidationError("Reminder offsets must be unique")


def _validate_weekly(repeat_days: Sequence[str] | None) -> None:
    if not repeat_days:
        raise ScheduleValidationError("Repeat days are required for weekly habits")
    for day in repeat_days:
        if not isinstance(day, str) or day.strip().capitalize() not in WEEKDAY_NAMES:
            raise ScheduleValidationError(f"Invalid repeat day: {day}")


def _validate_monthly(
    selected: Sequence[object] | None,
    *,
    start: date | None,
    end: date | None,
    current: date,
    enforce_not_past: bool,
) -> None:
    if selected is None or isinstance(selected, (str, bytes)) or not isinstance(selected, Sequence):
        raise ScheduleValidationError("Selected monthly dates must be an array")
    if len(selected) == 0:
        raise ScheduleValidationError("At least one date must be selected for monthly repetition")

    resolved: list[int | date] = []
    for raw in selected:
        value = resolve_monthly_selector(raw)
        if isinstance(value, date):
            if enforce_not_past and value < current:
                raise ScheduleValidationError(
                    "Cannot select past dates for monthly repetition (except today)"
                )
            if start is not None and value < start:
                raise ScheduleValidationError("Monthly dates cannot be before the habit start date")
            if end is not None and value > end:
                raise ScheduleValidationError("Monthly dates cannot be after the habit end date")
        resolved.append(value)

    if len(set(resolved)) != len(resolved):
        raise ScheduleValidationError("Monthly dates must be unique")


def validate_schedule(
    start_date: object,
    end_date: object = None,
    reminder_offsets: Sequence[object] | None = None,
    repeat: RepeatRule | str | None = None,
    repeat_days: Sequence[str] | None = None,
    selected_monthly_dates: Sequence[object] | None = None,
    *,
    frequency: object = None,
    repeat_count: int | None = None,
    today: date | None = None,
    enforce_not_past: bool = True,
) -> None:
    """Reject schedules that violate a temporal invariant.

    ``enforce_not_past`` is disabled by updates that keep an existing (and
    possibly already elapsed) start date.
    """

    current = today or local_today()
    start = parse_optional_date(start_date)
    end = parse_optional_date(end_date)

    if start is not None and enforce_not_past and start < current:
        raise ScheduleValidationError("Start date cannot be in the past (except today)")

    if end is not None and start is not None and end < start:
        raise ScheduleValidationError("End date must be after the start date")

    _validate_offsets(list(reminder_offsets or []))

    if repeat_count is not None and (
        isinstance(repeat_count, bool)
        or not isinstance(repeat_count, int)
        or not MIN_REPEAT_COUNT <= repeat_count <= MAX_REPEAT_COUNT
    ):
        raise ScheduleValidationError(
            f"Repeat count must be an integer between {MIN_REPEAT_COUNT} and {MAX_REPEAT_COUNT}"
        )

    parse_frequency(frequency)

    rule = RepeatRule.coerce(repeat)
    if rule is RepeatRule.WEEKLY:
        _validate_weekly(repeat_days)
    elif rule is RepeatRule.MONTHLY:
        _validate_monthly(
            selected_monthly_dates,
            start=start,
            end=end,
            current=current,
            enforce_not_past=enforce_not_past,
        )


def validate_reminders(
    reminders: Iterable[object],
    start_date: object,
    end_date: object = None,
    *,
    today: date | None = None,
) -> None:
    """Post-hoc check on computed reminder dates."""

    current = today or local_today()
    start = parse_optional_date(start_date)
    end = parse_optional_date(end_date)
    for raw in reminders:
        reminder = parse_calendar_date(raw)
        if reminder < current:
            raise ScheduleValidationError("Reminders cannot be in the past (except today)")
        if start is not None and reminder < start:
            raise ScheduleValidationError("Reminders must be after the start date")
        if end is not None and reminder > end:
            raise ScheduleValidationError("Reminders cannot be after the end date")


__all__ = [
    "MAX_REMINDER_OFFSET",
    "MAX_REPEAT_COUNT",
    "MIN_REMINDER_OFFSET",
    "MIN_REPEAT_COUNT",
    "RepeatRule",
    "SCHEDULE_FIELDS",
    "parse_frequency",
    "resolve_monthly_selector",
    "validate_reminders",
    "validate_schedule",
]
