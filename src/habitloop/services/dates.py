"""Calendar-date normalization helpers.

Every date that enters the habit core passes through ``parse_calendar_date``
so comparisons and storage happen at day granularity. Instants keep the
calendar day written in the string; nothing is shifted across midnight.
"""

from __future__ import annotations

import re
from calendar import monthrange
from datetime import date, datetime, timedelta
from typing import Iterable, Iterator

from ..errors import InvalidDateFormat

CALENDAR_DAY_FORMAT = "%Y-%m-%d"
_CALENDAR_DAY_RE = re.compile(r"^(\d{4})-(\d{1,2})-(\d{1,2})$")

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def today() -> date:
    """Return the local calendar day."""

    return date.today()


def parse_calendar_date(value: object) -> date:
    """Normalize a calendar-day string, ISO instant, date or datetime to a ``date``."""

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        raise InvalidDateFormat(f"Invalid date format: {value!r}")

    raw = value.strip()
    if not raw:
        raise InvalidDateFormat("Invalid date format: empty value")

    if "T" in raw or " " in raw:
        candidate = raw[:-1] + "+00:00" if raw.endswith("Z") else raw
        try:
            return datetime.fromisoformat(candidate).date()
        except ValueError as exc:
            raise InvalidDateFormat(f"Invalid date format: {value}") from exc

    match = _CALENDAR_DAY_RE.match(raw)
    if match is None:
        raise InvalidDateFormat(f"Invalid date format: {value}")
    year, month, day = (int(part) for part in match.groups())
    try:
        return date(year, month, day)
    except ValueError as exc:
        raise InvalidDateFormat(f"Invalid date format: {value}") from exc


def parse_optional_date(value: object) -> date | None:
    """Like ``parse_calendar_date`` but maps ``None``/empty strings to ``None``."""

    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    return parse_calendar_date(value)


def format_calendar_date(value: date) -> str:
    """Render a calendar date as ``YYYY-MM-DD``."""

    if isinstance(value, datetime):
        value = value.date()
    return value.strftime(CALENDAR_DAY_FORMAT)


def normalize_dates(values: Iterable[object]) -> list[date]:
    """Parse, deduplicate and sort a collection of date-like values."""

    return sorted({parse_calendar_date(value) for value in values})


def days_in_month(year: int, month: int) -> int:
    return monthrange(year, month)[1]


def shift_month(year: int, month: int, months: int) -> tuple[int, int]:
    """Return (year, month) moved ``months`` months forward."""

    index = year * 12 + (month - 1) + months
    return index // 12, index % 12 + 1


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every calendar day in ``[start, end]``."""

    cursor = start
    while cursor <= end:
        yield cursor
        cursor += timedelta(days=1)


def weekday_index(name: str) -> int:
    """Return the Monday=0 index for a weekday name (case-insensitive)."""

    normalized = name.strip().capitalize()
    try:
        return WEEKDAY_NAMES.index(normalized)
    except ValueError as exc:
        raise ValueError(f"Invalid repeat day: {name}") from exc


__all__ = [
    "CALENDAR_DAY_FORMAT",
    "WEEKDAY_NAMES",
    "days_in_month",
    "format_calendar_date",
    "iter_days",
    "normalize_dates",
    "parse_calendar_date",
    "parse_optional_date",
    "shift_month",
    "today",
    "weekday_index",
]
