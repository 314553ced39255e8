"""Column types shared by the table models."""

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Any, Iterable

from sqlalchemy import JSON
from sqlalchemy.types import TypeDecorator


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _to_iso_day(value: Any) -> str:
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return date.fromisoformat(str(value)[:10]).isoformat()


class CalendarDateList(TypeDecorator):
    """Ordered list of calendar days stored as a JSON array of ``YYYY-MM-DD`` strings."""

    impl = JSON
    cache_ok = True

    def process_bind_param(self, value: Iterable[Any] | None, dialect) -> list[str]:
        if not value:
            return []
        return [_to_iso_day(item) for item in value]

    def process_result_value(self, value: list[str] | None, dialect) -> list[date]:
        if not value:
            return []
        return [date.fromisoformat(item) for item in value]


__all__ = ["CalendarDateList", "utcnow"]
