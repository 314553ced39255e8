"""Distraction logging and analytics."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Iterable, Mapping, Optional

from ..domain.repositories.distraction import DistractionRepository
from ..errors import NotFoundError, RequestValidationError
from ..logging_config import get_logger
from ..models.distraction import DISTRACTION_CATEGORIES, Distraction
from ..models.types import utcnow
from .dates import days_in_month, format_calendar_date, shift_month
from .dates import today as local_today

__all__ = [
    "DEFAULT_TIMEFRAME",
    "TIMEFRAMES",
    "DistractionService",
    "distraction_to_dict",
    "timeframe_start",
]

logger = get_logger("distractions")

TIMEFRAMES = ("day", "week", "month", "year")
DEFAULT_TIMEFRAME = "week"
MIN_SEVERITY = 1
MAX_SEVERITY = 5
MAX_DESCRIPTION_LENGTH = 500
UPDATABLE_FIELDS = ("category", "severity", "description")


def distraction_to_dict(item: Distraction) -> dict[str, Any]:
    return {
        "id": item.id,
        "user_id": item.user_id,
        "category": item.category,
        "description": item.description,
        "severity": item.severity,
        "occurred_at": item.occurred_at.isoformat() if item.occurred_at else None,
        "occurred_on": format_calendar_date(item.occurred_on),
    }


def _months_back(day: date, months: int) -> date:
    year, month = shift_month(day.year, day.month, -months)
    return date(year, month, min(day.day, days_in_month(year, month)))


def timeframe_start(timeframe: str, today: date) -> date:
    """First calendar day covered by ``timeframe``; the window always ends today."""

    if timeframe == "day":
        return today
    if timeframe == "week":
        return today - timedelta(days=7)
    if timeframe == "month":
        return _months_back(today, 1)
    if timeframe == "year":
        return _months_back(today, 12)
    raise RequestValidationError("Invalid timeframe", details={"timeframe": ["Invalid timeframe"]})


def _validate_category(category: Any) -> str:
    if category not in DISTRACTION_CATEGORIES:
        raise RequestValidationError(
            "Invalid category",
            details={
                "category": [f"Category must be one of: {', '.join(DISTRACTION_CATEGORIES)}"]
            },
        )
    return category


def _validate_severity(severity: Any) -> int:
    if isinstance(severity, bool):
        severity = None
    try:
        value = int(severity)
    except (TypeError, ValueError):
        value = None
    if value is None or not MIN_SEVERITY <= value <= MAX_SEVERITY:
        raise RequestValidationError(
            "Severity must be between 1 and 5",
            details={"severity": ["Severity must be between 1-5"]},
        )
    return value


def _validate_description(description: Any) -> str:
    text = str(description or "").strip()
    if len(text) > MAX_DESCRIPTION_LENGTH:
        raise RequestValidationError(
            "Description must be < 500 chars",
            details={"description": ["Description must be < 500 chars"]},
        )
    return text


@dataclass(slots=True, frozen=True)
class CategoryCount:
    category: str
    count: int
    avg_severity: float
    max_severity: int
    min_severity: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": self.category,
            "count": self.count,
            "avg_severity": round(self.avg_severity, 2),
            "max_severity": self.max_severity,
            "min_severity": self.min_severity,
        }


@dataclass(slots=True, frozen=True)
class DistractionCounts:
    category_counts: list[CategoryCount]
    severity_distribution: dict[int, int]
    total_count: int
    timeframe: str
    start: date
    end: date

    def to_dict(self) -> dict[str, Any]:
        return {
            "category_counts": [c.to_dict() for c in self.category_counts],
            "severity_distribution": [
                {"severity": severity, "count": count}
                for severity, count in sorted(self.severity_distribution.items())
            ],
            "total_count": self.total_count,
            "timeframe": self.timeframe,
            "date_range": {
                "start": format_calendar_date(self.start),
                "end": format_calendar_date(self.end),
            },
        }


@dataclass(slots=True, frozen=True)
class TrendPoint:
    day: date
    count: int
    avg_severity: float
    categories: list[str]

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": format_calendar_date(self.day),
            "count": self.count,
            "avg_severity": round(self.avg_severity, 2),
            "categories": self.categories,
        }


def _category_counts(items: Iterable[Distraction]) -> list[CategoryCount]:
    grouped: dict[str, list[int]] = {}
    for item in items:
        grouped.setdefault(item.category, []).append(item.severity)
    counts = [
        CategoryCount(
            category=category,
            count=len(severities),
            avg_severity=sum(severities) / len(severities),
            max_severity=max(severities),
            min_severity=min(severities),
        )
        for category, severities in grouped.items()
    ]
    counts.sort(key=lambda c: (-c.count, c.category))
    return counts


class DistractionService:
    def __init__(self, repository: DistractionRepository) -> None:
        self.repository = repository

    def get(self, distraction_id: int, user_id: int) -> Distraction:
        item = self.repository.get_by_id(distraction_id, user_id=user_id)
        if item is None:
            raise NotFoundError("Distraction not found")
        return item

    def log(
        self,
        user_id: int,
        data: Mapping[str, Any],
        *,
        now: Optional[datetime] = None,
    ) -> Distraction:
        category = _validate_category(data.get("category"))
        severity = _validate_severity(data.get("severity"))
        description = _validate_description(data.get("description"))
        occurred_at = now or utcnow()
        item = Distraction(
            user_id=user_id,
            category=category,
            severity=severity,
            description=description or f"Auto: {category} distraction",
            occurred_at=occurred_at,
            occurred_on=occurred_at.date() if now else local_today(),
        )
        item = self.repository.save(item)
        logger.info(
            "Distraction logged",
            extra={"distraction_id": item.id, "user_id": user_id, "category": category},
        )
        return item

    def list_for_user(
        self,
        user_id: int,
        timeframe: Optional[str] = None,
        *,
        today: Optional[date] = None,
    ) -> list[Distraction]:
        """Newest first; without a timeframe every distraction is returned."""

        if not timeframe:
            return self.repository.list_for_user(user_id)
        current = today or local_today()
        return self.repository.list_for_user(
            user_id, since=timeframe_start(timeframe, current), until=current
        )

    def update(self, distraction_id: int, user_id: int, changes: Mapping[str, Any]) -> Distraction:
        item = self.get(distraction_id, user_id)
        filtered = {key: changes[key] for key in UPDATABLE_FIELDS if key in changes}
        if "category" in filtered:
            item.category = _validate_category(filtered["category"])
        if "severity" in filtered:
            item.severity = _validate_severity(filtered["severity"])
        if "description" in filtered:
            item.description = _validate_description(filtered["description"])
        item = self.repository.save(item)
        logger.info(
            "Distraction updated",
            extra={"distraction_id": item.id, "user_id": user_id, "fields": sorted(filtered)},
        )
        return item

    def delete(self, distraction_id: int, user_id: int) -> None:
        if not self.repository.delete(distraction_id, user_id=user_id):
            raise NotFoundError("Distraction not found")
        logger.info(
            "Distraction deleted", extra={"distraction_id": distraction_id, "user_id": user_id}
        )

    def counts(
        self,
        user_id: int,
        timeframe: Optional[str] = None,
        *,
        today: Optional[date] = None,
    ) -> DistractionCounts:
        """Per-category counts with severity stats for the timeframe (default week)."""

        timeframe = timeframe or DEFAULT_TIMEFRAME
        current = today or local_today()
        start = timeframe_start(timeframe, current)
        items = self.repository.list_for_user(user_id, since=start, until=current)
        return DistractionCounts(
            category_counts=_category_counts(items),
            severity_distribution=dict(Counter(item.severity for item in items)),
            total_count=len(items),
            timeframe=timeframe,
            start=start,
            end=current,
        )

    def trends(
        self,
        user_id: int,
        timeframe: Optional[str] = None,
        *,
        today: Optional[date] = None,
    ) -> list[TrendPoint]:
        """Daily counts in ascending day order; days without distractions are omitted."""

        timeframe = timeframe or DEFAULT_TIMEFRAME
        current = today or local_today()
        items = self.repository.list_for_user(
            user_id, since=timeframe_start(timeframe, current), until=current
        )
        by_day: dict[date, list[Distraction]] = {}
        for item in items:
            by_day.setdefault(item.occurred_on, []).append(item)
        points = []
        for day in sorted(by_day):
            rows = by_day[day]
            points.append(
                TrendPoint(
                    day=day,
                    count=len(rows),
                    avg_severity=sum(r.severity for r in rows) / len(rows),
                    categories=sorted({r.category for r in rows}),
                )
            )
        return points
