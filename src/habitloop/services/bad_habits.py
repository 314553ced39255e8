"""Bad habit substitutions tracked once per day."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Mapping, Optional

from ..domain.repositories.bad_habit import BadHabitRepository
from ..errors import ConflictError, NotFoundError, RequestValidationError
from ..logging_config import get_logger
from ..models.bad_habit import BadHabit
from ..models.types import utcnow
from .dates import format_calendar_date
from .dates import today as local_today
from .streaks import streak_message

__all__ = ["BadHabitService", "BadHabitTrackResult", "bad_habit_to_dict"]

logger = get_logger("bad_habits")

_TEXT_FIELDS = ("bad_habit", "good_habit")


def bad_habit_to_dict(item: BadHabit) -> dict[str, Any]:
    return {
        "id": item.id,
        "user_id": item.user_id,
        "bad_habit": item.bad_habit,
        "good_habit": item.good_habit,
        "completed": item.completed,
        "streak": item.streak,
        "last_completed": format_calendar_date(item.last_completed)
        if item.last_completed
        else None,
        "created_at": item.created_at.isoformat() if item.created_at else None,
    }


@dataclass(slots=True, frozen=True)
class BadHabitTrackResult:
    bad_habit: BadHabit
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"bad_habit": bad_habit_to_dict(self.bad_habit), "message": self.message}


def _required_text(data: Mapping[str, Any], key: str) -> str:
    value = str(data.get(key) or "").strip()
    if not value:
        raise RequestValidationError(
            "Both bad habit and good habit are required",
            details={key: ["This field is required."]},
        )
    return value


class BadHabitService:
    def __init__(self, repository: BadHabitRepository) -> None:
        self.repository = repository

    def get(self, bad_habit_id: int, user_id: int) -> BadHabit:
        item = self.repository.get_by_id(bad_habit_id, user_id=user_id)
        if item is None:
            raise NotFoundError("Bad habit not found")
        return item

    def list_for_user(self, user_id: int, *, today: Optional[date] = None) -> list[BadHabit]:
        """List a user's bad habits with ``completed`` reflecting today."""

        current = today or local_today()
        items = self.repository.list_for_user(user_id)
        for item in items:
            item.completed = item.last_completed == current
        return items

    def create(self, user_id: int, data: Mapping[str, Any]) -> BadHabit:
        item = BadHabit(
            user_id=user_id,
            bad_habit=_required_text(data, "bad_habit"),
            good_habit=_required_text(data, "good_habit"),
        )
        item = self.repository.save(item)
        logger.info("Bad habit created", extra={"bad_habit_id": item.id, "user_id": user_id})
        return item

    def update(self, bad_habit_id: int, user_id: int, changes: Mapping[str, Any]) -> BadHabit:
        item = self.get(bad_habit_id, user_id)
        for key in _TEXT_FIELDS:
            if key in changes:
                setattr(item, key, _required_text(changes, key))
        item.updated_at = utcnow()
        item = self.repository.save(item)
        logger.info("Bad habit updated", extra={"bad_habit_id": item.id, "user_id": user_id})
        return item

    def delete(self, bad_habit_id: int, user_id: int) -> None:
        if not self.repository.delete(bad_habit_id, user_id=user_id):
            raise NotFoundError("Bad habit not found")
        logger.info("Bad habit deleted", extra={"bad_habit_id": bad_habit_id, "user_id": user_id})

    def track(
        self, bad_habit_id: int, user_id: int, *, today: Optional[date] = None
    ) -> BadHabitTrackResult:
        """Mark today's substitution done.

        The streak continues when the last check-in was yesterday and
        restarts at one otherwise. A second check-in on the same day is
        rejected.
        """

        current = today or local_today()
        item = self.get(bad_habit_id, user_id)
        if item.last_completed == current:
            raise ConflictError("Already Completed Today")

        if item.last_completed == current - timedelta(days=1):
            item.streak += 1
        else:
            item.streak = 1
        item.last_completed = current
        item.completed = True
        item.updated_at = utcnow()
        item = self.repository.save(item)
        logger.info(
            "Bad habit tracked",
            extra={"bad_habit_id": item.id, "user_id": user_id, "streak": item.streak},
        )
        return BadHabitTrackResult(bad_habit=item, message=streak_message(item.streak))
