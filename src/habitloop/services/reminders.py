"""Daily reminder dispatch over persisted reminder dates."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Optional

from ..domain.repositories.habit import HabitRepository
from ..logging_config import get_logger
from ..models.habit import Habit
from ..models.notification import NotificationType
from .dates import format_calendar_date
from .dates import today as local_today
from .notifications import Notifier

__all__ = ["dispatch_due_reminders", "upcoming_occurrences"]

logger = get_logger("reminders")


def upcoming_occurrences(habit: Habit, reminder_day: date) -> list[date]:
    """Occurrences announced by a reminder on ``reminder_day`` that are not done yet.

    A reminder sits ``offset`` days before an occurrence, so each offset points
    forward from the reminder day.
    """

    scheduled = set(habit.repeat_dates)
    done = set(habit.completion_dates)
    announced = {reminder_day + timedelta(days=offset) for offset in habit.reminder_offsets or []}
    return sorted(day for day in announced if day in scheduled and day not in done)


def dispatch_due_reminders(
    repository: HabitRepository,
    notifier: Notifier,
    *,
    today: Optional[date] = None,
) -> int:
    """Send a ``habit_reminder`` for every active habit reminding on ``today``.

    Returns the number of notifications created.
    """

    current = today or local_today()
    sent = 0
    for habit in repository.find_with_reminder_on(current):
        occurrences = upcoming_occurrences(habit, current)
        if not occurrences:
            continue
        days = [format_calendar_date(day) for day in occurrences]
        notifier.notify(
            habit.user_id,
            NotificationType.HABIT_REMINDER,
            {
                "habit_name": habit.name,
                "date": days[0],
                "occurrence_dates": days,
                "reminder_date": format_calendar_date(current),
            },
            message=f'Don\'t forget "{habit.name}" on {", ".join(days)}!',
            habit_id=habit.id,
        )
        sent += 1
    logger.info(
        "Reminders dispatched", extra={"date": format_calendar_date(current), "count": sent}
    )
    return sent
