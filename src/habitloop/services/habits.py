"""Habit lifecycle: create, update, track, query.

Schedule-affecting changes always run validate -> regenerate -> persist in
that order inside one repository save, so ``repeat_dates`` can never go stale
relative to the fields they were generated from.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping, Optional, Sequence

from ..domain.repositories.habit import HabitRepository
from ..errors import (
    ConflictError,
    FutureDateError,
    NotFoundError,
    ScheduleValidationError,
)
from ..logging_config import get_logger
from ..models.habit import Habit, HabitKind, HabitStatus
from ..models.notification import NotificationType
from .dates import (
    format_calendar_date,
    iter_days,
    normalize_dates,
    parse_calendar_date,
    parse_optional_date,
)
from .dates import today as local_today
from .notifications import Notifier
from .occurrences import generate_occurrences
from .schedule import (
    SCHEDULE_FIELDS,
    RepeatRule,
    parse_frequency,
    resolve_monthly_selector,
    validate_reminders,
    validate_schedule,
)
from .streaks import compute_streak, is_milestone, longest_streak, streak_message

__all__ = [
    "DailyCompletion",
    "HabitRangeView",
    "HabitService",
    "HabitStats",
    "TrackResult",
    "habit_to_dict",
    "refresh_streaks",
]

logger = get_logger("habits")

MAX_STATS_DAYS = 366
EDITABLE_STATUSES = {
    HabitStatus.ACTIVE.value,
    HabitStatus.INACTIVE.value,
    HabitStatus.COMPLETED.value,
}


@dataclass(slots=True, frozen=True)
class DailyCompletion:
    day: date
    completed: int
    total: int

    def to_dict(self) -> dict[str, Any]:
        return {"date": format_calendar_date(self.day), "completed": self.completed, "total": self.total}


@dataclass(slots=True, frozen=True)
class HabitStats:
    """Counts of a user's habits by status, recomputed on every call."""

    total_habits: int
    completed: int
    active: int
    inactive: int
    daily_completions: tuple[DailyCompletion, ...] = ()

    @property
    def completion_rate(self) -> int:
        if self.total_habits == 0:
            return 0
        return round(self.completed / self.total_habits * 100)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "total_habits": self.total_habits,
            "completed": self.completed,
            "active": self.active,
            "inactive": self.inactive,
            "completion_rate": self.completion_rate,
        }
        if self.daily_completions:
            payload["daily_completions"] = [d.to_dict() for d in self.daily_completions]
        return payload


@dataclass(slots=True, frozen=True)
class TrackResult:
    habit: Habit
    stats: HabitStats
    milestone: Optional[int] = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "habit": habit_to_dict(self.habit),
            "stats": self.stats.to_dict(),
            "milestone": self.milestone,
            "message": streak_message(self.habit.streak) if self.milestone else None,
        }


@dataclass(slots=True, frozen=True)
class HabitRangeView:
    """A habit annotated with the calendar days it shows up on in a window."""

    habit: Habit
    dates_in_range: list[date] = field(default_factory=list)
    completion_dates_in_range: list[date] = field(default_factory=list)

    @property
    def is_repeated(self) -> bool:
        return self.habit.is_repeated

    def to_dict(self) -> dict[str, Any]:
        payload = habit_to_dict(self.habit)
        payload.update(
            {
                "dates_in_range": [format_calendar_date(d) for d in self.dates_in_range],
                "completion_dates_in_range": [
                    format_calendar_date(d) for d in self.completion_dates_in_range
                ],
                "is_repeated": self.is_repeated,
            }
        )
        return payload


def habit_to_dict(habit: Habit) -> dict[str, Any]:
    def _day(value: Optional[date]) -> Optional[str]:
        return format_calendar_date(value) if value else None

    return {
        "id": habit.id,
        "user_id": habit.user_id,
        "name": habit.name,
        "description": habit.description,
        "kind": habit.kind,
        "status": habit.status,
        "start_date": _day(habit.start_date),
        "end_date": _day(habit.end_date),
        "repeat": habit.repeat,
        "repeat_days": list(habit.repeat_days or []),
        "frequency": habit.frequency,
        "repeat_count": habit.repeat_count,
        "selected_monthly_dates": list(habit.selected_monthly_dates or []),
        "reminder_offsets": list(habit.reminder_offsets or []),
        "repeat_dates": [format_calendar_date(d) for d in habit.repeat_dates],
        "reminders": [format_calendar_date(d) for d in habit.reminders],
        "completion_dates": [format_calendar_date(d) for d in habit.completion_dates],
        "streak": habit.streak,
        "longest_streak": habit.longest_streak,
        "last_completed": _day(habit.last_completed),
        "shared_habit_id": habit.shared_habit_id,
        "created_at": habit.created_at.isoformat() if habit.created_at else None,
        "updated_at": habit.updated_at.isoformat() if habit.updated_at else None,
    }


def refresh_streaks(habit: Habit, today: date) -> None:
    """Re-derive streak fields from ``completion_dates``; never patched incrementally."""

    completions = normalize_dates(habit.completion_dates)
    habit.completion_dates = completions
    habit.streak = compute_streak(completions, today=today)
    habit.longest_streak = longest_streak(completions)
    habit.last_completed = completions[-1] if completions else None


def _normalize_repeat_days(values: Optional[Sequence[str]]) -> list[str]:
    if not values:
        return []
    seen: list[str] = []
    for value in values:
        name = str(value).strip().capitalize()
        if name not in seen:
            seen.append(name)
    return seen


def _normalize_monthly(values: Optional[Sequence[Any]]) -> list[Any]:
    """Day numbers stay ints; full dates are stored as ``YYYY-MM-DD``."""

    normalized: list[Any] = []
    for value in values or []:
        resolved = resolve_monthly_selector(value)
        normalized.append(resolved if isinstance(resolved, int) else format_calendar_date(resolved))
    return normalized


_SNAPSHOT_NORMALIZERS = {
    "repeat": lambda value: RepeatRule.coerce(value).value,
    "repeat_days": lambda value: sorted(value or []),
    "selected_monthly_dates": lambda value: sorted(map(str, value or [])),
    "reminder_offsets": lambda value: sorted(value or []),
}


def _schedule_snapshot(habit: Habit) -> dict[str, Any]:
    """Comparable view of every schedule-affecting field."""

    return {
        name: _SNAPSHOT_NORMALIZERS.get(name, lambda value: value)(getattr(habit, name))
        for name in SCHEDULE_FIELDS
    }


def apply_schedule(habit: Habit) -> None:
    """Regenerate the materialized occurrences from the schedule fields."""

    occurrences = generate_occurrences(
        habit.start_date,
        habit.repeat,
        habit.repeat_days,
        habit.frequency,
        habit.repeat_count,
        habit.end_date,
        habit.selected_monthly_dates,
        habit.reminder_offsets,
    )
    habit.repeat_dates = occurrences.repeat_dates
    habit.reminders = occurrences.reminders


def build_habit(
    user_id: int,
    data: Mapping[str, Any],
    *,
    kind: HabitKind = HabitKind.PERSONAL,
    status: HabitStatus = HabitStatus.ACTIVE,
    today: date,
) -> Habit:
    """Validate a new habit definition and return it with its schedule generated."""

    start = parse_optional_date(data.get("start_date"))
    if start is None:
        raise ScheduleValidationError("Start date is required")
    end = parse_optional_date(data.get("end_date"))
    rule = RepeatRule.coerce(data.get("repeat"))
    repeat_days = data.get("repeat_days") or []
    monthly = data.get("selected_monthly_dates") or []
    offsets = list(data.get("reminder_offsets") or [])
    repeat_count = data.get("repeat_count")
    frequency = data.get("frequency")

    validate_schedule(
        start,
        end,
        offsets,
        rule,
        repeat_days,
        monthly,
        frequency=frequency,
        repeat_count=repeat_count,
        today=today,
    )

    habit = Habit(
        user_id=user_id,
        name=str(data["name"]).strip(),
        description=str(data.get("description") or "").strip(),
        kind=kind.value,
        status=status.value,
        start_date=start,
        end_date=end,
        repeat=rule.value,
        repeat_days=_normalize_repeat_days(repeat_days) if rule is RepeatRule.WEEKLY else [],
        frequency=parse_frequency(frequency),
        repeat_count=repeat_count,
        selected_monthly_dates=_normalize_monthly(monthly) if rule is RepeatRule.MONTHLY else [],
        reminder_offsets=sorted(offsets),
    )
    apply_schedule(habit)
    validate_reminders(habit.reminders, start, end, today=today)
    return habit


class HabitService:
    """Operations on a user's own habits."""

    def __init__(self, repository: HabitRepository, notifier: Optional[Notifier] = None) -> None:
        self.repository = repository
        self.notifier = notifier

    # Queries
    def get(self, habit_id: int, user_id: int) -> Habit:
        habit = self.repository.find_owned(habit_id, user_id)
        if habit is None:
            raise NotFoundError("Habit not found")
        return habit

    def list_habits(self, user_id: int) -> list[Habit]:
        """Personal habits only; shared ones are listed by the shared habit service."""

        return self.repository.find_many(user_id, kind=HabitKind.PERSONAL.value)

    def stats(
        self,
        user_id: int,
        start: object = None,
        end: object = None,
    ) -> HabitStats:
        """Status counts plus, when a window is given, a per-day completion breakdown."""

        habits = self.repository.find_many(user_id)
        completed = sum(1 for h in habits if h.status == HabitStatus.COMPLETED.value)
        active = sum(1 for h in habits if h.status == HabitStatus.ACTIVE.value)

        daily: tuple[DailyCompletion, ...] = ()
        window_start = parse_optional_date(start)
        window_end = parse_optional_date(end)
        if window_start is not None and window_end is not None:
            if window_start > window_end:
                raise ScheduleValidationError("Start date must be before end date")
            if (window_end - window_start).days >= MAX_STATS_DAYS:
                raise ScheduleValidationError(
                    f"Stats window cannot exceed {MAX_STATS_DAYS} days"
                )
            daily = tuple(
                DailyCompletion(
                    day=day,
                    completed=sum(1 for h in habits if day in h.completion_dates),
                    total=sum(
                        1
                        for h in habits
                        if h.start_date <= day and (h.end_date is None or day <= h.end_date)
                    ),
                )
                for day in iter_days(window_start, window_end)
            )

        return HabitStats(
            total_habits=len(habits),
            completed=completed,
            active=active,
            inactive=len(habits) - completed - active,
            daily_completions=daily,
        )

    def query_range(self, user_id: int, start: object, end: object) -> list[HabitRangeView]:
        """Habits that appear on at least one day of ``[start, end]``.

        Occurrence dates drive the display; completion dates are used only for
        habits with no occurrence in the window.
        """

        window_start = parse_calendar_date(start)
        window_end = parse_calendar_date(end)
        if window_start > window_end:
            raise ScheduleValidationError("Start date must be before end date")

        views: list[HabitRangeView] = []
        for habit in self.repository.find_touching_range(user_id, window_start, window_end):
            scheduled = sorted({d for d in habit.repeat_dates if window_start <= d <= window_end})
            completions = sorted(
                {d for d in habit.completion_dates if window_start <= d <= window_end}
            )
            dates = scheduled or completions
            if not dates:
                continue
            views.append(
                HabitRangeView(
                    habit=habit,
                    dates_in_range=dates,
                    completion_dates_in_range=completions,
                )
            )
        return views

    # Mutations
    def create(self, user_id: int, data: Mapping[str, Any], *, today: Optional[date] = None) -> Habit:
        habit = build_habit(user_id, data, today=today or local_today())
        habit = self.repository.save(habit)
        logger.info(
            "Habit created",
            extra={
                "habit_id": habit.id,
                "user_id": user_id,
                "repeat": habit.repeat,
                "occurrences": len(habit.repeat_dates),
            },
        )
        return habit

    def update(
        self,
        habit_id: int,
        user_id: int,
        changes: Mapping[str, Any],
        *,
        today: Optional[date] = None,
    ) -> Habit:
        """Apply ``changes`` (only the keys present) to an owned habit."""

        habit = self.get(habit_id, user_id)
        return self.apply_changes(habit, changes, today=today or local_today())

    def apply_changes(self, habit: Habit, changes: Mapping[str, Any], *, today: date) -> Habit:
        """Validate, regenerate when a schedule field changed, then persist."""

        before = _schedule_snapshot(habit)
        old_rule = RepeatRule.coerce(habit.repeat)

        start = habit.start_date
        if "start_date" in changes:
            start = parse_optional_date(changes["start_date"])
            if start is None:
                raise ScheduleValidationError("Start date is required")
        end = parse_optional_date(changes["end_date"]) if "end_date" in changes else habit.end_date
        rule = RepeatRule.coerce(changes["repeat"]) if "repeat" in changes else old_rule
        repeat_days = changes.get("repeat_days", habit.repeat_days) or []
        monthly = changes.get("selected_monthly_dates", habit.selected_monthly_dates) or []
        offsets = list(changes.get("reminder_offsets", habit.reminder_offsets) or [])
        frequency = changes.get("frequency", habit.frequency)
        repeat_count = changes.get("repeat_count", habit.repeat_count)

        # Selectors that no longer apply to the new rule are dropped.
        if rule is not old_rule:
            if rule is not RepeatRule.WEEKLY:
                repeat_days = []
            if rule is not RepeatRule.MONTHLY:
                monthly = []

        validate_schedule(
            start,
            end,
            offsets,
            rule,
            repeat_days,
            monthly,
            frequency=frequency,
            repeat_count=repeat_count,
            today=today,
            enforce_not_past=start != habit.start_date,
        )

        if "name" in changes and changes["name"] is not None:
            name = str(changes["name"]).strip()
            if not name:
                raise ScheduleValidationError("Name cannot be empty")
            habit.name = name
        if "description" in changes:
            habit.description = str(changes["description"] or "").strip()
        if "status" in changes and changes["status"] is not None:
            if changes["status"] not in EDITABLE_STATUSES:
                raise ScheduleValidationError(f"Invalid status: {changes['status']}")
            habit.status = changes["status"]

        habit.start_date = start
        habit.end_date = end
        habit.repeat = rule.value
        habit.repeat_days = _normalize_repeat_days(repeat_days)
        habit.selected_monthly_dates = _normalize_monthly(monthly)
        habit.reminder_offsets = sorted(offsets)
        habit.frequency = parse_frequency(frequency)
        habit.repeat_count = repeat_count

        schedule_changed = _schedule_snapshot(habit) != before
        if schedule_changed:
            apply_schedule(habit)
            if rule is not old_rule:
                # Completions recorded against the old rule no longer line up.
                habit.completion_dates = []
            refresh_streaks(habit, today)

        habit = self.repository.save(habit)
        logger.info(
            "Habit updated",
            extra={
                "habit_id": habit.id,
                "fields": sorted(changes),
                "schedule_regenerated": schedule_changed,
            },
        )
        return habit

    def delete(self, habit_id: int, user_id: int) -> None:
        habit = self.get(habit_id, user_id)
        if habit.kind == HabitKind.SHARED.value:
            raise ConflictError("Shared habits are deleted through the shared habit API")
        self.repository.delete_by_id(habit_id)
        logger.info(
            "Habit deleted",
            extra={"habit_id": habit_id, "user_id": user_id, "occurrences": len(habit.repeat_dates)},
        )

    def delete_occurrence(
        self,
        habit_id: int,
        user_id: int,
        occurrence: object,
        *,
        today: Optional[date] = None,
    ) -> Habit:
        """Remove one day from the schedule and the completions, leaving the rest."""

        day = parse_calendar_date(occurrence)
        habit = self.get(habit_id, user_id)
        if day not in habit.repeat_dates and day not in habit.completion_dates:
            raise NotFoundError("Occurrence not found")

        habit.repeat_dates = [d for d in habit.repeat_dates if d != day]
        habit.completion_dates = [d for d in habit.completion_dates if d != day]
        refresh_streaks(habit, today or local_today())
        habit = self.repository.save(habit)
        logger.info(
            "Habit occurrence deleted",
            extra={"habit_id": habit_id, "occurrence": format_calendar_date(day)},
        )
        return habit

    def track_completion(
        self,
        habit_id: int,
        user_id: int,
        target_date: object = None,
        completed: bool = True,
        *,
        today: Optional[date] = None,
    ) -> TrackResult:
        """Mark or unmark a day as done and return the habit with fresh stats.

        Future days are rejected before anything is touched. Repeating the
        same request is a no-op apart from the returned stats.
        """

        current = today or local_today()
        target = current if target_date is None else parse_calendar_date(target_date)
        if target > current:
            raise FutureDateError("Cannot track a habit for a future date.")

        habit = self.get(habit_id, user_id)
        previous_streak = compute_streak(habit.completion_dates, today=current)
        completions = set(habit.completion_dates)
        already_done = target in completions
        if completed and not already_done:
            completions.add(target)
        elif not completed and already_done:
            completions.discard(target)
        changed = already_done != completed

        habit.completion_dates = sorted(completions)
        refresh_streaks(habit, current)
        if target == current and habit.status in EDITABLE_STATUSES:
            habit.status = (
                HabitStatus.COMPLETED.value if completed else HabitStatus.ACTIVE.value
            )
        habit = self.repository.save(habit)

        milestone = None
        if completed and changed and habit.streak > previous_streak and is_milestone(habit.streak):
            milestone = habit.streak
            self._notify_milestone(habit)

        logger.info(
            "Habit tracked",
            extra={
                "habit_id": habit.id,
                "date": format_calendar_date(target),
                "completed": completed,
                "changed": changed,
                "streak": habit.streak,
            },
        )
        return TrackResult(habit=habit, stats=self.stats(user_id), milestone=milestone)

    def _notify_milestone(self, habit: Habit) -> None:
        if self.notifier is None:
            return
        self.notifier.notify(
            habit.user_id,
            NotificationType.STREAK_MILESTONE,
            {"habit_name": habit.name, "streak": habit.streak},
            message=f"{habit.name}: {streak_message(habit.streak)}",
            habit_id=habit.id,
        )
