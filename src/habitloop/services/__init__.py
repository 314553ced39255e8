"""Service module exports."""

from . import (
    bad_habits,
    connections,
    dates,
    distractions,
    habits,
    notifications,
    occurrences,
    reminders,
    schedule,
    shared_habits,
    streaks,
    users,
)

__all__ = [
    "bad_habits",
    "connections",
    "dates",
    "distractions",
    "habits",
    "notifications",
    "occurrences",
    "reminders",
    "schedule",
    "shared_habits",
    "streaks",
    "users",
]
