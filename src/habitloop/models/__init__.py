"""SQLModel table exports."""

from .bad_habit import BadHabit
from .distraction import DISTRACTION_CATEGORIES, Distraction
from .habit import (
    CompletionState,
    Habit,
    HabitCompletionStatus,
    HabitKind,
    HabitParticipant,
    HabitStatus,
    ParticipantStatus,
)
from .notification import Notification, NotificationType
from .user import User

__all__ = [
    "BadHabit",
    "CompletionState",
    "DISTRACTION_CATEGORIES",
    "Distraction",
    "Habit",
    "HabitCompletionStatus",
    "HabitKind",
    "HabitParticipant",
    "HabitStatus",
    "Notification",
    "NotificationType",
    "ParticipantStatus",
    "User",
]
