"""Concrete repository implementations using SQLModel."""

from .bad_habit import SQLModelBadHabitRepository
from .distraction import SQLModelDistractionRepository
from .habit import SQLModelHabitRepository
from .notification import SQLModelNotificationRepository
from .user import SQLModelUserRepository

__all__ = [
    "SQLModelBadHabitRepository",
    "SQLModelDistractionRepository",
    "SQLModelHabitRepository",
    "SQLModelNotificationRepository",
    "SQLModelUserRepository",
]
