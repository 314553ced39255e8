"""Repository protocol definitions for domain layer."""

from .bad_habit import BadHabitRepository
from .distraction import DistractionRepository
from .habit import HabitRepository
from .notification import NotificationRepository
from .user import UserRepository

__all__ = [
    "BadHabitRepository",
    "DistractionRepository",
    "HabitRepository",
    "NotificationRepository",
    "UserRepository",
]
