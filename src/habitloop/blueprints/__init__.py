"""Blueprint exports."""

from . import bad_habits, distractions, habits, notifications, shared

__all__ = [
    "bad_habits",
    "distractions",
    "habits",
    "notifications",
    "shared",
]
