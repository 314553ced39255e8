"""Streak helpers shared by habits and bad habits."""

from __future__ import annotations

from datetime import date, timedelta
from typing import Iterable

from .dates import today as local_today

# Streak lengths that earn a milestone notification, besides multiples of 30.
MILESTONES = (3, 7, 14, 21, 30)


def compute_streak(dates: Iterable[date], *, today: date | None = None) -> int:
    """Return the current streak anchored at today or yesterday.

    A most recent completion older than yesterday means the streak is broken.
    Duplicates are ignored and the first gap ends the walk.
    """

    current = today or local_today()
    days = sorted(set(dates), reverse=True)
    if not days:
        return 0

    most_recent = days[0]
    if most_recent != current and most_recent != current - timedelta(days=1):
        return 0

    streak = 1
    anchor = most_recent
    for day in days[1:]:
        if day == anchor - timedelta(days=1):
            streak += 1
            anchor = day
        else:
            break
    return streak


def longest_streak(dates: Iterable[date]) -> int:
    """Return the longest run of consecutive days in ``dates``."""

    longest = 0
    run = 0
    last_day: date | None = None
    for day in sorted(set(dates)):
        if last_day is not None and day == last_day + timedelta(days=1):
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        last_day = day
    return longest


def is_milestone(streak: int) -> bool:
    return streak in MILESTONES or (streak > 0 and streak % 30 == 0)


def streak_message(streak: int) -> str:
    """Encouragement shown after a successful check-in."""

    if streak == 1:
        return "Great start! First day of your new habit!"
    if streak == 3:
        return "Awesome! 3 days in a row! Keep going!"
    if streak == 7:
        return "One week streak! You're doing amazing!"
    if streak == 14:
        return "Two weeks! You're building a strong habit!"
    if streak == 21:
        return "21 days! You've mastered this habit!"
    if streak == 30:
        return "30 days! Incredible dedication!"
    if streak > 30:
        return f"{streak} days! You're a habit champion!"
    return f"{streak} day streak! Keep it up!"


__all__ = ["MILESTONES", "compute_streak", "is_milestone", "longest_streak", "streak_message"]
