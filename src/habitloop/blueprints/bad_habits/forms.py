"""Bad habit request forms."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from ..forms import RequestForm


class BadHabitForm(RequestForm):
    bad_habit: str = Field(min_length=1, max_length=200)
    good_habit: str = Field(min_length=1, max_length=200)


class BadHabitUpdateForm(RequestForm):
    bad_habit: Optional[str] = Field(default=None, max_length=200)
    good_habit: Optional[str] = Field(default=None, max_length=200)


__all__ = ["BadHabitForm", "BadHabitUpdateForm"]
