"""Habit request forms."""

from __future__ import annotations

from typing import Optional, Union

from pydantic import Field, field_validator

from ..forms import RequestForm


class HabitScheduleForm(RequestForm):
    """Schedule fields shared by create and update requests.

    Dates stay strings here; the schedule layer parses them so every entry
    point reports the same date errors.
    """

    description: Optional[str] = Field(default=None, max_length=500)
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    repeat: Optional[str] = None
    repeat_days: Optional[list[str]] = None
    frequency: Optional[Union[int, str]] = None
    repeat_count: Optional[int] = None
    selected_monthly_dates: Optional[list[Union[int, str]]] = None
    reminder_offsets: Optional[list[int]] = None


class HabitCreateForm(HabitScheduleForm):
    name: str = Field(max_length=120)

    @field_validator("name")
    @classmethod
    def validate_name(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("Please provide a habit name.")
        return value


class HabitUpdateForm(HabitScheduleForm):
    name: Optional[str] = Field(default=None, max_length=120)
    status: Optional[str] = None


class TrackForm(RequestForm):
    date: Optional[str] = None
    completed: bool = True


class OccurrenceForm(RequestForm):
    date: str


__all__ = ["HabitCreateForm", "HabitScheduleForm", "HabitUpdateForm", "OccurrenceForm", "TrackForm"]
