"""Habit tracking data structures."""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel

from .types import CalendarDateList, utcnow


class HabitKind(str, Enum):
    PERSONAL = "personal"
    SHARED = "shared"


class HabitStatus(str, Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    COMPLETED = "completed"
    # Shared habits only: awaiting the recipient's answer, or turned down.
    PENDING = "pending"
    REJECTED = "rejected"


class ParticipantStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    LEFT = "left"


class CompletionState(str, Enum):
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"
    SKIPPED = "skipped"


class Habit(SQLModel, table=True):
    """A habit with its schedule definition and the materialized occurrences.

    ``repeat_dates`` and ``reminders`` are derived from the schedule fields and
    regenerated whenever one of them changes; ``streak`` is derived from
    ``completion_dates``.
    """

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=120, index=True)
    description: str = Field(default="", max_length=500)
    kind: str = Field(default=HabitKind.PERSONAL.value, max_length=16, index=True)
    status: str = Field(default=HabitStatus.ACTIVE.value, max_length=16, index=True)

    start_date: date = Field(nullable=False)
    end_date: Optional[date] = Field(default=None)
    repeat: str = Field(default="none", max_length=16)
    repeat_days: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    frequency: int = Field(default=1, nullable=False)
    repeat_count: Optional[int] = Field(default=None)
    selected_monthly_dates: list[Any] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )
    reminder_offsets: list[int] = Field(
        default_factory=list, sa_column=Column(JSON, nullable=False)
    )

    repeat_dates: list[date] = Field(
        default_factory=list, sa_column=Column(CalendarDateList, nullable=False)
    )
    reminders: list[date] = Field(
        default_factory=list, sa_column=Column(CalendarDateList, nullable=False)
    )
    completion_dates: list[date] = Field(
        default_factory=list, sa_column=Column(CalendarDateList, nullable=False)
    )
    streak: int = Field(default=0, nullable=False)
    longest_streak: int = Field(default=0, nullable=False)
    last_completed: Optional[date] = Field(default=None)

    # Participant copies point back at the canonical shared habit.
    shared_habit_id: Optional[int] = Field(default=None, foreign_key="habit.id", index=True)

    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)

    @property
    def is_repeated(self) -> bool:
        return bool(self.repeat_dates)


class HabitParticipant(SQLModel, table=True):
    """A user a shared habit was offered to, with the answer lifecycle."""

    __tablename__: ClassVar[str] = "habit_participant"
    __table_args__ = (UniqueConstraint("habit_id", "user_id", name="uq_habit_participant"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    habit_id: int = Field(foreign_key="habit.id", nullable=False, index=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    status: str = Field(default=ParticipantStatus.PENDING.value, max_length=16)
    requested_at: datetime = Field(default_factory=utcnow, nullable=False)
    accepted_at: Optional[datetime] = Field(default=None)
    rejected_at: Optional[datetime] = Field(default=None)
    left_at: Optional[datetime] = Field(default=None)


class HabitCompletionStatus(SQLModel, table=True):
    """Per-participant, per-day completion of a shared habit."""

    __tablename__: ClassVar[str] = "habit_completion_status"
    __table_args__ = (
        UniqueConstraint("habit_id", "user_id", "occurred_on", name="uq_habit_completion_status"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    habit_id: int = Field(foreign_key="habit.id", nullable=False, index=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    occurred_on: date = Field(nullable=False, index=True)
    status: str = Field(default=CompletionState.COMPLETE.value, max_length=16)
