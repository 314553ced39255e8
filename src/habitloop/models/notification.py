"""Persisted user notifications."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, ClassVar, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field, SQLModel

from .types import utcnow


class NotificationType(str, Enum):
    HABIT_SHARED = "habit_shared"
    HABIT_SHARED_ACCEPTED = "habit_shared_accepted"
    HABIT_SHARED_REJECTED = "habit_shared_rejected"
    HABIT_LEFT = "habit_left"
    HABIT_REMINDER = "habit_reminder"
    STREAK_MILESTONE = "streak_milestone"
    SYSTEM = "system"


class Notification(SQLModel, table=True):
    """A message for one recipient; ``delivered`` flips once pushed live."""

    __tablename__: ClassVar[str] = "notification"

    id: Optional[int] = Field(default=None, primary_key=True)
    recipient_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    sender_id: Optional[int] = Field(default=None, foreign_key="user.id")
    type: str = Field(nullable=False, max_length=32, index=True)
    message: str = Field(nullable=False, max_length=500)
    # Plain id: the habit may be deleted while the notification stays readable.
    related_habit_id: Optional[int] = Field(default=None, index=True)
    payload: dict[str, Any] = Field(default_factory=dict, sa_column=Column(JSON, nullable=False))
    status: str = Field(default="unread", max_length=8, index=True)
    is_actionable: bool = Field(default=False, nullable=False)
    delivered: bool = Field(default=False, nullable=False)
    created_at: datetime = Field(default_factory=utcnow, nullable=False, index=True)
