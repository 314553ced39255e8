"""Bad habit to good habit substitutions."""

from __future__ import annotations

from datetime import date, datetime
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from .types import utcnow


class BadHabit(SQLModel, table=True):
    """A bad habit the user replaces with a good one, tracked once per day."""

    __tablename__: ClassVar[str] = "bad_habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    bad_habit: str = Field(nullable=False, max_length=200)
    good_habit: str = Field(nullable=False, max_length=200)
    completed: bool = Field(default=False, nullable=False)
    streak: int = Field(default=0, nullable=False)
    last_completed: Optional[date] = Field(default=None)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)
