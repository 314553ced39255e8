"""Logged distractions with category and severity."""

from __future__ import annotations

from datetime import date, datetime
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from .types import utcnow

DISTRACTION_CATEGORIES = (
    "Social Media",
    "Environment",
    "Health",
    "Mood",
    "Lack of Time",
    "Other",
)


class Distraction(SQLModel, table=True):
    """A single distraction the user noticed."""

    __tablename__: ClassVar[str] = "distraction"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    category: str = Field(nullable=False, max_length=32, index=True)
    description: str = Field(default="", max_length=500)
    severity: int = Field(nullable=False)
    occurred_at: datetime = Field(default_factory=utcnow, nullable=False)
    # Local calendar day of ``occurred_at``; timeframes and trends group on it.
    occurred_on: date = Field(default_factory=date.today, nullable=False, index=True)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    updated_at: datetime = Field(default_factory=utcnow, nullable=False)
