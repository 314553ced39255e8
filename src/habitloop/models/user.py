"""User model supporting identity and credentials."""

from __future__ import annotations

from datetime import datetime
from typing import ClassVar, Optional

from sqlmodel import Field, SQLModel

from .types import utcnow


class User(SQLModel, table=True):
    """Application user; habits, notifications and logs hang off this id."""

    __tablename__: ClassVar[str] = "user"

    id: Optional[int] = Field(default=None, primary_key=True)
    username: str = Field(nullable=False, unique=True, index=True, max_length=64)
    display_name: str = Field(default="", max_length=120)
    password_hash: str = Field(nullable=False, max_length=255)
    created_at: datetime = Field(default_factory=utcnow, nullable=False)
    last_login: Optional[datetime] = Field(default=None)

    @property
    def label(self) -> str:
        return self.display_name or self.username
