"""Shared habit request forms."""

from __future__ import annotations

from typing import Optional

from pydantic import Field

from ..forms import RequestForm
from ..habits.forms import HabitCreateForm


class ShareRequestForm(HabitCreateForm):
    recipient_id: int = Field(gt=0)


class SharedTrackForm(RequestForm):
    date: Optional[str] = None
    completed: bool = True


__all__ = ["ShareRequestForm", "SharedTrackForm"]
