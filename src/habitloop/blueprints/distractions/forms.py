"""Distraction request forms."""

from __future__ import annotations

from typing import Annotated, Literal, Optional

from pydantic import AfterValidator, Field

from ...models.distraction import DISTRACTION_CATEGORIES
from ...services.distractions import MAX_DESCRIPTION_LENGTH, MAX_SEVERITY, MIN_SEVERITY
from ..forms import RequestForm

Timeframe = Literal["day", "week", "month", "year"]


def _check_category(value: str) -> str:
    if value not in DISTRACTION_CATEGORIES:
        raise ValueError(f"Category must be one of: {', '.join(DISTRACTION_CATEGORIES)}")
    return value


Category = Annotated[str, AfterValidator(_check_category)]


class DistractionForm(RequestForm):
    category: Category
    severity: int = Field(ge=MIN_SEVERITY, le=MAX_SEVERITY)
    description: Optional[str] = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)


class DistractionUpdateForm(RequestForm):
    category: Optional[Category] = None
    severity: Optional[int] = Field(default=None, ge=MIN_SEVERITY, le=MAX_SEVERITY)
    description: Optional[str] = Field(default=None, max_length=MAX_DESCRIPTION_LENGTH)


class TimeframeQuery(RequestForm):
    timeframe: Optional[Timeframe] = None


__all__ = ["DistractionForm", "DistractionUpdateForm", "TimeframeQuery"]
