"""Distraction repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ...models.distraction import Distraction


class DistractionRepository(Protocol):
    """Repository for logged distractions."""

    def get_by_id(self, distraction_id: int, *, user_id: int) -> Optional[Distraction]:
        ...

    def list_for_user(
        self, user_id: int, *, since: Optional[date] = None, until: Optional[date] = None
    ) -> list[Distraction]:
        """Newest first, optionally bounded by calendar day."""
        ...

    def save(self, distraction: Distraction) -> Distraction:
        ...

    def delete(self, distraction_id: int, *, user_id: int) -> bool:
        ...
