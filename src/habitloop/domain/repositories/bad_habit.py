"""Bad habit repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol

from ...models.bad_habit import BadHabit


class BadHabitRepository(Protocol):
    """Repository for bad habit substitutions."""

    def get_by_id(self, bad_habit_id: int, *, user_id: int) -> Optional[BadHabit]:
        ...

    def list_for_user(self, user_id: int) -> list[BadHabit]:
        ...

    def save(self, bad_habit: BadHabit) -> BadHabit:
        ...

    def delete(self, bad_habit_id: int, *, user_id: int) -> bool:
        """Return False when nothing matched."""
        ...
