"""Habit repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ...models.habit import Habit, HabitCompletionStatus, HabitParticipant


class HabitRepository(Protocol):
    """Document-style store for habits and their shared-habit child rows."""

    def find_by_id(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID regardless of owner."""
        ...

    def find_owned(self, habit_id: int, user_id: int) -> Optional[Habit]:
        """Retrieve a habit only when ``user_id`` owns it."""
        ...

    def find_many(
        self,
        user_id: int,
        *,
        kind: Optional[str] = None,
        exclude_statuses: Sequence[str] = (),
    ) -> list[Habit]:
        """List a user's habits, optionally filtered."""
        ...

    def find_touching_range(self, user_id: int, start: date, end: date) -> list[Habit]:
        """List habits with an occurrence or completion inside ``[start, end]``."""
        ...

    def find_with_reminder_on(self, day: date) -> list[Habit]:
        """Active or done-today habits of every user with a reminder on ``day``."""
        ...

    def save(self, habit: Habit) -> Habit:
        """Insert or update a habit."""
        ...

    def delete_by_id(self, habit_id: int) -> None:
        """Delete a habit along with its participant and completion rows."""
        ...

    # Shared habit helpers
    def find_copies(self, shared_habit_id: int) -> list[Habit]:
        """Participant copies of a canonical shared habit."""
        ...

    def find_shared_for_user(self, user_id: int) -> list[Habit]:
        """Shared habits the user owns plus requests still awaiting their answer."""
        ...

    def has_pending_request(self, owner_id: int, recipient_id: int, name: str) -> bool:
        """True when an identical request is still awaiting an answer."""
        ...

    def list_participants(self, habit_id: int) -> list[HabitParticipant]:
        ...

    def get_participant(self, habit_id: int, user_id: int) -> Optional[HabitParticipant]:
        ...

    def save_participant(self, participant: HabitParticipant) -> HabitParticipant:
        ...

    def list_completion_status(self, habit_id: int) -> list[HabitCompletionStatus]:
        ...

    def set_completion_status(
        self, habit_id: int, user_id: int, occurred_on: date, status: Optional[str]
    ) -> None:
        """Upsert the status for a participant-day; ``None`` removes it."""
        ...
