"""Notification repository protocol."""

from __future__ import annotations

from typing import Iterable, Optional, Protocol

from ...models.notification import Notification


class NotificationRepository(Protocol):
    """Repository for persisted notifications."""

    def create(self, notification: Notification) -> Notification:
        """Persist a new notification."""
        ...

    def get(self, notification_id: int, *, recipient_id: int) -> Optional[Notification]:
        ...

    def list_for_recipient(
        self, recipient_id: int, *, status: Optional[str] = None, limit: Optional[int] = None
    ) -> list[Notification]:
        """Newest first."""
        ...

    def mark_read(self, notification_id: int, *, recipient_id: int) -> Optional[Notification]:
        ...

    def mark_all_read(self, recipient_id: int) -> int:
        """Return the number of notifications flipped to read."""
        ...

    def mark_delivered(self, notification_ids: Iterable[int]) -> None:
        ...
