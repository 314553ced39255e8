"""Notification persistence plus real-time push to connected users."""

from __future__ import annotations

from typing import Any, Mapping, Optional

from sqlmodel import Session

from ..domain.repositories.notification import NotificationRepository
from ..errors import NotFoundError
from ..logging_config import get_logger
from ..models.notification import Notification, NotificationType
from .connections import ConnectionDirectory

__all__ = ["Notifier", "notification_to_dict"]

logger = get_logger("notifications")

NEW_NOTIFICATION_EVENT = "new_notification"


def notification_to_dict(notification: Notification) -> dict[str, Any]:
    return {
        "id": notification.id,
        "recipient_id": notification.recipient_id,
        "sender_id": notification.sender_id,
        "type": notification.type,
        "message": notification.message,
        "related_habit_id": notification.related_habit_id,
        "payload": dict(notification.payload or {}),
        "status": notification.status,
        "is_actionable": notification.is_actionable,
        "delivered": notification.delivered,
        "created_at": notification.created_at.isoformat() if notification.created_at else None,
    }


class Notifier:
    """Create notifications and push them when the recipient is online.

    Pushing is fire-and-forget: an offline recipient or a broken channel
    leaves the notification stored and undelivered.
    """

    def __init__(
        self,
        repository: NotificationRepository,
        connections: ConnectionDirectory,
        *,
        pending_limit: int = 20,
    ) -> None:
        self.repository = repository
        self.connections = connections
        self.pending_limit = pending_limit

    @staticmethod
    def build(
        recipient_id: int,
        type: NotificationType | str,
        payload: Optional[Mapping[str, Any]] = None,
        *,
        message: str,
        sender_id: Optional[int] = None,
        habit_id: Optional[int] = None,
        is_actionable: bool = False,
    ) -> Notification:
        return Notification(
            recipient_id=recipient_id,
            sender_id=sender_id,
            type=NotificationType(type).value,
            message=message,
            related_habit_id=habit_id,
            payload=dict(payload or {}),
            is_actionable=is_actionable,
        )

    def notify(
        self,
        recipient_id: int,
        type: NotificationType | str,
        payload: Optional[Mapping[str, Any]] = None,
        *,
        message: str,
        sender_id: Optional[int] = None,
        habit_id: Optional[int] = None,
        is_actionable: bool = False,
    ) -> Notification:
        """Persist a notification for ``recipient_id`` and push it if possible."""

        notification = self.repository.create(
            self.build(
                recipient_id,
                type,
                payload,
                message=message,
                sender_id=sender_id,
                habit_id=habit_id,
                is_actionable=is_actionable,
            )
        )
        logger.info(
            "Notification created",
            extra={
                "notification_id": notification.id,
                "recipient_id": recipient_id,
                "type": notification.type,
            },
        )
        self.push(notification)
        return notification

    def stage(self, session: Session, notification: Notification) -> Notification:
        """Add a notification to a caller-owned transaction.

        The caller pushes it with ``push`` once the transaction has committed.
        """

        session.add(notification)
        session.flush()
        return notification

    def push(self, notification: Notification) -> bool:
        event = {"event": NEW_NOTIFICATION_EVENT, "notification": notification_to_dict(notification)}
        if not self.connections.send(notification.recipient_id, event):
            return False
        if notification.id is not None:
            self.repository.mark_delivered([notification.id])
        notification.delivered = True
        return True

    def deliver_pending(self, user_id: int) -> int:
        """Push the newest unread notifications to a user who just connected."""

        pending = self.repository.list_for_recipient(
            user_id, status="unread", limit=self.pending_limit
        )
        delivered: list[int] = []
        for notification in pending:
            event = {
                "event": NEW_NOTIFICATION_EVENT,
                "notification": notification_to_dict(notification),
            }
            if not self.connections.send(user_id, event):
                break
            if notification.id is not None:
                delivered.append(notification.id)
        self.repository.mark_delivered(delivered)
        if delivered:
            logger.info(
                "Delivered pending notifications",
                extra={"user_id": user_id, "count": len(delivered)},
            )
        return len(delivered)

    def list_for_user(self, user_id: int, *, unread_only: bool = False) -> list[Notification]:
        return self.repository.list_for_recipient(
            user_id, status="unread" if unread_only else None
        )

    def mark_read(self, notification_id: int, user_id: int) -> Notification:
        notification = self.repository.mark_read(notification_id, recipient_id=user_id)
        if notification is None:
            raise NotFoundError("Notification not found")
        return notification

    def mark_all_read(self, user_id: int) -> int:
        return self.repository.mark_all_read(user_id)
