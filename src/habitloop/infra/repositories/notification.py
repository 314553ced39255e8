"""SQLModel implementation of Notification repository."""

from __future__ import annotations

from typing import Iterable, Optional

from sqlmodel import col, select

from ...models.notification import Notification
from ..database import SessionFactory


class SQLModelNotificationRepository:
    """SQLModel-based notification repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def create(self, notification: Notification) -> Notification:
        """Persist a new notification."""
        with self.session_factory() as session:
            session.add(notification)
            session.commit()
            session.refresh(notification)
            session.expunge(notification)
            return notification

    def get(self, notification_id: int, *, recipient_id: int) -> Optional[Notification]:
        with self.session_factory() as session:
            obj = session.exec(
                select(Notification).where(
                    Notification.id == notification_id,
                    Notification.recipient_id == recipient_id,
                )
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_for_recipient(
        self, recipient_id: int, *, status: Optional[str] = None, limit: Optional[int] = None
    ) -> list[Notification]:
        """Newest first."""
        with self.session_factory() as session:
            statement = select(Notification).where(Notification.recipient_id == recipient_id)
            if status is not None:
                statement = statement.where(Notification.status == status)
            statement = statement.order_by(
                col(Notification.created_at).desc(), col(Notification.id).desc()
            )
            if limit is not None:
                statement = statement.limit(limit)
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def mark_read(self, notification_id: int, *, recipient_id: int) -> Optional[Notification]:
        with self.session_factory() as session:
            obj = session.exec(
                select(Notification).where(
                    Notification.id == notification_id,
                    Notification.recipient_id == recipient_id,
                )
            ).first()
            if obj is None:
                return None
            obj.status = "read"
            session.add(obj)
            session.commit()
            session.refresh(obj)
            session.expunge(obj)
            return obj

    def mark_all_read(self, recipient_id: int) -> int:
        """Return the number of notifications flipped to read."""
        with self.session_factory() as session:
            rows = list(
                session.exec(
                    select(Notification)
                    .where(Notification.recipient_id == recipient_id)
                    .where(Notification.status == "unread")
                ).all()
            )
            for row in rows:
                row.status = "read"
                session.add(row)
            session.commit()
            return len(rows)

    def mark_delivered(self, notification_ids: Iterable[int]) -> None:
        ids = list(notification_ids)
        if not ids:
            return
        with self.session_factory() as session:
            rows = session.exec(select(Notification).where(col(Notification.id).in_(ids))).all()
            for row in rows:
                row.delivered = True
                session.add(row)
            session.commit()
