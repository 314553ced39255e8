"""SQLModel implementation of Distraction repository."""

from __future__ import annotations

from datetime import date
from typing import Optional

from sqlmodel import col, select

from ...models.distraction import Distraction
from ...models.types import utcnow
from ..database import SessionFactory


class SQLModelDistractionRepository:
    """SQLModel-based distraction repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, distraction_id: int, *, user_id: int) -> Optional[Distraction]:
        with self.session_factory() as session:
            obj = session.exec(
                select(Distraction).where(
                    Distraction.id == distraction_id, Distraction.user_id == user_id
                )
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_for_user(
        self, user_id: int, *, since: Optional[date] = None, until: Optional[date] = None
    ) -> list[Distraction]:
        """Newest first, optionally bounded by calendar day."""
        with self.session_factory() as session:
            statement = select(Distraction).where(Distraction.user_id == user_id)
            if since is not None:
                statement = statement.where(Distraction.occurred_on >= since)
            if until is not None:
                statement = statement.where(Distraction.occurred_on <= until)
            statement = statement.order_by(
                col(Distraction.occurred_at).desc(), col(Distraction.id).desc()
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def save(self, distraction: Distraction) -> Distraction:
        with self.session_factory() as session:
            distraction.updated_at = utcnow()
            session.add(distraction)
            session.commit()
            session.refresh(distraction)
            session.expunge(distraction)
            return distraction

    def delete(self, distraction_id: int, *, user_id: int) -> bool:
        with self.session_factory() as session:
            obj = session.exec(
                select(Distraction).where(
                    Distraction.id == distraction_id, Distraction.user_id == user_id
                )
            ).first()
            if obj is None:
                return False
            session.delete(obj)
            session.commit()
            return True
