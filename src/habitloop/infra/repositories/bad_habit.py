"""SQLModel implementation of BadHabit repository."""

from __future__ import annotations

from typing import Optional

from sqlmodel import col, select

from ...models.bad_habit import BadHabit
from ...models.types import utcnow
from ..database import SessionFactory


class SQLModelBadHabitRepository:
    """SQLModel-based bad habit repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def get_by_id(self, bad_habit_id: int, *, user_id: int) -> Optional[BadHabit]:
        with self.session_factory() as session:
            obj = session.exec(
                select(BadHabit).where(BadHabit.id == bad_habit_id, BadHabit.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_for_user(self, user_id: int) -> list[BadHabit]:
        with self.session_factory() as session:
            rows = list(
                session.exec(
                    select(BadHabit)
                    .where(BadHabit.user_id == user_id)
                    .order_by(col(BadHabit.created_at), col(BadHabit.id))
                ).all()
            )
            session.expunge_all()
            return rows

    def save(self, bad_habit: BadHabit) -> BadHabit:
        with self.session_factory() as session:
            bad_habit.updated_at = utcnow()
            session.add(bad_habit)
            session.commit()
            session.refresh(bad_habit)
            session.expunge(bad_habit)
            return bad_habit

    def delete(self, bad_habit_id: int, *, user_id: int) -> bool:
        with self.session_factory() as session:
            obj = session.exec(
                select(BadHabit).where(BadHabit.id == bad_habit_id, BadHabit.user_id == user_id)
            ).first()
            if obj is None:
                return False
            session.delete(obj)
            session.commit()
            return True
