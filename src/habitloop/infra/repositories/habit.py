"""SQLModel implementation of Habit repository."""

from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from sqlalchemy import delete, or_
from sqlmodel import col, select

from ...models.habit import (
    Habit,
    HabitCompletionStatus,
    HabitKind,
    HabitParticipant,
    HabitStatus,
    ParticipantStatus,
)
from ...models.types import utcnow
from ..database import SessionFactory


def _touches(days: Sequence[date], start: date, end: date) -> bool:
    return any(start <= day <= end for day in days)


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def find_by_id(self, habit_id: int) -> Optional[Habit]:
        """Retrieve a habit by ID regardless of owner."""
        with self.session_factory() as session:
            obj = session.get(Habit, habit_id)
            if obj:
                session.expunge(obj)
            return obj

    def find_owned(self, habit_id: int, user_id: int) -> Optional[Habit]:
        """Retrieve a habit only when ``user_id`` owns it."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def find_many(
        self,
        user_id: int,
        *,
        kind: Optional[str] = None,
        exclude_statuses: Sequence[str] = (),
    ) -> list[Habit]:
        """List a user's habits, optionally filtered by kind and status."""
        with self.session_factory() as session:
            statement = select(Habit).where(Habit.user_id == user_id)
            if kind is not None:
                statement = statement.where(Habit.kind == kind)
            if exclude_statuses:
                statement = statement.where(col(Habit.status).not_in(list(exclude_statuses)))
            statement = statement.order_by(Habit.start_date, Habit.id)  # type: ignore[arg-type]
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def find_touching_range(self, user_id: int, start: date, end: date) -> list[Habit]:
        """List habits with an occurrence or completion inside ``[start, end]``.

        Date lists live in JSON columns, so the range test runs in Python over
        the owner's habits.
        """
        habits = self.find_many(user_id)
        return [
            habit
            for habit in habits
            if _touches(habit.repeat_dates, start, end)
            or _touches(habit.completion_dates, start, end)
        ]

    def find_with_reminder_on(self, day: date) -> list[Habit]:
        """Active or done-today habits of every user with a reminder on ``day``."""
        with self.session_factory() as session:
            statement = (
                select(Habit)
                .where(
                    col(Habit.status).in_(
                        [HabitStatus.ACTIVE.value, HabitStatus.COMPLETED.value]
                    )
                )
                .order_by(Habit.user_id, Habit.id)  # type: ignore[arg-type]
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
        return [habit for habit in rows if day in habit.reminders]

    def save(self, habit: Habit) -> Habit:
        """Insert or update a habit."""
        with self.session_factory() as session:
            habit.updated_at = utcnow()
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit

    def delete_by_id(self, habit_id: int) -> None:
        """Delete a habit along with its participant and completion rows."""
        with self.session_factory() as session:
            session.execute(delete(HabitParticipant).where(col(HabitParticipant.habit_id) == habit_id))
            session.execute(
                delete(HabitCompletionStatus).where(col(HabitCompletionStatus.habit_id) == habit_id)
            )
            habit = session.get(Habit, habit_id)
            if habit:
                session.delete(habit)
            session.commit()

    # Shared habit helpers
    def find_copies(self, shared_habit_id: int) -> list[Habit]:
        """Participant copies of a canonical shared habit."""
        with self.session_factory() as session:
            rows = list(
                session.exec(select(Habit).where(Habit.shared_habit_id == shared_habit_id)).all()
            )
            session.expunge_all()
            return rows

    def find_shared_for_user(self, user_id: int) -> list[Habit]:
        """Shared habits the user owns plus requests still awaiting their answer, newest first."""
        with self.session_factory() as session:
            offered = select(HabitParticipant.habit_id).where(
                HabitParticipant.user_id == user_id,
                HabitParticipant.status == ParticipantStatus.PENDING.value,
            )
            statement = (
                select(Habit)
                .where(Habit.kind == HabitKind.SHARED.value)
                .where(Habit.status != HabitStatus.REJECTED.value)
                .where(or_(Habit.user_id == user_id, col(Habit.id).in_(offered)))
                .order_by(col(Habit.created_at).desc(), col(Habit.id).desc())
            )
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def has_pending_request(self, owner_id: int, recipient_id: int, name: str) -> bool:
        """True when an identical request is still awaiting an answer."""
        with self.session_factory() as session:
            statement = (
                select(Habit.id)
                .join(HabitParticipant, HabitParticipant.habit_id == Habit.id)
                .where(Habit.user_id == owner_id)
                .where(Habit.kind == HabitKind.SHARED.value)
                .where(Habit.status == HabitStatus.PENDING.value)
                .where(Habit.name == name)
                .where(HabitParticipant.user_id == recipient_id)
                .where(HabitParticipant.status == ParticipantStatus.PENDING.value)
            )
            return session.exec(statement).first() is not None

    def list_participants(self, habit_id: int) -> list[HabitParticipant]:
        with self.session_factory() as session:
            rows = list(
                session.exec(
                    select(HabitParticipant)
                    .where(HabitParticipant.habit_id == habit_id)
                    .order_by(HabitParticipant.requested_at, HabitParticipant.id)  # type: ignore[arg-type]
                ).all()
            )
            session.expunge_all()
            return rows

    def get_participant(self, habit_id: int, user_id: int) -> Optional[HabitParticipant]:
        with self.session_factory() as session:
            obj = session.exec(
                select(HabitParticipant).where(
                    HabitParticipant.habit_id == habit_id, HabitParticipant.user_id == user_id
                )
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def save_participant(self, participant: HabitParticipant) -> HabitParticipant:
        with self.session_factory() as session:
            session.add(participant)
            session.commit()
            session.refresh(participant)
            session.expunge(participant)
            return participant

    def list_completion_status(self, habit_id: int) -> list[HabitCompletionStatus]:
        with self.session_factory() as session:
            rows = list(
                session.exec(
                    select(HabitCompletionStatus)
                    .where(HabitCompletionStatus.habit_id == habit_id)
                    .order_by(HabitCompletionStatus.occurred_on, HabitCompletionStatus.user_id)  # type: ignore[arg-type]
                ).all()
            )
            session.expunge_all()
            return rows

    def set_completion_status(
        self, habit_id: int, user_id: int, occurred_on: date, status: Optional[str]
    ) -> None:
        """Upsert the status for a participant-day; ``None`` removes it."""
        with self.session_factory() as session:
            existing = session.exec(
                select(HabitCompletionStatus)
                .where(HabitCompletionStatus.habit_id == habit_id)
                .where(HabitCompletionStatus.user_id == user_id)
                .where(HabitCompletionStatus.occurred_on == occurred_on)
            ).first()

            if status is None:
                if existing:
                    session.delete(existing)
            elif existing:
                existing.status = status
                session.add(existing)
            else:
                session.add(
                    HabitCompletionStatus(
                        habit_id=habit_id, user_id=user_id, occurred_on=occurred_on, status=status
                    )
                )
            session.commit()
