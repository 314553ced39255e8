"""Shared habits: request, answer, track together, leave.

The owner keeps the canonical habit; every participant who accepts gets a
copy pointing back at it through ``shared_habit_id``. Per-participant daily
progress lives on the canonical habit as ``HabitCompletionStatus`` rows.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping, Optional

from sqlmodel import select

from ..domain.repositories.habit import HabitRepository
from ..domain.repositories.user import UserRepository
from ..errors import (
    ConflictError,
    FutureDateError,
    NotFoundError,
    PermissionDeniedError,
    RequestValidationError,
)
from ..infra.database import SessionFactory
from ..logging_config import get_logger
from ..models.habit import (
    CompletionState,
    Habit,
    HabitKind,
    HabitParticipant,
    HabitStatus,
    ParticipantStatus,
)
from ..models.notification import Notification, NotificationType
from ..models.types import utcnow
from ..models.user import User
from .dates import format_calendar_date, parse_calendar_date
from .dates import today as local_today
from .habits import HabitService, build_habit, habit_to_dict, refresh_streaks
from .notifications import Notifier
from .streaks import compute_streak
from .users import require_user

__all__ = ["ParticipantProgress", "SharedHabitService", "SharedHabitView", "SharedProgress"]

logger = get_logger("shared_habits")


@dataclass(slots=True, frozen=True)
class SharedHabitView:
    habit: Habit
    relation: str  # "sent" or "received"
    other_user_id: Optional[int]
    other_user_name: str
    participants: list[HabitParticipant] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        payload = habit_to_dict(self.habit)
        payload.update(
            {
                "relation": self.relation,
                "other_user_id": self.other_user_id,
                "other_user_name": self.other_user_name,
                "participants": [
                    {"user_id": p.user_id, "status": p.status} for p in self.participants
                ],
            }
        )
        return payload


@dataclass(slots=True, frozen=True)
class ParticipantProgress:
    user_id: int
    name: str
    role: str  # "owner" or "participant"
    status: str
    completed_dates: list[date]
    streak: int
    is_you: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "user_id": self.user_id,
            "name": self.name,
            "role": self.role,
            "status": self.status,
            "completed_dates": [format_calendar_date(d) for d in self.completed_dates],
            "streak": self.streak,
            "is_you": self.is_you,
        }


@dataclass(slots=True, frozen=True)
class SharedProgress:
    """Progress of every member of a shared habit, keyed by user id."""

    habit: Habit
    members: dict[int, ParticipantProgress]

    def to_dict(self) -> dict[str, Any]:
        return {
            "habit": {
                "id": self.habit.id,
                "name": self.habit.name,
                "description": self.habit.description,
            },
            "members": {str(user_id): p.to_dict() for user_id, p in self.members.items()},
        }


@dataclass(slots=True)
class _Membership:
    canonical: Habit
    own: Optional[Habit]
    is_owner: bool


class SharedHabitService:
    def __init__(
        self,
        repository: HabitRepository,
        users: UserRepository,
        notifier: Notifier,
        session_factory: SessionFactory,
        habits: Optional[HabitService] = None,
    ) -> None:
        self.repository = repository
        self.users = users
        self.notifier = notifier
        self.session_factory = session_factory
        self.habits = habits or HabitService(repository, notifier)

    # Helpers
    def _user(self, user_id: int, message: str = "User not found") -> User:
        return require_user(user_id, self.users, message)

    def _membership(self, habit_id: int, user_id: int) -> _Membership:
        """Resolve the canonical habit and the caller's own copy of it.

        Accepts either the canonical id or a participant copy id. Only the
        owner and accepted participants get through.
        """

        habit = self.repository.find_by_id(habit_id)
        if habit is None or habit.kind != HabitKind.SHARED.value:
            raise NotFoundError("Shared habit not found")

        canonical = habit
        if habit.shared_habit_id is not None:
            canonical = self.repository.find_by_id(habit.shared_habit_id)
            if canonical is None:
                raise NotFoundError("Shared habit not found")

        if canonical.user_id == user_id:
            return _Membership(canonical=canonical, own=canonical, is_owner=True)

        participant = self.repository.get_participant(canonical.id, user_id)
        if participant is None or participant.status != ParticipantStatus.ACCEPTED.value:
            raise PermissionDeniedError("Not authorized to access this shared habit")
        own = next(
            (copy for copy in self.repository.find_copies(canonical.id) if copy.user_id == user_id),
            None,
        )
        return _Membership(canonical=canonical, own=own, is_owner=False)

    # Request lifecycle
    def request(
        self,
        owner_id: int,
        recipient_id: int,
        data: Mapping[str, Any],
        *,
        today: Optional[date] = None,
    ) -> Habit:
        """Create a pending shared habit and notify the recipient."""

        if recipient_id == owner_id:
            raise RequestValidationError("Cannot share habit with yourself")
        recipient = self._user(recipient_id, "Recipient user not found")
        owner = self._user(owner_id)
        name = str(data.get("name") or "").strip()
        if self.repository.has_pending_request(owner_id, recipient_id, name):
            raise ConflictError(
                "You already have a pending shared habit request with this user for the same habit"
            )

        habit = build_habit(
            owner_id,
            data,
            kind=HabitKind.SHARED,
            status=HabitStatus.PENDING,
            today=today or local_today(),
        )
        with self.session_factory() as session:
            session.add(habit)
            session.flush()
            session.add(HabitParticipant(habit_id=habit.id, user_id=recipient.id))
            notification = self.notifier.stage(
                session,
                self.notifier.build(
                    recipient.id,
                    NotificationType.HABIT_SHARED,
                    {"habit_name": habit.name, "sender_name": owner.label},
                    message=f"{owner.label} wants to share a habit with you: {habit.name}",
                    sender_id=owner.id,
                    habit_id=habit.id,
                    is_actionable=True,
                ),
            )
            session.commit()
            session.expunge_all()

        self.notifier.push(notification)
        logger.info(
            "Shared habit requested",
            extra={"habit_id": habit.id, "owner_id": owner_id, "recipient_id": recipient_id},
        )
        return habit

    def accept(self, habit_id: int, user_id: int) -> Habit:
        """Accept a pending request; returns the participant's new copy.

        Updating the canonical habit, creating the copy and writing the
        owner's notification commit together or not at all.
        """

        with self.session_factory() as session:
            canonical = session.get(Habit, habit_id)
            if canonical is None:
                raise NotFoundError("Habit request not found or already processed")
            if (
                canonical.kind != HabitKind.SHARED.value
                or canonical.status != HabitStatus.PENDING.value
            ):
                raise ConflictError("This is not a pending shared habit request.")

            participant = session.exec(
                select(HabitParticipant).where(
                    HabitParticipant.habit_id == habit_id, HabitParticipant.user_id == user_id
                )
            ).first()
            if participant is None or participant.status != ParticipantStatus.PENDING.value:
                raise PermissionDeniedError(
                    "No pending habit request found for this user or already accepted/rejected."
                )
            accepting = session.get(User, user_id)
            if accepting is None:
                raise NotFoundError("Accepting user not found")

            now = utcnow()
            participant.status = ParticipantStatus.ACCEPTED.value
            participant.accepted_at = now
            canonical.status = HabitStatus.ACTIVE.value
            canonical.updated_at = now
            session.add(participant)
            session.add(canonical)

            copy = Habit(
                user_id=user_id,
                name=canonical.name,
                description=canonical.description,
                kind=HabitKind.SHARED.value,
                status=HabitStatus.ACTIVE.value,
                start_date=canonical.start_date,
                end_date=canonical.end_date,
                repeat=canonical.repeat,
                repeat_days=list(canonical.repeat_days),
                frequency=canonical.frequency,
                repeat_count=canonical.repeat_count,
                selected_monthly_dates=list(canonical.selected_monthly_dates),
                reminder_offsets=list(canonical.reminder_offsets),
                repeat_dates=list(canonical.repeat_dates),
                reminders=list(canonical.reminders),
                shared_habit_id=canonical.id,
            )
            session.add(copy)
            notification = self.notifier.stage(
                session,
                self.notifier.build(
                    canonical.user_id,
                    NotificationType.HABIT_SHARED_ACCEPTED,
                    {"habit_name": canonical.name, "acceptor_name": accepting.label},
                    message=f"{accepting.label} accepted your shared habit: {canonical.name}",
                    sender_id=user_id,
                    habit_id=canonical.id,
                ),
            )
            session.commit()
            session.refresh(copy)
            session.expunge_all()

        self.notifier.push(notification)
        logger.info(
            "Shared habit accepted",
            extra={"habit_id": habit_id, "user_id": user_id, "copy_id": copy.id},
        )
        return copy

    def reject(self, habit_id: int, user_id: int) -> Habit:
        with self.session_factory() as session:
            canonical = session.get(Habit, habit_id)
            if canonical is None or canonical.kind != HabitKind.SHARED.value:
                raise NotFoundError("Habit not found")
            participant = session.exec(
                select(HabitParticipant).where(
                    HabitParticipant.habit_id == habit_id, HabitParticipant.user_id == user_id
                )
            ).first()
            if participant is None or participant.status != ParticipantStatus.PENDING.value:
                raise PermissionDeniedError("No pending habit request found for this user")
            rejecting = session.get(User, user_id)
            if rejecting is None:
                raise NotFoundError("User not found")

            now = utcnow()
            participant.status = ParticipantStatus.REJECTED.value
            participant.rejected_at = now
            canonical.status = HabitStatus.REJECTED.value
            canonical.updated_at = now
            session.add(participant)
            session.add(canonical)
            notification = self.notifier.stage(
                session,
                self.notifier.build(
                    canonical.user_id,
                    NotificationType.HABIT_SHARED_REJECTED,
                    {"habit_name": canonical.name, "rejector_name": rejecting.label},
                    message=f"{rejecting.label} rejected your shared habit: {canonical.name}",
                    sender_id=user_id,
                    habit_id=canonical.id,
                ),
            )
            session.commit()
            session.expunge_all()

        self.notifier.push(notification)
        logger.info("Shared habit rejected", extra={"habit_id": habit_id, "user_id": user_id})
        return canonical

    # Queries
    def list_for_user(self, user_id: int) -> list[SharedHabitView]:
        views: list[SharedHabitView] = []
        for habit in self.repository.find_shared_for_user(user_id):
            participants = self.repository.list_participants(habit.id)
            if habit.user_id != user_id:
                owner = self.users.get_by_id(habit.user_id)
                views.append(
                    SharedHabitView(
                        habit=habit,
                        relation="received",
                        other_user_id=habit.user_id,
                        other_user_name=owner.label if owner else "Unknown Sender",
                        participants=participants,
                    )
                )
            elif habit.shared_habit_id is not None:
                canonical = self.repository.find_by_id(habit.shared_habit_id)
                owner = self.users.get_by_id(canonical.user_id) if canonical else None
                views.append(
                    SharedHabitView(
                        habit=habit,
                        relation="received",
                        other_user_id=owner.id if owner else None,
                        other_user_name=owner.label if owner else "Original Sender Unknown",
                    )
                )
            else:
                other = next(
                    (p for p in participants if p.status == ParticipantStatus.ACCEPTED.value),
                    participants[0] if participants else None,
                )
                name = "No Recipient Yet"
                if other is not None:
                    other_user = self.users.get_by_id(other.user_id)
                    name = other_user.label if other_user else "Unknown"
                    if other.status == ParticipantStatus.PENDING.value:
                        name += " (Pending)"
                views.append(
                    SharedHabitView(
                        habit=habit,
                        relation="sent",
                        other_user_id=other.user_id if other else None,
                        other_user_name=name,
                        participants=participants,
                    )
                )
        return views

    def progress(self, habit_id: int, user_id: int) -> SharedProgress:
        membership = self._membership(habit_id, user_id)
        canonical = membership.canonical
        statuses = self.repository.list_completion_status(canonical.id)
        completed: dict[int, list[date]] = {}
        for row in statuses:
            if row.status == CompletionState.COMPLETE.value:
                completed.setdefault(row.user_id, []).append(row.occurred_on)

        def _member(member_id: int, role: str, status: str) -> ParticipantProgress:
            user = self.users.get_by_id(member_id)
            days = sorted(completed.get(member_id, []))
            return ParticipantProgress(
                user_id=member_id,
                name=user.label if user else "Unknown",
                role=role,
                status=status,
                completed_dates=days,
                streak=compute_streak(days),
                is_you=member_id == user_id,
            )

        members = {canonical.user_id: _member(canonical.user_id, "owner", "owner")}
        for participant in self.repository.list_participants(canonical.id):
            if participant.status == ParticipantStatus.ACCEPTED.value:
                members[participant.user_id] = _member(
                    participant.user_id, "participant", participant.status
                )
        return SharedProgress(habit=canonical, members=members)

    # Mutations
    def track(
        self,
        habit_id: int,
        user_id: int,
        completed: bool = True,
        target_date: object = None,
        *,
        today: Optional[date] = None,
    ) -> Habit:
        """Record the caller's completion for a day; returns the caller's own habit."""

        current = today or local_today()
        target = current if target_date is None else parse_calendar_date(target_date)
        if target > current:
            raise FutureDateError("Cannot track a habit for a future date.")

        membership = self._membership(habit_id, user_id)
        self.repository.set_completion_status(
            membership.canonical.id,
            user_id,
            target,
            CompletionState.COMPLETE.value if completed else None,
        )

        own = membership.own
        if own is None:
            return membership.canonical
        completions = set(own.completion_dates)
        if completed:
            completions.add(target)
        else:
            completions.discard(target)
        own.completion_dates = sorted(completions)
        refresh_streaks(own, current)
        own = self.repository.save(own)
        logger.info(
            "Shared habit tracked",
            extra={
                "habit_id": membership.canonical.id,
                "user_id": user_id,
                "date": format_calendar_date(target),
                "completed": completed,
            },
        )
        return own

    def update(
        self,
        habit_id: int,
        user_id: int,
        changes: Mapping[str, Any],
        *,
        today: Optional[date] = None,
    ) -> Habit:
        """Apply changes to the canonical habit and every participant copy."""

        current = today or local_today()
        membership = self._membership(habit_id, user_id)
        updated = self.habits.apply_changes(membership.canonical, changes, today=current)
        result = updated if membership.is_owner else None
        for copy in self.repository.find_copies(updated.id):
            saved = self.habits.apply_changes(copy, changes, today=current)
            if copy.user_id == user_id:
                result = saved
        logger.info(
            "Shared habit updated",
            extra={"habit_id": updated.id, "user_id": user_id, "fields": sorted(changes)},
        )
        return result or updated

    def delete(self, habit_id: int, user_id: int) -> str:
        """Owner deletes for everyone; a participant only leaves.

        Returns ``"deleted"`` or ``"left"``.
        """

        membership = self._membership(habit_id, user_id)
        canonical = membership.canonical
        actor = self._user(user_id)

        if membership.is_owner:
            for copy in self.repository.find_copies(canonical.id):
                self.repository.delete_by_id(copy.id)
                self.notifier.notify(
                    copy.user_id,
                    NotificationType.HABIT_LEFT,
                    {"habit_name": canonical.name},
                    message=f"{actor.label} deleted the shared habit: {canonical.name}",
                    sender_id=user_id,
                )
            self.repository.delete_by_id(canonical.id)
            logger.info(
                "Shared habit deleted", extra={"habit_id": canonical.id, "user_id": user_id}
            )
            return "deleted"

        participant = self.repository.get_participant(canonical.id, user_id)
        participant.status = ParticipantStatus.LEFT.value
        participant.left_at = utcnow()
        self.repository.save_participant(participant)
        if membership.own is not None:
            self.repository.delete_by_id(membership.own.id)
        self.notifier.notify(
            canonical.user_id,
            NotificationType.HABIT_LEFT,
            {"habit_name": canonical.name},
            message=f"{actor.label} left the shared habit: {canonical.name}",
            sender_id=user_id,
            habit_id=canonical.id,
        )
        logger.info("Shared habit left", extra={"habit_id": canonical.id, "user_id": user_id})
        return "left"
