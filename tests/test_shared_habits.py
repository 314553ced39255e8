"""Tests for the shared habit lifecycle."""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from habitloop.errors import (
    ConflictError,
    FutureDateError,
    NotFoundError,
    PermissionDeniedError,
    RequestValidationError,
)
from habitloop.models import HabitKind, HabitStatus, NotificationType, ParticipantStatus

TODAY = date(2024, 1, 15)
RUN = {"name": "Run", "start_date": "2024-01-15", "repeat": "daily", "repeat_count": 3}


@pytest.fixture
def pending(shared_service, user, other_user):
    return shared_service.request(user.id, other_user.id, dict(RUN), today=TODAY)


@pytest.fixture
def accepted(shared_service, pending, other_user):
    copy = shared_service.accept(pending.id, other_user.id)
    return pending, copy


def _types(notification_repo, user_id):
    return [n.type for n in notification_repo.list_for_recipient(user_id)]


class TestRequest:
    def test_request_creates_pending_habit_and_notifies(
        self, pending, habit_repo, notification_repo, other_user
    ):
        assert pending.kind == HabitKind.SHARED.value
        assert pending.status == HabitStatus.PENDING.value
        assert len(pending.repeat_dates) == 3

        participants = habit_repo.list_participants(pending.id)
        assert [(p.user_id, p.status) for p in participants] == [
            (other_user.id, ParticipantStatus.PENDING.value)
        ]
        [notification] = notification_repo.list_for_recipient(other_user.id)
        assert notification.type == NotificationType.HABIT_SHARED.value
        assert notification.is_actionable
        assert notification.related_habit_id == pending.id

    def test_self_share_rejected(self, shared_service, user):
        with pytest.raises(RequestValidationError, match="yourself"):
            shared_service.request(user.id, user.id, dict(RUN), today=TODAY)

    def test_unknown_recipient(self, shared_service, user):
        with pytest.raises(NotFoundError, match="Recipient"):
            shared_service.request(user.id, 9999, dict(RUN), today=TODAY)

    def test_duplicate_pending_request(self, shared_service, pending, user, other_user):
        with pytest.raises(ConflictError):
            shared_service.request(user.id, other_user.id, dict(RUN), today=TODAY)

    def test_online_recipient_gets_push(self, shared_service, connections, user, other_user):
        received = []
        connections.register(other_user.id, received.append)
        shared_service.request(user.id, other_user.id, dict(RUN), today=TODAY)

        assert [event["event"] for event in received] == ["new_notification"]
        assert received[0]["notification"]["type"] == NotificationType.HABIT_SHARED.value


class TestAnswer:
    def test_accept_creates_copy(self, accepted, habit_repo, notification_repo, user, other_user):
        canonical, copy = accepted

        assert copy.user_id == other_user.id
        assert copy.shared_habit_id == canonical.id
        assert copy.repeat_dates == canonical.repeat_dates
        assert habit_repo.find_by_id(canonical.id).status == HabitStatus.ACTIVE.value
        participant = habit_repo.get_participant(canonical.id, other_user.id)
        assert participant.status == ParticipantStatus.ACCEPTED.value
        assert participant.accepted_at is not None
        assert _types(notification_repo, user.id) == [
            NotificationType.HABIT_SHARED_ACCEPTED.value
        ]

    def test_accept_twice_conflicts(self, shared_service, accepted, other_user):
        canonical, _ = accepted
        with pytest.raises(ConflictError):
            shared_service.accept(canonical.id, other_user.id)

    def test_stranger_cannot_accept(self, shared_service, pending, user_factory):
        stranger = user_factory("stranger")
        with pytest.raises(PermissionDeniedError):
            shared_service.accept(pending.id, stranger.id)

    def test_accept_rolls_back_when_notification_fails(
        self, shared_service, notifier, pending, habit_repo, notification_repo, user, other_user,
        monkeypatch,
    ):
        def _fail(session, notification):
            raise RuntimeError("notification store unavailable")

        monkeypatch.setattr(notifier, "stage", _fail)
        with pytest.raises(RuntimeError):
            shared_service.accept(pending.id, other_user.id)

        assert habit_repo.find_by_id(pending.id).status == HabitStatus.PENDING.value
        assert habit_repo.find_copies(pending.id) == []
        participant = habit_repo.get_participant(pending.id, other_user.id)
        assert participant.status == ParticipantStatus.PENDING.value
        assert _types(notification_repo, user.id) == []

    def test_reject(self, shared_service, pending, habit_repo, notification_repo, user, other_user):
        shared_service.reject(pending.id, other_user.id)

        assert habit_repo.find_by_id(pending.id).status == HabitStatus.REJECTED.value
        assert _types(notification_repo, user.id) == [
            NotificationType.HABIT_SHARED_REJECTED.value
        ]
        assert shared_service.list_for_user(other_user.id) == []


class TestListing:
    def test_pending_views(self, shared_service, pending, user, other_user):
        [sent] = shared_service.list_for_user(user.id)
        assert sent.relation == "sent"
        assert sent.other_user_name == "Friend (Pending)"

        [received] = shared_service.list_for_user(other_user.id)
        assert received.relation == "received"
        assert received.other_user_name == "Tester"

    def test_accepted_views(self, shared_service, accepted, user, other_user):
        canonical, copy = accepted
        [sent] = shared_service.list_for_user(user.id)
        assert sent.habit.id == canonical.id
        assert sent.other_user_name == "Friend"

        [received] = shared_service.list_for_user(other_user.id)
        assert received.habit.id == copy.id
        assert received.other_user_id == user.id


class TestTracking:
    def test_participant_tracking_updates_copy_and_progress(
        self, shared_service, accepted, habit_repo, user, other_user
    ):
        canonical, copy = accepted
        own = shared_service.track(canonical.id, other_user.id, today=TODAY)

        assert own.id == copy.id
        assert own.completion_dates == [TODAY]
        assert own.streak == 1

        progress = shared_service.progress(canonical.id, user.id)
        assert set(progress.members) == {user.id, other_user.id}
        assert progress.members[other_user.id].completed_dates == [TODAY]
        assert progress.members[user.id].completed_dates == []
        assert progress.members[user.id].is_you

    def test_untrack(self, shared_service, accepted, other_user):
        canonical, copy = accepted
        shared_service.track(copy.id, other_user.id, today=TODAY)
        own = shared_service.track(copy.id, other_user.id, completed=False, today=TODAY)
        assert own.completion_dates == []

    def test_future_day_rejected(self, shared_service, accepted, other_user):
        canonical, _ = accepted
        with pytest.raises(FutureDateError):
            shared_service.track(
                canonical.id, other_user.id, target_date=TODAY + timedelta(days=1), today=TODAY
            )

    def test_pending_recipient_cannot_track(self, shared_service, pending, other_user):
        with pytest.raises(PermissionDeniedError):
            shared_service.track(pending.id, other_user.id, today=TODAY)


class TestUpdateAndDelete:
    def test_participant_update_propagates(self, shared_service, accepted, habit_repo, other_user):
        canonical, copy = accepted
        shared_service.update(
            copy.id, other_user.id, {"name": "Run together", "repeat_count": 5}, today=TODAY
        )

        assert habit_repo.find_by_id(canonical.id).name == "Run together"
        stored_copy = habit_repo.find_by_id(copy.id)
        assert stored_copy.name == "Run together"
        assert len(stored_copy.repeat_dates) == 5

    def test_participant_leaves(
        self, shared_service, accepted, habit_repo, notification_repo, user, other_user
    ):
        canonical, copy = accepted
        assert shared_service.delete(copy.id, other_user.id) == "left"

        assert habit_repo.find_by_id(copy.id) is None
        assert habit_repo.find_by_id(canonical.id) is not None
        participant = habit_repo.get_participant(canonical.id, other_user.id)
        assert participant.status == ParticipantStatus.LEFT.value
        notification = notification_repo.list_for_recipient(user.id)[0]
        assert notification.type == NotificationType.HABIT_LEFT.value
        assert notification.message == "Friend left the shared habit: Run"

    def test_owner_deletes_for_everyone(
        self, shared_service, accepted, habit_repo, notification_repo, user, other_user
    ):
        canonical, copy = accepted
        assert shared_service.delete(canonical.id, user.id) == "deleted"

        assert habit_repo.find_by_id(canonical.id) is None
        assert habit_repo.find_by_id(copy.id) is None
        notification = notification_repo.list_for_recipient(other_user.id)[0]
        assert notification.message == "Tester deleted the shared habit: Run"
