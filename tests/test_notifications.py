"""Tests for notification persistence and real-time delivery."""

from __future__ import annotations

import pytest

from habitloop.errors import NotFoundError
from habitloop.models import NotificationType
from habitloop.services.connections import ConnectionDirectory
from habitloop.services.notifications import Notifier


def _notify(notifier, recipient_id, message="hello"):
    return notifier.notify(recipient_id, NotificationType.SYSTEM, {"k": "v"}, message=message)


class TestConnectionDirectory:
    def test_register_and_send(self):
        directory = ConnectionDirectory()
        events = []
        directory.register(1, events.append)

        assert directory.is_online(1)
        assert directory.send(1, {"event": "ping"})
        assert events == [{"event": "ping"}]
        assert directory.online_users() == [1]

    def test_offline_send_returns_false(self):
        assert ConnectionDirectory().send(7, {"event": "ping"}) is False

    def test_broken_channel_is_dropped(self):
        directory = ConnectionDirectory()

        def broken(event):
            raise ConnectionError("socket closed")

        directory.register(1, broken)
        assert directory.send(1, {"event": "ping"}) is False
        assert not directory.is_online(1)

    def test_unregister_ignores_stale_channel(self):
        directory = ConnectionDirectory()
        old, new = [], []
        directory.register(1, old.append)
        directory.register(1, new.append)

        directory.unregister(1, old.append)
        assert directory.is_online(1)
        directory.unregister(1)
        assert not directory.is_online(1)


class TestNotifier:
    def test_offline_recipient_stays_undelivered(self, notifier, notification_repo, user):
        notification = _notify(notifier, user.id)

        assert notification.id is not None
        assert not notification.delivered
        [stored] = notification_repo.list_for_recipient(user.id)
        assert stored.status == "unread"
        assert stored.payload == {"k": "v"}

    def test_online_recipient_gets_event(self, notifier, connections, notification_repo, user):
        events = []
        connections.register(user.id, events.append)
        notification = _notify(notifier, user.id)

        assert notification.delivered
        assert events[0]["event"] == "new_notification"
        assert events[0]["notification"]["id"] == notification.id
        assert notification_repo.list_for_recipient(user.id)[0].delivered

    def test_deliver_pending_on_connect(self, notification_repo, connections, user):
        notifier = Notifier(notification_repo, connections, pending_limit=2)
        for index in range(3):
            _notify(notifier, user.id, message=f"n{index}")

        events = []
        connections.register(user.id, events.append)
        assert notifier.deliver_pending(user.id) == 2
        assert [e["notification"]["message"] for e in events] == ["n2", "n1"]

    def test_mark_read(self, notifier, user, other_user):
        notification = _notify(notifier, user.id)
        with pytest.raises(NotFoundError):
            notifier.mark_read(notification.id, other_user.id)

        read = notifier.mark_read(notification.id, user.id)
        assert read.status == "read"
        assert notifier.list_for_user(user.id, unread_only=True) == []

    def test_mark_all_read(self, notifier, user):
        _notify(notifier, user.id)
        _notify(notifier, user.id)
        assert notifier.mark_all_read(user.id) == 2
        assert notifier.mark_all_read(user.id) == 0
