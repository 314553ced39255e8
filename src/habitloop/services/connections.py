"""Directory of users with a live real-time channel."""

from __future__ import annotations

from threading import Lock
from typing import Any, Callable, Dict, Mapping, Optional

from ..logging_config import get_logger

__all__ = ["Channel", "ConnectionDirectory"]

Channel = Callable[[Mapping[str, Any]], None]

logger = get_logger("connections")


class ConnectionDirectory:
    """Thread-safe mapping of user id to the channel their events are pushed to.

    One channel per user; registering again replaces the previous channel.
    """

    def __init__(self) -> None:
        self._channels: Dict[int, Channel] = {}
        self._lock = Lock()

    def register(self, user_id: int, channel: Channel) -> None:
        with self._lock:
            self._channels[user_id] = channel
        logger.info("User connected", extra={"user_id": user_id})

    def unregister(self, user_id: int, channel: Optional[Channel] = None) -> None:
        """Drop the user's channel; with ``channel`` given, only if it is still current."""
        with self._lock:
            if channel is not None and self._channels.get(user_id) is not channel:
                return
            removed = self._channels.pop(user_id, None)
        if removed is not None:
            logger.info("User disconnected", extra={"user_id": user_id})

    def is_online(self, user_id: int) -> bool:
        with self._lock:
            return user_id in self._channels

    def online_users(self) -> list[int]:
        with self._lock:
            return sorted(self._channels)

    def send(self, user_id: int, event: Mapping[str, Any]) -> bool:
        """Push ``event`` to the user's channel; False when they are offline.

        A channel that raises is dropped so later sends do not keep failing.
        """

        with self._lock:
            channel = self._channels.get(user_id)
        if channel is None:
            return False
        try:
            channel(event)
        except Exception:
            logger.warning(
                "Dropping broken channel", extra={"user_id": user_id}, exc_info=True
            )
            with self._lock:
                if self._channels.get(user_id) is channel:
                    self._channels.pop(user_id, None)
            return False
        return True
