"""Notification routes, including the real-time event stream."""

from __future__ import annotations

import json
import queue

from flask import Response, request

from ...extensions import current_user_id, get_context, success
from ...services.notifications import notification_to_dict
from . import bp

KEEPALIVE_SECONDS = 25


@bp.get("/")
def list_notifications():
    unread_only = request.args.get("unread", "").lower() in {"1", "true", "yes"}
    items = get_context().notifier.list_for_user(current_user_id(), unread_only=unread_only)
    return success([notification_to_dict(item) for item in items], count=len(items))


@bp.post("/<int:notification_id>/read")
def mark_notification_read(notification_id: int):
    item = get_context().notifier.mark_read(notification_id, current_user_id())
    return success(notification_to_dict(item), message="Notification marked as read")


@bp.post("/read-all")
def mark_all_notifications_read():
    count = get_context().notifier.mark_all_read(current_user_id())
    return success({"updated": count}, message="All notifications marked as read")


@bp.get("/stream")
def notification_stream():
    """Server-sent events; unread notifications are replayed on connect."""

    ctx = get_context()
    user_id = current_user_id()
    events: queue.Queue = queue.Queue()
    channel = events.put

    def generate():
        # Register and unregister both live inside the body.
        ctx.connections.register(user_id, channel)
        try:
            ctx.notifier.deliver_pending(user_id)
            while True:
                try:
                    event = events.get(timeout=KEEPALIVE_SECONDS)
                except queue.Empty:
                    yield ": keepalive\n\n"
                    continue
                yield f"event: {event['event']}\ndata: {json.dumps(event, default=str)}\n\n"
        finally:
            ctx.connections.unregister(user_id, channel)

    return Response(generate(), mimetype="text/event-stream")
