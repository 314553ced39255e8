"""Flask wiring for the application context and request identity."""

from __future__ import annotations

from typing import Any, Optional

from flask import Flask, current_app, g, jsonify, request

from .context import AppContext
from .errors import AuthenticationRequired

EXTENSION_KEY = "habitloop"

# Endpoints reachable without an identity header.
PUBLIC_ENDPOINTS = {"health", "static"}


def init_app(app: Flask, ctx: AppContext) -> None:
    """Attach the context to ``app`` and resolve the caller on every request."""

    app.extensions[EXTENSION_KEY] = ctx
    header = ctx.config.USER_HEADER

    @app.before_request
    def _resolve_user() -> None:
        if request.endpoint in PUBLIC_ENDPOINTS:
            return
        raw = request.headers.get(header, "").strip()
        try:
            user_id = int(raw)
        except ValueError:
            raise AuthenticationRequired("Authentication required") from None
        if user_id <= 0 or ctx.user_repo.get_by_id(user_id) is None:
            raise AuthenticationRequired("Authentication required")
        g.user_id = user_id

    @app.teardown_appcontext
    def _forget_user(exception: Optional[BaseException]) -> None:  # pragma: no cover
        g.pop("user_id", None)


def get_context() -> AppContext:
    """Return the context of the running app."""

    ctx = current_app.extensions.get(EXTENSION_KEY)
    if ctx is None:  # pragma: no cover - only when the factory was bypassed
        raise RuntimeError("Application context not initialized")
    return ctx


def current_user_id() -> int:
    user_id = g.get("user_id")
    if user_id is None:
        raise AuthenticationRequired("Authentication required")
    return user_id


def success(data: Any = None, *, status: int = 200, message: Optional[str] = None, **extra: Any):
    """JSON envelope shared by every endpoint."""

    body: dict[str, Any] = {"success": True}
    if message is not None:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return jsonify(body), status
