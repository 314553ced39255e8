"""Small helpers for dev-mode diagnostics."""

from __future__ import annotations

import traceback
from typing import Any

from .config import BaseConfig


def in_dev_mode(config: BaseConfig | None) -> bool:
    """Return True when dev mode diagnostics are enabled."""

    return bool(getattr(config, "DEV_MODE", False)) if config is not None else False


def error_detail(exc: BaseException) -> dict[str, Any]:
    """Describe an unexpected exception for a dev-mode error response."""

    return {
        "type": type(exc).__name__,
        "message": str(exc),
        "traceback": traceback.format_exception(type(exc), exc, exc.__traceback__),
    }
