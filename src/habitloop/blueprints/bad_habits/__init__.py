"""Bad habits blueprint package."""

from __future__ import annotations

from flask import Blueprint

bp = Blueprint("bad_habits", __name__, url_prefix="/bad-habits")

from . import routes  # noqa: E402,F401 - import routes for registration

__all__ = ["bp"]
