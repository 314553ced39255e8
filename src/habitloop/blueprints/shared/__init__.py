"""Shared habits blueprint package."""

from __future__ import annotations

from flask import Blueprint

bp = Blueprint("shared_habits", __name__, url_prefix="/habits/shared")

from . import routes  # noqa: E402,F401 - import routes for registration

__all__ = ["bp"]
