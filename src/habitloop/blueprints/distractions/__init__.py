"""Distractions blueprint package."""

from __future__ import annotations

from flask import Blueprint

bp = Blueprint("distractions", __name__, url_prefix="/distractions")

from . import routes  # noqa: E402,F401 - import routes for registration

__all__ = ["bp"]
