"""Distraction routes."""

from __future__ import annotations

from flask import request

from ...extensions import current_user_id, get_context, success
from ...services.distractions import distraction_to_dict
from . import bp
from .forms import DistractionForm, DistractionUpdateForm, TimeframeQuery


def _timeframe() -> str | None:
    return TimeframeQuery.parse(request.args.to_dict()).timeframe


@bp.post("/")
def log_distraction():
    form = DistractionForm.parse(request.get_json(silent=True))
    item = get_context().distractions.log(current_user_id(), form.to_data())
    return success(
        distraction_to_dict(item), status=201, message="Distraction logged successfully"
    )


@bp.get("/")
def list_distractions():
    items = get_context().distractions.list_for_user(current_user_id(), _timeframe())
    return success([distraction_to_dict(item) for item in items], count=len(items))


@bp.put("/<int:distraction_id>")
def update_distraction(distraction_id: int):
    form = DistractionUpdateForm.parse(request.get_json(silent=True))
    item = get_context().distractions.update(distraction_id, current_user_id(), form.to_data())
    return success(distraction_to_dict(item), message="Distraction updated successfully")


@bp.delete("/<int:distraction_id>")
def delete_distraction(distraction_id: int):
    get_context().distractions.delete(distraction_id, current_user_id())
    return success(message="Distraction deleted successfully")


@bp.get("/counts")
def distraction_counts():
    counts = get_context().distractions.counts(current_user_id(), _timeframe())
    return success(counts.to_dict())


@bp.get("/trends")
def distraction_trends():
    points = get_context().distractions.trends(current_user_id(), _timeframe())
    return success([point.to_dict() for point in points])
