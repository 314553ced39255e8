"""Shared habit routes."""

from __future__ import annotations

from flask import request

from ...extensions import current_user_id, get_context, success
from ...services.habits import habit_to_dict
from ..habits.forms import HabitUpdateForm
from . import bp
from .forms import SharedTrackForm, ShareRequestForm


@bp.post("/request")
def request_shared_habit():
    form = ShareRequestForm.parse(request.get_json(silent=True))
    data = form.to_data()
    recipient_id = data.pop("recipient_id")
    habit = get_context().shared_habits.request(current_user_id(), recipient_id, data)
    return success(habit_to_dict(habit), status=201, message="Shared habit request sent")


@bp.get("/")
def list_shared_habits():
    views = get_context().shared_habits.list_for_user(current_user_id())
    return success([view.to_dict() for view in views], count=len(views))


@bp.post("/<int:habit_id>/accept")
def accept_shared_habit(habit_id: int):
    habit = get_context().shared_habits.accept(habit_id, current_user_id())
    return success(habit_to_dict(habit), message="Shared habit accepted")


@bp.post("/<int:habit_id>/reject")
def reject_shared_habit(habit_id: int):
    habit = get_context().shared_habits.reject(habit_id, current_user_id())
    return success(habit_to_dict(habit), message="Shared habit rejected")


@bp.post("/<int:habit_id>/track")
def track_shared_habit(habit_id: int):
    form = SharedTrackForm.parse(request.get_json(silent=True))
    habit = get_context().shared_habits.track(
        habit_id, current_user_id(), form.completed, form.date
    )
    return success(habit_to_dict(habit))


@bp.get("/<int:habit_id>/progress")
def shared_habit_progress(habit_id: int):
    progress = get_context().shared_habits.progress(habit_id, current_user_id())
    return success(progress.to_dict())


@bp.put("/<int:habit_id>")
def update_shared_habit(habit_id: int):
    form = HabitUpdateForm.parse(request.get_json(silent=True))
    habit = get_context().shared_habits.update(habit_id, current_user_id(), form.to_data())
    return success(habit_to_dict(habit), message="Shared habit updated successfully")


@bp.delete("/<int:habit_id>")
def delete_shared_habit(habit_id: int):
    outcome = get_context().shared_habits.delete(habit_id, current_user_id())
    message = "Shared habit deleted" if outcome == "deleted" else "You left the shared habit"
    return success(message=message, outcome=outcome)
