"""Bad habit routes."""

from __future__ import annotations

from flask import request

from ...extensions import current_user_id, get_context, success
from ...services.bad_habits import bad_habit_to_dict
from . import bp
from .forms import BadHabitForm, BadHabitUpdateForm


@bp.get("/")
def list_bad_habits():
    items = get_context().bad_habits.list_for_user(current_user_id())
    return success([bad_habit_to_dict(item) for item in items], count=len(items))


@bp.post("/")
def create_bad_habit():
    form = BadHabitForm.parse(request.get_json(silent=True))
    item = get_context().bad_habits.create(current_user_id(), form.to_data())
    return success(bad_habit_to_dict(item), status=201, message="Bad habit added")


@bp.put("/<int:bad_habit_id>")
def update_bad_habit(bad_habit_id: int):
    form = BadHabitUpdateForm.parse(request.get_json(silent=True))
    item = get_context().bad_habits.update(bad_habit_id, current_user_id(), form.to_data())
    return success(bad_habit_to_dict(item), message="Bad habit updated")


@bp.delete("/<int:bad_habit_id>")
def delete_bad_habit(bad_habit_id: int):
    get_context().bad_habits.delete(bad_habit_id, current_user_id())
    return success(message="Bad habit deleted")


@bp.post("/<int:bad_habit_id>/track")
def track_bad_habit(bad_habit_id: int):
    result = get_context().bad_habits.track(bad_habit_id, current_user_id())
    return success(result.to_dict(), message=result.message)
