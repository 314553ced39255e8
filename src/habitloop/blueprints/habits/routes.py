"""Habit routes."""

from __future__ import annotations

from flask import request

from ...errors import RequestValidationError
from ...extensions import current_user_id, get_context, success
from ...services.habits import habit_to_dict
from . import bp
from .forms import HabitCreateForm, HabitUpdateForm, OccurrenceForm, TrackForm


@bp.post("/")
def create_habit():
    form = HabitCreateForm.parse(request.get_json(silent=True))
    habit = get_context().habits.create(current_user_id(), form.to_data())
    return success(habit_to_dict(habit), status=201, message="Habit created successfully")


@bp.get("/")
def list_habits():
    habits = get_context().habits.list_habits(current_user_id())
    return success([habit_to_dict(h) for h in habits], count=len(habits))


@bp.get("/stats")
def habit_stats():
    stats = get_context().habits.stats(
        current_user_id(),
        request.args.get("startDate"),
        request.args.get("endDate"),
    )
    return success(stats.to_dict())


@bp.get("/by-date-range")
def habits_by_date_range():
    start = request.args.get("startDate")
    end = request.args.get("endDate")
    if not start or not end:
        raise RequestValidationError("Start date and end date are required")
    views = get_context().habits.query_range(current_user_id(), start, end)
    return success([view.to_dict() for view in views], count=len(views))


@bp.get("/<int:habit_id>")
def get_habit(habit_id: int):
    habit = get_context().habits.get(habit_id, current_user_id())
    return success(habit_to_dict(habit))


@bp.put("/<int:habit_id>")
def update_habit(habit_id: int):
    form = HabitUpdateForm.parse(request.get_json(silent=True))
    habit = get_context().habits.update(habit_id, current_user_id(), form.to_data())
    return success(habit_to_dict(habit), message="Habit updated successfully")


@bp.delete("/<int:habit_id>")
def delete_habit(habit_id: int):
    get_context().habits.delete(habit_id, current_user_id())
    return success(message="Habit deleted successfully")


@bp.post("/<int:habit_id>/track")
def track_habit(habit_id: int):
    form = TrackForm.parse(request.get_json(silent=True))
    result = get_context().habits.track_completion(
        habit_id, current_user_id(), form.date, form.completed
    )
    return success(result.to_dict())


@bp.delete("/<int:habit_id>/occurrence")
def delete_occurrence(habit_id: int):
    payload = request.get_json(silent=True) or {"date": request.args.get("date")}
    form = OccurrenceForm.parse(payload)
    habit = get_context().habits.delete_occurrence(habit_id, current_user_id(), form.date)
    return success(habit_to_dict(habit), message="Occurrence deleted successfully")
