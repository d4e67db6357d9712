"""Habit routes."""

from __future__ import annotations

from flask import jsonify

from ...services import habits as habit_service
from ...web import app_config, current_user_id, habit_repo, int_arg, login_required, parse_form, today
from . import bp
from .forms import HabitForm, HabitUpdateForm


@bp.get("/")
@login_required
def list_habits():
    """List the signed-in user's active habits."""

    habits = habit_service.list_habits(habit_repo(), user_id=current_user_id())
    return jsonify([habit.to_dict() for habit in habits])


@bp.post("/")
@login_required
def create_habit():
    form = parse_form(HabitForm)
    habit = habit_service.create_habit(habit_repo(), user_id=current_user_id(), form=form)
    return jsonify(habit.to_dict()), 201


@bp.put("/<int:habit_id>")
@login_required
def update_habit(habit_id: int):
    form = parse_form(HabitUpdateForm)
    habit = habit_service.update_habit(
        habit_repo(), user_id=current_user_id(), habit_id=habit_id, form=form
    )
    return jsonify(habit.to_dict())


@bp.delete("/<int:habit_id>")
@login_required
def archive_habit(habit_id: int):
    """Archive (soft delete) a habit."""

    habit_service.archive_habit(habit_repo(), user_id=current_user_id(), habit_id=habit_id)
    return jsonify({"success": True})


@bp.get("/<int:habit_id>/stats")
@login_required
def habit_stats(habit_id: int):
    """Streaks plus a trailing-window heatmap for one habit."""

    window = int_arg("days", app_config().HEATMAP_DAYS)
    stats = habit_service.habit_stats(
        habit_repo(),
        user_id=current_user_id(),
        habit_id=habit_id,
        today=today(),
        window_days=window,
    )
    return jsonify(stats)
