"""Today view routes: what to do today and logging it."""

from __future__ import annotations

from flask import jsonify

from ...services import analytics as analytics_service
from ...services import groups as group_service
from ...services import habits as habit_service
from ...web import current_user_id, group_repo, habit_repo, login_required, parse_form, today
from ..habits.forms import LogForm
from . import bp


@bp.get("/")
@login_required
def today_habits():
    """Habits scheduled for today with today's log."""

    items = habit_service.today_habits(habit_repo(), user_id=current_user_id(), today=today())
    return jsonify(items)


@bp.patch("/<int:habit_id>")
@login_required
def log_habit(habit_id: int):
    """Upsert today's log; duration and count accumulate."""

    form = parse_form(LogForm)
    log = habit_service.log_today(
        habit_repo(), user_id=current_user_id(), habit_id=habit_id, today=today(), form=form
    )
    return jsonify(log.to_dict())


@bp.get("/groups")
@login_required
def group_items():
    items = group_service.today_group_items(group_repo(), user_id=current_user_id(), today=today())
    return jsonify(items)


@bp.get("/time-breakdown")
@login_required
def time_breakdown():
    rows = analytics_service.today_time_breakdown(
        habit_repo(), user_id=current_user_id(), today=today()
    )
    return jsonify(rows)
