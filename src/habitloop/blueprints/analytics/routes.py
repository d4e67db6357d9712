"""Analytics routes for dashboard widgets."""

from __future__ import annotations

from flask import jsonify, request

from ...services import analytics as analytics_service
from ...web import app_config, current_user_id, habit_repo, int_arg, login_required, today
from . import bp


@bp.get("/streaks")
@login_required
def streaks():
    """Streaks for every habit plus the best current and longest."""

    overview = analytics_service.streak_overview(habit_repo(), user_id=current_user_id(), today=today())
    return jsonify(overview)


@bp.get("/consistency")
@login_required
def consistency():
    days = int_arg("days", app_config().HEATMAP_DAYS)
    rows = analytics_service.daily_consistency(
        habit_repo(), user_id=current_user_id(), today=today(), days=days
    )
    return jsonify(rows)


@bp.get("/time")
@login_required
def time_spent():
    period = analytics_service.parse_period(request.args.get("period"))
    payload = analytics_service.time_breakdown(
        habit_repo(), user_id=current_user_id(), today=today(), period=period
    )
    return jsonify(payload)
