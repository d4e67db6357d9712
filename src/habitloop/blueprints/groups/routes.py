"""Group routes: membership, shared habits, check-ins, stats and chat."""

from __future__ import annotations

from flask import jsonify, request

from ...errors import InvalidInputError
from ...services import groups as group_service
from ...services import messages as message_service
from ...web import app_config, current_user_id, group_repo, int_arg, login_required, parse_form, today
from . import bp
from .forms import (
    GroupForm,
    GroupHabitForm,
    GroupHabitUpdateForm,
    GroupLogForm,
    GroupUpdateForm,
    JoinForm,
    MessageForm,
    RoleForm,
)


@bp.get("/")
@login_required
def list_groups():
    """Groups the signed-in user belongs to."""

    return jsonify(group_service.list_groups(group_repo(), user_id=current_user_id()))


@bp.post("/")
@login_required
def create_group():
    form = parse_form(GroupForm)
    group = group_service.create_group(group_repo(), user_id=current_user_id(), form=form)
    return jsonify(group), 201


@bp.post("/join")
@login_required
def join_group():
    form = parse_form(JoinForm)
    result = group_service.join_group(group_repo(), user_id=current_user_id(), join_code=form.join_code)
    return jsonify(result), 200 if result["already_member"] else 201


@bp.get("/<int:group_id>")
@login_required
def get_group(group_id: int):
    return jsonify(group_service.get_group(group_repo(), user_id=current_user_id(), group_id=group_id))


@bp.patch("/<int:group_id>")
@login_required
def update_group(group_id: int):
    form = parse_form(GroupUpdateForm)
    group = group_service.update_group(
        group_repo(), user_id=current_user_id(), group_id=group_id, form=form
    )
    return jsonify(group.to_dict())


@bp.delete("/<int:group_id>")
@login_required
def delete_group(group_id: int):
    group_service.delete_group(group_repo(), user_id=current_user_id(), group_id=group_id)
    return jsonify({"success": True})


@bp.patch("/<int:group_id>/members/<int:user_id>")
@login_required
def change_role(group_id: int, user_id: int):
    form = parse_form(RoleForm)
    member = group_service.change_member_role(
        group_repo(),
        user_id=current_user_id(),
        group_id=group_id,
        target_user_id=user_id,
        role=form.role,
    )
    return jsonify({"group_id": member.group_id, "user_id": member.user_id, "role": member.role})


@bp.delete("/<int:group_id>/members/<int:user_id>")
@login_required
def remove_member(group_id: int, user_id: int):
    """Leave the group, or remove another member as owner/admin."""

    group_service.remove_member(
        group_repo(), user_id=current_user_id(), group_id=group_id, target_user_id=user_id
    )
    return jsonify({"success": True})


@bp.post("/<int:group_id>/habits")
@login_required
def add_habit(group_id: int):
    form = parse_form(GroupHabitForm)
    habit = group_service.add_group_habit(
        group_repo(), user_id=current_user_id(), group_id=group_id, form=form
    )
    return jsonify(habit.to_dict()), 201


@bp.patch("/<int:group_id>/habits/<int:habit_id>")
@login_required
def update_habit(group_id: int, habit_id: int):
    form = parse_form(GroupHabitUpdateForm)
    habit = group_service.update_group_habit(
        group_repo(), user_id=current_user_id(), group_id=group_id, habit_id=habit_id, form=form
    )
    return jsonify(habit.to_dict())


@bp.delete("/<int:group_id>/habits/<int:habit_id>")
@login_required
def delete_habit(group_id: int, habit_id: int):
    group_service.delete_group_habit(
        group_repo(), user_id=current_user_id(), group_id=group_id, habit_id=habit_id
    )
    return jsonify({"success": True})


@bp.get("/<int:group_id>/today")
@login_required
def group_today(group_id: int):
    payload = group_service.group_today(
        group_repo(), user_id=current_user_id(), group_id=group_id, today=today()
    )
    return jsonify(payload)


@bp.patch("/<int:group_id>/today")
@login_required
def log_group_today(group_id: int):
    """Record the caller's progress on a shared habit for today."""

    form = parse_form(GroupLogForm)
    log = group_service.log_group_today(
        group_repo(), user_id=current_user_id(), group_id=group_id, today=today(), form=form
    )
    return jsonify(log.to_dict())


@bp.get("/<int:group_id>/stats")
@login_required
def group_stats(group_id: int):
    days = int_arg("days", app_config().GROUP_STATS_DAYS)
    stats = group_service.group_stats(
        group_repo(), user_id=current_user_id(), group_id=group_id, today=today(), days=days
    )
    return jsonify(stats)


@bp.get("/<int:group_id>/messages")
@login_required
def list_messages(group_id: int):
    raw_cursor = request.args.get("cursor")
    cursor = None
    if raw_cursor:
        try:
            cursor = int(raw_cursor)
        except ValueError as exc:
            raise InvalidInputError("cursor must be a message id") from exc
    messages = message_service.list_messages(
        group_repo(), user_id=current_user_id(), group_id=group_id, cursor=cursor
    )
    return jsonify(messages)


@bp.post("/<int:group_id>/messages")
@login_required
def post_message(group_id: int):
    form = parse_form(MessageForm)
    message = message_service.post_message(
        group_repo(), user_id=current_user_id(), group_id=group_id, text=form.text
    )
    return jsonify(message), 201
