"""Group services: membership, shared habits, check-ins and leaderboards."""

from __future__ import annotations

import secrets
import string
from collections import defaultdict
from datetime import date, timedelta
from typing import TYPE_CHECKING, Any, Optional

from ..errors import InvalidInputError, NotFoundError, PermissionDeniedError
from ..logging_config import get_logger
from ..models.group import (
    DEFAULT_EMOJI,
    Group,
    GroupHabit,
    GroupHabitLog,
    GroupMember,
    GroupRole,
)
from ..models.habit import DEFAULT_COLOR, HabitType
from .habits import apply_log_delta, completion_dates
from .streaks import compute_consistency, compute_heatmap, compute_streaks, window_start

if TYPE_CHECKING:  # pragma: no cover
    from ..blueprints.groups.forms import (
        GroupForm,
        GroupHabitForm,
        GroupHabitUpdateForm,
        GroupLogForm,
        GroupUpdateForm,
    )
    from ..domain.repositories.group import GroupRepository

logger = get_logger(__name__)

JOIN_CODE_LENGTH = 8
_JOIN_CODE_ALPHABET = string.ascii_uppercase + string.digits
_JOIN_CODE_ATTEMPTS = 10


def generate_join_code(repo: "GroupRepository") -> str:
    """Return an unused 8-character uppercase join code."""

    for _ in range(_JOIN_CODE_ATTEMPTS):
        code = "".join(secrets.choice(_JOIN_CODE_ALPHABET) for _ in range(JOIN_CODE_LENGTH))
        if repo.get_by_join_code(code) is None:
            return code
    raise RuntimeError("Could not allocate a unique join code")


def require_membership(repo: "GroupRepository", group_id: int, user_id: int) -> GroupMember:
    member = repo.get_membership(group_id, user_id)
    if member is None:
        raise PermissionDeniedError("Not a member of this group")
    return member


def _require_manager(repo: "GroupRepository", group_id: int, user_id: int) -> GroupMember:
    member = repo.get_membership(group_id, user_id)
    if member is None or not member.can_manage:
        raise PermissionDeniedError("Only the owner or an admin can do that")
    return member


def _require_group(repo: "GroupRepository", group_id: int) -> Group:
    group = repo.get_group(group_id)
    if group is None:
        raise NotFoundError("Group not found")
    return group


def _require_habit(repo: "GroupRepository", group_id: int, habit_id: int) -> GroupHabit:
    habit = repo.get_habit(group_id, habit_id)
    if habit is None:
        raise NotFoundError("Group habit not found")
    return habit


def _member_rows(repo: "GroupRepository", group_id: int) -> list[dict[str, Any]]:
    return [
        {**user.public_dict(), "role": member.role, "joined_at": member.joined_at.isoformat()}
        for member, user in repo.list_members(group_id)
    ]


def group_detail(repo: "GroupRepository", group: Group, *, my_role: str) -> dict[str, Any]:
    return {
        **group.to_dict(),
        "my_role": my_role,
        "habits": [habit.to_dict() for habit in repo.list_habits([group.id])],
        "members": _member_rows(repo, group.id),
    }


def list_groups(repo: "GroupRepository", *, user_id: int) -> list[dict[str, Any]]:
    """Groups ``user_id`` belongs to, most recently joined first."""

    items = []
    for membership in repo.list_memberships_for_user(user_id):
        group = repo.get_group(membership.group_id)
        if group is not None:
            items.append(group_detail(repo, group, my_role=membership.role))
    return items


def create_group(repo: "GroupRepository", *, user_id: int, form: "GroupForm") -> dict[str, Any]:
    """Create a group, make ``user_id`` its owner and add the initial habit."""

    color = form.color or DEFAULT_COLOR
    group = repo.save_group(
        Group(
            name=form.name,
            description=form.description or None,
            emoji=form.emoji or DEFAULT_EMOJI,
            color=color,
            join_code=generate_join_code(repo),
            end_date=form.end_date,
            owner_id=user_id,
        )
    )
    repo.save_member(GroupMember(group_id=group.id, user_id=user_id, role=GroupRole.OWNER.value))
    repo.save_habit(
        GroupHabit(
            group_id=group.id,
            name=form.habit.name,
            habit_type=form.habit.type.value,
            color=form.habit.color or color,
            target_count=form.habit.target_count,
        )
    )
    logger.info("Group created", extra={"group_id": group.id, "owner_id": user_id})
    return group_detail(repo, group, my_role=GroupRole.OWNER.value)


def get_group(repo: "GroupRepository", *, user_id: int, group_id: int) -> dict[str, Any]:
    member = require_membership(repo, group_id, user_id)
    group = _require_group(repo, group_id)
    return group_detail(repo, group, my_role=member.role)


def update_group(
    repo: "GroupRepository", *, user_id: int, group_id: int, form: "GroupUpdateForm"
) -> Group:
    _require_manager(repo, group_id, user_id)
    group = _require_group(repo, group_id)
    changes = form.model_dump(exclude_unset=True)
    if "description" in changes:
        changes["description"] = changes["description"] or None
    for field, value in changes.items():
        setattr(group, field, value)
    return repo.save_group(group)


def delete_group(repo: "GroupRepository", *, user_id: int, group_id: int) -> None:
    member = repo.get_membership(group_id, user_id)
    if member is None or member.role != GroupRole.OWNER.value:
        raise PermissionDeniedError("Only the owner can delete this group")
    repo.delete_group(group_id)
    logger.info("Group deleted", extra={"group_id": group_id, "owner_id": user_id})


def join_group(repo: "GroupRepository", *, user_id: int, join_code: str) -> dict[str, Any]:
    """Join by code (case-insensitive). Joining twice is not an error."""

    group = repo.get_by_join_code(join_code.strip().upper())
    if group is None:
        raise NotFoundError("Invalid join code")
    if repo.get_membership(group.id, user_id) is not None:
        return {"group_id": group.id, "already_member": True}
    repo.save_member(GroupMember(group_id=group.id, user_id=user_id, role=GroupRole.MEMBER.value))
    logger.info("Member joined", extra={"group_id": group.id, "user_id": user_id})
    return {"group_id": group.id, "already_member": False}


def change_member_role(
    repo: "GroupRepository", *, user_id: int, group_id: int, target_user_id: int, role: GroupRole
) -> GroupMember:
    """Owner-only: promote a member to ADMIN or demote to MEMBER."""

    requester = repo.get_membership(group_id, user_id)
    if requester is None or requester.role != GroupRole.OWNER.value:
        raise PermissionDeniedError("Only the owner can change roles")
    if role is GroupRole.OWNER:
        raise InvalidInputError("Role must be ADMIN or MEMBER")
    target = repo.get_membership(group_id, target_user_id)
    if target is None:
        raise NotFoundError("Member not found")
    if target.role == GroupRole.OWNER.value:
        raise InvalidInputError("The owner's role cannot be changed")
    target.role = role.value
    updated = repo.save_member(target)
    logger.info(
        "Member role changed",
        extra={"group_id": group_id, "user_id": target_user_id, "role": role.value},
    )
    return updated


def remove_member(
    repo: "GroupRepository", *, user_id: int, group_id: int, target_user_id: int
) -> None:
    """Leave a group, or (owner/admin) remove someone else. The owner stays."""

    if user_id != target_user_id:
        _require_manager(repo, group_id, user_id)
    target = repo.get_membership(group_id, target_user_id)
    if target is None:
        raise NotFoundError("Member not found")
    if target.role == GroupRole.OWNER.value:
        raise InvalidInputError("Cannot remove the owner; delete the group instead")
    repo.delete_member(group_id, target_user_id)
    logger.info(
        "Member removed",
        extra={"group_id": group_id, "user_id": target_user_id, "removed_by": user_id},
    )


def add_group_habit(
    repo: "GroupRepository", *, user_id: int, group_id: int, form: "GroupHabitForm"
) -> GroupHabit:
    _require_manager(repo, group_id, user_id)
    group = _require_group(repo, group_id)
    return repo.save_habit(
        GroupHabit(
            group_id=group_id,
            name=form.name,
            habit_type=form.type.value,
            color=form.color or group.color,
            target_count=form.target_count,
        )
    )


def update_group_habit(
    repo: "GroupRepository",
    *,
    user_id: int,
    group_id: int,
    habit_id: int,
    form: "GroupHabitUpdateForm",
) -> GroupHabit:
    _require_manager(repo, group_id, user_id)
    habit = _require_habit(repo, group_id, habit_id)
    changes = form.model_dump(exclude_unset=True)
    if "type" in changes:
        changes["habit_type"] = changes.pop("type").value
    for field, value in changes.items():
        setattr(habit, field, value)
    return repo.save_habit(habit)


def delete_group_habit(
    repo: "GroupRepository", *, user_id: int, group_id: int, habit_id: int
) -> None:
    _require_manager(repo, group_id, user_id)
    _require_habit(repo, group_id, habit_id)
    repo.delete_habit(habit_id)


def group_today(
    repo: "GroupRepository", *, user_id: int, group_id: int, today: date
) -> dict[str, Any]:
    """Every shared habit with all members' logs for ``today``."""

    require_membership(repo, group_id, user_id)
    habits = repo.list_habits([group_id])
    members = repo.list_members(group_id)
    users = {user.id: user for _, user in members}

    logs_by_habit: dict[int, list[dict[str, Any]]] = defaultdict(list)
    for log in repo.list_logs([habit.id for habit in habits], since=today, until=today):
        user = users.get(log.user_id)
        logs_by_habit[log.habit_id].append(
            {**log.to_dict(), "user": user.public_dict() if user else None}
        )

    return {
        "habits": [
            {**habit.to_dict(), "logs": logs_by_habit.get(habit.id, [])} for habit in habits
        ],
        "members": [{**user.public_dict(), "role": member.role} for member, user in members],
    }


def log_group_today(
    repo: "GroupRepository", *, user_id: int, group_id: int, today: date, form: "GroupLogForm"
) -> GroupHabitLog:
    """Upsert the caller's log for one shared habit today."""

    require_membership(repo, group_id, user_id)
    habit = _require_habit(repo, group_id, form.habit_id)
    existing = repo.get_log(habit.id, user_id, today)
    values = apply_log_delta(
        habit_type=habit.habit_type,
        target_count=habit.target_count,
        existing=existing,
        completed=form.completed,
        duration=form.duration,
        count=form.count,
    )
    log = existing or GroupHabitLog(habit_id=habit.id, user_id=user_id, occurred_on=today)
    for field, value in values.items():
        setattr(log, field, value)
    return repo.save_log(log)


def today_group_items(repo: "GroupRepository", *, user_id: int, today: date) -> list[dict[str, Any]]:
    """The caller's shared habits across all groups, with today's own log."""

    groups: dict[int, Group] = {}
    for membership in repo.list_memberships_for_user(user_id):
        group = repo.get_group(membership.group_id)
        if group is not None:
            groups[group.id] = group
    habits = repo.list_habits(list(groups))
    logs = {
        log.habit_id: log
        for log in repo.list_logs(
            [habit.id for habit in habits], since=today, until=today, user_id=user_id
        )
    }

    items = []
    for habit in habits:
        group = groups[habit.group_id]
        log = logs.get(habit.id)
        items.append(
            {
                "group_habit_id": habit.id,
                "group_id": group.id,
                "group_name": group.name,
                "group_color": group.color,
                "group_emoji": group.emoji,
                "name": habit.name,
                "type": habit.habit_type,
                "target_count": habit.target_count,
                "log": (
                    {"completed": log.completed, "duration": log.duration, "count": log.count}
                    if log
                    else None
                ),
            }
        )
    return items


def _daily_value(log: GroupHabitLog, habit_type: Optional[str]) -> int:
    if habit_type == HabitType.COUNT.value:
        return log.count or 0
    if habit_type == HabitType.TIMER.value:
        return log.duration or 0
    return 1 if log.completed else 0


def group_stats(
    repo: "GroupRepository", *, user_id: int, group_id: int, today: date, days: int = 30
) -> dict[str, Any]:
    """Leaderboards for a group over a trailing window of ``days``.

    Streaks, consistency and heatmaps per member all come from the member's
    satisfied days across the group's habits.
    """

    require_membership(repo, group_id, user_id)
    if days < 1:
        raise InvalidInputError("days must be at least 1")
    members = repo.list_members(group_id)
    habits = repo.list_habits([group_id])
    habit_types = {habit.id: habit.habit_type for habit in habits}
    since = window_start(days, today)
    # Streaks need history beyond the window
    logs = repo.list_logs(list(habit_types), until=today)

    logs_by_user: dict[int, list[GroupHabitLog]] = defaultdict(list)
    for log in logs:
        logs_by_user[log.user_id].append(log)

    streaks, consistency, heatmap = [], [], []
    for member, user in members:
        user_logs = logs_by_user.get(user.id, [])
        done = completion_dates(user_logs)
        identity = {"user_id": user.id, "name": user.label}
        result = compute_streaks(done, today)
        streaks.append({**identity, "streak": result.current, "longest": result.longest})
        consistency.append(
            {
                **identity,
                "pct": compute_consistency(done, days, today),
                "completed": sum(1 for day in done if since <= day <= today),
            }
        )
        heatmap.append(
            {**identity, "days": [cell.to_dict() for cell in compute_heatmap(done, days, today)]}
        )

    weekly_data = []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        entry: dict[str, Any] = {"date": day.isoformat()}
        for member, user in members:
            entry[user.label] = sum(
                _daily_value(log, habit_types.get(log.habit_id))
                for log in logs_by_user.get(user.id, [])
                if log.occurred_on == day
            )
        weekly_data.append(entry)

    streaks.sort(key=lambda row: row["streak"], reverse=True)
    consistency.sort(key=lambda row: row["pct"], reverse=True)

    return {
        "members": [{**user.public_dict(), "role": member.role} for member, user in members],
        "habits": [habit.to_dict() for habit in habits],
        "streaks": streaks,
        "weekly_data": weekly_data,
        "consistency": consistency,
        "heatmap": heatmap,
        "member_names": [user.label for _, user in members],
    }


__all__ = [
    "add_group_habit",
    "change_member_role",
    "create_group",
    "delete_group",
    "delete_group_habit",
    "generate_join_code",
    "get_group",
    "group_stats",
    "group_today",
    "join_group",
    "list_groups",
    "log_group_today",
    "remove_member",
    "require_membership",
    "today_group_items",
    "update_group",
    "update_group_habit",
]
