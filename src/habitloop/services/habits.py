"""Habit services: CRUD, daily logging and per-habit stats."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any, Iterable, Optional, Protocol

from ..errors import InvalidInputError, NotFoundError
from ..logging_config import get_logger
from ..models.habit import DEFAULT_COLOR, Habit, HabitLog, HabitType
from .streaks import compute_consistency, compute_heatmap, compute_streaks, window_start

if TYPE_CHECKING:  # pragma: no cover
    from ..blueprints.habits.forms import HabitForm, HabitUpdateForm, LogForm
    from ..domain.repositories.habit import HabitRepository

logger = get_logger(__name__)


class _DailyLog(Protocol):
    occurred_on: date
    completed: bool
    duration: Optional[int]


def is_satisfied(log: _DailyLog) -> bool:
    """A day counts as done when it was checked off or any time was logged."""

    return bool(log.completed) or (log.duration or 0) > 0


def completion_dates(logs: Iterable[_DailyLog]) -> set[date]:
    """Resolve the calendar days a collection of logs satisfied."""

    return {log.occurred_on for log in logs if is_satisfied(log)}


def apply_log_delta(
    *,
    habit_type: str,
    target_count: Optional[int],
    existing: Optional[Any],
    completed: Optional[bool],
    duration: Optional[int],
    count: Optional[int],
) -> dict[str, Any]:
    """Merge a logging request into the stored values for the day.

    ``duration`` and ``count`` are deltas added to what is already stored; the
    count never drops below zero. COUNT habits with a target are completed
    exactly when the accumulated count reaches it.
    """

    new_completed = existing.completed if existing is not None else False
    new_duration = existing.duration if existing is not None else None
    new_count = existing.count if existing is not None else None

    if completed is not None:
        new_completed = completed
    if duration is not None:
        new_duration = (new_duration or 0) + duration
        if new_duration < 0:
            raise InvalidInputError("Logged minutes cannot go below zero")
    if count is not None:
        new_count = max(0, (new_count or 0) + count)
        if habit_type == HabitType.COUNT.value and target_count:
            new_completed = new_count >= target_count

    return {"completed": new_completed, "duration": new_duration, "count": new_count}


def _require_habit(repo: "HabitRepository", habit_id: int, user_id: int) -> Habit:
    habit = repo.get_by_id(habit_id, user_id=user_id)
    if habit is None:
        raise NotFoundError("Habit not found")
    return habit


def list_habits(repo: "HabitRepository", *, user_id: int) -> list[Habit]:
    return repo.list_active(user_id=user_id)


def create_habit(repo: "HabitRepository", *, user_id: int, form: "HabitForm") -> Habit:
    """Create a habit from a validated form."""

    habit = Habit(
        user_id=user_id,
        name=form.name,
        category=form.category,
        habit_type=form.type.value,
        color=form.color or DEFAULT_COLOR,
        icon=form.icon,
        target_count=form.target_count,
        schedule_days=list(form.schedule_days),
    )
    created = repo.create(habit, user_id=user_id)
    logger.info("Habit created", extra={"user_id": user_id, "habit_id": created.id})
    return created


def update_habit(
    repo: "HabitRepository", *, user_id: int, habit_id: int, form: "HabitUpdateForm"
) -> Habit:
    """Apply the fields present in ``form`` to an owned habit."""

    habit = _require_habit(repo, habit_id, user_id)
    changes = form.model_dump(exclude_unset=True)
    if "type" in changes:
        changes["habit_type"] = changes.pop("type").value
    for field, value in changes.items():
        setattr(habit, field, value)
    return repo.update(habit, user_id=user_id)


def archive_habit(repo: "HabitRepository", *, user_id: int, habit_id: int) -> None:
    _require_habit(repo, habit_id, user_id)
    repo.archive(habit_id, user_id=user_id)
    logger.info("Habit archived", extra={"user_id": user_id, "habit_id": habit_id})


def habit_stats(
    repo: "HabitRepository",
    *,
    user_id: int,
    habit_id: int,
    today: date,
    window_days: int = 90,
) -> dict[str, Any]:
    """Streaks, heatmap and totals for one habit over a trailing window."""

    habit = _require_habit(repo, habit_id, user_id)
    # Streaks use the full history; totals only the window.
    history = repo.get_logs_for_habit(habit_id, None, today, user_id=user_id)
    start = window_start(window_days, today)
    recent = [log for log in history if log.occurred_on >= start]
    done = completion_dates(history)

    return {
        "habit": habit.to_dict(),
        "streaks": compute_streaks(done, today).to_dict(),
        "heatmap": [cell.to_dict() for cell in compute_heatmap(done, window_days, today)],
        "consistency": compute_consistency(done, window_days, today),
        "total_completions": len(completion_dates(recent)),
        "total_minutes": sum(log.duration or 0 for log in recent),
    }


def today_habits(repo: "HabitRepository", *, user_id: int, today: date) -> list[dict[str, Any]]:
    """Habits scheduled for ``today`` paired with today's log (or None)."""

    habits = [habit for habit in repo.list_active(user_id=user_id) if habit.is_scheduled_on(today)]
    logs = {
        log.habit_id: log
        for log in repo.get_logs_for_user(today, today, user_id=user_id)
    }
    items: list[dict[str, Any]] = []
    for habit in habits:
        log = logs.get(habit.id)
        payload = habit.to_dict()
        payload["log"] = log.to_dict() if log else None
        items.append(payload)
    return items


def log_today(
    repo: "HabitRepository",
    *,
    user_id: int,
    habit_id: int,
    today: date,
    form: "LogForm",
) -> HabitLog:
    """Upsert today's log for an owned habit."""

    habit = _require_habit(repo, habit_id, user_id)
    existing = repo.get_log(habit_id, today, user_id=user_id)
    values = apply_log_delta(
        habit_type=habit.habit_type,
        target_count=habit.target_count,
        existing=existing,
        completed=form.completed,
        duration=form.duration,
        count=form.count,
    )
    note = form.note if "note" in form.model_fields_set else (existing.note if existing else None)
    log = HabitLog(
        habit_id=habit_id,
        user_id=user_id,
        occurred_on=today,
        note=note,
        **values,
    )
    return repo.save_log(log, user_id=user_id)


__all__ = [
    "apply_log_delta",
    "archive_habit",
    "completion_dates",
    "create_habit",
    "habit_stats",
    "is_satisfied",
    "list_habits",
    "log_today",
    "today_habits",
    "update_habit",
]
