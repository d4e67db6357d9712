"""Cross-habit analytics for the dashboard."""

from __future__ import annotations

from collections import defaultdict
from datetime import date, timedelta
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from ..errors import InvalidInputError
from .habits import completion_dates, is_satisfied
from .streaks import compute_streaks, percentage, window_start

if TYPE_CHECKING:  # pragma: no cover
    from ..domain.repositories.habit import HabitRepository


class Period(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    ALL = "all"


def period_start(period: Period, today: date) -> Optional[date]:
    """First day covered by ``period``; weeks start on Monday."""

    if period is Period.DAILY:
        return today
    if period is Period.WEEKLY:
        return today - timedelta(days=today.weekday())
    if period is Period.MONTHLY:
        return today.replace(day=1)
    return None


def parse_period(raw: str | None) -> Period:
    try:
        return Period((raw or Period.WEEKLY.value).lower())
    except ValueError as exc:
        raise InvalidInputError(f"Unknown period: {raw!r}") from exc


def streak_overview(repo: "HabitRepository", *, user_id: int, today: date) -> dict[str, Any]:
    """Current/longest streak for every active habit, plus the best of each."""

    habits = repo.list_active(user_id=user_id)
    logs_by_habit: dict[int, list] = defaultdict(list)
    for log in repo.get_logs_for_user(None, today, user_id=user_id):
        logs_by_habit[log.habit_id].append(log)

    results = []
    for habit in habits:
        streaks = compute_streaks(completion_dates(logs_by_habit.get(habit.id, [])), today)
        results.append(
            {
                "id": habit.id,
                "name": habit.name,
                "color": habit.color,
                **streaks.to_dict(),
            }
        )

    return {
        "habits": results,
        "best_current": max((item["current"] for item in results), default=0),
        "best_longest": max((item["longest"] for item in results), default=0),
    }


def daily_consistency(
    repo: "HabitRepository", *, user_id: int, today: date, days: int = 90
) -> list[dict[str, Any]]:
    """Per-day share of active habits satisfied over a trailing window.

    The denominator is the number of currently active habits, not the number
    scheduled on each day.
    """

    if days < 1:
        raise InvalidInputError("days must be at least 1")
    habits = repo.list_active(user_id=user_id)
    if not habits:
        return []
    active_ids = {habit.id for habit in habits}
    start = window_start(days, today)

    completed_by_day: dict[date, int] = defaultdict(int)
    for log in repo.get_logs_for_user(start, today, user_id=user_id):
        if log.habit_id in active_ids and is_satisfied(log):
            completed_by_day[log.occurred_on] += 1

    total = len(habits)
    rows = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        completed = completed_by_day.get(day, 0)
        rows.append(
            {
                "date": day.isoformat(),
                "pct": percentage(completed, total),
                "completed": completed,
                "total": total,
            }
        )
    return rows


def time_breakdown(
    repo: "HabitRepository", *, user_id: int, today: date, period: Period
) -> dict[str, Any]:
    """Minutes logged per day, per habit and per category for ``period``.

    Archived habits keep counting; the minutes were spent either way.
    """

    habits = {habit.id: habit for habit in repo.list_all(user_id=user_id, include_archived=True)}
    logs = [
        log
        for log in repo.get_logs_for_user(period_start(period, today), today, user_id=user_id)
        if (log.duration or 0) > 0 and log.habit_id in habits
    ]

    by_day: dict[str, dict[str, int]] = {}
    habit_meta: dict[str, dict[str, str]] = {}
    category_minutes: dict[str, int] = defaultdict(int)
    habit_minutes: dict[str, int] = defaultdict(int)

    for log in logs:
        habit = habits[log.habit_id]
        day_key = log.occurred_on.isoformat()
        bucket = by_day.setdefault(day_key, {})
        bucket[habit.name] = bucket.get(habit.name, 0) + log.duration
        habit_meta[habit.name] = {
            "name": habit.name,
            "color": habit.color,
            "category": habit.category,
        }
        category_minutes[habit.category] += log.duration
        habit_minutes[habit.name] += log.duration

    bar_data = [{"date": day, **minutes} for day, minutes in by_day.items()]
    category_data = sorted(
        ({"category": name, "minutes": minutes} for name, minutes in category_minutes.items()),
        key=lambda item: item["minutes"],
        reverse=True,
    )
    habit_totals = sorted(
        (
            {
                "name": name,
                "minutes": minutes,
                "color": habit_meta[name]["color"],
                "category": habit_meta[name]["category"],
            }
            for name, minutes in habit_minutes.items()
        ),
        key=lambda item: item["minutes"],
        reverse=True,
    )

    return {
        "period": period.value,
        "bar_data": bar_data,
        "habit_meta": habit_meta,
        "category_data": category_data,
        "habit_totals": habit_totals,
        "total_minutes": sum(log.duration for log in logs),
    }


def today_time_breakdown(repo: "HabitRepository", *, user_id: int, today: date) -> list[dict[str, Any]]:
    """Habits with minutes logged today, longest first, regardless of schedule."""

    habits = {habit.id: habit for habit in repo.list_active(user_id=user_id)}
    rows = []
    for log in repo.get_logs_for_user(today, today, user_id=user_id):
        habit = habits.get(log.habit_id)
        if habit is None or (log.duration or 0) <= 0:
            continue
        rows.append(
            {
                "id": habit.id,
                "name": habit.name,
                "category": habit.category,
                "type": habit.habit_type,
                "color": habit.color,
                "duration": log.duration,
            }
        )
    rows.sort(key=lambda row: row["duration"], reverse=True)
    return rows


__all__ = [
    "Period",
    "daily_consistency",
    "parse_period",
    "period_start",
    "streak_overview",
    "time_breakdown",
    "today_time_breakdown",
]
