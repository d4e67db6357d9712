"""Streak, heatmap and consistency calculations over completion dates.

Every function here is pure: callers resolve which calendar days satisfied a
habit, pick "today" once per request, and pass both in. Dates are reduced to
integer day numbers (``date.toordinal()``) so gap checks are plain integer
subtraction.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Iterable

from ..errors import InvalidInputError


class InvalidDateError(InvalidInputError):
    """Raised when a value cannot be reduced to a calendar day."""

    code = "invalid_date"


@dataclass(frozen=True)
class StreakResult:
    """Current and longest run of consecutive satisfied days."""

    current: int = 0
    longest: int = 0

    def to_dict(self) -> dict[str, int]:
        return {"current": self.current, "longest": self.longest}


@dataclass(frozen=True)
class HeatmapDay:
    """One cell of a trailing-window heatmap."""

    day: date
    satisfied: bool

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.day.isoformat(), "satisfied": self.satisfied}


def to_calendar_day(value: Any) -> date:
    """Normalize ``value`` to a calendar day or raise ``InvalidDateError``.

    Accepts ``date``, ``datetime`` (time of day is dropped) and ISO strings.
    A string must parse in full, either as ``yyyy-MM-dd`` or as an ISO
    timestamp (a trailing ``Z`` is read as UTC); its calendar day is the
    date part as written.
    """

    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 10:
                return date.fromisoformat(text)
            return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
        except ValueError as exc:
            raise InvalidDateError(f"Not a calendar date: {value!r}") from exc
    raise InvalidDateError(f"Not a calendar date: {value!r}")


def _day_numbers(dates: Iterable[Any]) -> set[int]:
    return {to_calendar_day(value).toordinal() for value in dates}


def _window_bounds(window_days: int, today: date) -> tuple[int, int]:
    if window_days < 0:
        raise ValueError(f"window_days must be >= 0, got {window_days}")
    end = to_calendar_day(today).toordinal()
    return end - window_days + 1, end


def compute_streaks(dates: Iterable[Any], today: date) -> StreakResult:
    """Return the current and longest streak for ``dates`` as of ``today``.

    The current streak stays alive through ``today`` when the most recent
    completion was yesterday, so a user who has not logged yet today still
    sees their run.
    """

    days = _day_numbers(dates)
    if not days:
        return StreakResult()

    today_num = to_calendar_day(today).toordinal()

    # Future days (clock skew upstream) never extend the current run.
    past = [day for day in days if day <= today_num]
    current = 0
    if past:
        cursor = max(past)
        if cursor >= today_num - 1:
            while cursor in days:
                current += 1
                cursor -= 1

    longest = 0
    run = 0
    previous: int | None = None
    for day in sorted(days):
        if previous is not None and day - previous == 1:
            run += 1
        else:
            run = 1
        longest = max(longest, run)
        previous = day

    return StreakResult(current=current, longest=max(longest, current))


def compute_heatmap(dates: Iterable[Any], window_days: int, today: date) -> list[HeatmapDay]:
    """Return one ``HeatmapDay`` per day of the trailing window ending at ``today``."""

    start, end = _window_bounds(window_days, today)
    days = _day_numbers(dates)
    return [
        HeatmapDay(day=date.fromordinal(day), satisfied=day in days)
        for day in range(start, end + 1)
    ]


def percentage(numerator: int, denominator: int) -> int:
    """Integer percentage rounded half up; 0 when ``denominator`` is 0."""

    if denominator <= 0:
        return 0
    return (200 * numerator + denominator) // (2 * denominator)


def compute_consistency(dates: Iterable[Any], window_days: int, today: date) -> int:
    """Percentage of days in the trailing window that are present in ``dates``."""

    start, end = _window_bounds(window_days, today)
    if window_days == 0:
        return 0
    hits = sum(1 for day in _day_numbers(dates) if start <= day <= end)
    return percentage(hits, window_days)


def window_start(window_days: int, today: date) -> date:
    """First calendar day of the trailing window ending at ``today``."""

    return today - timedelta(days=max(window_days, 1) - 1)


__all__ = [
    "HeatmapDay",
    "InvalidDateError",
    "StreakResult",
    "compute_consistency",
    "compute_heatmap",
    "compute_streaks",
    "percentage",
    "to_calendar_day",
    "window_start",
]
