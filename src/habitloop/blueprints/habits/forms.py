"""Habit form definitions."""

from __future__ import annotations

from typing import Iterable, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...models.habit import WEEKDAY_CODES, HabitType

_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"


def _normalize_schedule(value: str | Iterable[str] | None) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    days: list[str] = []
    for part in value:
        code = str(part).strip().upper()[:3]
        if not code:
            continue
        if code not in WEEKDAY_CODES:
            raise ValueError(f"Unknown weekday: {part!r}")
        if code not in days:
            days.append(code)
    return days


class HabitForm(BaseModel):
    """Payload for creating a habit."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    name: str = Field(min_length=1, max_length=80, description="Short label for the habit")
    category: str = Field(min_length=1, max_length=40)
    type: HabitType = Field(default=HabitType.CHECKBOX)
    color: Optional[str] = Field(default=None, pattern=_COLOR_PATTERN)
    icon: Optional[str] = Field(default=None, max_length=32)
    target_count: Optional[int] = Field(default=None, ge=1, le=100_000)
    schedule_days: list[str] = Field(default_factory=list)

    @field_validator("schedule_days", mode="before")
    @classmethod
    def split_schedule(cls, value):
        """Accept a list or comma-separated weekday codes."""

        return _normalize_schedule(value)


class HabitUpdateForm(BaseModel):
    """Partial update; only fields present in the payload are applied."""

    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")

    name: Optional[str] = Field(default=None, min_length=1, max_length=80)
    category: Optional[str] = Field(default=None, min_length=1, max_length=40)
    type: Optional[HabitType] = None
    color: Optional[str] = Field(default=None, pattern=_COLOR_PATTERN)
    icon: Optional[str] = Field(default=None, max_length=32)
    target_count: Optional[int] = Field(default=None, ge=1, le=100_000)
    schedule_days: Optional[list[str]] = None

    @field_validator("schedule_days", mode="before")
    @classmethod
    def split_schedule(cls, value):
        return _normalize_schedule(value)

    @field_validator("name", "category", "type", "color")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class LogForm(BaseModel):
    """A logging request for today; ``duration`` and ``count`` are deltas."""

    model_config = ConfigDict(extra="ignore")

    completed: Optional[bool] = None
    duration: Optional[int] = Field(default=None, ge=-24 * 60, le=24 * 60)
    count: Optional[int] = Field(default=None, ge=-100_000, le=100_000)
    note: Optional[str] = Field(default=None, max_length=500)


__all__ = ["HabitForm", "HabitUpdateForm", "LogForm"]
