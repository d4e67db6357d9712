"""Group form definitions."""

from __future__ import annotations

from datetime import date
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...models.group import GroupRole
from ...models.habit import HabitType

_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"


class _Form(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="ignore")


class GroupHabitForm(_Form):
    name: str = Field(min_length=1, max_length=80)
    type: HabitType = HabitType.CHECKBOX
    color: Optional[str] = Field(default=None, pattern=_COLOR_PATTERN)
    target_count: Optional[int] = Field(default=None, ge=1, le=100_000)


class GroupHabitUpdateForm(_Form):
    name: Optional[str] = Field(default=None, min_length=1, max_length=80)
    type: Optional[HabitType] = None
    color: Optional[str] = Field(default=None, pattern=_COLOR_PATTERN)
    target_count: Optional[int] = Field(default=None, ge=1, le=100_000)

    @field_validator("name", "type", "color")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class GroupForm(_Form):
    """Payload for creating a group together with its first habit."""

    name: str = Field(min_length=1, max_length=80)
    description: Optional[str] = Field(default=None, max_length=400)
    emoji: Optional[str] = Field(default=None, max_length=16)
    color: Optional[str] = Field(default=None, pattern=_COLOR_PATTERN)
    end_date: Optional[date] = None
    habit: GroupHabitForm


class GroupUpdateForm(_Form):
    name: Optional[str] = Field(default=None, min_length=1, max_length=80)
    description: Optional[str] = Field(default=None, max_length=400)
    emoji: Optional[str] = Field(default=None, min_length=1, max_length=16)
    color: Optional[str] = Field(default=None, pattern=_COLOR_PATTERN)
    end_date: Optional[date] = None

    @field_validator("name", "emoji", "color")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value


class JoinForm(_Form):
    join_code: str = Field(min_length=1, max_length=16)


class RoleForm(_Form):
    role: GroupRole

    @field_validator("role")
    @classmethod
    def assignable(cls, value: GroupRole) -> GroupRole:
        if value is GroupRole.OWNER:
            raise ValueError("Role must be ADMIN or MEMBER")
        return value


class GroupLogForm(_Form):
    """Log today's progress on one shared habit; amounts are deltas."""

    habit_id: int
    completed: Optional[bool] = None
    duration: Optional[int] = Field(default=None, ge=-24 * 60, le=24 * 60)
    count: Optional[int] = Field(default=None, ge=-100_000, le=100_000)


class MessageForm(BaseModel):
    text: str = ""


__all__ = [
    "GroupForm",
    "GroupHabitForm",
    "GroupHabitUpdateForm",
    "GroupLogForm",
    "GroupUpdateForm",
    "JoinForm",
    "MessageForm",
    "RoleForm",
]
