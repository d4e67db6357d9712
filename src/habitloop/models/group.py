"""Groups that track shared habits together."""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import ClassVar, Optional

from sqlalchemy import UniqueConstraint
from sqlmodel import Field, SQLModel

from .habit import DEFAULT_COLOR, HabitType

DEFAULT_EMOJI = "🎯"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class GroupRole(str, Enum):
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"


MANAGER_ROLES = frozenset({GroupRole.OWNER.value, GroupRole.ADMIN.value})


class Group(SQLModel, table=True):
    """A social group with a join code and shared habits."""

    __tablename__: ClassVar[str] = "habit_group"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(nullable=False, max_length=80)
    description: Optional[str] = Field(default=None, max_length=400)
    emoji: str = Field(default=DEFAULT_EMOJI, max_length=16)
    color: str = Field(default=DEFAULT_COLOR, max_length=16)
    join_code: str = Field(nullable=False, unique=True, index=True, max_length=8)
    end_date: Optional[date] = Field(default=None)
    owner_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "emoji": self.emoji,
            "color": self.color,
            "join_code": self.join_code,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "owner_id": self.owner_id,
            "created_at": self.created_at.isoformat(),
        }


class GroupMember(SQLModel, table=True):
    __tablename__: ClassVar[str] = "group_member"
    __table_args__ = (UniqueConstraint("group_id", "user_id", name="uq_group_member"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    group_id: int = Field(foreign_key="habit_group.id", nullable=False, index=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    role: str = Field(default=GroupRole.MEMBER.value, max_length=16)
    joined_at: datetime = Field(default_factory=_utcnow, nullable=False)

    @property
    def can_manage(self) -> bool:
        return self.role in MANAGER_ROLES


class GroupHabit(SQLModel, table=True):
    """A habit every member of a group tracks."""

    __tablename__: ClassVar[str] = "group_habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    group_id: int = Field(foreign_key="habit_group.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=80)
    habit_type: str = Field(default=HabitType.CHECKBOX.value, max_length=16)
    color: str = Field(default=DEFAULT_COLOR, max_length=16)
    target_count: Optional[int] = Field(default=None)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "group_id": self.group_id,
            "name": self.name,
            "type": self.habit_type,
            "color": self.color,
            "target_count": self.target_count,
        }


class GroupHabitLog(SQLModel, table=True):
    __tablename__: ClassVar[str] = "group_habit_log"
    __table_args__ = (
        UniqueConstraint("habit_id", "user_id", "occurred_on", name="uq_group_habit_log_day"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    habit_id: int = Field(foreign_key="group_habit.id", nullable=False, index=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    occurred_on: date = Field(nullable=False, index=True)
    completed: bool = Field(default=False, nullable=False)
    duration: Optional[int] = Field(default=None)
    count: Optional[int] = Field(default=None)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "habit_id": self.habit_id,
            "user_id": self.user_id,
            "date": self.occurred_on.isoformat(),
            "completed": self.completed,
            "duration": self.duration,
            "count": self.count,
        }


class GroupMessage(SQLModel, table=True):
    """A chat line posted to a group."""

    __tablename__: ClassVar[str] = "group_message"

    id: Optional[int] = Field(default=None, primary_key=True)
    group_id: int = Field(foreign_key="habit_group.id", nullable=False, index=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    text: str = Field(nullable=False, max_length=2000)
    created_at: datetime = Field(default_factory=_utcnow, nullable=False, index=True)
