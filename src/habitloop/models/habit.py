"""Personal habit tracking data structures."""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import ClassVar, Optional

from sqlalchemy import JSON, Column, UniqueConstraint
from sqlmodel import Field, SQLModel

DEFAULT_COLOR = "#6366f1"
WEEKDAY_CODES = ("MON", "TUE", "WED", "THU", "FRI", "SAT", "SUN")


class HabitType(str, Enum):
    """How a habit is logged each day."""

    CHECKBOX = "CHECKBOX"
    TIMER = "TIMER"
    COUNT = "COUNT"


class Habit(SQLModel, table=True):
    """A user-defined habit the app tracks daily."""

    __tablename__: ClassVar[str] = "habit"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    name: str = Field(nullable=False, max_length=80, index=True)
    category: str = Field(nullable=False, max_length=40)
    habit_type: str = Field(default=HabitType.CHECKBOX.value, max_length=16)
    color: str = Field(default=DEFAULT_COLOR, max_length=16)
    icon: Optional[str] = Field(default=None, max_length=32)
    target_count: Optional[int] = Field(default=None)
    # Weekday codes (MON..SUN); empty means every day.
    schedule_days: list[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    archived: bool = Field(default=False, nullable=False, index=True)
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def is_scheduled_on(self, day: date) -> bool:
        """Return True when the habit should be done on ``day``."""

        if not self.schedule_days:
            return True
        return WEEKDAY_CODES[day.weekday()] in self.schedule_days

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "type": self.habit_type,
            "color": self.color,
            "icon": self.icon,
            "target_count": self.target_count,
            "schedule_days": list(self.schedule_days or []),
            "archived": self.archived,
            "created_at": self.created_at.isoformat(),
        }


class HabitLog(SQLModel, table=True):
    """What the user logged for a habit on one calendar day."""

    __tablename__: ClassVar[str] = "habit_log"
    __table_args__ = (UniqueConstraint("habit_id", "occurred_on", name="uq_habit_log_day"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    habit_id: int = Field(foreign_key="habit.id", nullable=False, index=True)
    user_id: int = Field(foreign_key="user.id", nullable=False, index=True)
    occurred_on: date = Field(nullable=False, index=True)
    completed: bool = Field(default=False, nullable=False)
    duration: Optional[int] = Field(default=None, description="Minutes logged")
    count: Optional[int] = Field(default=None)
    note: Optional[str] = Field(default=None, max_length=500)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "habit_id": self.habit_id,
            "date": self.occurred_on.isoformat(),
            "completed": self.completed,
            "duration": self.duration,
            "count": self.count,
            "note": self.note,
        }
