"""SQLModel table exports."""

from .group import Group, GroupHabit, GroupHabitLog, GroupMember, GroupMessage, GroupRole
from .habit import Habit, HabitLog, HabitType
from .user import User

__all__ = [
    "Group",
    "GroupHabit",
    "GroupHabitLog",
    "GroupMember",
    "GroupMessage",
    "GroupRole",
    "Habit",
    "HabitLog",
    "HabitType",
    "User",
]
