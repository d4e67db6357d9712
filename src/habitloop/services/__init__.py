"""Service layer for HabitLoop."""

from . import analytics, auth, groups, habits, messages, streaks

__all__ = ["analytics", "auth", "groups", "habits", "messages", "streaks"]
