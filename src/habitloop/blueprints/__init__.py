"""Blueprint exports."""

from . import analytics, auth, groups, habits, today

__all__ = ["analytics", "auth", "groups", "habits", "today"]
