"""Habit repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol

from ...models.habit import Habit, HabitLog


class HabitRepository(Protocol):
    """Repository for managing habits and their daily logs."""

    def get_by_id(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        """Retrieve a non-archived habit owned by ``user_id``."""
        ...

    def list_active(self, *, user_id: int) -> list[Habit]:
        """List habits that have not been archived."""
        ...

    def list_all(self, *, user_id: int, include_archived: bool = True) -> list[Habit]:
        """List habits including archived ones unless told otherwise."""
        ...

    def create(self, habit: Habit, *, user_id: int) -> Habit:
        ...

    def update(self, habit: Habit, *, user_id: int) -> Habit:
        ...

    def archive(self, habit_id: int, *, user_id: int) -> None:
        """Soft-delete a habit; its logs are kept."""
        ...

    def get_log(self, habit_id: int, occurred_on: date, *, user_id: int) -> Optional[HabitLog]:
        ...

    def get_logs_for_habit(
        self, habit_id: int, start_date: Optional[date], end_date: date, *, user_id: int
    ) -> list[HabitLog]:
        """Get logs for a habit within a date range (open start when None)."""
        ...

    def get_logs_for_user(
        self, start_date: Optional[date], end_date: date, *, user_id: int
    ) -> list[HabitLog]:
        ...

    def save_log(self, log: HabitLog, *, user_id: int) -> HabitLog:
        ...

    def get_current_streak(self, habit_id: int, *, user_id: int, today: date) -> int:
        ...

    def get_longest_streak(self, habit_id: int, *, user_id: int, today: date) -> int:
        ...
