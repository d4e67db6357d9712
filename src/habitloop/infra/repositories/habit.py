"""SQLModel implementation of Habit repository."""

from __future__ import annotations

from datetime import date
from typing import Optional

from sqlmodel import select

from ...models.habit import Habit, HabitLog
from ...services.habits import completion_dates
from ...services.streaks import compute_streaks
from ..database import SessionFactory


class SQLModelHabitRepository:
    """SQLModel-based habit repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        """Initialize with a session factory."""
        self.session_factory = session_factory

    def get_by_id(self, habit_id: int, *, user_id: int) -> Optional[Habit]:
        """Retrieve a non-archived habit owned by ``user_id``."""
        with self.session_factory() as session:
            obj = session.exec(
                select(Habit)
                .where(Habit.id == habit_id)
                .where(Habit.user_id == user_id)
                .where(Habit.archived == False)  # noqa: E712
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_active(self, *, user_id: int) -> list[Habit]:
        """List habits that have not been archived, oldest first."""
        return self.list_all(user_id=user_id, include_archived=False)

    def list_all(self, *, user_id: int, include_archived: bool = True) -> list[Habit]:
        """List the user's habits, oldest first, archived ones included by default."""
        with self.session_factory() as session:
            statement = (
                select(Habit)
                .where(Habit.user_id == user_id)
                .order_by(Habit.created_at, Habit.id)  # type: ignore
            )
            if not include_archived:
                statement = statement.where(Habit.archived == False)  # noqa: E712
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def create(self, habit: Habit, *, user_id: int) -> Habit:
        """Create a new habit."""
        with self.session_factory() as session:
            habit.user_id = user_id
            session.add(habit)
            session.commit()
            session.refresh(habit)
            session.expunge(habit)
            return habit

    def update(self, habit: Habit, *, user_id: int) -> Habit:
        """Update an existing habit."""
        with self.session_factory() as session:
            habit.user_id = user_id
            merged = session.merge(habit)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged

    def archive(self, habit_id: int, *, user_id: int) -> None:
        """Soft-delete a habit so its history stays queryable."""
        with self.session_factory() as session:
            habit = session.exec(
                select(Habit).where(Habit.id == habit_id, Habit.user_id == user_id)
            ).first()
            if habit:
                habit.archived = True
                session.add(habit)
                session.commit()

    # Habit log operations
    def get_log(self, habit_id: int, occurred_on: date, *, user_id: int) -> Optional[HabitLog]:
        """Get the log for one habit on one day."""
        with self.session_factory() as session:
            statement = (
                select(HabitLog)
                .where(HabitLog.user_id == user_id)
                .where(HabitLog.habit_id == habit_id)
                .where(HabitLog.occurred_on == occurred_on)
            )
            obj = session.exec(statement).first()
            if obj:
                session.expunge(obj)
            return obj

    def get_logs_for_habit(
        self, habit_id: int, start_date: Optional[date], end_date: date, *, user_id: int
    ) -> list[HabitLog]:
        """Get logs for a habit within a date range, ascending by day."""
        with self.session_factory() as session:
            statement = (
                select(HabitLog)
                .where(HabitLog.user_id == user_id)
                .where(HabitLog.habit_id == habit_id)
                .where(HabitLog.occurred_on <= end_date)
                .order_by(HabitLog.occurred_on)  # type: ignore
            )
            if start_date is not None:
                statement = statement.where(HabitLog.occurred_on >= start_date)
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def get_logs_for_user(
        self, start_date: Optional[date], end_date: date, *, user_id: int
    ) -> list[HabitLog]:
        """Get every log of ``user_id`` within a date range, ascending by day."""
        with self.session_factory() as session:
            statement = (
                select(HabitLog)
                .where(HabitLog.user_id == user_id)
                .where(HabitLog.occurred_on <= end_date)
                .order_by(HabitLog.occurred_on, HabitLog.habit_id)  # type: ignore
            )
            if start_date is not None:
                statement = statement.where(HabitLog.occurred_on >= start_date)
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def save_log(self, log: HabitLog, *, user_id: int) -> HabitLog:
        """Insert or update a habit log (one row per habit and day)."""
        with self.session_factory() as session:
            log.user_id = user_id
            existing = session.exec(
                select(HabitLog)
                .where(HabitLog.user_id == user_id)
                .where(HabitLog.habit_id == log.habit_id)
                .where(HabitLog.occurred_on == log.occurred_on)
            ).first()

            if existing:
                existing.completed = log.completed
                existing.duration = log.duration
                existing.count = log.count
                existing.note = log.note
                log = existing
            session.add(log)
            session.commit()
            session.refresh(log)
            session.expunge(log)
            return log

    def _all_logs(self, habit_id: int, *, user_id: int) -> list[HabitLog]:
        with self.session_factory() as session:
            rows = list(
                session.exec(
                    select(HabitLog)
                    .where(HabitLog.user_id == user_id)
                    .where(HabitLog.habit_id == habit_id)
                ).all()
            )
            session.expunge_all()
            return rows

    def get_current_streak(self, habit_id: int, *, user_id: int, today: date) -> int:
        """Calculate current streak for a habit."""
        logs = self._all_logs(habit_id, user_id=user_id)
        return compute_streaks(completion_dates(logs), today).current

    def get_longest_streak(self, habit_id: int, *, user_id: int, today: date) -> int:
        """Calculate longest streak for a habit."""
        logs = self._all_logs(habit_id, user_id=user_id)
        return compute_streaks(completion_dates(logs), today).longest
