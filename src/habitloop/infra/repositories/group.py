"""SQLModel implementation of Group repository."""

from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

from sqlmodel import select

from ...models.group import Group, GroupHabit, GroupHabitLog, GroupMember, GroupMessage
from ...models.user import User
from ..database import SessionFactory


class SQLModelGroupRepository:
    """SQLModel-based group repository implementation."""

    def __init__(self, session_factory: SessionFactory):
        self.session_factory = session_factory

    def _save(self, obj):
        with self.session_factory() as session:
            merged = session.merge(obj)
            session.commit()
            session.refresh(merged)
            session.expunge(merged)
            return merged

    # Groups
    def get_group(self, group_id: int) -> Optional[Group]:
        with self.session_factory() as session:
            obj = session.get(Group, group_id)
            if obj:
                session.expunge(obj)
            return obj

    def get_by_join_code(self, join_code: str) -> Optional[Group]:
        with self.session_factory() as session:
            obj = session.exec(select(Group).where(Group.join_code == join_code)).first()
            if obj:
                session.expunge(obj)
            return obj

    def save_group(self, group: Group) -> Group:
        return self._save(group)

    def delete_group(self, group_id: int) -> None:
        """Delete a group and everything hanging off it."""
        with self.session_factory() as session:
            habits = list(session.exec(select(GroupHabit).where(GroupHabit.group_id == group_id)).all())
            habit_ids = [habit.id for habit in habits]
            doomed: list = []
            if habit_ids:
                doomed.extend(
                    session.exec(
                        select(GroupHabitLog).where(GroupHabitLog.habit_id.in_(habit_ids))  # type: ignore[union-attr]
                    ).all()
                )
            doomed.extend(habits)
            doomed.extend(session.exec(select(GroupMessage).where(GroupMessage.group_id == group_id)).all())
            doomed.extend(session.exec(select(GroupMember).where(GroupMember.group_id == group_id)).all())
            for row in doomed:
                session.delete(row)
            group = session.get(Group, group_id)
            if group:
                session.delete(group)
            session.commit()

    # Members
    def get_membership(self, group_id: int, user_id: int) -> Optional[GroupMember]:
        with self.session_factory() as session:
            obj = session.exec(
                select(GroupMember)
                .where(GroupMember.group_id == group_id)
                .where(GroupMember.user_id == user_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def list_memberships_for_user(self, user_id: int) -> list[GroupMember]:
        """Memberships of ``user_id``, most recently joined first."""
        with self.session_factory() as session:
            rows = list(
                session.exec(
                    select(GroupMember)
                    .where(GroupMember.user_id == user_id)
                    .order_by(GroupMember.joined_at.desc(), GroupMember.id.desc())  # type: ignore[union-attr]
                ).all()
            )
            session.expunge_all()
            return rows

    def list_members(self, group_id: int) -> list[tuple[GroupMember, User]]:
        with self.session_factory() as session:
            rows = list(
                session.exec(
                    select(GroupMember, User)
                    .where(GroupMember.group_id == group_id)
                    .where(GroupMember.user_id == User.id)
                    .order_by(GroupMember.joined_at, GroupMember.id)  # type: ignore[arg-type]
                ).all()
            )
            session.expunge_all()
            return [(member, user) for member, user in rows]

    def save_member(self, member: GroupMember) -> GroupMember:
        return self._save(member)

    def delete_member(self, group_id: int, user_id: int) -> None:
        with self.session_factory() as session:
            member = session.exec(
                select(GroupMember)
                .where(GroupMember.group_id == group_id)
                .where(GroupMember.user_id == user_id)
            ).first()
            if member:
                session.delete(member)
                session.commit()

    # Shared habits
    def list_habits(self, group_ids: Sequence[int]) -> list[GroupHabit]:
        if not group_ids:
            return []
        with self.session_factory() as session:
            rows = list(
                session.exec(
                    select(GroupHabit)
                    .where(GroupHabit.group_id.in_(group_ids))  # type: ignore[union-attr]
                    .order_by(GroupHabit.id)  # type: ignore[arg-type]
                ).all()
            )
            session.expunge_all()
            return rows

    def get_habit(self, group_id: int, habit_id: int) -> Optional[GroupHabit]:
        with self.session_factory() as session:
            obj = session.exec(
                select(GroupHabit)
                .where(GroupHabit.id == habit_id)
                .where(GroupHabit.group_id == group_id)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def save_habit(self, habit: GroupHabit) -> GroupHabit:
        return self._save(habit)

    def delete_habit(self, habit_id: int) -> None:
        with self.session_factory() as session:
            for log in session.exec(select(GroupHabitLog).where(GroupHabitLog.habit_id == habit_id)).all():
                session.delete(log)
            habit = session.get(GroupHabit, habit_id)
            if habit:
                session.delete(habit)
            session.commit()

    # Logs
    def list_logs(
        self,
        habit_ids: Sequence[int],
        *,
        since: Optional[date] = None,
        until: Optional[date] = None,
        user_id: Optional[int] = None,
    ) -> list[GroupHabitLog]:
        if not habit_ids:
            return []
        with self.session_factory() as session:
            statement = (
                select(GroupHabitLog)
                .where(GroupHabitLog.habit_id.in_(habit_ids))  # type: ignore[union-attr]
                .order_by(GroupHabitLog.occurred_on, GroupHabitLog.id)  # type: ignore[arg-type]
            )
            if since is not None:
                statement = statement.where(GroupHabitLog.occurred_on >= since)
            if until is not None:
                statement = statement.where(GroupHabitLog.occurred_on <= until)
            if user_id is not None:
                statement = statement.where(GroupHabitLog.user_id == user_id)
            rows = list(session.exec(statement).all())
            session.expunge_all()
            return rows

    def get_log(self, habit_id: int, user_id: int, occurred_on: date) -> Optional[GroupHabitLog]:
        with self.session_factory() as session:
            obj = session.exec(
                select(GroupHabitLog)
                .where(GroupHabitLog.habit_id == habit_id)
                .where(GroupHabitLog.user_id == user_id)
                .where(GroupHabitLog.occurred_on == occurred_on)
            ).first()
            if obj:
                session.expunge(obj)
            return obj

    def save_log(self, log: GroupHabitLog) -> GroupHabitLog:
        return self._save(log)

    # Chat
    def list_messages(
        self, group_id: int, *, after_id: Optional[int], limit: int
    ) -> list[tuple[GroupMessage, User]]:
        """Messages in ascending id order.

        With ``after_id`` the oldest ``limit`` messages newer than it are
        returned; otherwise the newest ``limit`` messages.
        """
        with self.session_factory() as session:
            statement = (
                select(GroupMessage, User)
                .where(GroupMessage.group_id == group_id)
                .where(GroupMessage.user_id == User.id)
            )
            if after_id is not None:
                statement = (
                    statement.where(GroupMessage.id > after_id)
                    .order_by(GroupMessage.id)  # type: ignore[arg-type]
                    .limit(limit)
                )
                rows = list(session.exec(statement).all())
            else:
                statement = statement.order_by(GroupMessage.id.desc()).limit(limit)  # type: ignore[union-attr]
                rows = list(reversed(session.exec(statement).all()))
            session.expunge_all()
            return [(message, user) for message, user in rows]

    def add_message(self, message: GroupMessage) -> GroupMessage:
        with self.session_factory() as session:
            session.add(message)
            session.commit()
            session.refresh(message)
            session.expunge(message)
            return message
