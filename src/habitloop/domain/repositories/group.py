"""Group repository protocol."""

from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ...models.group import Group, GroupHabit, GroupHabitLog, GroupMember, GroupMessage
from ...models.user import User


class GroupRepository(Protocol):
    """Persistence contract for groups, members, shared habits and chat."""

    def get_group(self, group_id: int) -> Optional[Group]:
        ...

    def get_by_join_code(self, join_code: str) -> Optional[Group]:
        ...

    def save_group(self, group: Group) -> Group:
        ...

    def delete_group(self, group_id: int) -> None:
        """Delete a group together with its members, habits, logs and messages."""
        ...

    def get_membership(self, group_id: int, user_id: int) -> Optional[GroupMember]:
        ...

    def list_memberships_for_user(self, user_id: int) -> list[GroupMember]:
        ...

    def list_members(self, group_id: int) -> list[tuple[GroupMember, User]]:
        """Members with their user rows, oldest membership first."""
        ...

    def save_member(self, member: GroupMember) -> GroupMember:
        ...

    def delete_member(self, group_id: int, user_id: int) -> None:
        ...

    def list_habits(self, group_ids: Sequence[int]) -> list[GroupHabit]:
        ...

    def get_habit(self, group_id: int, habit_id: int) -> Optional[GroupHabit]:
        ...

    def save_habit(self, habit: GroupHabit) -> GroupHabit:
        ...

    def delete_habit(self, habit_id: int) -> None:
        ...

    def list_logs(
        self,
        habit_ids: Sequence[int],
        *,
        since: Optional[date] = None,
        until: Optional[date] = None,
        user_id: Optional[int] = None,
    ) -> list[GroupHabitLog]:
        ...

    def get_log(self, habit_id: int, user_id: int, occurred_on: date) -> Optional[GroupHabitLog]:
        ...

    def save_log(self, log: GroupHabitLog) -> GroupHabitLog:
        ...

    def list_messages(
        self, group_id: int, *, after_id: Optional[int], limit: int
    ) -> list[tuple[GroupMessage, User]]:
        ...

    def add_message(self, message: GroupMessage) -> GroupMessage:
        ...
