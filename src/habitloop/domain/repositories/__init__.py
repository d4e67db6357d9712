"""Repository protocol definitions for domain layer."""

from .group import GroupRepository
from .habit import HabitRepository

__all__ = ["GroupRepository", "HabitRepository"]
