"""SQLModel repository implementations."""

from .group import SQLModelGroupRepository
from .habit import SQLModelHabitRepository

__all__ = ["SQLModelGroupRepository", "SQLModelHabitRepository"]
