"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from datetime import date, datetime
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    """Read a positive integer from the environment, falling back to ``default``."""

    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    parsed = int(value)
    if parsed < 1:
        raise ValueError(f"{name} must be a positive integer, got {parsed}")
    return parsed


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "HabitLoop"
    DB_FILENAME = "habitloop.db"
    TESTING = False
    JSON_SORT_KEYS = False

    def __init__(self) -> None:
        self.SECRET_KEY = os.getenv("HABITLOOP_SECRET_KEY", "replace-me")
        self.DEV_MODE = _env_bool("HABITLOOP_DEV_MODE", default=True)
        self.DATA_DIR = self._resolve_data_dir()
        self.DATABASE_URL = os.getenv("HABITLOOP_DATABASE_URL", self._build_sqlite_url())
        self.TIMEZONE = os.getenv("HABITLOOP_TIMEZONE", "UTC")
        self.HEATMAP_DAYS = _env_int("HABITLOOP_HEATMAP_DAYS", 90)
        self.GROUP_STATS_DAYS = _env_int("HABITLOOP_GROUP_STATS_DAYS", 30)
        if not self.DEV_MODE and self.SECRET_KEY == "replace-me":
            raise ValueError("HABITLOOP_SECRET_KEY must be set in non-dev mode.")
        try:
            self._zone = ZoneInfo(self.TIMEZONE)
        except ZoneInfoNotFoundError as exc:
            raise ValueError(f"Unknown HABITLOOP_TIMEZONE: {self.TIMEZONE}") from exc

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("HABITLOOP_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {"pool_pre_ping": True}

    def local_today(self) -> date:
        """Return the current calendar day in the configured time zone.

        Request handlers call this once and pass the result down; services
        never read the clock themselves.
        """

        return datetime.now(self._zone).date()


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True


class TestConfig(BaseConfig):
    """Configuration used by the test-suite; in-memory friendly and quiet."""

    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.SECRET_KEY = "test-secret"
