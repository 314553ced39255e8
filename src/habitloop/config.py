"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

load_dotenv()


def _env_bool(name: str, default: bool = False) -> bool:
    """Interpret environment variable values as booleans."""

    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        return int(value)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {value!r}") from exc


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "HabitLoop"
    DB_FILENAME = "habitloop.db"
    USER_HEADER_DEFAULT = "X-User-Id"
    PENDING_NOTIFICATION_LIMIT = 20

    def __init__(self) -> None:
        self.SECRET_KEY = os.getenv("HABITLOOP_SECRET_KEY", "replace-me")
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("HABITLOOP_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("HABITLOOP_DATABASE_URL", self._build_sqlite_url())
        self.USER_HEADER = os.getenv("HABITLOOP_USER_HEADER", self.USER_HEADER_DEFAULT)
        self.ENABLE_SCHEDULER = _env_bool("HABITLOOP_ENABLE_SCHEDULER", default=False)
        self.REMINDER_HOUR = _env_int("HABITLOOP_REMINDER_HOUR", 8)
        if not 0 <= self.REMINDER_HOUR <= 23:
            raise ValueError("HABITLOOP_REMINDER_HOUR must be between 0 and 23.")
        if not self.DEV_MODE and self.SECRET_KEY == "replace-me":
            raise ValueError("HABITLOOP_SECRET_KEY must be set in non-dev mode.")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite file and logs live."""

        data_root = os.getenv("HABITLOOP_DATA_DIR", "instance")
        path = Path(data_root).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        if self.DATABASE_URL.startswith("sqlite"):
            return {"connect_args": {"check_same_thread": False}}
        return {"pool_pre_ping": True}


class DevConfig(BaseConfig):
    """Development configuration using local SQLite."""

    DEBUG = True
    TESTING = False


class TestConfig(BaseConfig):
    """Configuration used by the test-suite app fixtures."""

    __test__ = False
    DEBUG = False
    TESTING = True

    def __init__(self) -> None:
        super().__init__()
        self.ENABLE_SCHEDULER = False
