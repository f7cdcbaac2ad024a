"""Application configuration objects and helpers."""

from __future__ import annotations

import os
from datetime import time
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


def _parse_clock(value: str, *, setting: str) -> time:
    """Parse an ``HH:MM`` setting into a ``time``."""

    try:
        hour_text, minute_text = value.strip().split(":")
        return time(int(hour_text), int(minute_text))
    except ValueError as exc:
        raise ValueError(f"{setting} must be HH:MM, got {value!r}") from exc


class BaseConfig:
    """Base configuration shared across environments."""

    APP_NAME = "GoalLedger"
    DB_FILENAME = "goalledger.db"
    STORAGE_NAMESPACE = "daily-goals"
    DEFAULT_ACTIVITY_NAMES = ("Meditation", "Exercise", "Study")
    UNDO_WINDOW_SECONDS = 7

    def __init__(self) -> None:
        self.DATA_DIR = self._resolve_data_dir()
        self.DEV_MODE = _env_bool("GOALLEDGER_DEV_MODE", default=True)
        self.DATABASE_URL = os.getenv("GOALLEDGER_DATABASE_URL", self._build_sqlite_url())
        self.SUMMARY_TIME = _parse_clock(
            os.getenv("GOALLEDGER_SUMMARY_TIME", "08:00"), setting="GOALLEDGER_SUMMARY_TIME"
        )
        self.NOTIFICATION_ICON = os.getenv("GOALLEDGER_NOTIFICATION_ICON", "favicon.svg")

    def _resolve_data_dir(self) -> Path:
        """Return the directory where the SQLite store and logs live."""

        data_root = os.getenv("GOALLEDGER_DATA_DIR", "instance")
        base_path = Path(data_root).expanduser()
        try:
            path = base_path.resolve()
            path.mkdir(parents=True, exist_ok=True)
            return path
        except PermissionError:
            # Protected install locations fall back to user-local storage.
            local_data = os.getenv("XDG_DATA_HOME") or (Path.home() / ".local" / "share")
            fallback_path = Path(local_data).expanduser() / self.APP_NAME
            fallback_path.mkdir(parents=True, exist_ok=True)
            return fallback_path.resolve()

    def _build_sqlite_url(self) -> str:
        """Construct the default SQLite URL inside the data directory."""

        db_path = self.DATA_DIR / self.DB_FILENAME
        return f"sqlite:///{db_path}"

    def sqlalchemy_engine_options(self) -> dict[str, Any]:
        """Expose engine kwargs for SQLModel to consume."""

        connect_args: dict[str, Any] = {"check_same_thread": False}
        return {"connect_args": connect_args}
