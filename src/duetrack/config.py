# src/duetrack/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Nothing required at import time: a missing API URL only fails the store calls.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

ENV_PREFIX = "DUETRACK"

DEFAULT_TIMEZONE = "Asia/Ho_Chi_Minh"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str
    data_dir: Path

    # ---- Remote store ----
    api_url: str | None
    http_timeout_seconds: float

    # ---- Time ----
    timezone: str | None
    default_timezone: str
    reminder_tick_seconds: float

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "duetrack").strip() or "duetrack"
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path(".local/duetrack"))

        api_url = (_first_env(_k("API_URL"), "API_URL", default="") or "").strip() or None
        http_timeout_seconds = max(0.5, _env_float(_k("HTTP_TIMEOUT_SECONDS"), 10.0))

        timezone = (_env(_k("TIMEZONE"), "") or "").strip() or None
        default_timezone = _env(_k("DEFAULT_TIMEZONE"), DEFAULT_TIMEZONE).strip() or DEFAULT_TIMEZONE
        reminder_tick_seconds = max(1.0, _env_float(_k("REMINDER_TICK_SECONDS"), 60.0))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            data_dir=data_dir,
            api_url=api_url,
            http_timeout_seconds=http_timeout_seconds,
            timezone=timezone,
            default_timezone=default_timezone,
            reminder_tick_seconds=reminder_tick_seconds,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    """Load .env once and return the process-wide Settings."""
    global _SETTINGS
    if _SETTINGS is None:
        load_dotenv(override=False)
        _SETTINGS = Settings.from_env()
    return _SETTINGS
