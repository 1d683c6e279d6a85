"""Configuration helpers for Daily Check-In."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from dotenv import load_dotenv


@dataclass(slots=True)
class Settings:
    """Runtime configuration values loaded from environment variables."""

    api_key: str
    database_path: Path
    participants_path: Path
    timezone: ZoneInfo
    past_questions_limit: int = 10
    poll_interval_seconds: int = 3
    capability_secret: Optional[str] = None


def load_settings(env_file: str | None = None) -> Settings:
    """Load settings from the environment, optionally from a specific file."""

    if env_file:
        load_dotenv(env_file)
    else:
        load_dotenv()

    db_path = Path(os.getenv("DATABASE_PATH", "daily_checkin.db")).expanduser()
    participants_path = Path(
        os.getenv("PARTICIPANTS_PATH", "participants.csv")
    ).expanduser()

    api_key = os.getenv("API_KEY")
    if not api_key:
        raise RuntimeError("API_KEY must be configured")

    tz_name = os.getenv("CHECKIN_TIMEZONE", "UTC")
    try:
        tz = ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise RuntimeError(f"CHECKIN_TIMEZONE is not a known timezone: {tz_name}") from exc

    return Settings(
        api_key=api_key,
        database_path=db_path,
        participants_path=participants_path,
        timezone=tz,
        past_questions_limit=_int_env("PAST_QUESTIONS_LIMIT", 10),
        poll_interval_seconds=_int_env("POLL_INTERVAL_SECONDS", 3),
        capability_secret=os.getenv("CAPABILITY_SECRET") or None,
    )


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise RuntimeError(f"{name} must be an integer") from exc
    if value <= 0:
        raise RuntimeError(f"{name} must be positive")
    return value


__all__ = ["Settings", "load_settings"]
