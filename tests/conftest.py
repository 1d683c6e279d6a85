"""Pytest configuration for Daily Check-In tests."""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest

PROJECT_ROOT = Path(__file__).resolve().parents[1]
PROJECT_ROOT_STR = str(PROJECT_ROOT)

if PROJECT_ROOT_STR not in sys.path:
    sys.path.insert(0, PROJECT_ROOT_STR)

from daily_checkin.config import Settings  # noqa: E402
from daily_checkin.db import Database  # noqa: E402
from daily_checkin.models import Participant, Role  # noqa: E402
from daily_checkin.roster import Roster  # noqa: E402
from daily_checkin.service import CheckInService  # noqa: E402

ALICE = "alice"
BEN = "ben"


class FrozenClock:
    """Callable clock that tests can move forward by hand."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        api_key="test-key",
        database_path=tmp_path / "checkin.db",
        participants_path=tmp_path / "participants.csv",
        timezone=ZoneInfo("UTC"),
        past_questions_limit=10,
        poll_interval_seconds=3,
        capability_secret="test-secret",
    )


@pytest.fixture
def roster() -> Roster:
    return Roster(
        [
            Participant(ALICE, "Alice", Role.ADMIN),
            Participant(BEN, "Ben", Role.USER),
            Participant("visitor", "Visitor", Role.GUEST),
        ],
        secret="test-secret",
    )


@pytest.fixture
def database(settings: Settings) -> Database:
    return Database(settings.database_path)


@pytest.fixture
def clock() -> FrozenClock:
    return FrozenClock(datetime(2024, 1, 2, 9, 30, tzinfo=timezone.utc))


@pytest.fixture
def service(settings: Settings, database: Database, roster: Roster, clock: FrozenClock) -> CheckInService:
    return CheckInService(settings, database, roster, clock=clock)
