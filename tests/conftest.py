"""Shared fixtures for badge engine tests.

All tests run with the engine clock pinned to UTC and a fixed "now" of
2026-10-18 12:00 (a Sunday), passed explicitly unless a test freezes time.
"""

from __future__ import annotations

import os
import time
from datetime import datetime, timedelta, timezone
from typing import Callable, Iterator, Optional

import pytest

import actions as action_catalog
import config
from models import Action, Pet

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def utc_clock(monkeypatch: pytest.MonkeyPatch) -> None:
    """Pin calendar-day math to UTC regardless of the machine's zone."""
    monkeypatch.setattr(config, "TIMEZONE", "UTC")


@pytest.fixture
def paris_device(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """No configured zone; the machine itself runs on Europe/Paris time."""
    if not hasattr(time, "tzset"):
        pytest.skip("process timezone cannot be switched on this platform")
    monkeypatch.setattr(config, "TIMEZONE", "")
    previous = os.environ.get("TZ")
    os.environ["TZ"] = "Europe/Paris"
    time.tzset()
    yield
    if previous is None:
        del os.environ["TZ"]
    else:
        os.environ["TZ"] = previous
    time.tzset()


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def puppy() -> Pet:
    return Pet(id=2, name="Arthas", age_in_months=9)


@pytest.fixture
def adult() -> Pet:
    return Pet(id=1, name="Archie", age_in_months=60)


@pytest.fixture
def senior() -> Pet:
    return Pet(id=3, name="Betty", age_in_months=100)


@pytest.fixture
def make_action() -> Callable[..., Action]:
    """Factory for log entries relative to NOW.

    Points and text default to the action catalog entry.
    """

    def _make(
        action_id: int,
        points: Optional[int] = None,
        *,
        days_ago: int = 0,
        hour: int = 10,
        pet_id: int = 2,
    ) -> Action:
        action_def = action_catalog.get_action(action_id)
        moment = NOW.replace(hour=hour) - timedelta(days=days_ago)
        return Action(
            pet_id=pet_id,
            action_id=action_id,
            points=points if points is not None else action_def.points,
            timestamp=moment.isoformat(),
            action_text=action_def.text if action_def else "",
        )

    return _make
