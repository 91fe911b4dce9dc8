"""Root conftest — shared test configuration.

Invariants:
    - Settings cache cleared around every test (env overrides never leak)
    - Clock fixtures patch field_setters.current_time, the single clock
"""

import os
from datetime import datetime, timedelta, timezone

import pytest

from fieldhooks.config import get_settings
from fieldhooks.core import field_setters

# Ensure a developer .env never changes test expectations
os.environ.setdefault("FIELDHOOKS_USE_UTC", "true")
os.environ.setdefault("FIELDHOOKS_UPDATE_TIME_AS_EPOCH_MILLIS", "true")

FIXED_NOW = datetime(2024, 5, 1, 12, 0, 0, 250000, tzinfo=timezone.utc)


class TickingClock:
    """Clock that moves forward only when told to."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> datetime:
        self.now = self.now + timedelta(seconds=seconds)
        return self.now


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def frozen_clock(monkeypatch):
    monkeypatch.setattr(field_setters, "current_time", lambda: FIXED_NOW)
    return FIXED_NOW


@pytest.fixture
def ticking_clock(monkeypatch):
    clock = TickingClock(FIXED_NOW)
    monkeypatch.setattr(field_setters, "current_time", clock)
    return clock


@pytest.fixture
def millis():
    """Epoch millis (whole seconds) of a datetime, as integer fields store it."""
    return lambda dt: int(dt.timestamp()) * 1000
