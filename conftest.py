from datetime import datetime, timedelta

import pytest

from gomclick.config import settings
from gomclick.database import initialize_database
from gomclick.library import Library
from gomclick.utils.ui_helpers import OUTPUT_MODE_ENV


class Clock:
    """Settable stand-in for datetime.now."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **delta) -> None:
        self.now = self.now + timedelta(**delta)


@pytest.fixture(autouse=True)
def store(tmp_path, monkeypatch):
    # Every test gets a freshly seeded store and its own session directory
    monkeypatch.setattr(settings, "session_dir", tmp_path / "session")
    monkeypatch.setattr(settings, "simulated_delay_ms", 0)
    monkeypatch.delenv(OUTPUT_MODE_ENV, raising=False)
    return initialize_database()


@pytest.fixture
def clock():
    return Clock(datetime(2024, 4, 10, 9, 0, 0))


@pytest.fixture
def lib(store, clock):
    return Library(store, clock=clock)


@pytest.fixture
def employee(store):
    return store.users["u1"]


@pytest.fixture
def admin(store):
    return store.users["a1"]
