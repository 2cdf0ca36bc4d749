"""Shared fixtures: in-memory storage, a fixed clock and a manual feedback timer."""

from datetime import datetime

import pytest

from shiftboard.lib.config import BoardConfig
from shiftboard.lib.context import BoardContext
from shiftboard.storage import MemoryStorage

# Monday
NOW = datetime(2026, 10, 19, 10, 0, 0)


class ManualScheduler:
    """Collects scheduled callbacks instead of starting timers."""

    def __init__(self):
        self.calls = []

    def __call__(self, delay, callback):
        self.calls.append((delay, callback))

    def fire_all(self):
        calls, self.calls = self.calls, []
        for _, callback in calls:
            callback()


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def alerts():
    return []


@pytest.fixture
def ctx(storage, scheduler, alerts):
    return BoardContext.create(
        storage=storage,
        config=BoardConfig(),
        clock=lambda: NOW,
        scheduler=scheduler,
        alert=alerts.append,
    )


@pytest.fixture
def now():
    return NOW
