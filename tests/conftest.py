"""Shared test fixtures for kanban_sync tests."""

import sys
from pathlib import Path

import pytest

# Ensure the repo root (kanban_sync/, kanban_server.py) is importable
sys.path.insert(0, str(Path(__file__).parent.parent))

from kanban_sync.cache import StateCache
from kanban_sync.store import DocumentStore


class FakeTimer:
    """
    Stand-in for threading.Timer that never runs on its own.

    Tests advance time by calling fire(); cancelled timers ignore it.
    """

    created = []

    def __init__(self, interval, function, args=None, kwargs=None):
        self.interval = interval
        self.function = function
        self.args = args or ()
        self.kwargs = kwargs or {}
        self.daemon = False
        self.started = False
        self.cancelled = False
        FakeTimer.created.append(self)

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        """Run the callback as if the interval elapsed (even if cancelled)."""
        self.function(*self.args, **self.kwargs)


@pytest.fixture
def fake_timer():
    FakeTimer.created = []
    yield FakeTimer
    FakeTimer.created = []


@pytest.fixture
def store(tmp_path):
    return DocumentStore(tmp_path / "data" / "state.json")


@pytest.fixture
def cache(tmp_path):
    return StateCache(tmp_path / "cache" / "state-cache.json")
