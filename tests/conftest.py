"""Shared test fixtures for typesprint tests."""

import random
import tempfile
from pathlib import Path

import pytest
from PySide6.QtCore import QCoreApplication

from core.database_adapter import ResultStore
from core.models import AggregateStats, TestMode, TestSettings
from core.scheduler import ManualScheduler
from core.session import TypingSession


class FakeResultStore(ResultStore):
    """In-memory result store that records every call."""

    def __init__(self):
        self.saved = []
        self.attempts = 0
        self.fail_with = None

    def initialize(self) -> None:
        pass

    def close(self) -> None:
        pass

    def save_result(self, user_id, result):
        self.attempts += 1
        if self.fail_with is not None:
            raise self.fail_with
        self.saved.append((user_id, result))
        return result.id

    def get_aggregate_stats(self, user_id):
        return AggregateStats()

    def get_recent_results(self, user_id, limit=10):
        return [r for u, r in reversed(self.saved) if u == user_id][:limit]


@pytest.fixture(scope="session", autouse=True)
def qapp():
    """Qt application instance for QObject and QTimer based code."""
    app = QCoreApplication.instance() or QCoreApplication([])
    yield app


@pytest.fixture
def temp_db_path():
    """Create a temporary database path and clean up afterwards."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir) / "test.db"


@pytest.fixture
def scheduler():
    """Virtual-clock scheduler starting at t=0."""
    return ManualScheduler()


@pytest.fixture
def fake_store():
    return FakeResultStore()


@pytest.fixture
def make_session(scheduler):
    """Factory for sessions on the manual scheduler.

    Pass text= to pin the prompt instead of generating random words.
    """
    def factory(mode=TestMode.WORDS, duration=5, text=None, **kwargs):
        settings = TestSettings(mode=mode, duration=duration)
        if text is not None:
            kwargs["text_source"] = lambda word_count, difficulty: text
        return TypingSession(
            settings=settings,
            scheduler=scheduler,
            rng=random.Random(1234),
            **kwargs,
        )
    return factory
