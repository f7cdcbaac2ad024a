"""Pytest configuration and shared fixtures for Goal Ledger tests.

Provides an isolated SQLite key-value store per test, a stopped APScheduler
instance, a recording notifier and fixed clocks so that storage, statistics
and reminder logic can be exercised without touching the real data directory.
"""

from __future__ import annotations

import logging
import tempfile
from datetime import date, datetime
from pathlib import Path

import pytest
from apscheduler.schedulers.background import BackgroundScheduler
from sqlmodel import SQLModel, create_engine

from goalledger.infra.database import create_session_factory
from goalledger.infra.repositories import SQLModelKeyValueRepository
from goalledger.logging_config import ROOT_LOGGER_NAME
from goalledger.models import StoredValue  # noqa: F401  registers the table
from goalledger.services.reminders import ReminderScheduler
from goalledger.services.storage import StorageAccessor
from goalledger.services.tracker import GoalTracker

# Tests run against a fixed "today" unless they say otherwise
TODAY = date(2024, 3, 15)
NOW = datetime(2024, 3, 15, 7, 0)


# =============================================================================
# Database Fixtures
# =============================================================================


@pytest.fixture(scope="function")
def db_engine():
    """Create an isolated SQLite database file for each test.

    Yields:
        Engine: SQLModel engine with the ``stored_value`` table created
    """
    with tempfile.NamedTemporaryFile(suffix=".db", delete=False) as f:
        db_path = Path(f.name)

    engine = create_engine(f"sqlite:///{db_path}", echo=False)
    SQLModel.metadata.create_all(engine)

    yield engine

    engine.dispose()
    db_path.unlink(missing_ok=True)


@pytest.fixture(scope="function")
def session_factory(db_engine):
    """Session factory matching the one repositories receive in the app."""

    return create_session_factory(db_engine)


@pytest.fixture
def kv_repo(session_factory) -> SQLModelKeyValueRepository:
    return SQLModelKeyValueRepository(session_factory)


@pytest.fixture
def storage(kv_repo) -> StorageAccessor:
    return StorageAccessor(kv_repo)


# =============================================================================
# Clocks and reminders
# =============================================================================


class FixedClock:
    """Callable clock that tests can move forward."""

    def __init__(self, value):
        self.value = value

    def __call__(self):
        return self.value


class RecordingNotifier:
    """Notifier double that keeps every delivered notification."""

    def __init__(self):
        self.sent: list[tuple[str, str, str | None]] = []

    def notify(self, title, body, *, icon=None):
        self.sent.append((title, body, icon))


@pytest.fixture
def today_clock() -> FixedClock:
    return FixedClock(TODAY)


@pytest.fixture
def now_clock() -> FixedClock:
    return FixedClock(NOW)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def paused_scheduler():
    """APScheduler instance that is never started.

    Jobs added to it stay pending, so tests can inspect them and fire them
    by hand with ``job.func(*job.args)``.
    """

    scheduler = BackgroundScheduler(timezone="UTC")
    yield scheduler
    if scheduler.running:
        scheduler.shutdown(wait=False)


@pytest.fixture
def reminders(notifier, paused_scheduler, now_clock) -> ReminderScheduler:
    return ReminderScheduler(notifier, scheduler=paused_scheduler, clock=now_clock, icon="icon.svg")


@pytest.fixture
def undo_clock() -> FixedClock:
    return FixedClock(1000.0)


@pytest.fixture
def tracker(storage, reminders, today_clock, undo_clock) -> GoalTracker:
    return GoalTracker(
        storage,
        reminders=reminders,
        today_provider=today_clock,
        clock=undo_clock,
    )


# =============================================================================
# Logging isolation
# =============================================================================


@pytest.fixture(autouse=True)
def _reset_app_logger():
    """Drop handlers installed by ``setup_logging`` so streams never leak between tests."""

    yield
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
