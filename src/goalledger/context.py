"""Application context for dependency injection."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from sqlmodel import Session

from .config import BaseConfig
from .infra.database import bootstrap_database
from .infra.repositories import SQLModelKeyValueRepository
from .services.reminders import LoggingNotifier, Notifier, ReminderScheduler
from .services.storage import StorageAccessor
from .services.tracker import GoalTracker


@dataclass
class AppContext:
    """Centralized application context with services and state."""

    config: BaseConfig
    engine: object
    session_factory: Callable[[], Session]
    key_value_repo: SQLModelKeyValueRepository
    storage: StorageAccessor
    reminders: ReminderScheduler
    tracker: GoalTracker

    def close(self) -> None:
        self.reminders.shutdown()
        self.engine.dispose()  # type: ignore[attr-defined]


def create_app_context(
    config: Optional[BaseConfig] = None, *, notifier: Optional[Notifier] = None
) -> AppContext:
    """Create and initialize the application context.

    The reminder scheduler is created stopped; callers that want timers to
    fire call ``ctx.reminders.start()``.
    """

    if config is None:
        config = BaseConfig()

    engine, session_factory = bootstrap_database(config)
    key_value_repo = SQLModelKeyValueRepository(session_factory)
    storage = StorageAccessor(
        key_value_repo,
        namespace=config.STORAGE_NAMESPACE,
        default_activity_names=config.DEFAULT_ACTIVITY_NAMES,
    )
    reminders = ReminderScheduler(
        notifier or LoggingNotifier(),
        summary_time=config.SUMMARY_TIME,
        icon=config.NOTIFICATION_ICON,
    )
    tracker = GoalTracker(
        storage,
        reminders=reminders,
        undo_window=config.UNDO_WINDOW_SECONDS,
    )

    return AppContext(
        config=config,
        engine=engine,
        session_factory=session_factory,
        key_value_repo=key_value_repo,
        storage=storage,
        reminders=reminders,
        tracker=tracker,
    )
