"""Local reminder notifications for a day's scheduled items."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, time, timedelta
from typing import Callable, Iterable, Optional, Protocol

from apscheduler.jobstores.base import JobLookupError
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.date import DateTrigger

from ..logging_config import get_logger
from ..models.event import DayEvent
from .dates import combine, parse_date_string

logger = get_logger("reminders")

SUMMARY_JOB_ID = "morning_summary"


class Notifier(Protocol):
    """Host notification primitive."""

    def notify(self, title: str, body: str, *, icon: Optional[str] = None) -> None:  # pragma: no cover - interface
        ...


class LoggingNotifier:
    """Writes notifications to the application log."""

    def notify(self, title: str, body: str, *, icon: Optional[str] = None) -> None:
        logger.info("Notification: %s - %s", title, body, extra={"icon": icon})


class CallbackNotifier:
    """Delivers notifications through a host callable, when one is available."""

    def __init__(self, callback: Optional[Callable[..., None]]):
        self.callback = callback

    def notify(self, title: str, body: str, *, icon: Optional[str] = None) -> None:
        if self.callback is None:
            logger.warning("Notifications unavailable; dropped %r", title)
            return
        self.callback(title, body, icon=icon)


@dataclass(frozen=True)
class PendingReminder:
    """Bookkeeping for one armed single-shot reminder."""

    key: str
    job_id: str
    fire_at: datetime
    title: str


def reminder_key(day: str, event_id: str) -> str:
    return f"{day}_{event_id}"


class ReminderScheduler:
    """Arms, re-arms and cancels reminder timers for calendar days.

    Each reminder is a date-triggered APScheduler job. Rescheduling a key
    always removes the previous job before a new one is armed, so an event
    has at most one pending reminder.
    """

    def __init__(
        self,
        notifier: Optional[Notifier] = None,
        *,
        scheduler: Optional[BackgroundScheduler] = None,
        clock: Callable[[], datetime] = datetime.now,
        summary_time: time = time(8, 0),
        icon: Optional[str] = None,
    ):
        self.notifier = notifier or LoggingNotifier()
        self.scheduler = scheduler or BackgroundScheduler()
        self.clock = clock
        self.summary_time = summary_time
        self.icon = icon
        self._pending: dict[str, PendingReminder] = {}
        self._summary_armed = False

    def start(self) -> None:
        """Start the underlying scheduler thread."""
        if self.scheduler.running:
            logger.warning("Reminder scheduler already running")
            return
        self.scheduler.start()
        logger.info("Reminder scheduler started")

    def shutdown(self) -> None:
        """Stop the scheduler; armed reminders are discarded."""
        for key in list(self._pending):
            day, _, event_id = key.partition("_")
            self.cancel(day, event_id)
        if self._summary_armed:
            try:
                self.scheduler.remove_job(SUMMARY_JOB_ID)
            except JobLookupError:
                pass
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Reminder scheduler stopped")
        self._pending.clear()
        self._summary_armed = False

    # Timed reminders --------------------------------------------------------

    def schedule_reminders(self, day: str, events: Iterable[DayEvent]) -> int:
        """Arm reminders for the eligible items of ``day``; returns how many were armed.

        Eligible items have a start time, a notify-before value and are not
        completed. Past-due reminder instants are skipped without notice.
        """

        now = self.clock()
        armed = 0
        for event in events:
            if not event.wants_reminder:
                continue
            key = reminder_key(day, event.id)
            self.cancel(day, event.id)

            try:
                starts_at = combine(day, event.from_time or "")
            except ValueError:
                logger.warning("Skipping reminder for %s: bad start time %r", key, event.from_time)
                continue
            fire_at = starts_at - timedelta(minutes=event.notify_before or 0)
            if fire_at <= now:
                continue

            job_id = f"reminder:{key}"
            self.scheduler.add_job(
                func=self._fire_reminder,
                trigger=DateTrigger(run_date=fire_at, timezone=self.scheduler.timezone),
                args=[key, event.title, event.from_time],
                id=job_id,
                name=f"Reminder {event.title}",
                replace_existing=True,
            )
            self._pending[key] = PendingReminder(key=key, job_id=job_id, fire_at=fire_at, title=event.title)
            armed += 1
            logger.debug("Armed reminder %s for %s", key, fire_at.isoformat())
        return armed

    def cancel(self, day: str, event_id: str) -> bool:
        """Cancel the reminder for one event; returns False if none was pending."""

        pending = self._pending.pop(reminder_key(day, event_id), None)
        if pending is None:
            return False
        try:
            self.scheduler.remove_job(pending.job_id)
        except JobLookupError:
            # Already fired or removed by the scheduler
            pass
        return True

    def cancel_day(self, day: str) -> int:
        prefix = f"{day}_"
        keys = [key for key in self._pending if key.startswith(prefix)]
        for key in keys:
            self.cancel(day, key[len(prefix):])
        return len(keys)

    def pending(self) -> list[PendingReminder]:
        return sorted(self._pending.values(), key=lambda item: (item.fire_at, item.key))

    def pending_keys(self) -> list[str]:
        return [item.key for item in self.pending()]

    def has_pending(self, day: str, event_id: str) -> bool:
        return reminder_key(day, event_id) in self._pending

    def _fire_reminder(self, key: str, title: str, from_time: str) -> None:
        self._pending.pop(key, None)
        self._deliver(f"Upcoming: {title}", f"Starts at {from_time}")

    # Morning summary --------------------------------------------------------

    @property
    def summary_armed(self) -> bool:
        return self._summary_armed

    def schedule_morning_summary(self, day: str, events: Iterable[DayEvent]) -> bool:
        """Arm the once-per-day summary of untimed events; returns True when armed."""

        if self._summary_armed:
            return False

        fire_at = datetime.combine(parse_date_string(day), self.summary_time)
        if fire_at <= self.clock():
            return False

        untimed = [event for event in events if not event.is_scheduled]
        if not untimed:
            return False

        self._summary_armed = True
        self.scheduler.add_job(
            func=self._fire_summary,
            trigger=DateTrigger(run_date=fire_at, timezone=self.scheduler.timezone),
            args=[len(untimed)],
            id=SUMMARY_JOB_ID,
            name="Morning Summary",
            replace_existing=True,
        )
        logger.info("Morning summary for %s armed at %s", day, fire_at.isoformat())
        return True

    def _fire_summary(self, count: int) -> None:
        try:
            self._deliver("Good Morning", f"You have {count} events today.")
        finally:
            self._summary_armed = False

    def _deliver(self, title: str, body: str) -> None:
        try:
            self.notifier.notify(title, body, icon=self.icon)
        except Exception:
            logger.warning("Notification %r could not be delivered", title, exc_info=True)


__all__ = [
    "CallbackNotifier",
    "LoggingNotifier",
    "Notifier",
    "PendingReminder",
    "ReminderScheduler",
    "reminder_key",
]
