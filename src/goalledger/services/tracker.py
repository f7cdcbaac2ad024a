"""In-memory activity and event state for the month being viewed."""

from __future__ import annotations

import time as _time
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Mapping, Optional

from ..logging_config import get_logger
from ..models.activity import Activity, new_id
from ..models.event import DayEvent, EventsByDay
from ..models.snapshot import MonthSnapshot
from .dates import date_string, days_in_month, is_same_month, parse_date_string, parse_hhmm, to_date_string
from .efficiency import (
    EfficiencyData,
    get_efficiency_data,
    month_max_streak,
    span_current_streak,
    validate_span,
)
from .habits import StreakStats, calculate_all_stats, calculate_global_stats
from .reminders import ReminderScheduler
from .storage import StorageAccessor, StorageMonthSource

logger = get_logger("tracker")


@dataclass
class RemovedActivity:
    """Undo buffer entry for a removed activity."""

    activity: Activity
    index: int
    removed_at: float


@dataclass(frozen=True)
class DayProgress:
    completed: int
    total: int
    percent: int


class GoalTracker:
    """Owns the viewed month's activities and events.

    All statistics are delegated to the efficiency, streak and reminder
    services; every mutation is persisted through the storage accessor.
    """

    def __init__(
        self,
        storage: StorageAccessor,
        *,
        reminders: Optional[ReminderScheduler] = None,
        today_provider: Callable[[], date] = date.today,
        clock: Callable[[], float] = _time.monotonic,
        undo_window: float = 7,
    ):
        self.storage = storage
        self.reminders = reminders
        self.today_provider = today_provider
        self.clock = clock
        self.undo_window = undo_window
        self.history = StorageMonthSource(storage)

        today = today_provider()
        self.year = today.year
        self.month = today.month - 1
        self.activities: list[Activity] = []
        self.events: EventsByDay = {}
        self.day_from = 1
        self.day_to = 1
        self._last_removed: Optional[RemovedActivity] = None
        self.open_month(self.year, self.month)

    # Navigation -------------------------------------------------------------

    @property
    def today(self) -> date:
        return self.today_provider()

    @property
    def total_days(self) -> int:
        return days_in_month(self.year, self.month)

    def open_month(self, year: int, month: int) -> None:
        """Load a month and reset the span to cover it entirely."""

        if not 0 <= month <= 11:
            raise ValueError("Month must be 0..11")
        self.year = year
        self.month = month
        self.activities = self.storage.load_activities(year, month)
        self.events = self.storage.load_events(year, month)
        self._last_removed = None
        self.reset_span()
        self._persist()
        self.arm_today()
        logger.info("Opened %04d-%02d with %d activities", year, month + 1, len(self.activities))

    def go_to_today(self) -> int:
        """Open the current month if needed and return today's day number."""

        today = self.today
        if not is_same_month(today, self.year, self.month):
            self.open_month(today.year, today.month - 1)
        else:
            self.reset_span()
        return today.day

    def date_key(self, day: int) -> str:
        if not 1 <= day <= self.total_days:
            raise ValueError(f"Day must be 1..{self.total_days}")
        return date_string(self.year, self.month, day)

    def is_future_day(self, day: int) -> bool:
        return date(self.year, self.month + 1, day) > self.today

    # Span -------------------------------------------------------------------

    def reset_span(self) -> None:
        self.day_from = 1
        self.day_to = self.total_days

    def apply_span(self, raw_from: Any, raw_to: Any) -> None:
        """Validate and apply a day span; the previous span stays on error."""

        span = validate_span(raw_from, raw_to, self.total_days)
        self.day_from, self.day_to = span.day_from, span.day_to

    def shown_days(self) -> list[int]:
        start, end = sorted((self.day_from, self.day_to))
        return list(range(start, end + 1))

    # Activities -------------------------------------------------------------

    def get_activity(self, activity_id: str) -> Activity:
        for activity in self.activities:
            if activity.id == activity_id:
                return activity
        raise KeyError(activity_id)

    def find_activity(self, name: str) -> Optional[Activity]:
        wanted = name.strip().lower()
        return next((a for a in self.activities if a.name.lower() == wanted), None)

    def add_activity(self, name: str) -> Optional[Activity]:
        """Append a new activity; blank names are ignored."""

        clean = name.strip()
        if not clean:
            return None
        activity = Activity(id=new_id(), name=clean)
        self.activities.append(activity)
        self._persist()
        return activity

    def remove_activity(self, activity_id: str) -> Optional[Activity]:
        for index, activity in enumerate(self.activities):
            if activity.id == activity_id:
                del self.activities[index]
                self._last_removed = RemovedActivity(activity, index, self.clock())
                self._persist()
                return activity
        return None

    def can_undo(self) -> bool:
        removed = self._last_removed
        if removed is None:
            return False
        if self.clock() - removed.removed_at > self.undo_window:
            self._last_removed = None
            return False
        return True

    def undo_remove(self) -> Optional[Activity]:
        """Restore the last removed activity at its former position."""

        removed = self._last_removed
        if removed is None or not self.can_undo():
            return None
        index = min(max(0, removed.index), len(self.activities))
        self.activities.insert(index, removed.activity)
        self._last_removed = None
        self._persist()
        return removed.activity

    def toggle_check(self, activity_id: str, day: int) -> bool:
        """Flip the check of a day; returns the new state.

        Raises:
            ValueError: for future days.
        """

        key = self.date_key(day)
        if self.is_future_day(day):
            raise ValueError("Cannot check a future day")
        activity = self.get_activity(activity_id)
        if activity.checks.get(key):
            del activity.checks[key]
            checked = False
        else:
            activity.checks[key] = True
            checked = True
        self._persist()
        return checked

    # Statistics -------------------------------------------------------------

    def efficiency(self, activity: Activity) -> EfficiencyData:
        return get_efficiency_data(
            activity.checks, self.year, self.month, self.day_from, self.day_to, today=self.today
        )

    def span_streak(self, activity: Activity) -> int:
        return span_current_streak(
            activity.checks, self.year, self.month, self.day_from, self.day_to, today=self.today
        )

    def month_max_streak(self, activity: Activity) -> int:
        return month_max_streak(activity.checks, self.year, self.month)

    def global_stats(self, activity: Activity) -> StreakStats:
        return calculate_global_stats(activity, self.year, self.month, self.history, today=self.today)

    def all_global_stats(self) -> dict[str, StreakStats]:
        return calculate_all_stats(self.activities, self.year, self.month, self.history, today=self.today)

    # Events -----------------------------------------------------------------

    def events_for_day(self, day: int) -> list[DayEvent]:
        return list(self.events.get(self.date_key(day), []))

    def add_event(self, day: int, payload: Mapping[str, Any]) -> DayEvent:
        """Attach a new item to ``day`` from wire-format fields.

        Raises:
            ValueError: when the title is blank, a scheduled item lacks a
                valid start time, ends before it starts, or targets a past day.
        """

        key = self.date_key(day)
        data = dict(payload)
        title = str(data.get("title", "")).strip()
        if not title:
            raise ValueError("Title is required")
        data["title"] = title
        data["id"] = new_id()
        event = DayEvent.from_dict(data)
        if event.is_scheduled:
            self._validate_schedule(key, event)
        self.events.setdefault(key, []).append(event)
        self._events_changed(key)
        return event

    def update_event(self, day: int, event_id: str, patch: Mapping[str, Any]) -> Optional[DayEvent]:
        key = self.date_key(day)
        items = self.events.get(key, [])
        for index, event in enumerate(items):
            if event.id == event_id:
                updated = event.patched(patch)
                if updated.is_scheduled and (
                    updated.from_time != event.from_time or updated.to_time != event.to_time
                ):
                    self._validate_times(updated)
                items[index] = updated
                self._events_changed(key)
                return updated
        return None

    def toggle_event_completion(self, day: int, event_id: str) -> Optional[DayEvent]:
        key = self.date_key(day)
        current = next((e for e in self.events.get(key, []) if e.id == event_id), None)
        if current is None:
            return None
        return self.update_event(day, event_id, {"isCompleted": not current.is_completed})

    def remove_event(self, day: int, event_id: str) -> bool:
        key = self.date_key(day)
        items = self.events.get(key, [])
        remaining = [event for event in items if event.id != event_id]
        if len(remaining) == len(items):
            return False
        if remaining:
            self.events[key] = remaining
        else:
            self.events.pop(key, None)
        if self.reminders is not None:
            self.reminders.cancel(key, event_id)
        self._events_changed(key)
        return True

    def day_progress(self, day: int) -> DayProgress:
        scheduled = [event for event in self.events_for_day(day) if event.is_scheduled]
        completed = sum(1 for event in scheduled if event.is_completed)
        total = len(scheduled)
        percent = 0 if total == 0 else int(completed / total * 100 + 0.5)
        return DayProgress(completed=completed, total=total, percent=percent)

    def _validate_schedule(self, key: str, event: DayEvent) -> None:
        if parse_date_string(key) < self.today:
            raise ValueError("Cannot schedule items on a past day")
        self._validate_times(event)

    @staticmethod
    def _validate_times(event: DayEvent) -> None:
        try:
            starts = parse_hhmm(event.from_time or "")
        except ValueError as exc:
            raise ValueError("Please select a start time.") from exc
        if event.to_time:
            try:
                ends = parse_hhmm(event.to_time)
            except ValueError as exc:
                raise ValueError("End time must be HH:MM") from exc
            if ends < starts:
                raise ValueError("End time cannot be before start time.")

    def _events_changed(self, key: str) -> None:
        self._persist()
        if self.reminders is not None:
            items = self.events.get(key, [])
            # Completed or untimed items keep no reminder
            for event in items:
                if not event.wants_reminder:
                    self.reminders.cancel(key, event.id)
            self.reminders.schedule_reminders(key, items)
            if key == to_date_string(self.today):
                self.reminders.schedule_morning_summary(key, items)

    def arm_today(self) -> None:
        """Arm reminders and the morning summary for today when it is in view."""
        if self.reminders is None:
            return
        today = self.today
        if not is_same_month(today, self.year, self.month):
            return
        key = to_date_string(today)
        items = self.events.get(key, [])
        self.reminders.schedule_reminders(key, items)
        self.reminders.schedule_morning_summary(key, items)

    # Persistence ------------------------------------------------------------

    def snapshot(self) -> MonthSnapshot:
        return MonthSnapshot(
            year=self.year,
            month=self.month,
            activities=[Activity(a.id, a.name, dict(a.checks)) for a in self.activities],
            events={day: list(items) for day, items in self.events.items()},
        )

    def import_snapshot(self, snapshot: MonthSnapshot) -> None:
        """Replace the viewed month with an imported payload and persist it."""

        if not 0 <= snapshot.month <= 11:
            raise ValueError("Invalid file format")
        self.year = snapshot.year
        self.month = snapshot.month
        self.activities = [Activity(a.id, a.name, dict(a.checks)) for a in snapshot.activities]
        self.events = {day: list(items) for day, items in snapshot.events.items()}
        self._last_removed = None
        self.reset_span()
        self._persist()
        self.arm_today()

    def _persist(self) -> None:
        if not self.storage.save_month(self.year, self.month, self.activities, self.events):
            logger.warning("Month %04d-%02d was not fully saved", self.year, self.month + 1)
