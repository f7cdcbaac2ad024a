"""Per-month JSON records over the local key-value store.

Keys follow ``{namespace}-{YYYY}-{MM}`` for activities and
``{namespace}-events-{YYYY}-{MM}`` for events, where ``MM`` is the one-based
month. Storage problems never propagate: they are logged and the caller gets
``None`` (or the documented default) instead.
"""

from __future__ import annotations

import json
import re
from typing import Any, Iterable, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError

from ..domain.repositories import KeyValueRepository
from ..logging_config import get_logger
from ..models.activity import Activity, dump_activities, new_id, parse_activities
from ..models.event import EventsByDay, dump_events, parse_events
from .dates import previous_month

logger = get_logger("storage")

ACTIVITIES = "activities"
EVENTS = "events"
DEFAULT_NAMESPACE = "daily-goals"
DEFAULT_ACTIVITY_NAMES = ("Meditation", "Exercise", "Study")


def storage_key(kind: str, year: int, month: int, *, namespace: str = DEFAULT_NAMESPACE) -> str:
    """Return the storage key for a zero-based month."""

    month_key = f"{year:04d}-{month + 1:02d}"
    if kind == EVENTS:
        return f"{namespace}-events-{month_key}"
    if kind == ACTIVITIES:
        return f"{namespace}-{month_key}"
    raise ValueError(f"Unknown storage kind: {kind}")


class StorageAccessor:
    """JSON get/set over a key-value repository, scoped per calendar month."""

    def __init__(
        self,
        repository: KeyValueRepository,
        *,
        namespace: str = DEFAULT_NAMESPACE,
        default_activity_names: Sequence[str] = DEFAULT_ACTIVITY_NAMES,
    ):
        self.repository = repository
        self.namespace = namespace
        self.default_activity_names = tuple(default_activity_names)
        self._activities_key = re.compile(rf"^{re.escape(namespace)}-(\d{{4}})-(\d{{2}})$")

    def key(self, kind: str, year: int, month: int) -> str:
        return storage_key(kind, year, month, namespace=self.namespace)

    # Raw JSON access -------------------------------------------------------

    def load(self, key: str) -> Optional[Any]:
        """Return the parsed JSON stored under ``key``, or None."""

        try:
            raw = self.repository.get(key)
        except SQLAlchemyError as exc:
            logger.warning("Storage unavailable while reading %s: %s", key, exc)
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError) as exc:
            logger.warning("Ignoring malformed JSON under %s: %s", key, exc)
            return None

    def save(self, key: str, value: Any) -> bool:
        """Write ``value`` as JSON text; returns False when the write failed."""

        try:
            text = json.dumps(value)
        except (TypeError, ValueError) as exc:
            logger.warning("Cannot serialise value for %s: %s", key, exc)
            return False
        try:
            self.repository.set(key, text)
        except SQLAlchemyError as exc:
            logger.warning("Storage unavailable while writing %s: %s", key, exc)
            return False
        return True

    # Month records ----------------------------------------------------------

    def read_activities(self, year: int, month: int) -> Optional[list[Activity]]:
        """Return the stored activities of one month, or None if absent/unreadable."""

        key = self.key(ACTIVITIES, year, month)
        payload = self.load(key)
        if payload is None:
            return None
        try:
            activities = parse_activities(payload)
        except ValueError as exc:
            logger.warning("Ignoring invalid activities record %s: %s", key, exc)
            return None
        # A record only holds checks of its own month
        return [activity.within_month(year, month) for activity in activities]

    def load_activities(self, year: int, month: int) -> list[Activity]:
        """Load a month's activities, inheriting identities from the previous month.

        When the month has no record, the previous month's activities are
        carried over with the same ids and names and empty checks. With no
        history at all a default set with fresh ids is returned.
        """

        current = self.read_activities(year, month)
        if current is not None:
            return current

        prev_year, prev_month = previous_month(year, month)
        previous = self.read_activities(prev_year, prev_month)
        if previous is not None:
            logger.info(
                "Inheriting %d activities from %04d-%02d", len(previous), prev_year, prev_month + 1
            )
            return [activity.with_empty_checks() for activity in previous]

        return [Activity(id=new_id(), name=name) for name in self.default_activity_names]

    def load_events(self, year: int, month: int) -> EventsByDay:
        key = self.key(EVENTS, year, month)
        payload = self.load(key)
        if payload is None:
            return {}
        try:
            return parse_events(payload)
        except ValueError as exc:
            logger.warning("Ignoring invalid events record %s: %s", key, exc)
            return {}

    def save_activities(self, year: int, month: int, activities: Iterable[Activity]) -> bool:
        return self.save(self.key(ACTIVITIES, year, month), dump_activities(activities))

    def save_events(self, year: int, month: int, events: EventsByDay) -> bool:
        return self.save(self.key(EVENTS, year, month), dump_events(events))

    def save_month(
        self, year: int, month: int, activities: Iterable[Activity], events: EventsByDay
    ) -> bool:
        saved_activities = self.save_activities(year, month, activities)
        saved_events = self.save_events(year, month, events)
        return saved_activities and saved_events

    def list_activity_months(self) -> list[tuple[int, int]]:
        """Return every ``(year, zero_based_month)`` with a stored activities record."""

        try:
            keys = self.repository.list_keys(f"{self.namespace}-")
        except SQLAlchemyError as exc:
            logger.warning("Storage unavailable while listing months: %s", exc)
            return []

        months = []
        for key in keys:
            match = self._activities_key.match(key)
            if not match:
                continue
            month_number = int(match.group(2))
            if 1 <= month_number <= 12:
                months.append((int(match.group(1)), month_number - 1))
        return sorted(months)


class StorageMonthSource:
    """Adapts a StorageAccessor to the aggregator's month data-source protocol."""

    def __init__(self, accessor: StorageAccessor):
        self.accessor = accessor

    def list_activity_months(self) -> list[tuple[int, int]]:
        return self.accessor.list_activity_months()

    def load_activities(self, year: int, month: int) -> list[Activity]:
        return self.accessor.read_activities(year, month) or []
