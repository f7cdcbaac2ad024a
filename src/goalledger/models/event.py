"""Per-day scheduled items and untimed events."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping, Optional

EVENT_TYPES = ("Work", "Personal", "Exam", "Health", "General")

# Wire (camelCase) key -> attribute name
_WIRE_FIELDS = {
    "id": "id",
    "title": "title",
    "type": "type",
    "priority": "priority",
    "fromTime": "from_time",
    "toTime": "to_time",
    "notifyBefore": "notify_before",
    "isCompleted": "is_completed",
    "reminderScheduled": "reminder_scheduled",
}


class Priority(str, Enum):
    NORMAL = "Normal"
    IMPORTANT = "Important"


def _optional_int(value: Any, *, field_name: str) -> Optional[int]:
    if value in (None, ""):
        return None
    if isinstance(value, bool):
        raise ValueError(f"{field_name} must be a number")
    try:
        return int(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{field_name} must be a number") from exc


@dataclass
class DayEvent:
    """One item attached to a calendar day.

    An item with ``from_time`` is a scheduled item and may carry a reminder;
    without it the item is an untimed event.
    """

    id: str
    title: str
    type: str = "General"
    priority: Priority = Priority.NORMAL
    from_time: Optional[str] = None
    to_time: Optional[str] = None
    notify_before: Optional[int] = None
    is_completed: bool = False
    reminder_scheduled: bool = False
    extra: dict[str, Any] = field(default_factory=dict, repr=False)

    @property
    def is_scheduled(self) -> bool:
        return bool(self.from_time)

    @property
    def wants_reminder(self) -> bool:
        """True when a timed reminder should exist for this item."""

        return self.is_scheduled and (self.notify_before or 0) > 0 and not self.is_completed

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DayEvent":
        if not isinstance(data, Mapping):
            raise ValueError("Event record must be an object")
        if data.get("id") in (None, ""):
            raise ValueError("Event record is missing an id")

        priority_raw = data.get("priority") or Priority.NORMAL.value
        try:
            priority = Priority(priority_raw)
        except ValueError as exc:
            raise ValueError(f"Unknown priority {priority_raw!r}") from exc

        extra = {key: value for key, value in data.items() if key not in _WIRE_FIELDS}
        return cls(
            id=str(data["id"]),
            title=str(data.get("title", "")),
            type=str(data.get("type") or "General"),
            priority=priority,
            from_time=data.get("fromTime") or None,
            to_time=data.get("toTime") or None,
            notify_before=_optional_int(data.get("notifyBefore"), field_name="notifyBefore"),
            is_completed=bool(data.get("isCompleted", False)),
            reminder_scheduled=bool(data.get("reminderScheduled", False)),
            extra=extra,
        )

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = dict(self.extra)
        payload.update(
            {
                "id": self.id,
                "title": self.title,
                "type": self.type,
                "priority": self.priority.value,
                "fromTime": self.from_time,
                "toTime": self.to_time,
                "notifyBefore": self.notify_before,
                "isCompleted": self.is_completed,
                "reminderScheduled": self.reminder_scheduled,
            }
        )
        return payload

    def patched(self, patch: Mapping[str, Any]) -> "DayEvent":
        """Return a copy with wire-format fields from ``patch`` applied."""

        merged = self.to_dict()
        merged.update(patch)
        merged["id"] = self.id
        return DayEvent.from_dict(merged)


EventsByDay = dict[str, list[DayEvent]]


def parse_events(payload: Any) -> EventsByDay:
    """Parse a ``{YYYY-MM-DD: [event, ...]}`` mapping."""

    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise ValueError("Events payload must be an object keyed by date")
    events: EventsByDay = {}
    for day, items in payload.items():
        if not isinstance(items, list):
            raise ValueError(f"Events for {day} must be a list")
        events[str(day)] = [DayEvent.from_dict(item) for item in items]
    return events


def dump_events(events: EventsByDay) -> dict[str, list[dict[str, Any]]]:
    return {day: [event.to_dict() for event in items] for day, items in events.items()}
