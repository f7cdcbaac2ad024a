"""Whole-month payload used for export and import."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .activity import Activity, dump_activities
from .event import EventsByDay, dump_events


@dataclass
class MonthSnapshot:
    """``{year, month, activities, events}`` with a zero-based month."""

    year: int
    month: int
    activities: list[Activity] = field(default_factory=list)
    events: EventsByDay = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "year": self.year,
            "month": self.month,
            "activities": dump_activities(self.activities),
            "events": dump_events(self.events),
        }
