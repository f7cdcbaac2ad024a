"""Domain records and SQLModel table exports."""

from .activity import Activity, ActivityIndex, new_id
from .event import EVENT_TYPES, DayEvent, EventsByDay, Priority
from .snapshot import MonthSnapshot
from .stored_value import StoredValue

__all__ = [
    "Activity",
    "ActivityIndex",
    "DayEvent",
    "EVENT_TYPES",
    "EventsByDay",
    "MonthSnapshot",
    "Priority",
    "StoredValue",
    "new_id",
]
