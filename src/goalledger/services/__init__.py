"""Service module exports."""

from . import dates, efficiency, habits, reminders, storage, tracker, transfer

__all__ = [
    "dates",
    "efficiency",
    "habits",
    "reminders",
    "storage",
    "tracker",
    "transfer",
]
