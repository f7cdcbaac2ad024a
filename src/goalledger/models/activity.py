"""Activity records tracked by daily boolean completion."""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass, field
from typing import Any, Iterable, Optional

_ID_ALPHABET = string.digits + string.ascii_lowercase


def new_id(length: int = 7) -> str:
    """Return a short random base-36 identifier."""

    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(length))


@dataclass
class Activity:
    """A user-defined habit plus the checks of one month.

    ``checks`` maps ``YYYY-MM-DD`` to ``True``; an absent key means unchecked.
    Only dates inside the month that owns the stored record appear here.
    """

    id: str
    name: str
    checks: dict[str, bool] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Activity":
        if not isinstance(data, dict):
            raise ValueError("Activity record must be an object")
        activity_id = data.get("id")
        if activity_id in (None, ""):
            raise ValueError("Activity record is missing an id")
        raw_checks = data.get("checks") or {}
        if not isinstance(raw_checks, dict):
            raise ValueError(f"Activity {activity_id}: checks must be an object")
        checks = {str(key): True for key, value in raw_checks.items() if value}
        return cls(id=str(activity_id), name=str(data.get("name", "")), checks=checks)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "checks": dict(self.checks)}

    def is_checked(self, date_str: str) -> bool:
        return bool(self.checks.get(date_str))

    def checked_dates(self) -> set[str]:
        return {key for key, value in self.checks.items() if value}

    def within_month(self, year: int, month: int) -> "Activity":
        """Copy keeping only the checks that fall in the zero-based ``month``."""

        prefix = f"{year:04d}-{month + 1:02d}-"
        checks = {key: True for key in self.checks if key.startswith(prefix)}
        return Activity(id=self.id, name=self.name, checks=checks)

    def with_empty_checks(self) -> "Activity":
        """Copy carrying the same identity into a new month."""

        return Activity(id=self.id, name=self.name, checks={})


class ActivityIndex:
    """Explicit id -> activity mapping for one stored month."""

    def __init__(self, activities: Iterable[Activity]):
        self._by_id: dict[str, Activity] = {}
        for activity in activities:
            # First record wins when a month holds duplicate ids
            self._by_id.setdefault(activity.id, activity)

    def get(self, activity_id: str) -> Optional[Activity]:
        return self._by_id.get(activity_id)


def parse_activities(payload: Any) -> list[Activity]:
    """Parse a stored or imported activities array."""

    if not isinstance(payload, list):
        raise ValueError("Activities payload must be a list")
    return [Activity.from_dict(item) for item in payload]


def dump_activities(activities: Iterable[Activity]) -> list[dict[str, Any]]:
    return [activity.to_dict() for activity in activities]
