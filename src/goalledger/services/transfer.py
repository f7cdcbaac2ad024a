"""JSON export/import of a single month."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from ..logging_config import get_logger
from ..models.activity import parse_activities
from ..models.event import parse_events
from ..models.snapshot import MonthSnapshot

logger = get_logger("transfer")


def default_export_name(year: int, month: int) -> str:
    """File name used for a month export, e.g. ``daily-goals-2024-01.json``."""

    return f"daily-goals-{year:04d}-{month + 1:02d}.json"


def export_month(snapshot: MonthSnapshot, output_path: Path) -> Path:
    """Write ``{year, month, activities, events}`` as indented JSON.

    Returns the path written.
    """

    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as handle:
        json.dump(snapshot.to_dict(), handle, indent=2)
    logger.info("Exported %04d-%02d to %s", snapshot.year, snapshot.month + 1, output_path)
    return output_path


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def parse_month_payload(data: Any) -> MonthSnapshot:
    """Validate an import payload.

    ``year`` and ``month`` must be integers (``month`` zero-based) and
    ``activities`` a list; ``events`` is optional. Checks dated outside the
    payload's month are dropped.
    """

    if not (
        isinstance(data, dict)
        and _is_int(data.get("year"))
        and _is_int(data.get("month"))
        and isinstance(data.get("activities"), list)
    ):
        raise ValueError("Invalid file format")
    if not 0 <= data["month"] <= 11:
        raise ValueError("Invalid file format")

    year, month = data["year"], data["month"]
    try:
        activities = [
            activity.within_month(year, month) for activity in parse_activities(data["activities"])
        ]
        events = parse_events(data.get("events") or {})
    except ValueError as exc:
        raise ValueError("Invalid file format") from exc

    return MonthSnapshot(year=year, month=month, activities=activities, events=events)


def import_month(path: Path) -> MonthSnapshot:
    """Read and validate an exported month file."""

    try:
        with path.open(encoding="utf-8") as handle:
            data = json.load(handle)
    except (OSError, json.JSONDecodeError) as exc:
        logger.warning("Import of %s failed: %s", path, exc)
        raise ValueError("Failed to import") from exc
    return parse_month_payload(data)


__all__ = ["default_export_name", "export_month", "import_month", "parse_month_payload"]
