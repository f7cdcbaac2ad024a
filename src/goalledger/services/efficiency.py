"""Efficiency and in-month streak figures for one activity."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping

from .dates import date_string, days_in_month, is_same_month


@dataclass(frozen=True)
class EfficiencyData:
    """Checked days over resolved days within a span."""

    checked_count: int
    total_days: int
    percent: int


@dataclass(frozen=True)
class DayRange:
    """A validated inclusive span of days within one month."""

    day_from: int
    day_to: int


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def clamp_span(day_from: int, day_to: int, total: int) -> tuple[int, int]:
    """Clamp both endpoints into ``[1, total]`` and order them."""

    start = max(1, min(day_from, total))
    end = max(1, min(day_to, total))
    return min(start, end), max(start, end)


def effective_end(year: int, month: int, end: int, today: date) -> int:
    """Cap ``end`` at today's day when viewing the current month."""

    if is_same_month(today, year, month):
        return min(end, today.day)
    return end


def get_efficiency_data(
    checks: Mapping[str, Any],
    year: int,
    month: int,
    day_from: int,
    day_to: int,
    *,
    today: date,
) -> EfficiencyData:
    """Return checked count, resolved days and rounded percent for a span.

    Future days of the current month are never counted, neither as checked
    nor as total.
    """

    start, end = clamp_span(day_from, day_to, days_in_month(year, month))
    end = effective_end(year, month, end, today)
    if start > end:
        return EfficiencyData(checked_count=0, total_days=0, percent=0)

    total_days = end - start + 1
    checked = sum(1 for day in range(start, end + 1) if checks.get(date_string(year, month, day)))
    percent = 0 if total_days <= 0 else _round_half_up(checked / total_days * 100)
    return EfficiencyData(checked_count=checked, total_days=total_days, percent=percent)


def _whole_number(raw: Any) -> int:
    if isinstance(raw, bool):
        raise ValueError("Use whole numbers")
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if raw.is_integer():
            return int(raw)
        raise ValueError("Use whole numbers")
    text = str(raw).strip()
    try:
        number = float(text)
    except ValueError as exc:
        raise ValueError("Use whole numbers") from exc
    if not number.is_integer():
        raise ValueError("Use whole numbers")
    return int(number)


def validate_span(raw_from: Any, raw_to: Any, total: int) -> DayRange:
    """Validate user supplied span bounds against a month of ``total`` days.

    Raises:
        ValueError: with a message suitable for showing to the user.
    """

    day_from = _whole_number(raw_from)
    day_to = _whole_number(raw_to)
    if day_from < 1 or day_to < 1 or day_from > total or day_to > total:
        raise ValueError(f"Values must be 1..{total}")
    if day_from > day_to:
        raise ValueError("From must be <= To")
    return DayRange(day_from=day_from, day_to=day_to)


def span_current_streak(
    checks: Mapping[str, Any], year: int, month: int, day_from: int, day_to: int, *, today: date
) -> int:
    """Length of the checked run ending at the span's last resolved day."""

    total = days_in_month(year, month)
    last_day = effective_end(year, month, min(day_to, total), today)
    first_day = max(1, min(day_from, total))
    run = 0
    for day in range(last_day, first_day - 1, -1):
        if not checks.get(date_string(year, month, day)):
            break
        run += 1
    return run


def month_max_streak(checks: Mapping[str, Any], year: int, month: int) -> int:
    """Longest checked run inside a single month."""

    longest = 0
    run = 0
    for day in range(1, days_in_month(year, month) + 1):
        if checks.get(date_string(year, month, day)):
            run += 1
            longest = max(longest, run)
        else:
            run = 0
    return longest
