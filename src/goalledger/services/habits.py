"""Habit streak helpers spanning every stored month."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Iterable, Sequence

from ..domain.repositories import MonthlyActivitySource
from ..logging_config import get_logger
from ..models.activity import Activity, ActivityIndex
from .dates import parse_date_string, yesterday

logger = get_logger("habits")

CALENDAR = "calendar"
TOLERANT = "tolerant"

_DAY_SECONDS = 24 * 60 * 60
_HOUR_SECONDS = 60 * 60


@dataclass(frozen=True)
class StreakStats:
    """All-time streak figures for one activity."""

    current: int
    max: int


def load_history(
    source: MonthlyActivitySource, *, exclude: tuple[int, int] | None = None
) -> list[ActivityIndex]:
    """Read every stored month once, indexed by activity id."""

    history = []
    for year, month in source.list_activity_months():
        if exclude is not None and (year, month) == exclude:
            continue
        history.append(ActivityIndex(source.load_activities(year, month)))
    return history


def collect_check_dates(activity: Activity, history: Iterable[ActivityIndex]) -> set[str]:
    """Union the in-memory checks with the same activity's checks in other months."""

    dates = activity.checked_dates()
    for index in history:
        past = index.get(activity.id)
        if past is not None:
            dates |= past.checked_dates()
    return dates


def _parse_dates(date_strings: Iterable[str]) -> list[date]:
    parsed = []
    for text in date_strings:
        try:
            parsed.append(parse_date_string(text))
        except ValueError:
            logger.warning("Skipping malformed check date %r", text)
    return sorted(set(parsed))


def compute_streaks(days: Iterable[date], *, today: date) -> tuple[int, int]:
    """Return (current_streak, longest_streak) using calendar-day adjacency.

    The current streak is the final run, and only counts while its last day
    is today or yesterday (or later).
    """

    ordered = sorted(set(days))
    if not ordered:
        return 0, 0

    longest = 0
    run = 0
    last_day: date | None = None
    for d in ordered:
        if last_day is None or d == last_day + timedelta(days=1):
            run += 1
        else:
            longest = max(longest, run)
            run = 1
        last_day = d
    longest = max(longest, run)

    current = run if ordered[-1] >= yesterday(today) else 0
    return current, longest


def compute_streaks_tolerant(days: Sequence[date], *, today: date) -> tuple[int, int]:
    """Streak walk over local-midnight timestamps with a one hour slack.

    Gaps up to one day plus one hour count as consecutive so that daylight
    saving shifts do not split a run. Kept for comparison with
    ``compute_streaks``; the calendar rule is the default.
    """

    stamps = sorted(datetime.combine(d, time()).timestamp() for d in set(days))
    if not stamps:
        return 0, 0

    longest = 0
    run = 0
    last_stamp: float | None = None
    for stamp in stamps:
        if last_stamp is None:
            run = 1
        elif stamp - last_stamp <= _DAY_SECONDS + _HOUR_SECONDS:
            run += 1
        else:
            longest = max(longest, run)
            run = 1
        last_stamp = stamp
    longest = max(longest, run)

    today_stamp = datetime.combine(today, time()).timestamp()
    yesterday_stamp = datetime.combine(yesterday(today), time()).timestamp()
    latest = stamps[-1]
    alive = latest == today_stamp or latest >= yesterday_stamp - _HOUR_SECONDS
    return (run if alive else 0), longest


def _streaks_for(dates: set[str], *, today: date, rule: str) -> StreakStats:
    days = _parse_dates(dates)
    if rule == CALENDAR:
        current, longest = compute_streaks(days, today=today)
    elif rule == TOLERANT:
        current, longest = compute_streaks_tolerant(days, today=today)
    else:
        raise ValueError(f"Unknown streak rule: {rule}")
    return StreakStats(current=current, max=longest)


def calculate_global_stats(
    activity: Activity,
    year: int,
    month: int,
    source: MonthlyActivitySource,
    *,
    today: date,
    rule: str = CALENDAR,
) -> StreakStats:
    """All-time current and longest streak for one activity.

    ``activity`` carries the live checks of the viewed month ``(year, month)``;
    that month's stored record is skipped in favour of it. Every call rescans
    the whole history, so callers should not invoke it per keystroke.
    """

    history = load_history(source, exclude=(year, month))
    return _streaks_for(collect_check_dates(activity, history), today=today, rule=rule)


def calculate_all_stats(
    activities: Sequence[Activity],
    year: int,
    month: int,
    source: MonthlyActivitySource,
    *,
    today: date,
    rule: str = CALENDAR,
) -> dict[str, StreakStats]:
    """Streak figures for several activities from a single history scan."""

    history = load_history(source, exclude=(year, month))
    return {
        activity.id: _streaks_for(collect_check_dates(activity, history), today=today, rule=rule)
        for activity in activities
    }


__all__ = [
    "CALENDAR",
    "TOLERANT",
    "StreakStats",
    "calculate_all_stats",
    "calculate_global_stats",
    "collect_check_dates",
    "compute_streaks",
    "compute_streaks_tolerant",
    "load_history",
]
