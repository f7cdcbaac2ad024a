"""Tests for all-time habit streaks assembled across stored months.

Covers:
- Current vs longest streaks and the today/yesterday liveness rule
- Runs that cross a month boundary
- Joining past months by activity id rather than by position
- Malformed dates in stored records
- The tolerant (one hour slack) comparison rule
"""

from __future__ import annotations

from datetime import date, timedelta

import pytest

from goalledger.models import Activity
from goalledger.services.habits import (
    TOLERANT,
    StreakStats,
    calculate_all_stats,
    calculate_global_stats,
    collect_check_dates,
    compute_streaks,
    compute_streaks_tolerant,
    load_history,
)
from goalledger.services.storage import StorageMonthSource


def _days(*texts: str) -> list[date]:
    return [date.fromisoformat(text) for text in texts]


class FakeMonthSource:
    """In-memory month source keyed by ``(year, zero_based_month)``."""

    def __init__(self, months: dict[tuple[int, int], list[Activity]]):
        self.months = months
        self.loads: list[tuple[int, int]] = []

    def list_activity_months(self):
        return sorted(self.months)

    def load_activities(self, year, month):
        self.loads.append((year, month))
        return self.months[(year, month)]


class TestComputeStreaks:
    def test_empty_returns_zero(self):
        assert compute_streaks([], today=date(2024, 1, 10)) == (0, 0)

    def test_run_ending_today_is_current(self):
        days = _days("2024-01-08", "2024-01-09", "2024-01-10")
        assert compute_streaks(days, today=date(2024, 1, 10)) == (3, 3)

    def test_run_ending_yesterday_is_still_current(self):
        days = _days("2024-01-08", "2024-01-09")
        assert compute_streaks(days, today=date(2024, 1, 10)) == (2, 2)

    def test_run_ending_two_days_ago_is_broken(self):
        days = _days("2024-01-01", "2024-01-02", "2024-01-03", "2024-01-05", "2024-01-06")
        assert compute_streaks(days, today=date(2024, 1, 10)) == (0, 3)

    def test_gap_resets_current_but_keeps_longest(self):
        days = _days("2024-01-01", "2024-01-02", "2024-01-03", "2024-01-04", "2024-01-09", "2024-01-10")
        assert compute_streaks(days, today=date(2024, 1, 10)) == (2, 4)

    def test_duplicates_are_ignored(self):
        days = _days("2024-01-10", "2024-01-10", "2024-01-09")
        assert compute_streaks(days, today=date(2024, 1, 10)) == (2, 2)

    def test_future_last_date_counts_as_alive(self):
        days = _days("2024-01-11", "2024-01-12")
        assert compute_streaks(days, today=date(2024, 1, 10)) == (2, 2)

    def test_current_never_exceeds_longest(self):
        today = date(2024, 6, 30)
        for count in range(1, 20):
            days = [today - timedelta(days=i * 2 if i % 3 else i) for i in range(count)]
            current, longest = compute_streaks(days, today=today)
            assert 0 <= current <= longest


class TestTolerantRule:
    def test_matches_calendar_rule_on_simple_runs(self):
        days = _days("2024-01-08", "2024-01-09", "2024-01-10")
        assert compute_streaks_tolerant(days, today=date(2024, 1, 10)) == (3, 3)

    def test_two_day_gap_breaks_run(self):
        days = _days("2024-01-05", "2024-01-07")
        assert compute_streaks_tolerant(days, today=date(2024, 1, 7)) == (1, 1)

    def test_empty(self):
        assert compute_streaks_tolerant([], today=date(2024, 1, 7)) == (0, 0)


class TestListedExamples:
    """Literal streak examples over a single stored month."""

    @pytest.mark.parametrize(
        "checked,today,expected",
        [
            (("2024-01-01", "2024-01-02", "2024-01-03"), date(2024, 1, 3), StreakStats(current=3, max=3)),
            (("2024-01-01", "2024-01-02", "2024-01-10"), date(2024, 1, 10), StreakStats(current=1, max=2)),
            (("2024-01-01",), date(2024, 1, 5), StreakStats(current=0, max=1)),
        ],
    )
    def test_global_stats(self, checked, today, expected):
        activity = Activity("a1", "Run", {day: True for day in checked})

        stats = calculate_global_stats(activity, 2024, 0, FakeMonthSource({}), today=today)

        assert stats == expected

    def test_single_old_date_is_not_current(self):
        assert compute_streaks(_days("2024-01-01"), today=date(2024, 1, 5)) == (0, 1)


class TestGlobalStats:
    def test_streak_continues_across_month_boundary(self):
        january = Activity("a1", "Run", {"2024-01-30": True, "2024-01-31": True})
        source = FakeMonthSource({(2024, 0): [january]})
        february = Activity("a1", "Run", {"2024-02-01": True, "2024-02-02": True})

        stats = calculate_global_stats(february, 2024, 1, source, today=date(2024, 2, 2))

        assert stats == StreakStats(current=4, max=4)

    def test_viewed_month_record_is_replaced_by_live_checks(self):
        stored = Activity("a1", "Run", {"2024-02-01": True})
        source = FakeMonthSource({(2024, 1): [stored]})
        live = Activity("a1", "Run", {})

        stats = calculate_global_stats(live, 2024, 1, source, today=date(2024, 2, 2))

        assert stats == StreakStats(current=0, max=0)
        assert source.loads == []

    def test_months_are_joined_by_id_not_position(self):
        january = [
            Activity("other", "Read", {"2024-01-31": True}),
            Activity("a1", "Run", {}),
        ]
        source = FakeMonthSource({(2024, 0): january})
        february = Activity("a1", "Run", {"2024-02-01": True})

        stats = calculate_global_stats(february, 2024, 1, source, today=date(2024, 2, 1))

        assert stats == StreakStats(current=1, max=1)

    def test_malformed_dates_are_skipped(self):
        january = Activity("a1", "Run", {"garbage": True, "2024-01-31": True})
        source = FakeMonthSource({(2024, 0): [january]})
        live = Activity("a1", "Run", {"2024-02-01": True})

        stats = calculate_global_stats(live, 2024, 1, source, today=date(2024, 2, 1))

        assert stats == StreakStats(current=2, max=2)

    def test_tolerant_rule_is_selectable(self):
        source = FakeMonthSource({})
        live = Activity("a1", "Run", {"2024-02-01": True, "2024-02-02": True})

        stats = calculate_global_stats(live, 2024, 1, source, today=date(2024, 2, 2), rule=TOLERANT)

        assert stats == StreakStats(current=2, max=2)

    def test_unknown_rule_raises(self):
        live = Activity("a1", "Run", {"2024-02-01": True})
        with pytest.raises(ValueError):
            calculate_global_stats(live, 2024, 1, FakeMonthSource({}), today=date(2024, 2, 1), rule="fuzzy")

    def test_all_stats_scans_history_once(self):
        january = [Activity("a1", "Run", {"2024-01-31": True}), Activity("a2", "Read", {})]
        source = FakeMonthSource({(2023, 11): [], (2024, 0): january})
        live = [
            Activity("a1", "Run", {"2024-02-01": True}),
            Activity("a2", "Read", {"2024-02-01": True}),
        ]

        stats = calculate_all_stats(live, 2024, 1, source, today=date(2024, 2, 1))

        assert stats == {"a1": StreakStats(2, 2), "a2": StreakStats(1, 1)}
        assert source.loads == [(2023, 11), (2024, 0)]


def test_collect_check_dates_unions_history():
    history = load_history(FakeMonthSource({(2024, 0): [Activity("a1", "Run", {"2024-01-02": True})]}))
    dates = collect_check_dates(Activity("a1", "Run", {"2024-02-03": True}), history)
    assert dates == {"2024-01-02", "2024-02-03"}


def test_global_stats_read_from_storage(storage):
    storage.save_activities(2024, 0, [Activity("a1", "Run", {"2024-01-31": True})])
    storage.save_activities(2024, 1, [Activity("a1", "Run", {"2024-02-01": True})])
    storage.save_events(2024, 1, {})

    live = Activity("a1", "Run", {"2024-02-01": True, "2024-02-02": True})
    stats = calculate_global_stats(live, 2024, 1, StorageMonthSource(storage), today=date(2024, 2, 2))

    assert stats == StreakStats(current=3, max=3)
