"""Data source protocol for cross-month aggregation."""

from __future__ import annotations

from typing import Protocol

from ...models.activity import Activity


class MonthlyActivitySource(Protocol):
    """Read access to every stored month of activity records.

    Months are zero-based. Implementations return an empty list for months
    with no readable data instead of raising.
    """

    def list_activity_months(self) -> list[tuple[int, int]]:
        """Return ``(year, month)`` for each month with stored activity data."""
        ...

    def load_activities(self, year: int, month: int) -> list[Activity]:
        """Return the activities stored for one month."""
        ...
