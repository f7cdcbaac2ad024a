"""Repository protocol definitions for domain layer."""

from .key_value import KeyValueRepository
from .month_source import MonthlyActivitySource

__all__ = ["KeyValueRepository", "MonthlyActivitySource"]
