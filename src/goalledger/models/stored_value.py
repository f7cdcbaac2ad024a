"""Key-value rows backing the per-month JSON records."""

from __future__ import annotations

from typing import ClassVar

from sqlmodel import Field, SQLModel


class StoredValue(SQLModel, table=True):
    """One JSON text blob stored under a deterministic key."""

    __tablename__: ClassVar[str] = "stored_value"

    key: str = Field(primary_key=True, max_length=128)
    value: str = Field(nullable=False)
