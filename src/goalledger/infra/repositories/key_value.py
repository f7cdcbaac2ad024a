"""SQLModel implementation of the key-value repository."""

from __future__ import annotations

from typing import Callable, Optional

from sqlmodel import Session, select

from ...models.stored_value import StoredValue


class SQLModelKeyValueRepository:
    """Stores raw text values under string keys."""

    def __init__(self, session_factory: Callable[[], Session]):
        self.session_factory = session_factory

    def get(self, key: str) -> Optional[str]:
        with self.session_factory() as session:
            row = session.exec(select(StoredValue).where(StoredValue.key == key)).first()
            return row.value if row else None

    def set(self, key: str, value: str) -> None:
        with self.session_factory() as session:
            row = session.exec(select(StoredValue).where(StoredValue.key == key)).first()
            if row:
                row.value = value
            else:
                row = StoredValue(key=key, value=value)
            session.add(row)
            session.commit()

    def delete(self, key: str) -> None:
        with self.session_factory() as session:
            row = session.exec(select(StoredValue).where(StoredValue.key == key)).first()
            if row:
                session.delete(row)
                session.commit()

    def list_keys(self, prefix: str = "") -> list[str]:
        """Return stored keys starting with ``prefix`` in sorted order."""
        with self.session_factory() as session:
            statement = select(StoredValue.key).order_by(StoredValue.key)
            if prefix:
                statement = statement.where(StoredValue.key.startswith(prefix))  # type: ignore[attr-defined]
            return list(session.exec(statement).all())


__all__ = ["SQLModelKeyValueRepository"]
