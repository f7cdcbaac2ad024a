"""Key-value repository protocol."""

from __future__ import annotations

from typing import Optional, Protocol


class KeyValueRepository(Protocol):
    """Raw text storage keyed by string."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored text or None."""
        ...

    def set(self, key: str, value: str) -> None:
        """Insert or replace the value under ``key``."""
        ...

    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""
        ...

    def list_keys(self, prefix: str = "") -> list[str]:
        """List keys starting with ``prefix``."""
        ...
