"""Concrete repository implementations using SQLModel."""

from .key_value import SQLModelKeyValueRepository

__all__ = ["SQLModelKeyValueRepository"]
