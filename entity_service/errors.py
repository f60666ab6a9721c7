"""
Error taxonomy for the entity service.

The service never recovers from these locally; they propagate to the caller
unchanged. Hook implementations raise `ValidationError` to reject a payload.
"""

from __future__ import annotations

from typing import Any, Mapping, Optional


class EntityServiceError(Exception):
    """Base class for every error raised by the entity service."""


class DuplicateKeyError(EntityServiceError):
    """A row with the given primary key already exists."""

    def __init__(
        self,
        table_name: str,
        key: Mapping[str, Any],
        constraint: Optional[str] = None,
    ) -> None:
        self.table_name = table_name
        self.key = dict(key)
        self.constraint = constraint
        message = f"Duplicate primary key in {table_name}: {self.key}"
        if constraint:
            message += f" (constraint {constraint})"
        super().__init__(message)


class NotFoundError(EntityServiceError):
    """No row matches the given primary key."""

    def __init__(self, table_name: str, key: Mapping[str, Any]) -> None:
        self.table_name = table_name
        self.key = dict(key)
        super().__init__(f"Row not found in {table_name}: {self.key}")


class ValidationError(EntityServiceError):
    """A hook rejected the data of the current operation."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        self.field = field
        super().__init__(message)


__all__ = [
    "DuplicateKeyError",
    "EntityServiceError",
    "NotFoundError",
    "ValidationError",
]
