"""
Core domain package.

This package contains the album data-access logic, independent of any UI layer
(web, CLI, etc.). Consumers should usually import from the specific module they
need (e.g. `albumstore.core.album_mapper`).

The exception hierarchy lives here so every layer raises the same types.
"""

from __future__ import annotations

__all__: list[str] = [
    "CoreError",
    "NotFoundError",
    "AmbiguousResultError",
    "InvalidFilterStateError",
    "StorageError",
    "StorageUnavailableError",
    "DuplicateKeyError",
]


class CoreError(Exception):
    """Base class for core-layer exceptions."""


class NotFoundError(CoreError):
    """Raised when a query expected exactly one row and got none."""


class AmbiguousResultError(CoreError):
    """Raised when a query expected exactly one row and got several."""


class InvalidFilterStateError(CoreError):
    """
    Raised when a query builder receives a filter combination it has no SQL for.

    This is a programming error at the call site, not a user-facing condition.
    """


class StorageError(CoreError):
    """Raised when the storage layer rejects a statement."""


class StorageUnavailableError(StorageError):
    """Raised when the database is closed, locked or otherwise unreachable."""


class DuplicateKeyError(StorageError):
    """Raised when an insert collides with a UNIQUE / PRIMARY KEY constraint."""
