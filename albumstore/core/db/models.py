"""
DB models (DTOs) and small normalization helpers.

This module is intentionally lightweight:
- No DB connection knowledge
- No SQL
- Dataclasses + helper functions
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Final, Mapping

# Persisted album columns, excluding the storage-assigned `id`.
ALBUM_COLUMNS: Final[tuple[str, ...]] = ("user_id", "name", "year", "cover_file_id")


def normalize_int(value: Any) -> int | None:
    """Normalize optional integer fields (coerce to int, keep None)."""
    if value is None:
        return None
    return int(value)


@dataclass
class Album:
    """
    Album record as stored in SQL, plus dirty-field tracking.

    Assigning any persisted column after construction records it in
    `updated_fields`, so `AlbumMapper.update()` only writes what changed.
    Entities built by `from_row()` start clean.
    """

    id: int | None = None
    user_id: str | None = None
    name: str | None = None
    year: int | None = None
    cover_file_id: int | None = None
    _updated_fields: set[str] = field(default_factory=set, init=False, repr=False, compare=False)

    def __setattr__(self, key: str, value: Any) -> None:
        super().__setattr__(key, value)
        # `_updated_fields` is assigned last in __init__, so constructor writes are not recorded.
        if key in ALBUM_COLUMNS and "_updated_fields" in self.__dict__:
            self._updated_fields.add(key)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Album:
        """Hydrate an album from a column->value mapping. Missing columns become None."""
        return cls(
            id=normalize_int(row.get("id")),
            user_id=row.get("user_id"),
            name=row.get("name"),
            year=normalize_int(row.get("year")),
            cover_file_id=normalize_int(row.get("cover_file_id")),
        )

    @property
    def updated_fields(self) -> frozenset[str]:
        return frozenset(self._updated_fields)

    def reset_updated_fields(self) -> None:
        self._updated_fields.clear()

    def column_values(self, columns: tuple[str, ...] | None = None) -> dict[str, Any]:
        """Return {column: value} for the given columns (all persisted columns by default)."""
        names = ALBUM_COLUMNS if columns is None else columns
        return {name: getattr(self, name) for name in names}


@dataclass(frozen=True, slots=True)
class AlbumArtistRelation:
    """One (album, artist) association row."""

    album_id: int
    artist_id: int


@dataclass(frozen=True, slots=True)
class CoverCandidate:
    """An image file found under an album's folder. Never persisted."""

    file_id: int
    name: str


@dataclass(frozen=True, slots=True)
class AlbumWithoutCover:
    """A coverless album and one folder its tracks live in."""

    album_id: int
    parent_folder_id: int
