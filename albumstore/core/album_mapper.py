"""
Album data-access facade.

`AlbumMapper` is the single public entry point for album persistence. It
composes:
- `queries_albums` for statement construction,
- `RelationStore` for the album<->artist table,
- `CoverResolver` for cover selection,
and runs everything through one `Executor`.

The mapper keeps no state between calls besides those collaborators; each
method issues one statement or a short, fixed sequence of statements.
"""

from __future__ import annotations

import logging
from typing import Sequence

from albumstore.config import CoverConfig, get_config
from albumstore.core import AmbiguousResultError, NotFoundError
from albumstore.core.covers import CoverResolver
from albumstore.core.db import queries_albums
from albumstore.core.db.executor import Executor
from albumstore.core.db.fragments import Query
from albumstore.core.db.models import Album, AlbumWithoutCover
from albumstore.core.relations import RelationStore

logger = logging.getLogger(__name__)


class AlbumMapper:
    """
    Async album mapper.

    Usage:
        db = SqliteExecutor("albums.db")
        await db.open()
        await db.ensure_schema()
        mapper = AlbumMapper(db)
        album = await mapper.find(12, "john")

    Notes:
    - Per-user reads are scoped by `user_id`.
    - Read-one methods raise NotFoundError / AmbiguousResultError.
    - List, count and write methods never fail on empty results.
    """

    def __init__(self, db: Executor, *, cover_config: CoverConfig | None = None) -> None:
        covers = cover_config if cover_config is not None else get_config().covers
        self._db = db
        self._relations = RelationStore(db)
        self._covers = CoverResolver(db, keywords=covers.keywords, fallback=covers.fallback)

    @property
    def relations(self) -> RelationStore:
        return self._relations

    @property
    def covers(self) -> CoverResolver:
        return self._covers

    async def _find_entities(self, q: Query) -> list[Album]:
        rows = await self._db.fetch_all(q.sql, q.params)
        return [Album.from_row(r) for r in rows]

    async def _find_entity(self, q: Query) -> Album:
        albums = await self._find_entities(q)
        if not albums:
            raise NotFoundError(f"No album matches {q.params!r}")
        if len(albums) > 1:
            raise AmbiguousResultError(f"{len(albums)} albums match {q.params!r}")
        return albums[0]

    async def _count(self, q: Query) -> int:
        rows = await self._db.fetch_all(q.sql, q.params)
        return int(rows[0]["count"]) if rows else 0

    # ===========================================================================
    # Reads
    # ===========================================================================

    async def find(self, album_id: int, user_id: str) -> Album:
        return await self._find_entity(queries_albums.select_album_by_id(album_id, user_id))

    async def find_all(self, user_id: str) -> list[Album]:
        return await self._find_entities(queries_albums.select_all_albums(user_id))

    async def find_all_by_artist(self, artist_id: int, user_id: str) -> list[Album]:
        return await self._find_entities(queries_albums.select_albums_by_artist(artist_id, user_id))

    async def find_all_by_name(
        self, name: str | None, user_id: str, fuzzy: bool = False
    ) -> list[Album]:
        return await self._find_entities(
            queries_albums.select_albums_by_name(name, user_id, fuzzy=fuzzy)
        )

    async def find_by_name_and_year(
        self, name: str | None, year: int | None, user_id: str
    ) -> Album:
        return await self._find_entity(
            queries_albums.select_album_by_name_and_year(user_id, name=name, year=year)
        )

    async def count(self, user_id: str) -> int:
        return await self._count(queries_albums.count_albums(user_id))

    async def count_by_artist(self, artist_id: int, user_id: str) -> int:
        return await self._count(queries_albums.count_albums_by_artist(artist_id, user_id))

    # ===========================================================================
    # Writes
    # ===========================================================================

    async def insert(self, album: Album) -> Album:
        """Persist a new album; sets `album.id` and clears its updated fields."""
        q = queries_albums.insert_album(album.column_values())
        album.id = await self._db.insert(q.sql, q.params)
        album.reset_updated_fields()
        logger.debug("Inserted album %s (%r, %s)", album.id, album.name, album.year)
        return album

    async def update(self, album: Album) -> Album:
        """Write the album's updated fields. No statement is issued when nothing changed."""
        if album.id is None:
            raise ValueError("Cannot update an album that has not been inserted")
        changed = tuple(sorted(album.updated_fields))
        if not changed:
            return album
        q = queries_albums.update_album(album.id, album.column_values(changed))
        await self._db.execute(q.sql, q.params)
        album.reset_updated_fields()
        return album

    async def delete(self, album: Album) -> None:
        if album.id is None:
            raise ValueError("Cannot delete an album that has not been inserted")
        await self.delete_by_id([album.id])

    async def delete_by_id(self, album_ids: Sequence[int]) -> None:
        """Delete albums and their artist relations. An empty list issues no statements."""
        if not album_ids:
            return
        ids = [int(i) for i in album_ids]
        await self._relations.delete_for_albums(ids)
        q = queries_albums.delete_albums(ids)
        deleted = await self._db.execute(q.sql, q.params)
        logger.debug("Deleted %d of %d album(s)", deleted, len(ids))

    # ===========================================================================
    # Artist relations (delegated to RelationStore)
    # ===========================================================================

    async def get_album_artists_by_album_id(self, album_ids: Sequence[int]) -> dict[int, list[int]]:
        return await self._relations.get_artists_by_album_id(album_ids)

    async def add_album_artist_relation_if_not_exist(self, album_id: int, artist_id: int) -> bool:
        return await self._relations.add_if_not_exist(album_id, artist_id)

    # ===========================================================================
    # Covers
    # ===========================================================================

    async def remove_cover(self, file_id: int) -> int:
        """Clear `cover_file_id` wherever it points at `file_id`. Returns affected rows."""
        q = queries_albums.remove_cover(file_id)
        return await self._db.execute(q.sql, q.params)

    async def update_cover(self, cover_file_id: int, parent_folder_id: int) -> int:
        """Use `cover_file_id` for coverless albums with tracks in `parent_folder_id`."""
        q = queries_albums.update_cover(cover_file_id, parent_folder_id)
        return await self._db.execute(q.sql, q.params)

    async def find_album_cover(self, album_id: int, parent_folder_id: int) -> int | None:
        return await self._covers.find_album_cover(album_id, parent_folder_id)

    async def get_albums_without_cover(self) -> list[AlbumWithoutCover]:
        return await self._covers.get_albums_without_cover()

    async def find_covers(self) -> list[int]:
        return await self._covers.find_covers()
