"""
Album<->artist relation store.

Relation rows are plain `(album_id, artist_id)` pairs. Adding a pair is
idempotent: the store checks for the pair first and only inserts when it is
missing. The check and the insert are two statements, so two writers can both
see "missing"; the storage layer's unique index on the pair makes the loser's
insert fail with DuplicateKeyError, which is treated as "already exists".
"""

from __future__ import annotations

import logging
from typing import Sequence

from albumstore.core import DuplicateKeyError
from albumstore.core.db import queries_relations
from albumstore.core.db.executor import Executor
from albumstore.core.db.models import AlbumArtistRelation

logger = logging.getLogger(__name__)


class RelationStore:
    """Maintains the album<->artist many-to-many table."""

    def __init__(self, db: Executor) -> None:
        self._db = db

    async def exists(self, album_id: int, artist_id: int) -> bool:
        q = queries_relations.relation_exists(album_id, artist_id)
        rows = await self._db.fetch_all(q.sql, q.params)
        return bool(rows)

    async def add_if_not_exist(self, album_id: int, artist_id: int) -> bool:
        """
        Link an artist to an album unless the link already exists.

        Returns:
            True if a relation row was inserted, False if it was already there.
        """
        if await self.exists(album_id, artist_id):
            return False

        q = queries_relations.insert_relation(album_id, artist_id)
        try:
            await self._db.insert(q.sql, q.params)
        except DuplicateKeyError:
            logger.debug(
                "Relation album=%s artist=%s inserted concurrently, treating as existing",
                album_id,
                artist_id,
            )
            return False
        return True

    async def get_relations(self, album_ids: Sequence[int]) -> list[AlbumArtistRelation]:
        if not album_ids:
            return []
        q = queries_relations.select_relations_by_album_ids(album_ids)
        rows = await self._db.fetch_all(q.sql, q.params)
        return [
            AlbumArtistRelation(album_id=int(r["album_id"]), artist_id=int(r["artist_id"]))
            for r in rows
        ]

    async def get_artists_by_album_id(self, album_ids: Sequence[int]) -> dict[int, list[int]]:
        """
        Map album id -> artist ids.

        Albums without any relation are left out of the result.
        """
        result: dict[int, list[int]] = {}
        for rel in await self.get_relations(album_ids):
            result.setdefault(rel.album_id, []).append(rel.artist_id)
        return result

    async def delete_for_albums(self, album_ids: Sequence[int]) -> int:
        if not album_ids:
            return 0
        q = queries_relations.delete_relations_by_album_ids(album_ids)
        return await self._db.execute(q.sql, q.params)
