"""
Cover selection for albums.

Given the image files in an album's folder, pick the one most likely to be the
front cover and store it as the album's `cover_file_id`.

Ranking:
1. Filenames are matched case-insensitively against a keyword list in
   priority order (default: cover, albumart, folder, front).
2. The best-ranked keyword that any file contains wins; among files matching
   that keyword, the first in listing order wins.
3. If no file matches any keyword, `CoverFallback` decides: NONE leaves the
   album without a cover, FIRST takes the first file in the listing.
"""

from __future__ import annotations

import logging
from typing import Sequence

from albumstore.config import DEFAULT_COVER_KEYWORDS, CoverFallback
from albumstore.core.db import queries_albums
from albumstore.core.db.executor import Executor
from albumstore.core.db.models import AlbumWithoutCover, CoverCandidate

logger = logging.getLogger(__name__)


def keyword_rank(file_name: str, keywords: Sequence[str]) -> int | None:
    """Index of the first keyword contained in `file_name`, or None."""
    lowered = file_name.casefold()
    for rank, keyword in enumerate(keywords):
        if keyword.casefold() in lowered:
            return rank
    return None


def pick_cover(
    candidates: Sequence[CoverCandidate],
    keywords: Sequence[str] = DEFAULT_COVER_KEYWORDS,
    fallback: CoverFallback = CoverFallback.NONE,
) -> CoverCandidate | None:
    """Choose the cover among `candidates` (already in listing order)."""
    best: CoverCandidate | None = None
    best_rank: int | None = None
    for candidate in candidates:
        rank = keyword_rank(candidate.name, keywords)
        # strict < keeps the earliest candidate on ties
        if rank is not None and (best_rank is None or rank < best_rank):
            best, best_rank = candidate, rank
            if rank == 0:
                break

    if best is None and candidates and fallback is CoverFallback.FIRST:
        return candidates[0]
    return best


class CoverResolver:
    """Finds and stores album covers using the file index."""

    def __init__(
        self,
        db: Executor,
        *,
        keywords: Sequence[str] = DEFAULT_COVER_KEYWORDS,
        fallback: CoverFallback = CoverFallback.NONE,
    ) -> None:
        self._db = db
        self._keywords = tuple(keywords)
        self._fallback = fallback

    @property
    def keywords(self) -> tuple[str, ...]:
        return self._keywords

    @property
    def fallback(self) -> CoverFallback:
        return self._fallback

    async def list_candidates(self, parent_folder_id: int) -> list[CoverCandidate]:
        q = queries_albums.select_cover_candidates(parent_folder_id)
        rows = await self._db.fetch_all(q.sql, q.params)
        return [CoverCandidate(file_id=int(r["fileid"]), name=str(r["name"])) for r in rows]

    async def find_album_cover(self, album_id: int, parent_folder_id: int) -> int | None:
        """
        Pick a cover for one album from the images in `parent_folder_id`.

        Returns:
            The chosen file id, or None if nothing was chosen (no images, or no
            keyword match under the NONE fallback). Nothing is written then.
        """
        candidates = await self.list_candidates(parent_folder_id)
        if not candidates:
            logger.debug("No images in folder %s for album %s", parent_folder_id, album_id)
            return None

        chosen = pick_cover(candidates, self._keywords, self._fallback)
        if chosen is None:
            logger.debug(
                "None of %d images in folder %s look like a cover for album %s",
                len(candidates),
                parent_folder_id,
                album_id,
            )
            return None

        q = queries_albums.set_album_cover(album_id, chosen.file_id)
        await self._db.execute(q.sql, q.params)
        logger.debug("Album %s cover set to file %s (%s)", album_id, chosen.file_id, chosen.name)
        return chosen.file_id

    async def get_albums_without_cover(self) -> list[AlbumWithoutCover]:
        q = queries_albums.select_albums_without_cover()
        rows = await self._db.fetch_all(q.sql, q.params)
        return [
            AlbumWithoutCover(album_id=int(r["id"]), parent_folder_id=int(r["parent"]))
            for r in rows
            # files in the storage root have no parent folder
            if r["parent"] is not None
        ]

    async def find_covers(self) -> list[int]:
        """
        Resolve covers for every coverless album.

        An album whose tracks span several folders is tried folder by folder
        until one of them yields a cover.

        Returns:
            Ids of albums that received a cover.
        """
        covered: list[int] = []
        for pending in await self.get_albums_without_cover():
            if pending.album_id in covered:
                continue
            if await self.find_album_cover(pending.album_id, pending.parent_folder_id) is not None:
                covered.append(pending.album_id)

        logger.info("Cover scan finished: %d album(s) received a cover", len(covered))
        return covered
