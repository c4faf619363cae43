"""
Album<->artist relation query builder.

Same conventions as `queries_albums`: pure builders returning `Query` values,
`*PREFIX*` table token, no value interpolation.
"""

from __future__ import annotations

from typing import Iterable

from albumstore.core.db.fragments import Query, id_list


def relation_exists(album_id: int, artist_id: int) -> Query:
    """Existence check for one exact pair; returns at most one row."""
    return Query(
        """
        SELECT 1 FROM *PREFIX*music_album_artists relation
        WHERE relation.album_id = ? AND relation.artist_id = ?
        LIMIT 1
        """,
        (int(album_id), int(artist_id)),
    )


def insert_relation(album_id: int, artist_id: int) -> Query:
    return Query(
        "INSERT INTO *PREFIX*music_album_artists (album_id, artist_id) VALUES (?, ?)",
        (int(album_id), int(artist_id)),
    )


def select_relations_by_album_ids(album_ids: Iterable[int]) -> Query:
    placeholders, params = id_list(album_ids)
    return Query(
        f"""
        SELECT DISTINCT artists.album_id, artists.artist_id
        FROM *PREFIX*music_album_artists artists
        WHERE artists.album_id IN {placeholders}
        ORDER BY artists.album_id, artists.artist_id
        """,
        params,
    )


def delete_relations_by_album_ids(album_ids: Iterable[int]) -> Query:
    placeholders, params = id_list(album_ids)
    return Query(
        f"DELETE FROM *PREFIX*music_album_artists WHERE album_id IN {placeholders}",
        params,
    )
