"""
Album query builder.

Design:
- Functions are *pure builders*: they take plain values and return a `Query`
  (statement + bound parameters). Nothing here touches a connection; the
  mapper hands the result to an `Executor`.
- Every per-user read binds `user_id` as the first parameter.
- Lists are ordered by `album.name` as stored (storage collation).
- Table names carry the `*PREFIX*` token; the executor expands it.

Important:
- Do NOT interpolate user input into SQL. Dynamic parts are limited to
  fragments picked from static tables (`_NAME_YEAR_CLAUSES`), column names
  validated against `ALBUM_COLUMNS`, and `?` placeholder lists.
"""

from __future__ import annotations

from typing import Any, Final, Iterable, Mapping

from albumstore.core import InvalidFilterStateError
from albumstore.core.db.fragments import MISSING, FilterState, Query, filter_state, id_list
from albumstore.core.db.models import ALBUM_COLUMNS

_SELECT_ALBUMS: Final[str] = """
    SELECT album.name, album.year, album.id, album.cover_file_id, album.user_id
    FROM *PREFIX*music_albums album
"""

_JOIN_ARTISTS: Final[str] = """
    JOIN *PREFIX*music_album_artists artists ON album.id = artists.album_id
"""

_ORDER_BY_NAME: Final[str] = "ORDER BY album.name"

# (name state, year state) -> WHERE fragment. ABSENT/ABSENT is deliberately missing.
_NAME_YEAR_CLAUSES: Final[dict[tuple[FilterState, FilterState], str]] = {
    (FilterState.VALUE, FilterState.VALUE): "album.name = ? AND album.year = ?",
    (FilterState.NULL, FilterState.VALUE): "album.name IS NULL AND album.year = ?",
    (FilterState.VALUE, FilterState.NULL): "album.name = ? AND album.year IS NULL",
    (FilterState.NULL, FilterState.NULL): "album.name IS NULL AND album.year IS NULL",
    (FilterState.VALUE, FilterState.ABSENT): "album.name = ?",
    (FilterState.NULL, FilterState.ABSENT): "album.name IS NULL",
    (FilterState.ABSENT, FilterState.VALUE): "album.year = ?",
    (FilterState.ABSENT, FilterState.NULL): "album.year IS NULL",
}


def _select_for_user(condition: str = "", *, join: str = "") -> str:
    sql = f"{_SELECT_ALBUMS} {join} WHERE album.user_id = ?"
    return f"{sql} {condition}" if condition else sql


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


def select_album_by_id(album_id: int, user_id: str) -> Query:
    return Query(_select_for_user("AND album.id = ?"), (user_id, int(album_id)))


def select_all_albums(user_id: str) -> Query:
    return Query(_select_for_user(_ORDER_BY_NAME), (user_id,))


def select_albums_by_artist(artist_id: int, user_id: str) -> Query:
    return Query(
        _select_for_user(f"AND artists.artist_id = ? {_ORDER_BY_NAME}", join=_JOIN_ARTISTS),
        (user_id, int(artist_id)),
    )


def _contains_pattern(term: str) -> str:
    """Wrap `term` for a LIKE "contains" match, escaping its own wildcards."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def select_albums_by_name(name: str | None, user_id: str, *, fuzzy: bool = False) -> Query:
    """
    Exact or fuzzy name lookup.

    Fuzzy matching is a case-insensitive "contains": the term is wrapped in `%`
    on both sides; `%`, `_` and backslashes in the term match literally.
    A None name can only be matched exactly (`IS NULL`).
    """
    state = filter_state(name, str)
    if fuzzy:
        if state is not FilterState.VALUE:
            raise InvalidFilterStateError("Fuzzy name search needs a non-null search term")
        return Query(
            _select_for_user(f"AND LOWER(album.name) LIKE LOWER(?) ESCAPE '\\' {_ORDER_BY_NAME}"),
            (user_id, _contains_pattern(name)),
        )
    if state is FilterState.NULL:
        return Query(_select_for_user(f"AND album.name IS NULL {_ORDER_BY_NAME}"), (user_id,))
    return Query(_select_for_user(f"AND album.name = ? {_ORDER_BY_NAME}"), (user_id, name))


def select_album_by_name_and_year(
    user_id: str,
    *,
    name: Any = MISSING,
    year: Any = MISSING,
) -> Query:
    """
    Build the name/year lookup.

    Each of `name` and `year` may be MISSING (not filtered), None (`IS NULL`)
    or a value (`= ?`). At least one of them must be supplied.
    """
    name_state = filter_state(name, str)
    year_state = filter_state(year, int)
    try:
        clause = _NAME_YEAR_CLAUSES[(name_state, year_state)]
    except KeyError:
        raise InvalidFilterStateError(
            f"No album lookup for name={name_state.value}, year={year_state.value}"
        ) from None

    params: list[Any] = [user_id]
    if name_state is FilterState.VALUE:
        params.append(name)
    if year_state is FilterState.VALUE:
        params.append(int(year))
    return Query(_select_for_user(f"AND {clause}"), tuple(params))


def count_albums(user_id: str) -> Query:
    return Query(
        "SELECT COUNT(*) AS count FROM *PREFIX*music_albums album WHERE album.user_id = ?",
        (user_id,),
    )


def count_albums_by_artist(artist_id: int, user_id: str) -> Query:
    return Query(
        f"""
        SELECT COUNT(*) AS count
        FROM *PREFIX*music_albums album
        {_JOIN_ARTISTS}
        WHERE album.user_id = ? AND artists.artist_id = ?
        """,
        (user_id, int(artist_id)),
    )


# ---------------------------------------------------------------------------
# Writes
# ---------------------------------------------------------------------------


def _checked_columns(values: Mapping[str, Any]) -> list[str]:
    columns = list(values)
    if not columns:
        raise InvalidFilterStateError("Album write needs at least one column")
    unknown = [c for c in columns if c not in ALBUM_COLUMNS]
    if unknown:
        raise InvalidFilterStateError(f"Unknown album column(s): {', '.join(unknown)}")
    return columns


def insert_album(values: Mapping[str, Any]) -> Query:
    columns = _checked_columns(values)
    placeholders = ", ".join("?" for _ in columns)
    return Query(
        f"INSERT INTO *PREFIX*music_albums ({', '.join(columns)}) VALUES ({placeholders})",
        tuple(values[c] for c in columns),
    )


def update_album(album_id: int, values: Mapping[str, Any]) -> Query:
    columns = _checked_columns(values)
    assignments = ", ".join(f"{c} = ?" for c in columns)
    return Query(
        f"UPDATE *PREFIX*music_albums SET {assignments} WHERE id = ?",
        (*(values[c] for c in columns), int(album_id)),
    )


def delete_albums(album_ids: Iterable[int]) -> Query:
    placeholders, params = id_list(album_ids)
    return Query(f"DELETE FROM *PREFIX*music_albums WHERE id IN {placeholders}", params)


# ---------------------------------------------------------------------------
# Covers
# ---------------------------------------------------------------------------


def remove_cover(file_id: int) -> Query:
    return Query(
        """
        UPDATE *PREFIX*music_albums
        SET cover_file_id = NULL
        WHERE cover_file_id = ?
        """,
        (int(file_id),),
    )


def update_cover(cover_file_id: int, parent_folder_id: int) -> Query:
    """Give every coverless album with a track in `parent_folder_id` the cover."""
    return Query(
        """
        UPDATE *PREFIX*music_albums
        SET cover_file_id = ?
        WHERE cover_file_id IS NULL AND id IN (
            SELECT DISTINCT tracks.album_id
            FROM *PREFIX*music_tracks tracks
            JOIN *PREFIX*filecache files ON tracks.file_id = files.fileid
            WHERE files.parent = ?
        )
        """,
        (int(cover_file_id), int(parent_folder_id)),
    )


def set_album_cover(album_id: int, cover_file_id: int) -> Query:
    return Query(
        "UPDATE *PREFIX*music_albums SET cover_file_id = ? WHERE id = ?",
        (int(cover_file_id), int(album_id)),
    )


def select_albums_without_cover() -> Query:
    return Query(
        """
        SELECT DISTINCT albums.id, files.parent
        FROM *PREFIX*music_albums albums
        JOIN *PREFIX*music_tracks tracks ON albums.id = tracks.album_id
        JOIN *PREFIX*filecache files ON tracks.file_id = files.fileid
        WHERE albums.cover_file_id IS NULL
        """
    )


def select_cover_candidates(parent_folder_id: int) -> Query:
    """Image files directly under a folder, in listing order (name, then id)."""
    return Query(
        """
        SELECT files.fileid, files.name
        FROM *PREFIX*filecache files
        JOIN *PREFIX*mimetypes mimes ON mimes.id = files.mimetype
        WHERE files.parent = ? AND mimes.mimetype LIKE 'image/%'
        ORDER BY files.name, files.fileid
        """,
        (int(parent_folder_id),),
    )
