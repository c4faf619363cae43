"""
Database schema + migrations for albumstore.

- Connection management stays in `executor.py`
- Schema creation, schema versioning, and forward-only migrations live here

Design notes:
- We use SQLite `PRAGMA user_version` as the schema version.
- Migrations are forward-only (no downgrade support).
- Every table name carries the deployment's table prefix.

Besides the album tables, the schema contains the track table and a read-only
mirror of the host's file index (`filecache` + `mimetypes`). In a full
deployment those are owned by other components; they are created here so the
album layer can run standalone.
"""

from __future__ import annotations

from typing import Final

import aiosqlite

# Bump when you change the schema and add a migration in `migrate()`.
SCHEMA_VERSION: Final[int] = 2


async def ensure_schema(conn: aiosqlite.Connection, table_prefix: str) -> None:
    """
    Create or migrate schema to current version.

    This function assumes:
    - `conn` is an open aiosqlite connection
    - `table_prefix` is trusted configuration, never user input
    """
    cursor = await conn.execute("PRAGMA user_version;")
    row = await cursor.fetchone()
    current = int(row[0]) if row is not None else 0

    if current > SCHEMA_VERSION:
        raise RuntimeError(
            f"Database schema version {current} is newer than supported {SCHEMA_VERSION}."
        )

    if current == SCHEMA_VERSION:
        return

    await migrate(conn, table_prefix, from_version=current, to_version=SCHEMA_VERSION)
    await conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION};")
    await conn.commit()


async def migrate(
    conn: aiosqlite.Connection, table_prefix: str, *, from_version: int, to_version: int
) -> None:
    """
    Perform forward-only migrations.

    Keep migrations small. If you need a big refactor, create a new DB.
    """
    p = table_prefix

    # v0 -> v1
    if from_version == 0 and to_version >= 1:
        await conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {p}music_albums (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                name TEXT,
                year INTEGER,
                cover_file_id INTEGER
            )
            """
        )
        await conn.execute(
            f"CREATE INDEX IF NOT EXISTS {p}idx_albums_user_name ON {p}music_albums(user_id, name);"
        )
        await conn.execute(
            f"CREATE INDEX IF NOT EXISTS {p}idx_albums_cover ON {p}music_albums(cover_file_id);"
        )

        await conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {p}music_album_artists (
                album_id INTEGER NOT NULL,
                artist_id INTEGER NOT NULL
            )
            """
        )
        await conn.execute(
            f"CREATE INDEX IF NOT EXISTS {p}idx_album_artists_album "
            f"ON {p}music_album_artists(album_id);"
        )

        await conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {p}music_tracks (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                user_id TEXT NOT NULL,
                title TEXT,
                album_id INTEGER,
                file_id INTEGER NOT NULL
            )
            """
        )
        await conn.execute(
            f"CREATE INDEX IF NOT EXISTS {p}idx_tracks_album ON {p}music_tracks(album_id);"
        )
        await conn.execute(
            f"CREATE INDEX IF NOT EXISTS {p}idx_tracks_file ON {p}music_tracks(file_id);"
        )

        # File index mirror
        await conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {p}mimetypes (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                mimetype TEXT NOT NULL UNIQUE
            )
            """
        )
        await conn.execute(
            f"""
            CREATE TABLE IF NOT EXISTS {p}filecache (
                fileid INTEGER PRIMARY KEY AUTOINCREMENT,
                parent INTEGER,
                name TEXT NOT NULL,
                mimetype INTEGER REFERENCES {p}mimetypes(id)
            )
            """
        )
        await conn.execute(
            f"CREATE INDEX IF NOT EXISTS {p}idx_filecache_parent ON {p}filecache(parent);"
        )

        await conn.commit()
        from_version = 1

    # v1 -> v2
    if from_version == 1 and to_version >= 2:
        # Relation rows must be unique so concurrent inserts collide instead of duplicating.
        await conn.execute(
            f"""
            DELETE FROM {p}music_album_artists
            WHERE rowid NOT IN (
                SELECT MIN(rowid) FROM {p}music_album_artists GROUP BY album_id, artist_id
            )
            """
        )
        await conn.execute(
            f"CREATE UNIQUE INDEX IF NOT EXISTS {p}uniq_album_artists "
            f"ON {p}music_album_artists(album_id, artist_id);"
        )

        await conn.commit()
        from_version = 2

    if from_version != to_version:
        raise RuntimeError(f"No migration path from {from_version} to {to_version}.")
