"""
Storage executor: runs prepared statements against the album database.

The rest of the package talks to storage only through the small `Executor`
protocol defined here, so query code can be exercised against a scripted fake
in tests and against SQLite in production.

Statements are written with the `*PREFIX*` token in front of every table name;
the executor replaces it with the deployment's table prefix before running.

Driver errors are translated into the core error taxonomy:
- UNIQUE / PRIMARY KEY conflicts -> DuplicateKeyError
- closed connection, locked or missing database -> StorageUnavailableError
- anything else raised by the driver -> StorageError
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Final, Protocol, Sequence

import aiosqlite

from albumstore.config import DatabaseConfig, get_config
from albumstore.core import DuplicateKeyError, StorageError, StorageUnavailableError
from albumstore.core.db.schema import ensure_schema as ensure_schema_sql

logger = logging.getLogger(__name__)

PREFIX_TOKEN: Final[str] = "*PREFIX*"


def expand_prefix(sql: str, table_prefix: str) -> str:
    """Replace the table-name prefix token with the configured prefix."""
    return sql.replace(PREFIX_TOKEN, table_prefix)


class Executor(Protocol):
    """What the mapper needs from storage."""

    async def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        """Run a SELECT and return rows as column->value dicts."""
        ...

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run an UPDATE/DELETE and return the number of affected rows."""
        ...

    async def insert(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run an INSERT and return the new row id."""
        ...


def _translate(exc: aiosqlite.Error) -> StorageError:
    if isinstance(exc, aiosqlite.IntegrityError):
        msg = str(exc)
        if "UNIQUE" in msg or "PRIMARY KEY" in msg:
            return DuplicateKeyError(msg)
        return StorageError(msg)
    if isinstance(exc, aiosqlite.OperationalError):
        return StorageUnavailableError(str(exc))
    return StorageError(str(exc))


class SqliteExecutor:
    """
    Async SQLite implementation of `Executor`.

    Usage:
        db = SqliteExecutor.from_config()   # or SqliteExecutor("albums.db", table_prefix="oc_")
        await db.open()
        await db.ensure_schema()
        mapper = AlbumMapper(db)
        ...
        await db.close()

    Notes:
    - Connections are not pooled; we keep a single connection.
    - Every write statement is committed immediately.
    """

    def __init__(self, db_path: str | Path, *, table_prefix: str | None = None) -> None:
        self._db_path = str(db_path)
        self._table_prefix = (
            table_prefix if table_prefix is not None else get_config().database.table_prefix
        )
        self._conn: aiosqlite.Connection | None = None

    @classmethod
    def from_config(cls, cfg: DatabaseConfig | None = None) -> SqliteExecutor:
        """Build an executor from the [database] settings (global config by default)."""
        if cfg is None:
            cfg = get_config().database
        return cls(cfg.path, table_prefix=cfg.table_prefix)

    @property
    def is_open(self) -> bool:
        return self._conn is not None

    @property
    def table_prefix(self) -> str:
        return self._table_prefix

    async def open(self) -> None:
        if self._conn is not None:
            return
        try:
            conn = await aiosqlite.connect(self._db_path)
        except aiosqlite.Error as e:
            raise StorageUnavailableError(f"Cannot open {self._db_path}: {e}") from e
        conn.row_factory = aiosqlite.Row

        # Pragmas: modern defaults without being clever.
        try:
            await conn.execute("PRAGMA foreign_keys = ON;")
            await conn.execute("PRAGMA journal_mode = WAL;")
            await conn.execute("PRAGMA synchronous = NORMAL;")
            await conn.execute("PRAGMA temp_store = MEMORY;")
        except aiosqlite.Error as e:
            await conn.close()
            raise _translate(e) from e

        self._conn = conn
        logger.debug("Opened album database %s (prefix %r)", self._db_path, self._table_prefix)

    async def close(self) -> None:
        if self._conn is None:
            return
        await self._conn.close()
        self._conn = None

    def _require_conn(self) -> aiosqlite.Connection:
        if self._conn is None:
            raise StorageUnavailableError("SqliteExecutor is not open. Call await db.open() first.")
        return self._conn

    async def ensure_schema(self) -> None:
        """Create or migrate schema to current version."""
        conn = self._require_conn()
        await ensure_schema_sql(conn, self._table_prefix)

    async def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        conn = self._require_conn()
        statement = expand_prefix(sql, self._table_prefix)
        try:
            cursor = await conn.execute(statement, tuple(params))
            rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise _translate(e) from e
        return [dict(r) for r in rows]

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        conn = self._require_conn()
        statement = expand_prefix(sql, self._table_prefix)
        try:
            cursor = await conn.execute(statement, tuple(params))
            await conn.commit()
        except aiosqlite.Error as e:
            await conn.rollback()
            raise _translate(e) from e
        return int(cursor.rowcount)

    async def insert(self, sql: str, params: Sequence[Any] = ()) -> int:
        conn = self._require_conn()
        statement = expand_prefix(sql, self._table_prefix)
        try:
            cursor = await conn.execute(statement, tuple(params))
            await conn.commit()
        except aiosqlite.Error as e:
            await conn.rollback()
            raise _translate(e) from e
        if cursor.lastrowid is None:
            raise StorageError("Insert did not report a row id.")
        return int(cursor.lastrowid)
