"""
Shared fixtures for albumstore tests.

`ScriptedExecutor` stands in for storage when a test cares about the exact
statements the mapper issues: every expected call is queued up front with its
SQL, parameters and result, and each real call must match the next entry.
SQL is compared with whitespace collapsed, so builders are free to format
statements across several lines.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Any, Sequence

import pytest

from albumstore.config import CoverConfig
from albumstore.core.album_mapper import AlbumMapper
from albumstore.core.db.executor import SqliteExecutor


def normalize_sql(sql: str) -> str:
    return " ".join(sql.split())


@dataclass
class ExpectedCall:
    method: str
    sql: str
    params: tuple[Any, ...]
    result: Any = None
    raises: Exception | None = None


class ScriptedExecutor:
    """Executor fake that replays a fixed script of statements."""

    def __init__(self) -> None:
        self._script: deque[ExpectedCall] = deque()
        self.calls: list[tuple[str, str, tuple[Any, ...]]] = []

    def expect_select(self, sql: str, params: Sequence[Any] = (), rows: Sequence[dict] = ()) -> None:
        self._script.append(ExpectedCall("fetch_all", sql, tuple(params), [dict(r) for r in rows]))

    def expect_execute(self, sql: str, params: Sequence[Any] = (), rowcount: int = 0) -> None:
        self._script.append(ExpectedCall("execute", sql, tuple(params), rowcount))

    def expect_insert(
        self,
        sql: str,
        params: Sequence[Any] = (),
        row_id: int = 1,
        raises: Exception | None = None,
    ) -> None:
        self._script.append(ExpectedCall("insert", sql, tuple(params), row_id, raises))

    def _replay(self, method: str, sql: str, params: Sequence[Any]) -> Any:
        self.calls.append((method, normalize_sql(sql), tuple(params)))
        assert self._script, f"Unexpected {method}: {normalize_sql(sql)}"
        expected = self._script.popleft()
        assert method == expected.method
        assert normalize_sql(sql) == normalize_sql(expected.sql)
        assert tuple(params) == expected.params
        if expected.raises is not None:
            raise expected.raises
        return expected.result

    async def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> list[dict[str, Any]]:
        return self._replay("fetch_all", sql, params)

    async def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        return self._replay("execute", sql, params)

    async def insert(self, sql: str, params: Sequence[Any] = ()) -> int:
        return self._replay("insert", sql, params)

    def assert_done(self) -> None:
        remaining = [normalize_sql(c.sql) for c in self._script]
        assert not remaining, f"Expected statements were never issued: {remaining}"


@pytest.fixture
def scripted() -> ScriptedExecutor:
    executor = ScriptedExecutor()
    yield executor
    executor.assert_done()


@pytest.fixture
def mapper(scripted: ScriptedExecutor) -> AlbumMapper:
    return AlbumMapper(scripted, cover_config=CoverConfig())


@pytest.fixture
async def db() -> SqliteExecutor:
    """Create an in-memory album database for testing."""
    db = SqliteExecutor(":memory:", table_prefix="oc_")
    await db.open()
    await db.ensure_schema()
    yield db
    await db.close()
