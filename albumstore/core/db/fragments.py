"""
Shared SQL building blocks for the query modules.

These helpers centralize:
- the `Query` value (statement + bound parameters) every builder returns,
- the three states an optional filter can be in (absent / NULL / value),
- `IN (?,?,...)` placeholder lists for batched id statements.

Important:
- Returned strings are *static SQL fragments*. Values are always bound as
  parameters, never interpolated.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Final, Iterable

from albumstore.core import InvalidFilterStateError


@dataclass(frozen=True, slots=True)
class Query:
    """A parameterized statement, ready for an `Executor`."""

    sql: str
    params: tuple[Any, ...] = ()


class _Missing(Enum):
    MISSING = "missing"


# Marks an optional filter that was not supplied at all (as opposed to None).
MISSING: Final = _Missing.MISSING


class FilterState(Enum):
    """How an optional filter participates in a WHERE clause."""

    ABSENT = "absent"  # no fragment, no parameter
    NULL = "null"  # `col IS NULL`, no parameter
    VALUE = "value"  # `col = ?`, one parameter


def filter_state(value: Any, expected: type | tuple[type, ...]) -> FilterState:
    """
    Classify a filter value.

    Raises InvalidFilterStateError when a value is present but of the wrong type.
    """
    if value is MISSING:
        return FilterState.ABSENT
    if value is None:
        return FilterState.NULL
    # bool is an int subclass; True is never a meaningful year/id.
    if isinstance(value, bool) or not isinstance(value, expected):
        raise InvalidFilterStateError(
            f"Filter value {value!r} has type {type(value).__name__}, expected {expected}"
        )
    return FilterState.VALUE


def id_list(ids: Iterable[int]) -> tuple[str, tuple[int, ...]]:
    """
    Return (`(?,?,...)`, params) for an IN clause.

    An empty list has no valid SQL form; callers must short-circuit before
    building the statement.
    """
    params = tuple(int(i) for i in ids)
    if not params:
        raise InvalidFilterStateError("IN clause requires at least one id")
    return "(" + ",".join("?" * len(params)) + ")", params
