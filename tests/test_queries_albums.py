"""
Tests for the album query builders and the Album entity.

These tests verify:
- filter-state classification (absent / NULL / value)
- every name/year combination maps to its fixed WHERE fragment
- invalid combinations fail with InvalidFilterStateError
- Album dirty-field tracking
"""

from __future__ import annotations

import pytest

from albumstore.core import InvalidFilterStateError
from albumstore.core.db import queries_albums, queries_relations
from albumstore.core.db.fragments import MISSING, FilterState, filter_state, id_list
from albumstore.core.db.models import Album

from conftest import normalize_sql


class TestFilterState:
    def test_states(self) -> None:
        assert filter_state(MISSING, str) is FilterState.ABSENT
        assert filter_state(None, str) is FilterState.NULL
        assert filter_state("x", str) is FilterState.VALUE
        assert filter_state(0, int) is FilterState.VALUE

    def test_wrong_type_is_rejected(self) -> None:
        with pytest.raises(InvalidFilterStateError):
            filter_state("2005", int)
        with pytest.raises(InvalidFilterStateError):
            filter_state(True, int)

    def test_id_list(self) -> None:
        assert id_list([1, 2, 3]) == ("(?,?,?)", (1, 2, 3))
        assert id_list((4,)) == ("(?)", (4,))
        with pytest.raises(InvalidFilterStateError):
            id_list([])


class TestNameAndYear:
    @pytest.mark.parametrize(
        ("kwargs", "fragment", "params"),
        [
            ({"name": "a", "year": 1}, "album.name = ? AND album.year = ?", ("u", "a", 1)),
            ({"name": None, "year": 1}, "album.name IS NULL AND album.year = ?", ("u", 1)),
            ({"name": "a", "year": None}, "album.name = ? AND album.year IS NULL", ("u", "a")),
            ({"name": None, "year": None}, "album.name IS NULL AND album.year IS NULL", ("u",)),
            ({"name": "a"}, "album.name = ?", ("u", "a")),
            ({"name": None}, "album.name IS NULL", ("u",)),
            ({"year": 1}, "album.year = ?", ("u", 1)),
            ({"year": None}, "album.year IS NULL", ("u",)),
        ],
    )
    def test_fragments(self, kwargs, fragment, params) -> None:
        q = queries_albums.select_album_by_name_and_year("u", **kwargs)
        assert normalize_sql(q.sql).endswith(f"WHERE album.user_id = ? AND {fragment}")
        assert q.params == params

    def test_user_scope_is_first_parameter(self) -> None:
        q = queries_albums.select_album_by_name_and_year("alice", name="a", year=2)
        assert q.params[0] == "alice"

    def test_both_absent_is_invalid(self) -> None:
        with pytest.raises(InvalidFilterStateError):
            queries_albums.select_album_by_name_and_year("u")

    def test_wrong_year_type_is_invalid(self) -> None:
        with pytest.raises(InvalidFilterStateError):
            queries_albums.select_album_by_name_and_year("u", name="a", year="2001")


class TestSelectByName:
    def test_fuzzy_wraps_term(self) -> None:
        q = queries_albums.select_albums_by_name("Road", "u", fuzzy=True)
        assert "LOWER(album.name) LIKE LOWER(?) ESCAPE '\\'" in q.sql
        assert q.params == ("u", "%Road%")
        assert normalize_sql(q.sql).endswith("ORDER BY album.name")

    def test_fuzzy_escapes_wildcards(self) -> None:
        q = queries_albums.select_albums_by_name("100%_a\\b", "u", fuzzy=True)
        assert q.params == ("u", "%100\\%\\_a\\\\b%")

    def test_non_string_name_is_invalid(self) -> None:
        with pytest.raises(InvalidFilterStateError):
            queries_albums.select_albums_by_name(123, "u")  # type: ignore[arg-type]

    def test_exact_null_name(self) -> None:
        q = queries_albums.select_albums_by_name(None, "u")
        assert "album.name IS NULL" in q.sql
        assert q.params == ("u",)

    def test_fuzzy_null_name_is_invalid(self) -> None:
        with pytest.raises(InvalidFilterStateError):
            queries_albums.select_albums_by_name(None, "u", fuzzy=True)


class TestWriteBuilders:
    def test_update_rejects_unknown_columns(self) -> None:
        with pytest.raises(InvalidFilterStateError):
            queries_albums.update_album(1, {"title": "x"})

    def test_update_rejects_empty(self) -> None:
        with pytest.raises(InvalidFilterStateError):
            queries_albums.update_album(1, {})

    def test_delete_needs_ids(self) -> None:
        with pytest.raises(InvalidFilterStateError):
            queries_albums.delete_albums([])
        with pytest.raises(InvalidFilterStateError):
            queries_relations.delete_relations_by_album_ids([])

    def test_set_cover_parameter_order(self) -> None:
        q = queries_albums.set_album_cover(album_id=9, cover_file_id=7)
        assert q.params == (7, 9)


class TestAlbumEntity:
    def test_constructor_values_are_clean(self) -> None:
        album = Album(id=1, user_id="u", name="a", year=2000, cover_file_id=3)
        assert album.updated_fields == frozenset()

    def test_assignment_marks_field(self) -> None:
        album = Album(id=1, user_id="u", name="a")
        album.year = 2001
        album.name = "b"
        assert album.updated_fields == {"year", "name"}
        album.reset_updated_fields()
        assert album.updated_fields == frozenset()

    def test_id_is_not_tracked(self) -> None:
        album = Album(user_id="u")
        album.id = 5
        assert album.updated_fields == frozenset()

    def test_equality_ignores_dirty_state(self) -> None:
        a = Album(id=1, user_id="u", name="x")
        b = Album(id=1, user_id="u", name="y")
        b.name = "x"
        assert a == b

    def test_from_row_missing_columns(self) -> None:
        album = Album.from_row({"id": "3", "name": None})
        assert album == Album(id=3)
