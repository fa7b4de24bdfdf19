from __future__ import annotations

import pytest

from catalog_store.domain.filters import (
    MAX_PAGE_SIZE,
    SORT_SAFELIST,
    Filters,
    Metadata,
    MovieQuery,
    build_list_query,
    calculate_metadata,
    parse_genres,
    validate_filters,
)
from catalog_store.domain.validator import Validator
from catalog_store.errors import ValidationFailure


def test_safelist_contains_ascending_and_descending_forms() -> None:
    assert set(SORT_SAFELIST) == {"id", "title", "year", "runtime", "-id", "-title", "-year", "-runtime"}


@pytest.mark.parametrize(
    ("sort", "column", "direction"),
    [("id", "id", "ASC"), ("-year", "year", "DESC"), ("title", "title", "ASC"), ("-runtime", "runtime", "DESC")],
)
def test_sort_resolution(sort: str, column: str, direction: str) -> None:
    f = Filters(sort=sort)

    assert f.sort_column() == column
    assert f.sort_direction() == direction


@pytest.mark.parametrize("sort", ["name", "--id", "id; DROP TABLE movies", "created_at", "ID"])
def test_sort_outside_safelist_is_refused(sort: str) -> None:
    with pytest.raises(ValidationFailure) as excinfo:
        Filters(sort=sort).sort_column()
    assert excinfo.value.errors == {"sort": "invalid sort value"}


def test_limit_and_offset() -> None:
    f = Filters(page=3, page_size=20)

    assert f.limit() == 20
    assert f.offset() == 40


def test_validate_filters_collects_every_problem() -> None:
    v = Validator()
    validate_filters(v, Filters(page=0, page_size=MAX_PAGE_SIZE + 1, sort="bogus"))

    assert v.errors == {
        "page": "must be greater than zero",
        "page_size": "must be a maximum of 100",
        "sort": "invalid sort value",
    }


def test_build_list_query_binds_every_value() -> None:
    query = MovieQuery(title="black night", genres=["drama", "crime"], filters=Filters(page=2, page_size=10, sort="-title"))

    sql, params = build_list_query(query)

    assert params == {"title": "black night", "genres": ["drama", "crime"], "limit": 10, "offset": 10}
    assert "black night" not in sql
    assert "drama" not in sql
    assert "ORDER BY title DESC, id ASC" in sql
    assert "plainto_tsquery('simple', %(title)s::text)" in sql
    assert "genres @> %(genres)s::text[]" in sql
    assert "LIMIT %(limit)s OFFSET %(offset)s" in sql


def test_build_list_query_defaults_order_by_id() -> None:
    sql, params = build_list_query(MovieQuery())

    assert "ORDER BY id ASC, id ASC" in sql
    assert params["title"] == ""
    assert params["genres"] == []
    assert params["offset"] == 0


def test_build_list_query_rejects_invalid_sort() -> None:
    with pytest.raises(ValidationFailure):
        build_list_query(MovieQuery(filters=Filters(sort="created_at")))


def test_calculate_metadata() -> None:
    assert calculate_metadata(0, 1, 20) == Metadata()
    assert calculate_metadata(45, 2, 20) == Metadata(
        current_page=2, page_size=20, first_page=1, last_page=3, total_records=45
    )


def test_empty_metadata_serializes_to_empty_object() -> None:
    assert Metadata().to_wire() == {}
    assert calculate_metadata(5, 1, 5).to_wire()["last_page"] == 1


def test_parse_genres() -> None:
    assert parse_genres("") == []
    assert parse_genres(None) == []
    assert parse_genres("drama, crime,,  ") == ["drama", "crime"]
