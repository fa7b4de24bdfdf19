"""
Listing filters and the parameterized query they produce.

The sort key is the only caller-influenced value that becomes part of the SQL
text. It is resolved through `SORT_SAFELIST` into fixed column and direction
literals; every other value is a bound parameter.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

from catalog_store.domain.validator import Validator, permitted_value
from catalog_store.errors import ValidationFailure

MAX_PAGE = 10_000_000
MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20

_SORT_COLUMNS: Dict[str, str] = {
    "id": "id",
    "title": "title",
    "year": "year",
    "runtime": "runtime",
}

SORT_SAFELIST: Tuple[str, ...] = tuple(_SORT_COLUMNS) + tuple(f"-{name}" for name in _SORT_COLUMNS)

_LIST_SQL = """
    SELECT count(*) OVER() AS total_records, id, created_at, title, year, runtime, genres, version
    FROM movies
    WHERE (to_tsvector('simple', title) @@ plainto_tsquery('simple', %(title)s::text) OR %(title)s::text = '')
    AND (genres @> %(genres)s::text[] OR cardinality(%(genres)s::text[]) = 0)
    ORDER BY {column} {direction}, id ASC
    LIMIT %(limit)s OFFSET %(offset)s"""


@dataclass(frozen=True)
class Filters:
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    sort: str = "id"

    def sort_column(self) -> str:
        if self.sort not in SORT_SAFELIST:
            raise ValidationFailure({"sort": "invalid sort value"})
        return _SORT_COLUMNS[self.sort.lstrip("-")]

    def sort_direction(self) -> str:
        return "DESC" if self.sort.startswith("-") else "ASC"

    def limit(self) -> int:
        return self.page_size

    def offset(self) -> int:
        return (self.page - 1) * self.page_size


def validate_filters(v: Validator, f: Filters) -> None:
    v.check(f.page > 0, "page", "must be greater than zero")
    v.check(f.page <= MAX_PAGE, "page", "must be a maximum of 10 million")
    v.check(f.page_size > 0, "page_size", "must be greater than zero")
    v.check(f.page_size <= MAX_PAGE_SIZE, "page_size", "must be a maximum of 100")
    v.check(permitted_value(f.sort, *SORT_SAFELIST), "sort", "invalid sort value")


@dataclass(frozen=True)
class MovieQuery:
    """Search input for listing: full-text title, required genres, pagination and sort."""

    title: str = ""
    genres: Sequence[str] = ()
    filters: Filters = field(default_factory=Filters)


@dataclass(frozen=True)
class Metadata:
    current_page: int = 0
    page_size: int = 0
    first_page: int = 0
    last_page: int = 0
    total_records: int = 0

    def to_wire(self) -> Dict[str, int]:
        if not self.total_records:
            return {}
        return {
            "current_page": self.current_page,
            "page_size": self.page_size,
            "first_page": self.first_page,
            "last_page": self.last_page,
            "total_records": self.total_records,
        }


def calculate_metadata(total_records: int, page: int, page_size: int) -> Metadata:
    if total_records == 0:
        return Metadata()
    return Metadata(
        current_page=page,
        page_size=page_size,
        first_page=1,
        last_page=math.ceil(total_records / page_size),
        total_records=total_records,
    )


def build_list_query(query: MovieQuery) -> Tuple[str, Dict[str, Any]]:
    """
    Validate the query and render the listing SQL with its bound parameters.

    Raises ValidationFailure before any SQL is produced when the pagination or
    sort input is out of bounds.
    """
    v = Validator()
    validate_filters(v, query.filters)
    v.raise_if_invalid()

    f = query.filters
    sql = _LIST_SQL.format(column=f.sort_column(), direction=f.sort_direction())
    params: Dict[str, Any] = {
        "title": query.title,
        "genres": list(query.genres),
        "limit": f.limit(),
        "offset": f.offset(),
    }
    return sql, params


def parse_genres(raw: Optional[str]) -> List[str]:
    """Split a comma-delimited genre list, dropping blanks."""
    if not raw:
        return []
    return [part.strip() for part in raw.split(",") if part.strip()]


__all__ = [
    "Filters",
    "Metadata",
    "MovieQuery",
    "SORT_SAFELIST",
    "MAX_PAGE",
    "MAX_PAGE_SIZE",
    "DEFAULT_PAGE_SIZE",
    "build_list_query",
    "calculate_metadata",
    "parse_genres",
    "validate_filters",
]
