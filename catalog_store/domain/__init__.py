"""
Domain package for the catalog store.

Exports the movie record, its validation rules, the runtime codec, and the
listing filters. Keep this package free of I/O.
"""

from catalog_store.domain.filters import (
    Filters,
    Metadata,
    MovieQuery,
    SORT_SAFELIST,
    build_list_query,
    calculate_metadata,
    parse_genres,
    validate_filters,
)
from catalog_store.domain.models import Movie, movie_from_json, movie_from_wire, validate_movie
from catalog_store.domain.runtime import decode_runtime, encode_runtime, format_runtime, parse_runtime
from catalog_store.domain.validator import Validator

__all__ = [
    "Filters",
    "Metadata",
    "Movie",
    "MovieQuery",
    "SORT_SAFELIST",
    "Validator",
    "build_list_query",
    "calculate_metadata",
    "decode_runtime",
    "encode_runtime",
    "format_runtime",
    "movie_from_json",
    "movie_from_wire",
    "parse_genres",
    "parse_runtime",
    "validate_filters",
    "validate_movie",
]
