"""
Catalog Store - persistence layer for movie catalog entries on PostgreSQL.

This package provides:

- A `Movie` record with collect-all validation and a wire representation
- A runtime codec for the "<n> mins" external form
- Safe, allow-listed search/sort/pagination queries
- A `MovieStore` with deadline-bounded CRUD and optimistic concurrency
- A closed error taxonomy mapped to HTTP status codes at the boundary
"""

from __future__ import annotations

__version__ = "1.0.0"
__license__ = "MIT"

# Public API exports
from catalog_store.background import BackgroundTasks
from catalog_store.config import Settings, get_settings
from catalog_store.domain import (
    Filters,
    Metadata,
    Movie,
    MovieQuery,
    decode_runtime,
    encode_runtime,
    movie_from_json,
    movie_from_wire,
)
from catalog_store.errors import (
    ConstraintViolation,
    EditConflict,
    ErrorKind,
    InvalidFormat,
    QueryTimeout,
    RecordNotFound,
    StoreError,
    UnknownStoreError,
    ValidationFailure,
    error_payload,
    status_code_for,
)
from catalog_store.store import MovieStore
from catalog_store.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "Filters",
    "Metadata",
    "Movie",
    "MovieQuery",
    "decode_runtime",
    "encode_runtime",
    "movie_from_json",
    "movie_from_wire",
    # Store
    "BackgroundTasks",
    "MovieStore",
    # Errors
    "ConstraintViolation",
    "EditConflict",
    "ErrorKind",
    "InvalidFormat",
    "QueryTimeout",
    "RecordNotFound",
    "StoreError",
    "UnknownStoreError",
    "ValidationFailure",
    "error_payload",
    "status_code_for",
    # Logging
    "configure_logging",
    "get_logger",
]
