"""
Movie store: CRUD and filtered listing against PostgreSQL.

Every operation borrows one pooled connection, runs inside a single
transaction, and is bounded by a deadline (the configured statement timeout,
optionally shortened by the caller). Failures surface as the structured errors
of `catalog_store.errors`; a failed or cancelled call rolls back, leaving no
partial effect.

Updates use optimistic concurrency: the version check and the increment happen
in one conditional UPDATE, so among concurrent writers starting from the same
version exactly one wins and the rest get EditConflict.

Usage:
    store = MovieStore()
    movie = store.insert(Movie(title="Casablanca", year=1942, runtime=102, genres=["drama"]))
    movie = store.update(movie.model_copy(update={"title": "Casablanca (1942)"}))
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

import psycopg
import psycopg.errors
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool, PoolTimeout

from catalog_store.background import BackgroundTasks
from catalog_store.config import Settings, get_settings
from catalog_store.domain.filters import Metadata, MovieQuery, build_list_query, calculate_metadata
from catalog_store.domain.models import Movie, validate_movie
from catalog_store.domain.validator import Validator
from catalog_store.errors import (
    ConstraintViolation,
    EditConflict,
    QueryTimeout,
    RecordNotFound,
    UnknownStoreError,
)
from catalog_store.infrastructure.db_factory import apply_statement_timeout, get_sync_pool
from catalog_store.utils.logging import get_logger

log = get_logger(__name__)

_INSERT_SQL = """
    INSERT INTO movies (title, year, runtime, genres)
    VALUES (%(title)s, %(year)s, %(runtime)s, %(genres)s)
    RETURNING id, created_at, version"""

_GET_SQL = """
    SELECT id, created_at, title, year, runtime, genres, version
    FROM movies
    WHERE id = %(id)s"""

_UPDATE_SQL = """
    UPDATE movies
    SET title = %(title)s, year = %(year)s, runtime = %(runtime)s, genres = %(genres)s,
        version = version + 1
    WHERE id = %(id)s AND version = %(version)s
    RETURNING version"""

_DELETE_SQL = """
    DELETE FROM movies
    WHERE id = %(id)s"""


def _row_to_movie(row: Dict[str, Any]) -> Movie:
    fields = {key: value for key, value in row.items() if key != "total_records"}
    return Movie.model_validate(fields)


def _write_params(movie: Movie) -> Dict[str, Any]:
    return {
        "title": movie.title,
        "year": movie.year,
        "runtime": movie.runtime,
        "genres": list(movie.genres or []),
    }


class MovieStore:
    """
    Stateless access to the `movies` table.

    Parameters
    ----------
    pool : ConnectionPool, optional
        Pool to borrow connections from. Defaults to the shared PoolManager pool
        for `settings`, opened without waiting on first use; readiness is then
        bounded by each call's deadline like any other connection wait.
    settings : Settings, optional
        Source of the default deadline. Defaults to `get_settings()`.
    on_insert : callable, optional
        Side effect invoked with each newly inserted Movie on a background
        thread. Its failures are logged and never reach the caller.
    background : BackgroundTasks, optional
        Runner for `on_insert`; one is created when omitted.
    """

    def __init__(
        self,
        pool: Optional[ConnectionPool] = None,
        settings: Optional[Settings] = None,
        on_insert: Optional[Callable[[Movie], Any]] = None,
        background: Optional[BackgroundTasks] = None,
    ) -> None:
        self._pool = pool
        self._settings = settings or get_settings()
        self._on_insert = on_insert
        self.background = background or BackgroundTasks()

    def _connection_pool(self) -> ConnectionPool:
        if self._pool is None:
            self._pool = get_sync_pool(self._settings, wait=False)
        return self._pool

    def _budget(self, timeout: Optional[float]) -> float:
        default = self._settings.default_timeout_seconds
        budget = default if timeout is None else min(default, timeout)
        if budget <= 0:
            raise QueryTimeout()
        return budget

    @contextmanager
    def _transaction(self, operation: str, timeout: Optional[float]) -> Iterator[psycopg.Cursor]:
        """
        Yield a dict-row cursor inside one transaction bounded by the deadline.

        Translates psycopg failures into the store's error taxonomy.
        """
        budget = self._budget(timeout)
        started = time.monotonic()
        try:
            with self._connection_pool().connection(timeout=budget) as conn:
                remaining = budget - (time.monotonic() - started)
                if remaining <= 0:
                    raise QueryTimeout()
                with conn.transaction():
                    with conn.cursor(row_factory=dict_row) as cur:
                        apply_statement_timeout(cur, max(1, int(remaining * 1000)))
                        yield cur
        except PoolTimeout as exc:
            log.warning("No connection available before deadline", extra={"operation": operation})
            raise QueryTimeout("timed out waiting for a database connection") from exc
        except psycopg.errors.QueryCanceled as exc:
            log.warning("Statement cancelled at deadline", extra={"operation": operation})
            raise QueryTimeout() from exc
        except psycopg.errors.UniqueViolation as exc:
            raise ConstraintViolation(str(exc), constraint=exc.diag.constraint_name) from exc
        except psycopg.Error as exc:
            log.error("Storage error", extra={"operation": operation, "error": type(exc).__name__})
            raise UnknownStoreError(str(exc)) from exc

    def insert(self, draft: Movie, timeout: Optional[float] = None) -> Movie:
        """
        Validate and persist a draft; returns it with id, created_at and version 1.

        Raises ValidationFailure listing every invalid field before any write.
        """
        v = Validator()
        validate_movie(v, draft)
        v.raise_if_invalid()

        with self._transaction("insert", timeout) as cur:
            cur.execute(_INSERT_SQL, _write_params(draft))
            row = cur.fetchone()

        movie = draft.model_copy(update=dict(row))
        log.info("Movie inserted", extra={"movie_id": movie.id, "version": movie.version})
        if self._on_insert is not None:
            self.background.submit(self._on_insert, movie)
        return movie

    def get(self, movie_id: int, timeout: Optional[float] = None) -> Movie:
        if movie_id < 1:
            raise RecordNotFound()

        with self._transaction("get", timeout) as cur:
            cur.execute(_GET_SQL, {"id": movie_id})
            row = cur.fetchone()

        if row is None:
            raise RecordNotFound()
        log.debug("Movie fetched", extra={"movie_id": movie_id})
        return _row_to_movie(row)

    def update(
        self,
        movie: Movie,
        expected_version: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> Movie:
        """
        Replace every content field of `movie` if its stored version still matches.

        `expected_version` defaults to `movie.version`, the version from the
        caller's last read. Raises EditConflict when the version moved on or the
        movie no longer exists.
        """
        v = Validator()
        validate_movie(v, movie)
        v.raise_if_invalid()

        version = movie.version if expected_version is None else expected_version
        params = _write_params(movie)
        params.update(id=movie.id, version=version)

        with self._transaction("update", timeout) as cur:
            cur.execute(_UPDATE_SQL, params)
            row = cur.fetchone()

        if row is None:
            log.info("Edit conflict", extra={"movie_id": movie.id, "version": version})
            raise EditConflict()
        log.info("Movie updated", extra={"movie_id": movie.id, "version": row["version"]})
        return movie.model_copy(update={"version": row["version"]})

    def delete(self, movie_id: int, timeout: Optional[float] = None) -> None:
        if movie_id < 1:
            raise RecordNotFound()

        with self._transaction("delete", timeout) as cur:
            cur.execute(_DELETE_SQL, {"id": movie_id})
            affected = cur.rowcount

        if affected == 0:
            raise RecordNotFound()
        log.info("Movie deleted", extra={"movie_id": movie_id})

    def _select(self, query: MovieQuery, timeout: Optional[float]) -> Tuple[List[Movie], int]:
        sql, params = build_list_query(query)

        with self._transaction("list", timeout) as cur:
            cur.execute(sql, params)
            rows = cur.fetchall()

        total = rows[0]["total_records"] if rows else 0
        movies = [_row_to_movie(row) for row in rows]
        log.debug("Movies listed", extra={"rows": len(movies), "total_records": total})
        return movies, total

    def list(self, query: Optional[MovieQuery] = None, timeout: Optional[float] = None) -> List[Movie]:
        """Movies matching `query`, in the requested order then by id. Never None."""
        movies, _ = self._select(query or MovieQuery(), timeout)
        return movies

    def list_page(
        self, query: Optional[MovieQuery] = None, timeout: Optional[float] = None
    ) -> Tuple[List[Movie], Metadata]:
        """Like `list`, plus pagination metadata computed from the total match count."""
        query = query or MovieQuery()
        movies, total = self._select(query, timeout)
        return movies, calculate_metadata(total, query.filters.page, query.filters.page_size)


__all__ = ["MovieStore"]
