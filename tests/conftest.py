"""
Pytest configuration for the catalog store.

Provides fixtures for:
- Settings override for integration tests
- Database connection management and schema initialization
- A MovieStore bound to a dedicated test pool
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import psycopg
import pytest
from psycopg_pool import ConnectionPool

from catalog_store.config import Settings
from catalog_store.store import MovieStore


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "catalog"),
        db_pool_max_size=5,
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return test_settings.dsn


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped database connection for integration tests.

    Skips tests if database is not available.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn)
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="session")
def db_schema_initialized(db_connection: psycopg.Connection) -> bool:
    """
    Ensure the movies table exists, creating it from db/init.sql if necessary.
    """
    init_sql_path = Path(__file__).parent.parent / "db" / "init.sql"
    with db_connection.cursor() as cur:
        cur.execute(init_sql_path.read_text(encoding="utf-8"))
    db_connection.commit()
    return True


@pytest.fixture(scope="function")
def clean_movies_table(db_connection: psycopg.Connection, db_schema_initialized: bool):
    """
    Empty the movies table before and after each test function.
    """
    with db_connection.cursor() as cur:
        cur.execute("TRUNCATE TABLE public.movies RESTART IDENTITY;")
    db_connection.commit()
    yield
    with db_connection.cursor() as cur:
        cur.execute("TRUNCATE TABLE public.movies RESTART IDENTITY;")
    db_connection.commit()


@pytest.fixture(scope="session")
def test_pool(
    test_settings: Settings, db_connection_available: bool
) -> Generator[ConnectionPool, None, None]:
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    pool = ConnectionPool(
        conninfo=test_settings.dsn,
        min_size=1,
        max_size=test_settings.db_pool_max_size,
        open=False,
    )
    pool.open(wait=True, timeout=10)
    try:
        yield pool
    finally:
        pool.close()


@pytest.fixture(scope="function")
def store(test_pool: ConnectionPool, test_settings: Settings, clean_movies_table) -> MovieStore:
    return MovieStore(pool=test_pool, settings=test_settings)


@pytest.fixture(scope="function")
def seeded_store(store: MovieStore) -> MovieStore:
    """
    Store with a small deterministic dataset (25 movies).
    """
    from scripts.seed_movies import _generate_movies, _insert_movies

    _insert_movies(store, _generate_movies(rows=25, seed=42))
    return store
