"""
Database connection factory utilities for the catalog store.

Provides centralized management of the PostgreSQL connection pools with proper
lifecycle management. The PoolManager singleton ensures the pools are closed on
application exit.

Opening the pool at startup retries transient connection failures using
tenacity. Store operations open it without waiting and never retry.
"""

from __future__ import annotations

import atexit
import threading
from typing import Optional

import psycopg
from psycopg_pool import ConnectionPool, PoolTimeout
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from catalog_store.config import Settings, get_settings
from catalog_store.utils.logging import get_logger

log = get_logger(__name__)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a DSN string from settings."""
    return (settings or get_settings()).dsn


class PoolManager:
    """
    Thread-safe singleton for managing database connection pools.

    One pool is kept per DSN, so stores built from different settings never
    share connections. Pool sizes come from the settings that first request a
    given DSN. Handles lifecycle management with automatic cleanup via atexit
    hook.
    """

    _instance: Optional["PoolManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "PoolManager":
        """Create or return the singleton instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._pools = {}
                atexit.register(cls._instance.close_all)
            return cls._instance

    def get_sync_pool(self, settings: Optional[Settings] = None, wait: bool = True) -> ConnectionPool:
        """
        Get or create the shared connection pool for the settings' DSN.

        With `wait=True` the pool is opened through `open_pool`, which blocks
        until the minimum number of connections is up, with retry. With
        `wait=False` the pool starts connecting in the background and returns
        immediately; callers then bound readiness through
        `pool.connection(timeout=...)`.
        """
        settings = settings or get_settings()
        dsn = build_dsn(settings)
        with self._lock:
            pool = self._pools.get(dsn)
            if pool is None:
                pool = ConnectionPool(
                    conninfo=dsn,
                    min_size=settings.db_pool_min_size,
                    max_size=settings.db_pool_max_size,
                    open=False,
                )
                self._pools[dsn] = pool
            if not wait:
                pool.open(wait=False)

        if wait:
            open_pool(pool, timeout=settings.default_timeout_seconds, attempts=settings.db_connect_attempts)
        return pool

    def close_all(self) -> None:
        """
        Close every managed pool and release resources.

        This is called automatically on exit via atexit hook.
        """
        with self._lock:
            pools, self._pools = list(self._pools.values()), {}
        for pool in pools:
            try:
                pool.close()
            except psycopg.Error:
                log.warning("Error while closing connection pool", exc_info=True)


def open_pool(pool: ConnectionPool, timeout: float = 3.0, attempts: int = 3) -> ConnectionPool:
    """
    Open `pool` and wait until it holds its minimum connections.

    Retries with exponential backoff when the database is not reachable yet.

    Raises
    ------
    psycopg_pool.PoolTimeout
        If the pool cannot fill up after all retry attempts.
    """

    @retry(
        stop=stop_after_attempt(attempts),
        wait=wait_exponential(multiplier=1, min=1, max=10),
        retry=retry_if_exception_type((PoolTimeout, psycopg.OperationalError)),
        reraise=True,
    )
    def _open() -> None:
        log.debug("Opening connection pool", extra={"min_size": pool.min_size, "max_size": pool.max_size})
        pool.open(wait=True, timeout=timeout)

    _open()
    return pool


def get_sync_pool(settings: Optional[Settings] = None, wait: bool = True) -> ConnectionPool:
    """Get or create the shared connection pool via PoolManager."""
    return PoolManager().get_sync_pool(settings, wait=wait)


def apply_statement_timeout(cur: psycopg.Cursor, timeout_ms: int) -> None:
    """
    Bound every following statement of the current transaction to `timeout_ms`.

    The setting is transaction-local, so it never leaks to the next borrower of
    a pooled connection.
    """
    cur.execute("SELECT set_config('statement_timeout', %s, true)", (str(int(timeout_ms)),))


def check_connection(pool: ConnectionPool, timeout: float = 3.0) -> bool:
    """Run a trivial query through the pool; True when the database answers."""
    with pool.connection(timeout=timeout) as conn:
        with conn.cursor() as cur:
            cur.execute("SELECT 1")
            row = cur.fetchone()
    return row is not None and row[0] == 1


__all__ = [
    "PoolManager",
    "apply_statement_timeout",
    "build_dsn",
    "check_connection",
    "get_sync_pool",
    "open_pool",
]
