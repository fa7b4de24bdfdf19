"""
Infrastructure package for the catalog store.

Centralizes database connectivity concerns (DSN, pooling, statement deadlines).
Keep this layer focused on I/O and resource management, decoupled from the
movie domain.
"""

from catalog_store.infrastructure.db_factory import (
    PoolManager,
    apply_statement_timeout,
    build_dsn,
    check_connection,
    get_sync_pool,
    open_pool,
)

__all__ = [
    "PoolManager",
    "apply_statement_timeout",
    "build_dsn",
    "check_connection",
    "get_sync_pool",
    "open_pool",
]
