"""
Database connection factory utilities for the sales dashboard backend.

Builds DSNs from settings, creates psycopg connection pools for long-lived
stores, and opens one-off connections for scripts. Pools are owned by whoever
creates them (a store, the API lifespan); nothing here is process-global.

Includes retry logic for transient connection failures using tenacity.
"""

from __future__ import annotations

from typing import Optional

import psycopg
from psycopg import Connection, Cursor
from psycopg.rows import dict_row
from psycopg_pool import ConnectionPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from salesdash.config import Settings, get_settings
from salesdash.utils.logging import get_logger

log = get_logger(__name__)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


def create_pool(
    dsn: Optional[str] = None, min_size: int = 1, max_size: int = 10
) -> ConnectionPool:
    """
    Create and open a synchronous connection pool returning dict rows.

    Parameters
    ----------
    dsn : str, optional
        Connection string. Defaults to the one built from settings.
    min_size : int
        Minimum number of idle connections to keep.
    max_size : int
        Maximum total connections in the pool.

    Returns
    -------
    ConnectionPool
        An open pool. The caller is responsible for closing it.
    """
    pool = ConnectionPool(
        conninfo=dsn or build_dsn(),
        min_size=min_size,
        max_size=max_size,
        kwargs={"row_factory": dict_row},
        open=True,
    )
    log.info("Connection pool opened", extra={"min_size": min_size, "max_size": max_size})
    return pool


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(dsn: Optional[str] = None) -> Connection:
    """
    Acquire a dedicated synchronous connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.
    Use this for one-off work such as the bulk import. Prefer a pool for request
    traffic.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return psycopg.connect(dsn or build_dsn())


def apply_statement_timeout(cur: Cursor, timeout_ms: int) -> None:
    """Limit statements in the current transaction to `timeout_ms` (0 = no limit)."""
    if timeout_ms > 0:
        cur.execute("SELECT set_config('statement_timeout', %s, true)", (str(timeout_ms),))


__all__ = [
    "apply_statement_timeout",
    "build_dsn",
    "create_pool",
    "get_sync_connection",
]
