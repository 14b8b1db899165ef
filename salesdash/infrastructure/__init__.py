"""
Infrastructure package for the sales dashboard backend.

Centralizes database connectivity concerns (DSNs, pools, one-off connections).
Keep this layer focused on I/O and resource management, decoupled from the
query and service logic.
"""

from salesdash.infrastructure.db_factory import (
    apply_statement_timeout,
    build_dsn,
    create_pool,
    get_sync_connection,
)

__all__ = [
    "apply_statement_timeout",
    "build_dsn",
    "create_pool",
    "get_sync_connection",
]
