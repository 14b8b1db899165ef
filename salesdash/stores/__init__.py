"""
Stores package for the sales dashboard backend.

Re-exports the store interface and the concrete stores so downstream code can
import from `salesdash.stores` directly.
"""

from salesdash.stores.abstract import (
    AbstractSalesStore,
    SalesStore,
    StorageError,
)
from salesdash.stores.memory import InMemorySalesStore
from salesdash.stores.postgres import PostgresSalesStore

__all__ = [
    # Abstracts
    "AbstractSalesStore",
    "SalesStore",
    "StorageError",
    # Concrete stores
    "InMemorySalesStore",
    "PostgresSalesStore",
]
