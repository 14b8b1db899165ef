"""
Sales dashboard backend - filtered, sorted, paginated browsing of sale records.

This package provides the query layer behind a sales browsing dashboard:

- Lenient parsing of listing parameters into a typed query
- Pure construction of filter predicates and sort specs
- A service producing page envelopes, single-record lookups and filter catalogs
- Interchangeable stores (in-memory, PostgreSQL)
- A FastAPI HTTP surface, a typer CLI and a bulk CSV importer
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from salesdash.config import Settings, get_settings
from salesdash.domain.models import FilterCatalog, PageEnvelope, PageSummary, SaleRecord
from salesdash.query import SalesQuery, build_predicate, build_sort, parse_sales_query
from salesdash.service import SalesService
from salesdash.stores import (
    InMemorySalesStore,
    PostgresSalesStore,
    SalesStore,
    StorageError,
)
from salesdash.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "FilterCatalog",
    "PageEnvelope",
    "PageSummary",
    "SaleRecord",
    # Query building
    "SalesQuery",
    "build_predicate",
    "build_sort",
    "parse_sales_query",
    # Service and stores
    "SalesService",
    "SalesStore",
    "InMemorySalesStore",
    "PostgresSalesStore",
    "StorageError",
    # Logging
    "configure_logging",
    "get_logger",
]
