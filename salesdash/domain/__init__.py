"""
Domain package for the sales dashboard backend.

Exports the core domain models used across the query layer, the stores and
the HTTP API. Keep this package focused on data definitions.
"""

from salesdash.domain.models import FilterCatalog, PageEnvelope, PageSummary, SaleRecord

__all__ = [
    "FilterCatalog",
    "PageEnvelope",
    "PageSummary",
    "SaleRecord",
]
