"""
Sales service: listing, single-record lookup and the filter catalog.

Usage:
    from salesdash.service import SalesService
    from salesdash.stores import InMemorySalesStore

    service = SalesService(InMemorySalesStore(records))
    envelope = service.list_sales({"region": "North,South", "page": "2"})
    print(envelope.total_items, len(envelope.data))

The service is stateless apart from the store it is given. Malformed request
parameters never raise; store failures (`StorageError`) propagate unchanged.
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union
from uuid import UUID

from salesdash.domain.models import FilterCatalog, PageEnvelope, PageSummary, SaleRecord
from salesdash.query.params import SalesQuery, parse_sales_query
from salesdash.query.predicate import build_predicate, build_sort
from salesdash.stores.abstract import SalesStore
from salesdash.utils.logging import get_logger

log = get_logger(__name__)

# FilterCatalog attribute -> SaleRecord attribute
CATALOG_FIELDS: Dict[str, str] = {
    "regions": "customer_region",
    "genders": "gender",
    "categories": "product_category",
    "tags": "tags",
    "payment_methods": "payment_method",
}

_INTEGER_ID = re.compile(r"\s*[+-]?\d+\s*")
_BIGINT_MIN = -(2**63)
_BIGINT_MAX = 2**63 - 1


def resolve_identifier(identifier: str) -> Union[UUID, int, None]:
    """
    Decide how a lookup identifier addresses a record.

    A structurally valid UUID is a native identifier. Otherwise an integer is a
    transaction id. Anything else cannot match a record and gives None.
    """
    try:
        return UUID(identifier)
    except ValueError:
        pass
    if not _INTEGER_ID.fullmatch(identifier):
        return None
    transaction_id = int(identifier)
    if not _BIGINT_MIN <= transaction_id <= _BIGINT_MAX:
        return None
    return transaction_id


def _catalog_values(values: Iterable[Any]) -> List[str]:
    return sorted({str(value) for value in values if value})


class SalesService:
    """Read operations over an injected `SalesStore`."""

    def __init__(self, store: SalesStore) -> None:
        self._store = store

    @property
    def store(self) -> SalesStore:
        return self._store

    def list_sales(self, params: Mapping[str, Any]) -> PageEnvelope:
        """Parse raw request parameters and return the requested page."""
        return self.run_query(parse_sales_query(params))

    def run_query(self, query: SalesQuery) -> PageEnvelope:
        """
        Count, then fetch, one page for an already parsed query.

        The two store calls are sequential and not isolated from each other; a
        write landing between them can make `total_items` disagree with `data`.
        """
        predicate = build_predicate(query)
        sort = build_sort(query)

        total_items = self._store.count(predicate)
        data = self._store.find(predicate, sort, query.skip, query.limit)

        log.debug(
            "Sales page served",
            extra={
                "store": self._store.name,
                "clauses": len(predicate.clauses),
                "page": query.page,
                "limit": query.limit,
                "total_items": total_items,
                "returned": len(data),
            },
        )
        return PageEnvelope(
            page=query.page,
            limit=query.limit,
            total_items=total_items,
            total_pages=math.ceil(total_items / query.limit),
            data=data,
            summary=PageSummary.from_records(data),
        )

    def get_sale(self, identifier: str) -> Optional[SaleRecord]:
        """Look a record up by native id or transaction id; None when absent."""
        key = resolve_identifier(identifier)
        if isinstance(key, UUID):
            return self._store.find_by_id(key)
        if key is None:
            return None
        return self._store.find_by_transaction_id(key)

    def filter_catalog(self) -> FilterCatalog:
        """Distinct, non-empty, sorted values for every filterable field."""
        return FilterCatalog(
            **{
                name: _catalog_values(self._store.distinct(field))
                for name, field in CATALOG_FIELDS.items()
            }
        )

    def close(self) -> None:
        self._store.close()


__all__ = ["CATALOG_FIELDS", "SalesService", "resolve_identifier"]
