"""
In-process sales store.

Holds records in a list and evaluates predicates in Python. Used by the test
suite and by the CLI when it is pointed at a CSV file instead of PostgreSQL.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Iterable, List, Optional, Set
from uuid import UUID

from salesdash.domain.models import SaleRecord
from salesdash.ingest import read_sales_csv
from salesdash.query.predicate import Predicate, SortSpec
from salesdash.stores.abstract import AbstractSalesStore


def _sorted(records: List[SaleRecord], sort: SortSpec) -> List[SaleRecord]:
    # Stable sorts: order by id first so ties keep id-ascending order.
    by_id = sorted(records, key=lambda record: record.id)
    present = [r for r in by_id if getattr(r, sort.field) is not None]
    missing = [r for r in by_id if getattr(r, sort.field) is None]
    present.sort(key=lambda record: getattr(record, sort.field), reverse=sort.descending)
    return present + missing if sort.descending else missing + present


class InMemorySalesStore(AbstractSalesStore):
    """List-backed store; every query is a full scan."""

    name: str = "memory"

    def __init__(self, records: Iterable[SaleRecord] = ()) -> None:
        self._records: List[SaleRecord] = list(records)

    @classmethod
    def from_csv(cls, csv_path: Path) -> "InMemorySalesStore":
        return cls(read_sales_csv(csv_path))

    def __len__(self) -> int:
        return len(self._records)

    def count(self, predicate: Predicate) -> int:
        return sum(1 for record in self._records if predicate.matches(record))

    def find(
        self, predicate: Predicate, sort: SortSpec, skip: int, limit: int
    ) -> List[SaleRecord]:
        matching = [record for record in self._records if predicate.matches(record)]
        return _sorted(matching, sort)[skip : skip + limit]

    def distinct(self, field: str) -> List[Any]:
        self._check_distinct_field(field)
        values: Set[Any] = set()
        for record in self._records:
            value = getattr(record, field)
            if field == "tags":
                values.update(value)
            else:
                values.add(value)
        return list(values)

    def find_by_id(self, record_id: UUID) -> Optional[SaleRecord]:
        return next((r for r in self._records if r.id == record_id), None)

    def find_by_transaction_id(self, transaction_id: int) -> Optional[SaleRecord]:
        return next((r for r in self._records if r.transaction_id == transaction_id), None)


__all__ = ["InMemorySalesStore"]
