"""
Abstract store interface for the sales dashboard backend.

Concrete stores (in-memory, PostgreSQL) implement the SalesStore protocol so
the service layer can run list, lookup and catalog operations without knowing
how records are persisted.
"""

from __future__ import annotations

import abc
from typing import Any, List, Optional, Protocol, runtime_checkable
from uuid import UUID

from salesdash.domain.models import SaleRecord
from salesdash.query.predicate import Predicate, SortSpec

# Attributes a store can list distinct values for.
DISTINCT_FIELDS = frozenset(
    {"customer_region", "gender", "product_category", "tags", "payment_method"}
)


class StorageError(RuntimeError):
    """The backing store failed; the current operation is aborted."""


@runtime_checkable
class SalesStore(Protocol):
    """
    Read capability the service depends on.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    """

    name: str

    def count(self, predicate: Predicate) -> int:
        """Number of records matching `predicate`, ignoring pagination."""
        ...

    def find(
        self, predicate: Predicate, sort: SortSpec, skip: int, limit: int
    ) -> List[SaleRecord]:
        """
        Fetch one page of matching records.

        Parameters
        ----------
        predicate : Predicate
            Filter every returned record satisfies.
        sort : SortSpec
            Primary sort; ties fall back to the native identifier ascending.
        skip : int
            Number of matching records to skip.
        limit : int
            Maximum number of records to return.
        """
        ...

    def distinct(self, field: str) -> List[Any]:
        """Distinct values of `field` across all records; tags are flattened."""
        ...

    def find_by_id(self, record_id: UUID) -> Optional[SaleRecord]:
        ...

    def find_by_transaction_id(self, transaction_id: int) -> Optional[SaleRecord]:
        ...

    def close(self) -> None:
        ...


class AbstractSalesStore(abc.ABC):
    """
    Optional ABC helper for class-based implementations.

    Subclasses set `name` and implement the read operations. `close` is a
    no-op unless the store holds resources.
    """

    name: str

    @abc.abstractmethod
    def count(self, predicate: Predicate) -> int:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def find(
        self, predicate: Predicate, sort: SortSpec, skip: int, limit: int
    ) -> List[SaleRecord]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def distinct(self, field: str) -> List[Any]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    def find_by_id(self, record_id: UUID) -> Optional[SaleRecord]:  # pragma: no cover
        raise NotImplementedError

    @abc.abstractmethod
    def find_by_transaction_id(
        self, transaction_id: int
    ) -> Optional[SaleRecord]:  # pragma: no cover - interface only
        raise NotImplementedError

    def close(self) -> None:
        return None

    def _check_distinct_field(self, field: str) -> None:
        if field not in DISTINCT_FIELDS:
            raise ValueError(
                f"Unknown distinct field '{field}'. Available: {', '.join(sorted(DISTINCT_FIELDS))}"
            )


__all__ = [
    "AbstractSalesStore",
    "DISTINCT_FIELDS",
    "SalesStore",
    "StorageError",
]
