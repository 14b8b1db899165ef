"""
Domain models for the sales dashboard backend.

Defines the sale record schema aligned with the `public.sales` table, plus the response
shapes returned by the service: the page envelope, its per-page summary, and
the filter catalog. JSON output uses camelCase aliases.
"""
from __future__ import annotations

from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

_CAMEL_CONFIG = ConfigDict(
    frozen=True,
    populate_by_name=True,
    alias_generator=to_camel,
)


class SaleRecord(BaseModel):
    """
    Representation of a single row in the `sales` table.

    Every attribute except the native identifier is optional: the records are
    sourced from a CSV export and any cell may be missing.
    """

    id: UUID = Field(default_factory=uuid4, description="Native store identifier.")
    transaction_id: Optional[int] = Field(None, description="Numeric transaction identifier.")
    date: Optional[datetime] = Field(None, description="Transaction timestamp (naive, local).")

    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    phone_number: Optional[str] = None
    gender: Optional[str] = None
    age: Optional[int] = None
    customer_region: Optional[str] = None
    customer_type: Optional[str] = None

    product_id: Optional[str] = None
    product_name: Optional[str] = None
    brand: Optional[str] = None
    product_category: Optional[str] = None
    tags: List[str] = Field(default_factory=list, description="Free-text product tags.")

    quantity: Optional[int] = None
    price_per_unit: Optional[float] = None
    discount_percentage: Optional[float] = None
    total_amount: Optional[float] = None
    final_amount: Optional[float] = Field(
        None, description="Total minus discount, as provided at ingestion."
    )

    payment_method: Optional[str] = None
    order_status: Optional[str] = None
    delivery_type: Optional[str] = None
    store_id: Optional[str] = None
    store_location: Optional[str] = None
    salesperson_id: Optional[str] = None
    employee_name: Optional[str] = None

    model_config = _CAMEL_CONFIG


class PageSummary(BaseModel):
    """Simple sums over the records of one page."""

    total_units: int = 0
    total_amount: float = 0.0
    total_discount: float = 0.0

    model_config = _CAMEL_CONFIG

    @classmethod
    def from_records(cls, records: Iterable[SaleRecord]) -> "PageSummary":
        units = 0
        amount = 0.0
        discount = 0.0
        for record in records:
            units += record.quantity or 0
            amount += record.total_amount or 0.0
            discount += (record.total_amount or 0.0) - (record.final_amount or 0.0)
        return cls(total_units=units, total_amount=amount, total_discount=discount)


class PageEnvelope(BaseModel):
    """A page of sale records plus the counts needed to paginate."""

    page: int
    limit: int
    total_items: int
    total_pages: int
    data: List[SaleRecord]
    summary: PageSummary = Field(default_factory=PageSummary)

    model_config = _CAMEL_CONFIG


class FilterCatalog(BaseModel):
    """Distinct values per filterable field, each sorted ascending."""

    regions: List[str] = Field(default_factory=list)
    genders: List[str] = Field(default_factory=list)
    categories: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    payment_methods: List[str] = Field(default_factory=list)

    model_config = _CAMEL_CONFIG


__all__ = ["FilterCatalog", "PageEnvelope", "PageSummary", "SaleRecord"]
