"""
CSV ingestion helpers.

Converts rows of the source sales export into `SaleRecord` values. The export
uses human column headers ("Transaction ID", "Customer Name", ...), dates in
DD-MM-YYYY form and comma-separated tags. Empty or unparseable cells become
None; unknown columns are ignored.
"""

from __future__ import annotations

import csv
import math
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Mapping, Optional

from salesdash.domain.models import SaleRecord
from salesdash.query.params import parse_datetime

CSV_COLUMNS: Dict[str, str] = {
    "Transaction ID": "transaction_id",
    "Date": "date",
    "Customer ID": "customer_id",
    "Customer Name": "customer_name",
    "Phone Number": "phone_number",
    "Gender": "gender",
    "Age": "age",
    "Customer Region": "customer_region",
    "Customer Type": "customer_type",
    "Product ID": "product_id",
    "Product Name": "product_name",
    "Brand": "brand",
    "Product Category": "product_category",
    "Tags": "tags",
    "Quantity": "quantity",
    "Price per Unit": "price_per_unit",
    "Discount Percentage": "discount_percentage",
    "Total Amount": "total_amount",
    "Final Amount": "final_amount",
    "Payment Method": "payment_method",
    "Order Status": "order_status",
    "Delivery Type": "delivery_type",
    "Store ID": "store_id",
    "Store Location": "store_location",
    "Salesperson ID": "salesperson_id",
    "Employee Name": "employee_name",
}

_INT_FIELDS = frozenset({"transaction_id", "age", "quantity"})
_FLOAT_FIELDS = frozenset(
    {"price_per_unit", "discount_percentage", "total_amount", "final_amount"}
)
_CSV_DATE_FORMAT = "%d-%m-%Y"


def _to_float(value: str) -> Optional[float]:
    try:
        number = float(value)
    except ValueError:
        return None
    return number if math.isfinite(number) else None


def _to_int(value: str) -> Optional[int]:
    try:
        return int(value)
    except ValueError:
        number = _to_float(value)
        return int(number) if number is not None else None


def parse_csv_date(value: str) -> Optional[datetime]:
    """Parse the export's DD-MM-YYYY dates, falling back to ISO 8601."""
    try:
        return datetime.strptime(value, _CSV_DATE_FORMAT)
    except ValueError:
        return parse_datetime(value)


def split_tags(value: str) -> List[str]:
    return [tag.strip() for tag in value.split(",") if tag.strip()]


def row_to_record(row: Mapping[str, Optional[str]]) -> SaleRecord:
    """Convert one CSV row (header -> cell) into a `SaleRecord`."""
    fields: Dict[str, Any] = {}
    for header, name in CSV_COLUMNS.items():
        cell = (row.get(header) or "").strip()
        if name == "tags":
            fields[name] = split_tags(cell)
        elif not cell:
            fields[name] = None
        elif name == "date":
            fields[name] = parse_csv_date(cell)
        elif name in _INT_FIELDS:
            fields[name] = _to_int(cell)
        elif name in _FLOAT_FIELDS:
            fields[name] = _to_float(cell)
        else:
            fields[name] = cell
    return SaleRecord(**fields)


def read_sales_csv(csv_path: Path) -> Iterator[SaleRecord]:
    """Stream `SaleRecord` values from a sales export."""
    with Path(csv_path).open("r", newline="", encoding="utf-8-sig") as f:
        for row in csv.DictReader(f):
            yield row_to_record(row)


__all__ = [
    "CSV_COLUMNS",
    "parse_csv_date",
    "read_sales_csv",
    "row_to_record",
    "split_tags",
]
