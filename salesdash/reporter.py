from __future__ import annotations

from typing import Any, List, Optional, Tuple

from rich import box
from rich.console import Console
from rich.table import Table

from salesdash.domain.models import FilterCatalog, PageEnvelope, SaleRecord

# (attribute, header) for the listing table; mirrors the dashboard columns.
PAGE_COLUMNS: List[Tuple[str, str]] = [
    ("transaction_id", "Transaction ID"),
    ("date", "Date"),
    ("customer_id", "Customer ID"),
    ("customer_name", "Customer name"),
    ("phone_number", "Phone Number"),
    ("gender", "Gender"),
    ("age", "Age"),
    ("product_category", "Product Category"),
    ("quantity", "Quantity"),
    ("total_amount", "Total Amount"),
    ("final_amount", "Final Amount"),
    ("payment_method", "Payment Method"),
    ("customer_region", "Region"),
]

_NUMERIC = {"transaction_id", "age", "quantity", "total_amount", "final_amount"}


def _format(value: Any) -> str:
    if value is None or value == []:
        return "-"
    if isinstance(value, float):
        return f"{value:,.2f}"
    if isinstance(value, list):
        return ", ".join(str(item) for item in value)
    if hasattr(value, "strftime"):
        return value.strftime("%Y-%m-%d")
    return str(value)


def print_page(envelope: PageEnvelope, console: Optional[Console] = None) -> None:
    """
    Render one page of sale records as a rich table.

    The caption carries the pagination counters and the per-page sums.
    """
    console = console or Console()

    if not envelope.data:
        console.print(
            f"[yellow]No sales on page {envelope.page} "
            f"({envelope.total_items:,} matching records).[/yellow]"
        )
        return

    summary = envelope.summary
    table = Table(
        title="Sales",
        box=box.ROUNDED,
        caption=(
            f"Page {envelope.page}/{envelope.total_pages} │ "
            f"{envelope.total_items:,} records │ "
            f"Units {summary.total_units:,} │ "
            f"Amount {summary.total_amount:,.2f} │ "
            f"Discount {summary.total_discount:,.2f}"
        ),
    )
    for attribute, header in PAGE_COLUMNS:
        if attribute in _NUMERIC:
            table.add_column(header, justify="right", style="magenta")
        else:
            table.add_column(header, style="cyan" if attribute == "customer_name" else None)

    for record in envelope.data:
        table.add_row(*(_format(getattr(record, attribute)) for attribute, _ in PAGE_COLUMNS))

    console.print(table)


def print_sale(record: SaleRecord, console: Optional[Console] = None) -> None:
    """Render every field of one record as a two-column table."""
    console = console or Console()
    table = Table(title=f"Sale {record.transaction_id or record.id}", box=box.ROUNDED)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Value")
    for name in SaleRecord.model_fields:
        table.add_row(name, _format(getattr(record, name)))
    console.print(table)


def print_catalog(catalog: FilterCatalog, console: Optional[Console] = None) -> None:
    """Render the filter catalog, one row per filterable field."""
    console = console or Console()
    table = Table(title="Filter values", box=box.ROUNDED)
    table.add_column("Field", style="cyan", no_wrap=True)
    table.add_column("Count", justify="right", style="magenta")
    table.add_column("Values")
    for name in FilterCatalog.model_fields:
        values = getattr(catalog, name)
        table.add_row(name, str(len(values)), ", ".join(values) or "-")
    console.print(table)


__all__ = ["print_catalog", "print_page", "print_sale"]
