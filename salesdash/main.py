from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, Optional

import typer
import uvicorn

from salesdash.config import get_settings
from salesdash.reporter import print_catalog, print_page, print_sale
from salesdash.service import SalesService
from salesdash.stores import InMemorySalesStore, PostgresSalesStore, StorageError
from salesdash.utils.logging import configure_logging

app = typer.Typer(help="Sales dashboard backend CLI.")

CSV_OPTION = typer.Option(
    None,
    "--csv",
    help="Serve/query an in-memory store loaded from this CSV instead of PostgreSQL.",
    exists=True,
    dir_okay=False,
)


def _setup_logging() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


def _build_service(csv_path: Optional[Path]) -> SalesService:
    if csv_path is not None:
        return SalesService(InMemorySalesStore.from_csv(csv_path))
    return SalesService(PostgresSalesStore.from_settings())


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"pool=({settings.db_pool_min_size},{settings.db_pool_max_size}) "
        f"statement_timeout_ms={settings.db_statement_timeout_ms} | "
        f"API={settings.api_host}:{settings.api_port} env={settings.app_env}"
    )


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, "--host", help="Bind address (default from settings)."),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port (default from settings)."),
    csv_path: Optional[Path] = CSV_OPTION,
) -> None:
    """
    Run the HTTP API with uvicorn.
    """
    from salesdash.api import create_app

    settings = get_settings()
    _setup_logging()
    service = SalesService(InMemorySalesStore.from_csv(csv_path)) if csv_path else None
    uvicorn.run(
        create_app(service=service, settings=settings),
        host=host or settings.api_host,
        port=port or settings.api_port,
        log_config=None,
    )


@app.command()
def sales(
    search: Optional[str] = typer.Option(None, "--search", "-q", help="Name or phone substring."),
    region: Optional[str] = typer.Option(None, "--region", help="Comma-separated regions."),
    gender: Optional[str] = typer.Option(None, "--gender", help="Comma-separated genders."),
    age_min: Optional[str] = typer.Option(None, "--age-min", help="Inclusive minimum age."),
    age_max: Optional[str] = typer.Option(None, "--age-max", help="Inclusive maximum age."),
    category: Optional[str] = typer.Option(None, "--category", help="Comma-separated categories."),
    tags: Optional[str] = typer.Option(None, "--tags", help="Comma-separated tags."),
    payment: Optional[str] = typer.Option(None, "--payment", help="Comma-separated methods."),
    start_date: Optional[str] = typer.Option(None, "--start-date", help="ISO date, inclusive."),
    end_date: Optional[str] = typer.Option(None, "--end-date", help="ISO date, whole day included."),
    sort_by: Optional[str] = typer.Option(None, "--sort-by", help="date, quantity or customerName."),
    sort_order: Optional[str] = typer.Option(None, "--sort-order", help="asc or desc."),
    page: Optional[str] = typer.Option(None, "--page", help="Page number (1-based)."),
    limit: Optional[str] = typer.Option(None, "--limit", help="Page size."),
    csv_path: Optional[Path] = CSV_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Print the page envelope as JSON."),
) -> None:
    """
    Print one page of sales matching the given filters.
    """
    _setup_logging()
    params: Dict[str, Optional[str]] = {
        "search": search,
        "region": region,
        "gender": gender,
        "ageMin": age_min,
        "ageMax": age_max,
        "category": category,
        "tags": tags,
        "payment": payment,
        "startDate": start_date,
        "endDate": end_date,
        "sortBy": sort_by,
        "sortOrder": sort_order,
        "page": page,
        "limit": limit,
    }
    service = _build_service(csv_path)
    try:
        envelope = service.list_sales({k: v for k, v in params.items() if v is not None})
    finally:
        service.close()

    if as_json:
        typer.echo(envelope.model_dump_json(by_alias=True, indent=2))
    else:
        print_page(envelope)


@app.command()
def sale(
    identifier: str = typer.Argument(..., help="Native id (UUID) or transaction id."),
    csv_path: Optional[Path] = CSV_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Print the record as JSON."),
) -> None:
    """
    Print a single sale record.
    """
    _setup_logging()
    service = _build_service(csv_path)
    try:
        record = service.get_sale(identifier)
    finally:
        service.close()

    if record is None:
        typer.echo(f"Sale '{identifier}' not found.", err=True)
        raise typer.Exit(code=1)
    if as_json:
        typer.echo(record.model_dump_json(by_alias=True, indent=2))
    else:
        print_sale(record)


@app.command()
def filters(
    csv_path: Optional[Path] = CSV_OPTION,
    as_json: bool = typer.Option(False, "--json", help="Print the catalog as JSON."),
) -> None:
    """
    Print the distinct values available for each filter.
    """
    _setup_logging()
    service = _build_service(csv_path)
    try:
        catalog = service.filter_catalog()
    finally:
        service.close()

    if as_json:
        typer.echo(catalog.model_dump_json(by_alias=True, indent=2))
    else:
        print_catalog(catalog)


def main() -> None:
    try:
        app()
    except StorageError as exc:
        typer.echo(f"Storage error: {exc}", err=True)
        sys.exit(1)
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
