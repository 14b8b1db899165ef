"""
Bulk import of the sales CSV export into Postgres.

Wipes the sales table and reloads it from the export using COPY, one batch at
a time. The wipe and every batch share one transaction, so readers see either
the old data or the complete new data.
"""

from __future__ import annotations

import sys
import time
from itertools import islice
from pathlib import Path
from typing import Iterable, Iterator, List

import typer

from salesdash.config import get_settings
from salesdash.domain.models import SaleRecord
from salesdash.infrastructure.db_factory import build_dsn, get_sync_connection
from salesdash.ingest import read_sales_csv
from salesdash.stores.postgres import COLUMNS, TABLE, ensure_schema, record_to_row
from salesdash.utils.logging import configure_logging, get_logger

app = typer.Typer(help="Load the sales CSV export into Postgres (wipe + COPY).")
log = get_logger(__name__)


def _build_dsn(dsn_override: str | None) -> str:
    if dsn_override:
        return dsn_override
    return build_dsn()


def _batched(records: Iterable[SaleRecord], batch_size: int) -> Iterator[List[SaleRecord]]:
    iterator = iter(records)
    while True:
        batch = list(islice(iterator, batch_size))
        if not batch:
            break
        yield batch


def _copy_into_db(dsn: str, csv_path: Path, batch_size: int) -> int:
    """Replace the table contents with the records of `csv_path`; return the count."""
    conn = get_sync_connection(dsn)
    inserted = 0
    try:
        ensure_schema(conn)
        with conn.cursor() as cur:
            cur.execute(f"TRUNCATE TABLE {TABLE}")
        log.info("Cleared old data", extra={"table": TABLE})

        copy_sql = f"COPY {TABLE} ({', '.join(COLUMNS)}) FROM STDIN"
        for batch in _batched(read_sales_csv(csv_path), batch_size):
            with conn.cursor() as cur:
                with cur.copy(copy_sql) as copy:
                    for record in batch:
                        copy.write_row(record_to_row(record))
            inserted += len(batch)
            log.info(f"Inserted {inserted:,} records...", extra={"inserted": inserted})

        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
    return inserted


@app.command()
def main(
    csv_path: Path = typer.Option(
        ...,
        "--csv",
        "-c",
        help="Sales export to load.",
        exists=True,
        dir_okay=False,
    ),
    batch_size: int | None = typer.Option(
        None,
        "--batch-size",
        "-b",
        help="Rows per COPY batch (default from settings).",
    ),
    dsn: str | None = typer.Option(
        None,
        "--dsn",
        help="Optional DSN override for Postgres.",
    ),
) -> None:
    """
    Wipe the sales table and load the CSV export into it using COPY.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)
    effective_batch = batch_size or settings.import_batch_size

    start = time.perf_counter()
    typer.echo(f"Importing {csv_path} (batch={effective_batch})")
    inserted = _copy_into_db(_build_dsn(dsn), csv_path, effective_batch)
    duration = time.perf_counter() - start
    rate = inserted / duration if duration > 0 else 0.0
    typer.echo(f"Import finished. Total inserted: {inserted:,} in {duration:.2f}s ({rate:,.0f} rows/s)")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
