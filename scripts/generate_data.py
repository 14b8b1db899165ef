"""
Synthetic sales export generator.

Writes a deterministic pseudo-random CSV in the same layout as the real sales
export, for local serving (`salesdash serve --csv`) and for seeding tests.
Optionally loads it into Postgres through the importer.
"""

from __future__ import annotations

import csv
import random
import sys
import tempfile
import time
from datetime import date, timedelta
from pathlib import Path

import typer

from salesdash.ingest import CSV_COLUMNS
from scripts.import_csv import _build_dsn, _copy_into_db

app = typer.Typer(help="Generate a synthetic sales export and optionally load it into Postgres.")

FIRST_NAMES = ["Aarav", "Diya", "Ishaan", "Kavya", "Neha", "Rohan", "Sanya", "Vivaan"]
LAST_NAMES = ["Sharma", "Verma", "Iyer", "Reddy", "Gupta", "Nair", "Singh", "Das"]
REGIONS = ["North", "South", "East", "West", "Central"]
GENDERS = ["Male", "Female"]
CUSTOMER_TYPES = ["New", "Returning", "Loyal"]
CATEGORIES = {
    "Beauty": ["organic", "skincare", "fragrance-free"],
    "Clothing": ["cotton", "casual", "formal"],
    "Electronics": ["wireless", "smart", "portable"],
}
BRANDS = ["Acme", "Zenith", "Nova", "Orbit"]
PAYMENT_METHODS = ["Cash", "Credit Card", "Debit Card", "UPI", "Wallet"]
ORDER_STATUSES = ["Completed", "Pending", "Cancelled", "Returned"]
DELIVERY_TYPES = ["Standard", "Express", "Store Pickup"]
STORE_LOCATIONS = ["Mumbai", "Delhi", "Bengaluru", "Chennai", "Kolkata"]

_FIRST_DAY = date(2021, 1, 1)


def _generate_rows_csv(csv_path: Path, rows: int, batch_size: int, seed: int) -> None:
    rng = random.Random(seed)

    with csv_path.open("w", newline="", encoding="utf-8") as f:
        writer = csv.writer(f)
        writer.writerow(list(CSV_COLUMNS))

        buffer: list[list[str]] = []
        for i in range(rows):
            category = rng.choice(list(CATEGORIES))
            tags = rng.sample(CATEGORIES[category], k=rng.randint(1, 2))
            quantity = rng.randint(1, 10)
            price = round(rng.uniform(50, 5_000), 2)
            discount = rng.choice([0, 5, 10, 15, 20, 25])
            total = round(quantity * price, 2)
            final = round(total * (100 - discount) / 100, 2)
            sold_on = _FIRST_DAY + timedelta(days=rng.randint(0, 3 * 365))
            store_index = rng.randrange(len(STORE_LOCATIONS))
            employee = f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}"
            buffer.append(
                [
                    str(i + 1),
                    sold_on.strftime("%d-%m-%Y"),
                    f"CUST-{rng.randint(1, 5_000):05d}",
                    f"{rng.choice(FIRST_NAMES)} {rng.choice(LAST_NAMES)}",
                    f"9{rng.randint(0, 999_999_999):09d}",
                    rng.choice(GENDERS),
                    str(rng.randint(18, 70)),
                    rng.choice(REGIONS),
                    rng.choice(CUSTOMER_TYPES),
                    f"PROD-{rng.randint(1, 500):04d}",
                    f"{category} item {rng.randint(1, 50)}",
                    rng.choice(BRANDS),
                    category,
                    ",".join(tags),
                    str(quantity),
                    f"{price:.2f}",
                    str(discount),
                    f"{total:.2f}",
                    f"{final:.2f}",
                    rng.choice(PAYMENT_METHODS),
                    rng.choice(ORDER_STATUSES),
                    rng.choice(DELIVERY_TYPES),
                    f"ST-{store_index + 1:03d}",
                    STORE_LOCATIONS[store_index],
                    f"EMP-{rng.randint(1, 200):04d}",
                    employee,
                ]
            )
            if len(buffer) >= batch_size:
                writer.writerows(buffer)
                buffer.clear()
        if buffer:
            writer.writerows(buffer)


@app.command()
def main(
    rows: int = typer.Option(
        10_000,
        "--rows",
        "-r",
        help="Number of rows to generate.",
    ),
    batch_size: int = typer.Option(
        2_000,
        "--batch-size",
        "-b",
        help="Batch size for CSV buffering and for the COPY load.",
    ),
    seed: int = typer.Option(
        42,
        "--seed",
        help="Deterministic RNG seed.",
    ),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Optional CSV output path (if omitted, a temp file will be used).",
    ),
    dsn: str | None = typer.Option(
        None,
        "--dsn",
        help="Optional DSN override for Postgres.",
    ),
    no_load: bool = typer.Option(
        False,
        "--no-load",
        help="Only generate CSV; skip loading into Postgres.",
    ),
) -> None:
    """
    Generate a synthetic sales export and optionally load it into Postgres.
    """
    start = time.perf_counter()
    if output:
        csv_path = output
        csv_path.parent.mkdir(parents=True, exist_ok=True)
    else:
        tmpdir = Path(tempfile.mkdtemp(prefix="sales_csv_"))
        csv_path = tmpdir / "sales.csv"

    typer.echo(f"Generating {rows:,} rows -> {csv_path} (seed={seed})")
    _generate_rows_csv(csv_path, rows=rows, batch_size=batch_size, seed=seed)
    typer.echo(f"CSV generation completed in {time.perf_counter() - start:.2f}s")

    if no_load:
        typer.echo("Skipping load (no-load flag set).")
        return

    typer.echo("Loading CSV into Postgres via COPY...")
    inserted = _copy_into_db(_build_dsn(dsn), csv_path, batch_size)
    typer.echo(f"Loaded {inserted:,} rows. Total time {time.perf_counter() - start:.2f}s.")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
