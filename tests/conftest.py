"""
Pytest configuration for the sales dashboard backend.

Provides fixtures for:
- A small, hand-written set of sale records
- In-memory store and service built on those records
- Database connection management and seeding for integration tests
"""

from __future__ import annotations

import os
import tempfile
from datetime import datetime
from pathlib import Path
from typing import Generator, List
from uuid import UUID

import psycopg
import pytest

from salesdash.config import Settings
from salesdash.domain.models import SaleRecord
from salesdash.service import SalesService
from salesdash.stores.memory import InMemorySalesStore
from salesdash.stores.postgres import TABLE, ensure_schema


def _uuid(n: int) -> UUID:
    return UUID(int=n)


def make_record(n: int, **fields) -> SaleRecord:
    """Build a record with id UUID(int=n) and transaction id n unless overridden."""
    fields.setdefault("id", _uuid(n))
    fields.setdefault("transaction_id", n)
    return SaleRecord(**fields)


@pytest.fixture
def sample_records() -> List[SaleRecord]:
    """
    Six records covering every filterable field, with a few missing values.

    Record 6 has no date, age, quantity or region.
    """
    return [
        make_record(
            1,
            date=datetime(2023, 1, 10, 9, 30),
            customer_name="Alice Sharma",
            phone_number="9876500001",
            gender="Female",
            age=30,
            customer_region="North",
            product_category="Beauty",
            tags=["organic", "skincare"],
            quantity=2,
            total_amount=200.0,
            final_amount=180.0,
            payment_method="UPI",
        ),
        make_record(
            2,
            date=datetime(2023, 1, 10, 18, 0),
            customer_name="bob Verma",
            phone_number="9876500002",
            gender="Male",
            age=45,
            customer_region="South",
            product_category="Electronics",
            tags=["wireless"],
            quantity=5,
            total_amount=1000.0,
            final_amount=900.0,
            payment_method="Credit Card",
        ),
        make_record(
            3,
            date=datetime(2023, 2, 1),
            customer_name="Charlie Iyer",
            phone_number="9123400003",
            gender="Male",
            age=22,
            customer_region="North",
            product_category="Clothing",
            tags=["cotton", "casual"],
            quantity=1,
            total_amount=50.0,
            final_amount=50.0,
            payment_method="Cash",
        ),
        make_record(
            4,
            date=datetime(2023, 3, 15),
            customer_name="Diya Reddy",
            phone_number="9123400004",
            gender="Female",
            age=60,
            customer_region="East",
            product_category="Beauty",
            tags=["fragrance-free"],
            quantity=5,
            total_amount=500.0,
            final_amount=400.0,
            payment_method="UPI",
        ),
        make_record(
            5,
            date=datetime(2022, 12, 31, 23, 59),
            customer_name="alice Gupta",
            phone_number="9000000005",
            gender="Female",
            age=30,
            customer_region="West",
            product_category="Electronics",
            tags=["smart", "wireless"],
            quantity=3,
            total_amount=300.0,
            final_amount=270.0,
            payment_method="Wallet",
        ),
        make_record(
            6,
            customer_name="Eve Nair",
            phone_number="9000000006",
            gender="Female",
            product_category="Clothing",
            payment_method="",
        ),
    ]


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def memory_store(sample_records: List[SaleRecord]) -> InMemorySalesStore:
    return InMemorySalesStore(sample_records)


@pytest.fixture
def sales_service(memory_store: InMemorySalesStore) -> SalesService:
    return SalesService(memory_store)


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    """
    Settings fixture with test-specific overrides.

    Can be overridden via environment variables in CI or local testing.
    """
    return Settings(
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "sales_dashboard"),
        log_level="DEBUG",
    )


@pytest.fixture(scope="session")
def test_dsn(test_settings: Settings) -> str:
    """
    Database connection string for tests.
    """
    return (
        f"postgresql://{test_settings.db_user}:{test_settings.db_password}"
        f"@{test_settings.db_host}:{test_settings.db_port}/{test_settings.db_name}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if database is reachable.

    Used to conditionally skip integration tests when DB is not available.
    """
    try:
        with psycopg.connect(test_dsn, connect_timeout=5) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False


@pytest.fixture(scope="session")
def db_connection(
    test_dsn: str, db_connection_available: bool
) -> Generator[psycopg.Connection, None, None]:
    """
    Provide a session-scoped database connection for integration tests.

    Skips tests if database is not available. Creates the sales table when it
    is missing.
    """
    if not db_connection_available:
        pytest.skip("Database not available for integration tests")

    conn = psycopg.connect(test_dsn)
    try:
        ensure_schema(conn)
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def clean_sales_table(db_connection: psycopg.Connection):
    """
    Empty the sales table before and after each test function.
    """
    with db_connection.cursor() as cur:
        cur.execute(f"TRUNCATE TABLE {TABLE};")
    db_connection.commit()
    yield
    with db_connection.cursor() as cur:
        cur.execute(f"TRUNCATE TABLE {TABLE};")
    db_connection.commit()


@pytest.fixture(scope="function")
def seeded_db_small(
    db_connection: psycopg.Connection,
    clean_sales_table,
    test_dsn: str,
) -> int:
    """
    Seed a small synthetic dataset (100 rows) through the CSV importer.

    Returns the number of rows in the table afterwards.
    """
    rows_to_seed = 100

    with tempfile.TemporaryDirectory() as tmpdir:
        csv_path = Path(tmpdir) / "sales.csv"

        from scripts.generate_data import _generate_rows_csv
        from scripts.import_csv import _copy_into_db

        _generate_rows_csv(csv_path, rows=rows_to_seed, batch_size=50, seed=42)
        _copy_into_db(test_dsn, csv_path, batch_size=30)

    with db_connection.cursor() as cur:
        cur.execute(f"SELECT COUNT(*) FROM {TABLE};")
        count = cur.fetchone()[0]
    db_connection.commit()

    return count
