"""
Integration tests for the PostgreSQL sales store.

These tests run against a real PostgreSQL instance and verify that:
1. The importer loads the synthetic export completely
2. The SQL store agrees with the in-memory store on listings and catalogs
3. Lookups and driver failures behave as the service expects

Run with: RUN_INTEGRATION_TESTS=1 pytest tests/integration/
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import pytest
from psycopg_pool import ConnectionPool

from salesdash.query.predicate import AllOf
from salesdash.service import SalesService
from salesdash.stores.abstract import StorageError
from salesdash.stores.memory import InMemorySalesStore
from salesdash.stores.postgres import PostgresSalesStore

EXPECTED_ROWS = 100

pytestmark = pytest.mark.skipif(
    os.getenv("RUN_INTEGRATION_TESTS", "0") != "1",
    reason="Integration tests require RUN_INTEGRATION_TESTS=1 and reachable Postgres",
)

QUERIES = [
    {},
    {"limit": "7", "page": "3"},
    {"search": "sharma"},
    {"search": "98"},
    {"region": "North,South", "gender": "Female"},
    {"ageMin": "30", "ageMax": "45", "sortBy": "quantity", "sortOrder": "asc"},
    {"category": "Beauty", "tags": "organic,smart"},
    {"payment": "UPI", "sortBy": "customerName"},
    {"sortBy": "customerName", "sortOrder": "asc", "limit": "25", "page": "2"},
    {"startDate": "2022-01-01", "endDate": "2022-06-30"},
    {"startDate": "2022-03-01T00:00:00Z", "endDate": "2022-09-30"},
    {"search": "sharma\x00", "region": "North\x00,South"},
    {"page": "99999999999999999999"},
    {"limit": "99999999999999999999"},
]


@pytest.fixture
def pg_store(test_dsn: str, seeded_db_small: int):
    store = PostgresSalesStore(ConnectionPool(test_dsn, min_size=1, max_size=2, open=True))
    yield store
    store.close()


@pytest.fixture
def reference_store(pg_store: PostgresSalesStore) -> InMemorySalesStore:
    """Same rows as the database, native ids included."""
    return InMemorySalesStore(pg_store.find_by_transaction_id(n) for n in range(1, EXPECTED_ROWS + 1))


class TestImport:
    """Bulk load through COPY."""

    def test_seeded_row_count(self, seeded_db_small):
        assert seeded_db_small == EXPECTED_ROWS

    def test_reimport_replaces_rows(self, seeded_db_small, test_dsn, db_connection):
        from scripts.generate_data import _generate_rows_csv
        from scripts.import_csv import _copy_into_db

        with tempfile.TemporaryDirectory() as tmpdir:
            csv_path = Path(tmpdir) / "sales.csv"
            _generate_rows_csv(csv_path, rows=10, batch_size=5, seed=3)
            inserted = _copy_into_db(test_dsn, csv_path, batch_size=4)

        with db_connection.cursor() as cur:
            cur.execute("SELECT COUNT(*) FROM public.sales;")
            assert cur.fetchone()[0] == inserted == 10
        db_connection.commit()


class TestPostgresSalesStore:
    """SQL store agrees with the in-memory reference."""

    @pytest.mark.parametrize("params", QUERIES)
    def test_listing_matches_reference(self, pg_store, reference_store, params):
        expected = SalesService(reference_store).list_sales(params)
        actual = SalesService(pg_store).list_sales(params)

        assert actual.total_items == expected.total_items
        assert actual.total_pages == expected.total_pages
        assert [r.id for r in actual.data] == [r.id for r in expected.data]

    def test_catalog_matches_reference(self, pg_store, reference_store):
        assert SalesService(pg_store).filter_catalog() == SalesService(reference_store).filter_catalog()

    def test_lookup_by_id_and_transaction_id(self, pg_store):
        service = SalesService(pg_store)
        by_transaction = service.get_sale("17")

        assert by_transaction is not None
        assert service.get_sale(str(by_transaction.id)) == by_transaction
        assert service.get_sale("100000") is None
        assert service.get_sale("garbage") is None

    def test_driver_errors_become_storage_errors(self, pg_store, monkeypatch):
        monkeypatch.setattr("salesdash.stores.postgres.TABLE", "public.no_such_table")

        with pytest.raises(StorageError):
            pg_store.count(AllOf())
