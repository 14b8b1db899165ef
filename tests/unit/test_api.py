from __future__ import annotations

from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from salesdash.api import NOT_FOUND_BODY, SERVER_ERROR_BODY, create_app
from salesdash.config import Settings
from salesdash.service import SalesService
from salesdash.stores.abstract import StorageError
from salesdash.stores.memory import InMemorySalesStore


@pytest.fixture
def client(sales_service: SalesService) -> TestClient:
    return TestClient(create_app(service=sales_service, settings=Settings()))


class _BrokenStore(InMemorySalesStore):
    name = "broken"

    def __init__(self, error: Exception) -> None:
        super().__init__()
        self._error = error

    def count(self, predicate):
        raise self._error

    def distinct(self, field):
        raise self._error


class TestSalesRoutes:
    """HTTP surface over the service."""

    def test_health(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_list_sales_envelope(self, client):
        response = client.get("/api/sales", params={"limit": "2", "sortBy": "quantity"})

        assert response.status_code == 200
        body = response.json()
        assert body["page"] == 1
        assert body["limit"] == 2
        assert body["totalItems"] == 6
        assert body["totalPages"] == 3
        assert [row["transactionId"] for row in body["data"]] == [2, 4]
        assert body["summary"]["totalUnits"] == 10

    def test_malformed_params_are_normalized(self, client):
        response = client.get("/api/sales", params={"page": "abc", "limit": "-4", "ageMin": "x"})

        assert response.status_code == 200
        body = response.json()
        assert body["page"] == 1
        assert body["limit"] == 10
        assert body["totalItems"] == 6

    def test_nul_bytes_in_filters_are_ignored(self, client):
        response = client.get("/api/sales?search=ali%00&region=North%00")

        assert response.status_code == 200
        assert [row["transactionId"] for row in response.json()["data"]] == [1]

    def test_huge_page_is_accepted(self, client):
        response = client.get("/api/sales", params={"page": "99999999999999999999"})

        assert response.status_code == 200
        assert response.json()["data"] == []

    def test_repeated_query_keys_merge(self, client):
        response = client.get("/api/sales?region=North&region=South")

        assert sorted(row["transactionId"] for row in response.json()["data"]) == [1, 2, 3]

    def test_get_sale_by_native_id(self, client):
        response = client.get(f"/api/sales/{UUID(int=4)}")

        assert response.status_code == 200
        assert response.json()["id"] == str(UUID(int=4))
        assert response.json()["customerName"] == "Diya Reddy"

    def test_get_sale_by_transaction_id(self, client):
        response = client.get("/api/sales/1")

        assert response.status_code == 200
        assert response.json()["customerName"] == "Alice Sharma"

    @pytest.mark.parametrize("identifier", ["404", "not-an-id", str(UUID(int=99))])
    def test_get_sale_not_found(self, client, identifier):
        response = client.get(f"/api/sales/{identifier}")

        assert response.status_code == 404
        assert response.json() == NOT_FOUND_BODY

    def test_filters(self, client):
        response = client.get("/api/filters")

        assert response.status_code == 200
        body = response.json()
        assert body["regions"] == ["East", "North", "South", "West"]
        assert body["paymentMethods"] == ["Cash", "Credit Card", "UPI", "Wallet"]

    def test_cors_allows_configured_origin(self, client):
        response = client.get("/api/health", headers={"Origin": "http://localhost:3000"})

        assert response.headers["access-control-allow-origin"] == "*"


class TestErrorHandling:
    """Failures become opaque 500 responses."""

    def test_storage_error_is_500(self):
        service = SalesService(_BrokenStore(StorageError("connection refused")))
        client = TestClient(create_app(service=service, settings=Settings()))

        response = client.get("/api/sales")

        assert response.status_code == 500
        assert response.json() == SERVER_ERROR_BODY

    def test_unexpected_error_is_500(self):
        service = SalesService(_BrokenStore(RuntimeError("bug")))
        client = TestClient(
            create_app(service=service, settings=Settings()), raise_server_exceptions=False
        )

        response = client.get("/api/filters")

        assert response.status_code == 500
        assert response.json() == SERVER_ERROR_BODY

    def test_error_body_hides_details(self):
        service = SalesService(_BrokenStore(StorageError("password=hunter2")))
        client = TestClient(create_app(service=service, settings=Settings()))

        assert "hunter2" not in client.get("/api/sales").text
