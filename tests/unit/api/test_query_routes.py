"""
Unit Tests for the Query Endpoints

Tests POST /query (managed) and POST /query-direct (direct) with the query
services replaced through FastAPI dependency overrides.
"""

from datetime import datetime
from decimal import Decimal
from unittest.mock import AsyncMock
from uuid import UUID

import pytest
from fastapi.testclient import TestClient

from nlquery.api.dependencies import get_direct_service, get_managed_service
from nlquery.api.main import app
from nlquery.models.query import QueryOutcome

MISSING_PARAMETERS = "Missing required parameters: dbType, connectionString, nlQuery, userId"


@pytest.fixture
def direct_service():
    service = AsyncMock()
    service.run.return_value = QueryOutcome.ok(
        data=[{"id": 1, "name": "Ada"}], sql="SELECT id, name FROM users LIMIT 100"
    )
    return service


@pytest.fixture
def managed_service():
    service = AsyncMock()
    service.run.return_value = QueryOutcome.ok(data=[{"id": 1, "name": "Ada"}])
    return service


@pytest.fixture
def client(direct_service, managed_service):
    app.dependency_overrides[get_direct_service] = lambda: direct_service
    app.dependency_overrides[get_managed_service] = lambda: managed_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def payload(connection_string, sample_query):
    return {
        "dbType": "postgres",
        "connectionString": connection_string,
        "nlQuery": sample_query,
        "userId": "user_123",
    }


class TestQueryDirect:
    def test_success(self, client, direct_service, payload):
        response = client.post("/query-direct", json=payload)

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "data": [{"id": 1, "name": "Ada"}],
            "sql": "SELECT id, name FROM users LIMIT 100",
        }
        direct_service.run.assert_awaited_once_with(
            payload["connectionString"], payload["nlQuery"], "postgres", "user_123"
        )

    def test_binary_and_typed_values_serialized(self, client, direct_service, payload):
        direct_service.run.return_value = QueryOutcome.ok(
            data=[
                {
                    "id": 1,
                    "blob": b"\x89PNG\xff",
                    "price": Decimal("9.50"),
                    "created_at": datetime(2024, 1, 2, 3, 4, 5),
                    "token": UUID("12345678-1234-5678-1234-567812345678"),
                }
            ],
            sql="SELECT * FROM files LIMIT 100",
        )

        response = client.post("/query-direct", json=payload)

        assert response.status_code == 200
        row = response.json()["data"][0]
        assert row["blob"] == "\\x89504e47ff"
        assert row["price"] == 9.5
        assert row["created_at"] == "2024-01-02T03:04:05"
        assert row["token"] == "12345678-1234-5678-1234-567812345678"

    def test_failure_is_500(self, client, direct_service, payload):
        direct_service.run.return_value = QueryOutcome.fail(
            'Query execution failed: relation "customers" does not exist', "execution"
        )

        response = client.post("/query-direct", json=payload)

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": 'Query execution failed: relation "customers" does not exist',
        }

    def test_non_postgres_rejected(self, client, direct_service, payload):
        payload["dbType"] = "mysql"

        response = client.post("/query-direct", json=payload)

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "Only PostgreSQL is supported in direct mode",
        }
        direct_service.run.assert_not_awaited()

    def test_postgresql_alias_rejected(self, client, direct_service, payload):
        payload["dbType"] = "postgresql"

        response = client.post("/query-direct", json=payload)

        assert response.status_code == 400
        direct_service.run.assert_not_awaited()

    @pytest.mark.parametrize("missing", ["dbType", "connectionString", "nlQuery", "userId"])
    def test_missing_parameter(self, client, direct_service, payload, missing):
        del payload[missing]

        response = client.post("/query-direct", json=payload)

        assert response.status_code == 400
        assert response.json() == {"success": False, "error": MISSING_PARAMETERS}
        direct_service.run.assert_not_awaited()

    def test_empty_parameter(self, client, payload):
        payload["nlQuery"] = ""

        response = client.post("/query-direct", json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == MISSING_PARAMETERS

    def test_unexpected_exception(self, client, direct_service, payload):
        direct_service.run.side_effect = RuntimeError("boom")

        response = client.post("/query-direct", json=payload)

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "error": "Internal server error",
            "details": "boom",
        }


class TestQueryManaged:
    def test_success(self, client, managed_service, payload):
        response = client.post("/query", json=payload)

        assert response.status_code == 200
        assert response.json() == {"success": True, "data": [{"id": 1, "name": "Ada"}]}
        managed_service.run.assert_awaited_once_with(
            payload["connectionString"], payload["nlQuery"], "postgres", "user_123"
        )

    def test_binary_values_serialized(self, client, managed_service, payload):
        managed_service.run.return_value = QueryOutcome.ok(data=[{"blob": b"\x00\xff"}])

        response = client.post("/query", json=payload)

        assert response.status_code == 200
        assert response.json()["data"] == [{"blob": "\\x00ff"}]

    def test_failure_is_400_with_code(self, client, managed_service, payload):
        managed_service.run.return_value = QueryOutcome.fail(
            "Invalid connection string", "managed", code="BAD_DSN"
        )

        response = client.post("/query", json=payload)

        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "error": "Invalid connection string",
            "code": "BAD_DSN",
        }

    def test_other_db_types_forwarded(self, client, managed_service, payload):
        payload["dbType"] = "mysql"

        response = client.post("/query", json=payload)

        assert response.status_code == 200
        assert managed_service.run.await_args.args[2] == "mysql"

    def test_missing_parameter(self, client, managed_service, payload):
        del payload["userId"]

        response = client.post("/query", json=payload)

        assert response.status_code == 400
        assert response.json()["error"] == MISSING_PARAMETERS
        managed_service.run.assert_not_awaited()

    def test_unexpected_exception(self, client, managed_service, payload):
        managed_service.run.side_effect = RuntimeError()

        response = client.post("/query", json=payload)

        assert response.status_code == 500
        assert response.json()["error"] == "Internal server error"
        assert response.json()["details"] == "Unknown error"
