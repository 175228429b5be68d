"""
Error handling: malformed identifiers, driver faults, startup failures
"""

import logging

import pytest
from unittest.mock import AsyncMock, MagicMock
from pymongo.errors import ServerSelectionTimeoutError

from app import app
from api.routes import health
from database import connection
from database.connection import DatabaseConnectionError, get_users_collection
from utils.error_handling import ErrorHandlingConfig


MALFORMED_ID_REQUESTS = [
    ("PUT", "/users/not-an-id", {"age": 3}),
    ("DELETE", "/users/not-an-id", None),
    ("GET", "/users/find-by-id/12345", None),
    ("PUT", "/users/classic-update/zzzzzzzzzzzzzzzzzzzzzzzz", None),
    ("DELETE", "/users/find-by-id-and-remove/abc", None),
]


@pytest.fixture
def failing_collection():
    """Collection whose every driver call fails with a connectivity error"""
    fault = ServerSelectionTimeoutError("mongo.internal:27017: connection refused")
    collection = MagicMock()
    for method in (
        "find_one", "insert_one", "insert_many", "update_one",
        "find_one_and_update", "find_one_and_delete", "delete_many",
    ):
        setattr(collection, method, AsyncMock(side_effect=fault))
    cursor = MagicMock()
    cursor.to_list = AsyncMock(side_effect=fault)
    collection.find.return_value = cursor
    app.dependency_overrides[get_users_collection] = lambda: collection
    yield collection
    app.dependency_overrides.clear()


class TestMalformedIdentifiers:
    """Malformed ids are client errors on every id endpoint"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,path,payload", MALFORMED_ID_REQUESTS)
    async def test_malformed_id_is_client_error(self, api_client, method, path, payload):
        response = await api_client.request(method, path, json=payload)

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid User ID format"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,path,payload", MALFORMED_ID_REQUESTS)
    async def test_malformed_id_checked_before_driver(self, api_client, failing_collection, method, path, payload):
        response = await api_client.request(method, path, json=payload)

        assert response.status_code == 400
        failing_collection.find_one.assert_not_called()


class TestServerErrors:
    """Driver faults map to a generic 500"""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method,path,payload", [
        ("GET", "/users/", None),
        ("POST", "/users/", {"name": "Alice"}),
        ("POST", "/users/create-one", {"name": "Alice"}),
        ("POST", "/users/create-many", [{"name": "Alice"}]),
        ("PUT", "/users/5f1d7f0e2a9b4c3d2e1f0a9b", {"age": 3}),
        ("DELETE", "/users/5f1d7f0e2a9b4c3d2e1f0a9b", None),
        ("GET", "/users/find-by-name/Alice", None),
        ("GET", "/users/find-one-food/Pizza", None),
        ("GET", "/users/find-by-id/5f1d7f0e2a9b4c3d2e1f0a9b", None),
        ("PUT", "/users/classic-update/5f1d7f0e2a9b4c3d2e1f0a9b", None),
        ("PUT", "/users/find-one-and-update/Alice", None),
        ("DELETE", "/users/find-by-id-and-remove/5f1d7f0e2a9b4c3d2e1f0a9b", None),
        ("DELETE", "/users/delete-many-by-name/Alice", None),
        ("GET", "/users/search-burritos", None),
    ])
    async def test_driver_fault_is_generic_server_error(self, api_client, failing_collection, method, path, payload):
        response = await api_client.request(method, path, json=payload)

        assert response.status_code == 500
        body = response.json()
        assert body["message"] == "Server error"
        assert "mongo.internal" not in response.text

    @pytest.mark.asyncio
    async def test_validation_failure_takes_precedence(self, api_client, failing_collection):
        response = await api_client.post("/users/", json={"age": -1})

        assert response.status_code == 400
        failing_collection.insert_one.assert_not_called()


class TestResponseEnvelope:
    """Trace IDs and error body shape"""

    @pytest.mark.asyncio
    async def test_error_log_redacts_sensitive_body_fields(self, api_client, caplog):
        with caplog.at_level(logging.WARNING, logger="utils.error_handling"):
            response = await api_client.post("/users/", json={"age": 5, "password": "hunter2"})

        assert response.status_code == 400
        assert "***REDACTED***" in caplog.text
        assert "hunter2" not in caplog.text

    def test_sanitize_truncates_long_strings(self):
        long_value = "x" * (ErrorHandlingConfig.MAX_BODY_LOG_SIZE + 10)

        sanitized = ErrorHandlingConfig.sanitize_data({"notes": long_value})

        assert sanitized["notes"].endswith("...[TRUNCATED]")
        assert len(sanitized["notes"]) == ErrorHandlingConfig.MAX_BODY_LOG_SIZE + len("...[TRUNCATED]")

    @pytest.mark.asyncio
    async def test_trace_id_header_on_success(self, api_client):
        response = await api_client.get("/users/")

        assert response.status_code == 200
        assert response.headers["X-Trace-ID"]

    @pytest.mark.asyncio
    async def test_error_body_carries_trace_id(self, api_client):
        response = await api_client.get("/users/find-by-id/bad")

        body = response.json()
        assert body["error"] == "HTTP 400"
        assert body["trace_id"] == response.headers["X-Trace-ID"]
        assert "timestamp" in body

    @pytest.mark.asyncio
    async def test_validation_error_body(self, api_client):
        response = await api_client.post("/users/", json={"age": 5})

        body = response.json()
        assert body["error"] == "Validation Error"
        assert body["error_count"] == 1
        assert body["detail"][0]["field"] == "body -> name"


class TestDatabaseLifecycle:
    """Startup connection and health probe"""

    @pytest.mark.asyncio
    async def test_init_database_fails_when_ping_fails(self, monkeypatch):
        client = MagicMock()
        client.admin.command = AsyncMock(side_effect=ServerSelectionTimeoutError("down"))
        client.close = AsyncMock()
        monkeypatch.setattr(connection, "AsyncMongoClient", MagicMock(return_value=client))

        with pytest.raises(DatabaseConnectionError):
            await connection.init_database()

        client.close.assert_awaited_once()
        assert connection.mongo_client is None

    @pytest.mark.asyncio
    async def test_lifespan_aborts_when_database_unreachable(self, monkeypatch):
        monkeypatch.setattr(
            "app.init_database",
            AsyncMock(side_effect=DatabaseConnectionError("Could not connect to MongoDB"))
        )

        with pytest.raises(DatabaseConnectionError):
            async with app.router.lifespan_context(app):
                pass

    @pytest.mark.asyncio
    async def test_init_database_success(self, monkeypatch):
        client = MagicMock()
        client.admin.command = AsyncMock(return_value={"ok": 1})
        client.close = AsyncMock()
        monkeypatch.setattr(connection, "AsyncMongoClient", MagicMock(return_value=client))

        await connection.init_database()
        assert connection.mongo_client is client

        await connection.close_database()
        client.close.assert_awaited_once()
        assert connection.mongo_client is None

    def test_collection_requires_initialized_database(self, monkeypatch):
        monkeypatch.setattr(connection, "mongo_client", None)

        with pytest.raises(DatabaseConnectionError):
            get_users_collection()

    @pytest.mark.asyncio
    async def test_health_reports_connected(self, api_client, monkeypatch):
        database = MagicMock()
        database.command = AsyncMock(return_value={"ok": 1})
        monkeypatch.setattr(health, "get_database", lambda: database)

        response = await api_client.get("/health")

        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    @pytest.mark.asyncio
    async def test_health_unavailable_without_database(self, api_client, monkeypatch):
        monkeypatch.setattr(connection, "mongo_client", None)

        response = await api_client.get("/health")

        assert response.status_code == 503
