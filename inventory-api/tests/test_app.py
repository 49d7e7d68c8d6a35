"""Application-level behaviour: health, index, unknown routes, error rendering."""

import httpx
import pytest
from sqlalchemy.exc import OperationalError

from inventory_api.main import create_app


class TestAppRoutes:

    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    async def test_api_index(self, client):
        response = await client.get("/api")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["endpoints"]["purchases"] == "/api/purchases"

    async def test_unknown_route(self, client):
        response = await client.get("/api/nothing-here")

        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Route not found: GET /api/nothing-here"}

    async def test_request_id_is_echoed(self, client):
        response = await client.get("/health", headers={"X-Request-ID": "req-123"})

        assert response.headers["X-Request-ID"] == "req-123"

    async def test_request_id_is_generated(self, client):
        response = await client.get("/health")

        assert response.headers["X-Request-ID"]

    async def test_requests_are_logged(self, client, captured_logs):
        await client.get("/health", headers={"X-Request-ID": "req-456"})

        records = [r for r in captured_logs() if r["message"] == "request_completed"]
        assert len(records) == 1
        assert records[0]["request_id"] == "req-456"
        assert records[0]["path"] == "/health"
        assert records[0]["status_code"] == 200


class _DeadlockDetected(Exception):
    sqlstate = "40P01"


class TestErrorRendering:

    @pytest.fixture
    def failing_app(self, app):
        @app.get("/boom")
        async def boom():
            raise RuntimeError("kaput")

        @app.get("/db-down")
        async def db_down():
            raise OperationalError("SELECT 1", {}, ConnectionRefusedError("refused"))

        @app.get("/deadlock")
        async def deadlock():
            raise OperationalError("UPDATE products", {}, _DeadlockDetected("deadlock detected"))

        return app

    @pytest.fixture
    async def failing_client(self, failing_app):
        transport = httpx.ASGITransport(app=failing_app, raise_app_exceptions=False)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            yield client

    async def test_unhandled_error_outside_production_has_detail(self, failing_client):
        response = await failing_client.get("/boom")

        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Internal server error"
        assert body["detail"] == "RuntimeError: kaput"

    async def test_unhandled_error_in_production_hides_detail(self, settings, database):
        app = create_app(settings.model_copy(update={"ENVIRONMENT": "production"}), database=database)

        @app.get("/boom")
        async def boom():
            raise RuntimeError("kaput")

        transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.get("/boom")

        assert response.status_code == 500
        assert "detail" not in response.json()

    async def test_database_unavailable(self, failing_client):
        response = await failing_client.get("/db-down")

        assert response.status_code == 503
        assert response.json() == {"success": False, "message": "Database connection error"}

    async def test_deadlock_is_a_retryable_conflict(self, failing_client):
        response = await failing_client.get("/deadlock")

        assert response.status_code == 409
        body = response.json()
        assert body["success"] is False
        assert body["code"] == "CONCURRENT_UPDATE"
