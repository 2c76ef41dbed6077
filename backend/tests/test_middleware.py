"""
Inkwell Backend: Middleware & Health Tests
==========================================

What:  Tests for request IDs, rate limiting and the health endpoint.
"""

import pytest
from httpx import ASGITransport, AsyncClient

from app.database import get_db_session
from app.main import create_app


class TestRequestId:

    @pytest.mark.asyncio
    async def test_generated_request_id(self, test_client):
        response = await test_client.get("/users")
        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_client_request_id_echoed_in_header_and_error_body(self, test_client):
        response = await test_client.get("/posts/404", headers={"X-Request-ID": "trace-abc"})
        assert response.headers["X-Request-ID"] == "trace-abc"
        assert response.json()["request_id"] == "trace-abc"


class TestHealth:

    @pytest.mark.asyncio
    async def test_health_reports_connected_database(self, test_client):
        response = await test_client.get("/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["version"] == "1.0.0"


class TestRateLimit:

    @pytest.mark.asyncio
    async def test_requests_over_limit_get_429(self, test_settings, session_factory):
        limited = test_settings.model_copy(update={"rate_limit_requests": 10})
        app = create_app(limited)

        async def override_get_db_session():
            async with session_factory() as session:
                yield session

        app.dependency_overrides[get_db_session] = override_get_db_session

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            for _ in range(10):
                assert (await client.get("/users")).status_code == 200

            response = await client.get("/users")
            assert response.status_code == 429
            assert response.json()["error"] == "rate_limit_exceeded"
            assert int(response.headers["Retry-After"]) > 0

            # Health checks are never limited
            assert (await client.get("/health")).status_code == 200
