"""
Storefront Backend — Health & Middleware Tests
================================================

What we test:
    ✅ /health reports the database probe, version and uptime
    ✅ Every response carries X-Request-ID; an inbound one is echoed back
    ✅ Error bodies carry the request ID
"""

from unittest.mock import patch

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from storefront import __version__


class TestHealth:
    @pytest.mark.asyncio
    async def test_healthy(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        assert body["version"] == __version__
        assert body["uptime_seconds"] >= 0

    @pytest.mark.asyncio
    async def test_database_down_reports_unhealthy(self, client, context):
        unreachable = create_async_engine("sqlite+aiosqlite:////nonexistent-dir/none.db")

        with patch.object(context, "engine", unreachable):
            response = await client.get("/health")
        await unreachable.dispose()

        assert response.status_code == 200
        assert response.json()["status"] == "unhealthy"


class TestRequestId:
    @pytest.mark.asyncio
    async def test_generated_request_id(self, client):
        response = await client.get("/health")

        assert len(response.headers["X-Request-ID"]) == 8

    @pytest.mark.asyncio
    async def test_inbound_request_id_echoed_into_errors(self, client):
        response = await client.get("/api/auth/me", headers={"X-Request-ID": "trace-123"})

        assert response.status_code == 401
        assert response.headers["X-Request-ID"] == "trace-123"
        assert response.json()["request_id"] == "trace-123"
