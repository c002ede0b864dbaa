"""
ResilienceHub Backend — Application Wiring Tests
================================================

What we test:
    ✅ /health reports database and session cache state
    ✅ /health is 503 when the database is unreachable
    ✅ X-Request-ID is echoed or generated
    ✅ Error envelopes: {"message": ...} for 404 and unhandled errors
"""

from unittest.mock import MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from resilience_hub.middleware.request_id import REQUEST_ID_HEADER
from resilience_hub.routes import health
from resilience_hub.services.record_service import record_service


class TestHealth:

    @pytest.mark.asyncio
    async def test_healthy(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
        # The lifespan does not run under ASGITransport, so the sweeper never started
        assert body["sessionCache"] == "stopped"

    @pytest.mark.asyncio
    async def test_database_down(self, client, monkeypatch):
        broken = MagicMock()
        broken.connect.side_effect = ConnectionRefusedError("db down")
        monkeypatch.setattr(health, "engine", broken)

        response = await client.get("/health")

        assert response.status_code == 503
        assert response.json()["status"] == "unhealthy"
        assert response.json()["detail"] == "database unreachable"

    @pytest.mark.asyncio
    async def test_cache_disabled(self, client, app):
        app.state.session_cache = None

        response = await client.get("/health")

        assert response.json()["sessionCache"] == "disabled"


class TestRequestId:

    @pytest.mark.asyncio
    async def test_inbound_id_is_echoed(self, client):
        response = await client.get("/health", headers={REQUEST_ID_HEADER: "abc123"})
        assert response.headers[REQUEST_ID_HEADER] == "abc123"

    @pytest.mark.asyncio
    async def test_id_generated_when_absent(self, client):
        response = await client.get("/health")
        assert len(response.headers[REQUEST_ID_HEADER]) == 8


class TestErrorEnvelope:

    @pytest.mark.asyncio
    async def test_unknown_record_is_404_message(self, client, seed):
        response = await client.get("/api/emotions/999", headers=await seed.login(await seed.admin()))

        assert response.status_code == 404
        assert set(response.json()) == {"message"}

    @pytest.mark.asyncio
    async def test_unexpected_error_is_500_message(self, app, seed, monkeypatch):
        async def boom(*args, **kwargs):
            raise RuntimeError("unexpected")

        monkeypatch.setattr(record_service, "emotion_stats", boom)
        user = await seed.client()
        headers = await seed.login(user)

        transport = ASGITransport(app=app, raise_app_exceptions=False)
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            response = await ac.get(f"/api/users/{user.id}/emotions/stats", headers=headers)

        assert response.status_code == 500
        assert response.json() == {"message": "Internal server error"}
