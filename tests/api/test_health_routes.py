"""Health Routes: verifies the root banner, liveness, and readiness probes.

Tests:
    - GET / answers plain text
    - GET /health is always 200
    - GET /health/ready follows the gateway ping (200 / 503)
"""

from unittest.mock import AsyncMock

from products_api.core.errors import DatabaseError


async def test_root_returns_banner(client):
    res = await client.get("/")
    assert res.status_code == 200
    assert res.text == "Server is Running"
    assert res.headers["content-type"].startswith("text/plain")


async def test_liveness_is_healthy(client):
    res = await client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_readiness_ok_when_ping_succeeds(client, gateway):
    gateway.ping = AsyncMock(return_value=None)
    res = await client.get("/health/ready")
    assert res.status_code == 200
    assert res.json() == {"status": "ready", "checks": {"database": "healthy"}}


async def test_readiness_503_when_store_unreachable(client, gateway):
    gateway.ping = AsyncMock(side_effect=DatabaseError("Connection or operational error", "ping"))
    res = await client.get("/health/ready")
    assert res.status_code == 503
    assert res.json()["reason"] == "database_unavailable"
