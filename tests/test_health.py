"""Smoke tests for health probes and app wiring."""

from httpx import AsyncClient


async def test_health_returns_ok(client: AsyncClient) -> None:
    """GET /api/v1/health returns 200 and status ok."""
    response = await client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json().get("status") == "ok"


async def test_ready_reports_database_and_cache(client: AsyncClient) -> None:
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "ok", "cache": "ok"}


async def test_ready_with_cache_down_is_still_ready(client: AsyncClient, cache) -> None:
    """The cache fails open, so it is reported but does not block readiness."""
    cache.fail = True
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 200
    assert response.json()["cache"] == "unavailable"


async def test_ready_returns_503_when_database_down(client: AsyncClient, database) -> None:
    await database.disconnect()
    response = await client.get("/api/v1/health/ready")
    assert response.status_code == 503
    body = response.json()
    assert body["status"] == "not_ready"
    assert body["database"] == "unavailable"
