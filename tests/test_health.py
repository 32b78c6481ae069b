"""Unit tests for health endpoint behavior."""

import httpx
import pytest

from eventdesk.main import app


class FailingRedis:
    """Fake Redis client whose ping fails."""

    async def ping(self) -> bool:
        raise RuntimeError("redis unavailable")


class FailingSessionFactory:
    """Session factory whose sessions cannot reach the database."""

    def __call__(self) -> "FailingSessionFactory":
        return self

    async def __aenter__(self) -> "FailingSessionFactory":
        raise RuntimeError("database unavailable")

    async def __aexit__(self, *exc_info: object) -> None:
        return None


@pytest.mark.asyncio
async def test_health_endpoint_returns_ok(api_client: httpx.AsyncClient) -> None:
    """Return ok when db and redis are connected."""
    response = await api_client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "db": "connected", "redis": "connected"}


@pytest.mark.asyncio
async def test_health_endpoint_degraded_on_redis_failure(
    api_client: httpx.AsyncClient,
) -> None:
    """Return degraded when Redis is disconnected."""
    app.state.redis = FailingRedis()

    response = await api_client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["db"] == "connected"
    assert data["redis"] == "disconnected"


@pytest.mark.asyncio
async def test_health_endpoint_degraded_on_db_failure(
    api_client: httpx.AsyncClient,
) -> None:
    """Return degraded when database is disconnected."""
    app.state.async_session = FailingSessionFactory()

    response = await api_client.get("/api/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "degraded"
    assert data["db"] == "disconnected"
    assert data["redis"] == "connected"


@pytest.mark.asyncio
async def test_health_needs_no_credentials(api_client: httpx.AsyncClient) -> None:
    response = await api_client.get("/api/health", headers={"Authorization": "Bearer junk"})

    assert response.status_code == 200
