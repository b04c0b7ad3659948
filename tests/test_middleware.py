"""Middleware tests: request id, rate limiting, CORS, error format."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import AsyncClient

from pinory.middleware.rate_limit import rate_limit_key


def _fake_redis(count: int) -> MagicMock:
    pipe = MagicMock()
    pipe.execute = AsyncMock(return_value=[count, True])
    redis = MagicMock()
    redis.pipeline.return_value = pipe
    return redis


@pytest.fixture
def redis_count(monkeypatch):
    """Pretend Redis is up and has counted ``n`` requests in this window."""

    def _set(n: int) -> MagicMock:
        redis = _fake_redis(n)
        monkeypatch.setattr("pinory.middleware.rate_limit.redis_available", lambda: True)
        monkeypatch.setattr("pinory.middleware.rate_limit.get_redis", lambda: redis)
        return redis

    return _set


@pytest.mark.asyncio
async def test_request_id_generated(client: AsyncClient) -> None:
    response = await client.get("/health")
    assert len(response.headers["x-request-id"]) == 32


@pytest.mark.asyncio
async def test_request_id_preserved(client: AsyncClient) -> None:
    response = await client.get("/health", headers={"X-Request-Id": "test-abc-123"})
    assert response.headers["x-request-id"] == "test-abc-123"


@pytest.mark.asyncio
async def test_no_rate_limit_without_redis(client: AsyncClient) -> None:
    response = await client.get("/version")
    assert response.status_code == 200
    assert "x-ratelimit-limit" not in response.headers


@pytest.mark.asyncio
async def test_rate_limit_headers(client: AsyncClient, redis_count) -> None:
    redis_count(1)
    response = await client.get("/version")
    assert response.status_code == 200
    assert response.headers["x-ratelimit-limit"] == "100"
    assert response.headers["x-ratelimit-remaining"] == "99"


@pytest.mark.asyncio
async def test_rate_limit_blocks_excess(client: AsyncClient, redis_count) -> None:
    redis_count(101)
    response = await client.get("/version")
    assert response.status_code == 429
    assert response.headers["retry-after"] == "60"
    assert "error" in response.json()


@pytest.mark.asyncio
async def test_health_exempt_from_rate_limit(client: AsyncClient, redis_count) -> None:
    redis = redis_count(1000)
    response = await client.get("/health")
    assert response.status_code == 200
    redis.pipeline.assert_not_called()


def test_rate_limit_key_is_per_window() -> None:
    assert rate_limit_key("1.2.3.4", 60, now=119.0) == "pinory:ratelimit:1.2.3.4:1"
    assert rate_limit_key("1.2.3.4", 60, now=120.0) == "pinory:ratelimit:1.2.3.4:2"


@pytest.mark.asyncio
async def test_cors_preflight(client: AsyncClient) -> None:
    response = await client.options(
        "/health",
        headers={
            "Origin": "http://localhost:3000",
            "Access-Control-Request-Method": "GET",
        },
    )
    assert response.headers["access-control-allow-origin"] == "http://localhost:3000"


@pytest.mark.asyncio
async def test_404_returns_error_json(client: AsyncClient) -> None:
    response = await client.get("/nonexistent-path")
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


@pytest.mark.asyncio
async def test_validation_error_is_400(client: AsyncClient) -> None:
    response = await client.get("/api/v1/reactions", params={"content_id": "x", "content_type": "video"})
    assert response.status_code == 400
    data = response.json()
    assert data["error"] == "Validation error"
    assert data["errors"]
