"""
Daygrid Backend - Rate Limit Middleware Tests
===============================================

What:  Sliding window bookkeeping, and the 429 response over HTTP, including
       its place inside the request ID and CORS middleware.
"""

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient

from daygrid.exceptions import RateLimitExceededError
from daygrid.middleware.rate_limit import RateLimitMiddleware


def _limiter(max_requests: int = 3, window_seconds: int = 60) -> RateLimitMiddleware:
    return RateLimitMiddleware(FastAPI(), max_requests=max_requests, window_seconds=window_seconds)


class TestSlidingWindow:

    def test_allows_up_to_limit(self):
        limiter = _limiter()
        for i in range(3):
            limiter.check("1.2.3.4", 1000.0 + i)

    def test_rejects_over_limit_with_retry_after(self):
        limiter = _limiter()
        for i in range(3):
            limiter.check("1.2.3.4", 1000.0 + i)

        with pytest.raises(RateLimitExceededError) as exc_info:
            limiter.check("1.2.3.4", 1010.0)
        # Oldest request (t=1000) leaves the window at t=1060
        assert exc_info.value.retry_after == 51

    def test_window_slides(self):
        limiter = _limiter()
        for i in range(3):
            limiter.check("1.2.3.4", 1000.0 + i)
        limiter.check("1.2.3.4", 1060.5)

    def test_limits_are_per_ip(self):
        limiter = _limiter(max_requests=1)
        limiter.check("1.1.1.1", 1000.0)
        limiter.check("2.2.2.2", 1000.0)
        with pytest.raises(RateLimitExceededError):
            limiter.check("1.1.1.1", 1001.0)


@pytest.mark.asyncio
async def test_http_429_with_retry_after():
    app = FastAPI()
    app.add_middleware(RateLimitMiddleware, max_requests=2, window_seconds=60)

    @app.get("/ping")
    async def ping():
        return {"ok": True}

    @app.get("/health")
    async def health():
        return {"status": "healthy"}

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        assert (await client.get("/ping")).status_code == 200
        assert (await client.get("/ping")).status_code == 200

        response = await client.get("/ping")
        assert response.status_code == 429
        assert int(response.headers["Retry-After"]) > 0
        assert response.json()["error"] == "rate_limit_exceeded"

        # Health probes are never limited
        assert (await client.get("/health")).status_code == 200


@pytest.mark.asyncio
async def test_429_passes_through_request_id_and_cors(monkeypatch):
    from daygrid.config import settings
    from daygrid.main import create_app

    monkeypatch.setattr(settings, "rate_limit_requests", 1)
    origin = settings.cors_origins_list[0]

    transport = ASGITransport(app=create_app())
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        await client.get("/api/nothing-here", headers={"Origin": origin})
        response = await client.get(
            "/api/nothing-here", headers={"Origin": origin, "X-Request-ID": "limit001"}
        )

    assert response.status_code == 429
    assert response.headers["X-Request-ID"] == "limit001"
    assert response.json()["request_id"] == "limit001"
    assert response.headers["access-control-allow-origin"] == origin
