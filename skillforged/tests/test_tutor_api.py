"""Tests for the tutor API — POST /tutor/explain."""

import httpx
import pytest
from httpx import ASGITransport

from skillforged.ai.providers.base import unavailable
from skillforged.ai.providers.mock import MockAdapter
from skillforged.api.deps import get_cache, get_model_router, get_rate_limiter
from skillforged.hooks.cache import InMemoryCacheStore
from skillforged.hooks.ratelimit import CacheRateLimiter
from skillforged.main import app

AUTH = {"Authorization": "Bearer learner-1"}
EXPLANATION = "## Recursion\n\nA function that calls itself."


@pytest.fixture
def client() -> httpx.AsyncClient:
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    return httpx.AsyncClient(transport=transport, base_url="http://test")


@pytest.fixture(autouse=True)
def _overrides(cache):
    """Fresh cache and rate-limit window per test."""
    limiter = CacheRateLimiter(InMemoryCacheStore())
    app.dependency_overrides[get_rate_limiter] = lambda: limiter
    app.dependency_overrides[get_cache] = lambda: cache
    yield
    app.dependency_overrides.clear()


def _use_router(router) -> None:
    app.dependency_overrides[get_model_router] = lambda: router


class TestExplain:
    @pytest.mark.asyncio
    async def test_returns_explanation(self, client: httpx.AsyncClient, make_router) -> None:
        _use_router(make_router(text=EXPLANATION))
        async with client:
            resp = await client.post(
                "/api/v1/tutor/explain",
                json={"topic": "Recursion", "context": "Python", "skillLevel": "beginner"},
                headers=AUTH,
            )

        assert resp.status_code == 200
        assert resp.json()["data"]["explanation"] == EXPLANATION

    @pytest.mark.asyncio
    async def test_defaults_to_beginner(
        self, client: httpx.AsyncClient, make_router, cache
    ) -> None:
        _use_router(make_router(text=EXPLANATION))
        async with client:
            await client.post("/api/v1/tutor/explain", json={"topic": "Recursion"}, headers=AUTH)
        assert await cache.get("explain:recursion-beginner") == EXPLANATION

    @pytest.mark.asyncio
    async def test_ai_failure_is_503(self, client: httpx.AsyncClient, make_router) -> None:
        _use_router(
            make_router(adapters={"gemini": MockAdapter(default=unavailable("gone"))})
        )
        async with client:
            resp = await client.post(
                "/api/v1/tutor/explain", json={"topic": "Recursion"}, headers=AUTH
            )
        assert resp.status_code == 503
        body = resp.json()
        assert body["error"]["code"] == "AI_UNAVAILABLE"
        assert "gone" not in resp.text

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "body",
        [{}, {"topic": ""}, {"topic": "x" * 201}, {"topic": "ok", "skillLevel": "guru"}],
    )
    async def test_invalid_body_is_422(
        self, client: httpx.AsyncClient, make_router, body: dict
    ) -> None:
        _use_router(make_router(text=EXPLANATION))
        async with client:
            resp = await client.post("/api/v1/tutor/explain", json=body, headers=AUTH)
        assert resp.status_code == 422

    @pytest.mark.asyncio
    async def test_requires_auth(self, client: httpx.AsyncClient, make_router) -> None:
        _use_router(make_router(text=EXPLANATION))
        async with client:
            resp = await client.post("/api/v1/tutor/explain", json={"topic": "Recursion"})
        assert resp.status_code == 401
