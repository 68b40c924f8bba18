"""Shared FastAPI dependencies — auth, cache, roadmap store, AI, generation.

Module-level singletons for each service. Route handlers access them via
FastAPI's Depends() system — never by importing stubs directly. When the
team swaps a stub for a real implementation, they change the class here and
every downstream handler picks it up automatically.

The generation pipeline singletons (prompt loader, model router, resource
federation, generation service) are built by _init_services() in main.py
at startup, once settings are loaded and the cache backend is chosen.

TEAM: To wire your real services, replace the stub class on the right side
of each singleton assignment below. The get_* functions and all route
handlers stay unchanged.

Tier 2 service module: imports from hooks/* (Tier 2) and hooks/interfaces
(Tier 1), schemas (Tier 1), ai/* (Tier 2), jobs/* (Tier 2), config.

Usage:
    from skillforged.api.deps import get_current_user, get_roadmap_store

    @router.get("/something")
    async def do_thing(
        user: User = Depends(get_current_user),
        roadmaps: RoadmapStore = Depends(get_roadmap_store),
    ): ...
"""

import logging

from fastapi import Depends, Header, HTTPException, Request

from skillforged.ai.prompts import PromptLoader
from skillforged.ai.providers.base import ProviderAdapter
from skillforged.ai.router import ModelRouter
from skillforged.config import Settings, get_settings
from skillforged.hooks.auth import FakeAuthService
from skillforged.hooks.cache import InMemoryCacheStore
from skillforged.hooks.database import InMemoryRoadmapStore
from skillforged.hooks.interfaces import (
    AuthService,
    CacheStore,
    RateLimiter,
    RoadmapStore,
)
from skillforged.hooks.ratelimit import CacheRateLimiter
from skillforged.jobs.service import GenerationService
from skillforged.schemas import ApiError, ApiResponse, User
from skillforged.scrapers.federation import ResourceFederation

logger = logging.getLogger("skillforged")

PROVIDER_NAMES = ("gemini", "openrouter", "anthropic")

# ---------------------------------------------------------------------------
# Service singletons — the swap point
# ---------------------------------------------------------------------------

# TEAM: Replace with your real implementations here.
_auth_service: AuthService = FakeAuthService()
_cache: CacheStore = InMemoryCacheStore()
_roadmap_store: RoadmapStore = InMemoryRoadmapStore()
_rate_limiter: RateLimiter = CacheRateLimiter(_cache)

# Pipeline singletons — set by _init_services() in main.py at startup
_prompt_loader: PromptLoader | None = None
_model_router: ModelRouter | None = None
_federation: ResourceFederation | None = None
_generation_service: GenerationService | None = None


def _not_ready(what: str) -> HTTPException:
    return HTTPException(
        status_code=503,
        detail=ApiResponse(
            ok=False,
            error=ApiError(
                code="SERVICE_UNAVAILABLE",
                message=f"{what} is not yet available. Server is starting up.",
            ),
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Dependency providers
# ---------------------------------------------------------------------------


def get_auth_service() -> AuthService:
    """Returns the auth service singleton."""
    return _auth_service


def get_cache() -> CacheStore:
    """Returns the shared cache store singleton."""
    return _cache


def get_roadmap_store() -> RoadmapStore:
    """Returns the roadmap store singleton."""
    return _roadmap_store


def get_rate_limiter() -> RateLimiter:
    """Returns the rate limiter singleton."""
    return _rate_limiter


def get_prompt_loader() -> PromptLoader:
    """Returns the prompt loader singleton.

    Raises HTTPException(503) if the loader hasn't been initialized yet
    (startup not complete).
    """
    if _prompt_loader is None:
        raise _not_ready("Prompt loader")
    return _prompt_loader


def get_model_router() -> ModelRouter:
    """Returns the model router singleton.

    Raises HTTPException(503) if the router hasn't been initialized yet.
    """
    if _model_router is None:
        raise _not_ready("Model router")
    return _model_router


def get_generation_service() -> GenerationService:
    """Returns the generation service singleton.

    Raises HTTPException(503) if the service hasn't been initialized yet.
    """
    if _generation_service is None:
        raise _not_ready("Generation service")
    return _generation_service


# ---------------------------------------------------------------------------
# AI adapter factory
# ---------------------------------------------------------------------------


def create_adapters(settings: Settings) -> dict[str, ProviderAdapter]:
    """Builds the provider adapters the router may use.

    AI_BACKEND=mock returns a MockAdapter per provider, so the whole
    pipeline runs without keys (the architect falls back to its template
    when the mock's text isn't a curriculum). Otherwise an adapter is
    built for every provider with a configured API key; providers without
    one are left out and their models are skipped by the router.

    Args:
        settings: Application settings with API keys.

    Returns:
        Provider name → adapter.
    """
    # Local imports to avoid pulling SDK dependencies at module load time.
    if settings.ai_backend == "mock":
        from skillforged.ai.providers.mock import MockAdapter

        return {name: MockAdapter(name=name) for name in PROVIDER_NAMES}

    adapters: dict[str, ProviderAdapter] = {}
    if settings.google_api_key:
        from skillforged.ai.providers.gemini import GeminiAdapter

        adapters["gemini"] = GeminiAdapter(api_key=settings.google_api_key)

    if settings.openrouter_api_key:
        from skillforged.ai.providers.openrouter import OpenRouterAdapter

        adapters["openrouter"] = OpenRouterAdapter(
            api_key=settings.openrouter_api_key, referer=settings.app_url
        )

    if settings.anthropic_api_key:
        from skillforged.ai.providers.anthropic import AnthropicAdapter

        adapters["anthropic"] = AnthropicAdapter(api_key=settings.anthropic_api_key)

    return adapters


# ---------------------------------------------------------------------------
# Client identity and rate limiting
# ---------------------------------------------------------------------------


def client_ip(request: Request) -> str:
    """Best-effort client address for anonymous rate limiting.

    First entry of X-Forwarded-For, then X-Real-IP, then the socket peer.
    """
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        first = forwarded.split(",")[0].strip()
        if first:
            return first
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client is not None:
        return request.client.host
    return "127.0.0.1"


async def enforce_rate_limit(
    request: Request,
    limiter: RateLimiter = Depends(get_rate_limiter),
    settings: Settings = Depends(get_settings),
) -> None:
    """Counts the request against the client IP's window.

    Raises:
        HTTPException: 429 RATE_LIMITED with the seconds until reset.
    """
    result = await limiter.check(
        client_ip(request),
        settings.rate_limit_max_requests,
        settings.rate_limit_window_seconds,
    )
    if not result.allowed:
        raise HTTPException(
            status_code=429,
            detail=ApiResponse(
                ok=False,
                error=ApiError(
                    code="RATE_LIMITED",
                    message=(
                        "Rate limit exceeded. Please try again in "
                        f"{result.reset_in} seconds."
                    ),
                ),
            ).model_dump(),
            headers={"Retry-After": str(result.reset_in)},
        )


# ---------------------------------------------------------------------------
# Auth dependency — used by route handlers
# ---------------------------------------------------------------------------


async def get_current_user(
    authorization: str | None = Header(default=None),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """Extracts and validates a Bearer token from the Authorization header.

    Returns the authenticated User on success. Raises HTTPException(401)
    on missing header, malformed header, or invalid token.

    Args:
        authorization: The raw Authorization header value.
        auth_service: Injected auth service.

    Returns:
        The authenticated User.

    Raises:
        HTTPException: 401 with ApiResponse envelope on auth failure.
    """
    if not authorization:
        raise HTTPException(
            status_code=401,
            detail=ApiResponse(
                ok=False,
                error=ApiError(code="UNAUTHORIZED", message="Missing authorization header."),
            ).model_dump(),
        )

    parts = authorization.split(" ", maxsplit=1)
    if len(parts) != 2 or parts[0].lower() != "bearer" or not parts[1].strip():
        raise HTTPException(
            status_code=401,
            detail=ApiResponse(
                ok=False,
                error=ApiError(code="UNAUTHORIZED", message="Invalid authorization header format."),
            ).model_dump(),
        )

    token = parts[1].strip()
    user = await auth_service.validate_token(token)

    if user is None:
        raise HTTPException(
            status_code=401,
            detail=ApiResponse(
                ok=False,
                error=ApiError(code="UNAUTHORIZED", message="Invalid or expired token."),
            ).model_dump(),
        )

    return user
