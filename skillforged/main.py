"""FastAPI application — entry point, middleware, and health endpoint.

Creates the SkillForged API with:
- API versioning via router prefix (/api/v1/)
- CORS middleware (origins from settings)
- Request logging middleware (raw ASGI — no response body buffering)
- Global exception handlers (HTTPException, validation, catch-all)
- Health endpoint
- Generation pipeline wiring (cache, model router, federation, job queue)

Run with: uvicorn skillforged.main:app --reload

Tier 3 orchestration module: imports from config (Tier 2), deps (Tier 2),
schemas (Tier 1).
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from skillforged.config import Settings, get_settings
from skillforged.schemas import ApiError, ApiResponse

logger = logging.getLogger("skillforged")


# ---------------------------------------------------------------------------
# Request logging middleware (raw ASGI)
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware:
    """Logs method, path, status code, and duration for every request.

    Uses raw ASGI to avoid response body buffering. Does NOT log
    request/response bodies, query params, auth headers, or client IPs.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Wraps the ASGI call to measure timing and capture status code."""
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        method = scope.get("method", "?")
        path = scope.get("path", "?")
        start = time.monotonic()
        status_code = 0

        async def logging_send(message: Message) -> None:
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message.get("status", 0)
            await send(message)

        try:
            await self.app(scope, receive, logging_send)
        finally:
            duration_ms = (time.monotonic() - start) * 1000
            logger.info(
                "%s %s %d %.1fms", method, path, status_code, duration_ms
            )


# ---------------------------------------------------------------------------
# Exception handlers
# ---------------------------------------------------------------------------


def _http_exception_response(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Wraps HTTPException in ApiResponse envelope.

    If the detail is already an ApiResponse dict (from deps.py and the
    routers), returns it directly. Otherwise wraps in a generic error.
    """
    if isinstance(exc.detail, dict) and "ok" in exc.detail:
        return JSONResponse(
            status_code=exc.status_code, content=exc.detail, headers=exc.headers
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=ApiResponse(
            ok=False,
            error=ApiError(code="HTTP_ERROR", message=str(exc.detail)),
        ).model_dump(),
        headers=exc.headers,
    )


def _validation_error_response(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Wraps Pydantic validation errors in ApiResponse envelope.

    Returns a human-readable summary without leaking internal details.
    """
    errors = exc.errors()
    if errors:
        first = errors[0]
        loc = " -> ".join(str(part) for part in first.get("loc", []))
        msg = first.get("msg", "Validation error")
        detail = f"{loc}: {msg}" if loc else msg
    else:
        detail = "Request validation failed."

    return JSONResponse(
        status_code=422,
        content=ApiResponse(
            ok=False,
            error=ApiError(code="VALIDATION_ERROR", message=detail),
        ).model_dump(),
    )


def _unhandled_exception_response(request: Request, exc: Exception) -> JSONResponse:
    """Catches all unhandled exceptions — never leaks internals to client.

    Logs the full traceback server-side. Returns a generic 500 response.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)

    return JSONResponse(
        status_code=500,
        content=ApiResponse(
            ok=False,
            error=ApiError(
                code="INTERNAL_ERROR",
                message="An unexpected error occurred.",
            ),
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Service wiring
# ---------------------------------------------------------------------------


def _init_services() -> None:
    """Initializes the pipeline singletons in deps.py during app startup.

    Chooses the cache backend (Redis when REDIS_URL is set, in-memory
    otherwise), then builds the prompt loader, model router, resource
    federation and generation service on top of it. Logs warnings for
    missing API keys but never prevents startup — with no usable model
    the architect's template fallback still produces roadmaps.

    Uses local imports to avoid circular imports during module loading.
    """
    from skillforged.ai.prompts import PromptLoader
    from skillforged.ai.router import ModelRouter
    from skillforged.api import deps
    from skillforged.hooks.ratelimit import CacheRateLimiter
    from skillforged.jobs.service import build_generation_service
    from skillforged.jobs.store import JobStatusStore
    from skillforged.jobs.worker import GenerationWorker
    from skillforged.scrapers.federation import ResourceFederation

    settings = get_settings()

    if settings.redis_url:
        from skillforged.hooks.cache import RedisCacheStore

        deps._cache = RedisCacheStore(settings.redis_url)
        deps._rate_limiter = CacheRateLimiter(deps._cache)
        logger.info("Using Redis cache")
    else:
        logger.warning(
            "REDIS_URL not set; using in-process cache. Job status will not "
            "be shared across instances."
        )

    prompt_loader = PromptLoader()
    deps._prompt_loader = prompt_loader

    adapters = deps.create_adapters(settings)
    _check_api_keys(settings, adapters)
    model_router = ModelRouter(adapters, deps._cache)
    deps._model_router = model_router

    deps._federation = ResourceFederation(deps._cache)

    jobs = JobStatusStore(deps._cache)
    worker = GenerationWorker(
        model_router,
        prompt_loader,
        deps._federation,
        deps._roadmap_store,
        jobs,
        deadline_seconds=settings.job_deadline_seconds,
    )
    deps._generation_service = build_generation_service(
        worker, jobs, workers=settings.job_workers
    )

    logger.info(
        "Generation services initialized: backend=%s, providers=%s, workers=%d",
        settings.ai_backend,
        ", ".join(sorted(adapters)) or "none",
        settings.job_workers,
    )


def _check_api_keys(settings: Settings, adapters: dict[str, Any]) -> None:
    """Warns about providers that will be skipped for lack of an API key."""
    if settings.ai_backend == "mock":
        return

    key_map = {
        "gemini": "GOOGLE_API_KEY",
        "openrouter": "OPENROUTER_API_KEY",
        "anthropic": "ANTHROPIC_API_KEY",
    }
    for provider_name, env_var in key_map.items():
        if provider_name not in adapters:
            logger.warning(
                "Missing %s for provider '%s'. Its models will be skipped.",
                env_var,
                provider_name,
            )


async def _shutdown_services() -> None:
    """Stops the job workers and closes outbound connections."""
    from skillforged.api import deps
    from skillforged.hooks.cache import RedisCacheStore

    service = deps._generation_service
    if service is not None:
        await service.queue.shutdown()

    if deps._model_router is not None:
        await deps._model_router.aclose()

    if deps._federation is not None:
        await deps._federation.aclose()

    if isinstance(deps._cache, RedisCacheStore):
        await deps._cache.close()


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    yield
    await _shutdown_services()


# ---------------------------------------------------------------------------
# App creation
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Creates and configures the FastAPI application."""
    settings = get_settings()

    # Configure logging level
    logging.basicConfig(level=getattr(logging, settings.log_level.upper(), logging.INFO))

    application = FastAPI(
        title="SkillForged",
        description="AI-generated learning roadmaps enriched with real resources",
        version="0.1.0",
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --

    # CORS — must be outermost to handle preflight before auth
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Request logging — raw ASGI
    application.add_middleware(RequestLoggingMiddleware)

    # -- Exception handlers --
    application.add_exception_handler(StarletteHTTPException, _http_exception_response)
    application.add_exception_handler(RequestValidationError, _validation_error_response)
    application.add_exception_handler(Exception, _unhandled_exception_response)

    # -- Routers --
    _register_routes(application)

    # -- Generation pipeline --
    _init_services()

    return application


def _register_routes(application: FastAPI) -> None:
    """Registers all API routers on the application."""
    from fastapi import APIRouter

    v1 = APIRouter(prefix="/api/v1")

    @v1.get("/health")
    async def health() -> dict[str, Any]:
        return ApiResponse(ok=True, data={"status": "healthy"}).model_dump()

    # Sub-routers (BEFORE including v1 into the app):
    from skillforged.api.generation import router as generation_router

    v1.include_router(generation_router, prefix="/generation", tags=["generation"])

    from skillforged.api.roadmaps import router as roadmaps_router

    v1.include_router(roadmaps_router, prefix="/roadmaps", tags=["roadmaps"])

    from skillforged.api.tutor import router as tutor_router

    v1.include_router(tutor_router, prefix="/tutor", tags=["tutor"])

    application.include_router(v1)


app = create_app()
