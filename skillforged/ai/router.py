"""Model router — cache, candidate selection, cooldowns, throttling, fallback.

route(prompt, task_type) is the only way the service talks to a model.
One call goes through these steps:

1. AI cache lookup (``ai:{task_type}:{md5(prompt)[:16]}``, 1h TTL). A
   cached success returns immediately with from_cache=True.
2. Candidate list for the task type (skillforged.models.models_for_task).
3. Drop models in cooldown. If none remain, back off 3s, 6s, 12s and look
   again; after the retry budget, fail with "all models rate limited".
4. Rank by priority, try the top two in order. Every attempt first waits
   out the global minimum interval (500ms) since the last request to any
   provider.
5. Success is cached and returned. rate_limited/unavailable results put
   the model in cooldown for the adapter's suggested window. If both
   attempts fail, back off as in step 3 and start over.

The router never raises for provider problems — it returns
AIResponse(success=False, error=...). Callers that cannot continue
without a completion raise AIRoutingError themselves.

Cooldowns and the last-request timestamp live in RateLimiterState, one
per router instance. They are process-local advisory throttles; each
process instance keeps its own.
"""

import asyncio
import hashlib
import logging
import time
from collections.abc import Awaitable, Callable, Mapping

from skillforged.ai.providers.base import (
    QUOTA_COOLDOWN_SECONDS,
    ProviderAdapter,
    ProviderResult,
)
from skillforged.ai.usage import log_ai_call
from skillforged.hooks.interfaces import CacheStore
from skillforged.models import ModelConfig, models_for_task
from skillforged.schemas import AIResponse

logger = logging.getLogger("skillforged.ai.router")

AI_CACHE_TTL_SECONDS = 3600
MIN_REQUEST_INTERVAL_SECONDS = 0.5
MAX_ROUTE_RETRIES = 3
ROUTE_BACKOFF_BASE_SECONDS = 3.0
ATTEMPTS_PER_ROUND = 2

ALL_RATE_LIMITED_ERROR = (
    "All models are rate limited. Please try again in a few minutes."
)

# Task types whose callers parse the completion as JSON.
_JSON_TASKS = frozenset({"structure", "research"})


class AIRoutingError(Exception):
    """Raised by callers when routing fails and they cannot fall back.

    Attributes:
        response: The failed AIResponse from the router.
    """

    def __init__(self, response: AIResponse) -> None:
        super().__init__(response.error or "AI routing failed")
        self.response = response


def ai_cache_key(prompt: str, task_type: str) -> str:
    """Cache key for a routed prompt: task type + short md5 of the text."""
    digest = hashlib.md5(prompt.encode("utf-8")).hexdigest()[:16]
    return f"ai:{task_type}:{digest}"


class RateLimiterState:
    """Per-router cooldown map and global request throttle.

    Args:
        clock: Monotonic time source in seconds. Injectable for tests.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._cooldowns: dict[str, float] = {}
        self._last_request_at: float | None = None

    def is_cooling_down(self, model_key: str) -> bool:
        """True while the model's cooldown has not expired."""
        expires_at = self._cooldowns.get(model_key)
        if expires_at is None:
            return False
        if self._clock() >= expires_at:
            del self._cooldowns[model_key]
            return False
        return True

    def mark_cooldown(self, model_key: str, seconds: float) -> None:
        self._cooldowns[model_key] = self._clock() + seconds
        logger.info("%s cooling down for %ds", model_key, seconds)

    def reserve_request_slot(self, min_interval: float) -> float:
        """Claims the next request slot and returns how long to wait for it.

        The slot is recorded before the caller sleeps, so concurrent
        callers queue up one interval apart instead of all firing together.
        """
        now = self._clock()
        wait = 0.0
        if self._last_request_at is not None:
            wait = max(0.0, self._last_request_at + min_interval - now)
        self._last_request_at = now + wait
        return wait


class ModelRouter:
    """Routes prompts across provider adapters.

    Args:
        adapters: Provider name → adapter. Models whose provider has no
            adapter are skipped.
        cache: Shared cache store for AI responses.
        state: Cooldown/throttle state; a fresh one if omitted.
        sleep: Coroutine used for every wait, injectable for tests.
    """

    def __init__(
        self,
        adapters: Mapping[str, ProviderAdapter],
        cache: CacheStore,
        state: RateLimiterState | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._adapters = dict(adapters)
        self._cache = cache
        self.state = state or RateLimiterState()
        self._sleep = sleep

    async def aclose(self) -> None:
        """Closes adapters that hold their own HTTP clients."""
        for adapter in self._adapters.values():
            close = getattr(adapter, "aclose", None)
            if close is not None:
                await close()

    async def route(self, prompt: str, task_type: str = "quick") -> AIResponse:
        """Returns a completion for prompt from the best available model.

        Args:
            prompt: Full prompt text.
            task_type: Selects the candidate model list and the cache
                namespace.

        Returns:
            A successful AIResponse, or success=False with an error message.
        """
        cache_key = ai_cache_key(prompt, task_type)
        cached = await self._cache.get(cache_key)
        if isinstance(cached, dict) and cached.get("success"):
            response = AIResponse.model_validate(cached).model_copy(
                update={"from_cache": True}
            )
            logger.debug("AI cache hit for %s", task_type)
            log_ai_call(
                provider=response.provider or "",
                model_id=response.model_id or "",
                task_type=task_type,
                latency_ms=0.0,
                from_cache=True,
            )
            return response

        candidates = models_for_task(task_type)
        json_output = task_type in _JSON_TASKS
        last_error = ""

        for round_number in range(MAX_ROUTE_RETRIES + 1):
            available = [
                model
                for model in candidates
                if model.provider in self._adapters
                and not self.state.is_cooling_down(model.key)
            ]

            if available:
                # sorted() is stable: equal priorities keep list order.
                ranked = sorted(available, key=lambda m: m.priority, reverse=True)
                for model in ranked[:ATTEMPTS_PER_ROUND]:
                    response = await self._attempt(model, prompt, task_type, json_output)
                    if response.success:
                        await self._cache.set(
                            cache_key,
                            response.model_dump(mode="json"),
                            AI_CACHE_TTL_SECONDS,
                        )
                        return response
                    last_error = response.error or last_error
                reason = "Top candidates failed"
            else:
                last_error = ALL_RATE_LIMITED_ERROR
                reason = "All models rate limited"

            if round_number < MAX_ROUTE_RETRIES:
                wait = ROUTE_BACKOFF_BASE_SECONDS * (2**round_number)
                logger.warning(
                    "%s for %s. Waiting %.0fs before retry %d/%d",
                    reason,
                    task_type,
                    wait,
                    round_number + 1,
                    MAX_ROUTE_RETRIES,
                )
                await self._sleep(wait)

        logger.error("Routing failed for %s: %s", task_type, last_error)
        return AIResponse(success=False, error=last_error or "All models failed")

    async def _attempt(
        self, model: ModelConfig, prompt: str, task_type: str, json_output: bool
    ) -> AIResponse:
        """One throttled call to one model, with cooldown bookkeeping."""
        wait = self.state.reserve_request_slot(MIN_REQUEST_INTERVAL_SECONDS)
        if wait > 0:
            await self._sleep(wait)

        adapter = self._adapters[model.provider]
        logger.info("Trying %s", model.key)
        try:
            result = await adapter.complete(
                model.model_id, prompt, json_output=json_output
            )
        except Exception as exc:
            logger.exception("Adapter %s raised for %s", model.provider, model.model_id)
            result = ProviderResult(outcome="error", error=str(exc) or type(exc).__name__)

        if result.outcome in ("rate_limited", "unavailable"):
            self.state.mark_cooldown(
                model.key, result.cooldown_seconds or QUOTA_COOLDOWN_SECONDS
            )

        if not result.ok:
            logger.warning("%s failed: %s (%s)", model.key, result.outcome, result.error)
            return AIResponse(
                success=False,
                error=result.error,
                provider=model.provider,
                model_id=model.model_id,
            )

        log_ai_call(
            provider=model.provider,
            model_id=model.model_id,
            task_type=task_type,
            latency_ms=result.response_time_ms,
            from_cache=False,
        )
        return AIResponse(
            success=True,
            text=result.text,
            provider=model.provider,
            model_id=model.model_id,
            response_time_ms=result.response_time_ms,
        )
