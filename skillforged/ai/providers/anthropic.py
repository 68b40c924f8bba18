"""Anthropic Claude adapter using the anthropic SDK.

Claude Haiku is the paid last resort on the structure route. Quota
(RateLimitError) and overload (HTTP 529) both map to rate_limited;
NotFoundError means the model id is gone. Other 5xx and connection
errors are retried with exponential backoff.

Tier 2 service — imports from base.py (Tier 1) + anthropic SDK.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

import anthropic

from skillforged.ai.providers.base import (
    ProviderResult,
    rate_limited,
    unavailable,
)

logger = logging.getLogger(__name__)

_DEFAULT_TEMPERATURE = 0.7
_DEFAULT_MAX_TOKENS = 4096
_MAX_RETRIES = 2  # 3 total attempts
_BACKOFF_BASE = 1.0  # seconds — doubles each retry
_OVERLOADED_STATUS = 529


def _is_retryable(exc: Exception) -> bool:
    """InternalServerError (5xx) and connection failures are transient."""
    return isinstance(exc, (anthropic.InternalServerError, anthropic.APIConnectionError))


class AnthropicAdapter:
    """Anthropic provider adapter.

    Args:
        api_key: Anthropic API key.
        client: Pre-built AsyncAnthropic, for tests. Overrides api_key.
        sleep: Backoff sleep, injectable for tests.
    """

    name = "anthropic"

    def __init__(
        self,
        api_key: str = "",
        client: anthropic.AsyncAnthropic | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if client is None:
            client = anthropic.AsyncAnthropic(api_key=api_key, max_retries=0)
        self._client = client
        self._sleep = sleep

    async def complete(
        self, model_id: str, prompt: str, *, json_output: bool = False
    ) -> ProviderResult:
        """Returns the completion for one prompt, after local retries.

        The Messages API has no JSON mode; json_output is carried by the
        prompt wording instead.
        """
        last_error = "Anthropic API call failed"
        for attempt in range(_MAX_RETRIES + 1):
            if attempt > 0:
                backoff = _BACKOFF_BASE * (2 ** (attempt - 1))
                logger.warning(
                    "Anthropic retry %d/%d after %.1fs backoff (%s)",
                    attempt,
                    _MAX_RETRIES,
                    backoff,
                    model_id,
                )
                await self._sleep(backoff)

            started = time.perf_counter()
            try:
                response = await self._client.messages.create(
                    model=model_id,
                    messages=[{"role": "user", "content": prompt}],
                    max_tokens=_DEFAULT_MAX_TOKENS,
                    temperature=_DEFAULT_TEMPERATURE,
                )
            except anthropic.RateLimitError:
                logger.warning("Anthropic quota hit for %s", model_id)
                return rate_limited()
            except anthropic.NotFoundError:
                return unavailable(f"Anthropic model not found: {model_id}")
            except anthropic.APIStatusError as exc:
                if exc.status_code == _OVERLOADED_STATUS:
                    logger.warning("Anthropic overloaded for %s", model_id)
                    return rate_limited("Overloaded")
                last_error = str(exc)
                if not _is_retryable(exc):
                    return ProviderResult(outcome="error", error=last_error)
                continue
            except anthropic.APIConnectionError as exc:
                last_error = str(exc) or "Connection error"
                continue

            text = "".join(
                block.text for block in response.content if block.type == "text"
            )
            if not text.strip():
                last_error = "Empty response"
                continue

            return ProviderResult(
                outcome="ok",
                text=text,
                response_time_ms=(time.perf_counter() - started) * 1000,
            )

        return ProviderResult(outcome="error", error=last_error)
