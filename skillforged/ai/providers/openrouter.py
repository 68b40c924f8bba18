"""OpenRouter adapter — OpenAI-compatible chat completions over httpx.

OpenRouter reports quota problems in the error message rather than a
stable code, so classification is text matching on ``error.message``:

- "Rate limit" / "per-min"           → rate_limited, 60s cooldown
- "per-day"                          → rate_limited, 1h cooldown
- "not a valid model" / "No endpoints" → unavailable, 24h cooldown

Anything else non-2xx is an error; 5xx, transport failures and empty
completions are retried with exponential backoff first.

Tier 2 service — imports from base.py (Tier 1) + httpx.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

import httpx

from skillforged.ai.providers.base import (
    DAILY_QUOTA_COOLDOWN_SECONDS,
    ProviderResult,
    rate_limited,
    unavailable,
)

logger = logging.getLogger(__name__)

OPENROUTER_URL = "https://openrouter.ai/api/v1/chat/completions"

_DEFAULT_TEMPERATURE = 0.7
_DEFAULT_MAX_TOKENS = 4096
_TIMEOUT_SECONDS = 60.0
_MAX_RETRIES = 2  # 3 total attempts
_BACKOFF_BASE = 1.0  # seconds — doubles each retry


class _TransientError(Exception):
    """Internal: a failure worth retrying."""


def _error_message(response: httpx.Response) -> str:
    """Pulls ``error.message`` out of an error body, else the reason phrase."""
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or f"HTTP {response.status_code}"
    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    return response.reason_phrase or f"HTTP {response.status_code}"


def _classify_failure(response: httpx.Response) -> ProviderResult | None:
    """Maps a non-2xx response to a terminal result, or None to retry."""
    message = _error_message(response)

    if "per-day" in message:
        return rate_limited(cooldown_seconds=DAILY_QUOTA_COOLDOWN_SECONDS)
    if "Rate limit" in message or "per-min" in message or response.status_code == 429:
        return rate_limited()
    if "not a valid model" in message or "No endpoints" in message:
        return unavailable()
    if response.status_code >= 500:
        return None
    return ProviderResult(outcome="error", error=message)


class OpenRouterAdapter:
    """OpenRouter provider adapter.

    Args:
        api_key: OpenRouter API key.
        referer: Sent as HTTP-Referer for OpenRouter app attribution.
        client: Shared httpx.AsyncClient; one is created if omitted.
        sleep: Backoff sleep, injectable for tests.
    """

    name = "openrouter"

    def __init__(
        self,
        api_key: str = "",
        referer: str = "http://localhost:3000",
        client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._api_key = api_key
        self._referer = referer
        self._client = client or httpx.AsyncClient(timeout=_TIMEOUT_SECONDS)
        self._sleep = sleep

    async def complete(
        self, model_id: str, prompt: str, *, json_output: bool = False
    ) -> ProviderResult:
        """Returns the completion for one prompt, after local retries.

        json_output is accepted for the shared contract; free OpenRouter
        models do not reliably honour response_format, so the prompt
        itself carries the JSON instruction.
        """
        headers = {
            "Authorization": f"Bearer {self._api_key}",
            "HTTP-Referer": self._referer,
            "X-Title": "SkillForged",
        }
        payload = {
            "model": model_id,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": _DEFAULT_TEMPERATURE,
            "max_tokens": _DEFAULT_MAX_TOKENS,
        }

        last_error = "OpenRouter API call failed"
        for attempt in range(_MAX_RETRIES + 1):
            if attempt > 0:
                backoff = _BACKOFF_BASE * (2 ** (attempt - 1))
                logger.warning(
                    "OpenRouter retry %d/%d after %.1fs backoff (%s)",
                    attempt,
                    _MAX_RETRIES,
                    backoff,
                    model_id,
                )
                await self._sleep(backoff)

            started = time.perf_counter()
            try:
                response = await self._client.post(
                    OPENROUTER_URL, headers=headers, json=payload
                )
                if response.is_error:
                    result = _classify_failure(response)
                    if result is not None:
                        if result.outcome != "error":
                            logger.warning(
                                "OpenRouter %s for %s", result.outcome, model_id
                            )
                        return result
                    raise _TransientError(_error_message(response))

                text = _completion_text(response)
                if not text.strip():
                    raise _TransientError("Empty response")
            except (_TransientError, httpx.TransportError) as exc:
                last_error = str(exc) or type(exc).__name__
                continue

            return ProviderResult(
                outcome="ok",
                text=text,
                response_time_ms=(time.perf_counter() - started) * 1000,
            )

        return ProviderResult(outcome="error", error=last_error)

    async def aclose(self) -> None:
        """Closes the HTTP client."""
        await self._client.aclose()


def _completion_text(response: httpx.Response) -> str:
    """Reads ``choices[0].message.content`` from a success body."""
    try:
        data = response.json()
    except ValueError as exc:
        raise _TransientError("Malformed response body") from exc
    choices = data.get("choices") if isinstance(data, dict) else None
    if not choices:
        return ""
    if not isinstance(choices, list) or not isinstance(choices[0], dict):
        raise _TransientError("Malformed response body")
    message = choices[0].get("message") or {}
    if not isinstance(message, dict):
        raise _TransientError("Malformed response body")
    content = message.get("content")
    return content if isinstance(content, str) else ""
