"""Google Gemini adapter using the google-genai SDK.

Sends a single user message, optionally asking for a JSON-only response
(``response_mime_type="application/json"``). Transient failures (5xx,
network errors, empty completions) are retried with exponential backoff;
quota errors short-circuit straight to a rate_limited result so the
router can cool the model down instead of waiting on it.

Tier 2 service — imports from base.py (Tier 1) + google-genai SDK.
"""

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable

import httpx
from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from skillforged.ai.providers.base import (
    ProviderResult,
    rate_limited,
    unavailable,
)

logger = logging.getLogger(__name__)

_DEFAULT_TEMPERATURE = 0.7
_MAX_RETRIES = 2  # 3 total attempts
_BACKOFF_BASE = 1.0  # seconds — doubles each retry

_QUOTA_MARKERS = ("429", "quota", "Too Many", "RESOURCE_EXHAUSTED")


def _is_quota_error(exc: Exception) -> bool:
    """Checks an SDK error for Gemini's quota signals (status or text)."""
    if isinstance(exc, genai_errors.ClientError) and exc.code == 429:
        return True
    text = str(exc)
    return any(marker in text for marker in _QUOTA_MARKERS)


def _is_retryable(exc: Exception) -> bool:
    """Server errors and transport failures are worth another attempt.

    Other client errors (400 bad request, 403 auth) will fail the same
    way again, so they end the call immediately.
    """
    return isinstance(exc, (genai_errors.ServerError, httpx.TransportError))


def _extract_text(response: types.GenerateContentResponse) -> str:
    """Concatenates the text of all non-thinking parts."""
    parts_text = []
    if response.candidates:
        for candidate in response.candidates:
            if candidate.content is None or candidate.content.parts is None:
                continue
            for part in candidate.content.parts:
                if getattr(part, "thought", False):
                    continue
                if part.text is not None:
                    parts_text.append(part.text)
    return "".join(parts_text)


class GeminiAdapter:
    """Gemini provider adapter.

    Args:
        api_key: Google API key for Gemini access.
        client: Pre-built genai.Client, for tests. Overrides api_key.
        sleep: Backoff sleep, injectable for tests.
    """

    name = "gemini"

    def __init__(
        self,
        api_key: str = "",
        client: genai.Client | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if client is None:
            client = genai.Client(
                api_key=api_key,
                http_options=types.HttpOptions(
                    retry_options=types.HttpRetryOptions(attempts=1),
                ),
            )
        self._client = client
        self._sleep = sleep

    async def complete(
        self, model_id: str, prompt: str, *, json_output: bool = False
    ) -> ProviderResult:
        """Returns the completion for one prompt, after local retries."""
        config = types.GenerateContentConfig(temperature=_DEFAULT_TEMPERATURE)
        if json_output:
            config.response_mime_type = "application/json"
        contents = [types.Content(role="user", parts=[types.Part(text=prompt)])]

        last_error = "Gemini API call failed"
        for attempt in range(_MAX_RETRIES + 1):
            if attempt > 0:
                backoff = _BACKOFF_BASE * (2 ** (attempt - 1))
                logger.warning(
                    "Gemini retry %d/%d after %.1fs backoff (%s)",
                    attempt,
                    _MAX_RETRIES,
                    backoff,
                    model_id,
                )
                await self._sleep(backoff)

            started = time.perf_counter()
            try:
                response = await self._client.aio.models.generate_content(
                    model=model_id,
                    contents=contents,
                    config=config,
                )
            except (genai_errors.APIError, httpx.HTTPError) as exc:
                if _is_quota_error(exc):
                    logger.warning("Gemini quota hit for %s", model_id)
                    return rate_limited()
                if isinstance(exc, genai_errors.ClientError) and exc.code == 404:
                    return unavailable(f"Gemini model not found: {model_id}")
                last_error = str(exc) or type(exc).__name__
                if not _is_retryable(exc):
                    return ProviderResult(outcome="error", error=last_error)
                continue

            text = _extract_text(response)
            if not text.strip():
                last_error = "Empty response"
                continue

            return ProviderResult(
                outcome="ok",
                text=text,
                response_time_ms=(time.perf_counter() - started) * 1000,
            )

        return ProviderResult(outcome="error", error=last_error)
