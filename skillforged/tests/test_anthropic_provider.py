"""Tests for skillforged.ai.providers.anthropic — AnthropicAdapter outcome mapping.

All tests mock the anthropic SDK client. No real API calls.
"""

from unittest.mock import AsyncMock, MagicMock

import anthropic
import httpx
import pytest

from skillforged.ai.providers.anthropic import AnthropicAdapter, _is_retryable

_MODEL = "claude-test-model"


# ---------------------------------------------------------------------------
# Mock helpers
# ---------------------------------------------------------------------------


def _make_text_block(text: str) -> MagicMock:
    """Creates a mock content block with type="text"."""
    block = MagicMock()
    block.type = "text"
    block.text = text
    return block


def _make_message(*blocks: MagicMock) -> MagicMock:
    message = MagicMock()
    message.content = list(blocks)
    return message


def _make_anthropic_error(
    error_cls: type,
    status_code: int,
    message: str = "error",
) -> Exception:
    """Creates a mock Anthropic API error.

    Anthropic errors require an httpx.Response object in their constructor.
    """
    mock_response = MagicMock(spec=httpx.Response)
    mock_response.status_code = status_code
    mock_response.headers = {}
    mock_response.request = MagicMock(spec=httpx.Request)
    return error_cls(
        message,
        response=mock_response,
        body={"error": {"message": message}},
    )


def _make_adapter(no_sleep, side_effect=None, return_value=None) -> AnthropicAdapter:
    client = MagicMock()
    client.messages.create = AsyncMock(side_effect=side_effect, return_value=return_value)
    return AnthropicAdapter(client=client, sleep=no_sleep)


class TestComplete:
    @pytest.mark.asyncio
    async def test_joins_text_blocks(self, no_sleep) -> None:
        adapter = _make_adapter(
            no_sleep, return_value=_make_message(_make_text_block("a"), _make_text_block("b"))
        )
        result = await adapter.complete(_MODEL, "Hello")
        assert result.ok
        assert result.text == "ab"

    @pytest.mark.asyncio
    async def test_sends_single_user_message(self, no_sleep) -> None:
        adapter = _make_adapter(no_sleep, return_value=_make_message(_make_text_block("x")))
        await adapter.complete(_MODEL, "Hello")
        kwargs = adapter._client.messages.create.call_args.kwargs
        assert kwargs["model"] == _MODEL
        assert kwargs["messages"] == [{"role": "user", "content": "Hello"}]
        assert kwargs["max_tokens"] == 4096


class TestFailures:
    @pytest.mark.asyncio
    async def test_rate_limit(self, no_sleep) -> None:
        adapter = _make_adapter(
            no_sleep, side_effect=_make_anthropic_error(anthropic.RateLimitError, 429)
        )
        result = await adapter.complete(_MODEL, "Hello")
        assert result.outcome == "rate_limited"
        assert no_sleep.calls == []

    @pytest.mark.asyncio
    async def test_overloaded_is_rate_limited(self, no_sleep) -> None:
        adapter = _make_adapter(
            no_sleep, side_effect=_make_anthropic_error(anthropic.APIStatusError, 529)
        )
        result = await adapter.complete(_MODEL, "Hello")
        assert result.outcome == "rate_limited"
        assert result.error == "Overloaded"

    @pytest.mark.asyncio
    async def test_not_found_is_unavailable(self, no_sleep) -> None:
        adapter = _make_adapter(
            no_sleep, side_effect=_make_anthropic_error(anthropic.NotFoundError, 404)
        )
        result = await adapter.complete(_MODEL, "Hello")
        assert result.outcome == "unavailable"

    @pytest.mark.asyncio
    async def test_bad_request_not_retried(self, no_sleep) -> None:
        adapter = _make_adapter(
            no_sleep, side_effect=_make_anthropic_error(anthropic.BadRequestError, 400)
        )
        result = await adapter.complete(_MODEL, "Hello")
        assert result.outcome == "error"
        assert adapter._client.messages.create.await_count == 1

    @pytest.mark.asyncio
    async def test_server_error_retried(self, no_sleep) -> None:
        adapter = _make_adapter(
            no_sleep,
            side_effect=[
                _make_anthropic_error(anthropic.InternalServerError, 500, "internal"),
                _make_message(_make_text_block("ok")),
            ],
        )
        result = await adapter.complete(_MODEL, "Hello")
        assert result.text == "ok"
        assert no_sleep.calls == [1.0]

    @pytest.mark.asyncio
    async def test_connection_errors_exhaust_retries(self, no_sleep) -> None:
        error = anthropic.APIConnectionError(
            request=httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        )
        adapter = _make_adapter(no_sleep, side_effect=error)
        result = await adapter.complete(_MODEL, "Hello")
        assert result.outcome == "error"
        assert adapter._client.messages.create.await_count == 3

    @pytest.mark.asyncio
    async def test_empty_text_is_retried(self, no_sleep) -> None:
        adapter = _make_adapter(
            no_sleep,
            side_effect=[_make_message(), _make_message(_make_text_block("late"))],
        )
        result = await adapter.complete(_MODEL, "Hello")
        assert result.text == "late"


class TestIsRetryable:
    def test_server_error(self) -> None:
        exc = _make_anthropic_error(anthropic.InternalServerError, 500)
        assert _is_retryable(exc) is True

    def test_other(self) -> None:
        assert _is_retryable(RuntimeError("oops")) is False
