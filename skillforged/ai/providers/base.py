"""Provider adapter contract and the uniform provider result.

Every AI provider (Gemini, OpenRouter, Anthropic, Mock) is a separate
adapter object with one coroutine, ``complete(model_id, prompt)``. The
adapters share no base class; ProviderAdapter is a structural Protocol
and ProviderResult is the single result type the router consumes.

ProviderResult.outcome tells the router what to do next:
- "ok"           — text is the completion.
- "rate_limited" — quota signal; cool the model down, try the next one.
- "unavailable"  — model removed or has no endpoints; long cooldown.
- "error"        — anything else, after the adapter's own retries.

Adapters never raise for provider problems. They retry transient
failures locally (_MAX_RETRIES, exponential backoff) and return a result.

Tier 1 leaf — imports only stdlib and skillforged.models.
"""

from dataclasses import dataclass
from typing import Literal, Protocol

from skillforged.models import ProviderName

Outcome = Literal["ok", "rate_limited", "unavailable", "error"]

QUOTA_COOLDOWN_SECONDS = 60
DAILY_QUOTA_COOLDOWN_SECONDS = 3600
UNAVAILABLE_COOLDOWN_SECONDS = 86400


@dataclass(frozen=True)
class ProviderResult:
    """Outcome of one adapter call, after local retries.

    cooldown_seconds is the adapter's suggested cooldown for
    rate_limited/unavailable outcomes; 0 for ok and error.
    """

    outcome: Outcome
    text: str = ""
    error: str = ""
    cooldown_seconds: int = 0
    response_time_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.outcome == "ok"


def rate_limited(
    error: str = "Rate limited", cooldown_seconds: int = QUOTA_COOLDOWN_SECONDS
) -> ProviderResult:
    """Shorthand for a quota result."""
    return ProviderResult(
        outcome="rate_limited", error=error, cooldown_seconds=cooldown_seconds
    )


def unavailable(error: str = "Model unavailable") -> ProviderResult:
    """Shorthand for a model-gone result."""
    return ProviderResult(
        outcome="unavailable",
        error=error,
        cooldown_seconds=UNAVAILABLE_COOLDOWN_SECONDS,
    )


class ProviderAdapter(Protocol):
    """Structural contract for provider adapters."""

    name: ProviderName

    async def complete(
        self, model_id: str, prompt: str, *, json_output: bool = False
    ) -> ProviderResult:
        """Sends one user prompt to model_id and returns the outcome.

        Args:
            model_id: Provider-specific model identifier.
            prompt: The full prompt text, sent as a single user message.
            json_output: Ask the provider for a JSON-only response where
                it supports that natively.
        """
        ...
