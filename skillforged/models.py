"""Model ID registry — single source of truth for AI model identifiers.

Every AI call in the service resolves its candidate models through this
module. The rest of the codebase imports family-name constants or the
per-task candidate lists from here — no raw model ID strings anywhere else.

Three-layer abstraction:
  Layer 1: Callers declare a task type ("structure", "research", ...)
  Layer 2: TASK_MODELS resolves task type → ordered ModelConfig candidates
  Layer 3: Model ID constants (updated when providers release new versions)

Priority is a routing hint: higher priority is tried first. Rate limit is
the provider's published requests-per-minute for the tier; informational,
the router enforces its own cooldowns from observed quota errors.
"""

from dataclasses import dataclass
from typing import Literal

ProviderName = Literal["gemini", "openrouter", "anthropic"]

# ---------------------------------------------------------------------------
# Layer 3: Model IDs (update when providers release new versions)
# ---------------------------------------------------------------------------

# --- Gemini models (free tier: 15 RPM) ---
GEMINI_FLASH_LITE: str = "gemini-2.0-flash-lite"
GEMINI_FLASH: str = "gemini-2.0-flash"

# --- OpenRouter free models (aggressive per-minute and per-day quotas) ---
OPENROUTER_MISTRAL_7B: str = "mistralai/mistral-7b-instruct:free"
OPENROUTER_PHI35: str = "microsoft/phi-3.5-mini-instruct:free"

# --- Claude models ---
CLAUDE_HAIKU: str = "claude-haiku-4-5-20251001"


# ---------------------------------------------------------------------------
# ModelConfig — one routable (provider, model) pair
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ModelConfig:
    """One routable model tier.

    Tier 1 leaf — no project imports. Static configuration, never
    mutated at runtime.
    """

    provider: ProviderName
    model_id: str
    priority: int = 0
    rate_limit_per_minute: int = 15

    @property
    def key(self) -> str:
        """Router key in ``provider:model_id`` form."""
        return f"{self.provider}:{self.model_id}"


GEMINI_FLASH_LITE_CONFIG = ModelConfig(
    provider="gemini", model_id=GEMINI_FLASH_LITE, priority=5, rate_limit_per_minute=15
)
GEMINI_FLASH_CONFIG = ModelConfig(
    provider="gemini", model_id=GEMINI_FLASH, priority=4, rate_limit_per_minute=15
)
MISTRAL_7B_CONFIG = ModelConfig(
    provider="openrouter", model_id=OPENROUTER_MISTRAL_7B, priority=3, rate_limit_per_minute=30
)
PHI35_CONFIG = ModelConfig(
    provider="openrouter", model_id=OPENROUTER_PHI35, priority=3, rate_limit_per_minute=30
)
CLAUDE_HAIKU_CONFIG = ModelConfig(
    provider="anthropic", model_id=CLAUDE_HAIKU, priority=2, rate_limit_per_minute=50
)

ALL_MODELS: tuple[ModelConfig, ...] = (
    GEMINI_FLASH_LITE_CONFIG,
    GEMINI_FLASH_CONFIG,
    MISTRAL_7B_CONFIG,
    PHI35_CONFIG,
    CLAUDE_HAIKU_CONFIG,
)


# ---------------------------------------------------------------------------
# Layer 2: Task type → candidate models
# ---------------------------------------------------------------------------
# structure: curriculum design needs the most reliable JSON — Gemini first,
#   a paid Claude tier as the last resort.
# explanation / quick: latency matters more than depth — lightest models.

TaskType = Literal["structure", "research", "explanation", "quick"]

TASK_MODELS: dict[str, tuple[ModelConfig, ...]] = {
    "structure": (
        GEMINI_FLASH_LITE_CONFIG,
        GEMINI_FLASH_CONFIG,
        MISTRAL_7B_CONFIG,
        CLAUDE_HAIKU_CONFIG,
    ),
    "research": (GEMINI_FLASH_LITE_CONFIG, MISTRAL_7B_CONFIG, PHI35_CONFIG),
    "explanation": (GEMINI_FLASH_LITE_CONFIG, PHI35_CONFIG),
    "quick": (GEMINI_FLASH_LITE_CONFIG,),
}

FALLBACK_MODELS: tuple[ModelConfig, ...] = (
    GEMINI_FLASH_CONFIG,
    MISTRAL_7B_CONFIG,
    PHI35_CONFIG,
)


def models_for_task(task_type: str) -> tuple[ModelConfig, ...]:
    """Returns the curated candidate list for a task type.

    Unknown task types get the general fallback list rather than an error,
    so new callers can route before they earn a curated list.
    """
    return TASK_MODELS.get(task_type, FALLBACK_MODELS)
