"""Structured usage logging for AI calls.

Emits one structured log line per routed AI response, including cache
hits, with the fields needed for cost and latency analysis.
Machine-parseable via the ``extra`` dict — standard JSON log formatters
(e.g., python-json-logger) pick these up automatically.

Logger name: ``skillforged.ai.usage``

The service does not configure a JSON formatter — it structures the data.
The team configures their preferred log formatter in production.

Tier 2 service: imports only stdlib.
"""

import logging

logger = logging.getLogger("skillforged.ai.usage")


def log_ai_call(
    *,
    provider: str,
    model_id: str,
    task_type: str,
    latency_ms: float,
    from_cache: bool,
) -> None:
    """Emits a structured INFO log for a completed AI call.

    Args:
        provider: Provider name ("gemini", "openrouter", "anthropic").
        model_id: The model identifier that produced the response.
        task_type: The router task type ("structure", "explanation", ...).
        latency_ms: Provider response time in milliseconds (0 for cache hits).
        from_cache: Whether the response was served from the AI cache.
    """
    logger.info(
        "AI call: %s %s/%s latency=%.0fms cache=%s",
        task_type,
        provider,
        model_id,
        latency_ms,
        "hit" if from_cache else "miss",
        extra={
            "provider": provider,
            "model_id": model_id,
            "task_type": task_type,
            "latency_ms": latency_ms,
            "from_cache": from_cache,
        },
    )
