"""Mock provider adapter for testing and development.

Deterministic, zero-cost adapter. Used by:
- Router, architect and worker tests (via conftest fixtures)
- ``AI_BACKEND=mock`` for local development without API keys

Results are scripted per model id; unscripted models get the default
result. Every call is recorded in ``calls`` so tests can assert which
models were (or were not) tried.

Tier 2 service — imports only from base.py (Tier 1).
"""

from skillforged.ai.providers.base import ProviderResult

_DEFAULT_RESULT = ProviderResult(outcome="ok", text='{"message": "Hello from MockAdapter"}')


class MockAdapter:
    """Scriptable adapter.

    Args:
        name: Provider name this mock stands in for.
        results: model_id → result, or a list of results consumed in order
            (the last one repeats once the list runs out).
        default: Result for models not in ``results``.
        error: If set, complete() raises it. Simulates a broken adapter.
    """

    def __init__(
        self,
        name: str = "gemini",
        results: dict[str, ProviderResult | list[ProviderResult]] | None = None,
        default: ProviderResult | None = None,
        error: Exception | None = None,
    ) -> None:
        self.name = name
        self.results = results or {}
        self.default = default or _DEFAULT_RESULT
        self.error = error
        self.calls: list[tuple[str, str]] = []

    async def complete(
        self, model_id: str, prompt: str, *, json_output: bool = False
    ) -> ProviderResult:
        """Records the call and returns the scripted result."""
        self.calls.append((model_id, prompt))
        if self.error is not None:
            raise self.error

        scripted = self.results.get(model_id, self.default)
        if isinstance(scripted, list):
            if len(scripted) > 1:
                return scripted.pop(0)
            return scripted[0]
        return scripted

    @property
    def called_models(self) -> list[str]:
        return [model_id for model_id, _ in self.calls]
