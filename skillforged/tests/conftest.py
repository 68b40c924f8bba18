"""Shared test fixtures for the generation pipeline.

Factory-pattern fixtures that return callables accepting **overrides.
Every test module imports from here — no reinventing test scaffolding.

Fixtures:
    cache: Fresh InMemoryCacheStore
    no_sleep: Recording replacement for asyncio.sleep (never waits)
    mock_adapter: Factory for MockAdapter instances
    make_input: Factory for valid GenerationInput instances
    make_curriculum: Factory for small, valid Curriculum instances
    make_router: Factory for ModelRouter over mock adapters
    prompt_loader: PromptLoader over the shipped prompt templates
    make_federation: Factory for ResourceFederation over fake sources
"""

import json

import httpx
import pytest

from skillforged.ai.prompts import PromptLoader
from skillforged.ai.providers.base import ProviderResult
from skillforged.ai.providers.mock import MockAdapter
from skillforged.ai.router import ModelRouter
from skillforged.hooks.cache import InMemoryCacheStore
from skillforged.schemas import Curriculum, GenerationInput, Module, Resource, Topic
from skillforged.scrapers.federation import ResourceFederation, Source


class Sleeper:
    """Async stand-in for asyncio.sleep that records instead of waiting."""

    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


# ---------------------------------------------------------------------------
# Infrastructure
# ---------------------------------------------------------------------------


@pytest.fixture
def cache() -> InMemoryCacheStore:
    return InMemoryCacheStore()


@pytest.fixture
def no_sleep() -> Sleeper:
    return Sleeper()


@pytest.fixture
def prompt_loader() -> PromptLoader:
    return PromptLoader()


# ---------------------------------------------------------------------------
# AI
# ---------------------------------------------------------------------------


def curriculum_json(modules: int = 2, topics: int = 2) -> str:
    """A well-formed structure-task completion."""
    return json.dumps(
        {
            "title": "Python Mastery",
            "description": "From zero to productive Python.",
            "totalWeeks": modules,
            "totalHours": modules * 10,
            "prerequisites": ["A computer"],
            "learningOutcomes": ["Write Python programs"],
            "modules": [
                {
                    "id": f"mod-{m}",
                    "week": m,
                    "title": f"Module {m}",
                    "description": f"Week {m} material",
                    "topics": [
                        {
                            "id": f"t-{m}-{t}",
                            "title": f"Topic {m}.{t}",
                            "description": "Learn it",
                            "estimatedHours": 3,
                        }
                        for t in range(1, topics + 1)
                    ],
                }
                for m in range(1, modules + 1)
            ],
        }
    )


@pytest.fixture
def mock_adapter():
    """Returns a factory function for creating MockAdapter instances."""

    def _make(**kwargs) -> MockAdapter:
        return MockAdapter(**kwargs)

    return _make


@pytest.fixture
def make_router(cache, no_sleep):
    """Returns a factory for ModelRouter instances.

    With no adapters given, every provider gets a MockAdapter answering
    with ``text`` (a valid curriculum by default).
    """

    def _make(adapters: dict | None = None, text: str | None = None, **kwargs) -> ModelRouter:
        if adapters is None:
            default = ProviderResult(outcome="ok", text=text or curriculum_json())
            adapters = {
                name: MockAdapter(name=name, default=default)
                for name in ("gemini", "openrouter", "anthropic")
            }
        kwargs.setdefault("sleep", no_sleep)
        return ModelRouter(adapters, kwargs.pop("cache", cache), **kwargs)

    return _make


# ---------------------------------------------------------------------------
# Domain objects
# ---------------------------------------------------------------------------


@pytest.fixture
def make_input():
    """Returns a factory function for creating valid GenerationInput instances."""

    def _make(**overrides) -> GenerationInput:
        defaults = {
            "title": "Python Programming",
            "current_skill_level": "beginner",
            "target_goal": "Build web applications with Python",
            "weekly_hours": 5,
        }
        defaults.update(overrides)
        return GenerationInput(**defaults)

    return _make


@pytest.fixture
def make_curriculum():
    """Returns a factory for small Curriculum instances (no resources)."""

    def _make(modules: int = 2, topics: int = 2, **overrides) -> Curriculum:
        data = {
            "title": "Python Mastery",
            "description": "From zero to productive Python.",
            "total_weeks": modules,
            "total_hours": modules * 10.0,
            "modules": [
                Module(
                    id=f"mod-{m}",
                    week=m,
                    title=f"Module {m}",
                    topics=[
                        Topic(id=f"t-{m}-{t}", title=f"Topic {m}.{t}")
                        for t in range(1, topics + 1)
                    ],
                )
                for m in range(1, modules + 1)
            ],
        }
        data.update(overrides)
        return Curriculum(**data)

    return _make


# ---------------------------------------------------------------------------
# Scraping
# ---------------------------------------------------------------------------


def fake_source(name: str, count: int = 2, cap: int = 2, rtype: str = "article") -> Source:
    """A Source whose scraper returns ``count`` deterministic resources."""

    async def scrape(client: httpx.AsyncClient, query: str, max_results: int) -> list[Resource]:
        slug = query.lower().replace(" ", "-")
        return [
            Resource(
                title=f"{name} {query} #{n}",
                url=f"https://{name.lower()}.example/{slug}/{n}",
                type=rtype,
                source=name,
            )
            for n in range(count)
        ]

    return Source(name, scrape, max_results=count, cap=cap)


def offline_client() -> httpx.AsyncClient:
    """An AsyncClient whose every request fails with 503."""
    return httpx.AsyncClient(
        transport=httpx.MockTransport(lambda request: httpx.Response(503))
    )


@pytest.fixture
def make_federation(cache, no_sleep):
    """Returns a factory for ResourceFederation over fake sources."""

    def _make(sources=None, **kwargs) -> ResourceFederation:
        if sources is None:
            sources = (fake_source("Videos", rtype="video"), fake_source("Blogs"))
        kwargs.setdefault("sleep", no_sleep)
        kwargs.setdefault("client", offline_client())
        return ResourceFederation(kwargs.pop("cache", cache), sources=sources, **kwargs)

    return _make
