"""Fixtures for contract tests — one parameterized fixture per hook interface.

Each fixture yields a fresh implementation instance. The stubs always run.
The Redis cache runs only when TEST_REDIS_URL points at a throwaway Redis
(the tests write and delete keys under a ``contract:`` prefix).

TEAM: To test your implementation against the contracts:
    1. Add your param string (e.g., "mongo") to the params list.
    2. Add an elif branch that yields your implementation instance.
    3. Run: python -m pytest skillforged/tests/contracts/ -v
    All tests should pass. If any fail, your implementation doesn't satisfy
    the contract — read the failing test's docstring for what's expected.

Uses @pytest_asyncio.fixture (not @pytest.fixture) for async fixture support
in strict mode.
"""

import os

import pytest
import pytest_asyncio

from skillforged.hooks.auth import FakeAuthService
from skillforged.hooks.cache import InMemoryCacheStore, RedisCacheStore
from skillforged.hooks.database import InMemoryRoadmapStore
from skillforged.schemas import Curriculum, GenerationInput, Module, Topic


# ---------------------------------------------------------------------------
# Interface fixtures (parameterized for future implementations)
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture(params=["stub"])
async def auth_service(request):
    """Yields an AuthService implementation."""
    if request.param == "stub":
        yield FakeAuthService()


@pytest_asyncio.fixture(params=["stub", "redis"])
async def cache_store(request):
    """Yields a CacheStore implementation.

    The redis param is skipped unless TEST_REDIS_URL is set.
    """
    if request.param == "stub":
        yield InMemoryCacheStore()
    elif request.param == "redis":
        url = os.environ.get("TEST_REDIS_URL")
        if not url:
            pytest.skip("TEST_REDIS_URL not set")
        store = RedisCacheStore(url)
        yield store
        await store.close()


@pytest_asyncio.fixture(params=["stub"])
async def roadmap_store(request):
    """Yields a RoadmapStore implementation.

    TEAM: Add your document store here:
        @pytest_asyncio.fixture(params=["stub", "mongo"])
        async def roadmap_store(request):
            if request.param == "stub":
                yield InMemoryRoadmapStore()
            elif request.param == "mongo":
                store = YourMongoRoadmapStore(test_uri)
                yield store
                await store.drop_all()  # if needed
    """
    if request.param == "stub":
        yield InMemoryRoadmapStore()


# ---------------------------------------------------------------------------
# Helper fixtures (shared test data)
# ---------------------------------------------------------------------------


@pytest_asyncio.fixture
async def cache_key(request):
    """A key unique to the running test, safe to share a real Redis."""
    return f"contract:{request.node.name}"


@pytest_asyncio.fixture
async def sample_curriculum():
    """Two modules: the first with two topics, the second with one."""
    return Curriculum(
        title="Contract Curriculum",
        description="Used by the roadmap store contract.",
        total_weeks=2,
        total_hours=10,
        modules=[
            Module(
                id="mod-1",
                week=1,
                title="Basics",
                topics=[
                    Topic(id="t-1-1", title="Variables"),
                    Topic(id="t-1-2", title="Functions"),
                ],
            ),
            Module(
                id="mod-2",
                week=2,
                title="Projects",
                topics=[Topic(id="t-2-1", title="CLI tool")],
            ),
        ],
        prerequisites=["Curiosity"],
        learning_outcomes=["Ship a small program"],
    )


@pytest_asyncio.fixture
async def sample_input():
    """A GenerationInput with non-default values for integrity assertions."""
    return GenerationInput(
        title="Contract Curriculum",
        current_skill_level="intermediate",
        target_goal="Pass every contract test",
        weekly_hours=5,
    )
