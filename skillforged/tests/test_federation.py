"""Tests for skillforged.scrapers.federation — fan-out, caps, dedupe, caching."""

import httpx
import pytest

from skillforged.schemas import Resource, Topic
from skillforged.scrapers.federation import (
    DEFAULT_SOURCES,
    INTER_TOPIC_DELAY_SECONDS,
    ResourceFederation,
    Source,
    dedupe_by_url,
    resource_cache_key,
)
from skillforged.tests.conftest import fake_source, offline_client


def _raising_source(name: str) -> Source:
    async def scrape(client, query, max_results):
        raise RuntimeError(f"{name} exploded")

    return Source(name, scrape, max_results=2, cap=2)


class TestHelpers:
    def test_cache_key_slug(self) -> None:
        assert resource_cache_key("Python  Basics") == "resources:python-basics"
        assert len(resource_cache_key("x" * 80)) == len("resources:") + 50

    def test_dedupe_keeps_first(self) -> None:
        a = Resource(title="A", url="https://x.example/1", source="One")
        b = Resource(title="B", url="https://x.example/1", source="Two")
        c = Resource(title="C", url="https://x.example/2")
        assert dedupe_by_url([a, b, c]) == [a, c]

    def test_default_max_resources(self, cache) -> None:
        federation = ResourceFederation(cache, client=offline_client())
        assert federation.max_resources == 4 + sum(s.cap for s in DEFAULT_SOURCES)
        assert len(DEFAULT_SOURCES) == 13


class TestGatherResources:
    @pytest.mark.asyncio
    async def test_fan_in_order_with_docs_after_first_source(self, make_federation) -> None:
        resources = await make_federation().gather_resources("Python Basics")
        assert [r.source for r in resources] == [
            "Videos",
            "Videos",
            "Official Docs",
            "Official Docs",
            "Blogs",
            "Blogs",
        ]

    @pytest.mark.asyncio
    async def test_caps_each_source(self, make_federation) -> None:
        federation = make_federation(sources=(fake_source("Big", count=5, cap=2),))
        resources = await federation.gather_resources("Watercolour")
        assert len(resources) == 2

    @pytest.mark.asyncio
    async def test_failing_source_is_isolated(self, make_federation) -> None:
        federation = make_federation(
            sources=(_raising_source("Broken"), fake_source("Blogs"))
        )
        resources = await federation.gather_resources("Watercolour")
        assert [r.source for r in resources] == ["Blogs", "Blogs"]

    @pytest.mark.asyncio
    async def test_duplicates_across_sources_dropped(self, make_federation) -> None:
        # Same name, so both sources build identical URLs.
        federation = make_federation(sources=(fake_source("Same"), fake_source("Same")))
        resources = await federation.gather_resources("Watercolour")
        assert len(resources) == 2

    @pytest.mark.asyncio
    async def test_real_scrapers_offline(self, cache, no_sleep) -> None:
        federation = ResourceFederation(cache, client=offline_client(), sleep=no_sleep)
        resources = await federation.gather_resources("Python Basics")
        assert [r.source for r in resources] == [
            "Official Docs",
            "Official Docs",
            "GeeksforGeeks",
        ]
        assert [r.url for r in resources][:2] == [
            "https://docs.python.org/3/",
            "https://pypi.org/",
        ]

    @pytest.mark.asyncio
    async def test_result_is_cached(self, make_federation, cache) -> None:
        await make_federation().gather_resources("Python Basics")
        cached = await cache.get("resources:python-basics")
        assert len(cached) == 6
        assert cached[0]["source"] == "Videos"

    @pytest.mark.asyncio
    async def test_cache_hit_skips_scraping(self, make_federation, cache) -> None:
        await cache.set(
            "resources:python-basics",
            [{"title": "Cached", "url": "https://c.example", "type": "video", "source": "C"}],
            60,
        )
        federation = make_federation(sources=(_raising_source("Never"),))
        resources = await federation.gather_resources("Python Basics")
        assert [r.title for r in resources] == ["Cached"]

    @pytest.mark.asyncio
    async def test_empty_result_not_cached(self, make_federation, cache) -> None:
        federation = make_federation(sources=(fake_source("None", count=0),))
        assert await federation.gather_resources("Watercolour") == []
        assert await cache.get("resources:watercolour") is None


class TestScrapeTopics:
    @pytest.mark.asyncio
    async def test_pauses_between_topics(self, make_federation, no_sleep) -> None:
        topics = [Topic(id=f"t-{n}", title=f"Topic {n}") for n in range(3)]
        results = await make_federation().scrape_topics(topics)
        assert len(results) == 3
        assert results[1][0].title == "Videos Topic 1 #0"
        assert no_sleep.calls == [INTER_TOPIC_DELAY_SECONDS] * 2

    @pytest.mark.asyncio
    async def test_no_topics(self, make_federation, no_sleep) -> None:
        assert await make_federation().scrape_topics([]) == []
        assert no_sleep.calls == []


class TestClose:
    @pytest.mark.asyncio
    async def test_aclose_closes_client(self, cache) -> None:
        client = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
        federation = ResourceFederation(cache, client=client, sources=())
        await federation.aclose()
        assert client.is_closed
