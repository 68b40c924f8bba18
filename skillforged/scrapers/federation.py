"""Resource federation — fan-out to every source, capped fan-in, dedupe, cache.

gather_resources(topic_title) is what the worker calls per topic:

1. Resource cache lookup (``resources:{slug[:50]}``). A non-empty cached
   list is returned as-is.
2. All scraper sources run concurrently. Each is fault-isolated twice:
   by its own fail_empty wrapper and by gather(return_exceptions=True).
3. Fan-in concatenates each source's results, truncated to its cap, in
   source order, with the curated official docs after YouTube. Caps keep
   any one source from dominating the mix.
4. Duplicate URLs are dropped, first occurrence wins.
5. A non-empty result is cached for 24h.

Usage:
    federation = ResourceFederation(cache)
    resources = await federation.gather_resources("Python Basics")
"""

import asyncio
import logging
import re
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass

import httpx

from skillforged.hooks.interfaces import CacheStore
from skillforged.schemas import Resource, Topic
from skillforged.scrapers.articles import (
    scrape_css_tricks,
    scrape_devto,
    scrape_freecodecamp,
    scrape_geeksforgeeks,
    scrape_hashnode,
    scrape_medium,
    scrape_smashing_magazine,
)
from skillforged.scrapers.base import ScraperFn, build_client
from skillforged.scrapers.community import scrape_github_repos, scrape_stackoverflow
from skillforged.scrapers.official_docs import official_docs
from skillforged.scrapers.video import (
    scrape_coursera,
    scrape_linkedin_learning,
    scrape_udemy_free,
    scrape_youtube,
)

logger = logging.getLogger("skillforged.scrapers")

RESOURCE_CACHE_TTL_SECONDS = 86400
INTER_TOPIC_DELAY_SECONDS = 0.3
OFFICIAL_DOCS_CAP = 4

_WHITESPACE_RE = re.compile(r"\s+")


def _full_title(title: str) -> str:
    return title


def _first_word(title: str) -> str:
    words = title.split()
    return words[0] if words else title


@dataclass(frozen=True)
class Source:
    """One scraper in the federation.

    Attributes:
        name: Source name for logs.
        scrape: ``async (client, query, max_results) -> list[Resource]``.
        max_results: How many results to ask the scraper for.
        cap: How many of those make it into the aggregate.
        query: Derives the search query from the topic title.
    """

    name: str
    scrape: ScraperFn
    max_results: int
    cap: int
    query: Callable[[str], str] = _full_title


# Order is the fan-in order. Official docs are spliced in after YouTube.
DEFAULT_SOURCES: tuple[Source, ...] = (
    Source("YouTube", scrape_youtube, max_results=4, cap=4),
    Source("Dev.to", scrape_devto, max_results=3, cap=2, query=_first_word),
    Source("GeeksforGeeks", scrape_geeksforgeeks, max_results=3, cap=2),
    Source("Medium", scrape_medium, max_results=2, cap=2),
    Source("freeCodeCamp", scrape_freecodecamp, max_results=2, cap=2),
    Source("Stack Overflow", scrape_stackoverflow, max_results=2, cap=2),
    Source("GitHub", scrape_github_repos, max_results=2, cap=2),
    Source("Hashnode", scrape_hashnode, max_results=2, cap=2),
    Source("CSS-Tricks", scrape_css_tricks, max_results=2, cap=1),
    Source("Smashing Magazine", scrape_smashing_magazine, max_results=2, cap=1),
    Source("Udemy", scrape_udemy_free, max_results=2, cap=1),
    Source("Coursera", scrape_coursera, max_results=2, cap=1),
    Source("LinkedIn Learning", scrape_linkedin_learning, max_results=2, cap=1),
)


def resource_cache_key(topic_title: str) -> str:
    slug = _WHITESPACE_RE.sub("-", topic_title.lower())[:50]
    return f"resources:{slug}"


def dedupe_by_url(resources: Sequence[Resource]) -> list[Resource]:
    """Drops resources whose URL was already seen, keeping first occurrences."""
    seen: set[str] = set()
    unique: list[Resource] = []
    for resource in resources:
        if resource.url in seen:
            continue
        seen.add(resource.url)
        unique.append(resource)
    return unique


class ResourceFederation:
    """Fans a topic out to every source and merges the results.

    Args:
        cache: Shared cache store for resource lists.
        client: HTTP client for the scrapers; a browser-like one if omitted.
        sources: Scraper sources in fan-in order.
        sleep: Coroutine used for the inter-topic pause, injectable for tests.
    """

    def __init__(
        self,
        cache: CacheStore,
        client: httpx.AsyncClient | None = None,
        sources: Sequence[Source] = DEFAULT_SOURCES,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._cache = cache
        self._client = client or build_client()
        self._sources = tuple(sources)
        self._sleep = sleep

    @property
    def max_resources(self) -> int:
        """Upper bound on one topic's aggregate: the sum of all caps."""
        return OFFICIAL_DOCS_CAP + sum(source.cap for source in self._sources)

    async def gather_resources(
        self, topic_title: str, topic_description: str = ""
    ) -> list[Resource]:
        """Returns deduplicated, capped resources for one topic.

        topic_description is accepted for future query refinement; the
        search query is the title.
        """
        cache_key = resource_cache_key(topic_title)
        cached = await self._cache.get(cache_key)
        if isinstance(cached, list) and cached:
            logger.debug("Resource cache hit for %r", topic_title)
            return [Resource.model_validate(item) for item in cached]

        logger.info("Scraping resources for %r", topic_title)
        results = await asyncio.gather(
            *(
                source.scrape(self._client, source.query(topic_title), source.max_results)
                for source in self._sources
            ),
            return_exceptions=True,
        )

        combined: list[Resource] = []
        for index, (source, result) in enumerate(zip(self._sources, results)):
            if isinstance(result, BaseException):
                logger.warning("%s source raised: %s", source.name, result)
                result = []
            combined.extend(result[: source.cap])
            if index == 0:
                combined.extend(official_docs(topic_title)[:OFFICIAL_DOCS_CAP])
        if not self._sources:
            combined.extend(official_docs(topic_title)[:OFFICIAL_DOCS_CAP])

        resources = dedupe_by_url(combined)
        logger.info("Found %d resources for %r", len(resources), topic_title)

        if resources:
            await self._cache.set(
                cache_key,
                [r.model_dump(mode="json", by_alias=True) for r in resources],
                RESOURCE_CACHE_TTL_SECONDS,
            )
        return resources

    async def scrape_topics(self, topics: Sequence[Topic]) -> list[list[Resource]]:
        """Gathers resources for each topic in turn, pausing between topics."""
        results: list[list[Resource]] = []
        for index, topic in enumerate(topics):
            results.append(await self.gather_resources(topic.title, topic.description))
            if index < len(topics) - 1:
                await self._sleep(INTER_TOPIC_DELAY_SECONDS)
        return results

    async def aclose(self) -> None:
        """Closes the scrapers' HTTP client."""
        await self._client.aclose()
