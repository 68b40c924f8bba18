"""Article sources: Dev.to, GeeksforGeeks, Medium, freeCodeCamp, Hashnode,
CSS-Tricks and Smashing Magazine.

Dev.to has a public JSON API; the rest are HTML scrapes. Medium has no
usable search page for anonymous clients, so it is found through
DuckDuckGo's HTML endpoint restricted to ``site:medium.com``.
"""

import logging
from urllib.parse import parse_qs, quote, urljoin, urlparse

import httpx
from bs4 import BeautifulSoup

from skillforged.scrapers.base import (
    API_TIMEOUT_SECONDS,
    anchor_resources,
    clip_title,
    fail_empty,
    fetch_page,
)
from skillforged.schemas import Resource

logger = logging.getLogger("skillforged.scrapers")

DEVTO_API = "https://dev.to/api/articles"


def _devto_resources(payload: object, max_results: int) -> list[Resource]:
    if not isinstance(payload, list):
        return []
    resources = []
    for article in payload[:max_results]:
        if not isinstance(article, dict):
            continue
        if not article.get("url") or not article.get("title"):
            continue
        resources.append(
            Resource(
                title=clip_title(str(article.get("title") or "")),
                url=article["url"],
                type="article",
                source="Dev.to",
                thumbnail=article.get("cover_image") or None,
            )
        )
    return resources


@fail_empty("Dev.to")
async def scrape_devto(
    client: httpx.AsyncClient, query: str, max_results: int = 3
) -> list[Resource]:
    """Articles tagged with the query; this week's top articles on failure."""
    try:
        response = await client.get(
            DEVTO_API,
            params={"per_page": str(max_results), "tag": query.lower()},
            timeout=API_TIMEOUT_SECONDS,
        )
        response.raise_for_status()
        return _devto_resources(response.json(), max_results)
    except (httpx.HTTPError, ValueError) as exc:
        logger.debug("Dev.to tag search failed (%s), trying top articles", exc)

    response = await client.get(
        DEVTO_API,
        params={"per_page": str(max_results), "top": "7"},
        timeout=API_TIMEOUT_SECONDS,
    )
    response.raise_for_status()
    return _devto_resources(response.json(), max_results)


@fail_empty("GeeksforGeeks")
async def scrape_geeksforgeeks(
    client: httpx.AsyncClient, query: str, max_results: int = 2
) -> list[Resource]:
    """Search-page scrape; a best-guess article URL if the search fails."""
    slug = "-".join(query.lower().split())
    try:
        html = await fetch_page(
            client, f"https://www.geeksforgeeks.org/search/{quote(slug)}/"
        )
    except httpx.HTTPError:
        fallback = Resource(
            title=clip_title(f"{query} - GeeksforGeeks"),
            url=f"https://www.geeksforgeeks.org/{slug}/",
            type="article",
            source="GeeksforGeeks",
        )
        return [fallback][:max_results]

    return anchor_resources(
        html,
        "article a, .head a, .entry-title a",
        base_url="https://www.geeksforgeeks.org",
        resource_type="article",
        source="GeeksforGeeks",
        max_results=max_results,
        href_filter=lambda href: "geeksforgeeks.org" in href,
    )


def _unwrap_duckduckgo(href: str) -> str:
    """Returns the target of a DuckDuckGo redirect link (``uddg``)."""
    query = parse_qs(urlparse(urljoin("https://duckduckgo.com", href)).query)
    targets = query.get("uddg")
    return targets[0] if targets else href


@fail_empty("Medium")
async def scrape_medium(
    client: httpx.AsyncClient, query: str, max_results: int = 2
) -> list[Resource]:
    html = await fetch_page(
        client,
        "https://html.duckduckgo.com/html/",
        params={"q": f"site:medium.com {query}"},
    )
    soup = BeautifulSoup(html, "html.parser")
    articles: list[Resource] = []
    for anchor in soup.select(".result__a"):
        if len(articles) >= max_results:
            break
        href = anchor.get("href")
        title = anchor.get_text(strip=True)
        if not isinstance(href, str) or not title or "medium.com" not in href:
            continue
        articles.append(
            Resource(
                title=clip_title(title),
                url=_unwrap_duckduckgo(href),
                type="article",
                source="Medium",
            )
        )
    return articles


@fail_empty("freeCodeCamp")
async def scrape_freecodecamp(
    client: httpx.AsyncClient, query: str, max_results: int = 2
) -> list[Resource]:
    html = await fetch_page(
        client,
        "https://www.freecodecamp.org/news/search/",
        params={"query": query},
    )
    return anchor_resources(
        html,
        "article a.post-card-title, .post-card a",
        base_url="https://www.freecodecamp.org",
        resource_type="article",
        source="freeCodeCamp",
        max_results=max_results,
    )


@fail_empty("Hashnode")
async def scrape_hashnode(
    client: httpx.AsyncClient, query: str, max_results: int = 2
) -> list[Resource]:
    html = await fetch_page(client, "https://hashnode.com/search", params={"q": query})
    return anchor_resources(
        html,
        "a[data-testid='blog-card-title-link']",
        base_url="https://hashnode.com",
        resource_type="article",
        source="Hashnode",
        max_results=max_results,
    )


@fail_empty("CSS-Tricks")
async def scrape_css_tricks(
    client: httpx.AsyncClient, query: str, max_results: int = 2
) -> list[Resource]:
    html = await fetch_page(client, "https://css-tricks.com/", params={"s": query})
    return anchor_resources(
        html,
        "article h2 a, .post-title a",
        base_url="https://css-tricks.com",
        resource_type="article",
        source="CSS-Tricks",
        max_results=max_results,
    )


@fail_empty("Smashing Magazine")
async def scrape_smashing_magazine(
    client: httpx.AsyncClient, query: str, max_results: int = 2
) -> list[Resource]:
    html = await fetch_page(
        client, "https://www.smashingmagazine.com/", params={"s": query}
    )
    return anchor_resources(
        html,
        "article h2 a, .article-headline a",
        base_url="https://www.smashingmagazine.com",
        resource_type="article",
        source="Smashing Magazine",
        max_results=max_results,
    )
