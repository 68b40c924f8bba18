"""Video and course sources: YouTube, Udemy (free), Coursera, LinkedIn Learning.

YouTube is the backbone of the resource mix. Its search page embeds the
results as a ``ytInitialData`` JSON blob, which is far more stable than
the rendered markup. The course platforms are plain anchor scrapes.
"""

import json
import re
from typing import Any

import httpx

from skillforged.scrapers.base import (
    anchor_resources,
    clip_title,
    fail_empty,
    fetch_page,
)
from skillforged.schemas import Resource

_YT_INITIAL_DATA_RE = re.compile(r"var ytInitialData = (.+?);</script>")


def _youtube_items(data: dict[str, Any]) -> list[dict[str, Any]]:
    """Walks ytInitialData down to the first search result section."""
    sections = (
        data.get("contents", {})
        .get("twoColumnSearchResultsRenderer", {})
        .get("primaryContents", {})
        .get("sectionListRenderer", {})
        .get("contents", [])
    )
    if not sections:
        return []
    return sections[0].get("itemSectionRenderer", {}).get("contents", [])


@fail_empty("YouTube")
async def scrape_youtube(
    client: httpx.AsyncClient, query: str, max_results: int = 3
) -> list[Resource]:
    html = await fetch_page(
        client,
        "https://www.youtube.com/results",
        params={"search_query": f"{query} tutorial"},
    )
    match = _YT_INITIAL_DATA_RE.search(html)
    if match is None:
        return []

    videos: list[Resource] = []
    for item in _youtube_items(json.loads(match.group(1))):
        if len(videos) >= max_results:
            break
        renderer = item.get("videoRenderer")
        if not renderer:
            continue
        video_id = renderer.get("videoId")
        runs = renderer.get("title", {}).get("runs") or [{}]
        title = runs[0].get("text", "")
        if not video_id or not title:
            continue
        videos.append(
            Resource(
                title=clip_title(title),
                url=f"https://www.youtube.com/watch?v={video_id}",
                type="video",
                source="YouTube",
                thumbnail=f"https://img.youtube.com/vi/{video_id}/mqdefault.jpg",
            )
        )
    return videos


@fail_empty("Udemy")
async def scrape_udemy_free(
    client: httpx.AsyncClient, query: str, max_results: int = 2
) -> list[Resource]:
    html = await fetch_page(
        client,
        "https://www.udemy.com/courses/search/",
        params={"q": query, "price": "price-free"},
    )
    return anchor_resources(
        html,
        "a[data-testid='course-card-clickable']",
        base_url="https://www.udemy.com",
        resource_type="video",
        source="Udemy (Free)",
        max_results=max_results,
        href_filter=lambda href: "udemy.com" in href,
    )


@fail_empty("Coursera")
async def scrape_coursera(
    client: httpx.AsyncClient, query: str, max_results: int = 2
) -> list[Resource]:
    html = await fetch_page(
        client,
        "https://www.coursera.org/search",
        params={"query": query, "index": "prod_all_launched_products"},
    )
    return anchor_resources(
        html,
        "a[data-test='search-result-link']",
        base_url="https://www.coursera.org",
        resource_type="video",
        source="Coursera",
        max_results=max_results,
    )


@fail_empty("LinkedIn Learning")
async def scrape_linkedin_learning(
    client: httpx.AsyncClient, query: str, max_results: int = 2
) -> list[Resource]:
    html = await fetch_page(
        client,
        "https://www.linkedin.com/learning/search",
        params={"keywords": query},
    )
    return anchor_resources(
        html,
        "a.course-card__link",
        base_url="https://www.linkedin.com",
        resource_type="video",
        source="LinkedIn Learning",
        max_results=max_results,
    )
