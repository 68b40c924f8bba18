"""Community sources: Stack Overflow questions and GitHub repositories.

GitHub results are typed "project" — a starred repository is something to
build from, not something to read.
"""

import httpx

from skillforged.scrapers.base import anchor_resources, fail_empty, fetch_page
from skillforged.schemas import Resource


@fail_empty("Stack Overflow")
async def scrape_stackoverflow(
    client: httpx.AsyncClient, query: str, max_results: int = 2
) -> list[Resource]:
    html = await fetch_page(
        client,
        "https://stackoverflow.com/search",
        params={"q": query, "tab": "newest"},
    )
    return anchor_resources(
        html,
        "a.s-link",
        base_url="https://stackoverflow.com",
        resource_type="article",
        source="Stack Overflow",
        max_results=max_results,
        href_filter=lambda href: "login" not in href,
    )


@fail_empty("GitHub")
async def scrape_github_repos(
    client: httpx.AsyncClient, query: str, max_results: int = 2
) -> list[Resource]:
    html = await fetch_page(
        client,
        "https://github.com/search",
        params={"q": query, "sort": "stars", "type": "repositories"},
    )
    return anchor_resources(
        html,
        "a[data-testid='repository-name-heading']",
        base_url="https://github.com",
        resource_type="project",
        source="GitHub",
        max_results=max_results,
    )
