"""Shared plumbing for per-source resource scrapers.

Every scraper is an ``async def scrape_x(client, query, max_results)``
returning ``list[Resource]``. The contract that matters is isolation: a
scraper never raises. Network errors, non-2xx responses, markup drift
and malformed JSON all degrade to ``[]`` via the fail_empty decorator,
so one broken site never fails the federation.

Markup coupling is inherent — selectors track each site's current HTML.
When a site changes shape its scraper quietly returns nothing until the
selector is updated.

Tier 2 — imports httpx, beautifulsoup4 and skillforged.schemas.
"""

import functools
import logging
from collections.abc import Awaitable, Callable
from typing import ParamSpec
from urllib.parse import urljoin

import httpx
from bs4 import BeautifulSoup

from skillforged.schemas import Resource

logger = logging.getLogger("skillforged.scrapers")

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)

API_TIMEOUT_SECONDS = 8.0
PAGE_TIMEOUT_SECONDS = 10.0
MAX_TITLE_LENGTH = 100

P = ParamSpec("P")

ScraperFn = Callable[..., Awaitable[list[Resource]]]


def fail_empty(source: str):
    """Decorates a scraper so any exception becomes an empty result.

    Args:
        source: Source name for the warning log line.
    """

    def decorator(
        func: Callable[P, Awaitable[list[Resource]]],
    ) -> Callable[P, Awaitable[list[Resource]]]:
        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> list[Resource]:
            try:
                return await func(*args, **kwargs)
            except Exception as exc:
                logger.warning(
                    "%s scrape failed: %s", source, str(exc) or type(exc).__name__
                )
                return []

        return wrapper

    return decorator


def build_client() -> httpx.AsyncClient:
    """HTTP client shared by all scrapers: browser UA, redirects followed."""
    return httpx.AsyncClient(
        headers={"User-Agent": USER_AGENT},
        follow_redirects=True,
        timeout=PAGE_TIMEOUT_SECONDS,
    )


async def fetch_page(
    client: httpx.AsyncClient,
    url: str,
    params: dict[str, str] | None = None,
    timeout: float = PAGE_TIMEOUT_SECONDS,
) -> str:
    """GETs a page and returns its text.

    Raises:
        httpx.HTTPError: On transport failure or a non-2xx status.
    """
    response = await client.get(url, params=params, timeout=timeout)
    response.raise_for_status()
    return response.text


def clip_title(title: str) -> str:
    return " ".join(title.split())[:MAX_TITLE_LENGTH]


def anchor_resources(
    html: str,
    selector: str,
    *,
    base_url: str,
    resource_type: str,
    source: str,
    max_results: int,
    href_filter: Callable[[str], bool] | None = None,
) -> list[Resource]:
    """Turns the anchors matching a CSS selector into resources.

    Anchors without an href or visible text are skipped. Relative hrefs
    are resolved against base_url.
    """
    soup = BeautifulSoup(html, "html.parser")
    resources: list[Resource] = []
    for anchor in soup.select(selector):
        if len(resources) >= max_results:
            break
        href = anchor.get("href")
        title = anchor.get_text(strip=True)
        if not isinstance(href, str) or not href or not title:
            continue
        if href_filter is not None and not href_filter(href):
            continue
        resources.append(
            Resource(
                title=clip_title(title),
                url=urljoin(base_url, href),
                type=resource_type,
                source=source,
            )
        )
    return resources
