"""Topic explanations for learners working through a roadmap.

explain_topic() checks the explanation cache (``explain:{topic-slug}-{level}``,
2h), otherwise routes the tutor prompt with task type "explanation" —
the lightest, fastest models. Explanations are Markdown text, not JSON.

Rate limiting is the HTTP layer's job; this module only produces text.
"""

import logging
import re

from skillforged.ai.prompts import PromptLoader, build_explain_prompt
from skillforged.ai.router import AIRoutingError, ModelRouter
from skillforged.hooks.interfaces import CacheStore

logger = logging.getLogger(__name__)

EXPLAIN_CACHE_TTL_SECONDS = 7200

_WHITESPACE_RE = re.compile(r"\s+")


def explain_cache_key(topic: str, skill_level: str) -> str:
    return f"explain:{_WHITESPACE_RE.sub('-', topic.lower())}-{skill_level}"


async def explain_topic(
    router: ModelRouter,
    loader: PromptLoader,
    cache: CacheStore,
    *,
    topic: str,
    context: str,
    skill_level: str,
) -> str:
    """Returns a learner-level explanation of topic.

    Raises:
        AIRoutingError: If no model could produce an explanation.
    """
    cache_key = explain_cache_key(topic, skill_level)
    cached = await cache.get(cache_key)
    if isinstance(cached, str) and cached:
        logger.debug("Explanation cache hit: %s", cache_key)
        return cached

    prompt = build_explain_prompt(
        loader, topic=topic, context=context, skill_level=skill_level
    )
    response = await router.route(prompt, "explanation")
    if not response.success or not response.text:
        raise AIRoutingError(response)

    await cache.set(cache_key, response.text, EXPLAIN_CACHE_TTL_SECONDS)
    return response.text
