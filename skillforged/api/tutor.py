"""Tutor API route — on-demand topic explanations.

POST /tutor/explain returns a Markdown explanation of one topic pitched at
the learner's level. Rate limited by client IP; cached per topic and level
for two hours, so repeated questions cost nothing.

Tier 3 orchestration module: imports from deps (Tier 2), ai/tutor (Tier 2),
schemas (Tier 1).
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from skillforged.ai.prompts import PromptLoader
from skillforged.ai.router import AIRoutingError, ModelRouter
from skillforged.ai.tutor import explain_topic
from skillforged.api.deps import (
    enforce_rate_limit,
    get_cache,
    get_current_user,
    get_model_router,
    get_prompt_loader,
)
from skillforged.hooks.interfaces import CacheStore
from skillforged.schemas import ApiError, ApiResponse, SkillLevel, User

logger = logging.getLogger(__name__)

router = APIRouter()


class ExplainRequest(BaseModel):
    """Request body for POST /tutor/explain."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    topic: str = Field(min_length=1, max_length=200)
    context: str = Field(default="", max_length=1000)
    skill_level: SkillLevel = "beginner"


@router.post("/explain", dependencies=[Depends(enforce_rate_limit)])
async def explain(
    body: ExplainRequest,
    user: User = Depends(get_current_user),
    model_router: ModelRouter = Depends(get_model_router),
    loader: PromptLoader = Depends(get_prompt_loader),
    cache: CacheStore = Depends(get_cache),
) -> dict:
    """Explains a topic at the requested skill level."""
    try:
        explanation = await explain_topic(
            model_router,
            loader,
            cache,
            topic=body.topic,
            context=body.context,
            skill_level=body.skill_level,
        )
    except AIRoutingError as exc:
        logger.warning("Explanation failed for %r: %s", body.topic, exc)
        raise HTTPException(
            status_code=503,
            detail=ApiResponse(
                ok=False,
                error=ApiError(
                    code="AI_UNAVAILABLE",
                    message="Failed to generate explanation. Please try again later.",
                ),
            ).model_dump(),
        ) from None

    return ApiResponse(ok=True, data={"explanation": explanation}).model_dump()
