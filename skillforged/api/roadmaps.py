"""Roadmap library API routes — the learner's saved roadmaps.

Four endpoints, all authenticated and scoped to the caller:
- GET /roadmaps: summaries, newest first
- GET /roadmaps/{roadmap_id}: the full document
- PATCH /roadmaps/{roadmap_id}/topics: mark one topic (in)complete
- DELETE /roadmaps/{roadmap_id}

Another user's roadmap is indistinguishable from a missing one (404).

Tier 3 orchestration module: imports from deps (Tier 2), hooks/interfaces
(Tier 1), schemas (Tier 1).
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from skillforged.api.deps import get_current_user, get_roadmap_store
from skillforged.hooks.interfaces import RoadmapNotFoundError, RoadmapStore
from skillforged.schemas import ApiError, ApiResponse, Roadmap, User

logger = logging.getLogger(__name__)

router = APIRouter()


class TopicCompletionRequest(BaseModel):
    """Request body for PATCH /roadmaps/{roadmap_id}/topics."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    module_id: str
    topic_id: str
    is_completed: bool


def _roadmap_not_found(roadmap_id: str) -> HTTPException:
    return HTTPException(
        status_code=404,
        detail=ApiResponse(
            ok=False,
            error=ApiError(
                code="ROADMAP_NOT_FOUND",
                message=f"Roadmap '{roadmap_id}' not found.",
            ),
        ).model_dump(),
    )


def _roadmap_to_summary(roadmap: Roadmap) -> dict:
    """Library card fields: everything except the module bodies."""
    return {
        "id": roadmap.id,
        "title": roadmap.title,
        "description": roadmap.description,
        "currentSkillLevel": roadmap.current_skill_level,
        "totalWeeks": roadmap.total_weeks,
        "totalHours": roadmap.total_hours,
        "moduleCount": len(roadmap.modules),
        "progress": roadmap.progress,
        "createdAt": roadmap.created_at.isoformat(),
    }


@router.get("")
async def list_roadmaps(
    user: User = Depends(get_current_user),
    roadmaps: RoadmapStore = Depends(get_roadmap_store),
) -> dict:
    """Lists the caller's roadmaps, newest first."""
    items = await roadmaps.list_roadmaps(user.id)
    return ApiResponse(
        ok=True,
        data={"roadmaps": [_roadmap_to_summary(r) for r in items]},
    ).model_dump()


@router.get("/{roadmap_id}")
async def get_roadmap(
    roadmap_id: str,
    user: User = Depends(get_current_user),
    roadmaps: RoadmapStore = Depends(get_roadmap_store),
) -> dict:
    """Returns one of the caller's roadmaps in full."""
    roadmap = await roadmaps.get_roadmap(user.id, roadmap_id)
    if roadmap is None:
        raise _roadmap_not_found(roadmap_id)

    return ApiResponse(
        ok=True, data=roadmap.model_dump(mode="json", by_alias=True)
    ).model_dump()


@router.patch("/{roadmap_id}/topics")
async def update_topic(
    roadmap_id: str,
    body: TopicCompletionRequest,
    user: User = Depends(get_current_user),
    roadmaps: RoadmapStore = Depends(get_roadmap_store),
) -> dict:
    """Marks a topic complete or incomplete; returns the new progress."""
    if await roadmaps.get_roadmap(user.id, roadmap_id) is None:
        raise _roadmap_not_found(roadmap_id)

    try:
        progress = await roadmaps.update_topic_completion(
            user.id, roadmap_id, body.module_id, body.topic_id, body.is_completed
        )
    except RoadmapNotFoundError:
        raise HTTPException(
            status_code=404,
            detail=ApiResponse(
                ok=False,
                error=ApiError(
                    code="TOPIC_NOT_FOUND",
                    message=(
                        f"Topic '{body.topic_id}' not found in module "
                        f"'{body.module_id}'."
                    ),
                ),
            ).model_dump(),
        ) from None

    return ApiResponse(ok=True, data={"progress": progress}).model_dump()


@router.delete("/{roadmap_id}")
async def delete_roadmap(
    roadmap_id: str,
    user: User = Depends(get_current_user),
    roadmaps: RoadmapStore = Depends(get_roadmap_store),
) -> dict:
    """Deletes one of the caller's roadmaps."""
    if not await roadmaps.delete_roadmap(user.id, roadmap_id):
        raise _roadmap_not_found(roadmap_id)

    logger.info("Roadmap %s deleted", roadmap_id)
    return ApiResponse(ok=True, data={"deleted": roadmap_id}).model_dump()
