"""Generation API routes — submit a roadmap job, poll its status.

Two endpoints form the submit/poll contract:
- POST /generation: validates the input, rate-limits by client IP, writes
  the initial job record, enqueues the job and returns its id. Never waits
  for generation.
- GET /generation/{job_id}: returns the job record as last written by the
  worker.

Polling is not authenticated: a job id is an unguessable UUID handed only
to the submitter, and the record carries no user data beyond progress.

Tier 3 orchestration module: imports from deps (Tier 2), jobs (Tier 2),
schemas (Tier 1).
"""

import logging

from fastapi import APIRouter, Depends, HTTPException

from skillforged.api.deps import (
    enforce_rate_limit,
    get_current_user,
    get_generation_service,
)
from skillforged.jobs.service import GenerationService
from skillforged.schemas import ApiError, ApiResponse, GenerationInput, User

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("", dependencies=[Depends(enforce_rate_limit)])
async def submit_generation(
    body: GenerationInput,
    user: User = Depends(get_current_user),
    service: GenerationService = Depends(get_generation_service),
) -> dict:
    """Starts a roadmap generation job for the caller."""
    result = await service.submit(body, user.id)
    if not result.success:
        raise HTTPException(
            status_code=503,
            detail=ApiResponse(
                ok=False,
                error=ApiError(
                    code="SERVICE_UNAVAILABLE",
                    message=result.error or "Failed to start generation",
                ),
            ).model_dump(),
        )

    return ApiResponse(
        ok=True,
        data=result.model_dump(by_alias=True, exclude_none=True),
    ).model_dump()


@router.get("/{job_id}")
async def get_generation_status(
    job_id: str,
    service: GenerationService = Depends(get_generation_service),
) -> dict:
    """Returns the job record for job_id."""
    job = await service.get_status(job_id)
    if job is None:
        raise HTTPException(
            status_code=404,
            detail=ApiResponse(
                ok=False,
                error=ApiError(
                    code="JOB_NOT_FOUND",
                    message=f"Job '{job_id}' not found or expired.",
                ),
            ).model_dump(),
        )

    return ApiResponse(ok=True, data=job.model_dump(mode="json", by_alias=True)).model_dump()
