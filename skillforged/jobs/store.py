"""Job status store — job records in the shared cache under ``job:{id}``.

Every write is a full-record overwrite with a fresh 1h TTL. A job is
owned by exactly one worker, so last-writer-wins is safe. Reads are pure:
an unknown or expired id is None.
"""

import logging

from pydantic import ValidationError

from skillforged.hooks.interfaces import CacheStore
from skillforged.schemas import Job

logger = logging.getLogger("skillforged.jobs")

JOB_TTL_SECONDS = 3600


def job_key(job_id: str) -> str:
    return f"job:{job_id}"


class JobStatusStore:
    """Reads and writes Job records through a CacheStore.

    Args:
        cache: The shared cache store.
    """

    def __init__(self, cache: CacheStore) -> None:
        self._cache = cache

    async def write(self, job: Job) -> None:
        await self._cache.set(
            job_key(job.id),
            job.model_dump(mode="json", by_alias=True),
            JOB_TTL_SECONDS,
        )

    async def get(self, job_id: str) -> Job | None:
        """Returns the job record, or None if unknown or expired."""
        raw = await self._cache.get(job_key(job_id))
        if raw is None:
            return None
        try:
            return Job.model_validate(raw)
        except ValidationError:
            logger.warning("Discarding malformed job record %s", job_id)
            return None
