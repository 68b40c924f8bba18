"""Generation service — the submit/poll contract.

submit() writes the initial ``starting`` record and enqueues the job; it
returns the job id without waiting for any worker progress. get_status()
is a pure read of the status store.
"""

import logging
from uuid import uuid4

from skillforged.jobs.queue import JobQueue, JobRequest
from skillforged.jobs.store import JobStatusStore
from skillforged.jobs.worker import GenerationWorker
from skillforged.schemas import GenerationInput, Job, SubmitResult

logger = logging.getLogger("skillforged.jobs")


class GenerationService:
    """Accepts generation requests and answers status polls.

    Args:
        jobs: Job status store.
        queue: Queue whose handler runs the worker.
    """

    def __init__(self, jobs: JobStatusStore, queue: JobQueue) -> None:
        self._jobs = jobs
        self.queue = queue

    async def submit(
        self, generation_input: GenerationInput, user_id: str
    ) -> SubmitResult:
        """Starts a generation job for user_id.

        Returns:
            success with the new job id, or failure with a short error
            ("Unauthorized" when user_id is empty).
        """
        if not user_id:
            return SubmitResult(success=False, error="Unauthorized")

        job_id = str(uuid4())
        try:
            await self._jobs.write(
                Job(
                    id=job_id,
                    status="starting",
                    progress=5,
                    message="Initializing generation...",
                )
            )
            await self.queue.put(JobRequest(job_id, user_id, generation_input))
        except Exception:
            logger.exception("Could not start generation job %s", job_id)
            return SubmitResult(success=False, error="Failed to start generation")

        logger.info("Job %s submitted", job_id)
        return SubmitResult(success=True, job_id=job_id)

    async def get_status(self, job_id: str) -> Job | None:
        """Returns the job record, or None if unknown or expired."""
        return await self._jobs.get(job_id)


def build_generation_service(
    worker: GenerationWorker, jobs: JobStatusStore, workers: int = 2
) -> GenerationService:
    """Wires a worker into a queue-backed GenerationService."""

    async def handle(request: JobRequest) -> None:
        await worker.run(request.job_id, request.user_id, request.generation_input)

    return GenerationService(jobs, JobQueue(handle, workers=workers))
