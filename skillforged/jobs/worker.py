"""Generation worker — runs one job from structure to saved roadmap.

State machine, strictly forward:

    starting → analyzing → structuring → generating → saving → completed
                          (any state) ──uncaught exception──→ failed

GenerationWorker.run(job_id, user_id, generation_input) is the whole
body. Modules are enriched one at a time, never in parallel: module i+1
starts only after module i's status write, with a 1s cooldown between
modules. That keeps outbound scraping bounded and the progress log
monotonic and readable.

Failure semantics: any exception (or the server-side deadline) is caught
at the top of run(), logged with traceback, and written as
status="failed" with a generic message. Raw error text never reaches the
job record. Nothing partial is saved; a failed job is resubmitted from
scratch.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime

from skillforged.ai.architect import generate_structure
from skillforged.ai.prompts import PromptLoader
from skillforged.ai.router import ModelRouter
from skillforged.hooks.interfaces import RoadmapStore
from skillforged.jobs.store import JobStatusStore
from skillforged.schemas import (
    Curriculum,
    GenerationInput,
    Job,
    JobStatus,
    Module,
    normalize_resource_type,
)
from skillforged.scrapers.federation import ResourceFederation
from skillforged.scrapers.related_links import related_links

logger = logging.getLogger("skillforged.jobs")

MAX_JOB_LOGS = 50
INTER_MODULE_DELAY_SECONDS = 1
DEFAULT_TOPIC_HOURS = 2.0

GENERIC_FAILURE_MESSAGE = (
    "An unexpected error occurred while generating your roadmap."
)


class JobDeadlineExceeded(Exception):
    """The job ran past its server-side deadline."""


class JobProgress:
    """The worker's in-memory view of one job, written through on sync().

    Logs are timestamped and bounded to the newest MAX_JOB_LOGS lines.
    """

    def __init__(self, job_id: str, store: JobStatusStore) -> None:
        self.job_id = job_id
        self._store = store
        self.logs: list[str] = []

    def log(self, message: str) -> None:
        self.logs.append(f"[{datetime.now():%H:%M:%S}] {message}")
        if len(self.logs) > MAX_JOB_LOGS:
            del self.logs[: len(self.logs) - MAX_JOB_LOGS]

    async def sync(
        self,
        status: JobStatus,
        progress: int,
        message: str,
        *,
        roadmap_id: str | None = None,
        error: str | None = None,
    ) -> None:
        await self._store.write(
            Job(
                id=self.job_id,
                status=status,
                progress=progress,
                message=message,
                logs=list(self.logs),
                roadmap_id=roadmap_id,
                error=error,
            )
        )


def normalize_resources(curriculum: Curriculum) -> Curriculum:
    """Returns a copy with every resource type folded into ResourceType."""
    modules = [
        module.model_copy(
            update={
                "topics": [
                    topic.model_copy(
                        update={
                            "resources": [
                                resource.model_copy(
                                    update={"type": normalize_resource_type(resource.type)}
                                )
                                for resource in topic.resources
                            ]
                        }
                    )
                    for topic in module.topics
                ]
            }
        )
        for module in curriculum.modules
    ]
    return curriculum.model_copy(update={"modules": modules})


class GenerationWorker:
    """Runs generation jobs.

    Args:
        router: Model router for the structure step.
        prompts: Prompt loader for the structure template.
        federation: Resource federation for topic enrichment.
        roadmaps: Persistence collaborator; the only durability boundary.
        jobs: Job status store.
        sleep: Coroutine for the inter-module delay, injectable for tests.
        deadline_seconds: Hard limit per job; 0 disables it.
    """

    def __init__(
        self,
        router: ModelRouter,
        prompts: PromptLoader,
        federation: ResourceFederation,
        roadmaps: RoadmapStore,
        jobs: JobStatusStore,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        deadline_seconds: float = 900,
    ) -> None:
        self._router = router
        self._prompts = prompts
        self._federation = federation
        self._roadmaps = roadmaps
        self._jobs = jobs
        self._sleep = sleep
        self._deadline_seconds = deadline_seconds

    async def run(
        self, job_id: str, user_id: str, generation_input: GenerationInput
    ) -> None:
        """Runs one job to completed or failed. Never raises Exception."""
        progress = JobProgress(job_id, self._jobs)
        try:
            await self._run_with_deadline(progress, user_id, generation_input)
        except JobDeadlineExceeded:
            logger.error(
                "Job %s exceeded its %ss deadline", job_id, self._deadline_seconds
            )
            await self._mark_failed(progress)
        except Exception:
            logger.exception("Job %s failed", job_id)
            await self._mark_failed(progress)

    async def _run_with_deadline(
        self, progress: JobProgress, user_id: str, generation_input: GenerationInput
    ) -> None:
        if not self._deadline_seconds:
            await self._generate(progress, user_id, generation_input)
            return
        try:
            await asyncio.wait_for(
                self._generate(progress, user_id, generation_input),
                timeout=self._deadline_seconds,
            )
        except asyncio.TimeoutError:
            raise JobDeadlineExceeded(progress.job_id) from None

    async def _mark_failed(self, progress: JobProgress) -> None:
        progress.log("Generation failed.")
        try:
            await progress.sync(
                "failed", 0, "Generation failed", error=GENERIC_FAILURE_MESSAGE
            )
        except Exception:
            logger.exception("Could not record failure for job %s", progress.job_id)

    async def _generate(
        self, progress: JobProgress, user_id: str, generation_input: GenerationInput
    ) -> None:
        progress.log("Initializing background job...")
        await progress.sync("analyzing", 5, "Initializing...")

        progress.log("Consulting AI Architect to design curriculum...")
        await progress.sync("analyzing", 10, "Designing your learning path...")

        curriculum = await generate_structure(
            self._router, self._prompts, generation_input
        )

        progress.log("Curriculum Design Complete.")
        await progress.sync(
            "structuring", 20, "Curriculum designed. Beginning Deep Search..."
        )

        total = len(curriculum.modules)
        enriched: list[Module] = []
        for index, module in enumerate(curriculum.modules):
            number = index + 1
            progress.log(f"[Scraping Web] Module {number}: {module.title}")
            await progress.sync(
                "generating",
                round(20 + (index / total) * 60),
                f"Scraping Real Resources: Module {number}/{total} - {module.title}...",
            )

            enriched_module = await self._enrich_module(module)
            resource_count = sum(len(t.resources) for t in enriched_module.topics)
            progress.log(
                f"Module {number} scraped {resource_count} real resources from web"
            )
            progress.log(
                f"Module {number} enriched with "
                f"{len(enriched_module.related_links)} related reference links"
            )
            enriched.append(enriched_module)

            if number < total:
                progress.log(
                    f"Cooling down ({INTER_MODULE_DELAY_SECONDS}s) before next module..."
                )
                await self._sleep(INTER_MODULE_DELAY_SECONDS)

        progress.log("All modules researched. Saving to database...")
        await progress.sync("saving", 90, "Assembling final roadmap...")

        final = normalize_resources(curriculum.model_copy(update={"modules": enriched}))
        roadmap_id = await self._roadmaps.save_roadmap(user_id, final, generation_input)

        progress.log("Roadmap Saved Successfully.")
        progress.log("Mission Complete.")
        await progress.sync("completed", 100, "Roadmap ready!", roadmap_id=roadmap_id)
        logger.info("Job %s completed: roadmap %s", progress.job_id, roadmap_id)

    async def _enrich_module(self, module: Module) -> Module:
        """Attaches scraped resources to each topic and related links to the module."""
        per_topic = await self._federation.scrape_topics(module.topics)
        topics = [
            topic.model_copy(
                update={
                    "resources": resources,
                    "estimated_hours": topic.estimated_hours or DEFAULT_TOPIC_HOURS,
                }
            )
            for topic, resources in zip(module.topics, per_topic)
        ]
        return module.model_copy(
            update={"topics": topics, "related_links": related_links(module.title)}
        )
