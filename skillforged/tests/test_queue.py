"""Tests for skillforged.jobs.queue and skillforged.jobs.service — submit/poll."""

import asyncio

import pytest

from skillforged.hooks.database import InMemoryRoadmapStore
from skillforged.jobs.queue import JobQueue, JobRequest
from skillforged.jobs.service import GenerationService, build_generation_service
from skillforged.jobs.store import JobStatusStore
from skillforged.jobs.worker import GenerationWorker


class TestJobQueue:
    @pytest.mark.asyncio
    async def test_put_returns_before_handling(self, make_input) -> None:
        release = asyncio.Event()
        handled: list[str] = []

        async def handler(request: JobRequest) -> None:
            await release.wait()
            handled.append(request.job_id)

        queue = JobQueue(handler, workers=1)
        await queue.put(JobRequest("j1", "u1", make_input()))
        assert handled == []

        release.set()
        await queue.join()
        assert handled == ["j1"]
        await queue.shutdown()

    @pytest.mark.asyncio
    async def test_fifo_with_single_worker(self, make_input) -> None:
        handled: list[str] = []

        async def handler(request: JobRequest) -> None:
            handled.append(request.job_id)

        queue = JobQueue(handler, workers=1)
        for n in range(3):
            await queue.put(JobRequest(f"j{n}", "u1", make_input()))
        await queue.join()
        assert handled == ["j0", "j1", "j2"]
        await queue.shutdown()

    @pytest.mark.asyncio
    async def test_workers_run_concurrently(self, make_input) -> None:
        both_running = asyncio.Event()
        running = 0

        async def handler(request: JobRequest) -> None:
            nonlocal running
            running += 1
            if running == 2:
                both_running.set()
            await both_running.wait()

        queue = JobQueue(handler, workers=2)
        await queue.put(JobRequest("j1", "u1", make_input()))
        await queue.put(JobRequest("j2", "u1", make_input()))
        await asyncio.wait_for(queue.join(), timeout=1)
        await queue.shutdown()

    @pytest.mark.asyncio
    async def test_handler_error_does_not_kill_worker(self, make_input) -> None:
        handled: list[str] = []

        async def handler(request: JobRequest) -> None:
            if request.job_id == "bad":
                raise RuntimeError("handler bug")
            handled.append(request.job_id)

        queue = JobQueue(handler, workers=1)
        await queue.put(JobRequest("bad", "u1", make_input()))
        await queue.put(JobRequest("good", "u1", make_input()))
        await queue.join()
        assert handled == ["good"]
        await queue.shutdown()

    @pytest.mark.asyncio
    async def test_join_before_any_put(self) -> None:
        async def handler(request: JobRequest) -> None:
            pass

        queue = JobQueue(handler)
        await queue.join()
        await queue.shutdown()


class TestGenerationService:
    @pytest.fixture
    def service(self, cache, make_router, prompt_loader, make_federation, no_sleep):
        jobs = JobStatusStore(cache)
        worker = GenerationWorker(
            router=make_router(),
            prompts=prompt_loader,
            federation=make_federation(),
            roadmaps=InMemoryRoadmapStore(),
            jobs=jobs,
            sleep=no_sleep,
        )
        return build_generation_service(worker, jobs, workers=1)

    @pytest.mark.asyncio
    async def test_submit_writes_starting_record(self, cache, make_input) -> None:
        async def handler(request: JobRequest) -> None:
            pass

        jobs = JobStatusStore(cache)
        service = GenerationService(jobs, JobQueue(handler))
        result = await service.submit(make_input(), "u1")

        assert result.success
        job = await service.get_status(result.job_id)
        assert job.status == "starting"
        assert job.progress == 5
        await service.queue.shutdown()

    @pytest.mark.asyncio
    async def test_submit_then_poll_to_completion(self, service, make_input) -> None:
        result = await service.submit(make_input(), "u1")
        await service.queue.join()

        job = await service.get_status(result.job_id)
        assert job.status == "completed"
        assert job.progress == 100
        assert job.roadmap_id
        await service.queue.shutdown()

    @pytest.mark.asyncio
    async def test_job_ids_are_unique(self, service, make_input) -> None:
        first = await service.submit(make_input(), "u1")
        second = await service.submit(make_input(), "u1")
        assert first.job_id != second.job_id
        await service.queue.join()
        await service.queue.shutdown()

    @pytest.mark.asyncio
    async def test_empty_user_is_unauthorized(self, service, make_input) -> None:
        result = await service.submit(make_input(), "")
        assert result.success is False
        assert result.error == "Unauthorized"
        assert result.job_id is None

    @pytest.mark.asyncio
    async def test_store_failure_reports_start_error(self, make_input) -> None:
        class BrokenStore:
            async def write(self, job):
                raise ConnectionError("cache down")

        async def handler(request: JobRequest) -> None:
            pass

        service = GenerationService(BrokenStore(), JobQueue(handler))
        result = await service.submit(make_input(), "u1")
        assert result.success is False
        assert result.error == "Failed to start generation"

    @pytest.mark.asyncio
    async def test_unknown_job_status(self, service) -> None:
        assert await service.get_status("no-such-job") is None
