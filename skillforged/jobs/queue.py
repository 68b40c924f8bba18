"""In-process job queue: an asyncio.Queue drained by a pool of worker tasks.

put() returns as soon as the request is enqueued; the submitting request
never waits on generation. Worker tasks are started lazily on the first
put(), inside the running event loop, and restarted if the loop changes
(each test gets its own loop).

Completion is only observable through the job status store. The queue
itself carries no results back.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from skillforged.schemas import GenerationInput

logger = logging.getLogger("skillforged.jobs")


@dataclass(frozen=True)
class JobRequest:
    job_id: str
    user_id: str
    generation_input: GenerationInput


JobHandler = Callable[[JobRequest], Awaitable[None]]


class JobQueue:
    """FIFO of generation requests consumed by ``workers`` tasks.

    Args:
        handler: Coroutine run for each request. Should not raise; if it
            does, the error is logged and the worker moves on.
        workers: Pool size.
    """

    def __init__(self, handler: JobHandler, workers: int = 2) -> None:
        self._handler = handler
        self._worker_count = max(1, workers)
        self._queue: asyncio.Queue[JobRequest] | None = None
        self._tasks: list[asyncio.Task[None]] = []
        self._loop: asyncio.AbstractEventLoop | None = None

    def _ensure_started(self) -> asyncio.Queue[JobRequest]:
        loop = asyncio.get_running_loop()
        if self._queue is None or self._loop is not loop:
            self._loop = loop
            self._queue = asyncio.Queue()
            self._tasks = [
                loop.create_task(self._consume(self._queue), name=f"job-worker-{n}")
                for n in range(self._worker_count)
            ]
            logger.info("Started %d job workers", self._worker_count)
        return self._queue

    async def put(self, request: JobRequest) -> None:
        """Enqueues a request without waiting for it to be processed."""
        self._ensure_started().put_nowait(request)

    async def _consume(self, queue: asyncio.Queue[JobRequest]) -> None:
        while True:
            request = await queue.get()
            try:
                await self._handler(request)
            except Exception:
                logger.exception("Job handler raised for %s", request.job_id)
            finally:
                queue.task_done()

    async def join(self) -> None:
        """Waits until every enqueued request has been handled."""
        if self._queue is not None:
            await self._queue.join()

    async def shutdown(self) -> None:
        """Cancels the worker tasks. Queued requests are dropped."""
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        self._queue = None
        self._loop = None
