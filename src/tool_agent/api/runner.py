"""Queue-fed worker pool that executes submitted tasks in the background."""

from __future__ import annotations

import asyncio
import logging

from tool_agent.agent.orchestrator import AgentOrchestrator
from tool_agent.errors import QueueFullError
from tool_agent.storage.models import Task

logger = logging.getLogger(__name__)


class TaskRunner:
    """Bounded asyncio queue drained by a fixed number of worker coroutines."""

    def __init__(
        self,
        orchestrator: AgentOrchestrator,
        *,
        worker_count: int = 2,
        queue_maxsize: int = 100,
    ) -> None:
        self.orchestrator = orchestrator
        self.worker_count = worker_count
        self.queue_maxsize = queue_maxsize
        self._queue: asyncio.Queue[Task] | None = None
        self._workers: list[asyncio.Task[None]] = []

    @property
    def running(self) -> bool:
        return bool(self._workers)

    async def start(self) -> None:
        if self._workers:
            return
        self._queue = asyncio.Queue(maxsize=self.queue_maxsize)
        self._workers = [
            asyncio.create_task(self._work(self._queue, index), name=f"task-worker-{index}")
            for index in range(self.worker_count)
        ]
        logger.info("task_runner event=start workers=%d", self.worker_count)

    def submit(self, task: Task) -> None:
        if self._queue is None:
            raise RuntimeError("Task runner is not started")
        try:
            self._queue.put_nowait(task)
        except asyncio.QueueFull as exc:
            raise QueueFullError("Task queue is full") from exc
        logger.info("task_runner event=enqueued task_id=%s", task.id)

    async def join(self) -> None:
        """Wait until every queued task has been executed."""
        if self._queue is not None:
            await self._queue.join()

    async def stop(self) -> None:
        workers, self._workers = self._workers, []
        for worker in workers:
            worker.cancel()
        await asyncio.gather(*workers, return_exceptions=True)
        self._queue = None
        logger.info("task_runner event=stop")

    async def _work(self, queue: asyncio.Queue[Task], index: int) -> None:
        while True:
            task = await queue.get()
            try:
                await self.orchestrator.execute_task(task)
            except Exception:  # noqa: BLE001
                logger.exception(
                    "task_runner event=worker_error worker=%d task_id=%s", index, task.id
                )
            finally:
                queue.task_done()
