"""Worker pool consuming asset jobs."""

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional

from app.application.interfaces import JobQueueInterface
from app.pipelines.compliance.orchestrator import PipelineOrchestrator

logger = logging.getLogger("app.pipelines.compliance")


class PipelineWorker:
    """Run ``concurrency`` consumer tasks, each feeding jobs to the orchestrator."""

    def __init__(
        self,
        queue: JobQueueInterface,
        orchestrator: PipelineOrchestrator,
        *,
        concurrency: int = 2,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._queue = queue
        self._orchestrator = orchestrator
        self._concurrency = concurrency
        self._tasks: List[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def start(self) -> None:
        if self.running:
            return
        self._tasks = [
            asyncio.create_task(self._consume(index), name=f"pipeline-worker-{index}")
            for index in range(self._concurrency)
        ]
        logger.info("Started %s pipeline worker(s)", self._concurrency)

    async def stop(self) -> None:
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        logger.info("Pipeline workers stopped")

    async def _consume(self, index: int) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self.process(job.asset_id)
            finally:
                await self._queue.task_done(job)

    async def process(self, asset_id) -> Optional[str]:
        """Run one asset; errors are logged and never stop the worker."""

        try:
            status = await self._orchestrator.run(asset_id)
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Unhandled error while processing asset %s", asset_id)
            return None
        return status.value if status is not None else None


__all__ = ["PipelineWorker"]
