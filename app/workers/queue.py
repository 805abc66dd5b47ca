"""Job queue backends."""

from __future__ import annotations

import asyncio
from typing import Optional

from app.application.interfaces import JobQueueInterface
from app.config.settings import QueueConfig, settings
from app.domain.models import AssetJob


class InMemoryJobQueue(JobQueueInterface):
    """asyncio.Queue backed queue for single-process deployments and tests."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[AssetJob] = asyncio.Queue()

    async def publish(self, job: AssetJob) -> None:
        self._queue.put_nowait(job)

    async def get(self) -> AssetJob:
        return await self._queue.get()

    async def task_done(self, job: AssetJob) -> None:
        self._queue.task_done()

    async def join(self) -> None:
        await self._queue.join()

    def qsize(self) -> int:
        return self._queue.qsize()


def create_job_queue(config: Optional[QueueConfig] = None) -> JobQueueInterface:
    cfg = config or settings.queue
    if cfg.backend == "rabbitmq":
        from app.infrastructure.external.mq_adapter import RabbitMQJobQueue

        return RabbitMQJobQueue(cfg)
    return InMemoryJobQueue()


__all__ = ["InMemoryJobQueue", "create_job_queue"]
