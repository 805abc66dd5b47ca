"""RabbitMQ job queue backed by pika."""

from __future__ import annotations

import asyncio
import logging
from typing import Optional

import pika
from fastapi.concurrency import run_in_threadpool
from pika.exceptions import AMQPError
from pydantic import ValidationError

from app.application.interfaces import JobQueueInterface
from app.config.settings import QueueConfig, settings
from app.domain.models import AssetJob

logger = logging.getLogger(__name__)


class QueueError(RuntimeError):
    """Raised when the broker cannot be reached."""


class RabbitMQJobQueue(JobQueueInterface):
    """Durable queue with persistent messages; one short connection per call."""

    def __init__(self, config: Optional[QueueConfig] = None, connection_factory=None):
        self._config = config or settings.queue
        self.queue_name = self._config.queue_name
        credentials = pika.PlainCredentials(
            self._config.rabbitmq_username,
            self._config.rabbitmq_password.get_secret_value(),
        )
        self.connection_params = pika.ConnectionParameters(
            host=self._config.rabbitmq_host,
            port=self._config.rabbitmq_port,
            credentials=credentials,
        )
        self._connection_factory = connection_factory or pika.BlockingConnection

    def _get_connection(self):
        """Get a connection to RabbitMQ"""
        return self._connection_factory(self.connection_params)

    def _publish_sync(self, body: str) -> None:
        connection = self._get_connection()
        try:
            channel = connection.channel()
            channel.queue_declare(queue=self.queue_name, durable=True)
            channel.basic_publish(
                exchange="",
                routing_key=self.queue_name,
                body=body,
                properties=pika.BasicProperties(
                    delivery_mode=2,  # persistent
                    content_type="application/json",
                ),
            )
        finally:
            connection.close()

    def _get_sync(self) -> Optional[bytes]:
        connection = self._get_connection()
        try:
            channel = connection.channel()
            channel.queue_declare(queue=self.queue_name, durable=True)
            method_frame, _header_frame, body = channel.basic_get(
                queue=self.queue_name,
                auto_ack=True,
            )
        finally:
            connection.close()
        return body if method_frame else None

    async def publish(self, job: AssetJob) -> None:
        try:
            await run_in_threadpool(self._publish_sync, job.model_dump_json())
        except AMQPError as exc:
            raise QueueError(f"Failed to publish job for asset {job.asset_id}: {exc}") from exc
        logger.info("Published job for asset %s to %s", job.asset_id, self.queue_name)

    async def get(self) -> AssetJob:
        while True:
            try:
                body = await run_in_threadpool(self._get_sync)
            except AMQPError as exc:
                logger.warning("Failed to read from %s: %s", self.queue_name, exc)
                body = None

            if body is not None:
                try:
                    return AssetJob.model_validate_json(body)
                except ValidationError:
                    logger.exception("Discarding malformed job message on %s", self.queue_name)

            await asyncio.sleep(self._config.poll_interval_seconds)


__all__ = ["QueueError", "RabbitMQJobQueue"]
