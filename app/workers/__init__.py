"""Background execution of compliance runs.

The HTTP layer only publishes :class:`~app.domain.models.AssetJob` messages
through the trigger helpers; :class:`PipelineWorker` consumes them and runs
the orchestrator outside any request lifetime.
"""

from .queue import InMemoryJobQueue, create_job_queue
from .triggers import RequeueSummary, enqueue_asset, requeue_asset, requeue_failed_assets
from .worker import PipelineWorker

__all__ = [
    "InMemoryJobQueue",
    "PipelineWorker",
    "RequeueSummary",
    "create_job_queue",
    "enqueue_asset",
    "requeue_asset",
    "requeue_failed_assets",
]
