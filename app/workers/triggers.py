"""Trigger helpers used by the HTTP layer: enqueue, requeue, campaign requeue."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional
from uuid import UUID

from app.application.interfaces import (
    AssetNotFoundError,
    AssetNotRetryableError,
    AssetRepositoryInterface,
    JobQueueInterface,
)
from app.domain.models import AssetJob, AssetStatus, CreativeAssetRecord

logger = logging.getLogger(__name__)

# derived fields cleared on requeue so a re-run starts from a clean row
_RESET_FIELDS = {
    "error_detail": None,
    "detailed_results": None,
    "frontend_report": None,
    "overall_status": None,
    "compliance_score": None,
}


@dataclass
class RequeueSummary:
    retried: int = 0
    errors: int = 0
    asset_ids: List[UUID] = field(default_factory=list)


async def enqueue_asset(
    queue: JobQueueInterface,
    *,
    asset_id: UUID,
    storage_path: str,
    campaign_id: UUID,
    mime_type: Optional[str] = None,
    display_name: Optional[str] = None,
) -> AssetJob:
    """Publish a job and return immediately; the run happens on a worker."""

    job = AssetJob(
        asset_id=asset_id,
        storage_path=storage_path,
        campaign_id=campaign_id,
        mime_type=mime_type,
        display_name=display_name,
    )
    await queue.publish(job)
    logger.info("Enqueued asset %s", asset_id)
    return job


def job_for(asset: CreativeAssetRecord) -> dict:
    return {
        "asset_id": asset.id,
        "storage_path": asset.storage_path,
        "campaign_id": asset.campaign_id,
        "mime_type": asset.mime_type,
        "display_name": asset.display_name,
    }


async def requeue_asset(
    repository: AssetRepositoryInterface,
    queue: JobQueueInterface,
    asset_id: UUID,
) -> CreativeAssetRecord:
    """Reset a failed asset to pending and enqueue it again."""

    asset = await repository.get(asset_id)
    if asset is None:
        raise AssetNotFoundError(f"Asset {asset_id} not found")

    reset = await repository.transition_status(
        asset_id,
        AssetStatus.FAILED,
        AssetStatus.PENDING,
        **_RESET_FIELDS,
    )
    if not reset:
        raise AssetNotRetryableError(
            f"Asset {asset_id} is {asset.status.value}; only failed assets can be requeued"
        )

    await enqueue_asset(queue, **job_for(asset))
    refreshed = await repository.get(asset_id)
    return refreshed or asset


async def requeue_failed_assets(
    repository: AssetRepositoryInterface,
    queue: JobQueueInterface,
    campaign_id: UUID,
) -> RequeueSummary:
    """Requeue every failed asset of a campaign, counting per-asset errors."""

    summary = RequeueSummary()
    for asset in await repository.list_by_status(campaign_id, AssetStatus.FAILED):
        try:
            await requeue_asset(repository, queue, asset.id)
        except (AssetNotFoundError, AssetNotRetryableError) as exc:
            logger.warning("Could not requeue asset %s: %s", asset.id, exc)
            summary.errors += 1
            continue
        summary.retried += 1
        summary.asset_ids.append(asset.id)

    logger.info(
        "Campaign %s requeue: %s retried, %s error(s)",
        campaign_id,
        summary.retried,
        summary.errors,
    )
    return summary


__all__ = [
    "RequeueSummary",
    "enqueue_asset",
    "job_for",
    "requeue_asset",
    "requeue_failed_assets",
]
