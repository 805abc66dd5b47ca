"""Campaign-level pipeline operations."""

from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter, status

from app.controllers.dependencies import JobQueueDep, RepositoryDep
from app.views import CampaignRequeueResponse
from app.workers import requeue_failed_assets

router = APIRouter(prefix="/campaigns", tags=["campaigns"])


@router.post(
    "/{campaign_id}/requeue-failed",
    response_model=CampaignRequeueResponse,
    status_code=status.HTTP_202_ACCEPTED,
)
async def requeue_campaign_failures(
    campaign_id: UUID,
    repository: RepositoryDep,
    queue: JobQueueDep,
) -> CampaignRequeueResponse:
    """Requeue every failed asset in the campaign."""

    summary = await requeue_failed_assets(repository, queue, campaign_id)
    return CampaignRequeueResponse(
        campaignId=campaign_id,
        retried=summary.retried,
        errors=summary.errors,
        assetIds=summary.asset_ids,
    )


__all__ = ["router"]
