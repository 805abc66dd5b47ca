"""Creative asset endpoints.

Linking an asset inserts a ``pending`` row and hands a job to the work queue;
the compliance run happens on a worker (see
`app.pipelines.compliance.flow.CompliancePipeline`). Callers observe the
outcome by reading the asset back.
"""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from app.application.interfaces import (
    AssetNotFoundError,
    AssetNotRetryableError,
    CampaignNotFoundError,
)
from app.controllers.dependencies import AssetStoreDep, JobQueueDep, RepositoryDep
from app.domain.models import CreativeAssetRecord
from app.infrastructure.external.mq_adapter import QueueError
from app.pipelines.compliance import CompliancePipeline
from app.views import (
    AssetLinkRequest,
    AssetLinkResponse,
    AssetQueuedResponse,
    AssetResponse,
    ErrorResponse,
    PipelineStageResponse,
)
from app.workers import enqueue_asset, requeue_asset
from app.workers.triggers import job_for

_NOT_FOUND = {404: {"model": ErrorResponse}}

router = APIRouter(prefix="/assets", tags=["assets"])

logger = logging.getLogger(__name__)

PIPELINE_STAGES = tuple(CompliancePipeline.describe())
"""Ordered pipeline metadata used for quick reference and debugging."""


def _serialize_asset(asset: CreativeAssetRecord) -> AssetResponse:
    payload = asset.model_dump()
    payload["retryable"] = asset.retryable
    payload["frontend_report"] = asset.frontend_report or []
    return AssetResponse.model_validate(payload)


async def _get_asset_or_404(repository: RepositoryDep, asset_id: UUID) -> CreativeAssetRecord:
    asset = await repository.get(asset_id)
    if asset is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Asset not found",
        )
    return asset


@router.get("/pipeline/stages", response_model=list[PipelineStageResponse])
async def list_pipeline_stages() -> list[PipelineStageResponse]:
    """Describe the ordered stages of a compliance run."""

    return [
        PipelineStageResponse(
            order=stage.order,
            name=stage.name,
            module=stage.module,
            summary=stage.summary,
            fatal=stage.fatal,
        )
        for stage in PIPELINE_STAGES
    ]


@router.post(
    "",
    response_model=AssetLinkResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses=_NOT_FOUND,
)
async def link_asset(
    payload: AssetLinkRequest,
    repository: RepositoryDep,
    queue: JobQueueDep,
    store: AssetStoreDep,
) -> AssetLinkResponse:
    """Link an uploaded file to a campaign and queue it for compliance checks."""

    try:
        asset = await repository.create_pending(
            campaign_id=payload.campaignId,
            storage_path=payload.storagePath,
            mime_type=payload.mimeType,
            file_size=payload.fileSize,
            display_name=payload.displayName,
        )
    except CampaignNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Campaign not found",
        ) from None

    queued = True
    try:
        await enqueue_asset(queue, **job_for(asset))
    except QueueError:
        # the pending row stays; POST /assets/{id}/process re-delivers it
        logger.exception("Linked asset %s but could not queue it", asset.id)
        queued = False
    logger.info("Linked asset %s to campaign %s", asset.id, asset.campaign_id)
    return AssetLinkResponse(
        asset=_serialize_asset(asset),
        publicUrl=store.public_url(asset.storage_path),
        queued=queued,
    )


@router.get("/{asset_id}", response_model=AssetResponse, responses=_NOT_FOUND)
async def get_asset(asset_id: UUID, repository: RepositoryDep) -> AssetResponse:
    """Return the persisted state, report and score of an asset."""

    return _serialize_asset(await _get_asset_or_404(repository, asset_id))


@router.post(
    "/{asset_id}/process",
    response_model=AssetQueuedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses=_NOT_FOUND,
)
async def process_asset(
    asset_id: UUID,
    repository: RepositoryDep,
    queue: JobQueueDep,
) -> AssetQueuedResponse:
    """Re-deliver the processing trigger; non-pending assets are skipped by the worker."""

    asset = await _get_asset_or_404(repository, asset_id)
    await enqueue_asset(queue, **job_for(asset))
    return AssetQueuedResponse(assetId=asset.id, status=asset.status)


@router.post(
    "/{asset_id}/requeue",
    response_model=AssetQueuedResponse,
    status_code=status.HTTP_202_ACCEPTED,
    responses={**_NOT_FOUND, 409: {"model": ErrorResponse}},
)
async def requeue_failed_asset(
    asset_id: UUID,
    repository: RepositoryDep,
    queue: JobQueueDep,
) -> AssetQueuedResponse:
    """Reset a failed asset to pending and queue it again."""

    try:
        asset = await requeue_asset(repository, queue, asset_id)
    except AssetNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Asset not found",
        ) from None
    except AssetNotRetryableError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from None

    return AssetQueuedResponse(assetId=asset.id, status=asset.status)


__all__ = ["router", "PIPELINE_STAGES"]
