"""Pydantic schemas for creative assets and their compliance reports."""

from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, Field

from app.domain.models import AssetStatus, CreativeType, OverallStatus


class AssetLinkRequest(BaseModel):
    """Payload linking an uploaded file to a campaign."""

    campaignId: UUID = Field(
        ...,
        validation_alias=AliasChoices("campaignId", "campaign_id"),
        serialization_alias="campaignId",
    )
    storagePath: str = Field(
        ...,
        min_length=1,
        max_length=1024,
        validation_alias=AliasChoices("storagePath", "storage_path"),
        serialization_alias="storagePath",
    )
    mimeType: Optional[str] = Field(
        None,
        max_length=255,
        validation_alias=AliasChoices("mimeType", "mime_type"),
        serialization_alias="mimeType",
    )
    displayName: Optional[str] = Field(
        None,
        max_length=512,
        validation_alias=AliasChoices("displayName", "display_name"),
        serialization_alias="displayName",
    )
    fileSize: Optional[int] = Field(
        None,
        ge=0,
        validation_alias=AliasChoices("fileSize", "file_size"),
        serialization_alias="fileSize",
    )


class ReportItemResponse(BaseModel):
    """One row of the frontend compliance report."""

    checkName: str = Field(
        ...,
        validation_alias=AliasChoices("checkName", "check_name"),
        serialization_alias="checkName",
    )
    result: OverallStatus
    details: str


class AssetResponse(BaseModel):
    """Persisted state of a creative asset."""

    id: UUID
    campaignId: UUID = Field(
        ...,
        validation_alias=AliasChoices("campaignId", "campaign_id"),
        serialization_alias="campaignId",
    )
    storagePath: str = Field(
        ...,
        validation_alias=AliasChoices("storagePath", "storage_path"),
        serialization_alias="storagePath",
    )
    mimeType: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("mimeType", "mime_type"),
        serialization_alias="mimeType",
    )
    displayName: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("displayName", "display_name"),
        serialization_alias="displayName",
    )
    fileSize: Optional[int] = Field(
        None,
        validation_alias=AliasChoices("fileSize", "file_size"),
        serialization_alias="fileSize",
    )
    status: AssetStatus
    retryable: bool = False
    creativeType: Optional[CreativeType] = Field(
        None,
        validation_alias=AliasChoices("creativeType", "creative_type"),
        serialization_alias="creativeType",
    )
    overallStatus: Optional[OverallStatus] = Field(
        None,
        validation_alias=AliasChoices("overallStatus", "overall_status"),
        serialization_alias="overallStatus",
    )
    complianceScore: Optional[int] = Field(
        None,
        validation_alias=AliasChoices("complianceScore", "compliance_score"),
        serialization_alias="complianceScore",
    )
    frontendReport: List[ReportItemResponse] = Field(
        default_factory=list,
        validation_alias=AliasChoices("frontendReport", "frontend_report"),
        serialization_alias="frontendReport",
    )
    errorDetail: Optional[dict[str, Any]] = Field(
        None,
        validation_alias=AliasChoices("errorDetail", "error_detail"),
        serialization_alias="errorDetail",
    )
    detailedResults: Optional[dict[str, Any]] = Field(
        None,
        validation_alias=AliasChoices("detailedResults", "detailed_results"),
        serialization_alias="detailedResults",
    )
    createdAt: Optional[datetime] = Field(
        None,
        validation_alias=AliasChoices("createdAt", "created_at"),
        serialization_alias="createdAt",
    )
    updatedAt: Optional[datetime] = Field(
        None,
        validation_alias=AliasChoices("updatedAt", "updated_at"),
        serialization_alias="updatedAt",
    )


class AssetLinkResponse(BaseModel):
    """Response to linking an asset: the pending row plus its public URL."""

    asset: AssetResponse
    publicUrl: str = Field(
        ...,
        validation_alias=AliasChoices("publicUrl", "public_url"),
        serialization_alias="publicUrl",
    )
    queued: bool = True


class AssetQueuedResponse(BaseModel):
    assetId: UUID = Field(
        ...,
        validation_alias=AliasChoices("assetId", "asset_id"),
        serialization_alias="assetId",
    )
    status: AssetStatus
    queued: bool = True


class CampaignRequeueResponse(BaseModel):
    """Outcome of requeueing every failed asset of a campaign."""

    campaignId: UUID = Field(
        ...,
        validation_alias=AliasChoices("campaignId", "campaign_id"),
        serialization_alias="campaignId",
    )
    retried: int
    errors: int
    assetIds: List[UUID] = Field(
        default_factory=list,
        validation_alias=AliasChoices("assetIds", "asset_ids"),
        serialization_alias="assetIds",
    )


class PipelineStageResponse(BaseModel):
    order: int
    name: str
    module: str
    summary: str
    fatal: bool = False
