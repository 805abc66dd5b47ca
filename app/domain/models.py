from datetime import datetime
from enum import Enum
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AssetStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class OverallStatus(str, Enum):
    PASS = "pass"
    WARN = "warn"
    FAIL = "fail"


class CreativeType(str, Enum):
    UGC = "UGC"
    PRODUCED = "Produced"


class BrandConfig(BaseModel):
    """Brand vocabulary rules consumed by the compliance stage"""
    brand_name: str
    phonetic_pronunciation: Optional[str] = None
    banned_terms: List[str] = Field(default_factory=list)


class CreativeAssetRecord(BaseModel):
    """Domain model for a creative asset row"""
    id: UUID
    campaign_id: UUID
    brand_id: Optional[UUID] = None
    organization_id: Optional[str] = None
    storage_path: str
    mime_type: Optional[str] = None
    file_size: Optional[int] = None
    display_name: Optional[str] = None
    status: AssetStatus = AssetStatus.PENDING

    source_properties: Optional[dict[str, Any]] = None
    ugc_detection_data: Optional[dict[str, Any]] = None
    creative_type: Optional[CreativeType] = None
    raw_transcript: Optional[dict[str, Any]] = None
    vocabulary_compliance_result: Optional[dict[str, Any]] = None

    detailed_results: Optional[dict[str, Any]] = None
    frontend_report: Optional[List[dict[str, Any]]] = None
    overall_status: Optional[OverallStatus] = None
    compliance_score: Optional[int] = None
    error_detail: Optional[dict[str, Any]] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

    @property
    def retryable(self) -> bool:
        return self.status == AssetStatus.FAILED


class AssetJob(BaseModel):
    """Unit of background work handed from the trigger to a worker"""
    asset_id: UUID
    storage_path: str
    campaign_id: UUID
    mime_type: Optional[str] = None
    display_name: Optional[str] = None
