"""Pydantic schemas used as views in the MVC architecture."""

from .assets import (
    AssetLinkRequest,
    AssetLinkResponse,
    AssetQueuedResponse,
    AssetResponse,
    CampaignRequeueResponse,
    PipelineStageResponse,
    ReportItemResponse,
)
from .common import ErrorResponse

__all__ = [
    "AssetLinkRequest",
    "AssetLinkResponse",
    "AssetQueuedResponse",
    "AssetResponse",
    "CampaignRequeueResponse",
    "ErrorResponse",
    "PipelineStageResponse",
    "ReportItemResponse",
]
