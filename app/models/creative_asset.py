"""SQLAlchemy model for uploaded creative assets and their compliance results."""

from __future__ import annotations

import uuid

from sqlalchemy import BigInteger, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy import Enum as SqlEnum
from sqlalchemy.dialects.postgresql import JSONB, UUID

from app.domain.models import AssetStatus, CreativeType, OverallStatus
from app.models.base import Base
from app.models.brand import utc_now


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class CreativeAsset(Base):
    __tablename__ = "creative_assets"

    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )
    campaign_id = Column(
        ForeignKey("campaigns.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    brand_id = Column(UUID(as_uuid=True), nullable=True, index=True)
    organization_id = Column(String(128), nullable=True, index=True)

    storage_path = Column(Text, nullable=False)
    mime_type = Column(String(255), nullable=True)
    file_size = Column(BigInteger, nullable=True)
    display_name = Column(String(512), nullable=True)

    status = Column(
        SqlEnum(
            AssetStatus,
            name="asset_status",
            values_callable=_enum_values,
        ),
        nullable=False,
        default=AssetStatus.PENDING,
        index=True,
    )

    # stage outputs
    source_properties = Column(JSONB, nullable=True)
    ugc_detection_data = Column(JSONB, nullable=True)
    creative_type = Column(
        SqlEnum(
            CreativeType,
            name="creative_type",
            values_callable=_enum_values,
        ),
        nullable=True,
    )
    raw_transcript = Column(JSONB, nullable=True)
    vocabulary_compliance_result = Column(JSONB, nullable=True)

    # derived
    detailed_results = Column(JSONB, nullable=True)
    frontend_report = Column(JSONB, nullable=True)
    overall_status = Column(
        SqlEnum(
            OverallStatus,
            name="overall_status",
            values_callable=_enum_values,
        ),
        nullable=True,
    )
    compliance_score = Column(Integer, nullable=True)
    error_detail = Column(JSONB, nullable=True)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )


__all__ = ["CreativeAsset"]
