"""SQLAlchemy models for brands and the campaigns that belong to them."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import relationship

from app.models.base import Base


def utc_now() -> datetime:
    """Get the current time in UTC."""
    return datetime.now(timezone.utc)


class Brand(Base):
    __tablename__ = "brands"

    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )
    organization_id = Column(String(128), nullable=True, index=True)
    name = Column(String(255), nullable=False)
    phonetic_pronunciation = Column(Text, nullable=True)
    banned_terms = Column(JSONB, nullable=False, default=list)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    campaigns = relationship("Campaign", back_populates="brand")


class Campaign(Base):
    __tablename__ = "campaigns"

    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )
    brand_id = Column(
        ForeignKey("brands.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    organization_id = Column(String(128), nullable=True, index=True)
    name = Column(String(255), nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )

    # relationships
    brand = relationship("Brand", back_populates="campaigns", lazy="joined")


__all__ = ["Brand", "Campaign", "utc_now"]
