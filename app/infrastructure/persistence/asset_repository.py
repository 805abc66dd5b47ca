"""SQLAlchemy implementation of the creative asset repository."""

from __future__ import annotations

from typing import Any, AsyncContextManager, Callable, List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces import AssetRepositoryInterface, CampaignNotFoundError
from app.domain.models import AssetStatus, BrandConfig, CreativeAssetRecord
from app.models import Campaign, CreativeAsset

SessionScope = Callable[[], AsyncContextManager[AsyncSession]]

_WRITABLE_FIELDS = frozenset(
    column.key for column in CreativeAsset.__table__.columns
) - {"id", "created_at"}


class SQLAlchemyAssetRepository(AssetRepositoryInterface):
    """Each operation opens its own short session so long runs hold no connection."""

    def __init__(self, session_scope: SessionScope):
        self._session_scope = session_scope

    async def get(self, asset_id: UUID) -> Optional[CreativeAssetRecord]:
        async with self._session_scope() as session:
            db_asset = await session.get(CreativeAsset, asset_id)
            return CreativeAssetRecord.model_validate(db_asset) if db_asset else None

    async def create_pending(
        self,
        *,
        campaign_id: UUID,
        storage_path: str,
        mime_type: Optional[str] = None,
        file_size: Optional[int] = None,
        display_name: Optional[str] = None,
    ) -> CreativeAssetRecord:
        async with self._session_scope() as session:
            campaign = await session.get(Campaign, campaign_id)
            if campaign is None:
                raise CampaignNotFoundError(f"Campaign {campaign_id} not found")

            db_asset = CreativeAsset(
                campaign_id=campaign.id,
                brand_id=campaign.brand_id,
                organization_id=campaign.organization_id,
                storage_path=storage_path,
                mime_type=mime_type,
                file_size=file_size,
                display_name=display_name,
                status=AssetStatus.PENDING,
            )
            session.add(db_asset)
            await session.commit()
            await session.refresh(db_asset)
            return CreativeAssetRecord.model_validate(db_asset)

    async def transition_status(
        self,
        asset_id: UUID,
        expected: AssetStatus,
        new: AssetStatus,
        **fields: Any,
    ) -> bool:
        values = self._validated(fields)
        values["status"] = new
        async with self._session_scope() as session:
            result = await session.execute(
                update(CreativeAsset)
                .where(CreativeAsset.id == asset_id)
                .where(CreativeAsset.status == expected)
                .values(**values)
            )
            await session.commit()
            return result.rowcount == 1

    async def update_fields(self, asset_id: UUID, **fields: Any) -> None:
        values = self._validated(fields)
        if not values:
            return
        async with self._session_scope() as session:
            await session.execute(
                update(CreativeAsset)
                .where(CreativeAsset.id == asset_id)
                .values(**values)
            )
            await session.commit()

    async def get_brand_config(self, campaign_id: UUID) -> BrandConfig:
        async with self._session_scope() as session:
            campaign = await session.get(Campaign, campaign_id)
            if campaign is None or campaign.brand is None:
                raise CampaignNotFoundError(
                    f"No brand configured for campaign {campaign_id}"
                )
            brand = campaign.brand
            return BrandConfig(
                brand_name=brand.name,
                phonetic_pronunciation=brand.phonetic_pronunciation,
                banned_terms=list(brand.banned_terms or []),
            )

    async def list_by_status(
        self, campaign_id: UUID, status: AssetStatus
    ) -> List[CreativeAssetRecord]:
        async with self._session_scope() as session:
            result = await session.execute(
                select(CreativeAsset)
                .where(CreativeAsset.campaign_id == campaign_id)
                .where(CreativeAsset.status == status)
                .order_by(CreativeAsset.created_at)
            )
            return [
                CreativeAssetRecord.model_validate(row)
                for row in result.scalars().all()
            ]

    @staticmethod
    def _validated(fields: dict[str, Any]) -> dict[str, Any]:
        unknown = set(fields) - _WRITABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown asset fields: {sorted(unknown)}")
        return dict(fields)


__all__ = ["SQLAlchemyAssetRepository"]
