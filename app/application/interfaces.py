from abc import ABC, abstractmethod
from typing import Any, List, Optional
from uuid import UUID

from app.domain.models import AssetJob, AssetStatus, BrandConfig, CreativeAssetRecord


class AssetNotFoundError(LookupError):
    """Raised when an asset id does not resolve to a stored asset."""


class AssetNotRetryableError(RuntimeError):
    """Raised when a requeue is requested for an asset that is not failed."""


class CampaignNotFoundError(LookupError):
    """Raised when a campaign id does not resolve to a stored campaign."""


class AssetRepositoryInterface(ABC):
    """Persistence contract for creative assets"""

    @abstractmethod
    async def get(self, asset_id: UUID) -> Optional[CreativeAssetRecord]:
        ...

    @abstractmethod
    async def create_pending(
        self,
        *,
        campaign_id: UUID,
        storage_path: str,
        mime_type: Optional[str] = None,
        file_size: Optional[int] = None,
        display_name: Optional[str] = None,
    ) -> CreativeAssetRecord:
        """Insert a new asset in ``pending`` state, raising CampaignNotFoundError."""

    @abstractmethod
    async def transition_status(
        self,
        asset_id: UUID,
        expected: AssetStatus,
        new: AssetStatus,
        **fields: Any,
    ) -> bool:
        """Set ``status`` to ``new`` only if it currently equals ``expected``.

        Returns True when the row was updated. Extra keyword arguments are
        written in the same statement.
        """

    @abstractmethod
    async def update_fields(self, asset_id: UUID, **fields: Any) -> None:
        ...

    @abstractmethod
    async def get_brand_config(self, campaign_id: UUID) -> BrandConfig:
        """Resolve campaign -> brand, raising CampaignNotFoundError."""

    @abstractmethod
    async def list_by_status(
        self, campaign_id: UUID, status: AssetStatus
    ) -> List[CreativeAssetRecord]:
        ...


class JobQueueInterface(ABC):
    """Work queue contract between the trigger and the worker pool"""

    @abstractmethod
    async def publish(self, job: AssetJob) -> None:
        ...

    @abstractmethod
    async def get(self) -> AssetJob:
        """Wait for and return the next job."""

    async def task_done(self, job: AssetJob) -> None:
        """Signal that ``job`` has been handled."""
        return None

    async def close(self) -> None:
        return None
