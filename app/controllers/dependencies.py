"""Common FastAPI dependencies reused across controllers."""

from __future__ import annotations

from functools import lru_cache
from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from app.application.interfaces import AssetRepositoryInterface, JobQueueInterface
from app.database import session_scope
from app.infrastructure.external.s3_adapter import S3AssetStore
from app.infrastructure.persistence.asset_repository import SQLAlchemyAssetRepository
from app.pipelines.compliance.capabilities import AssetStore


@lru_cache(maxsize=1)
def get_asset_repository() -> AssetRepositoryInterface:
    """Repository bound to the application session factory."""

    return SQLAlchemyAssetRepository(session_scope)


@lru_cache(maxsize=1)
def get_asset_store() -> AssetStore:
    return S3AssetStore()


def get_job_queue(request: Request) -> JobQueueInterface:
    """Return the queue created at startup."""

    queue = getattr(request.app.state, "job_queue", None)
    if queue is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Job queue is not available",
        )
    return queue


RepositoryDep = Annotated[AssetRepositoryInterface, Depends(get_asset_repository)]
AssetStoreDep = Annotated[AssetStore, Depends(get_asset_store)]
JobQueueDep = Annotated[JobQueueInterface, Depends(get_job_queue)]


__all__ = [
    "AssetStoreDep",
    "JobQueueDep",
    "RepositoryDep",
    "get_asset_repository",
    "get_asset_store",
    "get_job_queue",
]
