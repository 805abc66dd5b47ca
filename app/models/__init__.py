"""SQLAlchemy models for the MVC architecture."""

from .base import Base
from .brand import Brand, Campaign  # noqa: F401
from .creative_asset import CreativeAsset  # noqa: F401

__all__ = [
    "Base",
    "Brand",
    "Campaign",
    "CreativeAsset",
]
