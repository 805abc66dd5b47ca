"""FastAPI routers acting as controllers in the MVC architecture."""

from . import assets, campaigns

__all__ = ["assets", "campaigns"]
