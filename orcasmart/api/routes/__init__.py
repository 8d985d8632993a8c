"""API routes module."""

from orcasmart.api.routes.catalog import router as catalog_router
from orcasmart.api.routes.categories import router as categories_router
from orcasmart.api.routes.health import router as health_router

__all__ = ["catalog_router", "categories_router", "health_router"]
