"""API layer module.

Contains FastAPI routers and response schemas.
"""

from autocatalog.api.catalog import router as catalog_router
from autocatalog.api.health import router as health_router
from autocatalog.api.redirects import router as redirects_router

__all__ = [
    "catalog_router",
    "health_router",
    "redirects_router",
]
