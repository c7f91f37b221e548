"""Application layer module.

Contains the page composition service that orchestrates the pure
catalog logic and the upstream sources.
"""

from autocatalog.application.catalog_service import (
    CatalogPage,
    CatalogPageService,
    ListingChunk,
    PageRequest,
    get_catalog_service,
)
from autocatalog.application.loader import HintResult, RequestLoader

__all__ = [
    "CatalogPage",
    "CatalogPageService",
    "ListingChunk",
    "PageRequest",
    "get_catalog_service",
    "HintResult",
    "RequestLoader",
]
