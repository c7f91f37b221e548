"""Domain layer - catalog exceptions."""

from autocatalog.domain.exceptions import CatalogError, CatalogSourceError

__all__ = [
    "CatalogError",
    "CatalogSourceError",
]
