"""SEO directive engine.

Filtered, paginated or resized listings are variants of a base view: they
stay followable but are never indexed and never carry a canonical link.
Empty listings are never indexed either.
"""

from dataclasses import dataclass

from autocatalog.catalog.listing import DEFAULT_PER_PAGE
from autocatalog.catalog.models import ListingFilters


@dataclass(frozen=True)
class SeoDirectives:
    """Robots and canonical directives for a page."""

    index: bool
    follow: bool = True
    canonical: str | None = None

    @property
    def robots(self) -> str:
        """Meta robots content value."""
        return ", ".join(
            ["index" if self.index else "noindex", "follow" if self.follow else "nofollow"]
        )


@dataclass(frozen=True)
class PageMetadata:
    """Document metadata for a listing page."""

    title: str
    description: str
    directives: SeoDirectives


def has_active_filters(
    filters: ListingFilters,
    page: int,
    per_page: int,
    top_level: bool = False,
) -> bool:
    """Whether the request deviates from the base view.

    Args:
        filters: Query-string filters.
        page: Normalized page number.
        per_page: Normalized page size.
        top_level: True for the all-catalog listing, where brand, model and
            generation are query filters rather than path segments.

    Returns:
        True if any filter, pagination or page size override is present.
    """
    if filters.category or page > 1 or per_page != DEFAULT_PER_PAGE:
        return True
    if top_level and (filters.brand or filters.model or filters.gen):
        return True
    return False


def build_directives(
    has_active_filters: bool,
    indexable: bool,
    canonical_url: str | None,
    total: int,
) -> SeoDirectives:
    """Decide indexability and canonical URL.

    Args:
        has_active_filters: Result of has_active_filters().
        indexable: Whether the base view is marked indexable.
        canonical_url: Canonical URL of the base view, if known.
        total: Number of products in the listing.

    Returns:
        Directives; canonical is set only when the page is indexed.
    """
    index = not has_active_filters and indexable and total > 0
    return SeoDirectives(
        index=index,
        follow=True,
        canonical=canonical_url if index and canonical_url else None,
    )


def absolute_url(base_url: str, path: str) -> str:
    """Join the site base URL and a path; path only when no base is set."""
    base = base_url.rstrip("/")
    return f"{base}{path}" if base else path
