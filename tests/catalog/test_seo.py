"""Tests for SEO directives."""

import pytest

from autocatalog.catalog.models import ListingFilters
from autocatalog.catalog.seo import (
    SeoDirectives,
    absolute_url,
    build_directives,
    has_active_filters,
)

CANONICAL = "https://shop.example/catalog/bmw"


class TestHasActiveFilters:
    """Tests for has_active_filters()."""

    def test_base_view(self) -> None:
        """Page 1 at default size without filters is the base view."""
        assert not has_active_filters(ListingFilters(), 1, 24)

    @pytest.mark.parametrize(
        ("filters", "page", "per_page"),
        [
            (ListingFilters(category="lips"), 1, 24),
            (ListingFilters(), 2, 24),
            (ListingFilters(), 1, 12),
        ],
    )
    def test_deviations(self, filters: ListingFilters, page: int, per_page: int) -> None:
        """Category, pagination and page size count as filters."""
        assert has_active_filters(filters, page, per_page)

    def test_path_segments_at_brand_level(self) -> None:
        """Brand and model are path segments below the catalog root."""
        filters = ListingFilters(brand="bmw", model="x5", gen="e70")
        assert not has_active_filters(filters, 1, 24)
        assert has_active_filters(filters, 1, 24, top_level=True)


class TestBuildDirectives:
    """Tests for build_directives()."""

    def test_indexed(self) -> None:
        """Indexable base view with products gets index and canonical."""
        directives = build_directives(False, True, CANONICAL, 10)
        assert directives == SeoDirectives(index=True, follow=True, canonical=CANONICAL)
        assert directives.robots == "index, follow"

    def test_empty_listing_not_indexed(self) -> None:
        """Zero products means noindex and no canonical."""
        directives = build_directives(False, True, CANONICAL, 0)
        assert directives.index is False
        assert directives.canonical is None

    def test_filtered_not_indexed(self) -> None:
        """Filtered views are followable but not indexed."""
        directives = build_directives(True, True, CANONICAL, 10)
        assert directives.robots == "noindex, follow"
        assert directives.canonical is None

    def test_not_indexable(self) -> None:
        """Nodes not marked indexable are never indexed."""
        directives = build_directives(False, False, CANONICAL, 10)
        assert directives.index is False
        assert directives.canonical is None

    def test_page_two_never_indexed(self) -> None:
        """Page 2 of an indexable brand is not indexed."""
        active = has_active_filters(ListingFilters(brand="bmw"), 2, 24)
        assert build_directives(active, True, CANONICAL, 100).index is False

    def test_canonical_missing(self) -> None:
        """Indexed pages without a known canonical carry none."""
        directives = build_directives(False, True, None, 5)
        assert directives.index is True
        assert directives.canonical is None


class TestAbsoluteUrl:
    """Tests for absolute_url()."""

    def test_with_base(self) -> None:
        """Base URL is joined without double slashes."""
        assert absolute_url("https://shop.example/", "/catalog") == (
            "https://shop.example/catalog"
        )

    def test_without_base(self) -> None:
        """Empty base gives the path."""
        assert absolute_url("", "/catalog") == "/catalog"
