"""Catalog resolution and faceted listing.

Pure functions over immutable snapshots of the taxonomy and the product
index: slug handling, taxonomy lookup and fallback, category merging,
pagination windows, SEO directives and legacy redirects.
"""

from autocatalog.catalog.categories import find_category_name, merge_categories
from autocatalog.catalog.listing import (
    ALLOWED_PER_PAGE,
    DEFAULT_PER_PAGE,
    ListingWindow,
    build_next_href,
    compute_offset,
    has_more,
    normalize_page,
    normalize_per_page,
    reset_key,
)
from autocatalog.catalog.models import (
    CategoryFacet,
    FacetOption,
    ListingFilters,
    ListingQuery,
    ListingResult,
    Product,
    ProductCategory,
    TaxonomyNode,
)
from autocatalog.catalog.redirects import (
    RedirectOutcome,
    category_redirect,
    resolve_composite,
    resolve_identifier,
)
from autocatalog.catalog.seo import PageMetadata, SeoDirectives, build_directives
from autocatalog.catalog.slug import plain_text, slug_equals, slugify
from autocatalog.catalog.taxonomy import (
    derive_brands,
    derive_models,
    find_brand,
    find_model,
)

__all__ = [
    # Slug
    "plain_text",
    "slug_equals",
    "slugify",
    # Models
    "CategoryFacet",
    "FacetOption",
    "ListingFilters",
    "ListingQuery",
    "ListingResult",
    "Product",
    "ProductCategory",
    "TaxonomyNode",
    # Taxonomy
    "derive_brands",
    "derive_models",
    "find_brand",
    "find_model",
    # Categories
    "find_category_name",
    "merge_categories",
    # Listing
    "ALLOWED_PER_PAGE",
    "DEFAULT_PER_PAGE",
    "ListingWindow",
    "build_next_href",
    "compute_offset",
    "has_more",
    "normalize_page",
    "normalize_per_page",
    "reset_key",
    # SEO
    "PageMetadata",
    "SeoDirectives",
    "build_directives",
    # Redirects
    "RedirectOutcome",
    "category_redirect",
    "resolve_composite",
    "resolve_identifier",
]
