"""API schemas for the catalog API.

Pydantic models for response serialization.
"""

from typing import Any

from pydantic import BaseModel, Field


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(default=None, description="Field that caused the error")
    message: str = Field(..., description="Error message")


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(
        default_factory=list, description="Additional error details"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


# ============================================================================
# Catalog Schemas
# ============================================================================


class ProductSchema(BaseModel):
    """Compact product card."""

    article: str = Field(..., description="Product identifier (article code)")
    brand: str = Field(default="", description="Brand display name")
    model: str = Field(default="", description="Model display name")
    category: list[str] = Field(default_factory=list, description="Category names")
    path: str = Field(default="", description="Canonical product path")
    title: str | None = Field(default=None, description="Product title")
    price: Any = Field(default=None, description="Price payload from the index")
    image: str | None = Field(default=None, description="Image URL")


class FacetSchema(BaseModel):
    """Brand or model navigation entry."""

    slug: str = Field(..., description="URL slug")
    name: str = Field(..., description="Display name")
    href: str = Field(..., description="Listing URL")
    active: bool = Field(default=False, description="Whether this is the current entry")


class CategoryFacetSchema(BaseModel):
    """Category filter entry."""

    slug: str = Field(..., description="Category slug (pcat value)")
    name: str = Field(..., description="Display name")
    href: str = Field(..., description="Listing URL with this category applied")
    active: bool = Field(default=False, description="Whether the filter is applied")


class BreadcrumbSchema(BaseModel):
    """Breadcrumb entry; the current page has no href."""

    label: str
    href: str | None = None


class RobotsSchema(BaseModel):
    """Robots directives."""

    index: bool = Field(..., description="Whether the page may be indexed")
    follow: bool = Field(..., description="Whether links may be followed")
    content: str = Field(..., description="Meta robots content value")


class PageMetadataSchema(BaseModel):
    """Document metadata for a listing page."""

    title: str = Field(..., description="Document title")
    description: str = Field(..., description="Meta description")
    robots: RobotsSchema
    canonical: str | None = Field(
        default=None, description="Canonical URL, only for indexable base views"
    )


class PaginationSchema(BaseModel):
    """Pagination and infinite-scroll state."""

    total: int = Field(..., description="Products matching the filter")
    page: int = Field(..., description="Current page number (1-based)")
    per_page: int = Field(..., description="Items per page")
    offset: int = Field(..., description="Offset of the first item")
    has_more: bool = Field(..., description="Whether there are more pages")
    next_href: str | None = Field(default=None, description="Next page URL")
    reset_key: str = Field(..., description="Changes when the result set changes")


class CatalogPageResponse(BaseModel):
    """Composed listing page."""

    level: str = Field(..., description="catalog, brand or model")
    heading: str = Field(..., description="Page heading")
    brand: FacetSchema | None = None
    model: FacetSchema | None = None
    brands: list[FacetSchema] = Field(default_factory=list)
    models: list[FacetSchema] = Field(default_factory=list)
    categories: list[CategoryFacetSchema] = Field(default_factory=list)
    active_category: str | None = None
    active_category_name: str = ""
    category_hints: list[str] = Field(default_factory=list)
    items: list[ProductSchema] = Field(default_factory=list)
    pagination: PaginationSchema
    breadcrumbs: list[BreadcrumbSchema] = Field(default_factory=list)
    metadata: PageMetadataSchema


class ListingChunkResponse(BaseModel):
    """Infinite-scroll continuation chunk."""

    items: list[ProductSchema] = Field(default_factory=list)
    total: int = Field(..., description="Products matching the filter")
    offset: int = Field(..., description="Offset of the first item")
    has_more: bool = Field(..., description="Whether more items exist")
    next_offset: int | None = Field(default=None, description="Offset to request next")
