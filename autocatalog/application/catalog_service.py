"""Catalog page service.

Composes the catalog, brand and model listing pages: issues the upstream
reads concurrently, reconciles taxonomy and product data, and attaches
pagination state and SEO directives.

Critical reads (taxonomy tree, categories, listing, product sample) fail
the whole request. The model category hint read is best-effort and
degrades to no hints.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import quote

import structlog

from autocatalog.application.loader import (
    ProductSource,
    RequestLoader,
    TaxonomySource,
)
from autocatalog.catalog.categories import find_category_name, merge_categories
from autocatalog.catalog.listing import (
    ListingWindow,
    build_next_href,
    has_more,
    normalize_slug_param,
    reset_key,
)
from autocatalog.catalog.models import (
    CategoryFacet,
    FacetOption,
    ListingFilters,
    ListingResult,
    Product,
    TaxonomyNode,
)
from autocatalog.catalog.redirects import (
    RedirectOutcome,
    resolve_composite,
    resolve_identifier,
)
from autocatalog.catalog.seo import (
    PageMetadata,
    absolute_url,
    build_directives,
    has_active_filters,
)
from autocatalog.catalog.slug import plain_text
from autocatalog.catalog.taxonomy import (
    brand_display_name,
    derive_brands,
    derive_models,
    find_brand,
    find_model,
    needs_product_fallback,
)
from autocatalog.infrastructure.config import settings

logger = structlog.get_logger()

CATALOG_PATH = "/catalog"
HOME_LABEL = "Головна"
CATALOG_LABEL = "Каталог"
MAX_CATEGORY_HINTS = 3


# ============================================================================
# Request and Result Types
# ============================================================================


@dataclass(frozen=True)
class PageRequest:
    """Normalized listing request.

    Attributes:
        filters: Query-string filters (category, and at catalog level
            brand/model/generation).
        window: Page and page size.
    """

    filters: ListingFilters = field(default_factory=ListingFilters)
    window: ListingWindow = field(default_factory=ListingWindow)

    @classmethod
    def from_query(
        cls,
        pcat: str | None = None,
        brand: str | None = None,
        model: str | None = None,
        gen: str | None = None,
        page: Any = None,
        per_page: Any = None,
    ) -> "PageRequest":
        """Build a request from raw query parameters.

        Invalid values fall back to defaults; nothing here raises.
        """
        return cls(
            filters=ListingFilters(
                category=normalize_slug_param(pcat),
                brand=normalize_slug_param(brand),
                model=normalize_slug_param(model),
                gen=normalize_slug_param(gen),
            ),
            window=ListingWindow.from_raw(page, per_page),
        )


@dataclass(frozen=True)
class Breadcrumb:
    """Navigation crumb; the current page has no href."""

    label: str
    href: str | None = None


@dataclass(frozen=True)
class CatalogPage:
    """Composed listing page.

    Attributes:
        level: "catalog", "brand" or "model".
        heading: Page heading.
        base_path: Listing path without query string.
        brand: Resolved brand (slug and display name), if any.
        model: Resolved model, if any.
        brands: Brand facets (catalog level only).
        models: Model facets (brand and model level).
        categories: Category facets.
        active_category: Active category slug, if any.
        active_category_name: Its display name, empty when unknown.
        category_hints: Popular categories for the model (model level only).
        items: Products on this page.
        total: Products matching the filter.
        page: Page number.
        per_page: Page size.
        offset: Offset of the first item.
        has_more: Whether another page exists.
        next_href: URL of the next page.
        reset_key: Fingerprint of the result set inputs.
        breadcrumbs: Navigation trail.
        metadata: Title, description and robots directives.
    """

    level: str
    heading: str
    base_path: str
    brand: FacetOption | None
    model: FacetOption | None
    brands: list[FacetOption]
    models: list[FacetOption]
    categories: list[CategoryFacet]
    active_category: str | None
    active_category_name: str
    category_hints: list[str]
    items: tuple[Product, ...]
    total: int
    page: int
    per_page: int
    offset: int
    has_more: bool
    next_href: str | None
    reset_key: str
    breadcrumbs: list[Breadcrumb]
    metadata: PageMetadata


@dataclass(frozen=True)
class ListingChunk:
    """Continuation chunk for infinite scrolling."""

    items: tuple[Product, ...]
    total: int
    offset: int
    has_more: bool
    next_offset: int | None


# ============================================================================
# Metadata Builders
# ============================================================================


def catalog_metadata(request: PageRequest, total: int) -> PageMetadata:
    """Metadata for the all-catalog listing."""
    filtered = has_active_filters(
        request.filters, request.window.page, request.window.per_page, top_level=True
    )
    description = settings.catalog_seo_description
    return PageMetadata(
        title=settings.catalog_seo_title,
        description=description,
        directives=build_directives(
            filtered,
            indexable=bool(description.strip()),
            canonical_url=absolute_url(settings.site_base_url, CATALOG_PATH),
            total=total,
        ),
    )


def brand_metadata(
    request: PageRequest,
    brand_slug: str,
    brand_node: TaxonomyNode | None,
    total: int,
) -> PageMetadata:
    """Metadata for a brand listing."""
    filtered = has_active_filters(
        request.filters, request.window.page, request.window.per_page
    )
    name = (brand_node.display_name if brand_node else "") or brand_slug
    return PageMetadata(
        title=(brand_node.seo_title if brand_node else None) or name,
        description=(brand_node.seo_description if brand_node else None) or "",
        directives=build_directives(
            filtered,
            indexable=brand_node is not None and brand_node.indexable,
            canonical_url=brand_node.canonical if brand_node else None,
            total=total,
        ),
    )


def model_metadata(
    request: PageRequest,
    brand_slug: str,
    model_slug: str,
    brand_node: TaxonomyNode | None,
    model_node: TaxonomyNode | None,
    total: int,
) -> PageMetadata:
    """Metadata for a model listing.

    A model without a taxonomy node has no curated SEO data and is not
    indexed.
    """
    filtered = has_active_filters(
        request.filters, request.window.page, request.window.per_page
    )
    brand_name = (brand_node.display_name if brand_node else "") or brand_slug
    model_name = (model_node.display_name if model_node else "") or model_slug
    return PageMetadata(
        title=(model_node.seo_title if model_node else None)
        or f"{model_name} - {brand_name}",
        description=(model_node.seo_description if model_node else None) or "",
        directives=build_directives(
            filtered,
            indexable=model_node is not None and model_node.indexable,
            canonical_url=model_node.canonical if model_node else None,
            total=total,
        ),
    )


# ============================================================================
# Catalog Page Service
# ============================================================================


class CatalogPageService:
    """Service composing catalog listing pages.

    Example usage:
        service = CatalogPageService(taxonomy_client, product_client)
        page = await service.brand_page("bmw", PageRequest.from_query(page="2"))
    """

    def __init__(
        self,
        taxonomy: TaxonomySource,
        products: ProductSource,
        request_id: str | None = None,
    ) -> None:
        """Initialize service for one request.

        Args:
            taxonomy: Taxonomy source client.
            products: Product index client.
            request_id: Request ID for log correlation.
        """
        self.request_id = request_id
        self.loader = RequestLoader(taxonomy, products, request_id=request_id)

    # ------------------------------------------------------------------
    # Pages
    # ------------------------------------------------------------------

    async def catalog_page(self, request: PageRequest) -> CatalogPage:
        """Compose the all-catalog page.

        Brand, model and generation arrive as query filters here.
        """
        filters = request.filters
        window = request.window
        try:
            result, tree, product_categories, sample = await asyncio.gather(
                self.loader.listing(filters, window.limit, window.offset),
                self.loader.car_categories(),
                self.loader.product_categories(),
                self.loader.product_sample(),
            )
        finally:
            self.loader.cancel_pending()

        categories = merge_categories(product_categories)
        page = CatalogPage(
            level="catalog",
            heading=settings.catalog_seo_title,
            base_path=CATALOG_PATH,
            brand=None,
            model=None,
            brands=derive_brands(tree, sample),
            models=[],
            categories=categories,
            active_category=filters.category,
            active_category_name=find_category_name(categories, filters.category),
            category_hints=[],
            **self._pagination(CATALOG_PATH, filters, window, result, scope=()),
            breadcrumbs=[Breadcrumb(HOME_LABEL, "/"), Breadcrumb(CATALOG_LABEL)],
            metadata=catalog_metadata(request, result.total),
        )
        self._log_page(page)
        return page

    async def brand_page(self, brand: str, request: PageRequest) -> CatalogPage:
        """Compose a brand page.

        The brand's product sample is read alongside the other sources and
        only used when the taxonomy lists no models for the brand.
        """
        brand_slug = brand.strip().lower()
        filters = ListingFilters(category=request.filters.category, brand=brand_slug)
        window = request.window
        try:
            tree, product_categories, result, sample = await asyncio.gather(
                self.loader.car_categories(),
                self.loader.product_categories(),
                self.loader.listing(filters, window.limit, window.offset),
                self.loader.product_sample(brand_slug),
            )
        finally:
            self.loader.cancel_pending()

        brand_node = find_brand(tree, brand_slug)
        brand_name = brand_display_name(brand_node, brand_slug, sample)
        base_path = f"{CATALOG_PATH}/{quote(brand_slug, safe='')}"
        categories = merge_categories(product_categories)
        page = CatalogPage(
            level="brand",
            heading=brand_name,
            base_path=base_path,
            brand=FacetOption(slug=brand_slug, name=brand_name),
            model=None,
            brands=[],
            models=derive_models(brand_node, sample),
            categories=categories,
            active_category=filters.category,
            active_category_name=find_category_name(categories, filters.category),
            category_hints=[],
            **self._pagination(
                base_path,
                ListingFilters(category=filters.category),
                window,
                result,
                scope=(brand_slug,),
            ),
            breadcrumbs=[
                Breadcrumb(HOME_LABEL, "/"),
                Breadcrumb(CATALOG_LABEL, CATALOG_PATH),
                Breadcrumb(brand_name),
            ],
            metadata=brand_metadata(request, brand_slug, brand_node, result.total),
        )
        self._log_page(page)
        return page

    async def model_page(
        self, brand: str, model: str, request: PageRequest
    ) -> CatalogPage:
        """Compose a model page.

        Category hints are requested first and awaited last, so a slow hint
        source overlaps with the critical reads instead of adding to them.
        """
        brand_slug = brand.strip().lower()
        model_slug = model.strip().lower()
        filters = ListingFilters(
            category=request.filters.category, brand=brand_slug, model=model_slug
        )
        window = request.window
        hints_task = self.loader.start_model_categories(brand_slug, model_slug)
        try:
            tree, product_categories, result = await asyncio.gather(
                self.loader.car_categories(),
                self.loader.product_categories(),
                self.loader.listing(filters, window.limit, window.offset),
            )
            brand_node = find_brand(tree, brand_slug)
            model_node = find_model(brand_node, model_slug)
            sample: tuple[Product, ...] = ()
            if needs_product_fallback(brand_node):
                sample = await self.loader.product_sample(brand_slug)
            hints = (await hints_task).or_empty()
        finally:
            self.loader.cancel_pending()

        brand_name = (brand_node.display_name if brand_node else "") or brand_slug
        model_name = (model_node.display_name if model_node else "") or model_slug
        base_path = (
            f"{CATALOG_PATH}/{quote(brand_slug, safe='')}/{quote(model_slug, safe='')}"
        )
        categories = merge_categories(product_categories)
        page = CatalogPage(
            level="model",
            heading=model_name,
            base_path=base_path,
            brand=FacetOption(slug=brand_slug, name=brand_name),
            model=FacetOption(slug=model_slug, name=model_name),
            brands=[],
            models=derive_models(brand_node, sample),
            categories=categories,
            active_category=filters.category,
            active_category_name=find_category_name(categories, filters.category),
            category_hints=[
                name for name in (plain_text(h) for h in hints) if name
            ][:MAX_CATEGORY_HINTS],
            **self._pagination(
                base_path,
                ListingFilters(category=filters.category),
                window,
                result,
                scope=(brand_slug, model_slug),
            ),
            breadcrumbs=[
                Breadcrumb(HOME_LABEL, "/"),
                Breadcrumb(CATALOG_LABEL, CATALOG_PATH),
                Breadcrumb(brand_name, f"{CATALOG_PATH}/{quote(brand_slug, safe='')}"),
                Breadcrumb(model_name),
            ],
            metadata=model_metadata(
                request, brand_slug, model_slug, brand_node, model_node, result.total
            ),
        )
        self._log_page(page)
        return page

    # ------------------------------------------------------------------
    # Metadata only
    # ------------------------------------------------------------------

    async def catalog_metadata(self, request: PageRequest) -> PageMetadata:
        """Metadata for the catalog page.

        The product count lookup is skipped when filters already rule out
        indexing.
        """
        total = 0
        if not has_active_filters(
            request.filters, request.window.page, request.window.per_page, top_level=True
        ):
            total = await self._count_products(ListingFilters())
        return catalog_metadata(request, total)

    async def brand_metadata(self, brand: str, request: PageRequest) -> PageMetadata:
        """Metadata for a brand page."""
        brand_slug = brand.strip().lower()
        brand_node = find_brand(await self.loader.car_categories(), brand_slug)
        total = 0
        if self._needs_count(request, brand_node):
            total = await self._count_products(ListingFilters(brand=brand_slug))
        return brand_metadata(request, brand_slug, brand_node, total)

    async def model_metadata(
        self, brand: str, model: str, request: PageRequest
    ) -> PageMetadata:
        """Metadata for a model page."""
        brand_slug = brand.strip().lower()
        model_slug = model.strip().lower()
        brand_node = find_brand(await self.loader.car_categories(), brand_slug)
        model_node = find_model(brand_node, model_slug)
        total = 0
        if self._needs_count(request, model_node):
            total = await self._count_products(
                ListingFilters(brand=brand_slug, model=model_slug)
            )
        return model_metadata(
            request, brand_slug, model_slug, brand_node, model_node, total
        )

    # ------------------------------------------------------------------
    # Continuation and redirects
    # ------------------------------------------------------------------

    async def continue_listing(
        self,
        filters: ListingFilters,
        per_page: int,
        offset: int,
    ) -> ListingChunk:
        """Load the next chunk for an infinite-scroll listing."""
        result = await self.loader.listing(filters, per_page, offset)
        more = has_more(result, offset)
        return ListingChunk(
            items=result.items,
            total=result.total,
            offset=offset,
            has_more=more,
            next_offset=offset + len(result.items) if more else None,
        )

    async def resolve_legacy_product(self, raw: str) -> RedirectOutcome:
        """Resolve ``/p/{article}/{slug}`` style URLs."""
        return await resolve_identifier(self.loader, raw)

    async def resolve_product(self, raw: str) -> RedirectOutcome:
        """Resolve ``/product/{words--ARTICLE}`` style URLs."""
        return await resolve_composite(
            self.loader, raw, settings.product_path_prefix
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _needs_count(request: PageRequest, node: TaxonomyNode | None) -> bool:
        if node is None or not node.indexable:
            return False
        return not has_active_filters(
            request.filters, request.window.page, request.window.per_page
        )

    async def _count_products(self, filters: ListingFilters) -> int:
        result: ListingResult = await self.loader.listing(
            ListingFilters(brand=filters.brand, model=filters.model), 1, 0
        )
        return result.total

    @staticmethod
    def _pagination(
        base_path: str,
        href_filters: ListingFilters,
        window: ListingWindow,
        result: ListingResult,
        scope: tuple[str, ...],
    ) -> dict[str, Any]:
        return {
            "items": result.items,
            "total": result.total,
            "page": window.page,
            "per_page": window.per_page,
            "offset": window.offset,
            "has_more": has_more(result, window.offset),
            "next_href": build_next_href(
                base_path, href_filters, window.per_page, window.page, result
            ),
            "reset_key": reset_key(href_filters, window.per_page, window.page, scope),
        }

    def _log_page(self, page: CatalogPage) -> None:
        logger.info(
            "Catalog page composed",
            level=page.level,
            brand=page.brand.slug if page.brand else None,
            model=page.model.slug if page.model else None,
            total=page.total,
            page=page.page,
            per_page=page.per_page,
            indexed=page.metadata.directives.index,
            request_id=self.request_id,
        )


def get_catalog_service(
    taxonomy: TaxonomySource,
    products: ProductSource,
    request_id: str | None = None,
) -> CatalogPageService:
    """Create a page service for one request.

    Args:
        taxonomy: Taxonomy source client.
        products: Product index client.
        request_id: Optional request ID for correlation.

    Returns:
        CatalogPageService instance.
    """
    return CatalogPageService(taxonomy, products, request_id=request_id)
