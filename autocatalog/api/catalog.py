"""Catalog API endpoints.

Listing pages for the three levels of the catalog (all products, brand,
brand + model), their document metadata, and the infinite-scroll
continuation endpoint.

Query parameters are accepted as raw strings and normalized by the
listing engine: invalid values fall back to defaults instead of 422.
"""

from typing import Annotated
from urllib.parse import quote

from fastapi import APIRouter, Depends, Query, Request

from autocatalog.api.schemas import (
    BreadcrumbSchema,
    CatalogPageResponse,
    CategoryFacetSchema,
    ErrorResponse,
    FacetSchema,
    ListingChunkResponse,
    PageMetadataSchema,
    PaginationSchema,
    ProductSchema,
    RobotsSchema,
)
from autocatalog.application.catalog_service import (
    CatalogPage,
    CatalogPageService,
    ListingChunk,
    PageRequest,
    get_catalog_service,
)
from autocatalog.catalog.listing import (
    normalize_offset,
    normalize_per_page,
    normalize_slug_param,
)
from autocatalog.catalog.models import ListingFilters, Product
from autocatalog.catalog.seo import PageMetadata
from autocatalog.catalog.slug import slug_equals

router = APIRouter(tags=["Catalog"])

ERROR_RESPONSES = {
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


# ============================================================================
# Dependencies
# ============================================================================


def get_service(request: Request) -> CatalogPageService:
    """Get page service bound to the app's upstream clients."""
    request_id = getattr(request.state, "request_id", None)
    return get_catalog_service(
        request.app.state.taxonomy_client,
        request.app.state.product_client,
        request_id=request_id,
    )


def get_page_request(
    pcat: str | None = None,
    brand: str | None = None,
    model: str | None = None,
    gen: str | None = None,
    page: str | None = None,
    per_page: Annotated[str | None, Query(alias="perPage")] = None,
) -> PageRequest:
    """Parse listing query parameters."""
    return PageRequest.from_query(
        pcat=pcat, brand=brand, model=model, gen=gen, page=page, per_page=per_page
    )


ServiceDep = Annotated[CatalogPageService, Depends(get_service)]
PageRequestDep = Annotated[PageRequest, Depends(get_page_request)]


# ============================================================================
# Converters
# ============================================================================


def product_to_schema(product: Product) -> ProductSchema:
    """Convert Product to response schema."""
    return ProductSchema(**product.to_dict())


def metadata_to_schema(metadata: PageMetadata) -> PageMetadataSchema:
    """Convert page metadata to response schema."""
    directives = metadata.directives
    return PageMetadataSchema(
        title=metadata.title,
        description=metadata.description,
        robots=RobotsSchema(
            index=directives.index,
            follow=directives.follow,
            content=directives.robots,
        ),
        canonical=directives.canonical,
    )


def page_to_response(page: CatalogPage) -> CatalogPageResponse:
    """Convert a composed page to response schema."""
    brand_path = (
        f"/catalog/{quote(page.brand.slug, safe='')}" if page.brand else "/catalog"
    )
    return CatalogPageResponse(
        level=page.level,
        heading=page.heading,
        brand=(
            FacetSchema(
                slug=page.brand.slug, name=page.brand.name, href=brand_path, active=True
            )
            if page.brand
            else None
        ),
        model=(
            FacetSchema(
                slug=page.model.slug,
                name=page.model.name,
                href=page.base_path,
                active=True,
            )
            if page.model
            else None
        ),
        brands=[
            FacetSchema(
                slug=b.slug, name=b.name, href=f"/catalog/{quote(b.slug, safe='')}"
            )
            for b in page.brands
        ],
        models=[
            FacetSchema(
                slug=m.slug,
                name=m.name,
                href=f"{brand_path}/{quote(m.slug, safe='')}",
                active=page.model is not None and slug_equals(m.slug, page.model.slug),
            )
            for m in page.models
        ],
        categories=[
            CategoryFacetSchema(
                slug=c.slug,
                name=c.name,
                href=f"{page.base_path}?pcat={quote(c.slug, safe='')}",
                active=c.slug == page.active_category,
            )
            for c in page.categories
        ],
        active_category=page.active_category,
        active_category_name=page.active_category_name,
        category_hints=page.category_hints,
        items=[product_to_schema(p) for p in page.items],
        pagination=PaginationSchema(
            total=page.total,
            page=page.page,
            per_page=page.per_page,
            offset=page.offset,
            has_more=page.has_more,
            next_href=page.next_href,
            reset_key=page.reset_key,
        ),
        breadcrumbs=[
            BreadcrumbSchema(label=b.label, href=b.href) for b in page.breadcrumbs
        ],
        metadata=metadata_to_schema(page.metadata),
    )


def chunk_to_response(chunk: ListingChunk) -> ListingChunkResponse:
    """Convert a continuation chunk to response schema."""
    return ListingChunkResponse(
        items=[product_to_schema(p) for p in chunk.items],
        total=chunk.total,
        offset=chunk.offset,
        has_more=chunk.has_more,
        next_offset=chunk.next_offset,
    )


# ============================================================================
# Listing Pages
# ============================================================================


@router.get(
    "/catalog",
    response_model=CatalogPageResponse,
    responses=ERROR_RESPONSES,
    summary="Catalog listing",
    description="All products, filterable by brand, model, generation and category.",
)
async def catalog_page(
    service: ServiceDep, page_request: PageRequestDep
) -> CatalogPageResponse:
    """Get the all-catalog page."""
    return page_to_response(await service.catalog_page(page_request))


@router.get(
    "/catalog/{brand}",
    response_model=CatalogPageResponse,
    responses=ERROR_RESPONSES,
    summary="Brand listing",
)
async def brand_page(
    brand: str, service: ServiceDep, page_request: PageRequestDep
) -> CatalogPageResponse:
    """Get a brand page.

    Args:
        brand: Brand slug from the path.
        service: Page service.
        page_request: Normalized query parameters.

    Returns:
        Brand page with its model facets and products.
    """
    return page_to_response(await service.brand_page(brand, page_request))


@router.get(
    "/catalog/{brand}/{model}",
    response_model=CatalogPageResponse,
    responses=ERROR_RESPONSES,
    summary="Model listing",
)
async def model_page(
    brand: str, model: str, service: ServiceDep, page_request: PageRequestDep
) -> CatalogPageResponse:
    """Get a model page."""
    return page_to_response(await service.model_page(brand, model, page_request))


# ============================================================================
# Metadata
# ============================================================================


@router.get(
    "/meta/catalog",
    response_model=PageMetadataSchema,
    responses=ERROR_RESPONSES,
    summary="Catalog page metadata",
)
async def catalog_metadata(
    service: ServiceDep, page_request: PageRequestDep
) -> PageMetadataSchema:
    """Get title, description and robots directives for the catalog page."""
    return metadata_to_schema(await service.catalog_metadata(page_request))


@router.get(
    "/meta/catalog/{brand}",
    response_model=PageMetadataSchema,
    responses=ERROR_RESPONSES,
    summary="Brand page metadata",
)
async def brand_metadata(
    brand: str, service: ServiceDep, page_request: PageRequestDep
) -> PageMetadataSchema:
    """Get metadata for a brand page."""
    return metadata_to_schema(await service.brand_metadata(brand, page_request))


@router.get(
    "/meta/catalog/{brand}/{model}",
    response_model=PageMetadataSchema,
    responses=ERROR_RESPONSES,
    summary="Model page metadata",
)
async def model_metadata(
    brand: str, model: str, service: ServiceDep, page_request: PageRequestDep
) -> PageMetadataSchema:
    """Get metadata for a model page."""
    return metadata_to_schema(
        await service.model_metadata(brand, model, page_request)
    )


# ============================================================================
# Continuation
# ============================================================================


@router.get(
    "/catalog-products",
    response_model=ListingChunkResponse,
    responses=ERROR_RESPONSES,
    summary="Load more products",
    description="Offset-based continuation used by infinite scrolling.",
)
async def catalog_products(
    service: ServiceDep,
    brand: str | None = None,
    model: str | None = None,
    category: str | None = None,
    offset: str | None = None,
    per_page: Annotated[str | None, Query(alias="perPage")] = None,
) -> ListingChunkResponse:
    """Get the next chunk of a listing."""
    chunk = await service.continue_listing(
        ListingFilters(
            category=normalize_slug_param(category),
            brand=normalize_slug_param(brand),
            model=normalize_slug_param(model),
        ),
        per_page=normalize_per_page(per_page),
        offset=normalize_offset(offset),
    )
    return chunk_to_response(chunk)
