"""Request-scoped access to the upstream catalog sources.

A RequestLoader lives for one request. Identical reads share one
in-flight task, so the page body and its metadata fetch the taxonomy
tree once. Freshness windows come from settings and are forwarded to the
clients, which cache across requests.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Hashable, Protocol

import structlog

from autocatalog.catalog import listing as listing_engine
from autocatalog.catalog.listing import build_query
from autocatalog.catalog.models import (
    ListingFilters,
    ListingQuery,
    ListingResult,
    Product,
    ProductCategory,
    TaxonomyNode,
)
from autocatalog.infrastructure.config import settings

logger = structlog.get_logger()


class TaxonomySource(Protocol):
    """Taxonomy provider interface."""

    async def load_car_categories(
        self, freshness: int | None = None
    ) -> tuple[TaxonomyNode, ...]: ...

    async def load_product_categories(
        self, freshness: int | None = None
    ) -> tuple[ProductCategory, ...]: ...

    async def load_model_categories(
        self, brand: str, model: str, freshness: int | None = None
    ) -> tuple[str, ...]: ...


class ProductSource(Protocol):
    """Product index interface."""

    async def load_products(
        self, query: ListingQuery, freshness: int | None = None
    ) -> tuple[Product, ...]: ...

    async def load_products_with_meta(
        self, query: ListingQuery, freshness: int | None = None
    ) -> ListingResult: ...

    async def load_product(
        self, identifier: str, freshness: int | None = None
    ) -> Product | None: ...


@dataclass(frozen=True)
class HintResult:
    """Outcome of a best-effort read.

    Keeps "failed" distinguishable from "succeeded with nothing" until the
    caller collapses it with or_empty().
    """

    value: tuple[str, ...] = ()
    error: str | None = None

    @property
    def ok(self) -> bool:
        """Whether the read succeeded."""
        return self.error is None

    def or_empty(self) -> tuple[str, ...]:
        """Value on success, empty tuple on failure."""
        return self.value if self.ok else ()


class RequestLoader:
    """Memoizing facade over both sources for a single request."""

    def __init__(
        self,
        taxonomy: TaxonomySource,
        products: ProductSource,
        request_id: str | None = None,
    ) -> None:
        """Initialize loader.

        Args:
            taxonomy: Taxonomy source client.
            products: Product index client.
            request_id: Request ID for log correlation.
        """
        self.taxonomy = taxonomy
        self.products = products
        self.request_id = request_id
        self._tasks: dict[Hashable, asyncio.Task[Any]] = {}

    def _memo(self, key: Hashable, factory: Callable[[], Awaitable[Any]]) -> "asyncio.Task[Any]":
        task = self._tasks.get(key)
        if task is None:
            task = asyncio.ensure_future(factory())
            self._tasks[key] = task
        return task

    async def car_categories(self) -> tuple[TaxonomyNode, ...]:
        """Brand/model tree."""
        return await self._memo(
            ("car_categories",),
            lambda: self.taxonomy.load_car_categories(settings.taxonomy_freshness),
        )

    async def product_categories(self) -> tuple[ProductCategory, ...]:
        """Flat category list."""
        return await self._memo(
            ("product_categories",),
            lambda: self.taxonomy.load_product_categories(settings.taxonomy_freshness),
        )

    async def listing(
        self, filters: ListingFilters, limit: int, offset: int
    ) -> ListingResult:
        """Product page with total count."""
        return await self._memo(
            ("listing", build_query(filters, limit, offset)),
            lambda: listing_engine.query(
                self.products, filters, limit, offset, settings.product_freshness
            ),
        )

    async def product_sample(self, brand: str | None = None) -> tuple[Product, ...]:
        """Bounded product sample, optionally filtered by brand."""
        query = ListingQuery(brand=brand, limit=settings.fallback_sample_size, offset=0)
        return await self._memo(
            ("sample", query),
            lambda: self.products.load_products(query, settings.product_freshness),
        )

    async def product(self, identifier: str) -> Product | None:
        """Single product by identifier."""
        return await self._memo(
            ("product", identifier),
            lambda: self.products.load_product(identifier, settings.product_freshness),
        )

    async def load_product(
        self, identifier: str, freshness: int | None = None
    ) -> Product | None:
        """Product lookup in the shape the redirect resolver expects."""
        return await self.product(identifier)

    async def _model_categories(self, brand: str, model: str) -> HintResult:
        try:
            value = await self.taxonomy.load_model_categories(
                brand, model, settings.taxonomy_freshness
            )
        except Exception as e:
            logger.warning(
                "Model category hints unavailable",
                brand=brand,
                model=model,
                error=str(e),
                request_id=self.request_id,
            )
            return HintResult(error=str(e))
        return HintResult(value=tuple(value))

    def start_model_categories(self, brand: str, model: str) -> "asyncio.Task[HintResult]":
        """Start the best-effort hint read in the background.

        The returned task never raises; await it only where the hints are
        needed.
        """
        return self._memo(
            ("model_categories", brand, model),
            lambda: self._model_categories(brand, model),
        )

    def cancel_pending(self) -> None:
        """Cancel reads that are still in flight."""
        for task in self._tasks.values():
            if not task.done():
                task.cancel()
