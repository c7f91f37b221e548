"""HTTP clients for the upstream catalog sources.

Two independent services feed the catalog:

- the taxonomy source: brand/model tree, flat product categories and
  best-effort model category hints;
- the product index: paginated product lookups and single-product lookup.

Both clients cache reads across requests for the freshness window passed
with each call (or the configured default).
"""

from typing import Any, Awaitable, Callable, Hashable, TypeVar
from urllib.parse import quote

import httpx
import structlog

from autocatalog.catalog.models import (
    ListingQuery,
    ListingResult,
    Product,
    ProductCategory,
    TaxonomyNode,
)
from autocatalog.domain.exceptions import CatalogSourceError
from autocatalog.infrastructure.cache import FreshnessCache
from autocatalog.infrastructure.config import settings

logger = structlog.get_logger()

T = TypeVar("T")


def _items(data: Any) -> list[Any]:
    """Accept both a bare JSON list and an ``{"items": [...]}`` envelope."""
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("items"), list):
        return data["items"]
    raise ValueError("expected a list or an object with 'items'")


class SourceClient:
    """Base HTTP client for one upstream source.

    Provides lazy client creation, JSON fetching with error
    normalization, and freshness caching.
    """

    source_name = "source"

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        default_freshness: int = 0,
        cache: FreshnessCache | None = None,
    ) -> None:
        """Initialize client.

        Args:
            base_url: Base URL of the upstream service.
            timeout: Request timeout in seconds.
            default_freshness: Freshness window used when a call passes None.
            cache: Shared cache; a private one is created when omitted.
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.default_freshness = default_freshness
        self.cache = cache if cache is not None else FreshnessCache()
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Accept": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _get_json(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        allow_not_found: bool = False,
    ) -> Any:
        """GET a JSON document.

        Args:
            path: Endpoint path.
            params: Query parameters.
            allow_not_found: Return None on 404 instead of raising.

        Returns:
            Decoded JSON body, or None for an allowed 404.

        Raises:
            CatalogSourceError: On transport error, unexpected status or
                invalid JSON.
        """
        try:
            client = await self._get_client()
            response = await client.get(path, params=params)
        except httpx.RequestError as e:
            logger.error(
                "Catalog source request failed",
                source=self.source_name,
                path=path,
                error=str(e),
            )
            raise CatalogSourceError(
                self.source_name, f"Request failed: {str(e)}"
            ) from e

        if response.status_code == 404 and allow_not_found:
            return None

        if response.status_code != 200:
            raise CatalogSourceError(
                self.source_name,
                f"Unexpected status for {path}: {response.text[:200]}",
                response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise CatalogSourceError(
                self.source_name, f"Invalid JSON from {path}", response.status_code
            ) from e

    async def _cached(
        self,
        key: Hashable,
        freshness: int | None,
        loader: Callable[[], Awaitable[T]],
    ) -> T:
        """Serve a read from cache or load and store it.

        A None result is a miss (404) and is not stored.
        """
        window = self.default_freshness if freshness is None else freshness
        entry = self.cache.get((self.source_name, key))
        if entry is not None:
            return entry.value
        value = await loader()
        if value is not None:
            self.cache.store((self.source_name, key), value, window)
        return value

    @staticmethod
    def _parse(path: str, source: str, parse: Callable[[], T]) -> T:
        try:
            return parse()
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise CatalogSourceError(source, f"Malformed payload from {path}: {e}") from e


class TaxonomySourceClient(SourceClient):
    """Client for the taxonomy provider."""

    source_name = "taxonomy"

    async def load_car_categories(
        self, freshness: int | None = None
    ) -> tuple[TaxonomyNode, ...]:
        """Load the brand/model tree.

        Args:
            freshness: Freshness window in seconds.

        Returns:
            Top-level brand nodes.
        """

        async def load() -> tuple[TaxonomyNode, ...]:
            data = await self._get_json("/car-categories")
            return self._parse(
                "/car-categories",
                self.source_name,
                lambda: tuple(TaxonomyNode.from_api_response(n) for n in _items(data)),
            )

        return await self._cached("car_categories", freshness, load)

    async def load_product_categories(
        self, freshness: int | None = None
    ) -> tuple[ProductCategory, ...]:
        """Load the flat product category list."""

        async def load() -> tuple[ProductCategory, ...]:
            data = await self._get_json("/product-categories")
            return self._parse(
                "/product-categories",
                self.source_name,
                lambda: tuple(
                    ProductCategory.from_api_response(c) for c in _items(data)
                ),
            )

        return await self._cached("product_categories", freshness, load)

    async def load_model_categories(
        self,
        brand: str,
        model: str,
        freshness: int | None = None,
    ) -> tuple[str, ...]:
        """Load popular category names for a brand/model.

        Best-effort: callers must tolerate failures of this read.
        """

        async def load() -> tuple[str, ...]:
            data = await self._get_json(
                "/model-categories", params={"brand": brand, "model": model}
            )
            return self._parse(
                "/model-categories",
                self.source_name,
                lambda: tuple(str(c) for c in _items(data) if c),
            )

        return await self._cached(("model_categories", brand, model), freshness, load)


class ProductIndexClient(SourceClient):
    """Client for the product index."""

    source_name = "products"

    async def load_products(
        self, query: ListingQuery, freshness: int | None = None
    ) -> tuple[Product, ...]:
        """Load a page of products without the total count.

        Args:
            query: Filter and window.
            freshness: Freshness window in seconds.

        Returns:
            Products in index order.
        """

        async def load() -> tuple[Product, ...]:
            data = await self._get_json("/products", params=query.to_params())
            return self._parse(
                "/products",
                self.source_name,
                lambda: tuple(Product.from_api_response(p) for p in _items(data)),
            )

        return await self._cached(("products", query), freshness, load)

    async def load_products_with_meta(
        self, query: ListingQuery, freshness: int | None = None
    ) -> ListingResult:
        """Load a page of products with the total count over the filter."""

        async def load() -> ListingResult:
            params = {**query.to_params(), "withMeta": 1}
            data = await self._get_json("/products", params=params)

            def parse() -> ListingResult:
                items = tuple(Product.from_api_response(p) for p in _items(data))
                raw_total = data.get("total") if isinstance(data, dict) else None
                total = len(items) if raw_total is None else int(raw_total)
                return ListingResult(items=items, total=max(total, 0))

            return self._parse("/products", self.source_name, parse)

        return await self._cached(("products_with_meta", query), freshness, load)

    async def load_product(
        self, identifier: str, freshness: int | None = None
    ) -> Product | None:
        """Look up one product by canonical identifier.

        Returns:
            Product if found, None on 404.
        """

        async def load() -> Product | None:
            data = await self._get_json(
                f"/products/{quote(identifier, safe='')}",
                params={"compact": 1},
                allow_not_found=True,
            )
            if data is None:
                return None
            return self._parse(
                "/products/{identifier}",
                self.source_name,
                lambda: Product.from_api_response(data),
            )

        return await self._cached(("product", identifier), freshness, load)


def create_taxonomy_client(cache: FreshnessCache | None = None) -> TaxonomySourceClient:
    """Build the taxonomy client from settings."""
    return TaxonomySourceClient(
        settings.taxonomy_api_url,
        timeout=settings.source_timeout,
        default_freshness=settings.taxonomy_freshness,
        cache=cache,
    )


def create_product_client(cache: FreshnessCache | None = None) -> ProductIndexClient:
    """Build the product index client from settings."""
    return ProductIndexClient(
        settings.product_api_url,
        timeout=settings.source_timeout,
        default_freshness=settings.product_freshness,
        cache=cache,
    )
