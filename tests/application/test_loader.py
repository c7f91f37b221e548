"""Tests for the request-scoped loader."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from autocatalog.application.loader import HintResult, RequestLoader
from autocatalog.catalog.models import ListingFilters, ListingQuery, ListingResult
from autocatalog.domain.exceptions import CatalogSourceError
from autocatalog.infrastructure.config import settings


@pytest.fixture
def loader(mock_taxonomy: MagicMock, mock_products: MagicMock) -> RequestLoader:
    """Create a loader over the mocked sources."""
    return RequestLoader(mock_taxonomy, mock_products, request_id="req-1")


class TestHintResult:
    """Tests for HintResult."""

    def test_success(self) -> None:
        """Successful reads keep their value."""
        result = HintResult(value=("Lips",))
        assert result.ok
        assert result.or_empty() == ("Lips",)

    def test_failure_collapses_to_empty(self) -> None:
        """Failed reads are distinguishable but collapse to nothing."""
        result = HintResult(value=("stale",), error="timeout")
        assert not result.ok
        assert result.or_empty() == ()

    def test_empty_success(self) -> None:
        """An empty success is still a success."""
        assert HintResult().ok


class TestRequestLoader:
    """Tests for RequestLoader."""

    @pytest.mark.asyncio
    async def test_tree_read_once_per_request(
        self, loader: RequestLoader, mock_taxonomy: MagicMock
    ) -> None:
        """Concurrent and repeated reads share one upstream call."""
        first, second = await asyncio.gather(
            loader.car_categories(), loader.car_categories()
        )
        third = await loader.car_categories()

        assert first is second is third
        mock_taxonomy.load_car_categories.assert_awaited_once_with(
            settings.taxonomy_freshness
        )

    @pytest.mark.asyncio
    async def test_separate_loaders_do_not_share(
        self, mock_taxonomy: MagicMock, mock_products: MagicMock
    ) -> None:
        """Memoization is scoped to one request."""
        await RequestLoader(mock_taxonomy, mock_products).car_categories()
        await RequestLoader(mock_taxonomy, mock_products).car_categories()

        assert mock_taxonomy.load_car_categories.await_count == 2

    @pytest.mark.asyncio
    async def test_listing_keyed_by_query(
        self, loader: RequestLoader, mock_products: MagicMock
    ) -> None:
        """Different queries are separate reads."""
        await loader.listing(ListingFilters(brand="bmw"), 24, 0)
        await loader.listing(ListingFilters(brand="bmw"), 24, 0)
        await loader.listing(ListingFilters(brand="audi"), 24, 0)

        assert mock_products.load_products_with_meta.await_count == 2

    @pytest.mark.asyncio
    async def test_listing_uses_listing_query(
        self, loader: RequestLoader, mock_products: MagicMock
    ) -> None:
        """Listing reads go through the listing engine's query."""
        with patch(
            "autocatalog.application.loader.listing_engine.query",
            new_callable=AsyncMock,
        ) as query:
            query.return_value = ListingResult(items=(), total=0)
            await loader.listing(ListingFilters(brand="bmw", gen="e70"), 12, 12)

        query.assert_awaited_once_with(
            mock_products,
            ListingFilters(brand="bmw", gen="e70"),
            12,
            12,
            settings.product_freshness,
        )

    @pytest.mark.asyncio
    async def test_product_sample(
        self, loader: RequestLoader, mock_products: MagicMock
    ) -> None:
        """Sample is bounded by the configured size."""
        await loader.product_sample("audi")

        mock_products.load_products.assert_awaited_once_with(
            ListingQuery(brand="audi", limit=settings.fallback_sample_size, offset=0),
            settings.product_freshness,
        )

    @pytest.mark.asyncio
    async def test_critical_failure_propagates(
        self, loader: RequestLoader, mock_taxonomy: MagicMock
    ) -> None:
        """Critical reads raise."""
        mock_taxonomy.load_product_categories.side_effect = CatalogSourceError(
            "taxonomy", "down"
        )

        with pytest.raises(CatalogSourceError):
            await loader.product_categories()

    @pytest.mark.asyncio
    async def test_model_categories_success(self, loader: RequestLoader) -> None:
        """Hints are returned as a successful result."""
        result = await loader.start_model_categories("bmw", "x5")

        assert result.ok
        assert result.value == ("Spoilers", "Diffusers", "Lips", "Mirrors")

    @pytest.mark.asyncio
    async def test_model_categories_failure_is_empty(
        self, loader: RequestLoader, mock_taxonomy: MagicMock
    ) -> None:
        """A failed hint read never raises."""
        mock_taxonomy.load_model_categories.side_effect = CatalogSourceError(
            "taxonomy", "timeout"
        )

        result = await loader.start_model_categories("bmw", "x5")

        assert not result.ok
        assert result.or_empty() == ()

    @pytest.mark.asyncio
    async def test_cancel_pending(
        self, loader: RequestLoader, mock_taxonomy: MagicMock
    ) -> None:
        """In-flight reads are cancelled."""
        never = asyncio.Event()

        async def hang(*args: object) -> tuple[str, ...]:
            await never.wait()
            return ()

        mock_taxonomy.load_model_categories = AsyncMock(side_effect=hang)
        task = loader.start_model_categories("bmw", "x5")
        await asyncio.sleep(0)

        loader.cancel_pending()

        with pytest.raises(asyncio.CancelledError):
            await task

    @pytest.mark.asyncio
    async def test_load_product_adapter(
        self, loader: RequestLoader, mock_products: MagicMock
    ) -> None:
        """Redirect lookups go through the memoized product read."""
        await loader.load_product("A1", freshness=5)
        await loader.product("A1")

        mock_products.load_product.assert_awaited_once_with(
            "A1", settings.product_freshness
        )
