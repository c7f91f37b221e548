"""Shared fixtures for catalog tests."""

from typing import Generator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from autocatalog.api.catalog import get_service
from autocatalog.application.catalog_service import CatalogPageService
from autocatalog.catalog.models import (
    ListingResult,
    Product,
    ProductCategory,
    TaxonomyNode,
)
from autocatalog.infrastructure.catalog_client import (
    ProductIndexClient,
    TaxonomySourceClient,
)
from autocatalog.main import app


# ============================================================================
# Sample Data
# ============================================================================


def make_product(
    article: str,
    brand: str = "BMW",
    model: str = "X5",
    category: str = "Spoilers",
    path: str | None = None,
) -> Product:
    """Create a compact product."""
    return Product(
        article=article,
        brand=brand,
        model=model,
        category=category,
        path=path if path is not None else f"/item/{article.lower()}",
        title=f"{brand} {model} {category}",
    )


@pytest.fixture
def taxonomy_tree() -> tuple[TaxonomyNode, ...]:
    """Brand tree with a curated brand, an uncurated one and a rich-text name."""
    return (
        TaxonomyNode(
            name="BMW",
            slug="bmw",
            canonical="https://shop.example/catalog/bmw",
            indexable=True,
            seo_title="BMW tuning parts",
            seo_description="Body kits and spoilers for BMW",
            children=(
                TaxonomyNode(
                    name="X5",
                    slug="x5",
                    canonical="https://shop.example/catalog/bmw/x5",
                    indexable=True,
                    seo_title="BMW X5 tuning",
                ),
                TaxonomyNode(name="<b>M3</b> Competition"),
            ),
        ),
        TaxonomyNode(name="Audi"),
        TaxonomyNode(
            name={"children": [{"text": "Mercedes-"}, {"text": "Benz"}]},
            slug="mercedes",
        ),
    )


@pytest.fixture
def product_categories() -> tuple[ProductCategory, ...]:
    """Flat category list with an unnamed entry and a missing slug."""
    return (
        ProductCategory(name="Spoilers", slug="spoilers", path="/catalog?pcat=spoilers"),
        ProductCategory(name=""),
        ProductCategory(name="Body Kits"),
        ProductCategory(name="Diffusers", slug="diffusers"),
    )


@pytest.fixture
def listing_result() -> ListingResult:
    """A full first page out of 30 products."""
    return ListingResult(
        items=tuple(make_product(f"ART{i}") for i in range(24)),
        total=30,
    )


# ============================================================================
# Source Mocks
# ============================================================================


@pytest.fixture
def mock_taxonomy(
    taxonomy_tree: tuple[TaxonomyNode, ...],
    product_categories: tuple[ProductCategory, ...],
) -> MagicMock:
    """Create a mock taxonomy source."""
    source = MagicMock(spec=TaxonomySourceClient)
    source.load_car_categories = AsyncMock(return_value=taxonomy_tree)
    source.load_product_categories = AsyncMock(return_value=product_categories)
    source.load_model_categories = AsyncMock(
        return_value=("Spoilers", "Diffusers", "Lips", "Mirrors")
    )
    source.close = AsyncMock()
    return source


@pytest.fixture
def mock_products(listing_result: ListingResult) -> MagicMock:
    """Create a mock product index."""
    source = MagicMock(spec=ProductIndexClient)
    source.load_products_with_meta = AsyncMock(return_value=listing_result)
    source.load_products = AsyncMock(
        return_value=(
            make_product("S1", brand="Audi", model="A4"),
            make_product("S2", brand="Audi", model="a4"),
            make_product("S3", brand="Audi", model="Q7"),
            make_product("S4", brand="Porsche", model="911"),
        )
    )
    source.load_product = AsyncMock(return_value=None)
    source.close = AsyncMock()
    return source


@pytest.fixture
def service(mock_taxonomy: MagicMock, mock_products: MagicMock) -> CatalogPageService:
    """Create a page service over the mocked sources."""
    return CatalogPageService(mock_taxonomy, mock_products, request_id="test-request")


# ============================================================================
# Client Fixtures
# ============================================================================


@pytest.fixture
def client(
    mock_taxonomy: MagicMock, mock_products: MagicMock
) -> Generator[TestClient, None, None]:
    """Create test client with the page service wired to mocked sources."""
    app.dependency_overrides[get_service] = lambda: CatalogPageService(
        mock_taxonomy, mock_products
    )
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
