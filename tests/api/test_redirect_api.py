"""Tests for legacy redirect endpoints."""

from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from autocatalog.catalog.models import Product


class TestProductRedirects:
    """Tests for legacy product URLs."""

    def test_composite_redirect(self, client: TestClient, mock_products: MagicMock) -> None:
        """Composite URL redirects permanently to the product page."""
        mock_products.load_product.return_value = Product(
            article="ABC123", path="/item/bmw-x5-lip"
        )

        response = client.get("/product/bmw-x5-lip--ABC123", follow_redirects=False)

        assert response.status_code == 301
        assert response.headers["location"] == "/item/bmw-x5-lip"

    def test_composite_matches_plain(
        self, client: TestClient, mock_products: MagicMock
    ) -> None:
        """Composite and plain identifiers land on the same page."""
        mock_products.load_product.return_value = Product(
            article="ABC123", path="/item/bmw-x5-lip"
        )

        composite = client.get("/product/lip--ABC123", follow_redirects=False)
        plain = client.get("/product/ABC123", follow_redirects=False)

        assert composite.headers["location"] == plain.headers["location"]

    def test_prefix_mismatch(self, client: TestClient, mock_products: MagicMock) -> None:
        """Targets outside the product prefix are not followed."""
        mock_products.load_product.return_value = Product(
            article="ABC123", path="/blog/lips"
        )

        response = client.get("/product/x--ABC123", follow_redirects=False)

        assert response.status_code == 404
        assert response.text == "Not Found"

    def test_unknown_product(self, client: TestClient) -> None:
        """Unknown products are a bare 404."""
        response = client.get("/product/x--NOPE", follow_redirects=False)
        assert response.status_code == 404

    def test_path_decoded_once(
        self, client: TestClient, mock_products: MagicMock
    ) -> None:
        """An encoded percent sign reaches the lookup as a literal '%'."""
        client.get("/product/A%2541", follow_redirects=False)

        assert mock_products.load_product.await_args.args[0] == "A%41"

    def test_legacy_article_url(self, client: TestClient, mock_products: MagicMock) -> None:
        """Legacy article URLs ignore the trailing slug."""
        mock_products.load_product.return_value = Product(
            article="A1", path="/tuning/a1"
        )

        response = client.get("/p/A1/anything-here", follow_redirects=False)

        assert response.status_code == 301
        assert response.headers["location"] == "/tuning/a1"
        mock_products.load_product.assert_awaited_once()
        assert mock_products.load_product.await_args.args[0] == "A1"

    def test_legacy_offsite_path(self, client: TestClient, mock_products: MagicMock) -> None:
        """Off-site paths are never redirected to."""
        mock_products.load_product.return_value = Product(
            article="A1", path="//evil.example/a1"
        )

        response = client.get("/p/A1/x", follow_redirects=False)

        assert response.status_code == 404


class TestCategoryRedirect:
    """Tests for legacy category URLs."""

    def test_category_redirect(self, client: TestClient) -> None:
        """Category pages redirect to the filtered catalog."""
        response = client.get("/category/Foo", follow_redirects=False)

        assert response.status_code == 301
        assert response.headers["location"] == "/catalog?pcat=foo"

    def test_encoded_slug(self, client: TestClient) -> None:
        """Encoded slugs are lowercased and re-encoded."""
        response = client.get("/category/Body%20Kits", follow_redirects=False)

        assert response.headers["location"] == "/catalog?pcat=body%20kits"
