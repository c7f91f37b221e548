"""Tests for API middleware."""

from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from autocatalog.api.middleware import catalog_context
from autocatalog.main import app


@pytest.fixture
def bare_client() -> TestClient:
    """Create test client without dependency overrides."""
    return TestClient(app)


class TestRequestIdMiddleware:
    """Tests for request ID correlation middleware."""

    def test_generates_request_id_if_not_provided(self, bare_client: TestClient) -> None:
        """Should generate request ID if not in request headers."""
        response = bare_client.get("/health")
        assert response.status_code == 200
        assert "X-Request-ID" in response.headers
        # UUID format
        assert len(response.headers["X-Request-ID"]) == 36

    def test_uses_provided_request_id(self, bare_client: TestClient) -> None:
        """Should use request ID from request headers."""
        custom_id = "custom-request-id-12345"
        response = bare_client.get("/health", headers={"X-Request-ID": custom_id})
        assert response.status_code == 200
        assert response.headers["X-Request-ID"] == custom_id

    def test_header_on_redirects(self, client: TestClient) -> None:
        """Redirect responses carry the request ID too."""
        response = client.get(
            "/category/foo",
            headers={"X-Request-ID": "redirect-id"},
            follow_redirects=False,
        )
        assert response.headers["X-Request-ID"] == "redirect-id"


class TestErrorHandlerMiddleware:
    """Tests for the error envelope."""

    def test_unhandled_exception(self, client: TestClient, mock_taxonomy: MagicMock) -> None:
        """Unexpected errors become a 500 with the standard envelope."""
        mock_taxonomy.load_car_categories.side_effect = RuntimeError("boom")

        response = client.get("/catalog", headers={"X-Request-ID": "err-id"})

        assert response.status_code == 500
        data = response.json()
        assert data["error_code"] == "INTERNAL_ERROR"
        assert data["request_id"] == "err-id"


class TestCatalogContext:
    """Tests for the per-request catalog log context."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("/catalog", {"surface": "page", "level": "catalog"}),
            ("/catalog/bmw", {"surface": "page", "level": "brand", "brand": "bmw"}),
            (
                "/catalog/bmw/x5",
                {"surface": "page", "level": "model", "brand": "bmw", "model": "x5"},
            ),
            ("/meta/catalog/bmw", {"surface": "meta", "level": "brand", "brand": "bmw"}),
            ("/catalog-products", {"surface": "continuation", "level": "listing"}),
            ("/product/x--A1", {"surface": "redirect", "redirect": "composite"}),
            ("/p/A1/slug", {"surface": "redirect", "redirect": "article"}),
            ("/health", {}),
            ("/", {}),
        ],
    )
    def test_catalog_context(self, path: str, expected: dict[str, str]) -> None:
        """Paths map to the catalog level and slugs they address."""
        assert catalog_context(path) == expected
