"""Tests for the category merger."""

from autocatalog.catalog.categories import find_category_name, merge_categories
from autocatalog.catalog.models import CategoryFacet, ProductCategory


class TestMergeCategories:
    """Tests for merge_categories()."""

    def test_skips_empty_and_derives_slugs(
        self, product_categories: tuple[ProductCategory, ...]
    ) -> None:
        """Unnamed entries are dropped and missing slugs derived."""
        facets = merge_categories(product_categories)
        assert [(f.slug, f.name) for f in facets] == [
            ("spoilers", "Spoilers"),
            ("body-kits", "Body Kits"),
            ("diffusers", "Diffusers"),
        ]
        assert facets[0].path == "/catalog?pcat=spoilers"

    def test_structured_first_derived_appended(
        self, product_categories: tuple[ProductCategory, ...]
    ) -> None:
        """Product-derived names only add new slugs."""
        facets = merge_categories(product_categories, ["spoilers", "Mirrors", "<i>Lips</i>"])
        assert [f.slug for f in facets] == [
            "spoilers",
            "body-kits",
            "diffusers",
            "mirrors",
            "lips",
        ]
        assert facets[0].name == "Spoilers"

    def test_first_write_wins_within_source(self) -> None:
        """Duplicate slugs keep the first entry."""
        facets = merge_categories(
            [
                ProductCategory(name="Splitters", slug="lips"),
                ProductCategory(name="Lips", slug="lips"),
            ]
        )
        assert facets == [CategoryFacet(name="Splitters", slug="lips")]

    def test_rich_text_names(self) -> None:
        """Rich names are flattened for display."""
        facets = merge_categories([ProductCategory(name={"text": "<b>Grilles</b>"})])
        assert facets == [CategoryFacet(name="Grilles", slug="grilles")]


class TestFindCategoryName:
    """Tests for find_category_name()."""

    def test_found(self) -> None:
        """Active category name is returned."""
        facets = [CategoryFacet(name="Body Kits", slug="body-kits")]
        assert find_category_name(facets, "body-kits") == "Body Kits"

    def test_missing(self) -> None:
        """Unknown or empty slug gives an empty name."""
        facets = [CategoryFacet(name="Body Kits", slug="body-kits")]
        assert find_category_name(facets, "lips") == ""
        assert find_category_name(facets, None) == ""
