"""Category merger.

The sidebar category list comes from the flat product-category source and,
optionally, from category names seen on products. Both are merged by slug,
structured categories first.

At brand and model level the list is the global one. It is not narrowed
to categories that actually have products under the current brand/model,
so a facet may lead to an empty result page.
"""

from typing import Iterable, Sequence

from autocatalog.catalog.models import CategoryFacet, ProductCategory, RichText
from autocatalog.catalog.slug import plain_text, slugify


def merge_categories(
    product_categories: Sequence[ProductCategory],
    derived_names: Iterable[RichText] = (),
) -> list[CategoryFacet]:
    """Merge structured categories with product-derived category names.

    Args:
        product_categories: Categories from the taxonomy source.
        derived_names: Ad-hoc names seen on products.

    Returns:
        Facets in source order, deduplicated by slug, first write wins.
    """
    facets: list[CategoryFacet] = []
    seen: set[str] = set()

    def add(name: str, slug: str | None, path: str | None = None) -> None:
        if not name:
            return
        slug = slug or slugify(name)
        if not slug or slug in seen:
            return
        seen.add(slug)
        facets.append(CategoryFacet(name=name, slug=slug, path=path))

    for category in product_categories:
        add(plain_text(category.name), category.slug, category.path)
    for raw in derived_names:
        add(plain_text(raw), None)
    return facets


def find_category_name(categories: Sequence[CategoryFacet], slug: str | None) -> str:
    """Display name of the active category filter, or an empty string."""
    if not slug:
        return ""
    return next((c.name for c in categories if c.slug == slug), "")
