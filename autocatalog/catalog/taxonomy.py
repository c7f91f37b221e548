"""Taxonomy resolver.

Looks up brand and model nodes by slug in the curated taxonomy and
reconciles it with the product index when the taxonomy is incomplete.

The curated tree is authoritative. Product-derived names only fill in
when the tree has nothing to offer:

    * brand facets (catalog root): taxonomy brands first, then brands seen
      in a small product sample, first write wins;
    * model facets (brand and model pages): if the brand node has children,
      those are the models, full stop. Only a brand with no children (or no
      node at all) falls back to the models seen in its product sample.

A brand curated with an empty model list therefore shows no models until
products exist for it, rather than silently mixing in stray product data.
"""

import unicodedata
from typing import Iterable, Sequence

from autocatalog.catalog.models import FacetOption, Product, RichText, TaxonomyNode
from autocatalog.catalog.slug import plain_text, slug_equals, slugify


def _matches(node: TaxonomyNode, slug: str) -> bool:
    return slug_equals(node.resolved_slug, slug)


def find_brand(tree: Sequence[TaxonomyNode], brand_slug: str) -> TaxonomyNode | None:
    """Find a brand node by slug.

    Args:
        tree: Top-level taxonomy nodes.
        brand_slug: Slug from the URL (any case or formatting).

    Returns:
        Matching node, or None. None is not an error: callers display the
        raw slug instead.
    """
    if not brand_slug:
        return None
    return next((node for node in tree if _matches(node, brand_slug)), None)


def find_model(brand_node: TaxonomyNode | None, model_slug: str) -> TaxonomyNode | None:
    """Find a model node within a brand node by slug."""
    if brand_node is None or not model_slug:
        return None
    return next(
        (node for node in brand_node.children if _matches(node, model_slug)), None
    )


def _base_letters(name: str) -> str:
    decomposed = unicodedata.normalize("NFKD", name.casefold())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def display_sort_key(name: str) -> tuple[str, str, str]:
    """Sort key for display names.

    Accents and case only break ties, so "Škoda" sorts with the S names
    and "Éclair" before "Zeta", independent of the process locale.
    """
    return (_base_letters(name), name.casefold(), name)


def merge_names(
    primary: Iterable[tuple[str, str]],
    fallback: Iterable[RichText],
) -> dict[str, str]:
    """Merge slug -> name pairs with names mined from products.

    Primary entries are never overwritten; fallback names only add slugs
    that are not present yet.

    Args:
        primary: (slug, display name) pairs from the taxonomy.
        fallback: Raw names from product records.

    Returns:
        Mapping of slug to display name, in insertion order.
    """
    merged: dict[str, str] = {}
    for slug, name in primary:
        if slug and slug not in merged:
            merged[slug] = name
    for raw in fallback:
        name = plain_text(raw)
        slug = slugify(name)
        if slug and slug not in merged:
            merged[slug] = name
    return merged


def _sorted_options(names: dict[str, str]) -> list[FacetOption]:
    options = [FacetOption(slug=slug, name=name) for slug, name in names.items()]
    return sorted(options, key=lambda o: display_sort_key(o.name))


def _node_pairs(nodes: Iterable[TaxonomyNode]) -> list[tuple[str, str]]:
    return [(node.resolved_slug, node.display_name) for node in nodes]


def needs_product_fallback(brand_node: TaxonomyNode | None) -> bool:
    """Whether model names must be mined from the brand's products."""
    return brand_node is None or not brand_node.children


def derive_models(
    brand_node: TaxonomyNode | None,
    product_sample: Sequence[Product] = (),
) -> list[FacetOption]:
    """Build the model list for a brand.

    Args:
        brand_node: Resolved brand node, or None.
        product_sample: Bounded sample of the brand's products. Ignored
            when the brand node has children.

    Returns:
        Models sorted by display name.
    """
    if not needs_product_fallback(brand_node):
        return _sorted_options(merge_names(_node_pairs(brand_node.children), ()))
    return _sorted_options(merge_names((), (p.model for p in product_sample)))


def derive_brands(
    tree: Sequence[TaxonomyNode],
    product_sample: Sequence[Product] = (),
) -> list[FacetOption]:
    """Build the top-level brand list.

    Every taxonomy brand is kept; brands seen only in the product sample
    are appended.
    """
    return _sorted_options(
        merge_names(_node_pairs(tree), (p.brand for p in product_sample))
    )


def brand_display_name(
    brand_node: TaxonomyNode | None,
    brand_slug: str,
    product_sample: Sequence[Product] = (),
) -> str:
    """Display name for a brand page.

    Falls back to the first sampled product's brand, then to the raw slug.
    """
    if brand_node is not None and brand_node.display_name:
        return brand_node.display_name
    for product in product_sample:
        name = plain_text(product.brand)
        if name:
            return name
    return brand_slug
