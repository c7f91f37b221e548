"""Catalog data model.

Immutable, request-scoped projections of the two upstream sources: the
curated brand/model taxonomy and the flat product index. Nothing here is
persisted; every page request rebuilds them from fresh (or cached) reads.
"""

from dataclasses import dataclass, field
from typing import Any, Union

from autocatalog.catalog.slug import plain_text, slugify

# Plain string (possibly with HTML markup) or block-editor JSON.
RichText = Union[str, dict[str, Any], list[Any], None]


@dataclass(frozen=True)
class TaxonomyNode:
    """A brand (top level) or model (child level) in the taxonomy tree.

    Attributes:
        name: Display name, plain or rich text.
        slug: Explicit slug; derived from name when absent.
        canonical: Canonical URL for the node's listing page.
        indexable: Whether search engines may index the node's page.
        seo_title: Optional page title override.
        seo_description: Optional meta description.
        children: Model nodes (empty for models and uncurated brands).
    """

    name: RichText
    slug: str | None = None
    canonical: str | None = None
    indexable: bool = False
    seo_title: str | None = None
    seo_description: str | None = None
    children: tuple["TaxonomyNode", ...] = field(default_factory=tuple, repr=False)

    @property
    def display_name(self) -> str:
        """Name as plain text."""
        return plain_text(self.name)

    @property
    def resolved_slug(self) -> str:
        """Explicit slug, or the slug derived from the name."""
        return self.slug or slugify(self.name)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "TaxonomyNode":
        """Create from taxonomy API response.

        Args:
            data: API response data.

        Returns:
            TaxonomyNode instance with children parsed recursively.
        """
        return cls(
            name=data.get("name"),
            slug=data.get("slug") or None,
            canonical=data.get("canonical") or None,
            indexable=data.get("indexable") is True,
            seo_title=data.get("seo_title") or None,
            seo_description=data.get("seo_description") or None,
            children=tuple(
                cls.from_api_response(child) for child in data.get("children") or []
            ),
        )


@dataclass(frozen=True)
class ProductCategory:
    """A flat product category, independent of the taxonomy tree."""

    name: RichText
    slug: str | None = None
    path: str | None = None

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "ProductCategory":
        """Create from taxonomy API response."""
        return cls(
            name=data.get("name"),
            slug=data.get("slug") or None,
            path=data.get("path") or None,
        )


@dataclass(frozen=True)
class Product:
    """Compact product as returned by the product index.

    Attributes:
        article: Canonical identifier (article code).
        brand: Brand display name.
        model: Model display name.
        category: Category name or names.
        path: Canonical product detail path.
        title: Optional display title, passed through.
        price: Optional price payload, passed through.
        image: Optional image URL, passed through.
    """

    article: str
    brand: RichText = ""
    model: RichText = ""
    category: str | tuple[str, ...] = ""
    path: str = ""
    title: str | None = None
    price: Any = None
    image: str | None = None

    @property
    def category_names(self) -> tuple[str, ...]:
        """Category field normalized to a tuple."""
        if isinstance(self.category, str):
            return (self.category,) if self.category else ()
        return tuple(self.category)

    @classmethod
    def from_api_response(cls, data: dict[str, Any]) -> "Product":
        """Create from product index response.

        Args:
            data: API response data.

        Returns:
            Product instance.
        """
        category = data.get("category") or ""
        if isinstance(category, list):
            category = tuple(str(c) for c in category)
        return cls(
            article=str(data.get("article") or data.get("id") or ""),
            brand=data.get("brand") or "",
            model=data.get("model") or "",
            category=category,
            path=data.get("path") or "",
            title=data.get("title"),
            price=data.get("price"),
            image=data.get("image"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary.

        Returns:
            Dictionary representation with plain-text names.
        """
        return {
            "article": self.article,
            "brand": plain_text(self.brand),
            "model": plain_text(self.model),
            "category": list(self.category_names),
            "path": self.path,
            "title": self.title,
            "price": self.price,
            "image": self.image,
        }


@dataclass(frozen=True)
class ListingFilters:
    """Active listing filters, each a lowercase slug or None."""

    category: str | None = None
    brand: str | None = None
    model: str | None = None
    gen: str | None = None


@dataclass(frozen=True)
class ListingQuery:
    """A filter/pagination request against the product index."""

    brand: str | None = None
    model: str | None = None
    category: str | None = None
    limit: int = 24
    offset: int = 0

    def to_params(self) -> dict[str, Any]:
        """Query-string parameters, None values dropped."""
        params: dict[str, Any] = {
            "brand": self.brand,
            "model": self.model,
            "category": self.category,
            "limit": self.limit,
            "offset": self.offset,
            "compact": 1,
        }
        return {k: v for k, v in params.items() if v is not None}


@dataclass(frozen=True)
class ListingResult:
    """One page of products plus the total count over the filter."""

    items: tuple[Product, ...]
    total: int


@dataclass(frozen=True)
class FacetOption:
    """A navigable brand or model entry in the sidebar."""

    slug: str
    name: str


@dataclass(frozen=True)
class CategoryFacet:
    """A category entry in the sidebar."""

    name: str
    slug: str
    path: str | None = None
