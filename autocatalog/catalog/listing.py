"""Listing engine.

Normalizes pagination parameters, composes product index queries and
builds the continuation state (has-more, next href, reset key) shared by
the catalog, brand and model listings.

Offsets are the only pagination state. There is no cursor, so a page may
shift if the index changes between requests.
"""

import hashlib
import json
import re
from dataclasses import dataclass
from typing import Any, Protocol
from urllib.parse import urlencode

from autocatalog.catalog.models import ListingFilters, ListingQuery, ListingResult

ALLOWED_PER_PAGE = (12, 24, 30)
DEFAULT_PER_PAGE = 24
DEFAULT_PAGE = 1

# Leading integer, like a lenient parseInt: "3abc" -> 3, "abc" -> None.
_INT_PREFIX_RE = re.compile(r"^\s*([+-]?\d+)")


class ProductIndex(Protocol):
    """Read side of the product index used by the listing engine."""

    async def load_products_with_meta(
        self, query: ListingQuery, freshness: int | None = None
    ) -> ListingResult: ...


def _parse_int(raw: Any) -> int | None:
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    match = _INT_PREFIX_RE.match(str(raw))
    return int(match.group(1)) if match else None


def normalize_page(raw: Any) -> int:
    """Parse a page number; anything unparseable or below 1 becomes 1."""
    value = _parse_int(raw)
    if value is None or value < 1:
        return DEFAULT_PAGE
    return value


def normalize_per_page(raw: Any) -> int:
    """Parse a page size; values outside the allowed set become the default."""
    value = _parse_int(raw)
    if value not in ALLOWED_PER_PAGE:
        return DEFAULT_PER_PAGE
    return value


def normalize_offset(raw: Any) -> int:
    """Parse a raw offset for continuation requests; negatives become 0."""
    value = _parse_int(raw)
    return max(value or 0, 0)


def compute_offset(page: int, per_page: int) -> int:
    """Offset of the first item on a 1-based page."""
    return (page - 1) * per_page


@dataclass(frozen=True)
class ListingWindow:
    """Normalized pagination window.

    Attributes:
        page: Page number (1-indexed).
        per_page: Items per page, one of ALLOWED_PER_PAGE.
    """

    page: int = DEFAULT_PAGE
    per_page: int = DEFAULT_PER_PAGE

    @classmethod
    def from_raw(cls, page: Any, per_page: Any) -> "ListingWindow":
        """Build a window from raw query-string values."""
        return cls(page=normalize_page(page), per_page=normalize_per_page(per_page))

    @property
    def offset(self) -> int:
        """Calculate offset from page number."""
        return compute_offset(self.page, self.per_page)

    @property
    def limit(self) -> int:
        """Get limit (alias for per_page)."""
        return self.per_page


def normalize_slug_param(raw: str | None) -> str | None:
    """Lowercase and trim a slug query parameter; empty becomes None."""
    value = (raw or "").strip().lower()
    return value or None


def build_query(filters: ListingFilters, limit: int, offset: int) -> ListingQuery:
    """Compose the product index query for a filter set and window."""
    return ListingQuery(
        brand=filters.brand,
        model=filters.model,
        category=filters.category,
        limit=limit,
        offset=offset,
    )


async def query(
    index: ProductIndex,
    filters: ListingFilters,
    limit: int,
    offset: int,
    freshness: int | None = None,
) -> ListingResult:
    """Run a listing query against the product index.

    Args:
        index: Product index adapter.
        filters: Active filters.
        limit: Page size.
        offset: Offset of the first item.
        freshness: Freshness window in seconds for the read.

    Returns:
        Items of the page and total count over the filter.
    """
    return await index.load_products_with_meta(
        build_query(filters, limit, offset), freshness
    )


def has_more(result: ListingResult, offset: int) -> bool:
    """Whether items remain after this page."""
    return offset + len(result.items) < result.total


def filter_params(filters: ListingFilters) -> list[tuple[str, str]]:
    """Serialize active filters as query pairs in a fixed key order."""
    pairs = [
        ("pcat", filters.category),
        ("brand", filters.brand),
        ("model", filters.model),
        ("gen", filters.gen),
    ]
    return [(key, value) for key, value in pairs if value]


def build_next_href(
    base_path: str,
    filters: ListingFilters,
    per_page: int,
    page: int,
    result: ListingResult,
) -> str | None:
    """Build the URL of the next page.

    Args:
        base_path: Listing path, e.g. "/catalog/bmw".
        filters: Filters that travel in the query string. Filters already
            encoded in base_path must not be repeated here.
        per_page: Current page size.
        page: Current page number.
        result: Current page result.

    Returns:
        Next page URL, or None when this is the last page.
    """
    if not has_more(result, compute_offset(page, per_page)):
        return None
    params = filter_params(filters)
    params.append(("perPage", str(per_page)))
    params.append(("page", str(page + 1)))
    return f"{base_path}?{urlencode(params)}"


def reset_key(
    filters: ListingFilters,
    per_page: int,
    page: int,
    scope: tuple[str, ...] = (),
) -> str:
    """Fingerprint of everything that determines the current result set.

    Clients drop accumulated infinite-scroll items when the key changes.

    Args:
        filters: Active filters.
        per_page: Page size.
        page: Page number.
        scope: Path segments (brand, model) of the listing.

    Returns:
        Hex digest; equal inputs give equal keys.
    """
    payload = {
        "scope": list(scope),
        "pcat": filters.category or "",
        "brand": filters.brand or "",
        "model": filters.model or "",
        "gen": filters.gen or "",
        "perPage": per_page,
        "page": page,
    }
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode()).hexdigest()
