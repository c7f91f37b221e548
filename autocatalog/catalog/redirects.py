"""Legacy redirect resolver.

Maps historical product URLs to canonical product paths. Lookups are
side-effect free; every miss resolves to an explicit not-found outcome
instead of an exception.

Inputs are path segments as the router delivers them, already
percent-decoded once. Nothing here decodes again.
"""

from dataclasses import dataclass
from typing import Protocol
from urllib.parse import quote

import structlog

from autocatalog.catalog.models import Product

logger = structlog.get_logger()

COMPOSITE_SEPARATOR = "--"


class ProductLookup(Protocol):
    """Single-product lookup by canonical identifier."""

    async def load_product(
        self, identifier: str, freshness: int | None = None
    ) -> Product | None: ...


@dataclass(frozen=True)
class RedirectOutcome:
    """Result of a redirect resolution.

    Attributes:
        location: Target path, or None when nothing was found.
    """

    location: str | None = None

    @property
    def found(self) -> bool:
        """Whether a redirect should be issued."""
        return self.location is not None

    @property
    def status_code(self) -> int:
        """HTTP status for the outcome."""
        return 301 if self.found else 404


NOT_FOUND = RedirectOutcome()


def extract_identifier(raw: str) -> str:
    """Take the identifier out of a ``descriptive-words--ARTICLE`` segment.

    A trailing separator leaves nothing after it; the whole segment is
    used then.
    """
    if COMPOSITE_SEPARATOR in raw:
        return raw.split(COMPOSITE_SEPARATOR)[-1] or raw
    return raw


def is_site_path(path: str) -> bool:
    """Site-relative path; protocol-relative and absolute URLs are rejected."""
    return path.startswith("/") and not path.startswith("//")


async def _resolve(
    lookup: ProductLookup,
    identifier: str,
    prefix: str,
    freshness: int | None,
) -> RedirectOutcome:
    if not identifier:
        return NOT_FOUND
    product = await lookup.load_product(identifier, freshness)
    path = product.path if product else ""
    if not path or not is_site_path(path) or not path.startswith(prefix):
        logger.info(
            "Legacy product not resolved",
            identifier=identifier,
            found=product is not None,
            path=path or None,
        )
        return NOT_FOUND
    return RedirectOutcome(location=path)


async def resolve_identifier(
    lookup: ProductLookup,
    raw: str,
    freshness: int | None = None,
) -> RedirectOutcome:
    """Resolve a plain legacy identifier.

    The segment is used as-is. Any site-relative product path is
    accepted as target.
    """
    return await _resolve(lookup, raw, "/", freshness)


async def resolve_composite(
    lookup: ProductLookup,
    raw: str,
    product_prefix: str,
    freshness: int | None = None,
) -> RedirectOutcome:
    """Resolve a composite ``words--ARTICLE`` identifier.

    Only paths under the product-detail prefix are redirected to, so a
    stale alias pointing elsewhere on the site yields not-found.

    Args:
        lookup: Product lookup.
        raw: Path segment as received.
        product_prefix: Required prefix of the target path, e.g. "/item/".
        freshness: Freshness window for the lookup.

    Returns:
        Redirect outcome.
    """
    return await _resolve(lookup, extract_identifier(raw), product_prefix, freshness)


def category_redirect(slug: str) -> RedirectOutcome:
    """Legacy category page -> catalog filtered by that category."""
    value = slug.strip().lower()
    if not value:
        return RedirectOutcome(location="/catalog")
    return RedirectOutcome(location=f"/catalog?pcat={quote(value, safe='')}")
