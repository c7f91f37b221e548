"""Legacy redirect endpoints.

Old product and category URLs answer with a permanent redirect to the
canonical location, or a bare 404.
"""

from fastapi import APIRouter
from fastapi.responses import PlainTextResponse, RedirectResponse, Response

from autocatalog.api.catalog import ServiceDep
from autocatalog.catalog.redirects import RedirectOutcome, category_redirect

router = APIRouter(tags=["Redirects"])


def outcome_to_response(outcome: RedirectOutcome) -> Response:
    """301 to the resolved location, or 404 Not Found."""
    if outcome.location is None:
        return PlainTextResponse("Not Found", status_code=404)
    return RedirectResponse(url=outcome.location, status_code=301)


@router.get("/product/{article}", summary="Redirect composite product URL")
async def product_redirect(article: str, service: ServiceDep) -> Response:
    """Resolve ``descriptive-words--ARTICLE`` to the product page."""
    return outcome_to_response(await service.resolve_product(article))


@router.get("/p/{article}/{slug}", summary="Redirect legacy product URL")
async def legacy_product_redirect(
    article: str, slug: str, service: ServiceDep
) -> Response:
    """Resolve a legacy article URL; the trailing slug is ignored."""
    return outcome_to_response(await service.resolve_legacy_product(article))


@router.get("/category/{slug}", summary="Redirect legacy category URL")
async def legacy_category_redirect(slug: str) -> Response:
    """Send old category pages to the filtered catalog."""
    return outcome_to_response(category_redirect(slug))
