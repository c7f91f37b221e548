"""Auto catalog API main application module.

This module initializes the FastAPI application and configures
core middleware, routers, upstream clients and startup/shutdown events.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

import structlog
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse

from autocatalog.api.catalog import router as catalog_router
from autocatalog.api.health import router as health_router
from autocatalog.api.middleware import setup_middleware
from autocatalog.api.redirects import router as redirects_router
from autocatalog.domain.exceptions import CatalogSourceError
from autocatalog.infrastructure.cache import FreshnessCache
from autocatalog.infrastructure.catalog_client import (
    create_product_client,
    create_taxonomy_client,
)
from autocatalog.infrastructure.config import settings
from autocatalog.infrastructure.logging_config import configure_logging

configure_logging()
logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup and shutdown events.

    Args:
        app: The FastAPI application instance.

    Yields:
        None after startup, cleanup happens after yield.
    """
    logger.info(
        "Starting catalog API",
        version=settings.api_version,
        debug=settings.debug,
        taxonomy_url=settings.taxonomy_api_url,
        product_url=settings.product_api_url,
    )

    yield

    logger.info("Shutting down catalog API")
    await app.state.taxonomy_client.close()
    await app.state.product_client.close()


app = FastAPI(
    title="Auto Catalog API",
    description="Brand / model / category catalog resolution and listing",
    version=settings.api_version,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# Upstream clients share one freshness cache; HTTP connections open lazily.
_cache = FreshnessCache(max_entries=settings.cache_max_entries)
app.state.taxonomy_client = create_taxonomy_client(_cache)
app.state.product_client = create_product_client(_cache)

setup_middleware(app)

app.include_router(health_router, tags=["Health"])
app.include_router(catalog_router)
app.include_router(redirects_router)


# ============================================================================
# Custom Exception Handlers
# ============================================================================


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with consistent format."""
    request_id = getattr(request.state, "request_id", None)

    detail = exc.detail
    if isinstance(detail, dict):
        error_code = detail.get("error_code", "ERROR")
        message = detail.get("message", str(detail))
        details = detail.get("details", [])
    else:
        error_code = "ERROR"
        message = str(detail)
        details = []

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error_code": error_code,
            "message": message,
            "details": details,
            "request_id": request_id,
        },
    )


@app.exception_handler(CatalogSourceError)
async def catalog_source_exception_handler(
    request: Request, exc: CatalogSourceError
) -> JSONResponse:
    """Fail the request when a critical upstream read fails."""
    request_id = getattr(request.state, "request_id", None)

    logger.error(
        "Catalog source failure",
        path=request.url.path,
        source=exc.source,
        status_code=exc.status_code,
        error=exc.message,
    )

    return JSONResponse(
        status_code=502,
        content={
            "error_code": "UPSTREAM_ERROR",
            "message": "Catalog data is temporarily unavailable",
            "details": [],
            "request_id": request_id,
        },
    )
