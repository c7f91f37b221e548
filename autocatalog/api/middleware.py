"""HTTP middleware: request correlation, catalog log context, error envelope."""

import time
from typing import Callable
from uuid import uuid4

import structlog
from fastapi import FastAPI, Request, Response, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

logger = structlog.get_logger()

# First path segment -> route family for legacy redirect URLs.
_REDIRECT_FAMILIES = {"product": "composite", "p": "article", "category": "category"}


def catalog_context(path: str) -> dict[str, str]:
    """Log context describing which catalog page a path addresses.

    ``/catalog/bmw/x5`` -> level "model" with brand and model slugs,
    ``/meta/catalog/bmw`` -> level "brand" for the metadata surface,
    ``/product/...`` -> the redirect family. Other paths carry nothing.
    """
    segments = [s for s in path.split("/") if s]
    surface = "page"
    if segments[:1] == ["meta"]:
        surface = "meta"
        segments = segments[1:]
    if not segments:
        return {}
    head, rest = segments[0], segments[1:]
    if head == "catalog":
        levels = ("catalog", "brand", "model")
        context = {"surface": surface, "level": levels[min(len(rest), 2)]}
        context.update(zip(("brand", "model"), rest[:2]))
        return context
    if head == "catalog-products":
        return {"surface": "continuation", "level": "listing"}
    if head in _REDIRECT_FAMILIES and rest:
        return {"surface": "redirect", "redirect": _REDIRECT_FAMILIES[head]}
    return {}


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID and its catalog context.

    The ID comes from ``X-Request-ID`` or is generated; it is echoed on the
    response and bound, with the catalog context, to structlog's
    contextvars for every log line written while the request runs.
    """

    HEADER_NAME = "X-Request-ID"

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        request_id = request.headers.get(self.HEADER_NAME) or str(uuid4())
        request.state.request_id = request_id
        context = catalog_context(request.url.path)
        structlog.contextvars.bind_contextvars(request_id=request_id, **context)

        start_time = time.perf_counter()
        response = None
        try:
            response = await call_next(request)
        finally:
            logger.info(
                "Catalog request served",
                method=request.method,
                path=request.url.path,
                status_code=getattr(response, "status_code", 500),
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            structlog.contextvars.unbind_contextvars("request_id", *context)

        response.headers[self.HEADER_NAME] = request_id
        return response


class ErrorHandlerMiddleware(BaseHTTPMiddleware):
    """Turn exceptions no handler claimed into a 500 ``INTERNAL_ERROR``."""

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            logger.exception(
                "Unhandled exception",
                path=request.url.path,
                method=request.method,
                error=str(e),
            )
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={
                    "error_code": "INTERNAL_ERROR",
                    "message": "An internal error occurred",
                    "details": [],
                    "request_id": getattr(request.state, "request_id", None),
                },
            )


def setup_middleware(app: FastAPI) -> None:
    """Install middleware; the last one added runs first.

    Error handling sits inside request correlation so 500 responses carry
    the request ID header.
    """
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_middleware(RequestIdMiddleware)
