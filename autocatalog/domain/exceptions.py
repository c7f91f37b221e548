"""Domain exceptions.

Errors raised while resolving catalog pages. Parameter problems and
redirect misses are not errors: they resolve to defaults and explicit
not-found outcomes instead.
"""

from typing import Any


class CatalogError(Exception):
    """Base class for all catalog exceptions.

    All catalog errors should inherit from this class to allow
    catching them at the API layer.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize catalog error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class CatalogSourceError(CatalogError):
    """Raised when an upstream data source fails.

    Covers transport errors, unexpected status codes and malformed
    payloads from the taxonomy source or the product index.
    """

    def __init__(
        self,
        source: str,
        message: str,
        status_code: int | None = None,
    ) -> None:
        """Initialize source error.

        Args:
            source: Name of the failing source ("taxonomy" or "products").
            message: What went wrong.
            status_code: Upstream HTTP status, if a response was received.
        """
        super().__init__(
            f"[{source}] {message}",
            details={"source": source, "status_code": status_code},
        )
        self.source = source
        self.status_code = status_code
