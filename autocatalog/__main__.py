"""Run the catalog API with uvicorn."""

import uvicorn

from autocatalog.infrastructure.config import settings


def main() -> None:
    """Start the HTTP server."""
    uvicorn.run(
        "autocatalog.main:app",
        host="0.0.0.0",
        port=8000,
        log_level=settings.log_level.lower(),
        reload=settings.debug,
    )


if __name__ == "__main__":
    main()
