"""Infrastructure layer: configuration, logging, upstream clients and caching."""
