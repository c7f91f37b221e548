"""Application configuration.

Loads settings from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API
    api_version: str = "0.1.0"
    debug: bool = False

    # Upstream data sources
    taxonomy_api_url: str = "http://taxonomy:8001"
    product_api_url: str = "http://product-index:8002"
    source_timeout: float = 10.0

    # Freshness windows in seconds (0 disables cross-request caching)
    taxonomy_freshness: int = 900
    product_freshness: int = 300
    cache_max_entries: int = 2048

    # Catalog behaviour
    fallback_sample_size: int = 30
    product_path_prefix: str = "/item/"

    # SEO
    site_base_url: str = ""
    catalog_seo_title: str = "Каталог тюнінгу та автотоварів"
    catalog_seo_description: str = (
        "Підбір автотоварів за маркою, моделлю та категорією. "
        "Актуальні товари та фільтри."
    )

    # Logging
    log_level: str = "INFO"


settings = Settings()
