"""
Configuration settings for the application.
"""

import logging
import os

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Environment
    ENVIRONMENT: str = os.getenv("ENVIRONMENT", "development")

    # Redis / cache settings
    REDIS_URL: str = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    CATALOG_CACHE_KEY: str = os.getenv("CATALOG_CACHE_KEY", "catalog:products")
    CATALOG_CACHE_TTL_SECONDS: int = int(os.getenv("CATALOG_CACHE_TTL_SECONDS", "60"))

    # Upstream marketplace catalog
    CATALOG_API_URL: str = os.getenv("CATALOG_API_URL", "http://localhost:3000")
    CATALOG_FETCH_LIMIT: int = int(os.getenv("CATALOG_FETCH_LIMIT", "500"))
    CATALOG_REQUEST_TIMEOUT_SECONDS: float = float(
        os.getenv("CATALOG_REQUEST_TIMEOUT_SECONDS", "10")
    )

    # HTTP server
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "8000"))

    # Discovery defaults
    DISCOVERY_PAGE_SIZE: int = int(os.getenv("DISCOVERY_PAGE_SIZE", "30"))
    PRICE_RANGE_MAX: float = float(os.getenv("PRICE_RANGE_MAX", "1000"))
    NEW_PRODUCT_WINDOW_DAYS: int = int(os.getenv("NEW_PRODUCT_WINDOW_DAYS", "15"))
    SEARCH_DEBOUNCE_MS: int = int(os.getenv("SEARCH_DEBOUNCE_MS", "700"))
    PAGE_LINKS_SHOWN: int = int(os.getenv("PAGE_LINKS_SHOWN", "5"))

    @property
    def is_production(self) -> bool:
        """
        Check if running in production environment.
        """
        return self.ENVIRONMENT.lower() == "production"

    @property
    def search_debounce_seconds(self) -> float:
        return self.SEARCH_DEBOUNCE_MS / 1000

    def __init__(self):
        self.debug = os.getenv("DEBUG", "false").lower() == "true"
        self.log_level = os.getenv("LOG_LEVEL", "INFO")
        logging.basicConfig(level=self.log_level)
        self.logger = logging.getLogger(__name__)

        self.logger.debug(
            f"Config initialized with environment={self.ENVIRONMENT}, "
            f"debug={self.debug}, log_level={self.log_level}"
        )


# Create a global settings instance for import
settings = Settings()
