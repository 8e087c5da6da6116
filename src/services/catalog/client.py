"""Client for the marketplace catalog API that owns the product collection."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Annotated

import httpx
from fastapi import Depends
from pydantic import ValidationError

from src.config import settings
from src.models.product import CatalogResponse, Product

logger = logging.getLogger(__name__)


class CatalogUnavailableError(RuntimeError):
    """Raised when the product collection cannot be loaded from the catalog."""


class CatalogClient(ABC):
    """Abstract source of the approved product collection."""

    @abstractmethod
    async def fetch_products(self) -> list[Product]:
        """Return every product the storefront may show."""


class HttpCatalogClient(CatalogClient):
    """Catalog client backed by the marketplace's GET /api/products route."""

    def __init__(
        self,
        *,
        base_url: str,
        limit: int,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not base_url:
            raise ValueError("Catalog API URL is required to initialize catalog client")
        if limit < 1:
            raise ValueError("Catalog fetch limit must be positive")

        self._base_url = base_url.rstrip("/")
        self._limit = limit
        self._timeout = timeout
        self._transport = transport

    async def fetch_products(self) -> list[Product]:
        params = {"page": 1, "limit": self._limit, "featured": "false"}
        try:
            async with httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._timeout,
                transport=self._transport,
            ) as client:
                response = await client.get("/api/products", params=params)
                response.raise_for_status()
                body = response.json()
        except httpx.HTTPError as exc:
            logger.warning("Catalog request failed: %s", exc)
            raise CatalogUnavailableError(f"Catalog request failed: {exc}") from exc
        except ValueError as exc:
            raise CatalogUnavailableError("Catalog returned a non-JSON body") from exc

        try:
            envelope = CatalogResponse.model_validate(body)
            if not envelope.success:
                raise CatalogUnavailableError(
                    envelope.message or "Catalog reported an unsuccessful response"
                )
            products = [entry.to_product() for entry in envelope.data]
        except ValidationError as exc:
            logger.error("Catalog payload did not match the product schema: %s", exc)
            raise CatalogUnavailableError(
                "Catalog returned a malformed payload"
            ) from exc

        logger.info(
            "Fetched %d products from catalog",
            len(products),
            extra={"catalog_url": self._base_url},
        )
        return products


_catalog_client: CatalogClient | None = None


def _initialize_catalog_client() -> CatalogClient:
    return HttpCatalogClient(
        base_url=settings.CATALOG_API_URL,
        limit=settings.CATALOG_FETCH_LIMIT,
        timeout=settings.CATALOG_REQUEST_TIMEOUT_SECONDS,
    )


def get_catalog_client() -> CatalogClient:
    """FastAPI dependency returning the process-wide catalog client."""

    global _catalog_client
    if _catalog_client is None:
        _catalog_client = _initialize_catalog_client()
    return _catalog_client


CatalogClientDependency = Annotated[CatalogClient, Depends(get_catalog_client)]
