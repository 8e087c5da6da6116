"""Routes for browsing the product collection."""

from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, HTTPException, Query, status
from pydantic import ValidationError

from src.config import settings
from src.models.discovery import (
    ALL_CATEGORIES,
    DiscoveryPage,
    Facets,
    FilterState,
    SortKey,
)
from src.models.product import Product
from src.services.catalog.cache import CatalogCache, CatalogCacheDependency
from src.services.catalog.client import CatalogUnavailableError
from src.services.discovery import engine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/products", tags=["products"])


async def _load_products(cache: CatalogCache) -> list[Product]:
    try:
        return await cache.get_products()
    except CatalogUnavailableError:
        logger.exception("Failed to load the product collection")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Catalog service unavailable",
        )


@router.get(
    "",
    response_model=DiscoveryPage,
    summary="Search, filter, sort and paginate the product collection",
)
async def list_products(
    cache: CatalogCacheDependency,
    q: Annotated[str, Query(description="Matches product or creator name")] = "",
    category: str = ALL_CATEGORIES,
    min_price: Annotated[float, Query(ge=0)] = 0,
    max_price: Annotated[float | None, Query(ge=0)] = None,
    min_rating: Annotated[float, Query(ge=0, le=5)] = 0,
    in_stock: bool = False,
    new: bool = False,
    verified: bool = False,
    materials: Annotated[list[str] | None, Query()] = None,
    sort: SortKey = "featured",
    page: Annotated[int, Query(ge=1)] = 1,
) -> DiscoveryPage:
    try:
        state = FilterState(
            search=q,
            category=category,
            price_range=(
                min_price,
                settings.PRICE_RANGE_MAX if max_price is None else max_price,
            ),
            min_rating=min_rating,
            in_stock_only=in_stock,
            new_only=new,
            verified_only=verified,
            materials=tuple(materials or ()),
            sort_by=sort,
            page=page,
        )
    except ValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=exc.errors(include_url=False, include_context=False),
        )

    products = await _load_products(cache)
    return engine.discover(products, state)


@router.post(
    "/discover",
    response_model=DiscoveryPage,
    summary="Run discovery for a complete filter state",
)
async def discover_products(
    payload: FilterState,
    cache: CatalogCacheDependency,
) -> DiscoveryPage:
    products = await _load_products(cache)
    return engine.discover(products, payload)


@router.get(
    "/facets",
    response_model=Facets,
    summary="Categories and materials available in the collection",
)
async def list_facets(cache: CatalogCacheDependency) -> Facets:
    products = await _load_products(cache)
    return engine.derive_facets(products)


@router.post(
    "/refresh",
    status_code=status.HTTP_200_OK,
    summary="Reload the product collection from the catalog",
)
async def refresh_products(cache: CatalogCacheDependency) -> dict[str, str | int]:
    try:
        products = await cache.refresh()
    except CatalogUnavailableError:
        logger.exception("Catalog revalidation failed")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Catalog service unavailable",
        )
    return {"status": "refreshed", "count": len(products)}
