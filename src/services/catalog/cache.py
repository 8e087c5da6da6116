"""Redis-backed snapshot of the product collection."""

from __future__ import annotations

import asyncio
import json
import logging
from datetime import UTC, datetime
from typing import Annotated

import redis.asyncio as redis
from fastapi import Depends
from pydantic import ValidationError
from redis.exceptions import RedisError

from src.config import settings
from src.models.product import Product
from src.services.catalog.client import CatalogClient, CatalogClientDependency

logger = logging.getLogger(__name__)

_redis_client: redis.Redis | None = None

# Upstream fetches currently running, keyed by cache key.
_inflight: dict[str, asyncio.Task[list[Product]]] = {}


def get_redis_client() -> redis.Redis:
    """Return a singleton Redis client for the current process."""

    global _redis_client
    if _redis_client is None:
        _redis_client = redis.from_url(
            settings.REDIS_URL,
            encoding="utf-8",
            decode_responses=True,
        )
    return _redis_client


class CatalogCache:
    """Serve the product collection from Redis, refilling it from the catalog.

    A snapshot lives for ``ttl_seconds``. Concurrent misses share a single
    upstream request. Redis being unreachable degrades to fetching upstream
    on every call; catalog failures propagate.
    """

    def __init__(
        self,
        client: redis.Redis,
        catalog: CatalogClient,
        *,
        key: str | None = None,
        ttl_seconds: int | None = None,
    ) -> None:
        self._client = client
        self._catalog = catalog
        self._key = key or settings.CATALOG_CACHE_KEY
        self._ttl = ttl_seconds or settings.CATALOG_CACHE_TTL_SECONDS

    async def get_products(self) -> list[Product]:
        cached = await self._read()
        if cached is not None:
            return cached
        return await self._fetch_shared()

    async def refresh(self) -> list[Product]:
        """Fetch from the catalog regardless of the cached snapshot."""

        logger.info("Revalidating catalog snapshot %s", self._key)
        return await self._fetch_shared()

    async def invalidate(self) -> None:
        try:
            await self._client.delete(self._key)
        except RedisError as exc:
            logger.warning("Failed to drop catalog snapshot %s: %s", self._key, exc)

    async def _read(self) -> list[Product] | None:
        try:
            raw = await self._client.get(self._key)
        except RedisError as exc:
            logger.warning("Catalog cache read failed, going upstream: %s", exc)
            return None
        if not raw:
            return None
        try:
            data = json.loads(raw)
            return [Product.model_validate(item) for item in data["products"]]
        except (ValueError, KeyError, TypeError, ValidationError) as exc:
            logger.warning("Discarding unreadable catalog snapshot: %s", exc)
            return None

    async def _fetch_shared(self) -> list[Product]:
        loop = asyncio.get_running_loop()
        task = _inflight.get(self._key)
        if task is None or task.done() or task.get_loop() is not loop:
            task = loop.create_task(self._fetch_and_store())
            _inflight[self._key] = task
            task.add_done_callback(self._forget)
        return await asyncio.shield(task)

    def _forget(self, task: asyncio.Task[list[Product]]) -> None:
        if _inflight.get(self._key) is task:
            del _inflight[self._key]
        if not task.cancelled() and (exc := task.exception()) is not None:
            logger.debug("Catalog fetch for %s failed: %s", self._key, exc)

    async def _fetch_and_store(self) -> list[Product]:
        products = await self._catalog.fetch_products()
        payload = {
            "fetched_at": datetime.now(UTC).isoformat(),
            "products": [
                product.model_dump(mode="json", by_alias=True) for product in products
            ],
        }
        try:
            await self._client.set(self._key, json.dumps(payload), ex=self._ttl)
        except RedisError as exc:
            logger.warning("Failed to store catalog snapshot %s: %s", self._key, exc)
        else:
            logger.info(
                "Cached %d products for %ss",
                len(products),
                self._ttl,
                extra={"cache_key": self._key},
            )
        return products


def get_catalog_cache(
    catalog: CatalogClientDependency,
    client: Annotated[redis.Redis, Depends(get_redis_client)],
) -> CatalogCache:
    """FastAPI dependency factory."""

    return CatalogCache(client, catalog)


CatalogCacheDependency = Annotated[CatalogCache, Depends(get_catalog_cache)]
