"""Pytest configuration and fixtures for the discovery service."""

import asyncio
import itertools
from datetime import UTC, datetime, timedelta

import pytest
import pytest_asyncio
from fakeredis import aioredis as fakeredis
from httpx import ASGITransport, AsyncClient

from src.models.product import Product
from src.services.catalog.cache import get_redis_client
from src.services.catalog.client import CatalogClient, get_catalog_client

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: marks tests as unit tests")
    config.addinivalue_line("markers", "asyncio: marks tests as async tests")


class StubCatalog(CatalogClient):
    """In-memory catalog that counts upstream calls."""

    def __init__(self, products: list[Product] | None = None) -> None:
        self.products = list(products or [])
        self.calls = 0
        self.error: Exception | None = None

    async def fetch_products(self) -> list[Product]:
        await asyncio.sleep(0)
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.products)


@pytest.fixture()
def product_factory():
    """Build products with sensible defaults; override any field by keyword."""

    counter = itertools.count(1)

    def _make(**overrides) -> Product:
        index = next(counter)
        creator_name = overrides.pop("creator_name", f"Studio {index}")
        creator = {
            "id": f"creator-{index}",
            "isVerified": overrides.pop("is_verified", False),
            "followers": overrides.pop("followers", 0),
            "user": {"id": f"user-{index}", "name": creator_name},
        }
        category_id = overrides.pop("category_id", "cat-pottery")
        category_name = overrides.pop("category_name", "Pottery")
        data = {
            "id": f"prod-{index}",
            "name": f"Product {index}",
            "price": "100",
            "rating": "4",
            "stock": 5,
            "isFeatured": False,
            "createdAt": (NOW - timedelta(days=60)).isoformat(),
            "materials": [],
            "categoryId": category_id,
            "category": {"id": category_id, "name": category_name},
            "creator": creator,
        }
        data.update(overrides)
        return Product.model_validate(data)

    return _make


@pytest.fixture()
def make_catalog():
    """Build standalone stub catalogs for service-level tests."""
    return StubCatalog


@pytest.fixture()
def catalog_stub():
    """Provide a stub catalog so tests never reach the marketplace."""
    from src.main import app

    stub = StubCatalog()
    app.dependency_overrides[get_catalog_client] = lambda: stub
    yield stub
    app.dependency_overrides.pop(get_catalog_client, None)


@pytest_asyncio.fixture()
async def redis_client():
    """Provide a fake Redis client for each test."""
    from src.main import app

    client = fakeredis.FakeRedis()
    app.dependency_overrides[get_redis_client] = lambda: client
    try:
        yield client
    finally:
        await client.flushdb()
        await client.aclose()
        app.dependency_overrides.pop(get_redis_client, None)


@pytest_asyncio.fixture()
async def client(redis_client, catalog_stub):
    """Return an HTTPX async client pointing at the FastAPI app."""
    from src.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as test_client:
        yield test_client
