"""API test fixtures: in-memory Mongo collection + FastAPI test client.

Invariants:
    - Every test gets a fresh in-memory collection (mongomock-motor)
    - The gateway is injected through create_app(gateway=...), never patched in
    - ASGITransport does not run the lifespan, so nothing connects to a server
"""

import pytest
from httpx import ASGITransport, AsyncClient
from mongomock_motor import AsyncMongoMockClient

from products_api.infrastructure.product_gateway import ProductGateway
from products_api.main import create_app


@pytest.fixture
def products_collection():
    return AsyncMongoMockClient()["test_inventory"]["products"]


@pytest.fixture
def gateway(products_collection):
    return ProductGateway(products_collection)


@pytest.fixture
def test_app(gateway):
    return create_app(gateway=gateway)


@pytest.fixture
async def client(test_app):
    async with AsyncClient(
        transport=ASGITransport(app=test_app), base_url="http://test",
    ) as c:
        yield c


@pytest.fixture
async def seed_product(products_collection):
    """Insert a product directly into the collection, bypassing the API."""
    async def _seed(**fields):
        document = {"category": "phone", "model": "X1", "price": 199.99, "stock": 5}
        document.update(fields)
        result = await products_collection.insert_one(document)
        return str(result.inserted_id)
    return _seed
