"""Products Routes: verifies the HTTP contract of every /products endpoint.

Tests:
    - Create coerces price/stock and stock=0 is accepted
    - Missing or non-numeric required fields are 400
    - Malformed ids are 400 without touching the store; unknown ids are 404
    - Update merges allow-listed fields, rejects empty/invalid bodies
    - Sell decrements atomically and never goes below zero
    - Delete twice: 200 then 404
    - Documents stored by older clients still list and fetch
"""

import asyncio
from unittest.mock import AsyncMock

from bson import ObjectId


MISSING_ID = str(ObjectId())


# ─── List ────────────────────────────────────────────────────────

async def test_list_empty_collection_returns_empty_array(client):
    res = await client.get("/products")
    assert res.status_code == 200
    assert res.json() == []


async def test_list_returns_products_in_storage_order(client, seed_product):
    first = await seed_product(model="A1")
    second = await seed_product(model="B2")

    res = await client.get("/products")

    assert res.status_code == 200
    assert [p["_id"] for p in res.json()] == [first, second]
    assert res.json()[0]["model"] == "A1"


# ─── Create ──────────────────────────────────────────────────────

async def test_create_coerces_string_numbers(client, products_collection):
    res = await client.post("/products", json={
        "category": "phone", "model": "X1", "price": "199.99", "stock": "5",
    })

    assert res.status_code == 201
    body = res.json()
    assert body["message"] == "Product added successfully"
    stored = await products_collection.find_one({"_id": ObjectId(body["id"])})
    assert stored["price"] == 199.99
    assert isinstance(stored["price"], float)
    assert stored["stock"] == 5
    assert isinstance(stored["stock"], int)
    assert "createdAt" in stored


async def test_created_product_can_be_fetched(client):
    res = await client.post("/products", json={
        "name": "Charger", "price": 12, "stock": 3,
    })
    product_id = res.json()["id"]

    fetched = await client.get(f"/products/{product_id}")

    assert fetched.status_code == 200
    assert fetched.json()["_id"] == product_id
    assert fetched.json()["price"] == 12.0
    assert fetched.json()["stock"] == 3


async def test_create_accepts_zero_stock(client):
    res = await client.post("/products", json={
        "model": "X1", "price": 10, "stock": 0,
    })
    assert res.status_code == 201


async def test_create_without_name_or_model_is_400(client):
    res = await client.post("/products", json={
        "category": "phone", "price": 10, "stock": 1,
    })
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_create_without_stock_is_400(client):
    res = await client.post("/products", json={"model": "X1", "price": 10})
    assert res.status_code == 400
    fields = [d["field"] for d in res.json()["error"]["details"]]
    assert "body.stock" in fields


async def test_create_with_non_numeric_price_is_400(client, products_collection):
    res = await client.post("/products", json={
        "model": "X1", "price": "cheap", "stock": 1,
    })
    assert res.status_code == 400
    assert await products_collection.count_documents({}) == 0


async def test_create_with_negative_stock_is_400(client):
    res = await client.post("/products", json={
        "model": "X1", "price": 1, "stock": -2,
    })
    assert res.status_code == 400


async def test_create_ignores_unknown_fields(client, products_collection):
    res = await client.post("/products", json={
        "model": "X1", "price": 1, "stock": 1, "isAdmin": True,
    })
    stored = await products_collection.find_one({"_id": ObjectId(res.json()["id"])})
    assert "isAdmin" not in stored


# ─── Get ─────────────────────────────────────────────────────────

async def test_get_malformed_id_is_400(client):
    res = await client.get("/products/not-an-id")
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "INVALID_PRODUCT_ID"


async def test_get_missing_id_is_404(client):
    res = await client.get(f"/products/{MISSING_ID}")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_malformed_id_never_reaches_store(client, gateway):
    gateway.find_by_id = AsyncMock()
    gateway.update_fields = AsyncMock()
    gateway.delete_by_id = AsyncMock()

    assert (await client.get("/products/123")).status_code == 400
    assert (await client.patch("/products/123", json={"stock": 1})).status_code == 400
    assert (await client.delete("/products/123")).status_code == 400

    gateway.find_by_id.assert_not_awaited()
    gateway.update_fields.assert_not_awaited()
    gateway.delete_by_id.assert_not_awaited()


# ─── Update ──────────────────────────────────────────────────────

async def test_update_merges_fields_and_stamps_updated_at(
    client, seed_product, products_collection,
):
    product_id = await seed_product()

    res = await client.patch(f"/products/{product_id}", json={"price": "249.5"})

    assert res.status_code == 200
    assert res.json()["message"] == "Product updated successfully"
    assert res.json()["matchedCount"] == 1
    assert res.json()["modifiedCount"] == 1
    stored = await products_collection.find_one({"_id": ObjectId(product_id)})
    assert stored["price"] == 249.5
    assert stored["model"] == "X1"
    assert stored["stock"] == 5
    assert "updatedAt" in stored


async def test_update_with_empty_body_is_400_and_unchanged(
    client, seed_product, products_collection,
):
    product_id = await seed_product()
    before = await products_collection.find_one({"_id": ObjectId(product_id)})

    res = await client.patch(f"/products/{product_id}", json={})

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "NO_VALID_FIELDS"
    after = await products_collection.find_one({"_id": ObjectId(product_id)})
    assert after == before


async def test_update_with_only_blank_or_unknown_fields_is_400(client, seed_product):
    product_id = await seed_product()

    res = await client.patch(f"/products/{product_id}", json={
        "name": "  ", "model": None, "price": "", "color": "red",
    })

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "NO_VALID_FIELDS"


async def test_update_with_negative_price_is_400(client, seed_product):
    product_id = await seed_product()
    res = await client.patch(f"/products/{product_id}", json={"price": -1})
    assert res.status_code == 400


async def test_update_missing_product_is_404(client):
    res = await client.patch(f"/products/{MISSING_ID}", json={"stock": 3})
    assert res.status_code == 404


async def test_update_missing_product_with_empty_body_is_404(client):
    res = await client.patch(f"/products/{MISSING_ID}", json={})
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_update_missing_product_with_invalid_body_is_404(client):
    res = await client.patch(f"/products/{MISSING_ID}", json={"price": "abc"})
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_update_existing_product_with_invalid_body_is_400(client, seed_product):
    product_id = await seed_product()
    res = await client.patch(f"/products/{product_id}", json={"price": "abc"})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


# ─── Sell ────────────────────────────────────────────────────────

async def test_sell_decrements_stock_and_stamps_last_sold(
    client, seed_product, products_collection,
):
    product_id = await seed_product(stock=2)

    res = await client.patch(f"/products/{product_id}/sell")

    assert res.status_code == 200
    assert res.json()["message"] == "Product sold successfully"
    assert res.json()["modifiedCount"] == 1
    stored = await products_collection.find_one({"_id": ObjectId(product_id)})
    assert stored["stock"] == 1
    assert "lastSold" in stored


async def test_sell_at_zero_stock_is_400(client, seed_product, products_collection):
    product_id = await seed_product(stock=0)

    res = await client.patch(f"/products/{product_id}/sell")

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "OUT_OF_STOCK"
    stored = await products_collection.find_one({"_id": ObjectId(product_id)})
    assert stored["stock"] == 0


async def test_sell_missing_product_is_404(client):
    res = await client.patch(f"/products/{MISSING_ID}/sell")
    assert res.status_code == 404


async def test_sell_malformed_id_is_400(client):
    res = await client.patch("/products/xyz/sell")
    assert res.status_code == 400


class InterleavingGateway:
    """Yields to the event loop before every store call.

    Two requests running under gather then alternate between their store
    calls, so a read-check-write sell would let both readers see stock 1.
    """

    def __init__(self, inner):
        self._inner = inner

    def __getattr__(self, name):
        method = getattr(self._inner, name)

        async def call(*args, **kwargs):
            await asyncio.sleep(0)
            return await method(*args, **kwargs)
        return call


async def test_concurrent_sells_of_last_item(
    client, test_app, gateway, seed_product, products_collection,
):
    test_app.state.product_gateway = InterleavingGateway(gateway)
    product_id = await seed_product(stock=1)

    results = await asyncio.gather(
        client.patch(f"/products/{product_id}/sell"),
        client.patch(f"/products/{product_id}/sell"),
    )

    assert sorted(r.status_code for r in results) == [200, 400]
    stored = await products_collection.find_one({"_id": ObjectId(product_id)})
    assert stored["stock"] == 0


async def test_many_concurrent_sells_never_oversell(
    client, test_app, gateway, seed_product, products_collection,
):
    test_app.state.product_gateway = InterleavingGateway(gateway)
    product_id = await seed_product(stock=3)

    results = await asyncio.gather(*[
        client.patch(f"/products/{product_id}/sell") for _ in range(8)
    ])

    statuses = [r.status_code for r in results]
    assert statuses.count(200) == 3
    assert statuses.count(400) == 5
    stored = await products_collection.find_one({"_id": ObjectId(product_id)})
    assert stored["stock"] == 0


# ─── Delete ──────────────────────────────────────────────────────

async def test_delete_twice_is_200_then_404(client, seed_product):
    product_id = await seed_product()

    first = await client.delete(f"/products/{product_id}")
    second = await client.delete(f"/products/{product_id}")

    assert first.status_code == 200
    assert first.json() == {
        "message": "Product deleted successfully", "deletedCount": 1,
    }
    assert second.status_code == 404


async def test_delete_missing_product_is_404(client):
    res = await client.delete(f"/products/{MISSING_ID}")
    assert res.status_code == 404


# ─── Legacy documents ────────────────────────────────────────────

async def test_list_and_get_tolerate_legacy_documents(client, seed_product):
    supplier = ObjectId()
    product_id = await seed_product(stock=2.5, supplierId=supplier)

    listed = await client.get("/products")
    fetched = await client.get(f"/products/{product_id}")

    assert listed.status_code == 200
    assert fetched.status_code == 200
    assert fetched.json()["stock"] == 2.5
    assert fetched.json()["supplierId"] == str(supplier)
