"""Product Gateway: Motor-backed persistence for the products collection.

Invariants:
    - One gateway (one AsyncIOMotorClient pool) per process, shared by all requests
    - Every PyMongoError mapped to DatabaseError (core/errors.py) and logged
    - conditional_decrement is a single update_one whose filter carries the
      "field > 0" condition: the store guarantees it never goes negative
    - Returned documents are the raw stored dicts (ObjectId/datetime intact)

Design Decisions:
    - Gateway wraps a collection, not a client: tests hand in an in-memory
      collection, production builds one with from_settings()
    - Explicit object injected via app.state: no module-level connection cache
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncGenerator

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection
from pymongo.errors import (
    ConnectionFailure, DuplicateKeyError, OperationFailure, PyMongoError,
    ServerSelectionTimeoutError,
)
from pymongo.server_api import ServerApi

from products_api.config import Settings
from products_api.core.domain_types import ProductId
from products_api.core.errors import DatabaseError, ErrorContext
from products_api.core.repository_protocols import UpdateCounts

logger = logging.getLogger(__name__)


class ProductGateway:
    """Thin async wrapper over the products collection."""

    def __init__(
        self,
        collection: AsyncIOMotorCollection,
        client: AsyncIOMotorClient | None = None,
    ):
        self.collection = collection
        self._client = client

    @classmethod
    def from_settings(cls, settings: Settings) -> "ProductGateway":
        """Build a gateway with its own client. Does not open a socket yet."""
        client = AsyncIOMotorClient(
            settings.mongodb_url,
            server_api=ServerApi("1", strict=True, deprecation_errors=True),
            serverSelectionTimeoutMS=settings.mongodb_server_selection_timeout_ms,
            tz_aware=True,
        )
        collection = client[settings.mongodb_database][settings.mongodb_collection]
        return cls(collection, client=client)

    @asynccontextmanager
    async def _mapped_errors(
        self, operation: str, product_id: ProductId | None = None,
    ) -> AsyncGenerator[None, None]:
        """Translate driver failures into DatabaseError."""
        ctx = ErrorContext(
            product_id=str(product_id) if product_id is not None else None,
            operation=operation,
        )
        try:
            yield
        except (ServerSelectionTimeoutError, ConnectionFailure) as e:
            logger.error(f"Mongo connection error during {operation}: {e}")
            raise DatabaseError("Connection or operational error", operation, ctx) from e
        except DuplicateKeyError as e:
            logger.error(f"Mongo duplicate key during {operation}: {e}")
            raise DatabaseError("Duplicate key", operation, ctx) from e
        except OperationFailure as e:
            logger.error(f"Mongo operation failure during {operation}: {e}")
            raise DatabaseError("Operation rejected by server", operation, ctx) from e
        except PyMongoError as e:
            logger.error(f"Mongo driver error during {operation}: {e}")
            raise DatabaseError("Database operation failed", operation, ctx) from e

    async def insert(self, document: dict) -> ProductId:
        async with self._mapped_errors("insert"):
            result = await self.collection.insert_one(document)
        return ProductId(result.inserted_id)

    async def find_all(self) -> list[dict]:
        async with self._mapped_errors("find_all"):
            return await self.collection.find().to_list(length=None)

    async def find_by_id(self, product_id: ProductId) -> dict | None:
        async with self._mapped_errors("find_by_id", product_id):
            return await self.collection.find_one({"_id": product_id})

    async def update_fields(
        self, product_id: ProductId, fields: dict,
    ) -> UpdateCounts:
        """$set only the given fields; the rest of the document is untouched."""
        async with self._mapped_errors("update_fields", product_id):
            result = await self.collection.update_one(
                {"_id": product_id}, {"$set": fields},
            )
        return UpdateCounts(result.matched_count, result.modified_count)

    async def conditional_decrement(
        self, product_id: ProductId, field: str, stamp_field: str | None = None,
    ) -> UpdateCounts:
        """Decrement field by 1 only while it is > 0, optionally stamping now."""
        update: dict = {"$inc": {field: -1}}
        if stamp_field:
            update["$set"] = {stamp_field: datetime.now(timezone.utc)}
        async with self._mapped_errors("conditional_decrement", product_id):
            result = await self.collection.update_one(
                {"_id": product_id, field: {"$gt": 0}}, update,
            )
        return UpdateCounts(result.matched_count, result.modified_count)

    async def delete_by_id(self, product_id: ProductId) -> int:
        async with self._mapped_errors("delete_by_id", product_id):
            result = await self.collection.delete_one({"_id": product_id})
        return result.deleted_count

    async def ping(self) -> None:
        """Round-trip to the server. Raises DatabaseError when unreachable."""
        async with self._mapped_errors("ping"):
            await self.collection.database.command("ping")

    async def health_check(self) -> bool:
        """Check store connectivity (for readiness probes)."""
        try:
            await self.ping()
            return True
        except DatabaseError as e:
            logger.error(f"Mongo health check failed: {e.detail}")
            return False

    def close(self) -> None:
        """Close the owned client, if any. Injected collections are left alone."""
        if self._client is not None:
            self._client.close()
            self._client = None
