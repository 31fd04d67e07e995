"""Product Service: persistence contract for every /products endpoint.

Invariants:
    - Ids arrive already parsed (ProductId); malformed ids never reach this layer
    - Absence is always ResourceNotFoundError (404), never None to the route
    - sell is one conditional update; the follow-up lookup only classifies a
      miss as 404 (gone) or OutOfStockError (present, stock not > 0)
    - update stamps updatedAt, create stamps createdAt, sell stamps lastSold

Design Decisions:
    - Update existence is checked by the route dependency (existing_product_id)
      before the body is validated; matched == 0 here (concurrent delete) is 404
    - Delete relies on deleted_count alone: one store call
"""

import logging
from datetime import datetime, timezone

from products_api.core.domain_types import ProductField, ProductId
from products_api.core.errors import (
    EmptyUpdateError, ErrorContext, OutOfStockError, ResourceNotFoundError,
)
from products_api.core.repository_protocols import ProductRepository, UpdateCounts
from products_api.schemas.product import ProductCreate, ProductUpdate

logger = logging.getLogger(__name__)


class ProductService:
    """Product CRUD and sell over a ProductRepository."""

    def __init__(self, repository: ProductRepository):
        self.repository = repository

    async def list_products(self) -> list[dict]:
        products = await self.repository.find_all()
        logger.debug(f"Listed {len(products)} products", extra={"operation": "list"})
        return products

    async def create_product(self, payload: ProductCreate) -> ProductId:
        document = payload.to_document()
        document[ProductField.CREATED_AT.value] = _now()
        product_id = await self.repository.insert(document)
        logger.info(
            "Product created",
            extra={"product_id": str(product_id), "operation": "create"},
        )
        return product_id

    async def get_product(self, product_id: ProductId) -> dict:
        product = await self.repository.find_by_id(product_id)
        if product is None:
            raise _not_found(product_id, "get")
        return product

    async def update_product(
        self, product_id: ProductId, payload: ProductUpdate,
    ) -> UpdateCounts:
        fields = payload.to_update_fields()
        if not fields:
            raise EmptyUpdateError(
                ErrorContext(product_id=str(product_id), operation="update"),
            )
        fields[ProductField.UPDATED_AT.value] = _now()
        counts = await self.repository.update_fields(product_id, fields)
        if counts.matched == 0:
            raise _not_found(product_id, "update")
        logger.info(
            f"Product updated ({', '.join(sorted(fields))})",
            extra={"product_id": str(product_id), "operation": "update"},
        )
        return counts

    async def sell_product(self, product_id: ProductId) -> UpdateCounts:
        counts = await self.repository.conditional_decrement(
            product_id,
            ProductField.STOCK.value,
            stamp_field=ProductField.LAST_SOLD.value,
        )
        if counts.matched == 0:
            if await self.repository.find_by_id(product_id) is None:
                raise _not_found(product_id, "sell")
            raise OutOfStockError(
                ErrorContext(product_id=str(product_id), operation="sell"),
            )
        logger.info(
            "Product sold",
            extra={"product_id": str(product_id), "operation": "sell"},
        )
        return counts

    async def delete_product(self, product_id: ProductId) -> int:
        deleted = await self.repository.delete_by_id(product_id)
        if deleted == 0:
            raise _not_found(product_id, "delete")
        logger.info(
            "Product deleted",
            extra={"product_id": str(product_id), "operation": "delete"},
        )
        return deleted


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _not_found(product_id: ProductId, operation: str) -> ResourceNotFoundError:
    return ResourceNotFoundError(
        "Product", str(product_id),
        ErrorContext(product_id=str(product_id), operation=operation),
    )
