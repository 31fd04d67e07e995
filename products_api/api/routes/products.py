"""Products Routes: list, create, get, partial update, sell, delete.

Invariants:
    - Malformed ids rejected (400) by valid_product_id before any store access
    - Update resolves existing_product_id before its body, so missing ids are 404
    - Bodies validated by ProductCreate/ProductUpdate before reaching the service
    - Failures propagate as typed errors; global handlers shape the response
"""

import logging

from fastapi import APIRouter, Depends, status

from products_api.api.dependencies import (
    existing_product_id, get_product_service, valid_product_id,
)
from products_api.core.domain_types import ProductId
from products_api.schemas.product import (
    ProductCreate, ProductCreated, ProductDeleted, ProductModified,
    ProductResponse, ProductUpdate,
)
from products_api.services.product_service import ProductService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/products", tags=["products"])


@router.get("", response_model=list[ProductResponse])
async def list_products(service: ProductService = Depends(get_product_service)):
    """All products in storage order."""
    products = await service.list_products()
    return [ProductResponse.from_document(p) for p in products]


@router.post(
    "", response_model=ProductCreated, status_code=status.HTTP_201_CREATED,
)
async def create_product(
    body: ProductCreate,
    service: ProductService = Depends(get_product_service),
):
    """Create a product. price/stock are coerced to numbers."""
    product_id = await service.create_product(body)
    return ProductCreated(id=str(product_id))


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(
    product_id: ProductId = Depends(valid_product_id),
    service: ProductService = Depends(get_product_service),
):
    product = await service.get_product(product_id)
    return ProductResponse.from_document(product)


@router.patch("/{product_id}/sell", response_model=ProductModified)
async def sell_product(
    product_id: ProductId = Depends(valid_product_id),
    service: ProductService = Depends(get_product_service),
):
    """Decrement stock by one, only while stock > 0."""
    counts = await service.sell_product(product_id)
    return ProductModified(
        message="Product sold successfully",
        matched_count=counts.matched,
        modified_count=counts.modified,
    )


@router.patch("/{product_id}", response_model=ProductModified)
async def update_product(
    body: ProductUpdate,
    product_id: ProductId = Depends(existing_product_id),
    service: ProductService = Depends(get_product_service),
):
    """Merge allow-listed fields into the product."""
    counts = await service.update_product(product_id, body)
    return ProductModified(
        message="Product updated successfully",
        matched_count=counts.matched,
        modified_count=counts.modified,
    )


@router.delete("/{product_id}", response_model=ProductDeleted)
async def delete_product(
    product_id: ProductId = Depends(valid_product_id),
    service: ProductService = Depends(get_product_service),
):
    deleted = await service.delete_product(product_id)
    return ProductDeleted(deleted_count=deleted)
