"""Route Dependencies: gateway/service injection and path id parsing.

Invariants:
    - The gateway is read from app.state; routes never construct one
    - valid_product_id runs before the body is touched or the store is called
    - existing_product_id resolves before body validation, so a missing
      product is 404 whatever the body holds
"""

from fastapi import Depends, Request

from products_api.core.domain_types import ProductId, parse_product_id
from products_api.infrastructure.product_gateway import ProductGateway
from products_api.services.product_service import ProductService


def get_product_gateway(request: Request) -> ProductGateway:
    """FastAPI dependency for the process-wide gateway."""
    gateway = getattr(request.app.state, "product_gateway", None)
    if gateway is None:
        raise RuntimeError("Product gateway not initialized")
    return gateway


def get_product_service(
    gateway: ProductGateway = Depends(get_product_gateway),
) -> ProductService:
    return ProductService(gateway)


def valid_product_id(product_id: str) -> ProductId:
    return parse_product_id(product_id)


async def existing_product_id(
    product_id: ProductId = Depends(valid_product_id),
    service: ProductService = Depends(get_product_service),
) -> ProductId:
    """Well-formed id of a stored product; ResourceNotFoundError otherwise."""
    await service.get_product(product_id)
    return product_id
