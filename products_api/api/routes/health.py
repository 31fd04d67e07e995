"""Health & Readiness Probes: root banner, liveness, and store readiness.

Invariants:
    - GET / always returns 200 plain text if the process is up
    - GET /health always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if the document store is unreachable (readiness)
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse, PlainTextResponse

from products_api.api.dependencies import get_product_gateway
from products_api.infrastructure.product_gateway import ProductGateway

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/", response_class=PlainTextResponse)
async def root():
    return "Server is Running"


@router.get("/health", status_code=status.HTTP_200_OK)
async def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {"status": "healthy", "service": "products-api"}


@router.get("/health/ready")
async def readiness_check(gateway: ProductGateway = Depends(get_product_gateway)):
    """Readiness probe: includes a round-trip to the document store."""
    if not await gateway.health_check():
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "database_unavailable",
            },
        )
    return {"status": "ready", "checks": {"database": "healthy"}}
