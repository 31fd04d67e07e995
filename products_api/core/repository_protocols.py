"""Boundary Protocols: contracts between core/services and the document store.

Invariants:
    - Services NEVER import Motor or pymongo; they see only these Protocol types
    - Implementations provided by infrastructure via dependency injection
    - Counts are plain ints copied out of driver result objects

Design Decisions:
    - Protocol over ABC: structural subtyping, tests may pass any conforming object
    - Async in Protocol: every method does IO in the real implementation
"""

from typing import NamedTuple, Protocol

from products_api.core.domain_types import ProductId


class UpdateCounts(NamedTuple):
    """Outcome of a single-document update."""
    matched: int
    modified: int


class ProductRepository(Protocol):
    """Contract for product persistence, implemented by ProductGateway."""
    async def insert(self, document: dict) -> ProductId: ...
    async def find_all(self) -> list[dict]: ...
    async def find_by_id(self, product_id: ProductId) -> dict | None: ...
    async def update_fields(
        self, product_id: ProductId, fields: dict,
    ) -> UpdateCounts: ...
    async def conditional_decrement(
        self, product_id: ProductId, field: str, stamp_field: str | None = None,
    ) -> UpdateCounts: ...
    async def delete_by_id(self, product_id: ProductId) -> int: ...
    async def ping(self) -> None: ...
