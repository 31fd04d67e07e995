"""Domain Types: identity types and field names shared across the codebase.

Invariants:
    - ProductId wraps a bson ObjectId; never pass a raw path string to the gateway
    - parse_product_id is the only way a path string becomes a ProductId
    - MUTABLE_FIELDS is the allow-list of body keys that may ever be stored
    - Stored field names are the camelCase wire names (createdAt, lastSold, ...)

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and Mongo documents without custom encoders
"""

from enum import Enum
from typing import NewType

from bson import ObjectId

from products_api.core.errors import InvalidProductIdError


# ─── Identity Types ──────────────────────────────────────────────

ProductId = NewType("ProductId", ObjectId)


def parse_product_id(raw: str) -> ProductId:
    """Validate a path id. Raises InvalidProductIdError when malformed."""
    if not ObjectId.is_valid(raw):
        raise InvalidProductIdError(raw)
    return ProductId(ObjectId(raw))


# ─── Enums ───────────────────────────────────────────────────────

class ProductField(str, Enum):
    """Document field names as stored in the products collection."""
    ID = "_id"
    CATEGORY = "category"
    NAME = "name"
    MODEL = "model"
    PRICE = "price"
    STOCK = "stock"
    CREATED_AT = "createdAt"
    UPDATED_AT = "updatedAt"
    LAST_SOLD = "lastSold"


MUTABLE_FIELDS: tuple[ProductField, ...] = (
    ProductField.CATEGORY,
    ProductField.NAME,
    ProductField.MODEL,
    ProductField.PRICE,
    ProductField.STOCK,
)
