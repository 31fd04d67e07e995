"""Product Schemas: Pydantic models with field-level validation for API boundaries.

Invariants:
    - ProductCreate requires name or model, and requires price and stock to be
      present (stock=0 is valid: presence, not truthiness)
    - ProductUpdate keeps only allow-listed fields; blank values are dropped
    - price/stock coerced by core/coercion.py in both models
    - Unknown body keys are ignored, never stored
    - ProductResponse serializes every ObjectId (including _id) as a hex string,
      timestamps as ISO-8601; legacy numeric price/stock values pass through

Design Decisions:
    - mode="before" validators: coercion sees the raw JSON value, so "5" and 5 agree
    - Wire names are camelCase aliases (createdAt, matchedCount, ...) for
      compatibility with existing clients of the collection
"""

from datetime import datetime
from typing import Any

from bson import Decimal128, ObjectId
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from products_api.core.coercion import clean_text, coerce_price, coerce_stock, is_blank
from products_api.core.domain_types import MUTABLE_FIELDS

_ALLOWED = {f.value for f in MUTABLE_FIELDS}
_BSON_ENCODERS = {ObjectId: str, Decimal128: str}


class ProductCreate(BaseModel):
    """Product creation body: a typed partial structure, not a free-form map."""
    model_config = ConfigDict(extra="ignore")

    category: str | None = None
    name: str | None = None
    model: str | None = None
    price: float
    stock: int

    @field_validator("category", "name", "model", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> str | None:
        return clean_text(v)

    @field_validator("price", mode="before")
    @classmethod
    def parse_price(cls, v: Any) -> float:
        if v is None:
            raise ValueError("price is required")
        return coerce_price(v)

    @field_validator("stock", mode="before")
    @classmethod
    def parse_stock(cls, v: Any) -> int:
        if v is None:
            raise ValueError("stock is required")
        return coerce_stock(v)

    @model_validator(mode="after")
    def require_name_or_model(self) -> "ProductCreate":
        if not self.name and not self.model:
            raise ValueError("name or model is required")
        return self

    def to_document(self) -> dict:
        """Fields to insert; absent optional strings are left out."""
        return self.model_dump(include=_ALLOWED, exclude_none=True)


class ProductUpdate(BaseModel):
    """Partial update body: every allow-listed field optional."""
    model_config = ConfigDict(extra="ignore")

    category: str | None = None
    name: str | None = None
    model: str | None = None
    price: float | None = None
    stock: int | None = None

    @field_validator("category", "name", "model", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> str | None:
        return clean_text(v)

    @field_validator("price", mode="before")
    @classmethod
    def parse_price(cls, v: Any) -> float | None:
        return None if is_blank(v) else coerce_price(v)

    @field_validator("stock", mode="before")
    @classmethod
    def parse_stock(cls, v: Any) -> int | None:
        return None if is_blank(v) else coerce_stock(v)

    def to_update_fields(self) -> dict:
        """Cleaned $set map; empty when nothing valid was sent."""
        return self.model_dump(include=_ALLOWED, exclude_none=True)


class ProductResponse(BaseModel):
    """Stored product as returned to clients.

    Documents written by older clients may hold fractional stock, numeric
    strings or extra fields with ObjectId/datetime values; they are returned
    as stored rather than rejected.
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(alias="_id")
    category: str | None = None
    name: str | None = None
    model: str | None = None
    price: float | str | None = None
    stock: int | float | str | None = None
    created_at: datetime | None = Field(None, alias="createdAt")
    updated_at: datetime | None = Field(None, alias="updatedAt")
    last_sold: datetime | None = Field(None, alias="lastSold")

    @field_validator("id", mode="before")
    @classmethod
    def stringify_id(cls, v: Any) -> str:
        return str(v)

    @classmethod
    def from_document(cls, document: dict) -> "ProductResponse":
        return cls.model_validate(
            jsonable_encoder(document, custom_encoder=_BSON_ENCODERS),
        )


class ProductCreated(BaseModel):
    message: str = "Product added successfully"
    id: str


class ProductModified(BaseModel):
    """Update and sell acknowledgement."""
    model_config = ConfigDict(populate_by_name=True)

    message: str
    matched_count: int = Field(alias="matchedCount")
    modified_count: int = Field(alias="modifiedCount")


class ProductDeleted(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Product deleted successfully"
    deleted_count: int = Field(alias="deletedCount")
