"""Product request and response schemas.

JSON keys are camelCase on the wire (``shortDescription``, ``isActive``);
request bodies accept either camelCase or snake_case.
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel

from catalog.schemas.pagination import PaginatedResponse

# Stored as NUMERIC, rendered as a JSON number
Money = Annotated[Decimal, PlainSerializer(float, return_type=float, when_used="json")]

# NUMERIC(10, 2) and INTEGER upper bounds
MAX_PRICE = Decimal("99999999.99")
MAX_INT4 = 2**31 - 1


class CamelModel(BaseModel):
    model_config = ConfigDict(
        from_attributes=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ProductSummary(CamelModel):
    """Lightweight projection used by the list endpoint."""

    id: uuid.UUID
    name: str
    slug: str
    short_description: str | None
    price: Money
    category: str
    rating: Money
    num_reviews: int
    thumbnail_url: str | None
    stock: int
    is_active: bool
    created_at: datetime


class ReviewResponse(CamelModel):
    user_id: uuid.UUID
    user_name: str | None
    rating: int
    comment: str | None
    created_at: datetime


class ProductDetail(ProductSummary):
    """Full product, including description, tags and reviews."""

    description: str | None
    image_url: str | None
    tags: list[str]
    reviews: list[ReviewResponse]
    updated_at: datetime


ProductListResponse = PaginatedResponse[ProductSummary]


def _normalize_tags(tags: list[str] | None) -> list[str] | None:
    if tags is None:
        return None
    normalized = (tag.strip().lower() for tag in tags)
    return list(dict.fromkeys(tag for tag in normalized if tag))


class ProductWrite(CamelModel):
    """Fields shared by create and update bodies.

    Everything is optional here; services/product.py enforces which fields a
    create requires so that a missing field is reported as a 400.
    """

    # Limits mirror the column sizes and check constraints in models.py
    name: str | None = Field(default=None, max_length=200)
    slug: str | None = Field(default=None, max_length=200)
    price: Decimal | None = Field(default=None, ge=0, le=MAX_PRICE)
    category: str | None = Field(default=None, max_length=100)
    short_description: str | None = Field(default=None, max_length=500)
    description: str | None = None
    image_url: str | None = Field(default=None, max_length=500)
    thumbnail_url: str | None = Field(default=None, max_length=500)
    tags: list[Annotated[str, Field(max_length=50)]] | None = None
    stock: int | None = Field(default=None, ge=0, le=MAX_INT4)

    @field_validator("name")
    @classmethod
    def _name(cls, value: str | None) -> str | None:
        if value is None:
            return None
        value = value.strip()
        # Blank is left for the required-field check in the service
        if 0 < len(value) < 2:
            raise ValueError("name must be at least 2 characters")
        return value

    @field_validator("short_description")
    @classmethod
    def _strip(cls, value: str | None) -> str | None:
        return value.strip() if value is not None else None

    @field_validator("slug", "category")
    @classmethod
    def _strip_lower(cls, value: str | None) -> str | None:
        return value.strip().lower() if value is not None else None

    @field_validator("tags")
    @classmethod
    def _tags(cls, value: list[str] | None) -> list[str] | None:
        return _normalize_tags(value)


class ProductCreate(ProductWrite):
    """Body of POST /api/products. ``name``, ``slug``, ``price`` and ``category`` are required."""


class ProductUpdate(ProductWrite):
    """Body of PUT /api/products/{id}. Only fields present in the body are changed."""

    is_active: bool | None = None
