"""Generic pagination types shared by all list endpoints.

PaginatedResponse[T]: Pydantic model for HTTP responses (serializable).
Paginated[T]: plain dataclass for service-layer returns (not serializable).
"""

from dataclasses import dataclass
from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from catalog.query.pagination import total_pages

T = TypeVar("T")


class PaginationMeta(BaseModel):
    """``{page, limit, total, totalPages}`` block of a list response."""

    model_config = ConfigDict(from_attributes=True, alias_generator=to_camel, populate_by_name=True)

    page: int
    limit: int
    total: int
    total_pages: int


class PaginatedResponse(BaseModel, Generic[T]):
    """Pydantic model for paginated HTTP responses: ``{data: [...], pagination: {...}}``.

    ``[T]`` is a Python 3.12 type parameter: reuse it for any entity::

        # schemas/product.py
        ProductListResponse = PaginatedResponse[ProductSummary]

    Use this in **routers** (the HTTP boundary). Services return ``Paginated``.
    """

    data: list[T]
    pagination: PaginationMeta

    @classmethod
    def from_page(cls, page: "Paginated[object]") -> "PaginatedResponse[T]":
        return cls.model_validate(
            {"data": page.items, "pagination": PaginationMeta.model_validate(page)},
            from_attributes=True,
        )


@dataclass
class Paginated(Generic[T]):
    """Plain dataclass for paginated results inside the service layer.

    ``page`` and ``limit`` are the resolved values, not what the client sent.
    """

    items: list[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return total_pages(self.total, self.limit)
