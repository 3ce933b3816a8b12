"""Product business logic.

Resolves raw query parameters into pagination, filter and sort, runs the
repository queries, and translates storage outcomes into domain exceptions.
"""

import asyncio
import uuid
from collections.abc import Mapping

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from catalog.exceptions import ConflictError, NotFoundError, ValidationError
from catalog.logging import get_logger
from catalog.models import Product
from catalog.query.filters import build_product_filter
from catalog.query.pagination import resolve_pagination
from catalog.query.sorting import resolve_sort
from catalog.repositories import product as repo
from catalog.schemas.pagination import Paginated
from catalog.schemas.product import ProductCreate, ProductUpdate

logger = get_logger(__name__)

REQUIRED_CREATE_FIELDS = ("name", "slug", "price", "category")


def parse_product_id(raw: str) -> uuid.UUID:
    """Validate an identifier from the URL before any query runs."""
    try:
        return uuid.UUID(raw)
    except (ValueError, AttributeError, TypeError):
        raise ValidationError("Invalid product id") from None


async def get_products(
    sessions: async_sessionmaker[AsyncSession],
    params: Mapping[str, str | None],
) -> Paginated[Product]:
    """Fetch one page of products for the given query parameters.

    Two queries per call, run concurrently on separate sessions:
    1. The page itself (summary columns only)
    2. The total count for the same filter
    Storage errors propagate unchanged.
    """
    page = resolve_pagination(params.get("page"), params.get("limit"))
    filters = build_product_filter(params)
    sort = resolve_sort(params.get("sort"))

    async with sessions() as page_db, sessions() as count_db:
        items, total = await asyncio.gather(
            repo.list_products(page_db, filters, sort, page.offset, page.limit),
            repo.count_products(count_db, filters),
        )

    return Paginated(items=items, total=total, page=page.page, limit=page.limit)


async def get_product(db: AsyncSession, raw_id: str) -> Product:
    """Fetch the full product, or raise NotFoundError."""
    product_id = parse_product_id(raw_id)
    product = await repo.get_product(db, product_id)
    if product is None:
        raise NotFoundError("Product", product_id)
    return product


def _is_unique_violation(exc: IntegrityError) -> bool:
    # asyncpg reports unique_violation as SQLSTATE 23505
    return getattr(exc.orig, "sqlstate", None) == "23505" or "unique" in str(exc.orig).lower()


async def create_product(db: AsyncSession, body: ProductCreate) -> Product:
    """Create a product. Raises ValidationError or ConflictError (duplicate slug)."""
    fields = body.model_dump(exclude_none=True)
    if any(fields.get(name) in (None, "") for name in REQUIRED_CREATE_FIELDS):
        raise ValidationError("name, slug, price and category are required")

    try:
        product = await repo.create_product(db, fields)
    except IntegrityError as exc:
        if _is_unique_violation(exc):
            raise ConflictError("Slug must be unique") from exc
        raise

    logger.info("product_created", product_id=str(product.id), slug=product.slug)
    return product


async def update_product(db: AsyncSession, raw_id: str, body: ProductUpdate) -> Product:
    """Apply a partial update. Raises ValidationError, NotFoundError or ConflictError."""
    product_id = parse_product_id(raw_id)
    fields = body.model_dump(exclude_unset=True)
    if any(name in fields and fields[name] in (None, "") for name in REQUIRED_CREATE_FIELDS):
        raise ValidationError("name, slug, price and category cannot be empty")

    try:
        product = await repo.update_product(db, product_id, fields)
    except IntegrityError as exc:
        if _is_unique_violation(exc):
            raise ConflictError("Slug must be unique") from exc
        raise

    if product is None:
        raise NotFoundError("Product", product_id)

    logger.info("product_updated", product_id=str(product_id), fields=sorted(fields))
    return product


async def delete_product(db: AsyncSession, raw_id: str) -> None:
    """Delete a product. Raises ValidationError or NotFoundError."""
    product_id = parse_product_id(raw_id)
    if not await repo.delete_product(db, product_id):
        raise NotFoundError("Product", product_id)
    logger.info("product_deleted", product_id=str(product_id))
