"""Product data-access layer.

Pure query functions: no business logic, no HTTP concerns.
Each function takes a session and returns models or scalars.
"""

import uuid
from typing import Any

from sqlalchemy import ColumnElement, Select, func, literal_column, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import load_only, selectinload

from catalog.models import SEARCH_DOCUMENT_SQL, Product
from catalog.query.filters import ProductFilter
from catalog.query.sorting import SortDirection, SortSpec

# Columns loaded for list views. description, image_url, tags and reviews are
# left out to keep list payloads small.
SUMMARY_COLUMNS = (
    Product.id,
    Product.name,
    Product.slug,
    Product.short_description,
    Product.price,
    Product.category,
    Product.rating,
    Product.num_reviews,
    Product.thumbnail_url,
    Product.stock,
    Product.is_active,
    Product.created_at,
)


def _conditions(filters: ProductFilter) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = []
    if filters.active_only:
        conditions.append(Product.is_active.is_(True))
    if filters.category is not None:
        conditions.append(Product.category == filters.category)
    if filters.price_range is not None:
        if filters.price_range.min is not None:
            conditions.append(Product.price >= filters.price_range.min)
        if filters.price_range.max is not None:
            conditions.append(Product.price <= filters.price_range.max)
    if filters.tags:
        conditions.append(Product.tags.overlap(sorted(filters.tags)))
    if filters.text_search is not None:
        conditions.append(
            literal_column(SEARCH_DOCUMENT_SQL).bool_op("@@")(
                func.plainto_tsquery("english", filters.text_search)
            )
        )
    return conditions


def _order_by(sort: SortSpec) -> tuple[Any, ...]:
    column = getattr(Product, sort.field)
    ordered = column.desc() if sort.direction is SortDirection.DESC else column.asc()
    # id as tie-breaker so pages don't overlap when the sort key repeats
    return (ordered, Product.id)


async def list_products(
    db: AsyncSession,
    filters: ProductFilter,
    sort: SortSpec,
    skip: int,
    limit: int,
) -> list[Product]:
    """Return one page of products matching ``filters``, summary columns only."""
    stmt = (
        select(Product)
        .options(load_only(*SUMMARY_COLUMNS, raiseload=True))
        .where(*_conditions(filters))
        .order_by(*_order_by(sort))
        .offset(skip)
        .limit(limit)
    )
    result = await db.execute(stmt)
    return list(result.scalars().all())


async def count_products(db: AsyncSession, filters: ProductFilter) -> int:
    """Return how many products match ``filters``."""
    stmt = select(func.count(Product.id)).where(*_conditions(filters))
    result = await db.execute(stmt)
    return result.scalar_one()


def _detail_query(product_id: uuid.UUID) -> Select[tuple[Product]]:
    return select(Product).options(selectinload(Product.reviews)).where(Product.id == product_id)


async def get_product(db: AsyncSession, product_id: uuid.UUID) -> Product | None:
    """Return the full product with its reviews, or None."""
    result = await db.execute(_detail_query(product_id))
    return result.scalar_one_or_none()


async def _reload(db: AsyncSession, product_id: uuid.UUID) -> Product:
    # Picks up server-side defaults (timestamps) and the reviews collection.
    stmt = _detail_query(product_id).execution_options(populate_existing=True)
    result = await db.execute(stmt)
    return result.scalar_one()


async def create_product(db: AsyncSession, fields: dict[str, Any]) -> Product:
    """Insert a product and flush so constraint violations surface here."""
    product = Product(**fields)
    db.add(product)
    await db.flush()
    return await _reload(db, product.id)


async def update_product(
    db: AsyncSession, product_id: uuid.UUID, fields: dict[str, Any]
) -> Product | None:
    """Apply ``fields`` to the product and flush. Returns None if it doesn't exist."""
    product = await db.get(Product, product_id)
    if product is None:
        return None
    for name, value in fields.items():
        setattr(product, name, value)
    await db.flush()
    return await _reload(db, product_id)


async def delete_product(db: AsyncSession, product_id: uuid.UUID) -> bool:
    """Delete the product (reviews cascade in the database). Returns False if it didn't exist."""
    product = await db.get(Product, product_id)
    if product is None:
        return False
    await db.delete(product)
    await db.flush()
    return True
