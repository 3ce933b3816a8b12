from decimal import Decimal

import pytest
from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from catalog.models import Product, Review
from tests.factories import make_product, make_review


# ---------------------------------------------------------------------------
# 1. Persistence: 7 products and 2 reviews
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_seed_creates_products_and_reviews(seeded_db: AsyncSession) -> None:
    products = (await seeded_db.execute(select(Product))).scalars().all()
    reviews = (await seeded_db.execute(select(Review))).scalars().all()

    assert len(products) == 7
    assert len(reviews) == 2


# ---------------------------------------------------------------------------
# 2. Column defaults
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_defaults_are_applied(db: AsyncSession) -> None:
    product = Product(name="Plain", slug="plain", category="misc", price=Decimal("1.00"))
    db.add(product)
    await db.commit()
    await db.refresh(product)

    assert product.id is not None
    assert product.is_active is True
    assert product.stock == 0
    assert product.num_reviews == 0
    assert product.rating == 0
    assert product.tags == []
    assert product.created_at is not None
    assert product.updated_at is not None


# ---------------------------------------------------------------------------
# 3. Check constraints: violation tests
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
@pytest.mark.parametrize(
    "field, value",
    [
        ("name", "A"),
        ("price", Decimal("-0.01")),
        ("stock", -1),
        ("rating", Decimal("5.5")),
        ("rating", Decimal("-1")),
        ("num_reviews", -1),
    ],
    ids=[
        "name_too_short",
        "price_negative",
        "stock_negative",
        "rating_above_max",
        "rating_below_min",
        "num_reviews_negative",
    ],
)
async def test_check_constraint_violation(db: AsyncSession, field: str, value: object) -> None:
    async with db.begin_nested():
        product = make_product(slug="constraint-check")
        setattr(product, field, value)
        db.add(product)

        with pytest.raises((IntegrityError, DBAPIError)):
            await db.flush()


@pytest.mark.asyncio
@pytest.mark.parametrize("rating", [0, 6])
async def test_review_rating_range(db: AsyncSession, rating: int) -> None:
    product = make_product()
    db.add(product)
    await db.flush()

    async with db.begin_nested():
        db.add(make_review(product_id=product.id, rating=rating))
        with pytest.raises(IntegrityError):
            await db.flush()


# ---------------------------------------------------------------------------
# 4. Unique slug
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_duplicate_slug_raises(db: AsyncSession) -> None:
    db.add(make_product(slug="same"))
    await db.flush()

    async with db.begin_nested():
        db.add(make_product(name="Other", slug="same"))
        with pytest.raises(IntegrityError):
            await db.flush()


# ---------------------------------------------------------------------------
# 5. Deleting a product removes its reviews
# ---------------------------------------------------------------------------
@pytest.mark.asyncio
async def test_delete_product_cascades_to_reviews(seeded_db: AsyncSession) -> None:
    stmt = (
        select(Product)
        .options(selectinload(Product.reviews))
        .where(Product.slug == "trail-runner")
    )
    product = (await seeded_db.execute(stmt)).scalar_one()
    assert len(product.reviews) == 2

    await seeded_db.delete(product)
    await seeded_db.flush()

    remaining = (await seeded_db.execute(select(Review))).scalars().all()
    assert remaining == []
