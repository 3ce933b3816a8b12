"""Structured product filter built from raw query parameters.

The filter is backend-neutral: it only records which predicates apply.
repositories/product.py turns it into SQL. Parameters that are missing or
malformed produce no predicate at all, except ``active_only`` which is
always asserted.
"""

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

# Bounds of 10**13 and above are treated as malformed
MAX_PRICE_EXPONENT = 12


@dataclass(frozen=True, slots=True)
class PriceRange:
    """Inclusive price bounds; either side may be open."""

    min: Decimal | None = None
    max: Decimal | None = None


@dataclass(frozen=True, slots=True)
class ProductFilter:
    active_only: bool = True
    category: str | None = None
    price_range: PriceRange | None = None
    tags: frozenset[str] | None = None
    text_search: str | None = None


def _parse_price(raw: str | None) -> Decimal | None:
    if raw is None:
        return None
    try:
        value = Decimal(str(raw).strip())
    except InvalidOperation:
        return None
    if not value.is_finite() or value.adjusted() > MAX_PRICE_EXPONENT:
        return None
    return value


def _parse_tags(raw: str) -> frozenset[str] | None:
    tags = frozenset(tag.strip().lower() for tag in str(raw).split(","))
    tags -= {""}
    return tags or None


def build_product_filter(params: Mapping[str, str | None]) -> ProductFilter:
    """Build a ProductFilter from ``category``, ``minPrice``, ``maxPrice``, ``tags`` and ``search``."""
    category = params.get("category")

    min_price = _parse_price(params.get("minPrice"))
    max_price = _parse_price(params.get("maxPrice"))
    price_range = None
    if min_price is not None or max_price is not None:
        price_range = PriceRange(min=min_price, max=max_price)

    tags = params.get("tags")
    search = params.get("search")

    return ProductFilter(
        category=str(category).lower() if category else None,
        price_range=price_range,
        tags=_parse_tags(tags) if tags else None,
        text_search=str(search) if search else None,
    )
