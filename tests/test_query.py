"""Unit tests for pagination, filter and sort resolution."""

from decimal import Decimal

import pytest

from catalog.query.filters import PriceRange, ProductFilter, build_product_filter
from catalog.query.pagination import (
    DEFAULT_LIMIT,
    MAX_LIMIT,
    MAX_PAGE,
    PageRequest,
    resolve_pagination,
    total_pages,
)
from catalog.query.sorting import DEFAULT_SORT, SortDirection, SortSpec, resolve_sort


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------
@pytest.mark.parametrize(
    "page",
    [None, "", "0", "-3", "abc", "1.5", "2abc", "99999999999999999999", str(MAX_PAGE + 1)],
)
def test_invalid_page_falls_back_to_first_page(page: str | None) -> None:
    assert resolve_pagination(page, "10").page == 1


@pytest.mark.parametrize("limit", [None, "", "0", "-1", "101", "1000", "ten"])
def test_invalid_limit_falls_back_to_default(limit: str | None) -> None:
    assert resolve_pagination("1", limit).limit == DEFAULT_LIMIT


def test_limit_bounds_are_inclusive() -> None:
    assert resolve_pagination("1", "1").limit == 1
    assert resolve_pagination("1", str(MAX_LIMIT)).limit == MAX_LIMIT


def test_largest_page_offset_fits_in_a_signed_64_bit_integer() -> None:
    resolved = resolve_pagination(str(MAX_PAGE), str(MAX_LIMIT))
    assert resolved.page == MAX_PAGE
    assert resolved.offset <= 2**63 - 1


@pytest.mark.parametrize(
    "page, limit, offset",
    [("1", "20", 0), ("2", "20", 20), ("3", "7", 14), (" 4 ", "100", 300)],
)
def test_offset_is_derived_from_page_and_limit(page: str, limit: str, offset: int) -> None:
    resolved = resolve_pagination(page, limit)
    assert resolved.offset == offset
    assert resolved.offset == (resolved.page - 1) * resolved.limit


def test_missing_inputs_resolve_to_defaults() -> None:
    assert resolve_pagination(None, None) == PageRequest(page=1, limit=DEFAULT_LIMIT)


@pytest.mark.parametrize(
    "total, limit, expected",
    [(0, 20, 1), (1, 20, 1), (20, 20, 1), (21, 20, 2), (100, 7, 15)],
)
def test_total_pages(total: int, limit: int, expected: int) -> None:
    assert total_pages(total, limit) == expected


# ---------------------------------------------------------------------------
# Sort
# ---------------------------------------------------------------------------
@pytest.mark.parametrize(
    "token, expected",
    [
        ("price", SortSpec("price", SortDirection.ASC)),
        ("-price", SortSpec("price", SortDirection.DESC)),
        ("rating", SortSpec("rating", SortDirection.ASC)),
        ("-rating", SortSpec("rating", SortDirection.DESC)),
        ("name", SortSpec("name", SortDirection.ASC)),
        ("createdAt", SortSpec("created_at", SortDirection.ASC)),
        (" -createdAt ", SortSpec("created_at", SortDirection.DESC)),
    ],
)
def test_whitelisted_sort_tokens(token: str, expected: SortSpec) -> None:
    assert resolve_sort(token) == expected


@pytest.mark.parametrize(
    "token",
    [None, "", "-", "--price", "description", "-stock", "created_at", "price;drop table"],
)
def test_unknown_sort_tokens_fall_back_to_newest_first(token: str | None) -> None:
    assert resolve_sort(token) == DEFAULT_SORT
    assert DEFAULT_SORT == SortSpec("created_at", SortDirection.DESC)


# ---------------------------------------------------------------------------
# Filter
# ---------------------------------------------------------------------------
def test_empty_params_only_assert_active() -> None:
    assert build_product_filter({}) == ProductFilter(active_only=True)


def test_active_only_cannot_be_disabled() -> None:
    assert build_product_filter({"isActive": "false", "active_only": "false"}).active_only


def test_category_is_lower_cased() -> None:
    assert build_product_filter({"category": "Shoes"}).category == "shoes"


def test_tags_are_trimmed_lower_cased_and_deduplicated() -> None:
    tags = build_product_filter({"tags": " Red, BLUE ,blue"}).tags
    assert tags == frozenset({"red", "blue"})
    assert tags is not None and len(tags) == 2


@pytest.mark.parametrize("raw", [",", " , ,", ""])
def test_tags_without_values_omit_the_predicate(raw: str) -> None:
    assert build_product_filter({"tags": raw}).tags is None


def test_missing_price_bounds_omit_the_predicate() -> None:
    assert build_product_filter({"category": "shoes"}).price_range is None


@pytest.mark.parametrize(
    "params, expected",
    [
        ({"minPrice": "10"}, PriceRange(min=Decimal("10"))),
        ({"maxPrice": "99.5"}, PriceRange(max=Decimal("99.5"))),
        ({"minPrice": "10", "maxPrice": "20"}, PriceRange(Decimal("10"), Decimal("20"))),
        ({"minPrice": "abc", "maxPrice": "20"}, PriceRange(max=Decimal("20"))),
        ({"minPrice": "0"}, PriceRange(min=Decimal("0"))),
    ],
)
def test_price_bounds(params: dict[str, str], expected: PriceRange) -> None:
    assert build_product_filter(params).price_range == expected


@pytest.mark.parametrize("raw", ["abc", "", "NaN", "Infinity", "-inf", "1e1000000", "1e13"])
def test_malformed_price_bounds_are_dropped_not_zeroed(raw: str) -> None:
    assert build_product_filter({"minPrice": raw, "maxPrice": raw}).price_range is None


def test_large_but_plausible_price_bound_is_kept() -> None:
    assert build_product_filter({"maxPrice": "999999999999"}).price_range == PriceRange(
        max=Decimal("999999999999")
    )


def test_search_is_passed_through_verbatim() -> None:
    raw = "  waterproof & 'jacket' "
    assert build_product_filter({"search": raw}).text_search == raw


def test_full_filter() -> None:
    result = build_product_filter(
        {
            "category": "APPAREL",
            "minPrice": "5",
            "maxPrice": "200",
            "tags": "Outdoor,hiking",
            "search": "merino",
        }
    )
    assert result == ProductFilter(
        active_only=True,
        category="apparel",
        price_range=PriceRange(Decimal("5"), Decimal("200")),
        tags=frozenset({"outdoor", "hiking"}),
        text_search="merino",
    )
