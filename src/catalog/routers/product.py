"""Product endpoints.

Reads are cached per URL; every successful write clears the whole cache.
"""

from fastapi import APIRouter, Query, Request, Response

from catalog.cache import cached
from catalog.config import settings
from catalog.dependencies import DB, ResponseCacheDep, Sessions
from catalog.schemas.product import (
    ProductCreate,
    ProductDetail,
    ProductListResponse,
    ProductUpdate,
)
from catalog.services import product as service

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("", response_model=ProductListResponse, status_code=200)
@cached(ttl=settings.cache_list_ttl)
async def list_products(
    request: Request,
    sessions: Sessions,
    page: str | None = Query(None, description="1-indexed page number"),
    limit: str | None = Query(None, description="Items per page (max 100)"),
    sort: str | None = Query(None, description="price, createdAt, rating or name; prefix - for descending"),
    category: str | None = Query(None),
    min_price: str | None = Query(None, alias="minPrice"),
    max_price: str | None = Query(None, alias="maxPrice"),
    tags: str | None = Query(None, description="Comma-separated; matches any"),
    search: str | None = Query(None, description="Full-text search over name and description"),
) -> ProductListResponse:
    """List active products with filtering, text search, sorting and pagination.

    Parameters are taken as plain strings: malformed values fall back to
    defaults instead of failing the request.
    """
    params = {
        "page": page,
        "limit": limit,
        "sort": sort,
        "category": category,
        "minPrice": min_price,
        "maxPrice": max_price,
        "tags": tags,
        "search": search,
    }
    result = await service.get_products(sessions, params)
    return ProductListResponse.from_page(result)


@router.get("/{product_id}", response_model=ProductDetail, status_code=200)
@cached(ttl=settings.cache_detail_ttl)
async def get_product(request: Request, product_id: str, db: DB) -> ProductDetail:
    """Full product, including description and reviews."""
    product = await service.get_product(db, product_id)
    return ProductDetail.model_validate(product)


@router.post("", response_model=ProductDetail, status_code=201)
async def create_product(body: ProductCreate, db: DB, cache: ResponseCacheDep) -> ProductDetail:
    product = await service.create_product(db, body)
    cache.invalidate()
    return ProductDetail.model_validate(product)


@router.put("/{product_id}", response_model=ProductDetail, status_code=200)
async def update_product(
    product_id: str, body: ProductUpdate, db: DB, cache: ResponseCacheDep
) -> ProductDetail:
    product = await service.update_product(db, product_id, body)
    cache.invalidate()
    return ProductDetail.model_validate(product)


@router.delete("/{product_id}", status_code=204, response_class=Response)
async def delete_product(product_id: str, db: DB, cache: ResponseCacheDep) -> Response:
    await service.delete_product(db, product_id)
    cache.invalidate()
    return Response(status_code=204)
