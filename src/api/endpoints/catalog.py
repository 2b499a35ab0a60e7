from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from src.api.services import get_catalogue, get_config
from src.catalog.query import query_catalog, related_products, unique_brands, unique_categories
from src.integrations.contracts.interfaces import Gender, ProductStatus
from src.integrations.contracts.product_catalogues import (
    FilterOptions,
    PriceRange,
    SortDirection,
    SortField,
    SortOptions,
)

api = APIRouter()
catalog_api = api


def _product_or_404(catalogue, product_id: str):
    product = catalogue.get_product(product_id)
    if product is None:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@api.get("/products", tags=["Products"])
async def list_products(
    search: Optional[str] = None,
    category: Optional[str] = None,
    gender: Optional[Gender] = None,
    min_price: Optional[float] = Query(default=None, ge=0),
    max_price: Optional[float] = Query(default=None, ge=0),
    rating: Optional[float] = Query(default=None, ge=0, le=5),
    brand: Optional[str] = None,
    status: Optional[ProductStatus] = None,
    featured: Optional[bool] = None,
    sort: Optional[SortField] = None,
    direction: SortDirection = SortDirection.ASC,
    page: int = Query(default=1, ge=1),
    limit: Optional[int] = Query(default=None, ge=1, le=100),
    catalogue=Depends(get_catalogue),
    config=Depends(get_config),
):
    """List products with filtering, free-text search, sorting and pagination."""
    price_range = None
    if min_price is not None or max_price is not None:
        low = min_price if min_price is not None else 0.0
        high = max_price if max_price is not None else float("inf")
        if low > high:
            raise HTTPException(status_code=422, detail="min_price cannot exceed max_price")
        price_range = PriceRange(min=low, max=high)

    filters = FilterOptions(
        category=category,
        gender=gender.value if gender else None,
        price_range=price_range,
        rating=rating,
        brand=brand,
        status=status.value if status else None,
        featured=featured,
    )
    page_result = query_catalog(
        catalogue.list_products(),
        search=search,
        filters=filters,
        sort=SortOptions(field=sort, direction=direction) if sort else None,
        page=page,
        limit=limit or config.catalog.page_size,
    )
    return {"success": True, "data": page_result.to_dict()}


@api.get("/products/featured", tags=["Products"])
async def list_featured_products(catalogue=Depends(get_catalogue)):
    return {"success": True, "data": [p.to_dict() for p in catalogue.featured_products()]}


@api.get("/products/{product_id}", tags=["Products"])
async def get_product(product_id: str, catalogue=Depends(get_catalogue)):
    product = _product_or_404(catalogue, product_id)
    return {"success": True, "data": product.to_dict()}


@api.get("/products/{product_id}/related", tags=["Products"])
async def get_related_products(product_id: str, limit: int = Query(default=4, ge=1, le=20), catalogue=Depends(get_catalogue)):
    product = _product_or_404(catalogue, product_id)
    related = related_products(product, catalogue.list_products(), limit=limit)
    return {"success": True, "data": [p.to_dict() for p in related]}


@api.get("/categories", tags=["Products"])
async def list_categories(gender: Optional[Gender] = None, catalogue=Depends(get_catalogue)):
    return {"success": True, "data": unique_categories(catalogue.list_products(gender))}


@api.get("/brands", tags=["Products"])
async def list_brands(catalogue=Depends(get_catalogue)):
    return {"success": True, "data": unique_brands(catalogue.list_products())}
