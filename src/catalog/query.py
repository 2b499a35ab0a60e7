"""Search, filter, sort and related-product helpers for the storefront catalog.

Every function here is pure: it takes a snapshot list of products and returns a
new list without touching the input, so the helpers are safe to call from any
request handler concurrently.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime, timezone
from numbers import Real
from typing import Any, Dict, List, Optional, Sequence

from src.integrations.contracts.interfaces import Gender, Product
from src.integrations.contracts.product_catalogues import (
    CatalogPage,
    FilterOptions,
    SortDirection,
    SortField,
    SortOptions,
    ValidationResult,
)

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 12
RELATED_PRICE_WINDOW = 50


def _searchable_text(product: Product) -> str:
    parts = [product.name, product.description, product.category, product.brand or ""]
    parts.extend(product.tags or [])
    return " ".join(parts).lower()


def search_products(products: Sequence[Product], query: str) -> List[Product]:
    """Case-insensitive substring search over name, description, category, brand and tags.

    A product matches when the whole query appears in its searchable text, when
    every query word appears somewhere in it, or when any single word appears in
    the name or description.
    """
    if not query or not query.strip():
        return list(products)

    term = query.lower().strip()
    words = term.split()

    matches: List[Product] = []
    for product in products:
        text = _searchable_text(product)
        if term in text:
            matches.append(product)
            continue
        if all(word in text for word in words):
            matches.append(product)
            continue
        name = product.name.lower()
        description = product.description.lower()
        if any(word in name or word in description for word in words):
            matches.append(product)

    logger.debug("search %r matched %d of %d products", query, len(matches), len(products))
    return matches


def _matches(product: Product, f: FilterOptions) -> bool:
    if f.category is not None and product.category.lower() != f.category.lower():
        return False

    if f.gender is not None and product.gender is not None:
        wanted = f.gender.lower()
        if product.gender.value != wanted and product.gender != Gender.UNISEX:
            return False

    if f.price_range is not None:
        if product.price < f.price_range.min or product.price > f.price_range.max:
            return False

    # Unrated products are not excluded by a rating threshold.
    if f.rating is not None and product.average_rating is not None:
        if product.average_rating < f.rating:
            return False

    if f.brand is not None and product.brand is not None:
        if product.brand.lower() != f.brand.lower():
            return False

    if f.status is not None:
        status = product.status.value if product.status else None
        if status != f.status:
            return False

    if f.featured is not None and bool(product.featured) != f.featured:
        return False

    return True


def filter_products(products: Sequence[Product], options: Optional[FilterOptions] = None) -> List[Product]:
    """Apply every supplied criterion (logical AND). Omitted criteria are not applied."""
    if options is None or options.is_empty():
        return list(products)
    return [p for p in products if _matches(p, options)]


def _parse_timestamp(value: Optional[str]) -> float:
    if not value:
        return 0.0
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return 0.0
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.timestamp()


_SORT_KEYS = {
    SortField.NAME: lambda p: p.name.lower(),
    SortField.PRICE: lambda p: p.price,
    SortField.RATING: lambda p: p.average_rating or 0,
    SortField.CREATED_AT: lambda p: _parse_timestamp(p.created_at),
    SortField.SALES_COUNT: lambda p: p.sales_count or 0,
}


def sort_products(products: Sequence[Product], options: SortOptions) -> List[Product]:
    """Return a new, stably sorted list. Ties keep their input order in both directions."""
    key = _SORT_KEYS[SortField(options.field)]
    reverse = SortDirection(options.direction) == SortDirection.DESC
    return sorted(products, key=key, reverse=reverse)


def related_products(product: Product, all_products: Sequence[Product], limit: int = 4) -> List[Product]:
    """Products sharing a category or brand with `product`, best matches first."""
    scored = []
    for candidate in all_products:
        if candidate.id == product.id:
            continue
        same_category = candidate.category == product.category
        same_brand = bool(product.brand) and candidate.brand == product.brand
        if not (same_category or same_brand):
            continue
        score = (2 if same_category else 0) + (1 if same_brand else 0)
        if abs(candidate.price - product.price) < RELATED_PRICE_WINDOW:
            score += 1
        scored.append((score, candidate))

    # sorted() is stable, so equal scores keep catalogue order.
    scored.sort(key=lambda item: item[0], reverse=True)
    return [candidate for _, candidate in scored[: max(limit, 0)]]


def _field(candidate: Any, name: str) -> Any:
    if isinstance(candidate, dict):
        return candidate.get(name)
    return getattr(candidate, name, None)


def validate_product(candidate: Any) -> ValidationResult:
    """Check a raw product record. Never raises; problems are reported in `errors`."""
    errors: List[str] = []

    if not _field(candidate, "id"):
        errors.append("Product ID is required")
    if not _field(candidate, "name"):
        errors.append("Product name is required")

    price = _field(candidate, "price")
    if isinstance(price, bool) or not isinstance(price, Real) or math.isnan(price) or price < 0:
        errors.append("Valid price is required")

    if not _field(candidate, "category"):
        errors.append("Product category is required")
    if not _field(candidate, "description"):
        errors.append("Product description is required")

    return ValidationResult(is_valid=not errors, errors=errors)


def unique_categories(products: Sequence[Product]) -> List[str]:
    return sorted({p.category for p in products if p.category})


def unique_brands(products: Sequence[Product]) -> List[str]:
    return sorted({p.brand for p in products if p.brand and p.brand.strip()})


def price_range(products: Sequence[Product]) -> Dict[str, float]:
    if not products:
        return {"min": 0, "max": 0}
    prices = [p.price for p in products]
    return {"min": min(prices), "max": max(prices)}


def product_stats(products: Sequence[Product]) -> Dict[str, float]:
    total = len(products)
    total_value = sum(p.price for p in products)
    return {
        "totalProducts": total,
        "activeProducts": sum(1 for p in products if p.status is not None and p.status.value == "active"),
        "featuredProducts": sum(1 for p in products if p.featured),
        "totalValue": total_value,
        "avgPrice": total_value / total if total else 0,
    }


def paginate(products: Sequence[Product], page: int = 1, limit: int = DEFAULT_PAGE_SIZE) -> CatalogPage:
    page = max(page, 1)
    limit = max(limit, 1)
    total = len(products)
    start = (page - 1) * limit
    return CatalogPage(
        products=list(products[start : start + limit]),
        total=total,
        page=page,
        limit=limit,
        total_pages=math.ceil(total / limit),
    )


def query_catalog(
    products: Sequence[Product],
    search: Optional[str] = None,
    filters: Optional[FilterOptions] = None,
    sort: Optional[SortOptions] = None,
    page: int = 1,
    limit: int = DEFAULT_PAGE_SIZE,
) -> CatalogPage:
    """Listing pipeline used by the category and search pages: filter → search → sort → page."""
    result = filter_products(products, filters)
    result = search_products(result, search or "")
    if sort is not None:
        result = sort_products(result, sort)
    return paginate(result, page=page, limit=limit)
