"""
Catalog helpers used by the category, search and product pages.
"""
from .formatting import format_price, format_price_with_decimal
from .query import (
    filter_products,
    paginate,
    price_range,
    product_stats,
    query_catalog,
    related_products,
    search_products,
    sort_products,
    unique_brands,
    unique_categories,
    validate_product,
)

__all__ = [
    "filter_products",
    "format_price",
    "format_price_with_decimal",
    "paginate",
    "price_range",
    "product_stats",
    "query_catalog",
    "related_products",
    "search_products",
    "sort_products",
    "unique_brands",
    "unique_categories",
    "validate_product",
]
