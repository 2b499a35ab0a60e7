from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from .interfaces import Product

"""
Product catalogue contracts.

Defines the query shapes used against the product catalogue, e.g.:
- filter criteria for category / collection pages
- sort options for listing pages
- the validation result for incoming product records

These contracts are shared by:
- src/catalog/query.py (pure search/filter/sort helpers)
- clients/mocks/local_product_catalogues.py (bundled JSON data source)
- the /api/products endpoints

Why:
- Keeps query parameters typed instead of passing ad-hoc dicts around
- Lets the API layer and the catalog helpers agree on field names
"""


class SortField(str, Enum):
    NAME = "name"
    PRICE = "price"
    RATING = "rating"
    CREATED_AT = "createdAt"
    SALES_COUNT = "salesCount"


class SortDirection(str, Enum):
    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True)
class PriceRange:
    min: float
    max: float


@dataclass
class FilterOptions:
    """Optional filters when querying the product catalogue. Omitted fields apply no constraint."""
    category: Optional[str] = None
    gender: Optional[str] = None
    price_range: Optional[PriceRange] = None
    rating: Optional[float] = None              # minimum average rating
    brand: Optional[str] = None
    status: Optional[str] = None
    featured: Optional[bool] = None

    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (
                self.category,
                self.gender,
                self.price_range,
                self.rating,
                self.brand,
                self.status,
                self.featured,
            )
        )


@dataclass(frozen=True)
class SortOptions:
    field: SortField = SortField.NAME
    direction: SortDirection = SortDirection.ASC


@dataclass
class ValidationResult:
    is_valid: bool
    errors: List[str]


@dataclass
class CatalogPage:
    """One page of a catalog query plus pagination metadata."""
    products: List[Product]
    total: int
    page: int
    limit: int
    total_pages: int

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def to_dict(self) -> dict:
        return {
            "products": [p.to_dict() for p in self.products],
            "total": self.total,
            "page": self.page,
            "limit": self.limit,
            "totalPages": self.total_pages,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev,
        }
