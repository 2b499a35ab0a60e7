"""
Wishlist.

One entry per product, with an optional note. Inactive and draft products
cannot be saved, and a wishlist holds at most MAX_WISHLIST_ITEMS entries.
Moving an entry to the cart adds it there first, so a product the cart
rejects stays on the wishlist.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from src.catalog.query import filter_products
from src.integrations.contracts.interfaces import Product, ProductStatus
from src.integrations.contracts.product_catalogues import FilterOptions, ValidationResult
from src.storefront.cart import Cart

logger = logging.getLogger(__name__)

MAX_WISHLIST_ITEMS = 50
MAX_NOTES_LENGTH = 500

_UNAVAILABLE = (ProductStatus.INACTIVE, ProductStatus.DRAFT)


class WishlistError(ValueError):
    pass


@dataclass
class WishlistItem:
    product: Product
    added_at: datetime
    notes: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product": self.product.to_dict(),
            "addedAt": self.added_at.isoformat(),
            "notes": self.notes,
        }


def _clean_notes(notes: Optional[str]) -> str:
    value = (notes or "").strip()
    if len(value) > MAX_NOTES_LENGTH:
        raise WishlistError(f"Notes must be at most {MAX_NOTES_LENGTH} characters")
    return value


class Wishlist:
    def __init__(self, wishlist_id: Optional[str] = None, clock: Optional[Callable[[], datetime]] = None) -> None:
        self.wishlist_id = wishlist_id or str(uuid.uuid4())
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._items: Dict[str, WishlistItem] = {}

    @property
    def items(self) -> List[WishlistItem]:
        """Newest first."""
        return sorted(self._items.values(), key=lambda item: item.added_at, reverse=True)

    def get(self, product_id: str) -> Optional[WishlistItem]:
        return self._items.get(product_id)

    def contains(self, product_id: str) -> bool:
        return product_id in self._items

    def add_item(self, product: Product, notes: Optional[str] = None) -> WishlistItem:
        """Save a product. Saving one that is already listed returns the existing entry."""
        if not product or not product.id or not product.name:
            raise WishlistError("Invalid product data")
        if product.status in _UNAVAILABLE:
            raise WishlistError(f"{product.name} is not available")

        existing = self._items.get(product.id)
        if existing is not None:
            return existing
        if len(self._items) >= MAX_WISHLIST_ITEMS:
            raise WishlistError(f"Wishlist is full (maximum {MAX_WISHLIST_ITEMS} items)")

        item = WishlistItem(product=product, added_at=self._clock(), notes=_clean_notes(notes))
        self._items[product.id] = item
        logger.info("Wishlist %s: added %s", self.wishlist_id, product.id)
        return item

    def remove_item(self, product_id: str) -> bool:
        removed = self._items.pop(product_id, None) is not None
        if removed:
            logger.info("Wishlist %s: removed %s", self.wishlist_id, product_id)
        return removed

    def update_notes(self, product_id: str, notes: str) -> WishlistItem:
        item = self._items.get(product_id)
        if item is None:
            raise KeyError(product_id)
        item.notes = _clean_notes(notes)
        return item

    def clear(self) -> None:
        self._items = {}

    def move_to_cart(self, product_id: str, cart: Cart, quantity: int = 1) -> WishlistItem:
        item = self._items.get(product_id)
        if item is None:
            raise KeyError(product_id)
        # CartError propagates and the entry stays saved
        cart.add_item(item.product, quantity)
        del self._items[product_id]
        logger.info("Wishlist %s: moved %s to cart %s", self.wishlist_id, product_id, cart.cart_id)
        return item

    @property
    def count(self) -> int:
        return len(self._items)

    @property
    def total(self) -> float:
        return sum(item.product.price for item in self._items.values())

    def filter(self, category: Optional[str] = None, gender: Optional[str] = None) -> List[WishlistItem]:
        """Entries matching the catalogue category/gender rules (unisex matches either gender)."""
        items = self.items
        matching = filter_products([item.product for item in items], FilterOptions(category=category, gender=gender))
        wanted = {p.id for p in matching}
        return [item for item in items if item.product.id in wanted]

    def validate(self) -> ValidationResult:
        errors: List[str] = []
        for index, item in enumerate(self.items, start=1):
            if not item.product.id or not item.product.name:
                errors.append(f"Item {index}: Missing required product information")
            if item.product.price < 0:
                errors.append(f"Item {index}: Invalid product price")
            if item.product.status in _UNAVAILABLE:
                errors.append(f"Item {index}: Product is no longer available")
        return ValidationResult(is_valid=not errors, errors=errors)

    def to_dict(self, items: Optional[List[WishlistItem]] = None) -> Dict[str, Any]:
        listed = self.items if items is None else items
        return {
            "wishlistId": self.wishlist_id,
            "items": [item.to_dict() for item in listed],
            "count": self.count,
            "total": round(self.total, 2),
        }
