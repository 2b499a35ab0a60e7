"""
Shopping cart.

Line items are keyed by (product id, size, color): adding the same product in
the same variant merges quantities. Totals follow the storefront rules:
free shipping above FREE_SHIPPING_THRESHOLD, otherwise a flat fee, plus 8% tax.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

from src.integrations.contracts.interfaces import Product, ProductStatus
from src.integrations.contracts.product_catalogues import ValidationResult

logger = logging.getLogger(__name__)

MAX_QUANTITY_PER_ITEM = 10
FREE_SHIPPING_THRESHOLD = 200
FLAT_SHIPPING_FEE = 25
TAX_RATE = 0.08

_UNAVAILABLE = (ProductStatus.INACTIVE, ProductStatus.DRAFT)


class CartError(ValueError):
    pass


@dataclass
class CartItem:
    product: Product
    quantity: int
    size: Optional[str] = None
    color: Optional[str] = None

    @property
    def key(self) -> Tuple[str, Optional[str], Optional[str]]:
        return (self.product.id, self.size, self.color)

    @property
    def line_total(self) -> float:
        return self.product.price * self.quantity

    def to_dict(self) -> Dict[str, Any]:
        return {
            "product": self.product.to_dict(),
            "quantity": self.quantity,
            "selectedSize": self.size,
            "selectedColor": self.color,
            "lineTotal": round(self.line_total, 2),
        }


class Cart:
    def __init__(self, cart_id: Optional[str] = None) -> None:
        self.cart_id = cart_id or str(uuid.uuid4())
        self.items: List[CartItem] = []

    def _find(self, product_id: str, size: Optional[str], color: Optional[str]) -> Optional[CartItem]:
        for item in self.items:
            if item.key == (product_id, size, color):
                return item
        return None

    def add_item(self, product: Product, quantity: int = 1, size: Optional[str] = None, color: Optional[str] = None) -> CartItem:
        if not product or not product.id:
            raise CartError("Invalid product")
        if quantity <= 0:
            raise CartError("Quantity must be greater than zero")
        if product.status in _UNAVAILABLE:
            raise CartError(f"{product.name} is not available")

        existing = self._find(product.id, size, color)
        new_quantity = quantity + (existing.quantity if existing else 0)
        if new_quantity > MAX_QUANTITY_PER_ITEM:
            raise CartError(f"Maximum quantity per item is {MAX_QUANTITY_PER_ITEM}")

        if existing:
            existing.quantity = new_quantity
            return existing

        item = CartItem(product=product, quantity=quantity, size=size, color=color)
        self.items.append(item)
        logger.info("Cart %s: added %s x%d", self.cart_id, product.id, quantity)
        return item

    def update_quantity(self, product_id: str, quantity: int, size: Optional[str] = None, color: Optional[str] = None) -> None:
        """Set a line's quantity; zero or less removes the line."""
        if quantity <= 0:
            self.remove_item(product_id, size, color)
            return
        if quantity > MAX_QUANTITY_PER_ITEM:
            raise CartError(f"Maximum quantity per item is {MAX_QUANTITY_PER_ITEM}")
        item = self._find(product_id, size, color)
        if item is None:
            raise CartError(f"Product {product_id} is not in the cart")
        item.quantity = quantity

    def remove_item(self, product_id: str, size: Optional[str] = None, color: Optional[str] = None) -> None:
        self.items = [item for item in self.items if item.key != (product_id, size, color)]

    def clear(self) -> None:
        self.items = []

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def subtotal(self) -> float:
        return sum(item.line_total for item in self.items)

    @property
    def shipping(self) -> float:
        if not self.items or self.subtotal > FREE_SHIPPING_THRESHOLD:
            return 0
        return FLAT_SHIPPING_FEE

    @property
    def tax(self) -> float:
        return round(self.subtotal * TAX_RATE, 2)

    @property
    def total(self) -> float:
        return round(self.subtotal + self.shipping + self.tax, 2)

    def validate(self) -> ValidationResult:
        errors: List[str] = []
        if not self.items:
            errors.append("Cart is empty")
        for index, item in enumerate(self.items, start=1):
            if item.quantity <= 0:
                errors.append(f"Item {index}: Invalid quantity")
            if item.quantity > MAX_QUANTITY_PER_ITEM:
                errors.append(f"Item {index}: Quantity exceeds maximum ({MAX_QUANTITY_PER_ITEM})")
            if item.product.status in _UNAVAILABLE:
                errors.append(f"Item {index}: Product is no longer available")
        return ValidationResult(is_valid=not errors, errors=errors)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cartId": self.cart_id,
            "items": [item.to_dict() for item in self.items],
            "itemCount": self.item_count,
            "subtotal": round(self.subtotal, 2),
            "shipping": self.shipping,
            "tax": self.tax,
            "total": self.total,
        }
