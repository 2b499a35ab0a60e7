"""
Mock order history.

Orders live in memory only; there is no payment processing. Order numbers are
`ORD-<milliseconds since epoch>` taken from the injected clock.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from src.storefront.cart import Cart

logger = logging.getLogger(__name__)


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


@dataclass
class Order:
    id: str
    order_number: str
    items: List[Dict[str, Any]]
    subtotal: float
    shipping: float
    tax: float
    total: float
    shipping_address: Dict[str, str]
    payment_method: Dict[str, str]
    customer_email: str = ""
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "orderNumber": self.order_number,
            "items": self.items,
            "subtotal": self.subtotal,
            "shipping": self.shipping,
            "tax": self.tax,
            "total": self.total,
            "status": self.status.value,
            "paymentStatus": self.payment_status.value,
            "shippingAddress": self.shipping_address,
            "paymentMethod": self.payment_method,
            "customerEmail": self.customer_email,
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }


class OrderStore:
    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._orders: Dict[str, Order] = {}

    def _next_order_number(self, now: datetime) -> str:
        millis = int(now.timestamp() * 1000)
        taken = {order.order_number for order in self._orders.values()}
        while f"ORD-{millis}" in taken:
            millis += 1
        return f"ORD-{millis}"

    def create_order(
        self,
        cart: Cart,
        shipping_address: Dict[str, str],
        payment_method: Dict[str, str],
        customer_email: str = "",
    ) -> Order:
        now = self._clock()
        order = Order(
            id=str(uuid.uuid4()),
            order_number=self._next_order_number(now),
            items=[
                {
                    "productId": item.product.id,
                    "name": item.product.name,
                    "price": item.product.price,
                    "image": item.product.images[0] if item.product.images else None,
                    "quantity": item.quantity,
                    "size": item.size,
                    "color": item.color,
                }
                for item in cart.items
            ],
            subtotal=round(cart.subtotal, 2),
            shipping=cart.shipping,
            tax=cart.tax,
            total=cart.total,
            shipping_address=dict(shipping_address),
            payment_method=dict(payment_method),
            customer_email=customer_email,
            created_at=now,
            updated_at=now,
        )
        self._orders[order.id] = order
        logger.info("Created order %s (%d items, total=%s)", order.order_number, len(order.items), order.total)
        return order

    def list_orders(self) -> List[Order]:
        """Newest first."""
        return sorted(self._orders.values(), key=lambda o: o.created_at, reverse=True)

    def get_order(self, order_id: str) -> Optional[Order]:
        return self._orders.get(order_id)

    def find_by_number(self, order_number: str) -> Optional[Order]:
        wanted = (order_number or "").strip().upper()
        for order in self._orders.values():
            if order.order_number == wanted:
                return order
        return None

    def update_status(self, order_id: str, status: Any) -> Order:
        order = self._orders.get(order_id)
        if order is None:
            raise KeyError(order_id)
        order.status = OrderStatus(status)
        order.updated_at = self._clock()
        return order
