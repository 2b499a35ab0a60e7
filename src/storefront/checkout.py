"""
Multi-step checkout wizard: shipping -> payment -> review.

Each step is validated before the wizard advances. Card numbers and CVVs are
never kept: only the last four digits, the cardholder name and the expiry.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from src.chatbot.validation import (
    FormValidationError,
    raise_if_errors,
    require_str,
    validate_card_number,
    validate_cvv,
    validate_email,
    validate_expiry,
    validate_phone,
)
from src.storefront.cart import Cart, CartError
from src.storefront.orders import Order, OrderStore

logger = logging.getLogger(__name__)

STEPS = ("shipping", "payment", "review")

SHIPPING_FIELDS = {
    "first_name": "First name",
    "last_name": "Last name",
    "address": "Address",
    "city": "City",
    "state": "State",
    "zip_code": "ZIP code",
}


class CheckoutWizard:
    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.step_index = 0
        self.shipping: Dict[str, str] = {}
        self.payment: Dict[str, str] = {}
        self.order: Optional[Order] = None

    @property
    def current_step(self) -> str:
        return STEPS[self.step_index]

    @property
    def completed(self) -> bool:
        return self.order is not None

    def submit_step(self, data: Dict[str, Any]) -> str:
        """Validate and store the current step, then advance. Returns the new step name."""
        payload = data if isinstance(data, dict) else {}
        step = self.current_step
        if step == "shipping":
            self.shipping = self._validate_shipping(payload)
        elif step == "payment":
            self.payment = self._validate_payment(payload)
        else:
            raise FormValidationError(
                field_errors={"step": "Confirm the review step by placing the order"},
                message="Nothing to submit on the review step",
            )
        self.step_index = min(self.step_index + 1, len(STEPS) - 1)
        return self.current_step

    def back(self) -> str:
        self.step_index = max(self.step_index - 1, 0)
        return self.current_step

    def place_order(self, cart: Cart, order_store: OrderStore) -> Order:
        if self.completed:
            raise FormValidationError(field_errors={"step": "Order already placed"}, message="Order already placed")
        if self.current_step != "review":
            raise FormValidationError(
                field_errors={"step": f"Complete the {self.current_step} step first"},
                message="Checkout is not ready for review",
            )
        result = cart.validate()
        if not result.is_valid:
            raise CartError("; ".join(result.errors))

        address = {k: v for k, v in self.shipping.items() if k not in ("email", "phone")}
        self.order = order_store.create_order(
            cart,
            shipping_address=address,
            payment_method={"type": "card", **self.payment},
            customer_email=self.shipping.get("email", ""),
        )
        cart.clear()
        logger.info("Checkout completed for cart %s: %s", cart.cart_id, self.order.order_number)
        return self.order

    def to_dict(self) -> Dict[str, Any]:
        return {
            "step": self.current_step,
            "stepIndex": self.step_index,
            "steps": list(STEPS),
            "shipping": self.shipping,
            "payment": self.payment,
            "order": self.order.to_dict() if self.order else None,
        }

    def _validate_shipping(self, payload: Dict[str, Any]) -> Dict[str, str]:
        errors: Dict[str, str] = {}
        cleaned = {field: require_str(payload, field, errors, label=label) for field, label in SHIPPING_FIELDS.items()}
        cleaned["email"] = validate_email(payload.get("email", ""), errors)
        cleaned["phone"] = validate_phone(payload.get("phone", ""), errors)
        raise_if_errors(errors)
        return cleaned

    def _validate_payment(self, payload: Dict[str, Any]) -> Dict[str, str]:
        errors: Dict[str, str] = {}
        digits = validate_card_number(payload.get("card_number", ""), errors)
        card_name = require_str(payload, "card_name", errors, label="Name on card")
        expiry = validate_expiry(payload.get("expiry", ""), errors, today=self._clock().date())
        validate_cvv(payload.get("cvv", ""), errors)
        raise_if_errors(errors)
        return {"card_name": card_name, "last_four": digits[-4:], "expiry": expiry}
