"""
Action tokens, flow states and the session-scoped dialogue context.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Dict, Optional

from src.chatbot.validation import FormValidationError


class Action(str, Enum):
    PRODUCT_GUIDANCE = "product_guidance"
    SELECT_GENDER = "select_gender"
    SELECT_CATEGORY = "select_category"
    REDIRECT_TO_COLLECTION = "redirect_to_collection"
    FAQ = "faq"
    FAQ_RETURNS = "faq_returns"
    FAQ_SHIPPING = "faq_shipping"
    FAQ_PAYMENT = "faq_payment"
    FAQ_CONTACT = "faq_contact"
    FAQ_SIZE = "faq_size"
    NEWSLETTER = "newsletter"
    NEWSLETTER_EMAIL = "newsletter_email"
    ORDER_TRACKING = "order_tracking"
    BACK_TO_MAIN = "back_to_main"
    WHATSAPP = "whatsapp"


class Flow(str, Enum):
    PRODUCT_GUIDANCE = "product_guidance"
    GENDER_SELECTED = "gender_selected"
    CATEGORY_SELECTED = "category_selected"
    FAQ = "faq"
    FAQ_SUBTOPIC = "faq_subtopic"
    NEWSLETTER = "newsletter"
    NEWSLETTER_AWAITING_EMAIL = "newsletter_awaiting_email"
    ORDER_TRACKING = "order_tracking"
    ORDER_TRACKING_AWAITING_ID = "order_tracking_awaiting_id"


NEWSLETTER_FLOWS = frozenset({Flow.NEWSLETTER, Flow.NEWSLETTER_AWAITING_EMAIL})
ORDER_TRACKING_FLOWS = frozenset({Flow.ORDER_TRACKING, Flow.ORDER_TRACKING_AWAITING_ID})


@dataclass(frozen=True)
class TransitionRequest:
    action: Action
    value: Optional[str] = None

    @classmethod
    def parse(cls, action: Any, value: Any = None) -> "TransitionRequest":
        """Build a request from a raw button token, rejecting unknown actions."""
        if isinstance(action, Action):
            token = action
        else:
            try:
                token = Action(str(action or "").strip().lower())
            except ValueError:
                raise FormValidationError(
                    field_errors={"action": f"Unknown action: {action}"},
                    message="Unknown chatbot action",
                ) from None
        cleaned = None if value is None else (str(value).strip() or None)
        return cls(action=token, value=cleaned)


@dataclass
class DialogueContext:
    current_flow: Optional[Flow] = None
    selected_gender: str = ""
    selected_category: str = ""
    user_email: str = ""
    order_id: str = ""

    @property
    def at_root(self) -> bool:
        return self.current_flow is None

    def reset(self) -> None:
        self.current_flow = None
        self.selected_gender = ""
        self.selected_category = ""
        self.user_email = ""
        self.order_id = ""

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["current_flow"] = self.current_flow.value if self.current_flow else None
        return data

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "DialogueContext":
        data = data or {}
        flow = data.get("current_flow")
        return cls(
            current_flow=Flow(flow) if flow else None,
            selected_gender=data.get("selected_gender") or "",
            selected_category=data.get("selected_category") or "",
            user_email=data.get("user_email") or "",
            order_id=data.get("order_id") or "",
        )
