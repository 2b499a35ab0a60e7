"""
Order tracking flow - Ask for an order number or checkout email, then report what the mock order history knows.
"""

from typing import Optional

from src.chatbot.actions import DialogueContext, Flow, TransitionRequest
from src.chatbot.flows.menu import MAIN_MENU, WHATSAPP
from src.chatbot.messages import BotReply
from src.integrations.contracts.newsletter import is_valid_email


class OrderTrackingFlow:
    def __init__(self, order_store=None):
        self.order_store = order_store

    async def start(self, request: TransitionRequest, context: DialogueContext) -> Optional[BotReply]:
        context.current_flow = Flow.ORDER_TRACKING_AWAITING_ID
        context.order_id = ""
        return BotReply("📦 Please enter your order number (e.g. ORD-1712345678901) or the email used at checkout.")

    async def submit_order_id(self, text: str, context: DialogueContext) -> BotReply:
        order_id = (text or "").strip()
        context.order_id = order_id
        context.current_flow = Flow.ORDER_TRACKING

        if self.order_store is not None and is_valid_email(order_id):
            return BotReply(self._orders_for_email(order_id), (MAIN_MENU, WHATSAPP))

        order = self.order_store.find_by_number(order_id) if self.order_store is not None else None
        if order is not None:
            text = (
                f"Order {order.order_number} is currently {order.status.value}.\n"
                f"Payment status: {order.payment_status.value}."
            )
        else:
            text = (
                f"Thanks! We're looking up order {order_id}. "
                "Our team will share the latest status with you shortly, or reach us on WhatsApp for a faster update."
            )
        return BotReply(text, (MAIN_MENU, WHATSAPP))

    def _orders_for_email(self, email: str) -> str:
        wanted = email.lower()
        # newest first
        orders = [o for o in self.order_store.list_orders() if o.customer_email.lower() == wanted]
        if not orders:
            return (
                f"We couldn't find any orders for {email}. "
                "Please check the address or enter your order number instead."
            )
        lines = [f"{o.order_number}: {o.status.value}" for o in orders]
        return f"We found {len(orders)} order(s) for {email}:\n" + "\n".join(lines)
