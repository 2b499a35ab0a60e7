"""
Dialogue router - Dispatches button actions and free text to the flows.

Every `Action` must have exactly one handler; the table is checked when the
router is built so a new action cannot be silently ignored.
"""

import logging
from typing import Awaitable, Callable, Dict, Optional

from src.chatbot.actions import (
    NEWSLETTER_FLOWS,
    ORDER_TRACKING_FLOWS,
    Action,
    DialogueContext,
    TransitionRequest,
)
from src.chatbot.flows.faq import FaqFlow
from src.chatbot.flows.menu import DEFAULT_WHATSAPP_NUMBER, MenuFlow
from src.chatbot.flows.newsletter import NewsletterFlow
from src.chatbot.flows.order_tracking import OrderTrackingFlow
from src.chatbot.flows.product_guidance import ProductGuidanceFlow
from src.chatbot.messages import BotReply
from src.chatbot.navigation import ClientNavigator
from src.integrations.contracts.interfaces import NewsletterClient

logger = logging.getLogger(__name__)

Handler = Callable[[TransitionRequest, DialogueContext], Awaitable[Optional[BotReply]]]


class DialogueRouter:
    def __init__(
        self,
        newsletter_client: NewsletterClient,
        navigator: ClientNavigator,
        whatsapp_number: str = DEFAULT_WHATSAPP_NUMBER,
        order_store=None,
    ):
        self.menu = MenuFlow(navigator, whatsapp_number)
        self.product_guidance = ProductGuidanceFlow(navigator)
        self.faq = FaqFlow(navigator)
        self.newsletter = NewsletterFlow(newsletter_client)
        self.order_tracking = OrderTrackingFlow(order_store)

        self.handlers: Dict[Action, Handler] = {
            Action.PRODUCT_GUIDANCE: self.product_guidance.start,
            Action.SELECT_GENDER: self.product_guidance.select_gender,
            Action.SELECT_CATEGORY: self.product_guidance.select_category,
            Action.REDIRECT_TO_COLLECTION: self.product_guidance.redirect_to_collection,
            Action.FAQ: self.faq.start,
            Action.FAQ_RETURNS: self.faq.answer,
            Action.FAQ_SHIPPING: self.faq.answer,
            Action.FAQ_PAYMENT: self.faq.answer,
            Action.FAQ_CONTACT: self.faq.answer,
            Action.FAQ_SIZE: self.faq.size_guide,
            Action.NEWSLETTER: self.newsletter.start,
            Action.NEWSLETTER_EMAIL: self.newsletter.ask_email,
            Action.ORDER_TRACKING: self.order_tracking.start,
            Action.BACK_TO_MAIN: self.menu.back_to_main,
            Action.WHATSAPP: self.menu.whatsapp,
        }
        missing = [action.value for action in Action if action not in self.handlers]
        if missing:
            raise RuntimeError(f"No dialogue handler registered for: {', '.join(missing)}")

    def welcome(self) -> BotReply:
        return self.menu.welcome()

    async def dispatch(self, request: TransitionRequest, context: DialogueContext) -> Optional[BotReply]:
        logger.info(
            "[Dialogue] action=%s value=%s flow=%s",
            request.action.value,
            request.value,
            context.current_flow.value if context.current_flow else "root",
        )
        return await self.handlers[request.action](request, context)

    async def handle_text(self, text: str, context: DialogueContext) -> BotReply:
        """Interpret free text purely by the current flow."""
        flow = context.current_flow
        if flow in NEWSLETTER_FLOWS:
            return await self.newsletter.submit_email(text, context)
        if flow in ORDER_TRACKING_FLOWS:
            return await self.order_tracking.submit_order_id(text, context)
        logger.info("[Dialogue] Free text outside an input flow (flow=%s)", flow.value if flow else "root")
        return self.menu.fallback()
