"""
Newsletter flow - Show benefits, collect an email address and subscribe it.

Invalid addresses are rejected locally and never reach the newsletter client.
A failing client call never breaks the conversation: it ends in a "try again" reply.
"""

import logging
from typing import Optional

from src.chatbot.actions import Action, DialogueContext, Flow, TransitionRequest
from src.chatbot.flows.menu import BACK, MAIN_MENU
from src.chatbot.messages import BotReply, Button
from src.integrations.contracts.interfaces import NewsletterClient, SubscriptionRequest, SubscriptionResult
from src.integrations.contracts.newsletter import is_valid_email

logger = logging.getLogger(__name__)

CHATBOT_SOURCE = "chatbot"


class NewsletterFlow:
    def __init__(self, client: NewsletterClient):
        self.client = client

    async def start(self, request: TransitionRequest, context: DialogueContext) -> Optional[BotReply]:
        context.current_flow = Flow.NEWSLETTER
        return BotReply(
            "📰 Join the KOLZO Circle\n\n"
            "• First access to new collections\n"
            "• Private sale invitations\n"
            "• Styling notes from our editors",
            (Button("Subscribe with email", Action.NEWSLETTER_EMAIL), BACK),
        )

    async def ask_email(self, request: TransitionRequest, context: DialogueContext) -> Optional[BotReply]:
        context.current_flow = Flow.NEWSLETTER_AWAITING_EMAIL
        return BotReply("Please type your email address below.")

    async def submit_email(self, text: str, context: DialogueContext) -> BotReply:
        email = (text or "").strip()
        if not is_valid_email(email):
            context.current_flow = Flow.NEWSLETTER_AWAITING_EMAIL
            return BotReply("That doesn't look like a valid email address. Please enter a valid email (e.g. name@example.com).")

        result = await self._subscribe(email)
        context.current_flow = None

        if result is not None and result.is_already_registered:
            return BotReply(
                "You're already on our list 💌 Thank you for being part of the KOLZO Circle.",
                (MAIN_MENU,),
            )

        if result is not None and result.success:
            context.user_email = email
            return BotReply(
                "🎉 Welcome to the KOLZO Circle! Look out for our welcome note in your inbox.",
                (MAIN_MENU,),
            )

        context.user_email = ""
        return BotReply(
            "Sorry, we couldn't subscribe you right now. Please try again in a moment.",
            (Button("Try Again", Action.NEWSLETTER_EMAIL), BACK),
        )

    async def _subscribe(self, email: str) -> Optional[SubscriptionResult]:
        try:
            result = await self.client.subscribe(SubscriptionRequest(email=email, source=CHATBOT_SOURCE, consent=True))
        except Exception as exc:
            logger.error("[Newsletter] Subscribe call failed for %s: %s", email, exc, exc_info=True)
            return None
        if not result.success and not result.is_already_registered:
            logger.warning("[Newsletter] Subscribe rejected for %s: %s", email, result.message)
        return result
