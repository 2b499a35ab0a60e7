"""
FAQ flow - Static policy answers. The size guide is a page, so it navigates instead of replying.
"""

from typing import Dict, Optional

from src.chatbot.actions import Action, DialogueContext, Flow, TransitionRequest
from src.chatbot.flows.menu import BACK
from src.chatbot.messages import BotReply, Button
from src.chatbot.navigation import ClientNavigator

SIZE_GUIDE_PATH = "/size-guide"

FAQ_ANSWERS: Dict[Action, str] = {
    Action.FAQ_RETURNS: (
        "📦 Returns & Exchanges\n\n"
        "Unworn items with their original tags can be returned or exchanged within 14 days of delivery. "
        "Refunds are issued to the original payment method once the item has been inspected."
    ),
    Action.FAQ_SHIPPING: (
        "🚚 Shipping & Delivery\n\n"
        "Orders are dispatched within 2 business days and delivered in 3-7 business days. "
        "Shipping is complimentary on orders above the free-shipping threshold."
    ),
    Action.FAQ_PAYMENT: (
        "💳 Payment Methods\n\n"
        "We accept all major credit and debit cards, UPI and net banking. "
        "Card details are never stored on our servers."
    ),
    Action.FAQ_CONTACT: (
        "📞 Contact Support\n\n"
        "Our concierge team is available Monday to Saturday, 10am to 7pm IST, "
        "by email at care@kolzo.in or on WhatsApp."
    ),
}


class FaqFlow:
    def __init__(self, navigator: ClientNavigator):
        self.navigator = navigator

    async def start(self, request: TransitionRequest, context: DialogueContext) -> Optional[BotReply]:
        context.current_flow = Flow.FAQ
        return BotReply(
            "❓ Frequently Asked Questions\n\nChoose a topic below:",
            (
                Button("Returns & Exchanges", Action.FAQ_RETURNS),
                Button("Shipping & Delivery", Action.FAQ_SHIPPING),
                Button("Payment Methods", Action.FAQ_PAYMENT),
                Button("Size Guide", Action.FAQ_SIZE),
                Button("Contact Support", Action.FAQ_CONTACT),
                BACK,
            ),
        )

    async def answer(self, request: TransitionRequest, context: DialogueContext) -> Optional[BotReply]:
        context.current_flow = Flow.FAQ_SUBTOPIC
        return BotReply(FAQ_ANSWERS[request.action], (Button("More FAQs", Action.FAQ), BACK))

    async def size_guide(self, request: TransitionRequest, context: DialogueContext) -> Optional[BotReply]:
        self.navigator.navigate_to(SIZE_GUIDE_PATH)
        return None
