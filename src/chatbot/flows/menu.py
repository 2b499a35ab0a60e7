"""
Root menu flow - welcome message, main-menu reset, fallback and WhatsApp hand-off.
"""

from typing import Optional, Tuple
from urllib.parse import quote

from src.chatbot.actions import Action, DialogueContext, TransitionRequest
from src.chatbot.messages import BotReply, Button
from src.chatbot.navigation import ClientNavigator

DEFAULT_WHATSAPP_NUMBER = "919097999898"
WHATSAPP_GREETING = "Hi! I need help with KOLZO."

WELCOME_TEXT = (
    "Welcome to KOLZO 💎\n"
    "Your luxury fashion concierge is here to help!\n\n"
    "What would you like to know about?"
)

BACK = Button("Back", Action.BACK_TO_MAIN)
MAIN_MENU = Button("Main Menu", Action.BACK_TO_MAIN)
WHATSAPP = Button("WhatsApp Support", Action.WHATSAPP)


def root_buttons() -> Tuple[Button, ...]:
    return (
        Button("Product Guidance", Action.PRODUCT_GUIDANCE),
        Button("FAQ & Help", Action.FAQ),
        Button("Newsletter", Action.NEWSLETTER),
        Button("Track Order", Action.ORDER_TRACKING),
        WHATSAPP,
    )


class MenuFlow:
    def __init__(self, navigator: ClientNavigator, whatsapp_number: str = DEFAULT_WHATSAPP_NUMBER):
        self.navigator = navigator
        self.whatsapp_number = whatsapp_number

    def welcome(self) -> BotReply:
        return BotReply(WELCOME_TEXT, root_buttons())

    def whatsapp_url(self, message: str = WHATSAPP_GREETING) -> str:
        return f"https://wa.me/{self.whatsapp_number}?text={quote(message)}"

    def fallback(self) -> BotReply:
        return BotReply(
            "I'm sorry, I didn't quite understand that. Please use the buttons below so I can help you.",
            root_buttons(),
        )

    async def back_to_main(self, request: TransitionRequest, context: DialogueContext) -> Optional[BotReply]:
        context.reset()
        return self.welcome()

    async def whatsapp(self, request: TransitionRequest, context: DialogueContext) -> Optional[BotReply]:
        # Leaves the flow and context untouched.
        self.navigator.open_external(self.whatsapp_url())
        return None
