"""
Product guidance flow - Pick a gender, then a category, then jump to the collection page.

The category buttons are a fixed lookup per gender; they are not derived from catalog data.
"""

import logging
import re
from typing import Dict, Optional, Tuple

from src.chatbot.actions import Action, DialogueContext, Flow, TransitionRequest
from src.chatbot.flows.menu import BACK
from src.chatbot.messages import BotReply, Button
from src.chatbot.navigation import ClientNavigator

logger = logging.getLogger(__name__)

CATEGORIES_BY_GENDER: Dict[str, Tuple[str, ...]] = {
    "women": ("Lipstick", "Handbag", "Dress", "Shoes", "Jewelry"),
    "men": ("Shirt", "Pants", "Shoes", "Wallet", "Watch"),
}

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    return _NON_ALNUM.sub("-", (value or "").lower()).strip("-")


def collection_path(gender: str, category: str) -> str:
    return f"/{slugify(gender)}/{slugify(category)}"


def gender_buttons() -> Tuple[Button, ...]:
    return (
        Button("Women", Action.SELECT_GENDER, "women"),
        Button("Men", Action.SELECT_GENDER, "men"),
        BACK,
    )


def category_buttons(gender: str) -> Tuple[Button, ...]:
    categories = CATEGORIES_BY_GENDER[gender]
    return tuple(Button(name, Action.SELECT_CATEGORY, name) for name in categories) + (BACK,)


class ProductGuidanceFlow:
    def __init__(self, navigator: ClientNavigator):
        self.navigator = navigator

    def _ask_gender(self, context: DialogueContext, text: str) -> BotReply:
        context.current_flow = Flow.PRODUCT_GUIDANCE
        context.selected_gender = ""
        context.selected_category = ""
        return BotReply(text, gender_buttons())

    async def start(self, request: TransitionRequest, context: DialogueContext) -> Optional[BotReply]:
        return self._ask_gender(
            context,
            "🛍️ Let's find something special for you.\n\nWhich collection would you like to explore?",
        )

    async def select_gender(self, request: TransitionRequest, context: DialogueContext) -> Optional[BotReply]:
        gender = (request.value or "").lower()
        if gender not in CATEGORIES_BY_GENDER:
            logger.info("[ProductGuidance] Unknown gender value: %r", request.value)
            return BotReply("Please choose one of the collections below.", gender_buttons())

        context.selected_gender = gender
        context.selected_category = ""
        context.current_flow = Flow.GENDER_SELECTED
        label = "women's" if gender == "women" else "men's"
        return BotReply(f"Wonderful choice. Which category of our {label} collection interests you?", category_buttons(gender))

    async def select_category(self, request: TransitionRequest, context: DialogueContext) -> Optional[BotReply]:
        gender = context.selected_gender
        if gender not in CATEGORIES_BY_GENDER:
            return self._ask_gender(context, "Let's start with a collection. Which one would you like to explore?")

        wanted = (request.value or "").casefold()
        category = next((name for name in CATEGORIES_BY_GENDER[gender] if name.casefold() == wanted), None)
        if category is None:
            return BotReply("Please choose one of the categories below.", category_buttons(gender))

        context.selected_category = category
        context.current_flow = Flow.CATEGORY_SELECTED
        return BotReply(
            f"✨ Our {category} bestsellers are waiting for you. Would you like to view the collection?",
            (Button("View collection", Action.REDIRECT_TO_COLLECTION), BACK),
        )

    async def redirect_to_collection(self, request: TransitionRequest, context: DialogueContext) -> Optional[BotReply]:
        if not (context.selected_gender and context.selected_category):
            return self._ask_gender(context, "Let's pick a collection first. Which one would you like to explore?")
        self.navigator.navigate_to(collection_path(context.selected_gender, context.selected_category))
        return None
