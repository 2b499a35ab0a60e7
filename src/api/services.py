"""
Service wiring for the API: one instance of each collaborator per process.

Mock vs real integrations are selected here only (see `_should_use_real_integrations`).
Endpoints receive the instances through the `get_*` dependencies, which tests
can replace with `app.dependency_overrides`.
"""

import logging
import os
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from src.chatbot.session import DialogueSession, create_dialogue_session
from src.chatbot.state_manager import StateManager
from src.integrations.clients.mocks.local_product_catalogues import LocalProductCatalogueClient
from src.integrations.clients.mocks.newsletter import MockNewsletterClient
from src.integrations.clients.real_http.brevo_newsletter import BrevoNewsletterClient
from src.integrations.contracts.interfaces import NewsletterClient
from src.storefront.cart import Cart
from src.storefront.checkout import CheckoutWizard
from src.storefront.orders import OrderStore
from src.storefront.reviews import ReviewBoard
from src.storefront.wishlist import Wishlist
from src.utils.config_loader import StorefrontConfig, load_storefront_config

logger = logging.getLogger(__name__)

CART_TTL_SECONDS = 86400


def _should_use_real_integrations() -> bool:
    mode = os.getenv("INTEGRATIONS_MODE", "").strip().lower()
    if mode in {"real", "live"}:
        return True
    if mode in {"mock", "test"}:
        return False
    return bool(os.getenv("BREVO_API_KEY"))


def build_newsletter_client(config: StorefrontConfig) -> NewsletterClient:
    if _should_use_real_integrations() and os.getenv("BREVO_API_KEY"):
        logger.info("Using Brevo newsletter client")
        return BrevoNewsletterClient(
            list_id=config.newsletter.list_id,
            chatbot_list_id=config.newsletter.chatbot_list_id,
            timeout_seconds=config.newsletter.timeout_seconds,
        )
    logger.info("Using mock newsletter client")
    return MockNewsletterClient()


def build_cache():
    if os.getenv("REDIS_URL"):
        from src.database.redis_real import RedisCache

        return RedisCache(url=os.environ["REDIS_URL"])

    from src.database.redis import RedisCache

    return RedisCache()


class ShopperSessions:
    """Carts, checkout wizards and wishlists keyed by the browser's shopper id (in memory).

    Entries untouched for longer than `ttl_seconds` are dropped on the next access.
    """

    def __init__(self, ttl_seconds: int = CART_TTL_SECONDS, clock: Optional[Callable[[], datetime]] = None) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self._carts: Dict[str, Cart] = {}
        self._checkouts: Dict[str, CheckoutWizard] = {}
        self._wishlists: Dict[str, Wishlist] = {}
        self._last_seen: Dict[str, datetime] = {}

    def shopper_ids(self) -> List[str]:
        return list(self._last_seen)

    def cart(self, cart_id: str) -> Cart:
        self._touch(cart_id)
        if cart_id not in self._carts:
            self._carts[cart_id] = Cart(cart_id)
        return self._carts[cart_id]

    def checkout(self, cart_id: str, restart_completed: bool = False) -> CheckoutWizard:
        """Wizard for this cart; a completed one is replaced only when `restart_completed` is set."""
        self._touch(cart_id)
        wizard = self._checkouts.get(cart_id)
        if wizard is None or (restart_completed and wizard.completed):
            wizard = self._checkouts[cart_id] = CheckoutWizard()
        return wizard

    def wishlist(self, wishlist_id: str) -> Wishlist:
        self._touch(wishlist_id)
        if wishlist_id not in self._wishlists:
            self._wishlists[wishlist_id] = Wishlist(wishlist_id)
        return self._wishlists[wishlist_id]

    def expire_idle(self) -> int:
        now = self._clock()
        idle = [sid for sid, seen in self._last_seen.items() if (now - seen).total_seconds() > self.ttl_seconds]
        for shopper_id in idle:
            self._last_seen.pop(shopper_id, None)
            self._carts.pop(shopper_id, None)
            self._checkouts.pop(shopper_id, None)
            self._wishlists.pop(shopper_id, None)
        if idle:
            logger.info("Expired %d idle shopper session(s)", len(idle))
        return len(idle)

    def _touch(self, shopper_id: str) -> None:
        self.expire_idle()
        self._last_seen[shopper_id] = self._clock()


config = load_storefront_config()
redis_cache = build_cache()
catalogue_client = LocalProductCatalogueClient(data_dir=config.catalog_dir())
newsletter_client = build_newsletter_client(config)
order_store = OrderStore()
review_board = ReviewBoard()
shopper_sessions = ShopperSessions()


def _new_dialogue_session() -> DialogueSession:
    return create_dialogue_session(
        newsletter_client,
        typing_delay_seconds=config.chat.typing_delay_seconds,
        whatsapp_number=config.chat.whatsapp_number,
        order_store=order_store,
    )


state_manager = StateManager(redis_cache, _new_dialogue_session)


def get_config() -> StorefrontConfig:
    return config


def get_cache():
    """Dependency for the session cache"""
    return redis_cache


def get_catalogue():
    return catalogue_client


def get_newsletter_client() -> NewsletterClient:
    return newsletter_client


def get_order_store() -> OrderStore:
    return order_store


def get_review_board() -> ReviewBoard:
    return review_board


def get_shopper_sessions() -> ShopperSessions:
    return shopper_sessions


def get_state_manager() -> StateManager:
    """Dependency for chat sessions"""
    return state_manager
