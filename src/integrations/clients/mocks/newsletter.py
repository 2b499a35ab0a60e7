"""
Newsletter: MOCK client.

⚠️  This is a mock implementation for development and testing.
    It keeps subscribers in memory and never calls the newsletter provider.
    Swap to clients/real_http/brevo_newsletter.py by setting BREVO_API_KEY
    (see src/api/services.py).

Failure scenarios can be forced through the constructor so the chatbot's
error paths can be exercised end-to-end.
"""

import logging
from typing import Dict, Iterable, List, Optional

from src.integrations.contracts.interfaces import NewsletterClient, SubscriptionRequest, SubscriptionResult
from src.integrations.contracts.newsletter import already_registered

logger = logging.getLogger(__name__)


class MockNewsletterClient(NewsletterClient):
    def __init__(self, existing_emails: Optional[Iterable[str]] = None, fail_subscribe: bool = False) -> None:
        self._subscribers: Dict[str, SubscriptionRequest] = {}
        for email in existing_emails or []:
            self._subscribers[email.strip().lower()] = SubscriptionRequest(email=email, source="seed")
        self.fail_subscribe = fail_subscribe
        self.calls: List[SubscriptionRequest] = []

    @property
    def subscribers(self) -> List[str]:
        return sorted(self._subscribers)

    async def subscribe(self, request: SubscriptionRequest) -> SubscriptionResult:
        self.calls.append(request)
        key = request.email.strip().lower()

        if self.fail_subscribe:
            logger.info("[MOCK] Subscribe failure forced for %s", key)
            return SubscriptionResult(success=False, message="Failed to subscribe to newsletter")

        if key in self._subscribers:
            logger.info("[MOCK] %s already subscribed", key)
            return already_registered()

        self._subscribers[key] = request
        logger.info("[MOCK] Newsletter subscription: %s from %s", key, request.source)
        return SubscriptionResult(
            success=True,
            message="Successfully subscribed to newsletter (Test Mode)",
            is_new_subscription=True,
            metadata={"contact_id": f"mock-{len(self._subscribers)}"},
        )

    async def unsubscribe(self, email: str) -> SubscriptionResult:
        key = email.strip().lower()
        if self._subscribers.pop(key, None) is None:
            return SubscriptionResult(success=False, message="Email not found in newsletter list")
        logger.info("[MOCK] Newsletter unsubscription: %s", key)
        return SubscriptionResult(success=True, message="Successfully unsubscribed from newsletter")
