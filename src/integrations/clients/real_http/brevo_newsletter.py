"""
Brevo Newsletter HTTP Client.

Used when BREVO_API_KEY is configured. Talks to the Brevo contacts API:
- GET    /contacts/{email}   existence check (404 means not registered)
- POST   /contacts           add the contact to the newsletter list
- DELETE /contacts/{email}   unsubscribe
"""

from __future__ import annotations

import logging
import os
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional
from urllib.parse import quote

import httpx

from src.integrations.contracts.interfaces import NewsletterClient, SubscriptionRequest, SubscriptionResult
from src.integrations.contracts.newsletter import already_registered
from src.integrations.policy.response_wrappers import (
    IntegrationResponseError,
    normalize_contact_response,
    normalize_created_contact,
)

logger = logging.getLogger(__name__)

DEFAULT_BREVO_API_URL = "https://api.brevo.com/v3"


class BrevoNewsletterClient(NewsletterClient):
    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        list_id: Optional[int] = None,
        chatbot_list_id: Optional[int] = None,
        timeout_seconds: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.api_key = api_key or os.getenv("BREVO_API_KEY", "")
        self.base_url = (base_url or os.getenv("BREVO_API_URL", DEFAULT_BREVO_API_URL)).rstrip("/")
        self.list_id = list_id if list_id is not None else int(os.getenv("BREVO_LIST_ID", "1"))
        self.chatbot_list_id = chatbot_list_id if chatbot_list_id is not None else int(os.getenv("BREVO_CHATBOT_LIST_ID", "2"))
        self.timeout_seconds = timeout_seconds
        self._transport = transport
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _headers(self) -> Dict[str, str]:
        return {
            "api-key": self.api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=self.timeout_seconds,
            transport=self._transport,
        )

    def _list_for(self, request: SubscriptionRequest) -> int:
        if request.list_id is not None:
            return request.list_id
        return self.chatbot_list_id if request.source == "chatbot" else self.list_id

    def _contact_payload(self, request: SubscriptionRequest) -> Dict[str, Any]:
        return {
            "email": request.email.strip(),
            "attributes": {
                "FIRSTNAME": request.first_name or "",
                "LASTNAME": request.last_name or "",
                "SOURCE": request.source or "website",
                "CONSENT": "true" if request.consent else "false",
                "SUBSCRIBED_AT": self._clock().isoformat(),
            },
            "listIds": [self._list_for(request)],
            "updateEnabled": False,
        }

    async def subscribe(self, request: SubscriptionRequest) -> SubscriptionResult:
        if not self.api_key:
            raise ValueError("BREVO_API_KEY is not configured.")

        email = request.email.strip()
        try:
            async with self._client() as client:
                lookup = await client.get(f"/contacts/{quote(email, safe='@')}")
                if lookup.status_code == 200:
                    contact = normalize_contact_response(lookup.json(), fallback_email=email)
                    logger.info("Newsletter contact already registered: %s", contact.email)
                    return already_registered()
                if lookup.status_code != 404:
                    logger.error("Brevo contact lookup failed: status=%s body=%s", lookup.status_code, lookup.text[:200])
                    return SubscriptionResult(success=False, message="Failed to check contact status")

                response = await client.post("/contacts", json=self._contact_payload(request))
        except (httpx.HTTPError, ValueError) as exc:
            logger.error("Brevo subscribe request failed: %s", exc)
            return SubscriptionResult(success=False, message="Failed to add contact to newsletter")

        if response.status_code == 400:
            return SubscriptionResult(success=False, message="Invalid email address or contact already exists")
        if response.status_code == 401:
            return SubscriptionResult(success=False, message="Newsletter service authentication failed")
        if response.status_code >= 300:
            logger.error("Brevo contact creation failed: status=%s body=%s", response.status_code, response.text[:200])
            return SubscriptionResult(success=False, message="Failed to add contact to newsletter")

        try:
            created = normalize_created_contact(response.json() if response.content else {})
        except (ValueError, IntegrationResponseError) as exc:
            logger.warning("Unexpected Brevo create-contact payload: %s", exc)
            created = None

        logger.info("Newsletter subscription: %s from %s", email, request.source)
        return SubscriptionResult(
            success=True,
            message="Successfully subscribed to newsletter",
            is_new_subscription=True,
            metadata={"contact_id": created.contact_id if created else None},
        )

    async def unsubscribe(self, email: str) -> SubscriptionResult:
        if not self.api_key:
            raise ValueError("BREVO_API_KEY is not configured.")
        try:
            async with self._client() as client:
                response = await client.delete(f"/contacts/{quote(email.strip(), safe='@')}")
        except httpx.HTTPError as exc:
            logger.error("Brevo unsubscribe request failed: %s", exc)
            return SubscriptionResult(success=False, message="Failed to remove contact from newsletter")

        if response.status_code == 404:
            return SubscriptionResult(success=False, message="Email not found in newsletter list")
        if response.status_code >= 300:
            return SubscriptionResult(success=False, message="Failed to remove contact from newsletter")
        logger.info("Newsletter unsubscription: %s", email)
        return SubscriptionResult(success=True, message="Successfully unsubscribed from newsletter")
