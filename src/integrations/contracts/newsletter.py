
import re
from typing import List

from .interfaces import SubscriptionRequest, SubscriptionResult

"""
Newsletter contracts.

Defines the request/response structures for the email/CRM newsletter service, e.g.:
- subscribing a visitor (chatbot, popup, footer, checkout)
- unsubscribing a contact

These contracts must be used by both:
- clients/mocks/newsletter.py (in-memory registry for development/testing)
- clients/real_http/brevo_newsletter.py (Brevo contacts API)

Why:
- "Already registered" must reach the chatbot as its own outcome, not as a failure
- Invalid emails are rejected locally and never sent to the provider
"""

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ALLOWED_SOURCES = {"website", "checkout", "popup", "footer", "chatbot", "homepage"}

_EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def is_valid_email(email: str) -> bool:
    """Return True if the value looks like an email address."""
    return bool(_EMAIL_RE.match((email or "").strip()))


def validate_subscription_request(request: SubscriptionRequest) -> List[str]:
    """
    Return a list of validation errors.
    Empty list means the request is valid.
    """
    errors: List[str] = []

    if not is_valid_email(request.email):
        errors.append("Valid email is required")
    if request.source not in ALLOWED_SOURCES:
        errors.append(f"Invalid source '{request.source}'")
    for label, value in (("First name", request.first_name), ("Last name", request.last_name)):
        if value is not None and not 1 <= len(value.strip()) <= 50:
            errors.append(f"{label} must be between 1 and 50 characters")

    return errors


def already_registered(message: str = "This email is already registered for our newsletter") -> SubscriptionResult:
    return SubscriptionResult(success=False, message=message, is_already_registered=True)


__all__ = [
    "ALLOWED_SOURCES",
    "SubscriptionRequest",
    "SubscriptionResult",
    "already_registered",
    "is_valid_email",
    "validate_subscription_request",
]
