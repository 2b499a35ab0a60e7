"""
Integrations layer.
This package contains all code used to communicate with external systems such as:
- The newsletter / CRM service (Brevo contacts API)
- Product catalogue sources (bundled JSON files today)

Key rule:
- Chatbot flows MUST NOT call external APIs directly.
- Flows should call integration clients (under src/integrations/clients).
- We use MOCK clients during development and swap to REAL_HTTP clients when API keys are available.

Switching implementations:
- The selection of mock vs real clients should happen in ONE place (src/api/services.py).
"""

from .contracts.interfaces import (
    CatalogueClient,
    Gender,
    NewsletterClient,
    Product,
    ProductStatus,
    SubscriptionRequest,
    SubscriptionResult,
)
from .contracts.newsletter import (
    is_valid_email,
    validate_subscription_request,
)
from .contracts.product_catalogues import (
    CatalogPage,
    FilterOptions,
    PriceRange,
    SortDirection,
    SortField,
    SortOptions,
    ValidationResult,
)

__all__ = [
    # interfaces
    "CatalogueClient", "Gender", "NewsletterClient", "Product",
    "ProductStatus", "SubscriptionRequest", "SubscriptionResult",
    # newsletter
    "is_valid_email", "validate_subscription_request",
    # products
    "CatalogPage", "FilterOptions", "PriceRange", "SortDirection",
    "SortField", "SortOptions", "ValidationResult",
]
