"""Pytest fixtures for catalogue, chat and storefront tests."""

import os
import sys
from datetime import datetime, timezone

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

import pytest  # noqa: E402

from src.chatbot.session import create_dialogue_session  # noqa: E402
from src.integrations.clients.mocks.local_product_catalogues import LocalProductCatalogueClient  # noqa: E402
from src.integrations.contracts.interfaces import NewsletterClient, SubscriptionResult  # noqa: E402


class DummyNewsletter(NewsletterClient):
    """Records subscribe calls and returns a canned result (or raises)."""

    def __init__(self, result=None, error=None):
        self.result = result or SubscriptionResult(success=True, message="ok", is_new_subscription=True)
        self.error = error
        self.calls = []

    async def subscribe(self, request):
        self.calls.append(request)
        if self.error is not None:
            raise self.error
        return self.result

    async def unsubscribe(self, email):
        return SubscriptionResult(success=True, message="bye")


class RecordingNavigator:
    def __init__(self):
        self.navigations = []
        self.external = []

    def navigate_to(self, path):
        self.navigations.append(path)

    def open_external(self, url):
        self.external.append(url)


class FixedClock:
    def __init__(self, now=None):
        self.now = now or datetime(2025, 3, 14, 12, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now


@pytest.fixture
def catalogue():
    """Bundled JSON catalogue."""
    return LocalProductCatalogueClient()


@pytest.fixture
def products(catalogue):
    return catalogue.list_products()


@pytest.fixture
def newsletter():
    return DummyNewsletter()


@pytest.fixture
def newsletter_factory():
    """Build a DummyNewsletter with a canned result or error."""
    return DummyNewsletter


@pytest.fixture
def navigator():
    return RecordingNavigator()


@pytest.fixture
def clock():
    return FixedClock()


@pytest.fixture
def make_session(newsletter, navigator):
    """Dialogue session with no typing delay, wired to the dummy collaborators."""

    def _make(client=None, **kwargs):
        return create_dialogue_session(client or newsletter, typing_delay_seconds=0, navigator=navigator, **kwargs)

    return _make
