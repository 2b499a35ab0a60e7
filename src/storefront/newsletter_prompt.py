"""
Decides whether the newsletter popup may be shown.

The popup is shown at most once per (trigger, source) when `show_once` is set,
and never within 24 hours of a recorded subscription. Flags live in an injected
key/value storage (the session cache) and time comes from an injected clock.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Callable, Optional, Protocol

SUBSCRIBED_KEY = "kolzo-newsletter-subscribed"
SUPPRESSION_WINDOW = timedelta(hours=24)
TRIGGERS = ("exit-intent", "scroll", "time-delay", "manual")


class KeyValueStorage(Protocol):
    def get(self, key: str) -> Optional[str]:
        ...

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        ...


class VisitorStorage:
    """Scopes popup flags to one visitor when the storage is shared (e.g. Redis)."""

    def __init__(self, storage: KeyValueStorage, visitor_id: str):
        self.storage = storage
        self.prefix = f"visitor:{visitor_id}:"

    def get(self, key: str) -> Optional[str]:
        return self.storage.get(self.prefix + key)

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        self.storage.set(self.prefix + key, value, ttl)


def shown_key(trigger: str, source: str) -> str:
    return f"newsletter-popup-shown-{trigger}-{source}"


class NewsletterPromptPolicy:
    def __init__(self, storage: KeyValueStorage, clock: Optional[Callable[[], datetime]] = None, show_once: bool = True):
        self.storage = storage
        self.show_once = show_once
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _now_ms(self) -> int:
        return int(self._clock().timestamp() * 1000)

    def recently_subscribed(self) -> bool:
        raw = self.storage.get(SUBSCRIBED_KEY)
        if not raw:
            return False
        try:
            subscribed_at = int(raw)
        except ValueError:
            return False
        return self._now_ms() - subscribed_at < SUPPRESSION_WINDOW.total_seconds() * 1000

    def should_show(self, trigger: str, source: str = "homepage") -> bool:
        if self.show_once and self.storage.get(shown_key(trigger, source)) == "true":
            return False
        return not self.recently_subscribed()

    def mark_shown(self, trigger: str, source: str = "homepage") -> None:
        if self.show_once:
            self.storage.set(shown_key(trigger, source), "true")

    def record_subscription(self) -> None:
        self.storage.set(SUBSCRIBED_KEY, str(self._now_ms()))
