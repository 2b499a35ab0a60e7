"""
Real Redis-backed cache for production when REDIS_URL is set.
Implements the same interface as src.database.redis (in-memory stub).
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Optional

import redis

logger = logging.getLogger(__name__)


class RedisCache:
    """
    Redis-backed session cache. Use when REDIS_URL is set in production.
    """

    def __init__(self, url: str, default_ttl: int = 1800, client=None) -> None:
        self._client = client if client is not None else redis.from_url(url, decode_responses=True)
        self._default_ttl = default_ttl

    def set_session(self, session_id: str, data: Dict[str, Any], ttl: int = 1800) -> None:
        key = f"session:{session_id}"
        payload = json.dumps(data, default=str)
        self._client.setex(key, ttl or self._default_ttl, payload)

    def get_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        raw = self._client.get(f"session:{session_id}")
        if not raw:
            return None
        try:
            return json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("Discarding corrupt session payload for %s", session_id)
            return None

    def update_session(self, session_id: str, updates: Dict[str, Any]) -> None:
        existing = self.get_session(session_id)
        if not existing:
            return
        existing.update(updates)
        self.set_session(session_id, existing, ttl=self._default_ttl)

    def delete_session(self, session_id: str) -> None:
        self._client.delete(f"session:{session_id}")

    # --- Key/value helpers ----------------------------------------------------

    def get(self, key: str) -> Optional[str]:
        return self._client.get(f"kv:{key}")

    def set(self, key: str, value: str, ttl: Optional[int] = None) -> None:
        if ttl:
            self._client.setex(f"kv:{key}", ttl, str(value))
        else:
            self._client.set(f"kv:{key}", str(value))

    def delete(self, key: str) -> None:
        self._client.delete(f"kv:{key}")

    def ping(self) -> bool:
        try:
            return bool(self._client.ping())
        except redis.RedisError:
            return False
