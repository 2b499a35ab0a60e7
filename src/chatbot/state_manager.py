"""
Session and state management for the chat widget
"""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from src.chatbot.session import DialogueSession

logger = logging.getLogger(__name__)

SESSION_TTL_SECONDS = 1800


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UnknownSessionError(KeyError):
    """Raised when a session id is not (or no longer) known."""

    def __init__(self, session_id: str):
        super().__init__(session_id)
        self.session_id = session_id

    def __str__(self) -> str:
        return f"Unknown chat session: {self.session_id}"


class StateManager:
    def __init__(
        self,
        redis_cache,
        session_factory: Callable[[], DialogueSession],
        ttl_seconds: int = SESSION_TTL_SECONDS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.redis = redis_cache
        self._factory = session_factory
        self.ttl_seconds = ttl_seconds
        self._clock = clock or _utcnow
        # Live sessions own asyncio tasks, so they stay in this process; the
        # cache only holds a snapshot of their context.
        self._sessions: Dict[str, DialogueSession] = {}
        self._last_seen: Dict[str, datetime] = {}

    async def create_session(self) -> DialogueSession:
        """Create new session"""
        await self.expire_idle()
        session = self._factory()
        now = self._clock()
        self._sessions[session.session_id] = session
        self._last_seen[session.session_id] = now
        self.redis.set_session(
            session.session_id,
            {
                "session_id": session.session_id,
                "context": session.context.to_dict(),
                "message_count": len(session.transcript),
                "created_at": now.isoformat(),
            },
            ttl=self.ttl_seconds,
        )
        logger.info("Created chat session %s", session.session_id)
        return session

    async def get_session(self, session_id: str) -> DialogueSession:
        await self.expire_idle()
        session = self._sessions.get(session_id)
        if session is None:
            raise UnknownSessionError(session_id)
        self._last_seen[session_id] = self._clock()
        return session

    def get_snapshot(self, session_id: str) -> Optional[Dict[str, Any]]:
        """Cached context snapshot (survives only as long as the cache TTL)."""
        return self.redis.get_session(session_id)

    def sync(self, session: DialogueSession) -> None:
        """Mirror the session context into the cache after each turn."""
        now = self._clock()
        self._last_seen[session.session_id] = now
        self.redis.update_session(
            session.session_id,
            {
                "context": session.context.to_dict(),
                "message_count": len(session.transcript),
                "updated_at": now.isoformat(),
            },
        )

    def list_sessions(self) -> List[str]:
        return list(self._sessions)

    async def expire_idle(self) -> int:
        """Close sessions with no activity for longer than the TTL."""
        now = self._clock()
        idle = [
            session_id
            for session_id, seen in self._last_seen.items()
            if (now - seen).total_seconds() > self.ttl_seconds
        ]
        for session_id in idle:
            await self.end_session(session_id)
        if idle:
            logger.info("Expired %d idle chat session(s)", len(idle))
        return len(idle)

    async def end_session(self, session_id: str) -> None:
        """End session, cancel its pending reply and clean up"""
        session = self._sessions.pop(session_id, None)
        self._last_seen.pop(session_id, None)
        if session is None:
            raise UnknownSessionError(session_id)
        await session.aclose()
        self.redis.delete_session(session_id)

    async def close_all(self) -> None:
        for session_id in list(self._sessions):
            await self.end_session(session_id)
