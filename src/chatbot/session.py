"""
A single chat widget session: transcript, context and the pending bot reply.

Only one bot reply may be outstanding at a time; input received meanwhile is
rejected with `ReplyPendingError` so the transcript order always matches the
order of user input. Hiding the widget never cancels a pending reply, closing
the session does.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime
from typing import Any, Awaitable, Callable, Dict, List, Optional

from src.chatbot.actions import DialogueContext, TransitionRequest
from src.chatbot.messages import BotReply, Message, Sender, Transcript
from src.chatbot.navigation import ClientNavigator, EffectRecorder
from src.chatbot.flows.router import DialogueRouter
from src.chatbot.scheduler import ReplyScheduler
from src.integrations.contracts.interfaces import NewsletterClient

logger = logging.getLogger(__name__)


class ReplyPendingError(RuntimeError):
    """Raised when input arrives while the bot is still typing."""


class SessionClosedError(RuntimeError):
    pass


class DialogueSession:
    def __init__(
        self,
        router: DialogueRouter,
        scheduler: ReplyScheduler,
        navigator: ClientNavigator,
        session_id: Optional[str] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ) -> None:
        self.session_id = session_id or str(uuid.uuid4())
        self.router = router
        self.scheduler = scheduler
        self.navigator = navigator
        self.context = DialogueContext()
        self.transcript = Transcript(clock)
        self.visible = True
        self._busy = False
        self._closed = False
        self.transcript.append_reply(router.welcome())

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def reply_pending(self) -> bool:
        return self._busy or self.scheduler.pending

    def show(self) -> None:
        self.visible = True

    def hide(self) -> None:
        self.visible = False

    async def click(self, action: Any, value: Any = None) -> List[Message]:
        request = TransitionRequest.parse(action, value)
        self._begin()
        return await self._respond(len(self.transcript), lambda: self.router.dispatch(request, self.context))

    async def submit_text(self, text: str) -> List[Message]:
        text = (text or "").strip()
        if not text:
            return []
        self._begin()
        start = len(self.transcript)
        self.transcript.append(Sender.USER, text)
        return await self._respond(start, lambda: self.router.handle_text(text, self.context))

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        cancelled = await self.scheduler.cancel_all()
        logger.info("Dialogue session %s closed (cancelled replies=%d)", self.session_id, cancelled)

    def drain_effects(self) -> List[Dict[str, str]]:
        if isinstance(self.navigator, EffectRecorder):
            return self.navigator.drain()
        return []

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "visible": self.visible,
            "reply_pending": self.reply_pending,
            "context": self.context.to_dict(),
            "messages": self.transcript.to_list(),
        }

    def _begin(self) -> None:
        if self._closed:
            raise SessionClosedError(f"Dialogue session {self.session_id} is closed")
        if self.reply_pending:
            raise ReplyPendingError("Please wait for the current reply before sending another message")
        self._busy = True

    async def _respond(self, start: int, produce: Callable[[], Awaitable[Optional[BotReply]]]) -> List[Message]:
        try:
            reply = await produce()
            if reply is not None and not self._closed:
                task = self.scheduler.schedule(lambda: self.transcript.append_reply(reply))
                try:
                    await task
                except asyncio.CancelledError:
                    if not self._closed:
                        raise
                    logger.info("Pending reply dropped for closed session %s", self.session_id)
        finally:
            self._busy = False
        return self.transcript.since(start)


def create_dialogue_session(
    newsletter_client: NewsletterClient,
    typing_delay_seconds: float = 1.0,
    whatsapp_number: Optional[str] = None,
    order_store=None,
    navigator: Optional[ClientNavigator] = None,
    clock: Optional[Callable[[], datetime]] = None,
    session_id: Optional[str] = None,
) -> DialogueSession:
    navigator = navigator if navigator is not None else EffectRecorder()
    kwargs: Dict[str, Any] = {"order_store": order_store}
    if whatsapp_number:
        kwargs["whatsapp_number"] = whatsapp_number
    router = DialogueRouter(newsletter_client, navigator, **kwargs)
    return DialogueSession(
        router,
        ReplyScheduler(typing_delay_seconds),
        navigator,
        session_id=session_id,
        clock=clock,
    )
