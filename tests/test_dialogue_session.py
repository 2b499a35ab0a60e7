import asyncio
from datetime import timedelta

import pytest

from src.chatbot.flows.router import DialogueRouter
from src.chatbot.navigation import EffectRecorder
from src.chatbot.scheduler import ReplyScheduler
from src.chatbot.session import (
    DialogueSession,
    ReplyPendingError,
    SessionClosedError,
    create_dialogue_session,
)
from src.chatbot.state_manager import StateManager, UnknownSessionError
from src.database.redis import RedisCache


class GatedSleep:
    """Stands in for asyncio.sleep; the typing delay ends when the test opens the gate."""

    def __init__(self):
        self.gate = asyncio.Event()
        self.delays = []

    async def __call__(self, delay):
        self.delays.append(delay)
        await self.gate.wait()


async def _until(predicate):
    for _ in range(20):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition never became true")


def _gated_session(newsletter, navigator):
    sleep = GatedSleep()
    router = DialogueRouter(newsletter, navigator)
    session = DialogueSession(router, ReplyScheduler(1.5, sleep=sleep), navigator)
    return session, sleep


@pytest.mark.asyncio
async def test_reply_is_delivered_after_typing_delay(newsletter, navigator):
    session, sleep = _gated_session(newsletter, navigator)

    pending = asyncio.create_task(session.click("faq"))
    await _until(lambda: session.reply_pending)
    assert len(session.transcript) == 1

    sleep.gate.set()
    messages = await pending

    assert sleep.delays == [1.5]
    assert [m.id for m in messages] == ["2"]
    assert not session.reply_pending


@pytest.mark.asyncio
async def test_input_while_reply_pending_is_rejected(newsletter, navigator):
    session, sleep = _gated_session(newsletter, navigator)

    pending = asyncio.create_task(session.click("newsletter"))
    await _until(lambda: session.reply_pending)

    with pytest.raises(ReplyPendingError):
        await session.click("faq")
    with pytest.raises(ReplyPendingError):
        await session.submit_text("jane@example.com")
    assert len(session.transcript) == 1

    sleep.gate.set()
    await pending
    assert len(session.transcript) == 2


@pytest.mark.asyncio
async def test_hiding_widget_keeps_pending_reply(newsletter, navigator):
    session, sleep = _gated_session(newsletter, navigator)

    pending = asyncio.create_task(session.click("product_guidance"))
    await _until(lambda: session.reply_pending)
    session.hide()
    assert session.reply_pending

    sleep.gate.set()
    messages = await pending
    assert len(messages) == 1
    assert session.visible is False

    session.show()
    assert session.to_dict()["visible"] is True


@pytest.mark.asyncio
async def test_closing_session_cancels_pending_reply(newsletter, navigator):
    session, _ = _gated_session(newsletter, navigator)

    pending = asyncio.create_task(session.click("product_guidance"))
    await _until(lambda: session.reply_pending)

    await session.aclose()
    messages = await pending

    assert messages == []
    assert len(session.transcript) == 1
    assert session.closed
    assert not session.reply_pending
    with pytest.raises(SessionClosedError):
        await session.click("faq")


@pytest.mark.asyncio
async def test_scheduler_cancel_all_and_validation():
    with pytest.raises(ValueError):
        ReplyScheduler(-1)

    scheduler = ReplyScheduler(0)
    assert await scheduler.cancel_all() == 0
    assert await scheduler.schedule(lambda: "delivered") == "delivered"
    assert not scheduler.pending


@pytest.mark.asyncio
async def test_effects_are_recorded_for_http_clients(newsletter):
    session = create_dialogue_session(newsletter, typing_delay_seconds=0)
    assert isinstance(session.navigator, EffectRecorder)

    await session.click("select_gender", "men")
    await session.click("select_category", "Wallet")
    await session.click("redirect_to_collection")
    await session.click("whatsapp")

    effects = session.drain_effects()
    assert effects[0] == {"type": "navigate", "target": "/men/wallet"}
    assert effects[1]["type"] == "open_external"
    assert session.drain_effects() == []


def test_custom_whatsapp_number_and_session_dict(newsletter, clock):
    session = create_dialogue_session(newsletter, whatsapp_number="15550001111", clock=clock, session_id="abc")
    assert session.router.menu.whatsapp_url().startswith("https://wa.me/15550001111?text=")

    data = session.to_dict()
    assert data["session_id"] == "abc"
    assert data["reply_pending"] is False
    assert data["context"]["current_flow"] is None
    assert data["messages"][0]["timestamp"] == clock.now.isoformat()
    assert len(data["messages"][0]["buttons"]) == 5


@pytest.mark.asyncio
async def test_state_manager_lifecycle(newsletter, navigator):
    cache = RedisCache()
    manager = StateManager(cache, lambda: create_dialogue_session(newsletter, typing_delay_seconds=0, navigator=navigator))

    session = await manager.create_session()
    assert await manager.get_session(session.session_id) is session
    assert manager.get_snapshot(session.session_id)["message_count"] == 1

    await session.click("faq")
    manager.sync(session)
    snapshot = manager.get_snapshot(session.session_id)
    assert snapshot["context"]["current_flow"] == "faq"
    assert snapshot["message_count"] == 2

    await manager.end_session(session.session_id)
    assert session.closed
    assert manager.get_snapshot(session.session_id) is None
    with pytest.raises(UnknownSessionError) as exc:
        await manager.get_session(session.session_id)
    assert str(exc.value) == f"Unknown chat session: {session.session_id}"
    with pytest.raises(UnknownSessionError):
        await manager.end_session(session.session_id)


@pytest.mark.asyncio
async def test_state_manager_close_all(newsletter):
    manager = StateManager(RedisCache(), lambda: create_dialogue_session(newsletter, typing_delay_seconds=0))
    first = await manager.create_session()
    second = await manager.create_session()

    await manager.close_all()

    assert manager.list_sessions() == []
    assert first.closed and second.closed


@pytest.mark.asyncio
async def test_state_manager_expires_idle_sessions(newsletter, clock):
    cache = RedisCache()
    manager = StateManager(
        cache,
        lambda: create_dialogue_session(newsletter, typing_delay_seconds=0),
        ttl_seconds=60,
        clock=clock,
    )
    stale = await manager.create_session()
    clock.now += timedelta(seconds=45)
    active = await manager.create_session()

    clock.now += timedelta(seconds=30)
    assert await manager.get_session(active.session_id) is active

    assert manager.list_sessions() == [active.session_id]
    assert stale.closed
    assert manager.get_snapshot(stale.session_id) is None
    with pytest.raises(UnknownSessionError):
        await manager.get_session(stale.session_id)

    # the lookup above refreshed the active session
    clock.now += timedelta(seconds=50)
    assert await manager.expire_idle() == 0
    clock.now += timedelta(seconds=11)
    assert await manager.expire_idle() == 1
    assert manager.list_sessions() == []
    assert active.closed
