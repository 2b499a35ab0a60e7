from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from src.api.services import get_state_manager
from src.chatbot.messages import Message
from src.chatbot.session import DialogueSession
from src.chatbot.state_manager import StateManager

api = APIRouter()
chat_api = api


class ChatActionRequest(BaseModel):
    """Button click from the widget."""

    action: str
    value: Optional[str] = None


class ChatTextRequest(BaseModel):
    text: str


class VisibilityRequest(BaseModel):
    visible: bool


def _turn_response(session: DialogueSession, messages: List[Message]) -> Dict[str, Any]:
    return {
        "session_id": session.session_id,
        "messages": [m.to_dict() for m in messages],
        "effects": session.drain_effects(),
        "context": session.context.to_dict(),
    }


@api.post("/chat/session", tags=["Chat"])
async def create_chat_session(state_manager: StateManager = Depends(get_state_manager)):
    session = await state_manager.create_session()
    return {"session_id": session.session_id, "messages": session.transcript.to_list()}


@api.get("/chat/{session_id}", tags=["Chat"])
async def get_chat_session(session_id: str, state_manager: StateManager = Depends(get_state_manager)):
    session = await state_manager.get_session(session_id)
    return session.to_dict()


@api.post("/chat/{session_id}/action", tags=["Chat"])
async def send_chat_action(session_id: str, body: ChatActionRequest, state_manager: StateManager = Depends(get_state_manager)):
    session = await state_manager.get_session(session_id)
    messages = await session.click(body.action, body.value)
    state_manager.sync(session)
    return _turn_response(session, messages)


@api.post("/chat/{session_id}/message", tags=["Chat"])
async def send_chat_text(session_id: str, body: ChatTextRequest, state_manager: StateManager = Depends(get_state_manager)):
    session = await state_manager.get_session(session_id)
    messages = await session.submit_text(body.text)
    state_manager.sync(session)
    return _turn_response(session, messages)


@api.post("/chat/{session_id}/visibility", tags=["Chat"])
async def set_chat_visibility(session_id: str, body: VisibilityRequest, state_manager: StateManager = Depends(get_state_manager)):
    session = await state_manager.get_session(session_id)
    if body.visible:
        session.show()
    else:
        session.hide()
    return {"session_id": session_id, "visible": session.visible, "reply_pending": session.reply_pending}


@api.delete("/chat/{session_id}", tags=["Chat"])
async def close_chat_session(session_id: str, state_manager: StateManager = Depends(get_state_manager)):
    await state_manager.end_session(session_id)
    return {"message": "Session ended successfully"}
