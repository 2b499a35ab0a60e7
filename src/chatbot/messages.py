"""
Transcript primitives for the storefront chat widget.

Messages are immutable once appended; the transcript is append-only and its
insertion order is the display order.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from itertools import count
from typing import Any, Callable, Dict, Iterator, List, Optional, Sequence, Tuple

from src.chatbot.actions import Action


class Sender(str, Enum):
    USER = "user"
    BOT = "bot"


@dataclass(frozen=True)
class Button:
    label: str
    action: Action
    value: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"label": self.label, "action": self.action.value}
        if self.value is not None:
            data["value"] = self.value
        return data


@dataclass(frozen=True)
class Message:
    id: str
    sender: Sender
    text: str
    timestamp: datetime
    buttons: Tuple[Button, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "sender": self.sender.value,
            "text": self.text,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.buttons:
            data["buttons"] = [b.to_dict() for b in self.buttons]
        return data


@dataclass(frozen=True)
class BotReply:
    """What a flow handler wants the bot to say next."""

    text: str
    buttons: Tuple[Button, ...] = field(default_factory=tuple)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Transcript:
    def __init__(self, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._messages: List[Message] = []
        self._ids = count(1)
        self._clock = clock or _utcnow

    def append(self, sender: Sender, text: str, buttons: Sequence[Button] = ()) -> Message:
        message = Message(
            id=str(next(self._ids)),
            sender=sender,
            text=text,
            timestamp=self._clock(),
            buttons=tuple(buttons),
        )
        self._messages.append(message)
        return message

    def append_reply(self, reply: BotReply) -> Message:
        return self.append(Sender.BOT, reply.text, reply.buttons)

    def since(self, index: int) -> List[Message]:
        return list(self._messages[index:])

    @property
    def last(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    def to_list(self) -> List[Dict[str, Any]]:
        return [m.to_dict() for m in self._messages]

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(list(self._messages))

    def __getitem__(self, index: int) -> Message:
        return self._messages[index]
