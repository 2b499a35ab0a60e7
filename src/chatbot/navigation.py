"""Client-side effects requested by the dialogue engine (navigation and external links)."""

from __future__ import annotations

from typing import Dict, List, Protocol


class ClientNavigator(Protocol):
    def navigate_to(self, path: str) -> None:
        ...

    def open_external(self, url: str) -> None:
        ...


class EffectRecorder:
    """Navigator used by the HTTP layer: effects are queued and returned to the browser."""

    def __init__(self) -> None:
        self._effects: List[Dict[str, str]] = []

    def navigate_to(self, path: str) -> None:
        self._effects.append({"type": "navigate", "target": path})

    def open_external(self, url: str) -> None:
        self._effects.append({"type": "open_external", "target": url})

    @property
    def effects(self) -> List[Dict[str, str]]:
        return list(self._effects)

    def drain(self) -> List[Dict[str, str]]:
        effects, self._effects = self._effects, []
        return effects
