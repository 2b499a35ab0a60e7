"""
Typing-delay scheduler for bot replies.

Each reply is one asyncio task (sleep, then deliver). Tasks belong to the
dialogue session: `cancel_all` is only called when the session is closed,
never when the widget is hidden.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional, Set, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ReplyScheduler:
    def __init__(self, delay_seconds: float = 1.0, sleep: Optional[Callable[[float], Awaitable[None]]] = None) -> None:
        if delay_seconds < 0:
            raise ValueError("delay_seconds must be >= 0")
        self.delay_seconds = delay_seconds
        self._sleep = sleep or asyncio.sleep
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return any(not task.done() for task in self._tasks)

    def schedule(self, deliver: Callable[[], T]) -> "asyncio.Task[T]":
        async def _run() -> T:
            await self._sleep(self.delay_seconds)
            return deliver()

        task = asyncio.get_running_loop().create_task(_run())
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def cancel_all(self) -> int:
        tasks = [task for task in self._tasks if not task.done()]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("Cancelled %d pending bot repl%s", len(tasks), "y" if len(tasks) == 1 else "ies")
        return len(tasks)
