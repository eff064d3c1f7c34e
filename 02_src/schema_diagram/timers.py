"""Cancellable delayed callbacks for debounce and stagger windows."""

import asyncio
from typing import Callable, Optional

from typing_extensions import Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class TimerService(Protocol):
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        ...


class AsyncioTimerService:
    """Schedules callbacks on an asyncio event loop.

    Without an explicit loop the running loop is used, so the service must be
    called from inside a coroutine or loop callback.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        loop = self._loop or asyncio.get_running_loop()
        return loop.call_later(max(delay, 0.0), callback)
