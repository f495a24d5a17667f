"""
Cancellable scheduled tasks.

Session idle timers and debounced persistence never touch the event loop
directly; they go through a Scheduler so that tests can drive time by hand.
"""

import asyncio
from collections.abc import Callable
from typing import Protocol

from reasonkit.utils.logger import get_logger

logger = get_logger(__name__)


class ScheduledTask(Protocol):
    """Handle returned by Scheduler.call_later."""

    def cancel(self) -> None: ...

    def cancelled(self) -> bool: ...


class Scheduler(Protocol):
    """Anything that can run a callback after a delay."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask: ...


class _PendingCall:
    """Handle for a callback scheduled before any event loop was running."""

    def __init__(self) -> None:
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class AsyncioScheduler:
    """
    Scheduler backed by the running asyncio loop.

    Outside a running loop there is nothing to drive timers, so the callback
    is never fired and an inert handle is returned instead.
    """

    def call_later(self, delay: float, callback: Callable[[], None]) -> ScheduledTask:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running event loop; timer of {delay}s not armed")
            return _PendingCall()
        return loop.call_later(delay, callback)


default_scheduler = AsyncioScheduler()
