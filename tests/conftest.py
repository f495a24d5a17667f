"""Shared fixtures.

FakeScheduler stands in for the asyncio-backed scheduler so that idle
timeouts and debounced saves can be driven deterministically with
advance() instead of real sleeps.
"""

from collections.abc import Callable

import pytest


class FakeTask:
    def __init__(self, due: float, callback: Callable[[], None]):
        self.due = due
        self.callback = callback
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    def cancelled(self) -> bool:
        return self._cancelled


class FakeScheduler:
    """Manual clock. Callbacks fire only from advance()."""

    def __init__(self) -> None:
        self.now = 0.0
        self.tasks: list[FakeTask] = []

    def call_later(self, delay: float, callback: Callable[[], None]) -> FakeTask:
        task = FakeTask(self.now + delay, callback)
        self.tasks.append(task)
        return task

    def pending(self) -> list[FakeTask]:
        return [t for t in self.tasks if not t.cancelled()]

    def advance(self, seconds: float) -> None:
        self.now += seconds
        due = sorted(
            (t for t in self.pending() if t.due <= self.now),
            key=lambda t: t.due,
        )
        for task in due:
            if task.cancelled():
                continue
            # A fired task is spent; mark it so it never fires twice.
            task.cancel()
            task.callback()


@pytest.fixture
def scheduler() -> FakeScheduler:
    return FakeScheduler()
