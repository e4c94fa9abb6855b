"""Single-shot, cancelable timers for the playback loop."""

from __future__ import annotations

import asyncio
import heapq
import itertools
from typing import Callable, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...


class Scheduler(Protocol):
    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle: ...


class AsyncioScheduler:
    """Schedules callbacks on an asyncio event loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    @property
    def loop(self) -> asyncio.AbstractEventLoop:
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        return self._loop

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        return self.loop.call_later(delay_ms / 1000.0, callback)


class _ManualTask:
    __slots__ = ("due", "callback", "cancelled")

    def __init__(self, due: float, callback: Callable[[], None]) -> None:
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """Virtual-time scheduler driven explicitly by its owner.

    Nothing runs until :meth:`advance` or :meth:`run_pending` is called,
    which makes it usable both in tests and behind an externally clocked
    tick source such as a browser-side interval.
    """

    def __init__(self) -> None:
        self.now = 0.0
        self._queue: list[tuple[float, int, _ManualTask]] = []
        self._seq = itertools.count()

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> _ManualTask:
        task = _ManualTask(self.now + delay_ms, callback)
        heapq.heappush(self._queue, (task.due, next(self._seq), task))
        return task

    @property
    def pending(self) -> int:
        return sum(1 for _, _, t in self._queue if not t.cancelled)

    def advance(self, delay_ms: float) -> int:
        """Move the clock forward, running every task that falls due."""
        target = self.now + delay_ms
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, task = heapq.heappop(self._queue)
            self.now = max(self.now, due)
            if not task.cancelled:
                task.callback()
                ran += 1
        self.now = target
        return ran

    def run_pending(self) -> int:
        """Run the tasks queued right now, whatever their due time.

        Tasks scheduled by those callbacks wait for the next call.
        """
        batch, self._queue = self._queue, []
        batch.sort()
        ran = 0
        for due, _, task in batch:
            self.now = max(self.now, due)
            if not task.cancelled:
                task.callback()
                ran += 1
        return ran
