"""Scheduler implementations: asyncio-backed and manually advanced.

All timed behaviour (search debounce, error auto-clear, collapse animation
completion) goes through a Scheduler so it can be cancelled on teardown and
driven deterministically in tests.
"""

from __future__ import annotations

import asyncio
import heapq
import itertools
import time
from collections.abc import Callable
from dataclasses import dataclass, field

__all__ = ["LoopScheduler", "ManualScheduler", "ManualTimer"]


class LoopScheduler:
    """Scheduler backed by an asyncio event loop.

    When no loop is given, the running loop at ``call_later`` time is used,
    so the editor can be built outside a loop and driven inside one.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, callback: Callable[[], None]) -> asyncio.TimerHandle:
        loop = self._loop if self._loop is not None else asyncio.get_running_loop()
        return loop.call_later(max(delay, 0.0), callback)


@dataclass(order=True)
class ManualTimer:
    due: float
    seq: int
    callback: Callable[[], None] = field(compare=False)
    cancelled: bool = field(default=False, compare=False)
    on_cancel: Callable[[], None] | None = field(default=None, compare=False, repr=False)

    def cancel(self) -> None:
        if self.cancelled:
            return
        self.cancelled = True
        if self.on_cancel is not None:
            self.on_cancel()


class ManualScheduler:
    """Virtual clock whose timers fire only when ``advance`` is called.

    Cancelled timers are counted as they are cancelled and purged from the
    heap once they make up half of it.

    Example::

        scheduler = ManualScheduler()
        fired = []
        scheduler.call_later(0.5, lambda: fired.append("x"))
        scheduler.advance(0.4)   # nothing yet
        scheduler.advance(0.1)   # fired == ["x"]
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._timers: list[ManualTimer] = []
        self._seq = itertools.count()
        self._cancelled = 0

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, callback: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(
            self._now + max(delay, 0.0), next(self._seq), callback, on_cancel=self._on_cancel
        )
        heapq.heappush(self._timers, timer)
        return timer

    @property
    def pending(self) -> int:
        """Number of timers that are scheduled and not cancelled."""
        return len(self._timers) - self._cancelled

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in order.

        Timers scheduled by a callback fire in the same call when they fall
        due before the new time.
        """
        if seconds < 0:
            raise ValueError(f"Cannot move the clock backwards by {seconds}")
        target = self._now + seconds
        while self._timers and self._timers[0].due <= target:
            timer = heapq.heappop(self._timers)
            if timer.cancelled:
                self._cancelled -= 1
                continue
            # out of the heap: a late cancel must not touch the count
            timer.on_cancel = None
            self._now = max(self._now, timer.due)
            timer.callback()
        self._now = target

    def _on_cancel(self) -> None:
        self._cancelled += 1
        if self._cancelled * 2 >= len(self._timers):
            self._timers = [t for t in self._timers if not t.cancelled]
            heapq.heapify(self._timers)
            self._cancelled = 0
