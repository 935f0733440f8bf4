"""Periodic tick scheduling.

The controller only needs ``call_every(interval, callback)`` and a handle
it can cancel. ``AsyncioScheduler`` drives ticks from the running event
loop; ``VirtualScheduler`` fires them from ``advance()`` so cadence and
cancellation can be tested without waiting on a wall clock.
"""

import asyncio
from typing import Callable, List, Optional, Protocol


class TimerHandle(Protocol):
    def cancel(self) -> None: ...

    @property
    def cancelled(self) -> bool: ...


class Scheduler(Protocol):
    def call_every(self, interval: float, callback: Callable[[], None]) -> TimerHandle: ...


class _LoopTimer:
    """Fixed-rate timer rescheduled on an asyncio loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop, interval: float, callback: Callable[[], None]):
        self._loop = loop
        self._interval = interval
        self._callback = callback
        self._start = loop.time()
        self._ticks = 0
        self._handle: Optional[asyncio.TimerHandle] = None
        self._cancelled = False
        self._schedule()

    def _schedule(self) -> None:
        self._ticks += 1
        due = self._start + self._ticks * self._interval
        self._handle = self._loop.call_at(due, self._fire)

    def _fire(self) -> None:
        if self._cancelled:
            return
        self._schedule()
        self._callback()

    def cancel(self) -> None:
        self._cancelled = True
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class AsyncioScheduler:
    """Schedule ticks on the running (or a given) asyncio event loop."""

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None):
        self._loop = loop

    def call_every(self, interval: float, callback: Callable[[], None]) -> _LoopTimer:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        loop = self._loop or asyncio.get_running_loop()
        return _LoopTimer(loop, interval, callback)


class _VirtualTimer:
    def __init__(self, scheduler: "VirtualScheduler", interval: float, callback: Callable[[], None]):
        self.scheduler = scheduler
        self.interval = interval
        self.callback = callback
        self.start = scheduler.now()
        self.ticks = 0
        self._cancelled = False

    @property
    def next_due(self) -> float:
        return self.start + (self.ticks + 1) * self.interval

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


class VirtualScheduler:
    """Manually advanced clock and timer queue."""

    EPSILON = 1e-9

    def __init__(self, start: float = 0.0):
        self._now = start
        self._timers: List[_VirtualTimer] = []

    def now(self) -> float:
        return self._now

    def call_every(self, interval: float, callback: Callable[[], None]) -> _VirtualTimer:
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")
        timer = _VirtualTimer(self, interval, callback)
        self._timers.append(timer)
        return timer

    @property
    def active_timers(self) -> int:
        return sum(1 for t in self._timers if not t.cancelled)

    def advance(self, seconds: float) -> int:
        """
        Move the clock forward, firing every timer that falls due in order.

        Returns:
            Number of callbacks fired
        """
        target = self._now + seconds
        fired = 0
        while True:
            self._timers = [t for t in self._timers if not t.cancelled]
            due = [t for t in self._timers if t.next_due <= target + self.EPSILON]
            if not due:
                break
            timer = min(due, key=lambda t: t.next_due)
            timer.ticks += 1
            self._now = max(self._now, timer.next_due - timer.interval)
            timer.callback()
            fired += 1
        self._now = max(self._now, target)
        return fired
