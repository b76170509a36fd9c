# bufcycle/core/Scheduler.py
"""Scheduler Module
==================
Cooperative timers for the viewer's main thread.

Everything runs on the thread that drives the main loop: the loop calls
`run_due()` on every turn and `run_idle()` after each command finishes, so
callbacks never race with command handlers and no locking is needed.

Three kinds of task exist:
- one-shot timers (`call_later`),
- repeating timers (`call_every`),
- idle callbacks (`call_when_idle`), run once when the next idle period
  begins, i.e. after the command that is currently executing completes.
"""

import heapq
import itertools
import logging
import time
from typing import Callable, Optional

Callback = Callable[[], None]


class TimerHandle:
    """A cancellable reference to a scheduled callback."""

    __slots__ = ("callback", "when", "interval", "idle", "cancelled", "_seq")

    def __init__(
        self,
        callback: Callback,
        when: float = 0.0,
        interval: Optional[float] = None,
        idle: bool = False,
        seq: int = 0,
    ) -> None:
        self.callback = callback
        self.when = when
        self.interval = interval
        self.idle = idle
        self.cancelled = False
        self._seq = seq

    def cancel(self) -> None:
        """Cancels the callback. Calling it again is harmless."""
        self.cancelled = True

    def __lt__(self, other: "TimerHandle") -> bool:
        return (self.when, self._seq) < (other.when, other._seq)

    def __repr__(self) -> str:
        kind = "idle" if self.idle else ("every" if self.interval else "later")
        state = "cancelled" if self.cancelled else "pending"
        return f"<TimerHandle {kind} {state} when={self.when:.2f}>"


# ==================== TimerScheduler Class ====================
class TimerScheduler:
    """Class TimerScheduler
    ======================
    Keeps timers in a heap ordered by due time and idle callbacks in a FIFO
    list. The clock is injectable so tests can drive time explicitly.

    Attributes:
        clock (Callable[[], float]): Monotonic time source.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self.clock = clock
        self._timers: list[TimerHandle] = []
        self._idle: list[TimerHandle] = []
        self._seq = itertools.count()

    def call_later(self, delay: float, callback: Callback) -> TimerHandle:
        handle = TimerHandle(callback, self.clock() + max(0.0, delay), seq=next(self._seq))
        heapq.heappush(self._timers, handle)
        return handle

    def call_every(self, interval: float, callback: Callback) -> TimerHandle:
        if interval <= 0:
            raise ValueError(f"Repeat interval must be positive, got {interval!r}")
        handle = TimerHandle(
            callback, self.clock() + interval, interval=interval, seq=next(self._seq)
        )
        heapq.heappush(self._timers, handle)
        return handle

    def call_when_idle(self, callback: Callback) -> TimerHandle:
        handle = TimerHandle(callback, idle=True, seq=next(self._seq))
        self._idle.append(handle)
        return handle

    def _invoke(self, handle: TimerHandle) -> None:
        try:
            handle.callback()
        except Exception:
            logging.exception("Timer callback %r failed.", handle.callback)

    def run_due(self) -> int:
        """Runs every timer whose due time has passed. Returns how many ran."""
        now = self.clock()
        ran = 0
        while self._timers and self._timers[0].when <= now:
            handle = heapq.heappop(self._timers)
            if handle.cancelled:
                continue
            if handle.interval:
                # Reschedule from the due time so ticks do not drift.
                handle.when += handle.interval
                if handle.when <= now:
                    handle.when = now + handle.interval
                heapq.heappush(self._timers, handle)
            self._invoke(handle)
            ran += 1
        return ran

    def run_idle(self) -> int:
        """Runs the idle callbacks pending at call time. Returns how many ran."""
        batch, self._idle = self._idle, []
        ran = 0
        for handle in batch:
            if handle.cancelled:
                continue
            handle.cancel()
            self._invoke(handle)
            ran += 1
        return ran

    def pending(self) -> int:
        """Number of live (not cancelled) timers and idle callbacks."""
        live = [h for h in self._timers if not h.cancelled]
        live += [h for h in self._idle if not h.cancelled]
        return len(live)

    def next_due_in(self) -> Optional[float]:
        """Seconds until the next live timer is due, or None."""
        live = [h.when for h in self._timers if not h.cancelled]
        if not live:
            return None
        return max(0.0, min(live) - self.clock())
