"""Timers — the only source of asynchronous wake-ups for a game session.

Two implementations share one contract:

- ThreadScheduler: real time, one threading.Timer per handle. Callbacks
  run under ``scheduler.lock`` so they never interleave with key handlers
  that take the same lock.
- ManualScheduler: virtual clock driven by ``advance(ms)``. Used by the
  tests and for replaying sessions deterministically.

StepChain strings several delays together (sequence playback) and can be
cancelled between any two steps. Ticker (``every``) repeats one interval
until cancelled; it drives the round countdown display.
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)

_ids = itertools.count(1)


class TimerHandle:
    """Token for one scheduled callback."""

    __slots__ = ("id", "due_ms", "callback", "cancelled", "fired", "_timer")

    def __init__(self, due_ms: float, callback: Callable[[], None]):
        self.id = next(_ids)
        self.due_ms = due_ms
        self.callback = callback
        self.cancelled = False
        self.fired = False
        self._timer: threading.Timer | None = None

    @property
    def live(self) -> bool:
        return not (self.cancelled or self.fired)

    def __repr__(self) -> str:
        status = "cancelled" if self.cancelled else "fired" if self.fired else "live"
        return f"<TimerHandle #{self.id} due={self.due_ms:.0f}ms {status}>"


class Scheduler:
    """Single-shot cancellable timers plus a shared lock."""

    def __init__(self):
        self.lock = threading.RLock()

    def now_ms(self) -> float:
        raise NotImplementedError

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        raise NotImplementedError

    def cancel(self, handle: TimerHandle | None) -> None:
        if handle is None or not handle.live:
            return
        handle.cancelled = True
        if handle._timer is not None:
            handle._timer.cancel()
            handle._timer = None

    def after(self, delay_ms: float, resume: Callable[[], None]) -> TimerHandle:
        """Suspension point: continue with ``resume`` after ``delay_ms``."""
        return self.schedule(delay_ms, resume)

    def every(self, interval_ms: float, callback: Callable[[], None]) -> Ticker:
        """Run ``callback`` every ``interval_ms`` until the ticker is cancelled."""
        if interval_ms <= 0:
            raise ValueError(f"interval must be positive, got {interval_ms}")
        return Ticker(self, interval_ms, callback).start()

    def _fire(self, handle: TimerHandle) -> None:
        with self.lock:
            # cancel() may have won the race while we waited for the lock
            if not handle.live:
                return
            handle.fired = True
            handle._timer = None
            handle.callback()


class ThreadScheduler(Scheduler):
    def now_ms(self) -> float:
        return time.monotonic() * 1000

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        delay_ms = max(0.0, delay_ms)
        handle = TimerHandle(self.now_ms() + delay_ms, callback)
        timer = threading.Timer(delay_ms / 1000, self._fire, args=(handle,))
        timer.daemon = True
        handle._timer = timer
        timer.start()
        return handle


class ManualScheduler(Scheduler):
    """Virtual-time scheduler. Nothing fires until ``advance()`` is called."""

    def __init__(self, start_ms: float = 0.0):
        super().__init__()
        self._now = start_ms
        self._queue: list[tuple[float, int, TimerHandle]] = []

    def now_ms(self) -> float:
        return self._now

    def schedule(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(self._now + max(0.0, delay_ms), callback)
        heapq.heappush(self._queue, (handle.due_ms, handle.id, handle))
        return handle

    def pending(self) -> list[TimerHandle]:
        return sorted((h for _, _, h in self._queue if h.live), key=lambda h: (h.due_ms, h.id))

    def advance(self, ms: float) -> int:
        """Move the clock forward, firing everything that falls due.

        Timers scheduled by callbacks during the window fire too if they
        fall due before the new time. Returns the number of callbacks run.
        """
        target = self._now + ms
        fired = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if not handle.live:
                continue
            self._now = max(self._now, due)
            self._fire(handle)
            fired += 1
        self._now = target
        return fired

    def run_until_idle(self, limit_ms: float = 600_000) -> int:
        """Advance until no live timers remain (bounded by ``limit_ms``)."""
        fired = 0
        start = self._now
        while self.pending() and self._now - start < limit_ms:
            nxt = self.pending()[0].due_ms
            fired += self.advance(max(0.0, nxt - self._now))
        return fired


class StepChain:
    """A resumable list of ``(delay_ms, action)`` steps.

    Each step waits its delay, then runs its action. The cancelled flag is
    checked after every suspension point; once set, no further action runs
    and ``on_done`` is never called.
    """

    def __init__(
        self,
        scheduler: Scheduler,
        steps: list[tuple[float, Callable[[], None]]],
        on_done: Callable[[], None] | None = None,
    ):
        self.scheduler = scheduler
        self.steps = list(steps)
        self.on_done = on_done
        self.index = 0
        self.cancelled = False
        self.finished = False
        self._handle: TimerHandle | None = None

    def start(self) -> StepChain:
        self._resume()
        return self

    def cancel(self) -> None:
        self.cancelled = True
        self.scheduler.cancel(self._handle)
        self._handle = None

    @property
    def pending_handle(self) -> TimerHandle | None:
        if self._handle is not None and self._handle.live:
            return self._handle
        return None

    def _resume(self) -> None:
        if self.cancelled:
            return
        if self.index >= len(self.steps):
            self.finished = True
            self._handle = None
            if self.on_done is not None:
                self.on_done()
            return
        delay, _ = self.steps[self.index]
        self._handle = self.scheduler.after(delay, self._step)

    def _step(self) -> None:
        if self.cancelled:
            logger.debug("step chain resumed after cancel, ignoring")
            return
        _, action = self.steps[self.index]
        self.index += 1
        action()
        # the action itself may have cancelled us (reset mid-playback)
        if self.cancelled:
            return
        self._resume()


class Ticker:
    """Interval timer built from chained single-shot handles.

    Only one handle is outstanding at any moment, so ``cancel()`` stops the
    ticker for good even if a tick is already waiting on the lock.
    """

    def __init__(self, scheduler: Scheduler, interval_ms: float, callback: Callable[[], None]):
        self.scheduler = scheduler
        self.interval_ms = interval_ms
        self.callback = callback
        self.ticks = 0
        self.cancelled = False
        self._handle: TimerHandle | None = None

    def start(self) -> Ticker:
        self._handle = self.scheduler.schedule(self.interval_ms, self._tick)
        return self

    def cancel(self) -> None:
        self.cancelled = True
        self.scheduler.cancel(self._handle)
        self._handle = None

    @property
    def live(self) -> bool:
        return not self.cancelled

    def _tick(self) -> None:
        if self.cancelled:
            return
        self.ticks += 1
        self.callback()
        if self.cancelled:
            return
        self._handle = self.scheduler.schedule(self.interval_ms, self._tick)
