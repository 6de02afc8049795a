"""
Timer Backends

Minimal timer interface used by the frame scheduler, the schematic
animator and the continuous-adjust repeat.

Backends:
    - ManualTimerBackend: virtual clock advanced explicitly (headless
      runs, deterministic timing)
    - QtTimerBackend (echoscope.ui.qt_timers): QTimer on the GUI thread

All callbacks run on the thread that drives the backend; nothing here
is thread-safe and nothing needs to be.
"""

import heapq
import itertools
from typing import Callable, List, Optional, Tuple


class TimerHandle:
    """
    Handle to a scheduled callback.

    cancel() is idempotent; a cancelled handle never fires again.
    """

    def __init__(self, callback: Callable[[], None], period_ms: Optional[float] = None) -> None:
        self.callback = callback
        self.period_ms = period_ms
        self.cancelled = False

    def cancel(self) -> None:
        """Stop the timer."""
        self.cancelled = True


class TimerBackend:
    """Base class for timer backends."""

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback once after delay_ms."""
        raise NotImplementedError

    def call_every(self, period_ms: float, callback: Callable[[], None]) -> TimerHandle:
        """Run callback every period_ms until cancelled."""
        raise NotImplementedError

    def now_ms(self) -> float:
        """Current backend time [ms]."""
        raise NotImplementedError


class ManualTimerBackend(TimerBackend):
    """
    Virtual-clock timer backend.

    Time only moves when advance() is called; due callbacks fire in
    deadline order (ties in scheduling order).

    Usage:
        timers = ManualTimerBackend()
        timers.call_later(500, on_settle)
        timers.advance(650)
    """

    def __init__(self) -> None:
        self._now = 0.0
        self._queue: List[Tuple[float, int, TimerHandle]] = []
        self._seq = itertools.count()

    def now_ms(self) -> float:
        return self._now

    def _push(self, due: float, handle: TimerHandle) -> None:
        heapq.heappush(self._queue, (due, next(self._seq), handle))

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle(callback)
        self._push(self._now + max(0.0, delay_ms), handle)
        return handle

    def call_every(self, period_ms: float, callback: Callable[[], None]) -> TimerHandle:
        if period_ms <= 0:
            raise ValueError(f"Timer period must be positive, got {period_ms}")
        handle = TimerHandle(callback, period_ms=period_ms)
        self._push(self._now + period_ms, handle)
        return handle

    @property
    def pending(self) -> int:
        """Number of live timers."""
        return sum(1 for _, _, handle in self._queue if not handle.cancelled)

    def advance(self, ms: float) -> int:
        """
        Move the clock forward, firing every callback that falls due.

        Args:
            ms: Time to advance [ms]

        Returns:
            Number of callbacks fired
        """
        target = self._now + ms
        fired = 0

        while self._queue and self._queue[0][0] <= target:
            due, _, handle = heapq.heappop(self._queue)
            if handle.cancelled:
                continue

            self._now = due
            if handle.period_ms is None:
                handle.cancelled = True
            else:
                self._push(due + handle.period_ms, handle)

            handle.callback()
            fired += 1

        self._now = target
        return fired
