"""
Qt Timer Backend

TimerBackend implementation on QTimer, so every scheduler callback runs
on the GUI thread's event loop.
"""

import time
from typing import Callable, Dict, Optional

from PyQt6.QtCore import QObject, QTimer

from echoscope.simulation.timers import TimerBackend, TimerHandle


class _QtTimerHandle(TimerHandle):
    """TimerHandle owning a QTimer."""

    def __init__(
        self,
        timer: QTimer,
        callback: Callable[[], None],
        period_ms: Optional[float] = None,
        on_release: Optional[Callable[["_QtTimerHandle"], None]] = None,
    ) -> None:
        super().__init__(callback, period_ms)
        self.timer = timer
        self._on_release = on_release

    def release(self) -> None:
        """Drop the QTimer once the handle can no longer fire."""
        self.cancelled = True
        if self.timer is not None:
            self.timer.stop()
            self.timer.deleteLater()
            self.timer = None
        if self._on_release:
            self._on_release(self)
            self._on_release = None

    def cancel(self) -> None:
        self.release()


class QtTimerBackend(TimerBackend):
    """
    QTimer-based timers.

    Usage:
        timers = QtTimerBackend(parent=main_window)
        controller = InstrumentController(timers)
    """

    def __init__(self, parent: QObject = None) -> None:
        self.parent = parent
        self._live: Dict[int, _QtTimerHandle] = {}
        self._t0 = time.perf_counter()

    def now_ms(self) -> float:
        return (time.perf_counter() - self._t0) * 1000.0

    def _forget(self, handle: _QtTimerHandle) -> None:
        self._live.pop(id(handle), None)

    def _make(self, interval_ms: float, callback, single_shot: bool) -> _QtTimerHandle:
        timer = QTimer(self.parent)
        timer.setSingleShot(single_shot)
        timer.setInterval(max(0, int(round(interval_ms))))

        handle = _QtTimerHandle(
            timer, callback, None if single_shot else interval_ms, on_release=self._forget
        )

        def fire():
            if handle.cancelled:
                return
            if single_shot:
                handle.release()
            callback()

        timer.timeout.connect(fire)
        self._live[id(handle)] = handle
        timer.start()
        return handle

    def call_later(self, delay_ms: float, callback: Callable[[], None]) -> TimerHandle:
        return self._make(delay_ms, callback, single_shot=True)

    def call_every(self, period_ms: float, callback: Callable[[], None]) -> TimerHandle:
        if period_ms <= 0:
            raise ValueError(f"Timer period must be positive, got {period_ms}")
        return self._make(period_ms, callback, single_shot=False)

    def cancel_all(self) -> None:
        """Stop every live timer (window close)."""
        for handle in list(self._live.values()):
            handle.cancel()
        self._live.clear()
