"""
Frame Scheduling

Cooperative, single-threaded schedulers driving the instrument:

    - FrameScheduler: Off/On power state machine; while On, re-synthesizes
      and re-renders the trace once per frame
    - SchematicAnimator: phase accumulator for the decorative pulse-travel
      animation of the active task panel
    - ContinuousAdjuster: press-and-hold auto-repeat for the fine
      measurement buttons

Cancellation is cooperative: every scheduled callback checks its owner's
state first and simply does not reschedule itself once stopped.
"""

import logging
from enum import Enum
from typing import Callable, Optional

from .timers import TimerBackend, TimerHandle

logger = logging.getLogger(__name__)


class PowerState(Enum):
    """Frame scheduler states."""

    OFF = "off"
    ON = "on"


class FrameScheduler:
    """
    Power state machine and per-frame loop.

    Entering On schedules the first frame after power_on_delay_ms; each
    frame calls on_frame() and schedules the next one. Entering Off
    cancels the pending frame and calls on_clear() once.

    Usage:
        scheduler = FrameScheduler(timers, on_frame=controller.render_frame,
                                   on_clear=controller.clear_display)
        scheduler.power_on()
    """

    def __init__(
        self,
        timers: TimerBackend,
        on_frame: Callable[[], None],
        on_clear: Optional[Callable[[], None]] = None,
        frame_interval_ms: float = 16.0,
        power_on_delay_ms: float = 100.0,
    ) -> None:
        """
        Initialize scheduler.

        Args:
            timers: Timer backend
            on_frame: Synthesize-and-render callback
            on_clear: Blank-screen callback for the Off state
            frame_interval_ms: Frame period [ms]
            power_on_delay_ms: Settle delay before the first frame [ms]
        """
        if frame_interval_ms <= 0:
            raise ValueError(f"Frame interval must be positive, got {frame_interval_ms}")

        self.timers = timers
        self.on_frame = on_frame
        self.on_clear = on_clear
        self.frame_interval_ms = frame_interval_ms
        self.power_on_delay_ms = power_on_delay_ms

        self.state = PowerState.OFF
        self.frame_count = 0
        self._pending: Optional[TimerHandle] = None

    @property
    def is_on(self) -> bool:
        """True while the frame loop is powered."""
        return self.state is PowerState.ON

    def power_on(self) -> None:
        """Enter On and start the frame loop (no-op if already On)."""
        if self.is_on:
            return

        self.state = PowerState.ON
        self._cancel_pending()
        logger.info("[POWER] ON")

        if self.power_on_delay_ms > 0:
            self._pending = self.timers.call_later(self.power_on_delay_ms, self._tick)
        else:
            self._tick()

    def power_off(self) -> None:
        """Enter Off, cancel the loop and blank the screen."""
        was_on = self.is_on
        self.state = PowerState.OFF
        self._cancel_pending()

        if self.on_clear is not None:
            self.on_clear()
        if was_on:
            logger.info("[POWER] OFF after %d frames", self.frame_count)

    def _cancel_pending(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _tick(self) -> None:
        """One frame: draw, then reschedule unless powered off."""
        self._pending = None
        if not self.is_on:
            return

        self.on_frame()
        self.frame_count += 1

        # on_frame may have powered the scheduler off
        if self.is_on:
            self._pending = self.timers.call_later(self.frame_interval_ms, self._tick)


class SchematicAnimator:
    """
    Phase accumulator for the schematic pulse animation.

    While running, advances phase by phase_step every tick_ms and calls
    on_tick(phase). stop() cancels the timer and resets phase to 0.
    """

    def __init__(
        self,
        timers: TimerBackend,
        on_tick: Callable[[float], None],
        tick_ms: float = 16.0,
        phase_step: float = 0.016,
    ) -> None:
        self.timers = timers
        self.on_tick = on_tick
        self.tick_ms = tick_ms
        self.phase_step = phase_step

        self.phase = 0.0
        self._handle: Optional[TimerHandle] = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        """Start ticking (no-op if already running)."""
        if self.running:
            return
        self._handle = self.timers.call_every(self.tick_ms, self._tick)

    def stop(self) -> None:
        """Stop ticking and reset the phase."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self.phase = 0.0

    def restart(self) -> None:
        """Stop, then start again from phase 0."""
        self.stop()
        self.start()

    def _tick(self) -> None:
        if not self.running:
            return
        self.phase += self.phase_step
        self.on_tick(self.phase)


class ContinuousAdjuster:
    """
    Press-and-hold auto-repeat.

    begin(direction) applies one step immediately, then after settle_ms
    starts a repeat timer applying one step every repeat_ms. end()
    cancels both the settle timer and the repeat timer, so a release
    before settle_ms yields exactly one step.
    """

    def __init__(
        self,
        timers: TimerBackend,
        apply: Callable[[int], None],
        settle_ms: float = 500.0,
        repeat_ms: float = 100.0,
    ) -> None:
        """
        Initialize adjuster.

        Args:
            timers: Timer backend
            apply: Callback applying one step in the given direction
            settle_ms: Hold time before auto-repeat starts [ms]
            repeat_ms: Auto-repeat period [ms]
        """
        self.timers = timers
        self.apply = apply
        self.settle_ms = settle_ms
        self.repeat_ms = repeat_ms

        self.direction = 0
        self._settle: Optional[TimerHandle] = None
        self._repeat: Optional[TimerHandle] = None

    @property
    def active(self) -> bool:
        """True while a press is being held."""
        return self.direction != 0

    def begin(self, direction: int) -> None:
        """
        Start a press.

        Args:
            direction: +1 or -1

        Raises:
            ValueError: If direction is zero
        """
        if direction == 0:
            raise ValueError("Adjust direction must be non-zero")

        self.end()
        self.direction = 1 if direction > 0 else -1
        self.apply(self.direction)
        self._settle = self.timers.call_later(self.settle_ms, self._on_settled)

    def end(self) -> None:
        """Release: cancel the settle and repeat timers together."""
        if self._repeat is not None:
            self._repeat.cancel()
            self._repeat = None
        if self._settle is not None:
            self._settle.cancel()
            self._settle = None
        self.direction = 0

    def _on_settled(self) -> None:
        self._settle = None
        if self.direction == 0 or self._repeat is not None:
            return
        self._repeat = self.timers.call_every(self.repeat_ms, self._on_repeat)

    def _on_repeat(self) -> None:
        if self.direction != 0:
            self.apply(self.direction)
