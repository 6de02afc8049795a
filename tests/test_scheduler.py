"""
EchoScope Timing Test Suite

All timing runs on the ManualTimerBackend virtual clock.

Test ID | Description                                   | Tolerance
--------|-----------------------------------------------|-----------
1       | Virtual clock ordering and cancellation       | Exact
2       | Frame loop: power-on delay, cadence, off      | Exact
3       | Press-and-hold: 650 ms -> 2 steps             | Exact
4       | Quick tap -> 1 step                           | Exact
5       | Schematic phase accumulator                   | 1e-12
"""

import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from echoscope.simulation.scheduler import (
    ContinuousAdjuster,
    FrameScheduler,
    PowerState,
    SchematicAnimator,
)
from echoscope.simulation.timers import ManualTimerBackend


@pytest.fixture
def timers():
    return ManualTimerBackend()


# =============================================================================
# TEST 1: Virtual clock
# =============================================================================


class TestManualTimers:
    def test_fires_in_deadline_order(self, timers):
        calls = []
        timers.call_later(30, lambda: calls.append("b"))
        timers.call_later(10, lambda: calls.append("a"))

        assert timers.advance(29) == 1
        assert calls == ["a"]
        timers.advance(1)
        assert calls == ["a", "b"]

    def test_cancelled_never_fires(self, timers):
        calls = []
        handle = timers.call_later(10, lambda: calls.append(1))
        handle.cancel()
        handle.cancel()  # idempotent

        timers.advance(100)
        assert calls == []
        assert handle.cancelled

    def test_periodic(self, timers):
        calls = []
        timers.call_every(100, lambda: calls.append(timers.now_ms()))
        timers.advance(350)

        assert calls == [100, 200, 300]
        assert timers.now_ms() == 350

    def test_non_positive_period_rejected(self, timers):
        with pytest.raises(ValueError):
            timers.call_every(0, lambda: None)

    def test_pending_count(self, timers):
        a = timers.call_later(10, lambda: None)
        timers.call_every(10, lambda: None)
        assert timers.pending == 2
        a.cancel()
        assert timers.pending == 1


# =============================================================================
# TEST 2: Frame loop
# =============================================================================


class TestFrameScheduler:
    """Off <-> On with a settle delay before the first frame."""

    def make(self, timers):
        events = []
        scheduler = FrameScheduler(
            timers,
            on_frame=lambda: events.append("frame"),
            on_clear=lambda: events.append("clear"),
            frame_interval_ms=16,
            power_on_delay_ms=100,
        )
        return scheduler, events

    def test_starts_off(self, timers):
        scheduler, events = self.make(timers)
        assert scheduler.state is PowerState.OFF
        timers.advance(1000)
        assert events == []

    def test_first_frame_after_delay(self, timers):
        scheduler, events = self.make(timers)
        scheduler.power_on()

        timers.advance(99)
        assert events == []
        timers.advance(1)
        assert events == ["frame"]

    def test_frame_cadence(self, timers):
        scheduler, events = self.make(timers)
        scheduler.power_on()
        timers.advance(100 + 16 * 9)

        assert scheduler.frame_count == 10

    def test_power_off_stops_and_clears(self, timers):
        scheduler, events = self.make(timers)
        scheduler.power_on()
        timers.advance(150)
        frames = scheduler.frame_count

        scheduler.power_off()
        timers.advance(1000)

        assert scheduler.frame_count == frames
        assert events[-1] == "clear"
        assert timers.pending == 0

    def test_power_off_during_delay(self, timers):
        scheduler, events = self.make(timers)
        scheduler.power_on()
        timers.advance(50)
        scheduler.power_off()
        timers.advance(500)

        assert "frame" not in events

    def test_power_on_is_idempotent(self, timers):
        scheduler, _ = self.make(timers)
        scheduler.power_on()
        scheduler.power_on()
        timers.advance(100)

        assert scheduler.frame_count == 1
        assert timers.pending == 1

    def test_frame_callback_may_power_off(self, timers):
        scheduler = FrameScheduler(timers, on_frame=lambda: scheduler.power_off())
        scheduler.power_on()
        timers.advance(1000)

        assert scheduler.frame_count == 1
        assert timers.pending == 0


# =============================================================================
# TEST 3-4: Continuous adjust
# =============================================================================


class TestContinuousAdjust:
    """One step on press, repeat every 100 ms after a 500 ms settle."""

    def make(self, timers):
        steps = []
        adjuster = ContinuousAdjuster(timers, apply=steps.append, settle_ms=500, repeat_ms=100)
        return adjuster, steps

    def test_hold_650ms_gives_two_steps(self, timers):
        adjuster, steps = self.make(timers)
        adjuster.begin(+1)
        timers.advance(650)
        adjuster.end()
        timers.advance(1000)

        assert steps == [1, 1]

    def test_quick_tap_gives_one_step(self, timers):
        adjuster, steps = self.make(timers)
        adjuster.begin(+1)
        timers.advance(300)
        adjuster.end()
        timers.advance(1000)

        assert steps == [1]

    def test_long_hold(self, timers):
        adjuster, steps = self.make(timers)
        adjuster.begin(-1)
        timers.advance(1000)
        adjuster.end()

        # immediate + repeats at 600, 700, 800, 900, 1000
        assert steps == [-1] * 6

    def test_release_cancels_both_timers(self, timers):
        adjuster, _ = self.make(timers)
        adjuster.begin(+1)
        timers.advance(550)
        adjuster.end()

        assert timers.pending == 0
        assert not adjuster.active

    def test_zero_direction_rejected(self, timers):
        adjuster, steps = self.make(timers)
        with pytest.raises(ValueError):
            adjuster.begin(0)
        assert steps == []

    def test_new_press_replaces_old(self, timers):
        adjuster, steps = self.make(timers)
        adjuster.begin(+1)
        timers.advance(400)
        adjuster.begin(-1)
        timers.advance(400)
        adjuster.end()

        assert steps == [1, -1]


# =============================================================================
# TEST 5: Schematic animator
# =============================================================================


class TestSchematicAnimator:
    def test_phase_advances_per_tick(self, timers):
        phases = []
        animator = SchematicAnimator(timers, on_tick=phases.append, tick_ms=16, phase_step=0.016)
        animator.start()
        timers.advance(16 * 5)

        assert len(phases) == 5
        assert phases[-1] == pytest.approx(0.08)

    def test_stop_resets_phase(self, timers):
        animator = SchematicAnimator(timers, on_tick=lambda p: None)
        animator.start()
        timers.advance(160)
        animator.stop()

        assert animator.phase == 0.0
        assert not animator.running
        assert timers.pending == 0

    def test_restart(self, timers):
        phases = []
        animator = SchematicAnimator(timers, on_tick=phases.append, tick_ms=16, phase_step=0.016)
        animator.start()
        timers.advance(160)
        animator.restart()
        timers.advance(16)

        assert phases[-1] == pytest.approx(0.016)
