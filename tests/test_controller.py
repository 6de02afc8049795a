"""
EchoScope Instrument Controller Test Suite

Test ID | Description                                        | Tolerance
--------|----------------------------------------------------|-----------
1       | Task switch: power off, cursor 0, baseline window   | Exact
2       | Auto-positioning per task                           | 1e-9 mm
3       | Measurement cursor clamp / adjust / auto-measure    | Exact
4       | Frame loop paints the surface                       | Exact
5       | Parameter validation                                | ValueError
6       | Readout                                             | 1e-9
7       | Schematic lifecycle                                 | Exact
"""

import os
import sys

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from echoscope.simulation.controller import (
    InstrumentController,
    auto_start_position,
    expected_separation,
)
from echoscope.simulation.scene import (
    CylinderParams,
    ObjectParams,
    PlateParams,
    Scene,
    Shape,
    TaskMode,
)
from echoscope.simulation.timers import ManualTimerBackend


@pytest.fixture
def timers():
    return ManualTimerBackend()


@pytest.fixture
def controller(timers):
    scene = Scene(
        plate=PlateParams(width=None, distance_mm=35.0),
        target_object=ObjectParams(shape=Shape.SQUARE, rotation_deg=0, distance_mm=50),
        cylinder=CylinderParams(thickness_mm=50),
    )
    return InstrumentController(timers, scene=scene, rng=np.random.default_rng(1))


# =============================================================================
# TEST 1: Task switching
# =============================================================================


class TestTaskSwitch:
    """Switching task always powers off and resets the cursor."""

    def test_switch_resets_state(self, controller, timers):
        controller.set_task(TaskMode.TASK2)
        controller.set_power(True)
        controller.set_measured_distance(42)
        timers.advance(200)

        controller.set_task(TaskMode.TASK3)
        scene = controller.snapshot()

        assert not controller.is_powered
        assert not scene.power_on
        assert controller.measured_distance == 0
        assert scene.start_position == auto_start_position(scene)

    def test_switch_blanks_screen(self, controller, timers):
        controller.select_plate(5)
        controller.set_power(True)
        timers.advance(200)
        assert controller.surface.buffer.any()

        controller.set_task("task2")
        assert not controller.surface.buffer.any()

    def test_switch_cancels_held_adjust(self, controller, timers):
        controller.begin_continuous_adjust(+1)
        controller.set_task(TaskMode.TASK2)
        timers.advance(2000)

        assert controller.measured_distance == 0

    def test_invalid_task(self, controller):
        with pytest.raises(ValueError):
            controller.set_task("task9")


# =============================================================================
# TEST 2: Auto-positioning
# =============================================================================


class TestAutoPosition:
    """Start position centres the echoes (scale 5 -> 30 mm window)."""

    def test_task1_with_plate(self):
        scene = Scene(task=TaskMode.TASK1, plate=PlateParams(width=10, distance_mm=35))
        # centre 40, window 30: 40 - 15 - 5
        assert auto_start_position(scene) == pytest.approx(20.0)

    def test_task1_without_plate(self):
        assert auto_start_position(Scene(task=TaskMode.TASK1)) == 0.0

    def test_task2(self):
        scene = Scene(task=TaskMode.TASK2, target_object=ObjectParams(distance_mm=50))
        assert auto_start_position(scene) == pytest.approx(25.0)

    def test_task3(self):
        scene = Scene(task=TaskMode.TASK3, cylinder=CylinderParams(thickness_mm=50))
        # centre 50, 50 - 15 - 5
        assert auto_start_position(scene) == pytest.approx(30.0)

    def test_never_negative(self):
        scene = Scene(task=TaskMode.TASK2, scale=1, target_object=ObjectParams(distance_mm=50))
        assert auto_start_position(scene) == 0.0

    def test_power_on_positions(self, controller):
        controller.select_plate(10)
        controller.set_parameter("start_position", 0)
        controller.set_power(True)

        assert controller.snapshot().start_position == pytest.approx(20.0)

    def test_scale_change_while_powered(self, controller):
        controller.select_plate(10)
        controller.set_power(True)
        controller.set_parameter("scale", 10)

        # window 15: 40 - 7.5 - 5
        assert controller.snapshot().start_position == pytest.approx(27.5)

    def test_scale_change_while_off_keeps_start(self, controller):
        controller.set_parameter("start_position", 12)
        controller.set_parameter("scale", 10)
        assert controller.snapshot().start_position == 12


# =============================================================================
# TEST 3: Measurement cursor
# =============================================================================


class TestMeasurement:
    def test_clamp(self, controller):
        controller.set_measured_distance(500)
        assert controller.measured_distance == 200
        controller.set_measured_distance(-5)
        assert controller.measured_distance == 0

    def test_adjust_rounds_first(self, controller):
        controller.set_measured_distance(4.6)
        controller.adjust_measured_distance(1)
        assert controller.measured_distance == 6

    @pytest.mark.parametrize("start, expected", [(0.5, 2), (2.5, 4), (4.5, 6), (3.4, 2)])
    def test_adjust_rounds_halves_up(self, controller, start, expected):
        delta = 1 if expected > start else -1
        controller.set_measured_distance(start)
        controller.adjust_measured_distance(delta)
        assert controller.measured_distance == expected

    def test_hold_650ms(self, controller, timers):
        controller.set_measured_distance(10)
        controller.begin_continuous_adjust(+1)
        timers.advance(650)
        controller.end_continuous_adjust()
        timers.advance(1000)

        assert controller.measured_distance == 12

    def test_quick_tap(self, controller, timers):
        controller.begin_continuous_adjust(-1)
        timers.advance(100)
        controller.end_continuous_adjust()

        # Clamped at 0
        assert controller.measured_distance == 0

    def test_zero_direction(self, controller):
        with pytest.raises(ValueError):
            controller.begin_continuous_adjust(0)

    def test_auto_measure_task1(self, controller):
        controller.select_plate(3)
        assert controller.auto_measure() == 3

    def test_auto_measure_task2_square(self, controller):
        controller.set_task(TaskMode.TASK2)
        assert controller.auto_measure() == pytest.approx(20.0)

    def test_auto_measure_task3(self, controller):
        controller.set_task(TaskMode.TASK3)
        assert controller.auto_measure() == pytest.approx(50.0)

    def test_expected_separation_without_plate(self):
        assert expected_separation(Scene(task=TaskMode.TASK1)) == 0.0


# =============================================================================
# TEST 4: Frame loop
# =============================================================================


class TestFrames:
    def test_frames_paint_surface(self, controller, timers):
        frames = []
        controller.set_frame_callback(frames.append)
        controller.select_plate(5)
        controller.set_power(True)
        timers.advance(100 + 16 * 4)

        assert controller.scheduler.frame_count == 5
        assert frames[-1] is controller.surface
        assert controller.surface.buffer[:, :, 1].any()
        assert len(controller.last_trace) == 200

    def test_no_frames_while_off(self, controller, timers):
        timers.advance(1000)
        assert controller.scheduler.frame_count == 0
        assert not controller.surface.buffer.any()

    def test_toggle_power(self, controller):
        assert controller.toggle_power() is True
        assert controller.toggle_power() is False

    def test_shutdown_stops_everything(self, controller, timers):
        controller.select_plate(5)
        controller.set_power(True)
        controller.begin_continuous_adjust(1)
        controller.shutdown()

        assert timers.pending == 0


# =============================================================================
# TEST 5: Parameter validation
# =============================================================================


class TestParameters:
    def test_unknown_parameter(self, controller):
        with pytest.raises(ValueError):
            controller.set_parameter("gain", 3)

    def test_invalid_plate(self, controller):
        with pytest.raises(ValueError):
            controller.select_plate(4)

    def test_fractional_plate_rejected(self, controller):
        with pytest.raises(ValueError):
            controller.select_plate(5.7)
        assert controller.snapshot().plate.width is None

    def test_whole_float_plate_accepted(self, controller):
        controller.select_plate(5.0)
        assert controller.snapshot().plate.width == 5

    def test_knob_clamp(self, controller):
        controller.set_parameter("intensity", 42)
        assert controller.snapshot().intensity == 10

    def test_rotation_wraps(self, controller):
        controller.set_parameter("rotation_deg", 370)
        assert controller.snapshot().target_object.rotation_deg == pytest.approx(10.0)

    def test_snapshot_is_immutable(self, controller):
        before = controller.snapshot()
        controller.set_parameter("brightness", 9)

        assert before.brightness == 5
        assert controller.snapshot().brightness == 9

    def test_state_callback(self, controller):
        scenes = []
        controller.set_state_callback(scenes.append)
        controller.set_parameter("scale", 3)

        assert scenes[-1].scale == 3


# =============================================================================
# TEST 6: Readout
# =============================================================================


class TestReadout:
    def test_readout(self, controller):
        controller.set_measured_distance(15)
        readout = controller.readout()

        assert readout["speed_mps"] == 1500
        assert readout["unit"] == "MM"
        assert readout["distance_mm"] == 15
        # 2 * 0.015 m / 1500 m/s = 20 us
        assert readout["round_trip_us"] == pytest.approx(20.0)


# =============================================================================
# TEST 7: Schematic
# =============================================================================


class TestSchematic:
    def test_task1_hidden_without_plate(self, controller):
        assert not controller.schematic_visible()
        assert not controller.animator.running

    def test_plate_selection_restarts_animation(self, controller, timers):
        controller.select_plate(5)
        timers.advance(160)
        assert controller.animator.phase > 0

        controller.select_plate(10)
        assert controller.animator.phase == 0.0
        assert controller.animator.running

    def test_markers_delivered(self, controller, timers):
        markers = []
        controller.set_schematic_callback(markers.append)
        controller.set_task(TaskMode.TASK2)
        timers.advance(32)

        assert len(markers) == 2
        assert markers[-1]
