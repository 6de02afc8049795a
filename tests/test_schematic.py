"""
EchoScope Schematic Timeline Test Suite

Test ID | Description                                 | Tolerance
--------|---------------------------------------------|-----------
1       | Task 1 empty without a plate                | Exact
2       | Task 1 cycle phases                         | 1e-9 mm
3       | Task 2 outgoing / return halves             | 1e-9 mm
4       | Task 3 lagged second pulse                  | 1e-9 mm
"""

import os
import sys

import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from echoscope.signal.echoes import CYLINDER_TOP_MM
from echoscope.simulation.scene import (
    CylinderParams,
    ObjectParams,
    PlateParams,
    Scene,
    Shape,
    TaskMode,
)
from echoscope.simulation.schematic import PulseRole, pulse_markers

# speed 1.0 so phase == cycle time
SPEED = 1.0


def roles(markers):
    return {m.role for m in markers}


def by_role(markers, role):
    return [m for m in markers if m.role is role]


# =============================================================================
# TEST 1-2: Plate
# =============================================================================


class TestPlateTimeline:
    scene = Scene(task=TaskMode.TASK1, plate=PlateParams(width=10, distance_mm=30))

    def test_no_plate_no_markers(self):
        assert pulse_markers(TaskMode.TASK1, 0.5, Scene(), speed=SPEED) == []

    def test_outgoing_half_way(self):
        markers = pulse_markers(TaskMode.TASK1, 0.5, self.scene, speed=SPEED)
        (outgoing,) = by_role(markers, PulseRole.OUTGOING)

        assert outgoing.position_mm == pytest.approx(15.0)

    def test_front_echo_and_transmitted(self):
        markers = pulse_markers(TaskMode.TASK1, 1.25, self.scene, speed=SPEED)

        (echo,) = by_role(markers, PulseRole.FRONT_ECHO)
        (inside,) = by_role(markers, PulseRole.TRANSMITTED)
        assert echo.position_mm == pytest.approx(22.5)
        assert inside.position_mm == pytest.approx(35.0)

    def test_backwall_reflection(self):
        markers = pulse_markers(TaskMode.TASK1, 1.75, self.scene, speed=SPEED)
        (back,) = by_role(markers, PulseRole.BACKWALL)

        assert back.position_mm == pytest.approx(35.0)

    def test_back_echo(self):
        markers = pulse_markers(TaskMode.TASK1, 2.5, self.scene, speed=SPEED)
        assert PulseRole.BACK_ECHO in roles(markers)
        assert PulseRole.OUTGOING not in roles(markers)

    def test_quiet_tail_of_cycle(self):
        """3.0-4.0 only the extra pulse may be visible"""
        markers = pulse_markers(TaskMode.TASK1, 3.5, self.scene, speed=SPEED)
        assert roles(markers) <= {PulseRole.EXTRA}

    def test_cycle_repeats(self):
        a = pulse_markers(TaskMode.TASK1, 0.5, self.scene, speed=SPEED)
        b = pulse_markers(TaskMode.TASK1, 4.5, self.scene, speed=SPEED)
        assert by_role(a, PulseRole.OUTGOING) == by_role(b, PulseRole.OUTGOING)


# =============================================================================
# TEST 3: Object
# =============================================================================


class TestObjectTimeline:
    scene = Scene(
        task=TaskMode.TASK2,
        target_object=ObjectParams(shape=Shape.SQUARE, rotation_deg=0, distance_mm=50),
    )

    def test_outgoing_reaches_near_face(self):
        # near face at 50 - 10 = 40 mm, reached at t = 1.5
        markers = pulse_markers(TaskMode.TASK2, 0.75, self.scene, speed=SPEED)
        (outgoing,) = by_role(markers, PulseRole.OUTGOING)
        assert outgoing.position_mm == pytest.approx(20.0)

    def test_return_half(self):
        markers = pulse_markers(TaskMode.TASK2, 2.25, self.scene, speed=SPEED)
        (echo,) = by_role(markers, PulseRole.FRONT_ECHO)
        assert echo.position_mm == pytest.approx(20.0)

    def test_extra_pulse(self):
        # extra cycle: phase * speed * 0.6 mod 2.5 < 1
        markers = pulse_markers(TaskMode.TASK2, 1.0, self.scene, speed=SPEED)
        (extra,) = by_role(markers, PulseRole.EXTRA)
        assert extra.position_mm == pytest.approx(0.6 * 40.0)
        assert extra.opacity < 0.5


# =============================================================================
# TEST 4: Cylinder
# =============================================================================


class TestCylinderTimeline:
    scene = Scene(task=TaskMode.TASK3, cylinder=CylinderParams(thickness_mm=40))

    def test_second_pulse_not_before_lag(self):
        markers = pulse_markers(TaskMode.TASK3, 0.5, self.scene, speed=SPEED)
        assert roles(markers) == {PulseRole.OUTGOING}

    def test_transmitted_through_wall(self):
        # lag = 0.25 -> half way through the wall
        markers = pulse_markers(TaskMode.TASK3, 1.25, self.scene, speed=SPEED)
        (inside,) = by_role(markers, PulseRole.TRANSMITTED)
        assert inside.position_mm == pytest.approx(CYLINDER_TOP_MM + 20.0)

    def test_bottom_echo_returns(self):
        markers = pulse_markers(TaskMode.TASK3, 2.5, self.scene, speed=SPEED)
        (back,) = by_role(markers, PulseRole.BACK_ECHO)
        assert back.position_mm == pytest.approx(CYLINDER_TOP_MM / 2)

    def test_no_extra_pulse(self):
        for phase in (0.2, 1.0, 2.0, 2.9):
            markers = pulse_markers(TaskMode.TASK3, phase, self.scene, speed=SPEED)
            assert PulseRole.EXTRA not in roles(markers)
