"""
Rotary Input

Maps pointer drags around a knob center to an integer value. One full
turn sweeps the whole value range; the angle is unwrapped per event so
dragging across the +/-180 degree seam keeps counting smoothly.

Independent of any input technology: the widget layer forwards mouse or
touch positions to begin() / update() / end().
"""

import math
from typing import Callable, Optional, Tuple

Point = Tuple[float, float]


class RotaryInput:
    """
    Knob drag state.

    Usage:
        knob = RotaryInput(1, 10, on_change=lambda v: controller.set_parameter("scale", v))
        knob.begin(pointer, center, value=5)
        knob.update(pointer)
        knob.end()
    """

    def __init__(
        self,
        min_value: float = 1,
        max_value: float = 10,
        on_change: Optional[Callable[[int], None]] = None,
    ) -> None:
        self.min_value = min_value
        self.max_value = max_value
        self.on_change = on_change

        self._center: Optional[Point] = None
        self._start_value = 0.0
        self._last_angle = 0.0
        self._total_rotation = 0.0
        self.value: Optional[int] = None

    @property
    def active(self) -> bool:
        """True between begin() and end()."""
        return self._center is not None

    @staticmethod
    def _angle(pointer: Point, center: Point) -> float:
        return math.atan2(pointer[1] - center[1], pointer[0] - center[0])

    def begin(self, pointer: Point, center: Point, value: float) -> None:
        """
        Start a drag.

        Args:
            pointer: Pointer position
            center: Knob center (same coordinate system)
            value: Value at drag start
        """
        self._center = center
        self._start_value = value
        self._last_angle = self._angle(pointer, center)
        self._total_rotation = 0.0
        self.value = int(round(value))

    def update(self, pointer: Point, center: Optional[Point] = None) -> Optional[int]:
        """
        Pointer moved.

        Args:
            pointer: Pointer position
            center: Knob center if it moved (e.g. layout change)

        Returns:
            New value, or None if no drag is active
        """
        if self._center is None:
            return None
        if center is not None:
            self._center = center

        angle = self._angle(pointer, self._center)
        diff = angle - self._last_angle
        if diff > math.pi:
            diff -= 2 * math.pi
        elif diff < -math.pi:
            diff += 2 * math.pi

        self._total_rotation += diff
        self._last_angle = angle

        span = self.max_value - self.min_value
        raw = self._start_value + self._total_rotation / (2 * math.pi) * span
        value = int(max(self.min_value, min(self.max_value, round(raw))))

        if value != self.value:
            self.value = value
            if self.on_change:
                self.on_change(value)
        return value

    def end(self) -> None:
        """Finish the drag."""
        self._center = None
