"""
Scene Model

Snapshot of the instrument state: which task is active, the hidden
geometry of every task, and the display knobs (intensity, brightness,
scale, start position, power).

A Scene is frozen. Every user change produces a new Scene through
with_parameter(), so the synthesizer and renderer always read one
consistent snapshot per frame.

Coordinate convention:
    Positions are measured along the probe axis in millimetres, with the
    probe face at 0 mm.
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional

import numpy as np


class TaskMode(Enum):
    """Laboratory task selecting the scene geometry."""

    TASK1 = "task1"  # Plate thickness
    TASK2 = "task2"  # Object shape / rotation
    TASK3 = "task3"  # Cylinder thickness / material


class Shape(Enum):
    """Hidden object shapes for task 2."""

    CIRCLE = "circle"
    SQUARE = "square"
    TRIANGLE = "triangle"
    RECTANGLE = "rectangle"


class Material(Enum):
    """Hidden cylinder materials for task 3."""

    ALUMINUM = "aluminum"
    POLYMER = "polymer"
    STEEL = "steel"


# Selectable plate thicknesses [mm]
PLATE_WIDTHS = (2, 3, 5, 10)

# Plate distance range [mm]
PLATE_DISTANCE_MIN_MM = 30.0
PLATE_DISTANCE_MAX_MM = 40.0

# Knob range shared by intensity, brightness and scale
KNOB_MIN = 1
KNOB_MAX = 10

# Full visible range at scale 1 [mm]
FULL_RANGE_MM = 150.0


def window_width_mm(scale: float, full_range_mm: float = FULL_RANGE_MM) -> float:
    """
    Width of the visible position window.

    Scale 1 shows the full range, scale 10 zooms in 10x. The scale is
    guarded at 1 so the window never collapses to zero.
    """
    return full_range_mm / max(float(scale), float(KNOB_MIN))


@dataclass(frozen=True)
class PlateParams:
    """Task 1: plate under test."""

    width: Optional[int] = None  # mm, one of PLATE_WIDTHS, None = no plate
    distance_mm: float = 35.0


@dataclass(frozen=True)
class ObjectParams:
    """Task 2: shaped object."""

    shape: Shape = Shape.CIRCLE
    rotation_deg: float = 0.0
    distance_mm: float = 50.0


@dataclass(frozen=True)
class CylinderParams:
    """Task 3: cylinder wall."""

    material: Material = Material.ALUMINUM
    thickness_mm: float = 50.0


def _clamp_knob(value: Any) -> int:
    return int(max(KNOB_MIN, min(KNOB_MAX, round(float(value)))))


def _parse_plate_width(value: Any) -> Optional[int]:
    if value is None:
        return None
    if value not in PLATE_WIDTHS:
        raise ValueError(f"Plate width must be one of {list(PLATE_WIDTHS)}, got {value}")
    return int(value)


@dataclass(frozen=True)
class Scene:
    """
    Immutable snapshot of the instrument.

    Parameters of inactive tasks are retained but unused.
    """

    task: TaskMode = TaskMode.TASK1
    intensity: int = 5
    brightness: int = 5
    scale: int = 5
    start_position: float = 0.0
    power_on: bool = False
    plate: PlateParams = field(default_factory=PlateParams)
    target_object: ObjectParams = field(default_factory=ObjectParams)
    cylinder: CylinderParams = field(default_factory=CylinderParams)

    @classmethod
    def randomized(cls, rng: Optional[np.random.Generator] = None, **kwargs) -> "Scene":
        """
        Create a session scene with randomized hidden geometry.

        The object shape, cylinder material and plate distance are drawn
        at random so the learner has no prior knowledge of the answer.

        Args:
            rng: Random generator (default: fresh np.random.default_rng())
            **kwargs: Scene field overrides

        Returns:
            New Scene
        """
        rng = rng if rng is not None else np.random.default_rng()

        shapes = list(Shape)
        materials = list(Material)
        shape = shapes[int(rng.integers(len(shapes)))]
        material = materials[int(rng.integers(len(materials)))]
        distance = PLATE_DISTANCE_MIN_MM + rng.random() * (
            PLATE_DISTANCE_MAX_MM - PLATE_DISTANCE_MIN_MM
        )

        scene = cls(
            plate=PlateParams(width=None, distance_mm=float(distance)),
            target_object=ObjectParams(shape=shape),
            cylinder=CylinderParams(material=material),
        )
        return replace(scene, **kwargs) if kwargs else scene

    @property
    def window_mm(self) -> float:
        """Visible window width [mm]."""
        return window_width_mm(self.scale)

    def with_task(self, task: Any) -> "Scene":
        """Return a copy with another active task."""
        return replace(self, task=TaskMode(task))

    def with_power(self, on: bool) -> "Scene":
        """Return a copy with the power flag set."""
        return replace(self, power_on=bool(on))

    def with_parameter(self, name: str, value: Any) -> "Scene":
        """
        Return a copy with one named parameter changed.

        Numeric values are clamped to their valid ranges, rotation wraps
        into [0, 360).

        Args:
            name: Parameter name (intensity, brightness, scale,
                start_position, plate_width, plate_distance, shape,
                rotation_deg, object_distance, material, thickness)
            value: New value

        Returns:
            New Scene

        Raises:
            ValueError: If the name is unknown or the value invalid
        """
        if name in ("intensity", "brightness", "scale"):
            return replace(self, **{name: _clamp_knob(value)})

        if name == "start_position":
            return replace(self, start_position=max(0.0, float(value)))

        if name == "plate_width":
            return replace(self, plate=replace(self.plate, width=_parse_plate_width(value)))

        if name == "plate_distance":
            distance = min(PLATE_DISTANCE_MAX_MM, max(PLATE_DISTANCE_MIN_MM, float(value)))
            return replace(self, plate=replace(self.plate, distance_mm=distance))

        if name == "shape":
            return replace(self, target_object=replace(self.target_object, shape=Shape(value)))

        if name == "rotation_deg":
            rotation = float(value) % 360.0
            return replace(
                self, target_object=replace(self.target_object, rotation_deg=rotation)
            )

        if name == "object_distance":
            return replace(
                self,
                target_object=replace(self.target_object, distance_mm=max(0.0, float(value))),
            )

        if name == "material":
            return replace(self, cylinder=replace(self.cylinder, material=Material(value)))

        if name == "thickness":
            return replace(
                self, cylinder=replace(self.cylinder, thickness_mm=max(0.0, float(value)))
            )

        raise ValueError(f"Unknown scene parameter: {name}")
