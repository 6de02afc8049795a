"""
Reflector Geometry

Maps a test object's shape and rotation to the set of reflector offsets
seen by the probe along its measurement axis.

Each shape is described in the object's own frame (centered at the origin,
size 20 mm) and rotated in-plane; only the projection of every corner or
rim point onto the measurement axis matters for the echo trace.

Shapes:
    - circle: 8 rim points of a 10 mm radius ring
    - square: 4 corners of a 20 mm square
    - triangle: 3 vertices on a 10 mm circumscribed circle
    - rectangle: 4 corners of a 20 x 12 mm rectangle
"""

from typing import List, Union

import numpy as np

from echoscope.simulation.scene import Shape

# Nominal object size [mm]
OBJECT_SIZE_MM = 20.0

# Rectangle height relative to width
RECTANGLE_ASPECT = 0.6

# Rim points used to approximate the circle
CIRCLE_POINTS = 8


def _corner_projections(rad: float, half_w: float, half_h: float) -> List[float]:
    """Project the four corners of a rotated box onto the measurement axis."""
    c = np.cos(rad)
    s = np.sin(rad)
    return [
        float(c * half_w - s * half_h),
        float(c * half_w + s * half_h),
        float(-c * half_w - s * half_h),
        float(-c * half_w + s * half_h),
    ]


def reflector_offsets(shape: Union[Shape, str], rotation_deg: float) -> List[float]:
    """
    Reflector offsets relative to the object center.

    Args:
        shape: Object shape (Shape or its string value)
        rotation_deg: In-plane rotation [degrees]

    Returns:
        Ordered list of signed offsets along the measurement axis [mm]

    Raises:
        ValueError: If the shape is unknown
    """
    shape = Shape(shape)
    rad = np.radians(rotation_deg)
    half = OBJECT_SIZE_MM / 2

    if shape is Shape.CIRCLE:
        angles = np.arange(CIRCLE_POINTS) / CIRCLE_POINTS * 2 * np.pi + rad
        return [float(v) for v in np.cos(angles) * half]

    if shape is Shape.SQUARE:
        return _corner_projections(rad, half, half)

    if shape is Shape.TRIANGLE:
        angles = rad + np.array([0.0, 2 * np.pi / 3, 4 * np.pi / 3])
        return [float(v) for v in np.cos(angles) * half]

    # Rectangle: wider than tall
    return _corner_projections(rad, half, half * RECTANGLE_ASPECT)


def reflector_span(shape: Union[Shape, str], rotation_deg: float) -> float:
    """Separation between the nearest and farthest reflector [mm]."""
    offsets = reflector_offsets(shape, rotation_deg)
    if len(offsets) < 2:
        return 0.0
    return abs(max(offsets) - min(offsets))
