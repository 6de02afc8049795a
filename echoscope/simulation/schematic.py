"""
Schematic Pulse Timeline

Positions of the traveling pulse markers in the side-view schematic
(probe, test object, pulses bouncing between them) as a function of the
animation phase.

Purely illustrative: the timeline never feeds back into the echo trace.

Cycle layout (in units of phase * speed):

    task1 (cycle 4):
        0.0-1.0  outgoing pulse, probe -> plate front
        1.0-2.0  front-face echo returning to probe
        1.0-1.5  transmitted pulse crossing the plate
        1.5-2.0  back-face reflection crossing back
        2.0-3.0  back-face echo returning to probe
    task2 (cycle 3):
        0.0-1.5  outgoing pulse, probe -> object near face
        1.5-3.0  echo returning to probe
    task3 (cycle 3, second pulse lags by 1):
        0.0-1.0  outgoing pulse, probe -> cylinder top
        1.0-2.0  top echo returning to probe
        lag 0.0-0.5  transmitted through the wall
        lag 0.5-1.0  bottom reflection crossing back
        lag 1.0-2.0  bottom echo returning to probe

Tasks 1 and 2 also show a faint extra outgoing pulse on its own 2.5
cycle at 0.6x speed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import List

from echoscope.physics.geometry import reflector_offsets
from echoscope.signal.echoes import CYLINDER_TOP_MM
from echoscope.simulation.scene import Scene, TaskMode

# Default animation speed (phase units per second of animation time)
DEFAULT_SPEED = 0.4


class PulseRole(Enum):
    """What a marker represents."""

    OUTGOING = "outgoing"
    FRONT_ECHO = "front_echo"
    TRANSMITTED = "transmitted"
    BACKWALL = "backwall"
    BACK_ECHO = "back_echo"
    EXTRA = "extra"


@dataclass(frozen=True)
class PulseMarker:
    """
    One pulse marker.

    Attributes:
        role: Marker role (drives color)
        position_mm: Distance from probe face along the beam [mm]
        opacity: Marker opacity (0-1)
        radius_px: Nominal ring radius [px]
    """

    role: PulseRole
    position_mm: float
    opacity: float
    radius_px: float = 20.0


def _extra_marker(phase: float, speed: float, target_mm: float) -> List[PulseMarker]:
    t = (phase * speed * 0.6) % 2.5
    if t < 1:
        return [PulseMarker(PulseRole.EXTRA, t * target_mm, 0.3, radius_px=15.0)]
    return []


def _plate_markers(phase: float, speed: float, scene: Scene) -> List[PulseMarker]:
    width = scene.plate.width
    if not width:
        return []

    front = scene.plate.distance_mm
    back = front + width
    t = (phase * speed) % 4.0
    markers = []

    if t < 1:
        markers.append(PulseMarker(PulseRole.OUTGOING, t * front, 0.8))
    if 1 <= t < 2:
        markers.append(PulseMarker(PulseRole.FRONT_ECHO, front - (t - 1) * front, 0.8))
    if 1 <= t < 1.5:
        markers.append(PulseMarker(PulseRole.TRANSMITTED, front + (t - 1) / 0.5 * width, 0.6))
    if 1.5 <= t < 2:
        markers.append(PulseMarker(PulseRole.BACKWALL, back - (t - 1.5) / 0.5 * width, 0.8))
    if 2 <= t < 3:
        markers.append(PulseMarker(PulseRole.BACK_ECHO, front - (t - 2) * front, 0.7))

    return markers + _extra_marker(phase, speed, front)


def _object_markers(phase: float, speed: float, scene: Scene) -> List[PulseMarker]:
    obj = scene.target_object
    near = max(0.0, obj.distance_mm + min(reflector_offsets(obj.shape, obj.rotation_deg)))
    t = (phase * speed) % 3.0

    if t < 1.5:
        markers = [PulseMarker(PulseRole.OUTGOING, t / 1.5 * near, 0.7)]
    else:
        markers = [PulseMarker(PulseRole.FRONT_ECHO, near - (t - 1.5) / 1.5 * near, 0.6)]

    return markers + _extra_marker(phase, speed, near)


def _cylinder_markers(phase: float, speed: float, scene: Scene) -> List[PulseMarker]:
    top = CYLINDER_TOP_MM
    thickness = scene.cylinder.thickness_mm
    t = (phase * speed) % 3.0
    markers = []

    if t < 1:
        markers.append(PulseMarker(PulseRole.OUTGOING, t * top, 0.7))
    if 1 <= t < 2:
        markers.append(PulseMarker(PulseRole.FRONT_ECHO, top - (t - 1) * top, 0.6))

    # Second pulse starts one unit later and has not been emitted before that
    lag = phase * speed - 1.0
    if lag >= 0:
        lag %= 3.0
        if lag < 0.5:
            markers.append(
                PulseMarker(PulseRole.TRANSMITTED, top + lag / 0.5 * thickness, 0.5)
            )
        elif lag < 1:
            markers.append(
                PulseMarker(
                    PulseRole.BACKWALL, top + thickness - (lag - 0.5) / 0.5 * thickness, 0.6
                )
            )
        elif lag < 2:
            markers.append(PulseMarker(PulseRole.BACK_ECHO, top - (lag - 1) * top, 0.5))

    return markers


def pulse_markers(
    task: TaskMode, phase: float, scene: Scene, speed: float = DEFAULT_SPEED
) -> List[PulseMarker]:
    """
    Pulse markers visible at the given animation phase.

    Args:
        task: Task whose schematic is drawn
        phase: Animation phase accumulator
        scene: Scene snapshot (geometry source)
        speed: Phase-to-cycle speed factor

    Returns:
        List of PulseMarker (empty for task 1 without a plate)
    """
    task = TaskMode(task)
    if task is TaskMode.TASK1:
        return _plate_markers(phase, speed, scene)
    if task is TaskMode.TASK2:
        return _object_markers(phase, speed, scene)
    return _cylinder_markers(phase, speed, scene)
