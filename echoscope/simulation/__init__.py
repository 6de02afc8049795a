"""
Simulation Package

Scene model, timers and schedulers. The InstrumentController lives in
echoscope.simulation.controller and is imported from there directly.
"""

from .scene import Material, Scene, Shape, TaskMode, window_width_mm
from .scheduler import ContinuousAdjuster, FrameScheduler, PowerState, SchematicAnimator
from .timers import ManualTimerBackend, TimerBackend, TimerHandle

__all__ = [
    "Scene",
    "TaskMode",
    "Shape",
    "Material",
    "window_width_mm",
    "FrameScheduler",
    "PowerState",
    "SchematicAnimator",
    "ContinuousAdjuster",
    "TimerBackend",
    "TimerHandle",
    "ManualTimerBackend",
]
