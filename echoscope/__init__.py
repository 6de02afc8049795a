"""
EchoScope Source Package

Educational ultrasonic pulse-echo instrument simulator with:
- Synthetic A-scan echo generation (plates, shaped objects, cylinders)
- Oscilloscope-style trace rendering with calibrated grids
- Measurement cursor with press-and-hold fine adjustment
- PyQt6 front panel
"""

from echoscope.io.config_loader import ConfigLoader, SimulatorConfig, load_config
from echoscope.physics.geometry import reflector_offsets, reflector_span
from echoscope.signal.echoes import EchoSynthesizer, PlateShaping, synthesize
from echoscope.simulation.controller import InstrumentController
from echoscope.simulation.scene import Material, Scene, Shape, TaskMode
from echoscope.simulation.timers import ManualTimerBackend
from echoscope.visualization.raster import RasterSurface
from echoscope.visualization.trace_renderer import TraceRenderer, render

__version__ = "1.0.0"
__author__ = "EchoScope Contributors"

__all__ = [
    # Scene
    "Scene",
    "TaskMode",
    "Shape",
    "Material",
    # Geometry
    "reflector_offsets",
    "reflector_span",
    # Synthesis
    "EchoSynthesizer",
    "PlateShaping",
    "synthesize",
    # Rendering
    "RasterSurface",
    "TraceRenderer",
    "render",
    # Session
    "InstrumentController",
    "ManualTimerBackend",
    "ConfigLoader",
    "SimulatorConfig",
    "load_config",
]
