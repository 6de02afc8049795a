"""
UI Panels Package

Front-panel widgets of the instrument.

Components:
    - InstrumentControlPanel: task, power, knobs, plate/rotation inputs, measurement cursor
    - RotaryKnob: drag-to-turn knob widget
"""

from .instrument_controls import InstrumentControlPanel, RotaryKnob

__all__ = [
    "InstrumentControlPanel",
    "RotaryKnob",
]
