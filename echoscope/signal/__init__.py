"""
Signals Package

Synthetic pulse-echo trace generation.
"""

from .echoes import (
    MATERIAL_REFLECTIVITY,
    Echo,
    EchoSynthesizer,
    PlateShaping,
    bump,
    dominant_peaks,
    synthesize,
)

__all__ = [
    "EchoSynthesizer",
    "Echo",
    "PlateShaping",
    "MATERIAL_REFLECTIVITY",
    "bump",
    "dominant_peaks",
    "synthesize",
]
