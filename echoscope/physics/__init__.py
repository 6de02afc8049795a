"""
Physics Package

Test-object geometry as seen along the probe axis.
"""

from .geometry import OBJECT_SIZE_MM, reflector_offsets, reflector_span

__all__ = [
    "OBJECT_SIZE_MM",
    "reflector_offsets",
    "reflector_span",
]
