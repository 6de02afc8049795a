"""
Visualization Package

Numpy raster surface, trace renderer and PNG frame export.
"""

from .raster import RasterSurface
from .trace_renderer import TraceRenderer, cursor_column, render

__all__ = [
    "RasterSurface",
    "TraceRenderer",
    "cursor_column",
    "render",
]
