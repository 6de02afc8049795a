"""
Trace Renderer

Oscilloscope-style painter for the echo trace.

Draws, in order:
    1. Black background
    2. Task-specific calibrated grid
       - task1: checkerboard ruler, cell size shrinks with scale
       - task2: 20 x 20 minor / 10 x 10 major divisions
       - task3: 40 minor / 20 major horizontal, 20 minor / 10 major vertical
    3. Green trace polyline
    4. Yellow measurement cursor

Brightness modulates everything:
    grid/cursor opacity = 0.2 + 0.8 * (brightness / 10)
    trace opacity       = 0.1 + 0.9 * (brightness / 10)
"""

from typing import Optional, Sequence

import numpy as np

from echoscope.simulation.scene import FULL_RANGE_MM, Scene, TaskMode, window_width_mm

from .raster import RasterSurface

# Phosphor colors (RGB in [0, 1])
TRACE_COLOR = (0.0, 1.0, 0.0)
GRID_COLOR = (0.0, 1.0, 0.0)
CHECKER_COLOR = (0.0, 0x11 / 255.0, 0.0)
CURSOR_COLOR = (1.0, 1.0, 0.0)

# Grid alpha bytes before brightness modulation
MAJOR_ALPHA = 0x60 / 255.0
MINOR_ALPHA = 0x30 / 255.0
CHECKER_ALPHA = 0x60 / 255.0

# Task 1 checkerboard cell size at scale 1 [px]
CHECKER_BASE_PX = 20.0

# Vertical amplitude: fraction of the half-height used at unit amplitude
AMPLITUDE_FRACTION = 0.6


def grid_opacity(brightness: float) -> float:
    """Brightness multiplier for grid and cursor (0.2 to 1.0)."""
    return 0.2 + (brightness / 10.0) * 0.8


def trace_opacity(brightness: float) -> float:
    """Trace stroke opacity (0.1 to 1.0)."""
    return 0.1 + (brightness / 10.0) * 0.9


def amplitude_scale(surface_height: int, scale: float) -> float:
    """Pixels per unit amplitude, with a small zoom-dependent boost."""
    return (surface_height / 2.0) * AMPLITUDE_FRACTION * (0.9 + scale * 0.01)


def cursor_column(
    measured_distance: float, start_position: float, window_mm: float, surface_width: int
) -> Optional[float]:
    """
    Screen x of the measurement cursor.

    Returns:
        X position [px], or None if the cursor is hidden (negative
        distance, outside the visible window, or degenerate window)
    """
    if window_mm <= 0 or measured_distance < 0:
        return None

    end = start_position + window_mm
    if measured_distance < start_position or measured_distance > end:
        return None

    x = (measured_distance - start_position) / window_mm * surface_width
    return max(0.0, min(float(surface_width), x))


class TraceRenderer:
    """
    Paints grid, trace and cursor onto a RasterSurface.

    Usage:
        renderer = TraceRenderer()
        renderer.render(surface, trace, scene, measured_distance=5)
    """

    def __init__(self, full_range_mm: float = FULL_RANGE_MM, line_width: int = 2) -> None:
        """
        Initialize renderer.

        Args:
            full_range_mm: Visible range at scale 1 [mm]
            line_width: Trace stroke width [px]
        """
        self.full_range_mm = full_range_mm
        self.line_width = line_width

    def clear(self, surface: RasterSurface) -> None:
        """Rest state: black screen."""
        surface.clear((0.0, 0.0, 0.0))

    def render(
        self,
        surface: RasterSurface,
        trace: Sequence[float],
        scene: Scene,
        measured_distance: float,
    ) -> None:
        """
        Paint one frame.

        Args:
            surface: Target surface
            trace: Amplitude samples
            scene: Scene snapshot the trace was synthesized from
            measured_distance: Cursor position [mm]
        """
        self.clear(surface)
        self.draw_grid(surface, scene)
        self.draw_trace(surface, trace, scene)
        self.draw_cursor(surface, scene, measured_distance)

    # ═══ GRID ═══

    def draw_grid(self, surface: RasterSurface, scene: Scene) -> None:
        """Draw the calibration grid for the active task."""
        if scene.task is TaskMode.TASK1:
            self._draw_checker_grid(surface, scene)
        elif scene.task is TaskMode.TASK2:
            self._draw_division_grid(surface, scene.brightness, (20, 20), (10, 10))
        else:
            self._draw_division_grid(surface, scene.brightness, (20, 40), (10, 20))

    def _draw_checker_grid(self, surface: RasterSurface, scene: Scene) -> None:
        """Checkerboard ruler: minor cell plus a major line every 5 cells."""
        multiplier = grid_opacity(scene.brightness)
        cell = CHECKER_BASE_PX / (max(scene.scale, 1) * 0.3)

        cols = (np.arange(surface.width) // cell).astype(np.int64)
        rows = (np.arange(surface.height) // cell).astype(np.int64)
        mask = ((rows[:, None] + cols[None, :]) % 2) == 0
        surface.fill_mask(mask, (*CHECKER_COLOR, CHECKER_ALPHA * multiplier))

        major = cell * 5
        for x in np.arange(0.0, surface.width, major):
            surface.vline(x, (*GRID_COLOR, MAJOR_ALPHA * multiplier), thickness=2)
        for y in np.arange(0.0, surface.height, major):
            surface.hline(y, (*GRID_COLOR, MAJOR_ALPHA * multiplier), thickness=2)

        for x in np.arange(0.0, surface.width, cell):
            surface.vline(x, (*GRID_COLOR, MINOR_ALPHA * multiplier))
        for y in np.arange(0.0, surface.height, cell):
            surface.hline(y, (*GRID_COLOR, MINOR_ALPHA * multiplier))

    def _draw_division_grid(self, surface: RasterSurface, brightness: int, minor, major) -> None:
        """
        Fixed divisions independent of physical scale.

        Args:
            minor: (vertical lines, horizontal lines) minor divisions
            major: (vertical lines, horizontal lines) major divisions
        """
        multiplier = grid_opacity(brightness)
        minor_rgba = (*GRID_COLOR, MINOR_ALPHA * multiplier)
        major_rgba = (*GRID_COLOR, MAJOR_ALPHA * multiplier)

        for divisions, rgba, thickness in ((minor, minor_rgba, 1), (major, major_rgba, 2)):
            n_x, n_y = divisions
            for i in range(n_y + 1):
                surface.hline(surface.height / n_y * i, rgba, thickness)
            for i in range(n_x + 1):
                surface.vline(surface.width / n_x * i, rgba, thickness)

    # ═══ TRACE ═══

    def draw_trace(self, surface: RasterSurface, trace: Sequence[float], scene: Scene) -> None:
        """Draw the trace polyline; an empty trace draws nothing."""
        samples = np.asarray(trace, dtype=np.float64)
        n = samples.size
        if n == 0:
            return

        center_y = surface.height / 2.0
        xs = np.arange(n, dtype=np.float64) / n * surface.width
        ys = center_y - samples * amplitude_scale(surface.height, scene.scale)

        surface.polyline(
            xs, ys, (*TRACE_COLOR, trace_opacity(scene.brightness)), thickness=self.line_width
        )

    # ═══ CURSOR ═══

    def draw_cursor(self, surface: RasterSurface, scene: Scene, measured_distance: float) -> None:
        """Draw the vertical measurement cursor if it falls inside the window."""
        window = window_width_mm(scene.scale, self.full_range_mm)
        x = cursor_column(measured_distance, scene.start_position, window, surface.width)
        if x is None:
            return
        surface.vline(x, (*CURSOR_COLOR, grid_opacity(scene.brightness)))


def render(
    surface: RasterSurface, trace: Sequence[float], scene: Scene, measured_distance: float
) -> None:
    """Convenience function: render one frame with default settings."""
    TraceRenderer().render(surface, trace, scene, measured_distance)
