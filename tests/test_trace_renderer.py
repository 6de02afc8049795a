"""
EchoScope Trace Renderer Test Suite

Test ID | Description                                   | Tolerance
--------|-----------------------------------------------|-----------
1       | Cursor hidden outside the visible window      | Exact
2       | Cursor drawn on the computed column           | Exact
3       | Brightness opacity curves                     | 1e-12
4       | Grid per task                                 | Exact
5       | Trace polyline placement                      | 1 px
6       | Raster primitives                             | 1e-6
"""

import os
import sys

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from echoscope.simulation.scene import Scene, TaskMode
from echoscope.visualization.raster import RasterSurface
from echoscope.visualization.trace_renderer import (
    TraceRenderer,
    amplitude_scale,
    cursor_column,
    grid_opacity,
    render,
    trace_opacity,
)

WIDTH = 800
HEIGHT = 400


@pytest.fixture
def surface():
    return RasterSurface(WIDTH, HEIGHT)


def red_columns(surface):
    """Columns containing any red: only the cursor uses the red channel."""
    red = surface.buffer[:, :, 0]
    return np.nonzero(red.max(axis=0) > 0)[0]


# =============================================================================
# TEST 1-2: Measurement cursor
# =============================================================================


class TestCursor:
    """Cursor visibility and placement (scale 5 -> 30 mm window)."""

    def scene(self):
        return Scene(task=TaskMode.TASK2, scale=5, start_position=10.0)

    def test_cursor_column(self, surface):
        render(surface, np.zeros(200), self.scene(), measured_distance=25.0)

        # (25 - 10) / 30 * 800 = 400
        assert list(red_columns(surface)) == [400]

    def test_cursor_before_window_hidden(self, surface):
        render(surface, np.zeros(200), self.scene(), measured_distance=9.9)
        assert red_columns(surface).size == 0

    def test_cursor_after_window_hidden(self, surface):
        render(surface, np.zeros(200), self.scene(), measured_distance=40.1)
        assert red_columns(surface).size == 0

    def test_cursor_at_window_end_clamped(self, surface):
        render(surface, np.zeros(200), self.scene(), measured_distance=40.0)
        assert list(red_columns(surface)) == [WIDTH - 1]

    def test_cursor_column_function(self):
        assert cursor_column(25.0, 10.0, 30.0, WIDTH) == pytest.approx(400.0)
        assert cursor_column(-1.0, 0.0, 30.0, WIDTH) is None
        assert cursor_column(5.0, 0.0, 0.0, WIDTH) is None
        assert cursor_column(10.0, 10.0, 30.0, WIDTH) == 0.0


# =============================================================================
# TEST 3: Brightness
# =============================================================================


class TestBrightness:
    def test_opacity_curves(self):
        assert grid_opacity(0) == pytest.approx(0.2)
        assert grid_opacity(10) == pytest.approx(1.0)
        assert trace_opacity(0) == pytest.approx(0.1)
        assert trace_opacity(10) == pytest.approx(1.0)

    def test_brighter_grid_is_brighter(self):
        dim = RasterSurface(WIDTH, HEIGHT)
        bright = RasterSurface(WIDTH, HEIGHT)
        renderer = TraceRenderer()

        renderer.draw_grid(dim, Scene(task=TaskMode.TASK2, brightness=1))
        renderer.draw_grid(bright, Scene(task=TaskMode.TASK2, brightness=10))

        assert bright.buffer[:, :, 1].sum() > dim.buffer[:, :, 1].sum()

    def test_amplitude_scale(self):
        assert amplitude_scale(400, 10) == pytest.approx(200 * 0.6 * 1.0)


# =============================================================================
# TEST 4: Grids
# =============================================================================


class TestGrid:
    def test_division_grid_task2(self, surface):
        """Task 2: minor lines every 40 px across 800 px"""
        TraceRenderer().draw_grid(surface, Scene(task=TaskMode.TASK2))
        row = surface.buffer[HEIGHT // 2 + 3, :, 1]

        assert row[40] > 0
        assert row[20] == 0

    def test_division_grid_task3_has_more_rows(self):
        task2 = RasterSurface(WIDTH, HEIGHT)
        task3 = RasterSurface(WIDTH, HEIGHT)
        renderer = TraceRenderer()

        renderer.draw_grid(task2, Scene(task=TaskMode.TASK2))
        renderer.draw_grid(task3, Scene(task=TaskMode.TASK3))

        rows2 = np.count_nonzero(task2.buffer[:, 3, 1])
        rows3 = np.count_nonzero(task3.buffer[:, 3, 1])
        assert rows3 > rows2

    def test_checker_grid_task1(self, surface):
        """Task 1 checkerboard covers about half the screen"""
        TraceRenderer().draw_grid(surface, Scene(task=TaskMode.TASK1, scale=5))
        lit = np.count_nonzero(surface.buffer[:, :, 1])

        assert lit > 0.4 * WIDTH * HEIGHT

    def test_grid_never_red(self, surface):
        for task in TaskMode:
            TraceRenderer().draw_grid(surface, Scene(task=task))
            assert red_columns(surface).size == 0


# =============================================================================
# TEST 5: Trace
# =============================================================================


class TestTrace:
    def test_flat_trace_on_center_row(self, surface):
        TraceRenderer(line_width=1).draw_trace(surface, np.zeros(200), Scene(brightness=10))

        lit_rows = np.nonzero(surface.buffer[:, :, 1].max(axis=1) > 0)[0]
        assert list(lit_rows) == [HEIGHT // 2]

    def test_peak_moves_up(self, surface):
        trace = np.zeros(200)
        trace[100] = 1.0
        TraceRenderer(line_width=1).draw_trace(surface, trace, Scene(scale=10, brightness=10))

        column = surface.buffer[:, 400, 1]
        top = np.nonzero(column > 0)[0].min()
        assert top == pytest.approx(HEIGHT / 2 - amplitude_scale(HEIGHT, 10), abs=1)

    def test_empty_trace_draws_nothing(self, surface):
        TraceRenderer().draw_trace(surface, [], Scene())
        assert not surface.buffer.any()

    def test_clear(self, surface):
        surface.clear((1.0, 1.0, 1.0))
        TraceRenderer().clear(surface)
        assert not surface.buffer.any()


# =============================================================================
# TEST 6: Raster primitives
# =============================================================================


class TestRasterSurface:
    def test_alpha_blend(self):
        s = RasterSurface(4, 4)
        s.fill_mask(np.ones((4, 4), dtype=bool), (0.0, 1.0, 0.0, 0.5))
        s.fill_mask(np.ones((4, 4), dtype=bool), (0.0, 1.0, 0.0, 0.5))

        assert s.buffer[0, 0, 1] == pytest.approx(0.75)

    def test_vline_clipped(self):
        s = RasterSurface(10, 5)
        s.vline(50, (1.0, 0.0, 0.0, 1.0))
        assert np.all(s.buffer[:, 9, 0] == 1.0)

    def test_to_rgba8(self):
        s = RasterSurface(3, 2)
        s.clear((0.0, 1.0, 0.0))
        image = s.to_rgba8()

        assert image.shape == (2, 3, 4)
        assert image.dtype == np.uint8
        assert np.all(image[:, :, 1] == 255)
        assert np.all(image[:, :, 3] == 255)

    def test_resize_clears(self):
        s = RasterSurface(3, 2)
        s.clear((1.0, 1.0, 1.0))
        s.resize(5, 4)
        assert s.buffer.shape == (4, 5, 3)
        assert not s.buffer.any()

    def test_polyline_horizontal(self):
        s = RasterSurface(20, 10)
        s.polyline([0, 19], [5, 5], (0.0, 1.0, 0.0, 1.0))
        assert np.all(s.buffer[5, :, 1] == 1.0)
        assert s.buffer[4, :, 1].sum() == 0
