"""
Raster Surface

Float RGB frame buffer the trace renderer paints into. The buffer is a
plain numpy array (height, width, 3) in [0, 1], so frames can be tested
pixel by pixel and handed to a pyqtgraph ImageItem without copying
through QPainter.

All drawing is alpha-blended over the current contents:

    dst = dst * (1 - a) + color * a
"""

from typing import Sequence, Tuple

import numba
import numpy as np

RGBA = Tuple[float, float, float, float]


@numba.jit(nopython=True, cache=True)
def _blend_polyline_jit(
    buffer: np.ndarray,
    xs: np.ndarray,
    ys: np.ndarray,
    r: float,
    g: float,
    b: float,
    alpha: float,
    thickness: int,
) -> None:
    """
    JIT-compiled polyline rasterizer (DDA).

    Each segment is stepped one pixel at a time along its major axis and
    stamped with a square brush of the given thickness. The first pixel
    of every segment after the first is skipped so shared vertices are
    blended once.
    """
    height = buffer.shape[0]
    width = buffer.shape[1]
    lo = -(thickness // 2)
    hi = lo + thickness

    for seg in range(len(xs) - 1):
        x0 = xs[seg]
        y0 = ys[seg]
        x1 = xs[seg + 1]
        y1 = ys[seg + 1]

        steps = int(max(abs(x1 - x0), abs(y1 - y0)))
        if steps < 1:
            steps = 1
        x_step = (x1 - x0) / steps
        y_step = (y1 - y0) / steps

        start = 0 if seg == 0 else 1
        for i in range(start, steps + 1):
            cx = int(x0 + x_step * i)
            cy = int(y0 + y_step * i)
            for dy in range(lo, hi):
                py = cy + dy
                if py < 0 or py >= height:
                    continue
                for dx in range(lo, hi):
                    px = cx + dx
                    if px < 0 or px >= width:
                        continue
                    buffer[py, px, 0] = buffer[py, px, 0] * (1.0 - alpha) + r * alpha
                    buffer[py, px, 1] = buffer[py, px, 1] * (1.0 - alpha) + g * alpha
                    buffer[py, px, 2] = buffer[py, px, 2] * (1.0 - alpha) + b * alpha


class RasterSurface:
    """
    Drawing surface backed by a numpy RGB buffer.

    Usage:
        surface = RasterSurface(800, 400)
        surface.clear()
        surface.vline(120, (1.0, 1.0, 0.0, 0.6))
        image = surface.to_rgba8()
    """

    def __init__(self, width: int = 800, height: int = 400) -> None:
        """
        Initialize surface.

        Args:
            width: Width in pixels
            height: Height in pixels
        """
        self.width = int(width)
        self.height = int(height)
        self.buffer = np.zeros((self.height, self.width, 3), dtype=np.float32)

    def resize(self, width: int, height: int) -> None:
        """Reallocate the buffer (contents are cleared)."""
        self.width = max(1, int(width))
        self.height = max(1, int(height))
        self.buffer = np.zeros((self.height, self.width, 3), dtype=np.float32)

    def clear(self, color: Tuple[float, float, float] = (0.0, 0.0, 0.0)) -> None:
        """Fill the whole surface with an opaque color."""
        self.buffer[:, :] = color

    def _blend(self, region: np.ndarray, rgba: RGBA) -> None:
        r, g, b, a = rgba
        region *= 1.0 - a
        region += np.array([r, g, b], dtype=np.float32) * a

    def fill_mask(self, mask: np.ndarray, rgba: RGBA) -> None:
        """Blend a color into every pixel where mask is True."""
        r, g, b, a = rgba
        color = np.array([r, g, b], dtype=np.float32)
        self.buffer[mask] = self.buffer[mask] * (1.0 - a) + color * a

    def vline(self, x: float, rgba: RGBA, thickness: int = 1) -> None:
        """Full-height vertical line starting at column int(x)."""
        col = min(self.width - 1, int(x))
        if col < 0:
            return
        self._blend(self.buffer[:, col : min(self.width, col + thickness)], rgba)

    def hline(self, y: float, rgba: RGBA, thickness: int = 1) -> None:
        """Full-width horizontal line starting at row int(y)."""
        row = min(self.height - 1, int(y))
        if row < 0:
            return
        self._blend(self.buffer[row : min(self.height, row + thickness), :], rgba)

    def polyline(
        self, xs: Sequence[float], ys: Sequence[float], rgba: RGBA, thickness: int = 1
    ) -> None:
        """
        Connected line through the given points.

        Args:
            xs: X coordinates [px]
            ys: Y coordinates [px]
            rgba: Stroke color and opacity
            thickness: Brush size [px]
        """
        xs = np.asarray(xs, dtype=np.float64)
        ys = np.asarray(ys, dtype=np.float64)
        if xs.size < 2 or xs.size != ys.size:
            return
        r, g, b, a = rgba
        _blend_polyline_jit(
            self.buffer, xs, ys, float(r), float(g), float(b), float(a), int(max(1, thickness))
        )

    def to_rgba8(self) -> np.ndarray:
        """Convert to an opaque (height, width, 4) uint8 image."""
        rgba = np.empty((self.height, self.width, 4), dtype=np.uint8)
        rgba[:, :, :3] = np.clip(self.buffer * 255.0 + 0.5, 0, 255).astype(np.uint8)
        rgba[:, :, 3] = 255
        return rgba
