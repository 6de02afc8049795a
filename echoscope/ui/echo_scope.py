"""
Echo Scope Display

Instrument screen showing the rendered amplitude-vs-depth trace.

Shows:
    - The RasterSurface frame painted by the controller
    - Visible window (start position and width)
    - Measurement readout (speed, distance, unit)

The controller paints every frame into a numpy buffer; this widget only
uploads it to a pyqtgraph ImageItem.
"""

from typing import Any, Callable, Dict, Optional

import pyqtgraph as pg
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import QHBoxLayout, QLabel, QVBoxLayout, QWidget

from echoscope.visualization.raster import RasterSurface


class EchoScopeView(QWidget):
    """
    Echo scope screen.

    Features:
        - Row-major RGBA frame upload (no per-frame QPainter work)
        - Header with task and window info
        - Readout strip under the screen
    """

    def __init__(self, parent: QWidget = None):
        """
        Initialize echo scope.

        Args:
            parent: Parent widget
        """
        super().__init__(parent)

        self._resize_callback: Optional[Callable[[int, int], None]] = None

        self._setup_ui()

    def _setup_ui(self):
        """Setup the UI components."""
        self.setMinimumHeight(260)
        self.setStyleSheet("background-color: rgb(10, 20, 15);")

        layout = QVBoxLayout(self)
        layout.setContentsMargins(5, 5, 5, 5)
        layout.setSpacing(2)

        # Header with window info
        header_layout = QHBoxLayout()

        self.header_label = QLabel("ECHO SCOPE: AMPLITUDE vs DEPTH")
        self.header_label.setStyleSheet(
            """
            QLabel {
                color: #00dd66;
                font-family: 'Consolas', monospace;
                font-size: 12px;
                font-weight: bold;
            }
        """
        )
        header_layout.addWidget(self.header_label)

        header_layout.addStretch()

        self.window_label = QLabel("0.0 - 30.0 mm")
        self.window_label.setStyleSheet(
            """
            QLabel {
                color: #00aa44;
                font-family: 'Consolas', monospace;
                font-size: 11px;
            }
        """
        )
        header_layout.addWidget(self.window_label)

        layout.addLayout(header_layout)

        # Screen: a bare ViewBox holding one ImageItem
        self.graphics = pg.GraphicsLayoutWidget()
        self.graphics.setBackground(QColor(0, 0, 0))
        self.graphics.ci.setContentsMargins(0, 0, 0, 0)

        self.view_box = self.graphics.addViewBox(lockAspect=False, enableMouse=False)
        self.view_box.invertY(True)  # Row 0 at the top, like the raster
        self.view_box.setMenuEnabled(False)

        self.image_item = pg.ImageItem(axisOrder="row-major")
        self.view_box.addItem(self.image_item)

        layout.addWidget(self.graphics, stretch=1)

        # Readout strip
        self.readout_label = QLabel("V = 1500 m/s | 0.0 MM")
        self.readout_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self.readout_label.setStyleSheet(
            """
            QLabel {
                color: #00ff88;
                background-color: #001a0d;
                border: 1px solid #006633;
                font-family: 'Consolas', monospace;
                font-size: 14px;
                font-weight: bold;
                padding: 4px;
            }
        """
        )
        layout.addWidget(self.readout_label)

    def set_resize_callback(self, callback: Callable[[int, int], None]) -> None:
        """Set callback receiving the screen size in pixels after a resize."""
        self._resize_callback = callback

    def screen_size(self):
        """Current screen size in device-independent pixels."""
        size = self.graphics.size()
        return max(1, size.width()), max(1, size.height())

    def resizeEvent(self, event) -> None:
        super().resizeEvent(event)
        if self._resize_callback:
            self._resize_callback(*self.screen_size())

    def update_frame(self, surface: RasterSurface) -> None:
        """
        Upload a painted frame.

        Args:
            surface: Surface painted by the controller
        """
        image = surface.to_rgba8()
        self.image_item.setImage(image, autoLevels=False, levels=(0, 255))
        self.view_box.setRange(
            xRange=(0, surface.width), yRange=(0, surface.height), padding=0
        )

    def update_window(self, task_name: str, start_mm: float, window_mm: float) -> None:
        """Show the active task and visible depth window."""
        self.header_label.setText(f"ECHO SCOPE: {task_name.upper()}")
        self.window_label.setText(f"{start_mm:.1f} - {start_mm + window_mm:.1f} mm")

    def update_readout(self, readout: Dict[str, Any]) -> None:
        """Show the controller readout (speed, distance, unit)."""
        self.readout_label.setText(
            f"V = {readout['speed_mps']:.0f} m/s | "
            f"{readout['distance_mm']:.1f} {readout['unit']} | "
            f"t = {readout['round_trip_us']:.2f} us"
        )
