"""
Schematic View

Side view of the probe and the test object for the active task, with the
traveling pulse markers from the schematic timeline drawn as rings.

Coordinates are millimetres: x along the beam from the probe face,
y across it.
"""

from typing import Dict, List, Tuple

import numpy as np
import pyqtgraph as pg
from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import QLabel, QVBoxLayout, QWidget

from echoscope.physics.geometry import OBJECT_SIZE_MM, RECTANGLE_ASPECT
from echoscope.signal.echoes import CYLINDER_TOP_MM
from echoscope.simulation.scene import Scene, Shape, TaskMode
from echoscope.simulation.schematic import PulseMarker, PulseRole

# Marker ring colors per role
ROLE_COLORS: Dict[PulseRole, Tuple[int, int, int]] = {
    PulseRole.OUTGOING: (0, 150, 255),
    PulseRole.FRONT_ECHO: (0, 220, 110),
    PulseRole.TRANSMITTED: (255, 170, 0),
    PulseRole.BACKWALL: (255, 102, 0),
    PulseRole.BACK_ECHO: (255, 136, 0),
    PulseRole.EXTRA: (0, 136, 221),
}

SHAPE_NAMES = {
    Shape.CIRCLE: "Circle",
    Shape.SQUARE: "Square",
    Shape.TRIANGLE: "Triangle",
    Shape.RECTANGLE: "Rectangle",
}

# Probe body drawn left of the face [mm]
PROBE_LENGTH_MM = 10.0
PROBE_HALF_HEIGHT_MM = 6.0


def shape_outline(shape: Shape, rotation_deg: float, center_mm: float) -> np.ndarray:
    """
    Closed outline of the task 2 object, rotated and placed on the beam.

    Returns:
        (N, 2) array of x, y points [mm]
    """
    half = OBJECT_SIZE_MM / 2

    if shape is Shape.CIRCLE:
        angles = np.linspace(0, 2 * np.pi, 49)
        points = np.column_stack([np.cos(angles), np.sin(angles)]) * half
    elif shape is Shape.SQUARE:
        points = np.array([[half, half], [-half, half], [-half, -half], [half, -half]])
    elif shape is Shape.TRIANGLE:
        angles = np.array([0.0, 2 * np.pi / 3, 4 * np.pi / 3])
        points = np.column_stack([np.cos(angles), np.sin(angles)]) * half
    else:
        h = half * RECTANGLE_ASPECT
        points = np.array([[half, h], [-half, h], [-half, -h], [half, -h]])

    rad = np.radians(rotation_deg)
    rot = np.array([[np.cos(rad), -np.sin(rad)], [np.sin(rad), np.cos(rad)]])
    points = points @ rot.T
    points = np.vstack([points, points[:1]])
    points[:, 0] += center_mm
    return points


class SchematicView(QWidget):
    """
    Probe / object schematic with animated pulse rings.

    Call set_scene() when the geometry changes and update_markers() on
    every schematic tick.
    """

    def __init__(self, parent: QWidget = None):
        super().__init__(parent)
        self._setup_ui()

    def _setup_ui(self):
        """Setup the UI components."""
        self.setMinimumHeight(180)
        self.setStyleSheet("background-color: rgb(10, 20, 15);")

        layout = QVBoxLayout(self)
        layout.setContentsMargins(5, 5, 5, 5)
        layout.setSpacing(2)

        self.title_label = QLabel("SCHEMATIC")
        self.title_label.setStyleSheet(
            """
            QLabel {
                color: #00dd66;
                font-family: 'Consolas', monospace;
                font-size: 12px;
                font-weight: bold;
            }
        """
        )
        layout.addWidget(self.title_label)

        self.plot_widget = pg.PlotWidget()
        self.plot_widget.setBackground(QColor(10, 20, 15))
        self.plot_widget.setAspectLocked(True)
        self.plot_widget.hideAxis("left")
        self.plot_widget.setLabel("bottom", "Depth", units="mm")
        self.plot_widget.getAxis("bottom").setPen(pg.mkPen(color=(0, 150, 75)))
        self.plot_widget.getAxis("bottom").setTextPen(pg.mkPen(color=(0, 150, 75)))
        self.plot_widget.setMouseEnabled(x=False, y=False)
        self.plot_widget.setMenuEnabled(False)

        layout.addWidget(self.plot_widget)

        # Probe body
        probe = np.array(
            [
                [0.0, PROBE_HALF_HEIGHT_MM],
                [-PROBE_LENGTH_MM, PROBE_HALF_HEIGHT_MM],
                [-PROBE_LENGTH_MM, -PROBE_HALF_HEIGHT_MM],
                [0.0, -PROBE_HALF_HEIGHT_MM],
                [0.0, PROBE_HALF_HEIGHT_MM],
            ]
        )
        self.probe_curve = pg.PlotCurveItem(
            probe[:, 0],
            probe[:, 1],
            pen=pg.mkPen(color=(140, 140, 140), width=2),
            brush=pg.mkBrush(60, 60, 60, 200),
            fillLevel=0,
        )
        self.plot_widget.addItem(self.probe_curve)

        # Beam axis
        self.beam_line = pg.InfiniteLine(
            pos=0, angle=0, pen=pg.mkPen(color=(90, 90, 90), width=1, style=Qt.PenStyle.DashLine)
        )
        self.plot_widget.addItem(self.beam_line)

        # Test object outline(s)
        self.object_curves: List[pg.PlotCurveItem] = []

        self.object_label = pg.TextItem(color=(0, 200, 100), anchor=(0.5, 0))
        self.plot_widget.addItem(self.object_label)

        # Pulse rings
        self.marker_scatter = pg.ScatterPlotItem(pxMode=True)
        self.plot_widget.addItem(self.marker_scatter)

    def _clear_object(self) -> None:
        for curve in self.object_curves:
            self.plot_widget.removeItem(curve)
        self.object_curves = []

    def _add_outline(self, points: np.ndarray, color=(192, 192, 192)) -> None:
        curve = pg.PlotCurveItem(
            points[:, 0],
            points[:, 1],
            pen=pg.mkPen(color=color, width=2),
            brush=pg.mkBrush(*color, 60),
            fillLevel=0,
        )
        self.plot_widget.addItem(curve)
        self.object_curves.append(curve)

    def set_scene(self, scene: Scene) -> None:
        """Redraw the test object for the active task."""
        self._clear_object()
        task = scene.task
        far = 60.0

        if task is TaskMode.TASK1:
            self.title_label.setText("SCHEMATIC: PLATE")
            plate = scene.plate
            if plate.width:
                front = plate.distance_mm
                back = front + plate.width
                box = np.array(
                    [[front, 15.0], [back, 15.0], [back, -15.0], [front, -15.0], [front, 15.0]]
                )
                self._add_outline(box, color=(0, 200, 100))
                self.object_label.setText(f"{plate.width} mm")
                self.object_label.setPos(front + plate.width / 2, -17.0)
                far = back + 10
            else:
                self.object_label.setText("Select a plate")
                self.object_label.setPos(30.0, 0.0)

        elif task is TaskMode.TASK2:
            self.title_label.setText("SCHEMATIC: OBJECT")
            obj = scene.target_object
            outline = shape_outline(obj.shape, obj.rotation_deg, obj.distance_mm)
            self._add_outline(outline)
            self.object_label.setText(SHAPE_NAMES[obj.shape])
            self.object_label.setPos(obj.distance_mm, -OBJECT_SIZE_MM / 2 - 4)
            far = obj.distance_mm + OBJECT_SIZE_MM

        else:
            self.title_label.setText("SCHEMATIC: CYLINDER")
            top = CYLINDER_TOP_MM
            bottom = top + scene.cylinder.thickness_mm
            box = np.array([[top, 25.0], [bottom, 25.0], [bottom, -25.0], [top, -25.0], [top, 25.0]])
            self._add_outline(box)
            self.object_label.setText(f"{scene.cylinder.thickness_mm:.0f} mm")
            self.object_label.setPos((top + bottom) / 2, -27.0)
            far = bottom + 10

        self.plot_widget.setXRange(-PROBE_LENGTH_MM - 5, far, padding=0)
        self.plot_widget.setYRange(-30, 30, padding=0)

    def update_markers(self, markers: List[PulseMarker]) -> None:
        """Draw the pulse rings for the current animation phase."""
        if not markers:
            self.marker_scatter.setData([])
            return

        spots = []
        for marker in markers:
            r, g, b = ROLE_COLORS[marker.role]
            spots.append(
                {
                    "pos": (marker.position_mm, 0.0),
                    "size": marker.radius_px * 2,
                    "symbol": "o",
                    "pen": pg.mkPen(r, g, b, int(255 * marker.opacity), width=2),
                    "brush": pg.mkBrush(r, g, b, int(80 * marker.opacity)),
                }
            )
        self.marker_scatter.setData(spots)

    def clear_markers(self) -> None:
        self.marker_scatter.setData([])
