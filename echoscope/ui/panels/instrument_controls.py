"""
Instrument Controls Panel

Front panel of the pulse-echo instrument: task selection, power, rotary
knobs, task-specific inputs and the measurement cursor.

The panel owns no simulation state. Every user action is forwarded
through a callback set by the main window; sync_from_scene() pushes the
controller's state back into the widgets.
"""

import math
from typing import Any, Callable, Dict, Optional

from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import QColor, QFont, QPainter, QPen
from PyQt6.QtWidgets import (
    QButtonGroup,
    QComboBox,
    QDoubleSpinBox,
    QGridLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QPushButton,
    QSizePolicy,
    QSlider,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from echoscope.simulation.scene import KNOB_MAX, KNOB_MIN, PLATE_WIDTHS, Scene, TaskMode
from echoscope.ui.rotary import RotaryInput

TASK_TITLES = {
    TaskMode.TASK1: "Task 1: Plate thickness",
    TaskMode.TASK2: "Task 2: Object shape",
    TaskMode.TASK3: "Task 3: Cylinder wall",
}


class RotaryKnob(QWidget):
    """
    Round knob turned by dragging around its center.

    Drag handling is delegated to RotaryInput; this widget only paints
    and forwards mouse positions.
    """

    def __init__(
        self,
        title: str,
        min_value: float = KNOB_MIN,
        max_value: float = KNOB_MAX,
        value: float = 5,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.title = title
        self.min_value = min_value
        self.max_value = max_value
        self._value = value
        self._callback: Optional[Callable[[int], None]] = None

        self.rotary = RotaryInput(min_value, max_value, on_change=self._on_rotary_change)

        self.setMinimumSize(80, 96)
        self.setSizePolicy(QSizePolicy.Policy.Preferred, QSizePolicy.Policy.Fixed)
        self.setCursor(Qt.CursorShape.PointingHandCursor)

    def set_callback(self, callback: Callable[[int], None]) -> None:
        """Set callback for value changes made by the user."""
        self._callback = callback

    def value(self) -> float:
        return self._value

    def set_value(self, value: float) -> None:
        """Set the displayed value without notifying."""
        self._value = value
        self.update()

    def _dial_rect(self) -> QRectF:
        side = min(self.width(), self.height() - 20) - 8
        return QRectF((self.width() - side) / 2, 4, side, side)

    def _center(self):
        c = self._dial_rect().center()
        return c.x(), c.y()

    def _on_rotary_change(self, value: int) -> None:
        self._value = value
        self.update()
        if self._callback:
            self._callback(value)

    def mousePressEvent(self, event) -> None:
        if event.button() == Qt.MouseButton.LeftButton:
            pos = event.position()
            self.rotary.begin((pos.x(), pos.y()), self._center(), self._value)
            event.accept()
            return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event) -> None:
        if self.rotary.active:
            pos = event.position()
            self.rotary.update((pos.x(), pos.y()), self._center())
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event) -> None:
        if self.rotary.active:
            self.rotary.end()
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def paintEvent(self, event) -> None:
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing)

        rect = self._dial_rect()
        painter.setPen(QPen(QColor("#00aa55"), 2))
        painter.setBrush(QColor("#002211"))
        painter.drawEllipse(rect)

        # Pointer: min at 7 o'clock, max at 5 o'clock
        span = self.max_value - self.min_value
        fraction = 0.0 if span <= 0 else (self._value - self.min_value) / span
        angle = math.radians(225 - 270 * fraction)
        center = rect.center()
        radius = rect.width() / 2 - 6
        tip = QPointF(
            center.x() + radius * math.cos(angle), center.y() - radius * math.sin(angle)
        )
        painter.setPen(QPen(QColor("#00ff88"), 3))
        painter.drawLine(center, tip)

        painter.setPen(QColor("#00dd66"))
        painter.setFont(QFont("Consolas", 8))
        label_rect = QRectF(0, rect.bottom() + 2, self.width(), 16)
        painter.drawText(
            label_rect, Qt.AlignmentFlag.AlignCenter, f"{self.title} {self._value:.0f}"
        )
        painter.end()


class InstrumentControlPanel(QWidget):
    """
    Instrument front panel.

    Provides:
        - Task selector and power button
        - Intensity, brightness, scale and start position knobs
        - Plate buttons (task 1) and rotation slider (task 2)
        - Measurement cursor with press-and-hold fine adjust
        - Auto-measure button and readout
    """

    def __init__(self, max_start_mm: float = 200.0, parent: Optional[QWidget] = None) -> None:
        super().__init__(parent)
        self.max_start_mm = max_start_mm

        # Callbacks for user actions
        self._task_callback: Optional[Callable[[TaskMode], None]] = None
        self._power_callback: Optional[Callable[[], None]] = None
        self._parameter_callback: Optional[Callable[[str, Any], None]] = None
        self._measure_callback: Optional[Callable[[float], None]] = None
        self._adjust_begin_callback: Optional[Callable[[int], None]] = None
        self._adjust_end_callback: Optional[Callable[[], None]] = None
        self._auto_measure_callback: Optional[Callable[[], None]] = None

        self._setup_ui()

    def _setup_ui(self) -> None:
        """Setup control panel UI."""
        layout = QVBoxLayout(self)
        layout.setSpacing(12)

        # Header
        header = QLabel("INSTRUMENT")
        header.setStyleSheet(
            """
            QLabel {
                color: #00ff88;
                font-family: 'Consolas', monospace;
                font-size: 14px;
                font-weight: bold;
                padding: 5px;
                background-color: rgba(0, 40, 20, 200);
                border: 1px solid #00aa55;
            }
        """
        )
        header.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(header)

        # ═══ TASK + POWER ═══
        task_group = self._create_control_group("TASK")
        task_layout = QVBoxLayout(task_group)

        self.task_combo = QComboBox()
        for task, title in TASK_TITLES.items():
            self.task_combo.addItem(title, task)
        self.task_combo.setStyleSheet(
            """
            QComboBox {
                background-color: rgba(0, 40, 20, 200);
                color: #00ff88;
                border: 1px solid #00aa55;
                padding: 5px;
                font-family: 'Consolas', monospace;
                font-size: 12px;
            }
            QComboBox::drop-down {
                border: none;
            }
            QComboBox QAbstractItemView {
                background-color: rgb(10, 30, 20);
                color: #00ff88;
                selection-background-color: rgb(0, 80, 40);
            }
        """
        )
        self.task_combo.currentIndexChanged.connect(self._on_task_changed)
        task_layout.addWidget(self.task_combo)

        self.power_btn = QPushButton("POWER")
        self.power_btn.setCheckable(True)
        self._style_button(self.power_btn)
        self.power_btn.clicked.connect(self._on_power_clicked)
        task_layout.addWidget(self.power_btn)

        layout.addWidget(task_group)

        # ═══ KNOBS ═══
        knob_group = self._create_control_group("DISPLAY")
        knob_layout = QGridLayout(knob_group)

        self.intensity_knob = RotaryKnob("INT")
        self.brightness_knob = RotaryKnob("BRT")
        self.scale_knob = RotaryKnob("SCALE")
        self.start_knob = RotaryKnob("START", 0, max_start_mm, 0)

        self.intensity_knob.set_callback(lambda v: self._emit_parameter("intensity", v))
        self.brightness_knob.set_callback(lambda v: self._emit_parameter("brightness", v))
        self.scale_knob.set_callback(lambda v: self._emit_parameter("scale", v))
        self.start_knob.set_callback(lambda v: self._emit_parameter("start_position", v))

        knob_layout.addWidget(self.intensity_knob, 0, 0)
        knob_layout.addWidget(self.brightness_knob, 0, 1)
        knob_layout.addWidget(self.scale_knob, 1, 0)
        knob_layout.addWidget(self.start_knob, 1, 1)

        layout.addWidget(knob_group)

        # ═══ TASK-SPECIFIC INPUTS ═══
        self.task_stack = QStackedWidget()

        # Task 1: plate selection
        plate_group = self._create_control_group("PLATE")
        plate_layout = QHBoxLayout(plate_group)
        self.plate_buttons = QButtonGroup(self)
        self.plate_buttons.setExclusive(True)
        for width in PLATE_WIDTHS:
            btn = QPushButton(f"{width} mm")
            btn.setCheckable(True)
            self._style_button(btn)
            self.plate_buttons.addButton(btn, width)
            plate_layout.addWidget(btn)
        self.plate_buttons.idClicked.connect(self._on_plate_clicked)
        self.task_stack.addWidget(plate_group)

        # Task 2: object rotation
        rotation_group = self._create_control_group("ROTATION")
        rotation_layout = QVBoxLayout(rotation_group)
        self.rotation_label = QLabel("0°")
        self.rotation_label.setStyleSheet("color: #00dd66; font-size: 16px; font-weight: bold;")
        self.rotation_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        rotation_layout.addWidget(self.rotation_label)

        self.rotation_slider = QSlider(Qt.Orientation.Horizontal)
        self.rotation_slider.setRange(0, 359)
        self.rotation_slider.valueChanged.connect(self._on_rotation_changed)
        self._style_slider(self.rotation_slider)
        rotation_layout.addWidget(self.rotation_slider)
        self.task_stack.addWidget(rotation_group)

        # Task 3: nothing to set, the material is hidden
        cylinder_group = self._create_control_group("CYLINDER")
        cylinder_layout = QVBoxLayout(cylinder_group)
        hint = QLabel("Measure the wall thickness")
        hint.setStyleSheet("color: #888888; font-size: 10px;")
        hint.setAlignment(Qt.AlignmentFlag.AlignCenter)
        cylinder_layout.addWidget(hint)
        self.task_stack.addWidget(cylinder_group)

        layout.addWidget(self.task_stack)

        # ═══ MEASUREMENT ═══
        measure_group = self._create_control_group("MEASUREMENT")
        measure_layout = QVBoxLayout(measure_group)

        cursor_row = QHBoxLayout()
        self.minus_btn = QPushButton("-")
        self.plus_btn = QPushButton("+")
        for btn, direction in ((self.minus_btn, -1), (self.plus_btn, 1)):
            self._style_button(btn)
            btn.setAutoRepeat(False)  # Repeat comes from the controller's adjuster
            btn.pressed.connect(lambda d=direction: self._on_adjust_pressed(d))
            btn.released.connect(self._on_adjust_released)

        self.distance_spin = QDoubleSpinBox()
        self.distance_spin.setRange(0.0, 200.0)
        self.distance_spin.setDecimals(1)
        self.distance_spin.setSuffix(" mm")
        self.distance_spin.setStyleSheet(
            "color: #00ff88; background-color: #002211; font-family: 'Consolas', monospace;"
        )
        self.distance_spin.valueChanged.connect(self._on_distance_edited)

        cursor_row.addWidget(self.minus_btn)
        cursor_row.addWidget(self.distance_spin, stretch=1)
        cursor_row.addWidget(self.plus_btn)
        measure_layout.addLayout(cursor_row)

        self.auto_measure_btn = QPushButton("AUTO MEASURE")
        self._style_button(self.auto_measure_btn)
        self.auto_measure_btn.clicked.connect(self._on_auto_measure)
        measure_layout.addWidget(self.auto_measure_btn)

        self.readout_label = QLabel("1500 m/s | 0.0 MM")
        self.readout_label.setStyleSheet("color: #888888; font-size: 10px;")
        self.readout_label.setAlignment(Qt.AlignmentFlag.AlignCenter)
        measure_layout.addWidget(self.readout_label)

        layout.addWidget(measure_group)

        layout.addStretch()

    def _create_control_group(self, title: str) -> QGroupBox:
        """Create a styled control group."""
        group = QGroupBox(title)
        group.setStyleSheet(
            """
            QGroupBox {
                color: #00aa66;
                font-family: 'Consolas', monospace;
                font-size: 11px;
                font-weight: bold;
                border: 1px solid #006633;
                border-radius: 5px;
                margin-top: 10px;
                padding-top: 10px;
            }
            QGroupBox::title {
                subcontrol-origin: margin;
                left: 10px;
                padding: 0 5px;
            }
        """
        )
        return group

    def _style_slider(self, slider: QSlider) -> None:
        """Apply dark theme styling to slider."""
        slider.setStyleSheet(
            """
            QSlider::groove:horizontal {
                border: 1px solid #005533;
                height: 8px;
                background: #002211;
                margin: 2px 0;
                border-radius: 4px;
            }
            QSlider::handle:horizontal {
                background: #00ff88;
                border: 1px solid #00aa55;
                width: 18px;
                margin: -5px 0;
                border-radius: 9px;
            }
        """
        )

    def _style_button(self, button: QPushButton) -> None:
        """Apply dark theme styling to button."""
        button.setStyleSheet(
            """
            QPushButton {
                color: #00ff88;
                background-color: #003322;
                border: 1px solid #00aa55;
                padding: 6px 10px;
                font-family: 'Consolas', monospace;
                font-size: 12px;
                font-weight: bold;
                border-radius: 5px;
            }
            QPushButton:hover {
                background-color: #004433;
            }
            QPushButton:pressed {
                background-color: #00aa55;
                color: #001100;
            }
            QPushButton:checked {
                background-color: #00aa55;
                color: #001100;
            }
        """
        )

    # ═══ WIDGET HANDLERS ═══

    def _emit_parameter(self, name: str, value: Any) -> None:
        if self._parameter_callback:
            self._parameter_callback(name, value)

    def _on_task_changed(self, index: int) -> None:
        task = self.task_combo.itemData(index)
        self.task_stack.setCurrentIndex(index)
        if self._task_callback:
            self._task_callback(task)

    def _on_power_clicked(self) -> None:
        if self._power_callback:
            self._power_callback()

    def _on_plate_clicked(self, width: int) -> None:
        self._emit_parameter("plate_width", width)

    def _on_rotation_changed(self, value: int) -> None:
        self.rotation_label.setText(f"{value}°")
        self._emit_parameter("rotation_deg", value)

    def _on_adjust_pressed(self, direction: int) -> None:
        if self._adjust_begin_callback:
            self._adjust_begin_callback(direction)

    def _on_adjust_released(self) -> None:
        if self._adjust_end_callback:
            self._adjust_end_callback()

    def _on_distance_edited(self, value: float) -> None:
        if self._measure_callback:
            self._measure_callback(value)

    def _on_auto_measure(self) -> None:
        if self._auto_measure_callback:
            self._auto_measure_callback()

    # ═══ CALLBACK SETTERS ═══

    def set_task_callback(self, callback: Callable[[TaskMode], None]) -> None:
        """Set callback for task selection."""
        self._task_callback = callback

    def set_power_callback(self, callback: Callable[[], None]) -> None:
        """Set callback for the power button."""
        self._power_callback = callback

    def set_parameter_callback(self, callback: Callable[[str, Any], None]) -> None:
        """Set callback for knob, plate and rotation changes."""
        self._parameter_callback = callback

    def set_measure_callback(self, callback: Callable[[float], None]) -> None:
        """Set callback for direct cursor entry."""
        self._measure_callback = callback

    def set_adjust_callbacks(
        self, begin: Callable[[int], None], end: Callable[[], None]
    ) -> None:
        """Set press and release callbacks of the fine-adjust buttons."""
        self._adjust_begin_callback = begin
        self._adjust_end_callback = end

    def set_auto_measure_callback(self, callback: Callable[[], None]) -> None:
        """Set callback for the auto-measure button."""
        self._auto_measure_callback = callback

    # ═══ STATE SYNC ═══

    def sync_from_scene(self, scene: Scene, powered: bool, readout: Dict[str, Any]) -> None:
        """
        Push controller state into the widgets without re-emitting it.

        Args:
            scene: Current scene snapshot
            powered: Whether the instrument is on
            readout: Controller readout dictionary
        """
        index = self.task_combo.findData(scene.task)
        if index >= 0 and index != self.task_combo.currentIndex():
            self.task_combo.blockSignals(True)
            self.task_combo.setCurrentIndex(index)
            self.task_combo.blockSignals(False)
            self.task_stack.setCurrentIndex(index)

        self.power_btn.setChecked(powered)
        self.power_btn.setText("POWER ON" if powered else "POWER")

        self.intensity_knob.set_value(scene.intensity)
        self.brightness_knob.set_value(scene.brightness)
        self.scale_knob.set_value(scene.scale)
        self.start_knob.set_value(scene.start_position)

        if scene.plate.width in PLATE_WIDTHS:
            btn = self.plate_buttons.button(scene.plate.width)
            if btn and not btn.isChecked():
                btn.setChecked(True)
        else:
            self.plate_buttons.setExclusive(False)
            for btn in self.plate_buttons.buttons():
                btn.setChecked(False)
            self.plate_buttons.setExclusive(True)

        rotation = int(scene.target_object.rotation_deg)
        if self.rotation_slider.value() != rotation:
            self.rotation_slider.blockSignals(True)
            self.rotation_slider.setValue(rotation)
            self.rotation_slider.blockSignals(False)
            self.rotation_label.setText(f"{rotation}°")

        distance = readout["distance_mm"]
        if abs(self.distance_spin.value() - distance) > 1e-6:
            self.distance_spin.blockSignals(True)
            self.distance_spin.setValue(distance)
            self.distance_spin.blockSignals(False)

        self.readout_label.setText(
            f"{readout['speed_mps']:.0f} m/s | {distance:.1f} {readout['unit']}"
        )
