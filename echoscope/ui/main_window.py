"""
Main Window

Application shell for the EchoScope GUI.

Components:
    - Echo scope screen (central, top)
    - Schematic view (central, bottom)
    - Instrument control panel (right dock)
    - Status bar

Architecture: Model-View-Controller
- InstrumentController owns the scene, cursor and timers
- Widgets only forward user input and display controller output
"""

from typing import Any, Optional

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction
from PyQt6.QtWidgets import (
    QDockWidget,
    QFileDialog,
    QMainWindow,
    QMessageBox,
    QSplitter,
    QStatusBar,
    QVBoxLayout,
    QWidget,
)

from echoscope.io.config_loader import ConfigLoader
from echoscope.simulation.controller import InstrumentController
from echoscope.simulation.scene import Scene, TaskMode, window_width_mm

from .echo_scope import EchoScopeView
from .panels import InstrumentControlPanel
from .qt_timers import QtTimerBackend
from .schematic_view import SchematicView


class MainWindow(QMainWindow):
    """
    Main application window for EchoScope.

    Features:
        - Echo scope screen fed by the controller's frame callback
        - Animated schematic of the active task
        - Instrument front panel (right dock)
        - Dark phosphor theme
    """

    def __init__(self, config_path: Optional[str] = None) -> None:
        super().__init__()

        self.setWindowTitle("EchoScope - Ultrasonic Pulse-Echo Trainer")
        self.setMinimumSize(1100, 700)

        self._apply_dark_theme()

        self.timers = QtTimerBackend(self)
        self.loader = ConfigLoader(config_path)
        self.controller: Optional[InstrumentController] = None

        self._setup_ui()
        self._setup_menu()
        self._setup_status_bar()

        self._start_session()

    def _apply_dark_theme(self) -> None:
        """Apply dark phosphor theme."""
        self.setStyleSheet(
            """
            QMainWindow {
                background-color: #0a1510;
            }
            QDockWidget {
                color: #00dd66;
                font-family: 'Consolas', monospace;
            }
            QDockWidget::title {
                background-color: #002815;
                padding: 5px;
            }
        """
        )

    def _setup_ui(self) -> None:
        """Setup the main UI layout."""
        central = QWidget()
        self.setCentralWidget(central)

        main_layout = QVBoxLayout(central)
        main_layout.setContentsMargins(5, 5, 5, 5)

        self.splitter = QSplitter(Qt.Orientation.Vertical)

        self.scope = EchoScopeView()
        self.scope.set_resize_callback(self._on_screen_resized)
        self.splitter.addWidget(self.scope)

        self.schematic = SchematicView()
        self.splitter.addWidget(self.schematic)

        self.splitter.setSizes([450, 250])
        self.splitter.setCollapsible(0, False)

        main_layout.addWidget(self.splitter)

        # Right dock for the front panel
        control_dock = QDockWidget("CONTROLS", self)
        control_dock.setObjectName("controls_dock")
        control_dock.setFeatures(
            QDockWidget.DockWidgetFeature.DockWidgetMovable
            | QDockWidget.DockWidgetFeature.DockWidgetFloatable
        )

        self.control_panel = InstrumentControlPanel()
        self.control_panel.set_task_callback(self._on_task_selected)
        self.control_panel.set_power_callback(self._on_power_toggled)
        self.control_panel.set_parameter_callback(self._on_parameter_changed)
        self.control_panel.set_measure_callback(self._on_measure_entered)
        self.control_panel.set_adjust_callbacks(self._on_adjust_begin, self._on_adjust_end)
        self.control_panel.set_auto_measure_callback(self._on_auto_measure)

        control_dock.setWidget(self.control_panel)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, control_dock)

    def _setup_menu(self) -> None:
        """Setup menu bar."""
        menubar = self.menuBar()
        menubar.setStyleSheet(
            """
            QMenuBar {
                background-color: #001a0d;
                color: #00dd66;
                font-family: 'Consolas', monospace;
            }
            QMenuBar::item:selected {
                background-color: #003322;
            }
            QMenu {
                background-color: #001a0d;
                color: #00dd66;
            }
            QMenu::item:selected {
                background-color: #003322;
            }
        """
        )

        # File menu
        file_menu = menubar.addMenu("&File")

        load_config_action = QAction("&Load Configuration...", self)
        load_config_action.setShortcut("Ctrl+O")
        load_config_action.triggered.connect(self._on_load_config)
        file_menu.addAction(load_config_action)

        file_menu.addSeparator()

        exit_action = QAction("E&xit", self)
        exit_action.setShortcut("Ctrl+Q")
        exit_action.triggered.connect(self.close)
        file_menu.addAction(exit_action)

        # Instrument menu
        instrument_menu = menubar.addMenu("&Instrument")

        power_action = QAction("&Power On/Off", self)
        power_action.triggered.connect(self._on_power_toggled)
        instrument_menu.addAction(power_action)

        auto_measure_action = QAction("&Auto Measure", self)
        auto_measure_action.setShortcut("Ctrl+M")
        auto_measure_action.triggered.connect(self._on_auto_measure)
        instrument_menu.addAction(auto_measure_action)

        instrument_menu.addSeparator()

        new_session_action = QAction("&New Session", self)
        new_session_action.setShortcut("Ctrl+N")
        new_session_action.triggered.connect(self._start_session)
        instrument_menu.addAction(new_session_action)

    def _setup_status_bar(self) -> None:
        """Setup status bar."""
        self.status_bar = QStatusBar()
        self.status_bar.setStyleSheet(
            """
            QStatusBar {
                background-color: #001a0d;
                color: #00aa55;
                font-family: 'Consolas', monospace;
                font-size: 11px;
            }
        """
        )
        self.setStatusBar(self.status_bar)
        self.status_bar.showMessage("EchoScope Ready | Press POWER to start")

    # ═══════════════════════════════════════════════════════════════════
    # SESSION
    # ═══════════════════════════════════════════════════════════════════

    def _start_session(self) -> None:
        """Create a fresh controller (new hidden geometry)."""
        if self.controller is not None:
            self.controller.shutdown()

        self.controller = self.loader.create_controller(self.timers)
        self.controller.surface.resize(*self.scope.screen_size())
        self.controller.set_frame_callback(self.scope.update_frame)
        self.controller.set_schematic_callback(self.schematic.update_markers)
        self.controller.set_state_callback(self._on_state_changed)

        self.controller.clear_display()
        self._on_state_changed(self.controller.snapshot())
        self.status_bar.showMessage(f"Session started | {self.loader.get_config_name()}")
        print("[SESSION] New session")

    def _on_state_changed(self, scene: Scene) -> None:
        """Sync widgets with the controller after any change."""
        controller = self.controller
        readout = controller.readout()

        self.control_panel.sync_from_scene(scene, controller.is_powered, readout)
        self.scope.update_readout(readout)
        self.scope.update_window(
            scene.task.value,
            scene.start_position,
            window_width_mm(scene.scale, controller.config.display.full_range_mm),
        )
        self.schematic.set_scene(scene)
        if not controller.schematic_visible():
            self.schematic.clear_markers()

    def _on_screen_resized(self, width: int, height: int) -> None:
        if self.controller is None:
            return
        self.controller.surface.resize(width, height)
        if not self.controller.is_powered:
            self.controller.clear_display()

    # ═══════════════════════════════════════════════════════════════════
    # FRONT PANEL HANDLERS
    # ═══════════════════════════════════════════════════════════════════

    def _on_task_selected(self, task: TaskMode) -> None:
        self.controller.set_task(task)
        self.status_bar.showMessage(f"Task: {task.value} | Power is OFF")

    def _on_power_toggled(self) -> None:
        powered = self.controller.toggle_power()
        print(f"[POWER] {'ON' if powered else 'OFF'}")
        self.status_bar.showMessage("Instrument ON" if powered else "Instrument OFF")

    def _on_parameter_changed(self, name: str, value: Any) -> None:
        try:
            self.controller.set_parameter(name, value)
        except ValueError as e:
            self.status_bar.showMessage(f"Invalid {name}: {e}")

    def _on_measure_entered(self, value: float) -> None:
        self.controller.set_measured_distance(value)

    def _on_adjust_begin(self, direction: int) -> None:
        self.controller.begin_continuous_adjust(direction)

    def _on_adjust_end(self) -> None:
        self.controller.end_continuous_adjust()

    def _on_auto_measure(self) -> None:
        distance = self.controller.auto_measure()
        self.status_bar.showMessage(f"Auto measure: {distance:.1f} mm")

    def _on_load_config(self) -> None:
        """Handle File > Load Configuration action."""
        filepath, _ = QFileDialog.getOpenFileName(
            self, "Load Configuration", "config", "YAML Files (*.yaml *.yml);;All Files (*)"
        )

        if not filepath:
            return

        try:
            loader = ConfigLoader(filepath)
        except FileNotFoundError:
            QMessageBox.critical(self, "Error", f"File not found:\n{filepath}")
            return
        except Exception as e:
            QMessageBox.critical(self, "Error", f"Failed to load configuration:\n{str(e)}")
            return

        self.loader = loader
        self._start_session()
        print(f"[CONFIG] Loaded: {filepath}")
        self.status_bar.showMessage(f"LOADED: {loader.get_config_name()}")

    # ═══ KEYBOARD SHORTCUTS ═══

    def keyPressEvent(self, event) -> None:
        """Handle global keyboard shortcuts."""
        key = event.key()

        # Space - Power toggle
        if key == Qt.Key.Key_Space and not event.modifiers():
            self._on_power_toggled()
            return

        # Left / Right - Nudge the measurement cursor
        if key == Qt.Key.Key_Left and not event.modifiers():
            self.controller.adjust_measured_distance(-1)
            return
        if key == Qt.Key.Key_Right and not event.modifiers():
            self.controller.adjust_measured_distance(1)
            return

        # 1-3 - Task switching
        tasks = {Qt.Key.Key_1: TaskMode.TASK1, Qt.Key.Key_2: TaskMode.TASK2, Qt.Key.Key_3: TaskMode.TASK3}
        if key in tasks and not event.modifiers():
            self._on_task_selected(tasks[key])
            return

        # F11 - Toggle Fullscreen
        if key == Qt.Key.Key_F11:
            if self.isFullScreen():
                self.showNormal()
            else:
                self.showFullScreen()
            return

        super().keyPressEvent(event)

    def closeEvent(self, event) -> None:
        """Handle window close."""
        if self.controller is not None:
            self.controller.shutdown()
        self.timers.cancel_all()
        event.accept()
