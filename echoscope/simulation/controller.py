"""
Instrument Controller

Session object behind the instrument front panel. The UI layer calls the
set_* / adjust_* methods; the controller keeps the Scene snapshot, the
measurement cursor and the schedulers, and paints frames into its
RasterSurface.

Data flow:
    UI change -> Scene snapshot -> EchoSynthesizer -> TraceRenderer
    -> frame callback (view uploads the surface)

Task switching always powers the instrument off, zeroes the cursor and
re-centres the visible window for the new task.
"""

import logging
import math
from typing import Any, Callable, Dict, Optional

import numpy as np

from echoscope.io.config_loader import SimulatorConfig
from echoscope.physics.geometry import reflector_span
from echoscope.signal.echoes import CYLINDER_TOP_MM, EchoSynthesizer
from echoscope.visualization.raster import RasterSurface
from echoscope.visualization.trace_renderer import TraceRenderer

from .scene import FULL_RANGE_MM, Scene, TaskMode, window_width_mm
from .scheduler import ContinuousAdjuster, FrameScheduler, SchematicAnimator
from .schematic import pulse_markers
from .timers import TimerBackend

logger = logging.getLogger(__name__)

# Speed of sound shown on the instrument readout [m/s]
SOUND_SPEED_MPS = 1500.0

# Unit label shown on the readout
MEASUREMENT_UNIT = "MM"

# Left margins used when centring echoes in the window [mm]
PLATE_MARGIN_MM = 5.0
OBJECT_MARGIN_MM = 10.0
CYLINDER_MARGIN_MM = 5.0


def auto_start_position(scene: Scene, full_range_mm: float = FULL_RANGE_MM) -> float:
    """
    Start position that centres the active task's echoes in the window.

    Args:
        scene: Scene snapshot
        full_range_mm: Visible range at scale 1 [mm]

    Returns:
        Start position [mm], never negative
    """
    window = window_width_mm(scene.scale, full_range_mm)

    if scene.task is TaskMode.TASK1:
        plate = scene.plate
        if not plate.width:
            return 0.0
        center = plate.distance_mm + plate.width / 2.0
        return max(0.0, center - window / 2 - PLATE_MARGIN_MM)

    if scene.task is TaskMode.TASK2:
        return max(0.0, scene.target_object.distance_mm - window / 2 - OBJECT_MARGIN_MM)

    center = CYLINDER_TOP_MM + scene.cylinder.thickness_mm / 2.0
    return max(0.0, center - window / 2 - CYLINDER_MARGIN_MM)


def expected_separation(scene: Scene) -> float:
    """
    True echo separation for the active task [mm].

    task1: plate thickness (0 without a plate)
    task2: span between nearest and farthest reflector
    task3: cylinder wall thickness
    """
    if scene.task is TaskMode.TASK1:
        return float(scene.plate.width or 0)
    if scene.task is TaskMode.TASK2:
        obj = scene.target_object
        return reflector_span(obj.shape, obj.rotation_deg)
    return float(scene.cylinder.thickness_mm)


class InstrumentController:
    """
    Front-panel API of the simulated pulse-echo instrument.

    Usage:
        timers = ManualTimerBackend()
        controller = InstrumentController(timers)
        controller.set_parameter("plate_width", 5)
        controller.set_power(True)
        timers.advance(200)
        image = controller.surface.to_rgba8()
    """

    def __init__(
        self,
        timers: TimerBackend,
        config: Optional[SimulatorConfig] = None,
        scene: Optional[Scene] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        """
        Initialize controller.

        Args:
            timers: Timer backend driving all schedulers
            config: Simulator configuration (defaults if None)
            scene: Initial scene (randomized hidden geometry if None)
            rng: Random generator for scene randomization and noise
        """
        self.config = config if config is not None else SimulatorConfig()
        self.timers = timers

        display = self.config.display
        synthesis = self.config.synthesis
        measurement = self.config.measurement
        schematic = self.config.schematic

        if rng is None:
            rng = np.random.default_rng(synthesis.seed)
        self.rng = rng

        self.scene = scene if scene is not None else Scene.randomized(rng)
        self.scene = self.scene.with_power(False)

        self.synthesizer = EchoSynthesizer(
            sample_count=display.sample_count,
            full_range_mm=display.full_range_mm,
            plate_shaping=synthesis.plate_shaping,
            plate_amplitude=synthesis.plate_amplitude,
            object_amplitude=synthesis.object_amplitude,
            baseline_noise=synthesis.baseline_noise,
            trace_noise=synthesis.trace_noise,
            rng=rng,
        )
        self.renderer = TraceRenderer(full_range_mm=display.full_range_mm)
        self.surface = RasterSurface(display.surface_width, display.surface_height)

        self.measured_distance = 0.0
        self.last_trace = np.zeros(0)

        self.scheduler = FrameScheduler(
            timers,
            on_frame=self.render_frame,
            on_clear=self.clear_display,
            frame_interval_ms=display.frame_interval_ms,
            power_on_delay_ms=display.power_on_delay_ms,
        )
        self.adjuster = ContinuousAdjuster(
            timers,
            apply=self.adjust_measured_distance,
            settle_ms=measurement.settle_ms,
            repeat_ms=measurement.repeat_ms,
        )
        self.animator = SchematicAnimator(
            timers,
            on_tick=self._on_schematic_tick,
            tick_ms=schematic.tick_ms,
            phase_step=schematic.phase_step,
        )

        # Callbacks for the view layer
        self._frame_callback: Optional[Callable[[RasterSurface], None]] = None
        self._schematic_callback: Optional[Callable[[list], None]] = None
        self._state_callback: Optional[Callable[[Scene], None]] = None

        self.renderer.clear(self.surface)
        self._update_schematic()

    # ═══ CALLBACKS ═══

    def set_frame_callback(self, callback: Callable[[RasterSurface], None]) -> None:
        """Set callback invoked after each frame is painted or cleared."""
        self._frame_callback = callback

    def set_schematic_callback(self, callback: Callable[[list], None]) -> None:
        """Set callback receiving pulse markers on each schematic tick."""
        self._schematic_callback = callback

    def set_state_callback(self, callback: Callable[[Scene], None]) -> None:
        """Set callback invoked whenever the scene or cursor changes."""
        self._state_callback = callback

    def _notify_state(self) -> None:
        if self._state_callback:
            self._state_callback(self.scene)

    # ═══ INPUT API ═══

    @property
    def is_powered(self) -> bool:
        return self.scheduler.is_on

    def snapshot(self) -> Scene:
        """Current scene snapshot."""
        return self.scene

    def set_task(self, task: Any) -> None:
        """
        Switch the active task.

        Powers off, zeroes the cursor, cancels any held adjustment and
        moves the window to the new task's baseline.
        """
        task = TaskMode(task)
        self.adjuster.end()
        self.scene = self.scene.with_task(task)
        self.set_power(False)

        self.measured_distance = 0.0
        self.auto_position()
        self.animator.stop()
        self._update_schematic()

        logger.info("[TASK] Switched to %s", task.value)
        self._notify_state()

    def set_parameter(self, name: str, value: Any) -> None:
        """
        Change one scene parameter.

        Raises:
            ValueError: If the parameter name or value is invalid
        """
        self.scene = self.scene.with_parameter(name, value)

        if name == "scale" and self.is_powered:
            self.auto_position()

        if name == "plate_width":
            if self.scene.task is TaskMode.TASK1 and self.is_powered:
                self.auto_position()
            if self.schematic_visible():
                self.animator.restart()

        self._update_schematic()
        self._notify_state()

    def select_plate(self, width: Optional[int]) -> None:
        """Select a plate for task 1 (None removes it)."""
        self.set_parameter("plate_width", width)

    def set_power(self, on: bool) -> None:
        """Switch the instrument on or off."""
        if on:
            self.scene = self.scene.with_power(True)
            self.auto_position()
            self.scheduler.power_on()
        else:
            self.scene = self.scene.with_power(False)
            self.scheduler.power_off()
        self._notify_state()

    def toggle_power(self) -> bool:
        """Flip power; returns the new state."""
        self.set_power(not self.is_powered)
        return self.is_powered

    def set_measured_distance(self, value: float) -> None:
        """Place the cursor, clamped to the measurement range."""
        measurement = self.config.measurement
        self.measured_distance = float(
            max(measurement.min_mm, min(measurement.max_mm, float(value)))
        )
        self._notify_state()

    def adjust_measured_distance(self, delta: int) -> None:
        """Move the cursor by delta whole millimetres; halves round up first."""
        self.set_measured_distance(math.floor(self.measured_distance + 0.5) + delta)

    def begin_continuous_adjust(self, direction: int) -> None:
        """Press-and-hold on a fine-adjust button."""
        self.adjuster.begin(direction)

    def end_continuous_adjust(self) -> None:
        """Release the fine-adjust button."""
        self.adjuster.end()

    def auto_measure(self) -> float:
        """Place the cursor at the true echo separation and return it."""
        self.set_measured_distance(expected_separation(self.scene))
        return self.measured_distance

    def auto_position(self) -> float:
        """Re-centre the visible window on the echoes and return the start."""
        start = auto_start_position(self.scene, self.config.display.full_range_mm)
        self.scene = self.scene.with_parameter("start_position", start)
        return start

    def readout(self) -> Dict[str, Any]:
        """Values shown on the instrument's small display."""
        distance = self.measured_distance
        return {
            "speed_mps": SOUND_SPEED_MPS,
            "unit": MEASUREMENT_UNIT,
            "distance_mm": distance,
            "round_trip_us": 2.0 * (distance / 1000.0) / SOUND_SPEED_MPS * 1e6,
        }

    # ═══ FRAME LOOP ═══

    def render_frame(self) -> np.ndarray:
        """Synthesize and paint one frame from the current snapshot."""
        scene = self.scene
        trace = self.synthesizer.synthesize(scene)
        self.renderer.render(self.surface, trace, scene, self.measured_distance)
        self.last_trace = trace

        if self._frame_callback:
            self._frame_callback(self.surface)
        return trace

    def clear_display(self) -> None:
        """Blank the screen (Off rest state)."""
        self.renderer.clear(self.surface)
        self.last_trace = np.zeros(0)
        if self._frame_callback:
            self._frame_callback(self.surface)

    # ═══ SCHEMATIC ═══

    def schematic_visible(self) -> bool:
        """The task 1 schematic only exists once a plate is selected."""
        if self.scene.task is TaskMode.TASK1:
            return bool(self.scene.plate.width)
        return True

    def _update_schematic(self) -> None:
        if self.schematic_visible():
            self.animator.start()
        else:
            self.animator.stop()

    def _on_schematic_tick(self, phase: float) -> None:
        if self._schematic_callback:
            markers = pulse_markers(
                self.scene.task, phase, self.scene, speed=self.config.schematic.speed
            )
            self._schematic_callback(markers)

    def shutdown(self) -> None:
        """Stop every timer (window close)."""
        self.adjuster.end()
        self.scheduler.power_off()
        self.animator.stop()
        logger.info("[SESSION] Shut down")
