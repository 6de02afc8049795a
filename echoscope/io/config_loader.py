"""
Configuration Loader

YAML-based configuration parser for EchoScope.

Loads display, measurement, synthesis and schematic settings plus an
optional initial scene, and creates configured InstrumentController
instances.

Supported sections:
    - display: sample count, visible range, surface size, frame timing
    - measurement: press-and-hold timing and cursor range
    - synthesis: task 1 shaping policy, amplitude factors, noise levels
    - schematic: animation tick and speed
    - scene: initial task and (optionally) hidden geometry

Usage:
    loader = ConfigLoader('config/default.yaml')
    controller = loader.create_controller(timers)
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

import numpy as np
import yaml

from echoscope.signal.echoes import PlateShaping
from echoscope.simulation.scene import Scene, TaskMode

logger = logging.getLogger(__name__)


@dataclass
class DisplayConfig:
    """Screen and frame-loop settings."""

    sample_count: int = 200
    full_range_mm: float = 150.0
    surface_width: int = 800
    surface_height: int = 400
    frame_interval_ms: float = 16.0
    power_on_delay_ms: float = 100.0


@dataclass
class MeasurementConfig:
    """Measurement cursor settings."""

    settle_ms: float = 500.0
    repeat_ms: float = 100.0
    min_mm: float = 0.0
    max_mm: float = 200.0


@dataclass
class SynthesisConfig:
    """Echo synthesis settings."""

    plate_shaping: PlateShaping = PlateShaping.MERGE
    plate_amplitude: float = 0.6
    object_amplitude: float = 0.6
    baseline_noise: float = 0.005
    trace_noise: float = 0.05
    seed: Optional[int] = None


@dataclass
class SchematicConfig:
    """Schematic animation settings."""

    tick_ms: float = 16.0
    phase_step: float = 0.016
    speed: float = 0.4


@dataclass
class SimulatorConfig:
    """Complete simulator configuration."""

    name: str = "EchoScope"
    display: DisplayConfig = field(default_factory=DisplayConfig)
    measurement: MeasurementConfig = field(default_factory=MeasurementConfig)
    synthesis: SynthesisConfig = field(default_factory=SynthesisConfig)
    schematic: SchematicConfig = field(default_factory=SchematicConfig)
    scene: Dict[str, Any] = field(default_factory=dict)


# Scene keys accepted in the 'scene' section (besides 'task')
SCENE_KEYS = (
    "intensity",
    "brightness",
    "scale",
    "plate_width",
    "plate_distance",
    "shape",
    "rotation_deg",
    "object_distance",
    "material",
    "thickness",
)


class ConfigLoader:
    """
    Loads simulator configuration from YAML files.

    Usage:
        loader = ConfigLoader('config/default.yaml')
        config = loader.get_config()
        scene = loader.create_scene()
    """

    def __init__(self, filepath: Optional[str] = None):
        """
        Initialize config loader.

        Args:
            filepath: Path to YAML config file (optional, defaults if None)
        """
        self.filepath = filepath
        self.data: Dict[str, Any] = {}
        self._config: SimulatorConfig = SimulatorConfig()

        if filepath:
            self.load(filepath)

    def load(self, filepath: str) -> bool:
        """
        Load configuration from YAML file.

        Args:
            filepath: Path to YAML config file

        Returns:
            True if loaded successfully

        Raises:
            FileNotFoundError: If file doesn't exist
            yaml.YAMLError: If YAML parsing fails
            ValueError: If a value is out of range
        """
        if not os.path.exists(filepath):
            raise FileNotFoundError(f"Config file not found: {filepath}")

        self.filepath = filepath

        with open(filepath, "r", encoding="utf-8") as f:
            self.data = yaml.safe_load(f) or {}

        return self.load_dict(self.data)

    def load_dict(self, data: Dict[str, Any]) -> bool:
        """Parse an already-loaded mapping (same layout as the YAML file)."""
        if not isinstance(data, dict):
            raise ValueError("Config root must be a mapping")

        self.data = data
        self._config = self._parse_config()
        logger.info("[CONFIG] Loaded '%s'", self._config.name)
        return True

    def _parse_config(self) -> SimulatorConfig:
        """Parse loaded YAML data into SimulatorConfig."""
        scene = self._section("scene")

        unknown = set(scene) - set(SCENE_KEYS) - {"task"}
        if unknown:
            raise ValueError(f"Unknown scene keys: {sorted(unknown)}")

        return SimulatorConfig(
            name=str(self.data.get("name", "EchoScope")),
            display=self._parse_display(),
            measurement=self._parse_measurement(),
            synthesis=self._parse_synthesis(),
            schematic=self._parse_schematic(),
            scene=dict(scene),
        )

    def _section(self, name: str) -> Dict[str, Any]:
        """Return a top-level section, empty if absent."""
        section = self.data.get(name, {}) or {}
        if not isinstance(section, dict):
            raise ValueError(f"'{name}' section must be a mapping")
        return section

    def _parse_display(self) -> DisplayConfig:
        """Parse display configuration."""
        d = self._section("display")
        config = DisplayConfig(
            sample_count=int(d.get("sample_count", 200)),
            full_range_mm=float(d.get("full_range_mm", 150.0)),
            surface_width=int(d.get("surface_width", 800)),
            surface_height=int(d.get("surface_height", 400)),
            frame_interval_ms=float(d.get("frame_interval_ms", 16.0)),
            power_on_delay_ms=float(d.get("power_on_delay_ms", 100.0)),
        )

        if config.sample_count < 1:
            raise ValueError(f"sample_count must be >= 1, got {config.sample_count}")
        if config.full_range_mm <= 0:
            raise ValueError(f"full_range_mm must be positive, got {config.full_range_mm}")
        if config.surface_width < 1 or config.surface_height < 1:
            raise ValueError("Surface size must be at least 1x1 pixels")
        if config.frame_interval_ms <= 0:
            raise ValueError(f"frame_interval_ms must be positive, got {config.frame_interval_ms}")
        return config

    def _parse_measurement(self) -> MeasurementConfig:
        """Parse measurement configuration."""
        m = self._section("measurement")
        config = MeasurementConfig(
            settle_ms=float(m.get("settle_ms", 500.0)),
            repeat_ms=float(m.get("repeat_ms", 100.0)),
            min_mm=float(m.get("min_mm", 0.0)),
            max_mm=float(m.get("max_mm", 200.0)),
        )

        if config.repeat_ms <= 0:
            raise ValueError(f"repeat_ms must be positive, got {config.repeat_ms}")
        if config.max_mm < config.min_mm:
            raise ValueError("measurement max_mm must not be below min_mm")
        return config

    def _parse_synthesis(self) -> SynthesisConfig:
        """Parse synthesis configuration."""
        s = self._section("synthesis")
        seed = s.get("seed")

        return SynthesisConfig(
            plate_shaping=PlateShaping(s.get("plate_shaping", "merge")),
            plate_amplitude=float(s.get("plate_amplitude", 0.6)),
            object_amplitude=float(s.get("object_amplitude", 0.6)),
            baseline_noise=float(s.get("baseline_noise", 0.005)),
            trace_noise=float(s.get("trace_noise", 0.05)),
            seed=None if seed is None else int(seed),
        )

    def _parse_schematic(self) -> SchematicConfig:
        """Parse schematic animation configuration."""
        s = self._section("schematic")
        config = SchematicConfig(
            tick_ms=float(s.get("tick_ms", 16.0)),
            phase_step=float(s.get("phase_step", 0.016)),
            speed=float(s.get("speed", 0.4)),
        )

        if config.tick_ms <= 0:
            raise ValueError(f"schematic tick_ms must be positive, got {config.tick_ms}")
        return config

    def get_config(self) -> SimulatorConfig:
        """
        Get parsed simulator configuration.

        Returns:
            SimulatorConfig (defaults if nothing was loaded)
        """
        return self._config

    def get_config_name(self) -> str:
        """Get configuration name."""
        return self._config.name

    def create_scene(self, rng: Optional[np.random.Generator] = None) -> Scene:
        """
        Build the initial scene.

        Hidden geometry not given in the 'scene' section is randomized.

        Args:
            rng: Random generator for the hidden geometry

        Returns:
            Scene
        """
        values = self._config.scene
        scene = Scene.randomized(rng)

        if "task" in values:
            scene = scene.with_task(TaskMode(values["task"]))

        for key in SCENE_KEYS:
            if key in values:
                scene = scene.with_parameter(key, values[key])

        return scene

    def create_controller(self, timers, rng: Optional[np.random.Generator] = None):
        """
        Create an InstrumentController from the loaded configuration.

        Args:
            timers: Timer backend
            rng: Random generator (seeded from synthesis.seed if None)

        Returns:
            Configured InstrumentController
        """
        # Import here to avoid circular dependencies
        from echoscope.simulation.controller import InstrumentController

        if rng is None:
            rng = np.random.default_rng(self._config.synthesis.seed)

        return InstrumentController(
            timers, config=self._config, scene=self.create_scene(rng), rng=rng
        )


def load_config(filepath: str) -> SimulatorConfig:
    """
    Convenience function to load a config file.

    Args:
        filepath: Path to YAML config file

    Returns:
        SimulatorConfig instance
    """
    loader = ConfigLoader(filepath)
    return loader.get_config()
