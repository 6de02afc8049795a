"""
EchoScope Configuration Loader Test Suite

Test ID | Description                                 | Expected
--------|---------------------------------------------|-----------
1       | Shipped default.yaml parses                 | Defaults
2       | Missing file                                | FileNotFoundError
3       | Invalid values / unknown keys               | ValueError
4       | Scene section applied, rest randomized      | Exact
5       | Controller built from config                | Exact
"""

import os
import sys

import numpy as np
import pytest

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from echoscope.io.config_loader import ConfigLoader, load_config
from echoscope.signal.echoes import PlateShaping
from echoscope.simulation.scene import Material, Shape, TaskMode
from echoscope.simulation.timers import ManualTimerBackend

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DEFAULT_CONFIG = os.path.join(PROJECT_ROOT, "config", "default.yaml")


def write_yaml(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


# =============================================================================
# TEST 1: Shipped config
# =============================================================================


class TestDefaultConfig:
    def test_default_file_loads(self):
        config = load_config(DEFAULT_CONFIG)

        assert config.display.sample_count == 200
        assert config.display.full_range_mm == 150.0
        assert config.measurement.settle_ms == 500
        assert config.measurement.repeat_ms == 100
        assert config.synthesis.plate_shaping is PlateShaping.MERGE
        assert config.schematic.speed == pytest.approx(0.4)
        assert config.scene["task"] == "task1"

    def test_no_file_gives_defaults(self):
        loader = ConfigLoader()
        config = loader.get_config()

        assert config.display.power_on_delay_ms == 100
        assert config.synthesis.seed is None
        assert loader.get_config_name() == "EchoScope"

    def test_empty_file(self, tmp_path):
        config = load_config(write_yaml(tmp_path, ""))
        assert config.display.surface_width == 800


# =============================================================================
# TEST 2-3: Errors
# =============================================================================


class TestConfigErrors:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigLoader(str(tmp_path / "nope.yaml"))

    def test_bad_shaping_policy(self, tmp_path):
        path = write_yaml(tmp_path, "synthesis:\n  plate_shaping: blur\n")
        with pytest.raises(ValueError):
            ConfigLoader(path)

    def test_non_positive_frame_interval(self, tmp_path):
        path = write_yaml(tmp_path, "display:\n  frame_interval_ms: 0\n")
        with pytest.raises(ValueError):
            ConfigLoader(path)

    def test_unknown_scene_key(self, tmp_path):
        path = write_yaml(tmp_path, "scene:\n  colour: red\n")
        with pytest.raises(ValueError):
            ConfigLoader(path)

    def test_inverted_measurement_range(self):
        with pytest.raises(ValueError):
            ConfigLoader().load_dict({"measurement": {"min_mm": 10, "max_mm": 5}})

    def test_root_must_be_mapping(self):
        with pytest.raises(ValueError):
            ConfigLoader().load_dict([1, 2, 3])

    @pytest.mark.parametrize(
        "section", ["display", "measurement", "synthesis", "schematic", "scene"]
    )
    def test_section_must_be_mapping(self, tmp_path, section):
        path = write_yaml(tmp_path, f"{section}:\n  - 1\n  - 2\n")
        with pytest.raises(ValueError):
            ConfigLoader(path)


# =============================================================================
# TEST 4: Scene section
# =============================================================================


class TestSceneSection:
    def test_explicit_scene(self, tmp_path):
        path = write_yaml(
            tmp_path,
            """
scene:
  task: task2
  scale: 7
  shape: triangle
  rotation_deg: 400
  material: polymer
  plate_width: 3
  plate_distance: 31.5
""",
        )
        scene = ConfigLoader(path).create_scene(np.random.default_rng(0))

        assert scene.task is TaskMode.TASK2
        assert scene.scale == 7
        assert scene.target_object.shape is Shape.TRIANGLE
        assert scene.target_object.rotation_deg == pytest.approx(40.0)
        assert scene.cylinder.material is Material.POLYMER
        assert scene.plate.width == 3
        assert scene.plate.distance_mm == pytest.approx(31.5)

    def test_hidden_values_randomized(self):
        loader = ConfigLoader()
        scene = loader.create_scene(np.random.default_rng(3))

        assert 30.0 <= scene.plate.distance_mm < 40.0
        assert scene.plate.width is None

    def test_same_seed_same_scene(self):
        loader = ConfigLoader()
        a = loader.create_scene(np.random.default_rng(11))
        b = loader.create_scene(np.random.default_rng(11))
        assert a == b


# =============================================================================
# TEST 5: Controller factory
# =============================================================================


class TestCreateController:
    def test_controller_uses_config(self, tmp_path):
        path = write_yaml(
            tmp_path,
            """
display:
  surface_width: 320
  surface_height: 120
  sample_count: 64
synthesis:
  seed: 5
scene:
  task: task3
""",
        )
        controller = ConfigLoader(path).create_controller(ManualTimerBackend())

        assert controller.surface.width == 320
        assert controller.surface.height == 120
        assert controller.synthesizer.sample_count == 64
        assert controller.snapshot().task is TaskMode.TASK3
        assert not controller.is_powered

    def test_seed_fixes_geometry(self, tmp_path):
        path = write_yaml(tmp_path, "synthesis:\n  seed: 9\n")
        a = ConfigLoader(path).create_controller(ManualTimerBackend()).snapshot()
        b = ConfigLoader(path).create_controller(ManualTimerBackend()).snapshot()
        assert a == b
