"""
Echo Waveform Synthesis

Generates the A-scan trace shown on the instrument screen: amplitude
versus position over the visible window, built from one smooth pulse per
reflector plus a little receiver noise.

Pulse model (generalized Gaussian):

    bump(x) = exp(-(|x - c| / w) ** p)

    c: reflector position [mm]
    w: pulse half-width [mm]
    p: sharpness (2 = Gaussian, larger = flatter top, steeper skirt)

Amplitudes are heuristic and tuned for teaching, not metrology.

Per task:
    - task1: front and back face of the plate, shaping depends on the
      plate thickness (see PlateShaping)
    - task2: one pulse per reflector of the shaped object
    - task3: top and bottom of the cylinder wall, scaled by material
      reflectivity, bottom echo attenuated by transmission loss
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

import numpy as np

from echoscope.physics.geometry import reflector_offsets
from echoscope.simulation.scene import FULL_RANGE_MM, Material, Scene, TaskMode, window_width_mm

# Samples per trace
DEFAULT_SAMPLE_COUNT = 200


class PlateShaping(Enum):
    """
    Pulse shaping policy for task 1.

    MERGE: thin plates get wider, softer pulses so the 2 mm echoes blend
        into a single lobe.
    SHARPEN: thin plates get narrower, sharper pulses so every thickness
        stays resolvable.
    """

    MERGE = "merge"
    SHARPEN = "sharpen"


# Base pulse half-width for plate echoes [mm]
PLATE_BASE_WIDTH_MM = 0.6

# plate width [mm] -> (width multiplier, sharpness)
PLATE_SHAPING_TABLES: Dict[PlateShaping, Dict[int, Tuple[float, float]]] = {
    PlateShaping.MERGE: {
        2: (1.5, 3.0),
        3: (0.8, 4.0),
        5: (0.9, 4.0),
        10: (1.0, 4.0),
    },
    PlateShaping.SHARPEN: {
        2: (0.5, 6.0),
        3: (0.7, 5.0),
        5: (0.85, 4.0),
        10: (1.0, 4.0),
    },
}

# Pulse half-width for object and cylinder echoes [mm]
REFLECTOR_WIDTH_MM = 2.0

# Material reflectivity coefficients
MATERIAL_REFLECTIVITY = {
    Material.ALUMINUM: 0.9,
    Material.STEEL: 0.85,
    Material.POLYMER: 0.4,
}

# Back-wall echo attenuation (transmission loss through the cylinder)
BACKWALL_ATTENUATION = 0.7

# Fixed probe-to-cylinder distance [mm]
CYLINDER_TOP_MM = 25.0


@dataclass(frozen=True)
class Echo:
    """
    Single reflector pulse.

    Attributes:
        center_mm: Reflector position [mm]
        width_mm: Pulse half-width [mm]
        power: Sharpness exponent
        amplitude: Peak amplitude
        cutoff: Support radius in multiples of width_mm
    """

    center_mm: float
    width_mm: float
    power: float
    amplitude: float
    cutoff: float = 2.0


def bump(x: np.ndarray, center: float, width: float, power: float) -> np.ndarray:
    """
    Generalized Gaussian pulse.

    Args:
        x: Positions [mm]
        center: Pulse center [mm]
        width: Half-width [mm]
        power: Sharpness exponent

    Returns:
        Pulse values in (0, 1]
    """
    return np.exp(-np.power(np.abs(np.asarray(x, dtype=np.float64) - center) / width, power))


def plate_pulse_shape(
    plate_width: int, policy: PlateShaping = PlateShaping.MERGE
) -> Tuple[float, float]:
    """
    Pulse half-width and sharpness for a plate of the given thickness.

    Returns:
        (width_mm, power)
    """
    table = PLATE_SHAPING_TABLES[PlateShaping(policy)]
    factor, power = table.get(plate_width, table[10])
    return PLATE_BASE_WIDTH_MM * factor, power


class EchoSynthesizer:
    """
    Echo trace generator.

    Produces a fresh trace on every call (noise differs between calls);
    envelope() gives the deterministic noise-free part.

    Usage:
        synth = EchoSynthesizer()
        trace = synth.synthesize(scene)
    """

    def __init__(
        self,
        sample_count: int = DEFAULT_SAMPLE_COUNT,
        full_range_mm: float = FULL_RANGE_MM,
        plate_shaping: PlateShaping = PlateShaping.MERGE,
        plate_amplitude: float = 0.6,
        object_amplitude: float = 0.6,
        baseline_noise: float = 0.005,
        trace_noise: float = 0.05,
        rng: Optional[np.random.Generator] = None,
    ) -> None:
        """
        Initialize synthesizer.

        Args:
            sample_count: Samples per trace
            full_range_mm: Visible range at scale 1 [mm]
            plate_shaping: Task 1 shaping policy
            plate_amplitude: Task 1 amplitude factor
            object_amplitude: Task 2 amplitude factor
            baseline_noise: Task 1 baseline noise (peak-to-peak)
            trace_noise: Task 2/3 noise (peak-to-peak)
            rng: Random generator for noise
        """
        self.sample_count = int(sample_count)
        self.full_range_mm = float(full_range_mm)
        self.plate_shaping = PlateShaping(plate_shaping)
        self.plate_amplitude = plate_amplitude
        self.object_amplitude = object_amplitude
        self.baseline_noise = baseline_noise
        self.trace_noise = trace_noise
        self.rng = rng if rng is not None else np.random.default_rng()

    def positions(self, scene: Scene, sample_count: Optional[int] = None) -> np.ndarray:
        """
        Absolute sample positions for the scene's visible window.

        x_i = start + (i / N) * W
        """
        n = self.sample_count if sample_count is None else int(sample_count)
        window = window_width_mm(scene.scale, self.full_range_mm)
        return scene.start_position + np.arange(n, dtype=np.float64) / max(n, 1) * window

    def echoes(self, scene: Scene, sample_count: Optional[int] = None) -> List[Echo]:
        """
        Reflector pulses for the active task.

        Under PlateShaping.SHARPEN a plate pulse is never narrower than one
        sample step, so both plate echoes survive sampling at any scale.

        Args:
            scene: Scene snapshot
            sample_count: Override sample count

        Returns:
            List of Echo (empty for task 1 without a plate)
        """
        gain = scene.intensity / 10.0

        if scene.task is TaskMode.TASK1:
            plate = scene.plate
            if not plate.width:
                return []
            width, power = plate_pulse_shape(plate.width, self.plate_shaping)
            if self.plate_shaping is PlateShaping.SHARPEN:
                n = self.sample_count if sample_count is None else int(sample_count)
                width = max(width, window_width_mm(scene.scale, self.full_range_mm) / max(n, 1))
            amplitude = gain * self.plate_amplitude
            return [
                Echo(plate.distance_mm, width, power, amplitude, cutoff=4.0),
                Echo(plate.distance_mm + plate.width, width, power, amplitude, cutoff=4.0),
            ]

        if scene.task is TaskMode.TASK2:
            obj = scene.target_object
            amplitude = gain * self.object_amplitude
            return [
                Echo(obj.distance_mm + offset, REFLECTOR_WIDTH_MM, 2.0, amplitude)
                for offset in reflector_offsets(obj.shape, obj.rotation_deg)
            ]

        cylinder = scene.cylinder
        amplitude = gain * MATERIAL_REFLECTIVITY[cylinder.material]
        return [
            Echo(CYLINDER_TOP_MM, REFLECTOR_WIDTH_MM, 2.0, amplitude),
            Echo(
                CYLINDER_TOP_MM + cylinder.thickness_mm,
                REFLECTOR_WIDTH_MM,
                2.0,
                amplitude * BACKWALL_ATTENUATION,
            ),
        ]

    def envelope(self, scene: Scene, sample_count: Optional[int] = None) -> np.ndarray:
        """
        Deterministic (noise-free) trace.

        Args:
            scene: Scene snapshot
            sample_count: Override sample count

        Returns:
            Amplitude samples
        """
        x = self.positions(scene, sample_count)
        values = np.zeros_like(x)

        for echo in self.echoes(scene, sample_count):
            support = np.abs(x - echo.center_mm) < echo.width_mm * echo.cutoff
            if np.any(support):
                values[support] += (
                    bump(x[support], echo.center_mm, echo.width_mm, echo.power) * echo.amplitude
                )

        return values

    def synthesize(self, scene: Scene, sample_count: Optional[int] = None) -> np.ndarray:
        """
        Trace with receiver noise.

        Task 1 adds noise to the baseline only (samples farther than two
        pulse widths from every echo) so the peak shape stays clean for
        thickness measurement. Tasks 2 and 3 add noise everywhere.
        Task 1 without a plate returns an all-zero trace.

        Args:
            scene: Scene snapshot
            sample_count: Override sample count

        Returns:
            Amplitude samples, approximately in [-0.1, 1.0]
        """
        x = self.positions(scene, sample_count)
        echoes = self.echoes(scene, sample_count)

        if scene.task is TaskMode.TASK1 and not echoes:
            return np.zeros_like(x)

        values = self.envelope(scene, sample_count)
        noise = self.rng.random(x.shape) - 0.5

        if scene.task is TaskMode.TASK1:
            baseline = np.ones(x.shape, dtype=bool)
            for echo in echoes:
                baseline &= np.abs(x - echo.center_mm) > echo.width_mm * 2
            values[baseline] += noise[baseline] * self.baseline_noise
        else:
            values += noise * self.trace_noise

        return values


def synthesize(
    task: TaskMode,
    scene: Scene,
    sample_count: int = DEFAULT_SAMPLE_COUNT,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """
    Convenience function: synthesize one trace for the given task.

    Args:
        task: Task to synthesize (overrides scene.task)
        scene: Scene snapshot
        sample_count: Samples per trace
        rng: Random generator for noise

    Returns:
        Amplitude samples
    """
    synth = EchoSynthesizer(sample_count=sample_count, rng=rng)
    return synth.synthesize(scene.with_task(task))


def dominant_peaks(
    trace: np.ndarray, positions: np.ndarray, count: int = 2, min_height: float = 0.05
) -> List[float]:
    """
    Positions of the strongest local maxima of a trace.

    Args:
        trace: Amplitude samples
        positions: Sample positions [mm]
        count: Number of peaks to return
        min_height: Ignore maxima below this amplitude

    Returns:
        Peak positions sorted by position [mm]
    """
    trace = np.asarray(trace, dtype=np.float64)
    if trace.size < 3:
        return []

    inner = trace[1:-1]
    is_peak = (inner > trace[:-2]) & (inner >= trace[2:]) & (inner >= min_height)
    idx = np.nonzero(is_peak)[0] + 1

    strongest = idx[np.argsort(trace[idx])[::-1][:count]]
    return sorted(float(positions[i]) for i in strongest)
