"""
EchoScope API Examples

Usage examples demonstrating the instrument simulation API.
"""

import os
import sys

import numpy as np

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))


def example_plate_trace():
    """
    Example 1: Plate Thickness Trace

    Synthesize one trace for a 5 mm plate and locate its two echoes.
    """
    from echoscope.signal.echoes import EchoSynthesizer, dominant_peaks
    from echoscope.simulation.scene import PlateParams, Scene, TaskMode

    scene = Scene(
        task=TaskMode.TASK1,
        start_position=20.0,
        plate=PlateParams(width=5, distance_mm=35.0),
    )

    synth = EchoSynthesizer(rng=np.random.default_rng(0))
    positions = synth.positions(scene)
    envelope = synth.envelope(scene)
    peaks = dominant_peaks(envelope, positions)

    print("=== Plate Trace Example ===")
    print(f"Window: {positions[0]:.1f} .. {positions[-1]:.1f} mm")
    print(f"Echoes at: {', '.join(f'{p:.2f}' for p in peaks)} mm")
    if len(peaks) == 2:
        print(f"Measured thickness: {peaks[1] - peaks[0]:.2f} mm (true 5 mm)")


def example_reflector_geometry():
    """
    Example 2: Reflector Geometry

    Show how rotation changes the echo span of each hidden shape.
    """
    from echoscope.physics.geometry import reflector_span
    from echoscope.simulation.scene import Shape

    print("\n=== Reflector Span vs Rotation ===")
    print(f"{'Shape':<12}" + "".join(f"{angle:>8}°" for angle in (0, 30, 45, 90)))
    for shape in Shape:
        spans = [reflector_span(shape, angle) for angle in (0, 30, 45, 90)]
        print(f"{shape.value:<12}" + "".join(f"{s:>9.2f}" for s in spans))


def example_cylinder_materials():
    """
    Example 3: Cylinder Materials

    Compare echo amplitudes for the three wall materials.
    """
    from echoscope.signal.echoes import EchoSynthesizer
    from echoscope.simulation.scene import CylinderParams, Material, Scene, TaskMode

    synth = EchoSynthesizer()

    print("\n=== Cylinder Echo Amplitudes ===")
    for material in Material:
        scene = Scene(
            task=TaskMode.TASK3,
            cylinder=CylinderParams(thickness_mm=40, material=material),
        )
        amplitudes = [f"{echo.amplitude:.2f}" for echo in synth.echoes(scene)]
        print(f"{material.value:<10} {' / '.join(amplitudes)}")


def example_headless_session():
    """
    Example 4: Headless Session

    Drive the controller on a virtual clock and measure with the cursor.
    """
    from echoscope.simulation.controller import InstrumentController
    from echoscope.simulation.scene import ObjectParams, Scene, Shape, TaskMode
    from echoscope.simulation.timers import ManualTimerBackend

    timers = ManualTimerBackend()
    scene = Scene(
        task=TaskMode.TASK2,
        target_object=ObjectParams(shape=Shape.TRIANGLE, rotation_deg=30, distance_mm=50),
    )
    controller = InstrumentController(timers, scene=scene, rng=np.random.default_rng(1))

    controller.set_power(True)
    timers.advance(500)

    controller.begin_continuous_adjust(+1)
    timers.advance(1000)
    controller.end_continuous_adjust()

    readout = controller.readout()
    print("\n=== Headless Session ===")
    print(f"Frames drawn: {controller.scheduler.frame_count}")
    print(f"Start position: {controller.snapshot().start_position:.1f} mm")
    print(f"Cursor: {readout['distance_mm']:.0f} {readout['unit']}")
    print(f"Round trip: {readout['round_trip_us']:.1f} us")
    print(f"Answer: {controller.auto_measure():.2f} mm")

    controller.shutdown()


def example_render_to_png():
    """
    Example 5: Render a Frame to PNG

    Render one oscilloscope frame off-screen and save it.
    """
    from echoscope.signal.echoes import synthesize
    from echoscope.simulation.scene import PlateParams, Scene, TaskMode
    from echoscope.visualization.raster import RasterSurface
    from echoscope.visualization.snapshot import save_frame
    from echoscope.visualization.trace_renderer import render

    scene = Scene(
        task=TaskMode.TASK1,
        start_position=20.0,
        power_on=True,
        plate=PlateParams(width=10, distance_mm=32.0),
    )
    trace = synthesize(TaskMode.TASK1, scene, rng=np.random.default_rng(2))

    surface = RasterSurface(800, 400)
    render(surface, trace, scene, measured_distance=10)

    path = save_frame(surface, os.path.join("output", "example_frame.png"))
    print("\n=== Render to PNG ===")
    print(f"Saved {path}")


if __name__ == "__main__":
    print("EchoScope API Examples")
    print("=" * 60)

    example_plate_trace()
    example_reflector_geometry()
    example_cylinder_materials()
    example_headless_session()
    example_render_to_png()

    print("\n" + "=" * 60)
    print("All examples completed!")
