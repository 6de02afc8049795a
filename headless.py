#!/usr/bin/env python3
"""
Headless Instrument CLI

Run the pulse-echo instrument without a GUI on a virtual clock.

Usage:
    python headless.py                              # Default config, task 1
    python headless.py --task task1 --plate 5       # Plate thickness task
    python headless.py --config config/default.yaml # From file

Examples:
    # Save the last frame and a labelled trace plot
    python headless.py --plate 3 --frames 30 --png output/frame.png --plot output/trace.png

    # Machine-readable peak positions
    python headless.py --task task3 --seed 7 --quiet
"""

import argparse
import logging
import os
import sys
import time

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from echoscope.io.config_loader import ConfigLoader
from echoscope.signal.echoes import dominant_peaks
from echoscope.simulation.controller import expected_separation
from echoscope.simulation.scene import PLATE_WIDTHS, TaskMode, window_width_mm
from echoscope.simulation.timers import ManualTimerBackend


def main():
    parser = argparse.ArgumentParser(description="Run the echo instrument headless")

    # Config file
    parser.add_argument("--config", type=str, default=None, help="YAML configuration file")

    # Scene
    parser.add_argument(
        "--task",
        type=str,
        default=None,
        choices=[t.value for t in TaskMode],
        help="Active task (default: from config, else task1)",
    )
    parser.add_argument(
        "--plate",
        type=int,
        default=None,
        choices=PLATE_WIDTHS,
        help="Plate thickness in mm for task1",
    )
    parser.add_argument("--scale", type=int, default=None, help="Scale knob 1-10")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for geometry/noise")

    # Run
    parser.add_argument(
        "--frames", type=int, default=60, help="Frames to render (default: 60)"
    )

    # Output
    parser.add_argument("--png", type=str, default=None, help="Save last frame to PNG")
    parser.add_argument("--plot", type=str, default=None, help="Save trace plot to PNG")
    parser.add_argument("--quiet", action="store_true", help="Suppress output")
    parser.add_argument("--verbose", action="store_true", help="Log state changes")

    args = parser.parse_args()

    if args.frames < 1:
        print("Error: --frames must be at least 1")
        return 1

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(name)s %(levelname)s %(message)s",
    )

    # Load config
    if args.config and not os.path.exists(args.config):
        print(f"Error: Config file not found: {args.config}")
        return 1

    try:
        loader = ConfigLoader(args.config)
    except ValueError as e:
        print(f"Error: Invalid config: {e}")
        return 1

    if args.seed is not None:
        loader.get_config().synthesis.seed = args.seed

    timers = ManualTimerBackend()
    controller = loader.create_controller(timers)

    if args.task:
        controller.set_task(args.task)
    if args.plate is not None:
        controller.select_plate(args.plate)
    if args.scale is not None:
        controller.set_parameter("scale", args.scale)

    display = controller.config.display
    scene = controller.snapshot()

    if not args.quiet:
        print("=" * 60)
        print("EchoScope Headless Mode")
        print("=" * 60)
        print(f"Config: {loader.get_config_name()}")
        print(f"Task: {scene.task.value}")
        print(f"Scale: {scene.scale} | Intensity: {scene.intensity}")
        print(f"Frames: {args.frames} @ {display.frame_interval_ms:.0f} ms")
        print("=" * 60)

    # Power on and run the frame loop on the virtual clock
    t0 = time.perf_counter()
    controller.set_power(True)
    timers.advance(display.power_on_delay_ms)
    timers.advance((args.frames - 1) * display.frame_interval_ms)
    runtime_s = time.perf_counter() - t0
    frames = controller.scheduler.frame_count

    scene = controller.snapshot()
    positions = controller.synthesizer.positions(scene)
    envelope = controller.synthesizer.envelope(scene)
    peaks = dominant_peaks(envelope, positions)
    separation = peaks[-1] - peaks[0] if len(peaks) >= 2 else 0.0

    if not args.quiet:
        print("\n--- RESULTS ---")
        print(f"Frames rendered: {frames}")
        window = window_width_mm(scene.scale, display.full_range_mm)
        print(f"Window: {positions[0]:.1f} - {positions[0] + window:.1f} mm")
        print("Echo peaks: " + (", ".join(f"{p:.1f} mm" for p in peaks) or "none"))
        print(f"Peak separation: {separation:.2f} mm")
        print(f"Expected separation: {expected_separation(scene):.2f} mm")
        if frames:
            print(f"Frame time: {runtime_s / frames * 1000:.2f} ms")
        print("=" * 60)
    else:
        # Machine-readable output
        print(" ".join(f"{p:.2f}" for p in peaks))

    if args.png or args.plot:
        from echoscope.visualization.snapshot import save_frame, save_trace_plot

        if args.png:
            save_frame(controller.surface, args.png)
            if not args.quiet:
                print(f"Frame saved: {args.png}")
        if args.plot:
            save_trace_plot(
                positions,
                controller.last_trace,
                args.plot,
                envelope=envelope,
                title=f"{scene.task.value} echo trace",
            )
            if not args.quiet:
                print(f"Plot saved: {args.plot}")

    controller.shutdown()
    return 0


if __name__ == "__main__":
    sys.exit(main())
