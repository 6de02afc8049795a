#!/usr/bin/env python3
"""
EchoScope - Ultrasonic Pulse-Echo Trainer

Launch the PyQt6-based instrument simulator GUI.

Usage:
    python run_gui.py
    python run_gui.py --config config/default.yaml

Features:
    - Echo scope screen with grid, trace and measurement cursor
    - Three measurement tasks (plate, shaped object, cylinder wall)
    - Animated probe / object schematic
    - Rotary knobs and press-and-hold fine adjust
    - YAML configuration
"""

import argparse
import importlib
import logging
import os
import sys

# Ensure project root is in path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

# (import name, display name, pip package)
REQUIRED_MODULES = [
    ("PyQt6.QtWidgets", "PyQt6", "PyQt6"),
    ("pyqtgraph", "PyQtGraph", "pyqtgraph"),
    ("yaml", "PyYAML", "pyyaml"),
    ("numba", "Numba", "numba"),
]

# Phosphor-green palette matching the main window stylesheet
PALETTE_COLORS = {
    "Window": (10, 21, 16),
    "WindowText": (0, 221, 102),
    "Base": (0, 26, 13),
    "Text": (0, 221, 102),
    "Button": (0, 40, 21),
    "ButtonText": (0, 221, 102),
    "Highlight": (0, 51, 34),
    "HighlightedText": (0, 255, 120),
}


def check_dependencies() -> bool:
    """Import every GUI dependency and report what is missing."""
    ok = True
    for module, name, package in REQUIRED_MODULES:
        try:
            importlib.import_module(module)
            print(f"✓ {name} OK")
        except ImportError:
            print(f"✗ {name} not installed. Run: pip install {package}")
            ok = False

    if ok:
        try:
            from echoscope.signal import EchoSynthesizer  # noqa: F401

            print("✓ Echo synthesizer OK")
        except ImportError as e:
            print(f"✗ Echo synthesizer error: {e}")
            ok = False
    return ok


def apply_palette(app) -> None:
    from PyQt6.QtGui import QColor, QPalette

    palette = QPalette()
    for role, rgb in PALETTE_COLORS.items():
        palette.setColor(getattr(QPalette.ColorRole, role), QColor(*rgb))
    app.setPalette(palette)


def main():
    """Launch the EchoScope GUI."""
    parser = argparse.ArgumentParser(description="EchoScope instrument simulator")
    parser.add_argument("--config", type=str, default=None, help="YAML configuration file")
    parser.add_argument("--verbose", action="store_true", help="Log state changes to stderr")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    print("=" * 60)
    print("EchoScope - Ultrasonic Pulse-Echo Trainer")
    print("=" * 60)
    print()

    if not check_dependencies():
        return 1

    if args.config and not os.path.exists(args.config):
        print(f"✗ Config file not found: {args.config}")
        return 1

    print()
    print("Starting GUI...")
    print("=" * 60)

    from PyQt6.QtWidgets import QApplication

    from echoscope.ui.main_window import MainWindow

    app = QApplication(sys.argv)
    app.setStyle("Fusion")
    apply_palette(app)

    window = MainWindow(config_path=args.config)
    window.show()

    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
