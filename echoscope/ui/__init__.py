"""
EchoScope UI Module

PyQt6 / pyqtgraph front end for the pulse-echo simulator.

Components:
    - rotary: knob drag mapping (no Qt dependency)
    - qt_timers: QTimer-backed timer backend
    - echo_scope: instrument screen showing the rendered trace
    - schematic_view: probe / object side view with pulse rings
    - panels: instrument front panel
    - main_window: application shell

Qt modules are imported by their users (run_gui.py, main_window) so that
the rotary mapping stays importable on machines without a display.
"""
