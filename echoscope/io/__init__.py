"""
I/O Package

YAML configuration loading.
"""

from .config_loader import ConfigLoader, SimulatorConfig, load_config

__all__ = [
    "ConfigLoader",
    "SimulatorConfig",
    "load_config",
]
