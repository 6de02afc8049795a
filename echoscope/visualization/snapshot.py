"""
Frame Snapshot Export

Saves rendered frames and trace plots to image files with Matplotlib
(non-interactive Agg backend), for the headless runner and teaching
handouts.
"""

import os
from typing import Optional

import matplotlib

matplotlib.use("Agg")  # Non-interactive backend

import matplotlib.pyplot as plt
import numpy as np

from .raster import RasterSurface


def save_frame(surface: RasterSurface, filepath: str) -> str:
    """
    Save the surface exactly as displayed (one pixel per pixel).

    Args:
        surface: Rendered surface
        filepath: Output PNG path

    Returns:
        Path written
    """
    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)

    plt.imsave(filepath, surface.to_rgba8())
    return filepath


def save_trace_plot(
    positions: np.ndarray,
    trace: np.ndarray,
    filepath: str,
    envelope: Optional[np.ndarray] = None,
    title: str = "Echo trace",
) -> str:
    """
    Plot amplitude vs position with axis labels in millimetres.

    Args:
        positions: Sample positions [mm]
        trace: Noisy trace
        filepath: Output PNG path
        envelope: Optional noise-free trace drawn dashed
        title: Plot title

    Returns:
        Path written
    """
    fig, ax = plt.subplots(figsize=(10, 4))

    ax.plot(positions, trace, color="#00aa44", linewidth=1.5, label="Trace")
    if envelope is not None:
        ax.plot(positions, envelope, "--", color="#cc6600", linewidth=1, label="Envelope")

    ax.set_xlabel("Position (mm)", fontsize=12)
    ax.set_ylabel("Amplitude", fontsize=12)
    ax.set_title(title, fontsize=14)
    ax.legend(loc="upper right")
    ax.grid(True, alpha=0.3)

    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)

    fig.tight_layout()
    fig.savefig(filepath, dpi=150)
    plt.close(fig)
    return filepath
