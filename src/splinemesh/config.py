"""
Configuration & Global Constants
================================
This module serves as the central registry for numerical constants and
resource paths.

Why is this file needed?
------------------------
1. Consistency: The curve cache resolution and the comparison tolerance are
   shared by the curve, the sample and the tests. Keeping them here prevents
   magic numbers scattered throughout the code.
2. Axis convention: The bending math relies on a fixed set of axes (bend axis,
   roll axis, default up). They are declared once so every module agrees.
3. Deployment: It handles the logic required by PyInstaller (sys._MEIPASS) to
   find resources when the demo is frozen into an executable.

Exports:
    CURVE_SAMPLE_STEPS (int): Number of chords in a curve's arc-length cache.
    EPSILON (float): Tolerance for sample equality.
    MAX_UV_CHANNELS (int): Maximum number of UV channels carried by a mesh.
"""
import sys
import os
from pathlib import Path


def get_resource_path(relative_path: str) -> str:
    """
    Get absolute path to resource, works for dev and for PyInstaller.
    """
    if hasattr(sys, '_MEIPASS'):
        base_path: str = getattr(sys, '_MEIPASS')
        return os.path.join(base_path, relative_path)

    # config.py is in src/splinemesh/
    current_file_path: Path = Path(__file__)
    project_root: Path = current_file_path.parent.parent.parent
    return os.path.join(str(project_root), relative_path)


# Curve sampling
CURVE_SAMPLE_STEPS: int = 30
EPSILON: float = 1e-6

# Mesh description
MAX_UV_CHANNELS: int = 8

# Axis convention (x = bend axis of the source mesh)
BEND_AXIS: tuple[float, float, float] = (1.0, 0.0, 0.0)
ROLL_AXIS: tuple[float, float, float] = (0.0, 0.0, 1.0)
DEFAULT_UP: tuple[float, float, float] = (0.0, 1.0, 0.0)
FALLBACK_FORWARD: tuple[float, float, float] = (0.0, 0.0, 1.0)

# Bend-axis correction, degrees around +y
BEND_AXIS_CORRECTION_DEG: float = -90.0
