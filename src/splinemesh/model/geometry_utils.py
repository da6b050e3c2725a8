from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
from scipy.spatial.transform import Rotation

if TYPE_CHECKING:
    from numpy import typing as npt


def normalize(
    vector: npt.NDArray[np.float64],
    fallback: npt.NDArray[np.float64] | None = None,
) -> npt.NDArray[np.float64]:
    """
    Return the unit vector of `vector`.

    Args:
        vector: (3,) array.
        fallback: Returned (as a copy) when `vector` has zero length. If None,
            a zero vector is returned.

    Returns:
        (3,) unit array, the fallback, or zeros.
    """
    magnitude = float(np.linalg.norm(vector))
    if magnitude == 0.0 or not np.isfinite(magnitude):
        if fallback is None:
            return np.zeros(3, dtype=np.float64)
        return np.array(fallback, dtype=np.float64)
    return vector / magnitude


def lerp(a: npt.ArrayLike, b: npt.ArrayLike, t: float) -> npt.NDArray[np.float64]:
    """Unclamped linear interpolation a + (b - a) * t."""
    a = np.asarray(a, dtype=np.float64)
    b = np.asarray(b, dtype=np.float64)
    return a + (b - a) * t


def any_perpendicular(vector: npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
    """Unit vector perpendicular to `vector`, chosen along the least aligned world axis."""
    axis = np.zeros(3, dtype=np.float64)
    axis[int(np.argmin(np.abs(vector)))] = 1.0
    return normalize(np.cross(vector, axis), fallback=np.array([0.0, 1.0, 0.0]))


def look_rotation(
    forward: npt.NDArray[np.float64],
    up: npt.NDArray[np.float64],
) -> Rotation:
    """
    Rotation mapping +z onto `forward` and +y onto the part of `up`
    perpendicular to `forward`.

    Degenerate input (zero forward, or up parallel to forward) never fails:
    forward falls back to +z and up to an arbitrary perpendicular.

    Args:
        forward: (3,) direction to look along.
        up: (3,) approximate up direction.

    Returns:
        scipy Rotation.
    """
    f = normalize(forward, fallback=np.array([0.0, 0.0, 1.0]))
    right = np.cross(up, f)
    if float(np.linalg.norm(right)) < 1e-12:
        right = np.cross(any_perpendicular(f), f)
    right = normalize(right)
    true_up = np.cross(f, right)
    return Rotation.from_matrix(np.column_stack((right, true_up, f)))


def axis_angle(axis: npt.ArrayLike, angle_deg: float) -> Rotation:
    """Rotation of `angle_deg` degrees around a unit `axis`."""
    return Rotation.from_rotvec(np.radians(angle_deg) * np.asarray(axis, dtype=np.float64))
