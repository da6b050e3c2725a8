"""
Curve Sample
============
An immutable snapshot of a point on a cubic Bezier curve and the bending
transform that moves source-mesh vertices onto that point.

Axis convention
---------------
The source mesh is laid out along its local x axis (the bend axis); its
cross-section lives in (y, z). A sample maps the cross-section plane onto the
plane normal to the curve tangent at `location`. The x coordinate of a vertex
is not used here: it has already been turned into a distance along the curve
by the caller when the sample was chosen.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, TYPE_CHECKING

import numpy as np
from scipy.spatial.transform import Rotation

from splinemesh.config import EPSILON, ROLL_AXIS, BEND_AXIS, BEND_AXIS_CORRECTION_DEG
from splinemesh.model.geometry_utils import normalize, lerp, look_rotation, axis_angle

if TYPE_CHECKING:
    import numpy.typing as npt

BEND_AXIS_CORRECTION = Rotation.from_euler("y", BEND_AXIS_CORRECTION_DEG, degrees=True)


@dataclass(frozen=True)
class MeshVertex:
    """A single vertex of a mesh: position, normal and optional uv."""
    position: npt.NDArray[np.float64]
    normal: npt.NDArray[np.float64]
    uv: Optional[npt.NDArray[np.float64]] = None


@dataclass(frozen=True, eq=False)
class CurveSample:
    """
    Location, orientation, scale and roll of a point on a curve.

    Attributes:
        location: (3,) point on the curve.
        tangent: (3,) unit tangent.
        up: (3,) up vector, interpolated between the nodes (not normalized).
        scale: (2,) cross-section scale.
        roll: Roll around the curve in degrees.
        distance_in_curve: Arc length from the start of the curve.
        time_in_curve: Bezier parameter in [0, 1].
    """
    location: npt.NDArray[np.float64]
    tangent: npt.NDArray[np.float64]
    up: npt.NDArray[np.float64]
    scale: npt.NDArray[np.float64]
    roll: float
    distance_in_curve: float
    time_in_curve: float

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CurveSample):
            return NotImplemented
        return self.is_close(other)

    __hash__ = None  # equality is tolerance based

    def is_close(self, other: CurveSample, tol: float = EPSILON) -> bool:
        """Component-wise comparison with an absolute tolerance."""
        return (
            np.allclose(self.location, other.location, rtol=0.0, atol=tol)
            and np.allclose(self.tangent, other.tangent, rtol=0.0, atol=tol)
            and np.allclose(self.up, other.up, rtol=0.0, atol=tol)
            and np.allclose(self.scale, other.scale, rtol=0.0, atol=tol)
            and abs(self.roll - other.roll) <= tol
            and abs(self.distance_in_curve - other.distance_in_curve) <= tol
            and abs(self.time_in_curve - other.time_in_curve) <= tol
        )

    def rotation(self) -> Rotation:
        """
        Look rotation along the tangent.

        The up vector is the node up rotated by `roll` around the fixed roll
        axis, then re-orthogonalized against the tangent with a double cross
        product. Mixing a non-zero roll with a custom up vector gives coupled
        results; prefer one or the other.
        """
        rolled_up = axis_angle(ROLL_AXIS, self.roll).apply(self.up)
        side = normalize(np.cross(rolled_up, self.tangent))
        up_vector = np.cross(self.tangent, side)
        return look_rotation(self.tangent, up_vector)

    def bend(
        self,
        positions: npt.NDArray[np.float64],
        normals: npt.NDArray[np.float64],
    ) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.float64]]:
        """
        Bend a batch of vertices that all share this sample.

        Args:
            positions: (N, 3) source positions.
            normals: (N, 3) source normals.

        Returns:
            Tuple of (N, 3) bent positions and (N, 3) bent normals. Normals are
            rotated, never scaled.
        """
        positions = np.asarray(positions, dtype=np.float64).reshape(-1, 3)
        normals = np.asarray(normals, dtype=np.float64).reshape(-1, 3)

        # x is absorbed by the sample choice, the cross-section gets scaled
        scaled = np.column_stack((
            np.zeros(len(positions)),
            positions[:, 1] * self.scale[1],
            positions[:, 2] * self.scale[0],
        ))

        roll = axis_angle(BEND_AXIS, self.roll)
        orientation = self.rotation() * BEND_AXIS_CORRECTION

        bent_positions = orientation.apply(roll.apply(scaled)) + self.location
        bent_normals = orientation.apply(roll.apply(normals))
        return bent_positions.reshape(-1, 3), bent_normals.reshape(-1, 3)

    def get_bent(self, vertex: MeshVertex) -> MeshVertex:
        """Bend a single vertex. See `bend` for the batch version."""
        positions, normals = self.bend(vertex.position, vertex.normal)
        return MeshVertex(position=positions[0], normal=normals[0], uv=vertex.uv)

    @staticmethod
    def lerp(a: CurveSample, b: CurveSample, t: float) -> CurveSample:
        """
        Linearly interpolate every field of two samples.

        The tangent is renormalized; the rotation is re-derived from the
        interpolated fields on demand rather than interpolated itself.
        """
        return CurveSample(
            location=lerp(a.location, b.location, t),
            tangent=normalize(lerp(a.tangent, b.tangent, t), fallback=a.tangent),
            up=lerp(a.up, b.up, t),
            scale=lerp(a.scale, b.scale, t),
            roll=a.roll + (b.roll - a.roll) * t,
            distance_in_curve=a.distance_in_curve + (b.distance_in_curve - a.distance_in_curve) * t,
            time_in_curve=a.time_in_curve + (b.time_in_curve - a.time_in_curve) * t,
        )
