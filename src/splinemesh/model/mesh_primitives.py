from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from splinemesh.model.source_mesh import MeshData

if TYPE_CHECKING:
    from numpy import typing as npt


def ellipse_profile(
    a: float,
    b: float,
    n_segments: int
) -> npt.NDArray[np.float64]:
    """
    Discretize an ellipse in the YZ plane into an (N, 2) open polyline.

    Args:
        a: Semi-axis along y.
        b: Semi-axis along z.
        n_segments: Number of points on the ellipse.

    Returns:
        An array of shape (n, 2) containing the (y, z) coordinates, counter-clockwise.
    """
    theta = np.linspace(0.0, 2.0 * np.pi, n_segments, endpoint=False)
    return np.c_[a * np.cos(theta), b * np.sin(theta)]


def circle_profile(radius: float, n_segments: int) -> npt.NDArray[np.float64]:
    """Discretize a circle in the YZ plane. See `ellipse_profile`."""
    return ellipse_profile(radius, radius, n_segments)


def extrude_profile(
    profile: npt.NDArray[np.float64],
    length: float,
    rings: int,
) -> MeshData:
    """
    Extrude a closed (y, z) profile along +x into a tube mesh.

    Every ring of the tube shares one x coordinate, which is exactly the shape
    the bender's grouping is made for: `rings` distance groups for
    `rings * len(profile)` vertices.

    Args:
        profile: (P, 2) closed profile, counter-clockwise seen from +x, not
            repeating its first point.
        length: Extent along x, starting at x = 0.
        rings: Number of cross-sections (>= 2).

    Returns:
        MeshData with outward normals and one UV channel (u along the
        profile, v along the length).
    """
    if rings < 2:
        raise ValueError(f"A tube needs at least 2 rings, got {rings}.")

    profile = np.asarray(profile, dtype=np.float64).reshape(-1, 2)
    n_points = len(profile)
    xs = np.linspace(0.0, length, rings)

    # Outward profile normals from the averaged neighbouring edge normals
    edges = np.roll(profile, -1, axis=0) - profile
    edge_normals = np.c_[edges[:, 1], -edges[:, 0]]
    point_normals = edge_normals + np.roll(edge_normals, 1, axis=0)
    point_normals /= np.linalg.norm(point_normals, axis=1, keepdims=True)

    vertices = np.empty((rings * n_points, 3), dtype=np.float64)
    vertices[:, 0] = np.repeat(xs, n_points)
    vertices[:, 1:] = np.tile(profile, (rings, 1))

    normals = np.zeros_like(vertices)
    normals[:, 1:] = np.tile(point_normals, (rings, 1))

    u = np.tile(np.arange(n_points) / n_points, rings)
    v = np.repeat(xs / length if length else np.zeros(rings), n_points)
    uv = np.c_[u, v]

    triangles = []
    for ring in range(rings - 1):
        base = ring * n_points
        for i in range(n_points):
            a = base + i
            b = base + (i + 1) % n_points
            c = a + n_points
            d = b + n_points
            triangles.append((a, b, d))
            triangles.append((a, d, c))

    return MeshData(vertices=vertices, normals=normals, triangles=np.array(triangles), uvs=(uv,))
