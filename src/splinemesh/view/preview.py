"""
PyVista Adapters
Conversion between pyvista meshes and the bender's mesh buffers, plus a quick
preview window.
"""
from __future__ import annotations

import logging
from typing import Optional, Sequence

import numpy as np
import numpy.typing as npt
import pyvista as pv

from splinemesh.model.mesh_bender import BentMesh
from splinemesh.model.path import Path
from splinemesh.model.source_mesh import MeshData

logger = logging.getLogger(__name__)


def _faces_to_triangles(faces: npt.NDArray[np.int64]) -> npt.NDArray[np.int64]:
    """Convert a VTK face stream of triangles ([3, a, b, c, 3, ...]) to (M, 3)."""
    return np.asarray(faces, dtype=np.int64).reshape(-1, 4)[:, 1:]


def _triangles_to_faces(triangles: npt.NDArray[np.int64]) -> npt.NDArray[np.int64]:
    triangles = np.asarray(triangles, dtype=np.int64).reshape(-1, 3)
    return np.hstack([np.full((len(triangles), 1), 3, dtype=np.int64), triangles]).ravel()


def mesh_data_from_polydata(poly: pv.PolyData) -> MeshData:
    """
    Build a MeshData from any pyvista surface.

    The surface is triangulated and point normals are computed without
    re-orienting faces. Texture coordinates, if any, become UV channel 0.
    """
    tri = poly.triangulate()
    tri = tri.compute_normals(
        point_normals=True,
        cell_normals=False,
        split_vertices=False,
        consistent_normals=False,
        auto_orient_normals=False,
    )
    uv = tri.active_texture_coordinates
    logger.debug(f"Converted surface with {tri.n_points} points and {tri.n_cells} triangles.")
    return MeshData(
        vertices=np.asarray(tri.points, dtype=np.float64),
        normals=np.asarray(tri.point_data["Normals"], dtype=np.float64),
        triangles=_faces_to_triangles(tri.faces),
        uvs=() if uv is None else (np.asarray(uv, dtype=np.float64),),
    )


def bent_mesh_to_polydata(bent: BentMesh) -> pv.PolyData:
    """Convert a bent mesh into a pyvista surface with normals and UV channel 0."""
    poly = pv.PolyData(bent.vertices, _triangles_to_faces(bent.triangles))
    poly.point_data["Normals"] = bent.normals
    if bent.uvs and bent.uvs[0] is not None:
        poly.active_texture_coordinates = bent.uvs[0]
    return poly


def path_to_polyline(path: Path) -> pv.PolyData:
    """Polyline through the cached samples of every curve of the path."""
    points = [sample.location for curve in path.curves for sample in curve.samples]
    return pv.lines_from_points(np.array(points))


def show_bent_meshes(meshes: Sequence[BentMesh], path: Optional[Path] = None) -> None:
    """Open an interactive window with the bent meshes and, optionally, their path."""
    plotter = pv.Plotter()
    for bent in meshes:
        plotter.add_mesh(bent_mesh_to_polydata(bent), color="lightsteelblue", smooth_shading=True, show_edges=True)
    if path is not None:
        plotter.add_mesh(path_to_polyline(path), color="red", line_width=3)
        node_points = np.array([node.position.to_list() for node in path.nodes])
        plotter.add_points(node_points, color="black", point_size=10, render_points_as_spheres=True)
    plotter.add_axes()
    plotter.show()
