"""
Source Mesh Snapshot
====================
An immutable, pre-transformed copy of a mesh, ready to be bent.

Why is this file needed?
------------------------
1. Transform: the mesh is rotated, scaled and translated once, so that its
   bend axis is x before any bending happens.
2. Grouping: vertices sharing the same normalized position along x (the
   "distance rate") are grouped. An extruded cross-section mesh has far fewer
   distinct rates than vertices, so the bender evaluates the curve once per
   group instead of once per vertex.

Classes:
    MeshData: The external mesh description (input only, never mutated).
    SourceMesh: The transformed snapshot.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence, TYPE_CHECKING

import numpy as np
from scipy.spatial.transform import Rotation

from splinemesh.config import MAX_UV_CHANNELS

if TYPE_CHECKING:
    import numpy.typing as npt

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MeshData:
    """
    Mesh description handed over by asset loading.

    Attributes:
        vertices: (N, 3) positions.
        normals: (N, 3) normals.
        triangles: (M, 3) vertex indices; a flat index array is reshaped.
        uvs: Up to 8 UV channels, each an (N, 2) array or None when absent.
    """
    vertices: npt.NDArray[np.float64]
    normals: npt.NDArray[np.float64]
    triangles: npt.NDArray[np.int64]
    uvs: tuple[Optional[npt.NDArray[np.float64]], ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        vertices = np.array(self.vertices, dtype=np.float64).reshape(-1, 3)
        normals = np.array(self.normals, dtype=np.float64).reshape(-1, 3)
        triangles = np.array(self.triangles, dtype=np.int64).reshape(-1, 3)

        if normals.shape != vertices.shape:
            raise ValueError(
                f"Expected one normal per vertex, got {len(normals)} normals for {len(vertices)} vertices."
            )
        if triangles.size and (triangles.min() < 0 or triangles.max() >= len(vertices)):
            raise ValueError("Triangle indices reference vertices that do not exist.")
        if len(self.uvs) > MAX_UV_CHANNELS:
            raise ValueError(f"At most {MAX_UV_CHANNELS} UV channels are supported, got {len(self.uvs)}.")

        uvs = []
        for channel, uv in enumerate(self.uvs):
            if uv is None:
                uvs.append(None)
                continue
            uv = np.array(uv, dtype=np.float64).reshape(-1, 2)
            if len(uv) != len(vertices):
                raise ValueError(f"UV channel {channel} has {len(uv)} entries for {len(vertices)} vertices.")
            uvs.append(uv)

        object.__setattr__(self, "vertices", vertices)
        object.__setattr__(self, "normals", normals)
        object.__setattr__(self, "triangles", triangles)
        object.__setattr__(self, "uvs", tuple(uvs))

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)


def reversed_triangles(triangles: npt.NDArray[np.int64]) -> npt.NDArray[np.int64]:
    """Flip the winding of every triangle by swapping its first two indices."""
    return triangles[:, [1, 0, 2]]


def group_distance_rates(
    rates: npt.NDArray[np.float64],
) -> tuple[npt.NDArray[np.float64], npt.NDArray[np.int64]]:
    """
    Group equal rates.

    Args:
        rates: (N,) distance rate of every vertex.

    Returns:
        (G,) distinct rates, in the order they first appear, and (N,) group
        index of every vertex.
    """
    if len(rates) == 0:
        return np.empty(0, dtype=np.float64), np.empty(0, dtype=np.int64)

    unique, first_index, inverse = np.unique(rates, return_index=True, return_inverse=True)
    order = np.argsort(first_index, kind="stable")
    rank = np.empty_like(order)
    rank[order] = np.arange(len(order))
    return unique[order], rank[inverse.reshape(-1)].astype(np.int64)


class SourceMesh:
    def __init__(
        self,
        mesh: MeshData,
        translation: Optional[Sequence[float]] = None,
        rotation: Optional[Rotation] = None,
        scale: Optional[Sequence[float]] = None,
        rate_tolerance: Optional[float] = None,
    ) -> None:
        """
        Build the snapshot.

        Args:
            mesh: Source mesh, left untouched.
            translation: (3,) offset applied last. Defaults to zero.
            rotation: Rotation applied first. Defaults to identity.
            scale: (3,) per-axis scale applied after the rotation. Defaults to ones.
            rate_tolerance: If given, distance rates are rounded to multiples
                of this value before grouping. By default rates are grouped by
                exact equality.
        """
        self.mesh = mesh
        self.translation = np.zeros(3) if translation is None else np.asarray(translation, dtype=np.float64)
        self.rotation_value = Rotation.identity() if rotation is None else rotation
        self.scale_value = np.ones(3) if scale is None else np.asarray(scale, dtype=np.float64)
        self.rate_tolerance = rate_tolerance
        self._build_data()

    @classmethod
    def build(
        cls,
        mesh: MeshData,
        translation: Optional[Sequence[float]] = None,
        rotation: Optional[Rotation] = None,
        scale: Optional[Sequence[float]] = None,
        rate_tolerance: Optional[float] = None,
    ) -> SourceMesh:
        return cls(mesh, translation, rotation, scale, rate_tolerance)

    # ---- fluent copies ----

    def translate(self, translation: Sequence[float]) -> SourceMesh:
        """New snapshot with the given translation, other settings kept."""
        return SourceMesh(self.mesh, translation, self.rotation_value, self.scale_value, self.rate_tolerance)

    def rotate(self, rotation: Rotation) -> SourceMesh:
        """New snapshot with the given rotation, other settings kept."""
        return SourceMesh(self.mesh, self.translation, rotation, self.scale_value, self.rate_tolerance)

    def scale(self, scale: Sequence[float]) -> SourceMesh:
        """New snapshot with the given scale, other settings kept."""
        return SourceMesh(self.mesh, self.translation, self.rotation_value, scale, self.rate_tolerance)

    # ---- build ----

    def _build_data(self) -> None:
        mesh = self.mesh

        # An odd number of mirrored axes turns faces inside out
        reversed_faces = int(np.count_nonzero(self.scale_value < 0)) % 2 == 1
        triangles = reversed_triangles(mesh.triangles) if reversed_faces else mesh.triangles.copy()

        # rotate -> scale -> translate; normals skip the translation
        vertices = mesh.vertices
        normals = mesh.normals
        if len(vertices):
            vertices = self.rotation_value.apply(vertices)
            normals = self.rotation_value.apply(normals)
        vertices = vertices * self.scale_value + self.translation
        normals = normals * self.scale_value

        if len(vertices):
            min_x = float(vertices[:, 0].min())
            max_x = float(vertices[:, 0].max())
        else:
            min_x = max_x = 0.0
        length = abs(max_x - min_x)

        if length == 0.0:
            logger.debug("Source mesh has no extent along x, every vertex gets rate 0.")
            rates = np.zeros(len(vertices), dtype=np.float64)
        else:
            rates = np.abs(vertices[:, 0] - min_x) / length
        if self.rate_tolerance:
            rates = np.round(rates / self.rate_tolerance) * self.rate_tolerance

        sample_groups, vertex_to_group = group_distance_rates(rates)

        for array in (vertices, normals, triangles, sample_groups, vertex_to_group):
            array.setflags(write=False)

        self._vertices = vertices
        self._normals = normals
        self._triangles = triangles
        self._min_x = min_x
        self._length = length
        self._sample_groups = sample_groups
        self._vertex_to_group = vertex_to_group
        by_group = np.argsort(vertex_to_group, kind="stable")
        counts = np.bincount(vertex_to_group, minlength=len(sample_groups))
        self._group_members = tuple(np.split(by_group, np.cumsum(counts)[:-1])) if len(counts) else ()
        logger.debug(
            f"Source mesh built: {len(vertices)} vertices, {len(sample_groups)} distance groups, "
            f"length {length:.4f}, reversed={reversed_faces}."
        )

    # ---- accessors ----

    @property
    def vertices(self) -> npt.NDArray[np.float64]:
        return self._vertices

    @property
    def normals(self) -> npt.NDArray[np.float64]:
        return self._normals

    @property
    def triangles(self) -> npt.NDArray[np.int64]:
        return self._triangles

    @property
    def uvs(self) -> tuple[Optional[npt.NDArray[np.float64]], ...]:
        """UV channels of the source mesh, passed through untouched."""
        return self.mesh.uvs

    @property
    def vertex_count(self) -> int:
        return len(self._vertices)

    @property
    def min_x(self) -> float:
        return self._min_x

    @property
    def length(self) -> float:
        """Extent of the transformed mesh along the bend axis."""
        return self._length

    @property
    def sample_groups(self) -> npt.NDArray[np.float64]:
        """Distinct distance rates, indexed by group id."""
        return self._sample_groups

    @property
    def vertex_to_group(self) -> npt.NDArray[np.int64]:
        return self._vertex_to_group

    def group_members(self) -> tuple[npt.NDArray[np.int64], ...]:
        """Vertex indices of every group, indexed by group id."""
        return self._group_members
