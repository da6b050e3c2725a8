"""
Mesh Bender
===========
Deforms a source mesh snapshot along a curve or along an interval of a path.

Why is this file needed?
------------------------
1. Bending: for every distance-rate group of the source mesh a single curve
   sample is evaluated, and every vertex of the group is bent with it. The
   number of curve evaluations depends on the number of distinct
   cross-sections, not on the vertex count.
2. Memoization: `MeshBender` remembers the inputs of its last computation
   (source snapshot, target, interval endpoints, filling mode, path version)
   and only recomputes when one of them changed or after `invalidate()`.

Groups are independent of each other: each one reads the shared snapshot and
writes a disjoint set of output rows.
"""
from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Callable, Optional, Union, TYPE_CHECKING

import numpy as np

from splinemesh.model.bezier import CubicBezierCurve
from splinemesh.model.errors import InvariantViolation
from splinemesh.model.path import Path

if TYPE_CHECKING:
    import numpy.typing as npt
    from splinemesh.model.curve_sample import CurveSample
    from splinemesh.model.source_mesh import SourceMesh

logger = logging.getLogger(__name__)

Sampler = Callable[[float], "CurveSample"]


class FillingMode(StrEnum):
    """How the source mesh is laid along the interval."""
    STRETCH_TO_INTERVAL = "stretch"
    ONCE = "once"
    REPEAT = "repeat"


@dataclass
class BentMesh:
    """
    Output buffers of a bend, ready for upload or export.

    Attributes:
        vertices: (N, 3) bent positions.
        normals: (N, 3) bent normals.
        triangles: (M, 3) vertex indices.
        uvs: UV channels of the source, passed through (tiled in repeat mode).
    """
    vertices: npt.NDArray[np.float64]
    normals: npt.NDArray[np.float64]
    triangles: npt.NDArray[np.int64]
    uvs: tuple[Optional[npt.NDArray[np.float64]], ...] = field(default_factory=tuple)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices)


def repetition_count(source: SourceMesh, start: float, end: float) -> int:
    """Number of whole source meshes fitting in the interval, at least one."""
    if source.length == 0.0:
        return 1
    return max(1, math.floor(abs(end - start) / source.length))


def bend_mesh(
    source: SourceMesh,
    sampler: Sampler,
    start: float,
    end: float,
    mode: FillingMode = FillingMode.STRETCH_TO_INTERVAL,
) -> BentMesh:
    """
    Bend `source` along the distances [start, end] of `sampler`.

    Args:
        source: Snapshot to bend.
        sampler: Callable returning the curve sample at a distance, e.g.
            `CubicBezierCurve.sample_at_distance` or `Path.sample_at_distance`.
        start: Distance where the mesh begins.
        end: Distance where the mesh ends (stretch mode) or where repetitions
            stop (repeat mode). Ignored in once mode.
        mode: Filling mode.

    Returns:
        The bent mesh. Triangles and UVs keep the source topology.
    """
    repetitions = repetition_count(source, start, end) if mode == FillingMode.REPEAT else 1
    count = source.vertex_count
    direction = 1.0 if end >= start else -1.0

    vertices = np.empty((count * repetitions, 3), dtype=np.float64)
    normals = np.empty((count * repetitions, 3), dtype=np.float64)

    for repetition in range(repetitions):
        offset = repetition * count
        for rate, members in zip(source.sample_groups, source.group_members()):
            if mode == FillingMode.STRETCH_TO_INTERVAL:
                distance = start + rate * (end - start)
            else:
                distance = start + direction * (repetition + rate) * source.length
            sample = sampler(float(distance))
            bent_positions, bent_normals = sample.bend(source.vertices[members], source.normals[members])
            vertices[offset + members] = bent_positions
            normals[offset + members] = bent_normals

    triangles = np.concatenate([source.triangles + repetition * count for repetition in range(repetitions)])
    uvs = tuple(None if uv is None else np.tile(uv, (repetitions, 1)) for uv in source.uvs)
    return BentMesh(vertices=vertices, normals=normals, triangles=triangles.reshape(-1, 3), uvs=uvs)


class MeshBender:
    def __init__(
        self,
        source: Optional[SourceMesh] = None,
        mode: FillingMode = FillingMode.STRETCH_TO_INTERVAL,
    ) -> None:
        """
        Initialize the bender.

        Args:
            source: Snapshot to bend; can be set later.
            mode: Filling mode.
        """
        self._source = source
        self._mode = FillingMode(mode)

        self._target: Union[CubicBezierCurve, Path, None] = None
        self._start = 0.0
        self._end: Optional[float] = None

        self._result: Optional[BentMesh] = None
        self._last_inputs: Optional[tuple] = None
        self.compute_count = 0

    @property
    def source(self) -> Optional[SourceMesh]:
        return self._source

    @source.setter
    def source(self, value: SourceMesh) -> None:
        self._source = value

    @property
    def mode(self) -> FillingMode:
        return self._mode

    @mode.setter
    def mode(self, value: FillingMode) -> None:
        self._mode = FillingMode(value)

    def set_interval(self, curve: CubicBezierCurve) -> None:
        """Bend along a whole curve."""
        self._target = curve
        self._start = 0.0
        self._end = None

    def set_path_interval(self, path: Path, start: float = 0.0, end: Optional[float] = None) -> None:
        """
        Bend along the distances [start, end] of a path. With `end` None the
        interval runs to the end of the path, following later edits.
        """
        self._target = path
        self._start = float(start)
        self._end = None if end is None else float(end)

    def watch(self, path: Path) -> None:
        """Invalidate the memoized mesh whenever `path` changes."""
        path.subscribe(lambda _path: self.invalidate())

    def invalidate(self) -> None:
        self._last_inputs = None

    def _resolve_interval(self) -> tuple[Sampler, float, float, int]:
        target = self._target
        if isinstance(target, Path):
            end = target.length if self._end is None else self._end
            return target.sample_at_distance, self._start, end, target.version
        if isinstance(target, CubicBezierCurve):
            return target.sample_at_distance, 0.0, target.length, 0
        raise InvariantViolation("No curve or path interval was set on the mesh bender.")

    @property
    def is_dirty(self) -> bool:
        if self._source is None or self._target is None:
            return True
        _, start, end, version = self._resolve_interval()
        return self._last_inputs != self._inputs_key(start, end, version)

    def _inputs_key(self, start: float, end: float, version: int) -> tuple:
        # source and target compare by identity
        return (self._source, self._target, version, start, end, self._mode)

    def compute(self) -> BentMesh:
        """
        Return the bent mesh, recomputing it only if an input changed.

        Raises:
            InvariantViolation: If no source mesh or no interval was set.
        """
        if self._source is None:
            raise InvariantViolation("No source mesh was set on the mesh bender.")
        sampler, start, end, version = self._resolve_interval()

        key = self._inputs_key(start, end, version)
        if self._result is not None and key == self._last_inputs:
            return self._result

        self._result = bend_mesh(self._source, sampler, start, end, self._mode)
        self._last_inputs = key
        self.compute_count += 1
        logger.debug(
            f"Bent {self._source.vertex_count} vertices in {len(self._source.sample_groups)} groups "
            f"over [{start:.4f}, {end:.4f}] ({self._mode})."
        )
        return self._result
