"""
Geometric Primitives for user-authored path data.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence, Union, TYPE_CHECKING
import numpy as np
import math

if TYPE_CHECKING:
    import numpy.typing as npt


@dataclass(frozen=True)
class Vector:
    """
    A vector in 3D space representing a position or a direction.
    """
    x: float
    y: float
    z: float = 0.0

    @classmethod
    def of(cls, value: VectorLike) -> Vector:
        """Coerce a Vector, a 3-sequence or a (3,) array into a Vector."""
        if isinstance(value, Vector):
            return value
        x, y, z = (float(c) for c in value)
        return cls(x, y, z)

    def __sub__(self, other: Vector) -> Vector:
        return Vector(self.x - other.x, self.y - other.y, self.z - other.z)

    @property
    def magnitude(self) -> float:
        return math.sqrt(self.x**2 + self.y**2 + self.z**2)

    def distance_to(self, other: Vector) -> float:
        return (self - other).magnitude

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def to_list(self) -> list[float]:
        return [self.x, self.y, self.z]


@dataclass(frozen=True)
class Vector2:
    """A 2D vector, used for the (width, height) scale of a cross-section."""
    x: float
    y: float

    @classmethod
    def of(cls, value: Vector2Like) -> Vector2:
        if isinstance(value, Vector2):
            return value
        if isinstance(value, (int, float)):
            return cls(float(value), float(value))
        x, y = (float(c) for c in value)
        return cls(x, y)

    def to_array(self) -> npt.NDArray[np.float64]:
        return np.array([self.x, self.y], dtype=np.float64)

    def to_list(self) -> list[float]:
        return [self.x, self.y]


VectorLike = Union[Vector, Sequence[float], "npt.NDArray[np.float64]"]
Vector2Like = Union[Vector2, float, Sequence[float], "npt.NDArray[np.float64]"]
