from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Dict

from splinemesh.config import DEFAULT_UP
from splinemesh.model.geometry_primitives import Vector, Vector2, VectorLike, Vector2Like


@dataclass(frozen=True)
class Node:
    """
    A control point of a path.

    The node is a value: editing a node means building a new one (see
    `with_changes`) and handing it back to the owning path.

    Attributes:
        position: Location of the node.
        direction: Absolute position of the control handle, not a unit vector.
            The mirrored handle (2 * position - direction) shapes the curve
            arriving at this node.
        up: Up vector used to orient samples around this node.
        scale: Cross-section scale (x scales the mesh depth, y its height).
        roll: Rotation around the curve, in degrees.
    """
    position: Vector
    direction: Vector
    up: Vector = field(default_factory=lambda: Vector.of(DEFAULT_UP))
    scale: Vector2 = field(default_factory=lambda: Vector2(1.0, 1.0))
    roll: float = 0.0

    def __post_init__(self) -> None:
        # Accept plain tuples/arrays for convenience
        object.__setattr__(self, "position", Vector.of(self.position))
        object.__setattr__(self, "direction", Vector.of(self.direction))
        object.__setattr__(self, "up", Vector.of(self.up))
        object.__setattr__(self, "scale", Vector2.of(self.scale))
        object.__setattr__(self, "roll", float(self.roll))

    def with_changes(
        self,
        position: VectorLike | None = None,
        direction: VectorLike | None = None,
        up: VectorLike | None = None,
        scale: Vector2Like | None = None,
        roll: float | None = None,
    ) -> Node:
        """Return a copy of this node with the given fields replaced."""
        changes: Dict[str, Any] = {
            key: value for key, value in (
                ("position", position),
                ("direction", direction),
                ("up", up),
                ("scale", scale),
                ("roll", roll),
            ) if value is not None
        }
        return replace(self, **changes)

    @property
    def has_degenerate_handle(self) -> bool:
        """True when the handle sits on the node, giving a zero-length tangent."""
        return self.direction == self.position

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": self.position.to_list(),
            "direction": self.direction.to_list(),
            "up": self.up.to_list(),
            "scale": self.scale.to_list(),
            "roll": self.roll,
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Node:
        return Node(
            position=data["position"],
            direction=data["direction"],
            up=data.get("up", DEFAULT_UP),
            scale=data.get("scale", (1.0, 1.0)),
            roll=data.get("roll", 0.0),
        )
