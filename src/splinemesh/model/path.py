"""
Path (Data Model)
=================
This module defines the editable skeleton of a spline: an ordered list of
nodes, optionally looping.

Why is this file needed?
------------------------
1. State Management: It owns the nodes. Editors write to it through the
   insert/append/remove/update operations; nothing else mutates nodes.
2. Derived Data: It derives the cubic Bezier curves between consecutive nodes
   lazily, using a version counter so that curves are rebuilt at most once per
   edit.
3. Notification: After every structural mutation listeners are called
   synchronously, in registration order. Listeners must not edit the path
   from within the callback.

Classes:
    Path: The node container.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence, TYPE_CHECKING

import numpy as np

from splinemesh.config import CURVE_SAMPLE_STEPS
from splinemesh.model.bezier import CubicBezierCurve
from splinemesh.model.errors import InvariantViolation
from splinemesh.model.geometry_primitives import Vector2
from splinemesh.model.node import Node

if TYPE_CHECKING:
    import numpy.typing as npt
    from splinemesh.model.curve_sample import CurveSample

logger = logging.getLogger(__name__)

PathListener = Callable[["Path"], None]

MIN_NODE_COUNT = 2


def default_nodes() -> list[Node]:
    """Two nodes forming a gentle S, used when a path is created empty."""
    return [
        Node(position=(5.0, 0.0, 0.0), direction=(5.0, 0.0, -3.0)),
        Node(position=(10.0, 0.0, 0.0), direction=(10.0, 0.0, 3.0)),
    ]


class Path:
    def __init__(
        self,
        nodes: Optional[Iterable[Node]] = None,
        is_loop: bool = False,
        steps: int = CURVE_SAMPLE_STEPS,
    ) -> None:
        """
        Initialize the path.

        Args:
            nodes: Initial nodes. None gives the default two-node path.
            is_loop: If True, a closing curve joins the last node to the first.
            steps: Arc-length cache resolution of every curve.

        Raises:
            InvariantViolation: If fewer than two nodes are given.
        """
        node_list = default_nodes() if nodes is None else list(nodes)
        if len(node_list) < MIN_NODE_COUNT:
            raise InvariantViolation(
                f"A path needs at least {MIN_NODE_COUNT} nodes, got {len(node_list)}."
            )

        self._nodes: List[Node] = node_list
        self._is_loop = bool(is_loop)
        self.steps = steps

        self._listeners: List[PathListener] = []
        self._version = 0
        self._curves: List[CubicBezierCurve] = []
        self._curves_version = -1

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(nodes={len(self._nodes)}, is_loop={self._is_loop})"

    # ---- node access ----

    @property
    def nodes(self) -> tuple[Node, ...]:
        return tuple(self._nodes)

    def __len__(self) -> int:
        return len(self._nodes)

    def __getitem__(self, index: int) -> Node:
        return self._nodes[index]

    def __iter__(self) -> Iterator[Node]:
        return iter(tuple(self._nodes))

    @property
    def version(self) -> int:
        """Monotonic counter, incremented by every mutation."""
        return self._version

    @property
    def is_loop(self) -> bool:
        return self._is_loop

    @is_loop.setter
    def is_loop(self, value: bool) -> None:
        if bool(value) == self._is_loop:
            return
        self._is_loop = bool(value)
        self._changed("loop")

    # ---- mutations ----

    def add_node(self, node: Node) -> None:
        """Append a node at the end of the path."""
        self._nodes.append(node)
        self._changed("add")

    def insert_node(self, index: int, node: Node) -> None:
        """Insert a node before `index` (list semantics)."""
        self._nodes.insert(index, node)
        self._changed("insert")

    def remove_node(self, index: int) -> Node:
        """
        Remove and return the node at `index`.

        Raises:
            InvariantViolation: If the path would end up with fewer than two
                nodes. The path is left unchanged.
            IndexError: If `index` is out of range.
        """
        if len(self._nodes) <= MIN_NODE_COUNT:
            raise InvariantViolation(
                f"Cannot remove a node: a path needs at least {MIN_NODE_COUNT} nodes."
            )
        node = self._nodes.pop(index)
        self._changed("remove")
        return node

    def update_node(self, index: int, node: Node) -> None:
        """Replace the node at `index`."""
        self._nodes[index] = node
        self._changed("update")

    def duplicate_node(self, index: int) -> Node:
        """
        Insert a copy of the node at `index` right after it and return it.

        Only position and handle are copied, as a freshly placed node would
        get: up, scale and roll take their defaults.
        """
        source = self._nodes[index]
        clone = Node(position=source.position, direction=source.direction)
        if index in (-1, len(self._nodes) - 1):
            self.add_node(clone)
        else:
            self.insert_node(index % len(self._nodes) + 1, clone)
        return clone

    def apply_scale_roll_ramp(
        self,
        start_scale: float = 1.0,
        end_scale: float = 1.0,
        start_roll: float = 0.0,
        end_roll: float = 0.0,
    ) -> None:
        """
        Set each node's scale and roll proportionally to its distance along
        the path, from the start values to the end values.

        Used e.g. for tentacles that taper and twist. Listeners are notified
        once.
        """
        total = self.length
        offsets = np.concatenate(([0.0], np.cumsum([curve.length for curve in self.curves])))
        new_nodes = []
        for node, offset in zip(self._nodes, offsets):
            rate = 0.0 if total == 0.0 else float(offset) / total
            new_nodes.append(node.with_changes(
                scale=Vector2.of(start_scale + (end_scale - start_scale) * rate),
                roll=start_roll + (end_roll - start_roll) * rate,
            ))
        self._nodes = new_nodes
        self._changed("ramp")

    # ---- listeners ----

    def subscribe(self, listener: PathListener) -> None:
        """Register a callback invoked with the path after every mutation."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: PathListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _changed(self, reason: str) -> None:
        self._version += 1
        logger.debug(f"Path changed ({reason}), version {self._version}, {len(self._nodes)} nodes.")
        for listener in list(self._listeners):
            listener(self)

    # ---- derived curves ----

    @property
    def curves(self) -> tuple[CubicBezierCurve, ...]:
        """Curves between consecutive nodes, plus the closing curve of a loop."""
        if self._curves_version != self._version:
            self._rebuild_curves()
        return tuple(self._curves)

    def _rebuild_curves(self) -> None:
        pairs = list(zip(self._nodes[:-1], self._nodes[1:]))
        if self._is_loop:
            pairs.append((self._nodes[-1], self._nodes[0]))
        self._curves = [CubicBezierCurve(n1, n2, steps=self.steps) for n1, n2 in pairs]
        self._curves_version = self._version
        logger.debug(f"Rebuilt {len(self._curves)} curves for path version {self._version}.")

    @property
    def length(self) -> float:
        return float(sum(curve.length for curve in self.curves))

    def locate(self, distance: float) -> tuple[int, float]:
        """
        Convert a distance along the whole path into (curve index, distance
        in that curve). Out-of-range distances are clamped, NaN reads as the
        start.

        This is a linear scan over the curves; node counts are small.
        """
        curves = self.curves
        remaining = 0.0 if np.isnan(distance) else max(float(distance), 0.0)
        for index, curve in enumerate(curves):
            if remaining <= curve.length:
                return index, remaining
            remaining -= curve.length
        last = len(curves) - 1
        return last, curves[last].length

    def sample_at_distance(self, distance: float) -> CurveSample:
        """Sample at a distance from the path start; the sample carries its curve-local distance."""
        index, local = self.locate(distance)
        return self.curves[index].sample_at_distance(local)

    def sample_at_time(self, t: float) -> CurveSample:
        """
        Sample at path time `t` in [0, number of curves]: the integer part
        picks the curve, the fraction is the time inside it. Clamped.
        """
        curves = self.curves
        t = min(max(float(t), 0.0), float(len(curves)))
        index = min(int(t), len(curves) - 1)
        return curves[index].sample_at_time(t - index)

    def get_projection_sample(self, point: Sequence[float] | npt.NDArray[np.float64]) -> CurveSample:
        """Sample of the whole path closest to `point`."""
        point = np.asarray(point, dtype=np.float64)
        candidates = [curve.get_projection_sample(point) for curve in self.curves]
        return min(candidates, key=lambda sample: float(np.linalg.norm(sample.location - point)))

    # ---- persistence ----

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_loop": self._is_loop,
            "nodes": [node.to_dict() for node in self._nodes],
        }

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Path:
        return Path(
            nodes=[Node.from_dict(node) for node in data["nodes"]],
            is_loop=data.get("is_loop", False),
        )
