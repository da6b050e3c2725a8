"""
Cubic Bezier Curve
==================
A curve segment built from two consecutive path nodes.

Why is this file needed?
------------------------
1. Ground truth: `get_location` / `get_tangent` evaluate the Bernstein
   polynomials directly.
2. Arc length: a Bezier parameter `t` does not advance at constant speed. The
   curve keeps an ordered cache of equally time-spaced samples carrying their
   cumulative chord length, so that a distance can be turned into a sample
   with a binary search and a linear interpolation.

The cache is built once in the constructor; the curve is immutable afterwards.
A path builds new curves whenever one of its nodes changes.
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import numpy as np

from splinemesh.config import CURVE_SAMPLE_STEPS, FALLBACK_FORWARD
from splinemesh.model.curve_sample import CurveSample
from splinemesh.model.geometry_utils import normalize, lerp

if TYPE_CHECKING:
    import numpy.typing as npt
    from splinemesh.model.node import Node

logger = logging.getLogger(__name__)


class CubicBezierCurve:
    def __init__(
        self,
        node1: Node,
        node2: Node,
        steps: int = CURVE_SAMPLE_STEPS,
    ) -> None:
        """
        Initialize the curve and compute its arc-length cache.

        Args:
            node1: Start node. Its handle is the second control point.
            node2: End node. Its handle, mirrored through its position, is the
                third control point.
            steps: Number of chords used to approximate the arc length. The
                cache holds steps + 1 samples.
        """
        if steps < 1:
            raise ValueError(f"Curve needs at least one sampling step, got {steps}.")

        self.node1 = node1
        self.node2 = node2
        self.steps = steps

        p0 = node1.position.to_array()
        p3 = node2.position.to_array()
        self.control_points: npt.NDArray[np.float64] = np.array([
            p0,
            node1.direction.to_array(),
            2.0 * p3 - node2.direction.to_array(),
            p3,
        ])
        # all control points on one spot: every location is exactly that spot
        self._collapsed = bool(np.all(self.control_points == p0))

        if node1.position.distance_to(node2.position) == 0.0:
            logger.debug(f"Degenerate curve: both nodes at {node1.position}.")
        elif node1.has_degenerate_handle or node2.has_degenerate_handle:
            logger.debug(f"Curve from {node1.position} has a handle on its node; end tangent falls back to the chord.")

        self._samples: tuple[CurveSample, ...] = ()
        self._times: npt.NDArray[np.float64] = np.empty(0)
        self._distances: npt.NDArray[np.float64] = np.empty(0)
        self._compute_samples()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(start={self.node1.position}, end={self.node2.position}, length={self.length:.4f})"

    # ---- ground truth ----

    def get_location(self, t: float | npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """
        Location on the curve at time `t` (scalar or array of times).

        Returns:
            (3,) array for a scalar `t`, (N, 3) for an array.
        """
        tt = np.asarray(t, dtype=np.float64)[..., None]
        p0, p1, p2, p3 = self.control_points
        if self._collapsed:
            return np.broadcast_to(p0, tt.shape[:-1] + (3,)).copy()
        omt = 1.0 - tt
        return (
            omt * omt * omt * p0
            + 3.0 * omt * omt * tt * p1
            + 3.0 * omt * tt * tt * p2
            + tt * tt * tt * p3
        )

    def get_derivative(self, t: float | npt.NDArray[np.float64]) -> npt.NDArray[np.float64]:
        """First derivative of the curve at time `t`, not normalized."""
        tt = np.asarray(t, dtype=np.float64)[..., None]
        omt = 1.0 - tt
        p0, p1, p2, p3 = self.control_points
        return (
            3.0 * omt * omt * (p1 - p0)
            + 6.0 * omt * tt * (p2 - p1)
            + 3.0 * tt * tt * (p3 - p2)
        )

    def get_tangent(self, t: float) -> npt.NDArray[np.float64]:
        """
        Unit tangent at time `t`.

        A zero derivative (handle on top of its node at an end of the curve)
        falls back to the chord direction, then to the fallback forward axis.
        """
        chord = self.control_points[3] - self.control_points[0]
        fallback = normalize(chord, fallback=np.array(FALLBACK_FORWARD))
        return normalize(self.get_derivative(t), fallback=fallback)

    # ---- samples ----

    def _create_sample(self, distance: float, t: float) -> CurveSample:
        n1, n2 = self.node1, self.node2
        return CurveSample(
            location=self.get_location(t),
            tangent=self.get_tangent(t),
            up=lerp(n1.up.to_array(), n2.up.to_array(), t),
            scale=lerp(n1.scale.to_array(), n2.scale.to_array(), t),
            roll=n1.roll + (n2.roll - n1.roll) * t,
            distance_in_curve=float(distance),
            time_in_curve=float(t),
        )

    def _compute_samples(self) -> None:
        """Fill the arc-length cache with steps + 1 equally time-spaced samples."""
        times = np.linspace(0.0, 1.0, self.steps + 1)
        locations = self.get_location(times)
        chords = np.linalg.norm(np.diff(locations, axis=0), axis=1)
        distances = np.concatenate(([0.0], np.cumsum(chords)))

        self._times = times
        self._distances = distances
        self._samples = tuple(
            self._create_sample(distance, t) for t, distance in zip(times, distances)
        )

    @property
    def samples(self) -> tuple[CurveSample, ...]:
        """Cached samples, monotonic in time and distance."""
        return self._samples

    @property
    def length(self) -> float:
        """Approximated arc length: the distance of the last cached sample."""
        return float(self._distances[-1])

    def sample_at_time(self, t: float) -> CurveSample:
        """
        Exact sample at time `t`, clamped to [0, 1].

        The distance field is interpolated from the cache.
        """
        t = min(max(float(t), 0.0), 1.0)
        distance = float(np.interp(t, self._times, self._distances))
        return self._create_sample(distance, t)

    def sample_at_distance(self, d: float) -> CurveSample:
        """
        Sample at distance `d` from the start, clamped to [0, length]. NaN
        reads as the start.

        The two cached samples straddling `d` are interpolated proportionally
        to distance. The result is exact on cached samples and approaches
        constant-speed parametrization as the cache gets denser.
        """
        d = 0.0 if np.isnan(d) else float(np.clip(d, 0.0, self.length))

        index = int(np.searchsorted(self._distances, d, side="left"))
        if index == 0:
            return self._samples[0]
        previous = self._samples[index - 1]
        following = self._samples[index]

        span = following.distance_in_curve - previous.distance_in_curve
        if span <= 0.0:
            return following
        return CurveSample.lerp(previous, following, (d - previous.distance_in_curve) / span)

    def get_projection_sample(self, point: npt.ArrayLike) -> CurveSample:
        """
        Sample of the curve closest to `point`.

        The nearest cached sample is found first, then the point is projected
        on the chords to its neighbours to refine the result.
        """
        point = np.asarray(point, dtype=np.float64)
        locations = np.array([sample.location for sample in self._samples])
        nearest = int(np.argmin(np.linalg.norm(locations - point, axis=1)))

        best = self._samples[nearest]
        best_distance = float(np.linalg.norm(best.location - point))
        for neighbour in (nearest - 1, nearest + 1):
            if neighbour < 0 or neighbour >= len(self._samples):
                continue
            a, b = sorted((nearest, neighbour))
            start, end = self._samples[a], self._samples[b]
            chord = end.location - start.location
            chord_sq = float(np.dot(chord, chord))
            if chord_sq == 0.0:
                continue
            rate = min(max(float(np.dot(point - start.location, chord)) / chord_sq, 0.0), 1.0)
            candidate = CurveSample.lerp(start, end, rate)
            candidate_distance = float(np.linalg.norm(candidate.location - point))
            if candidate_distance < best_distance:
                best, best_distance = candidate, candidate_distance
        return best
