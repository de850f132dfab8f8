"""Smooth cubic Bezier splines through a sequence of knots."""

from __future__ import annotations

import logging
import math
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from bezspline.bezier import CubicCurve
from bezspline.consts import POLYGONIZE_STEPS
from bezspline.control_points import ControlPointSolver
from bezspline.geom import GeomMath, Point

logger = logging.getLogger(__name__)

KnotsLike = Union[Sequence[Sequence[float]], NDArray[np.float64]]


###############################################################################
# Spline
###############################################################################
class Spline:
    """
    A series of cubic Bezier curves connected end-to-end, passing through all knots with
    a continuous first derivative at each inner knot.

    The global parameter t runs from 0 to end_t (= number of curves, inclusive). The integer
    part selects the curve, the fractional part is the curve parameter, so point(k) is knot k.
    When _closed_ is set, an extra curve connects the last knot back to the first.
    """

    def __init__(self, knots: KnotsLike, closed: bool = False):
        """Initialize the spline and build its curves.

        Args:
            knots: sequence of (x, y) points or array of shape (n, 2), n >= 2
            closed: connect the end of the spline back to its start point
        """
        arr = np.array(knots, dtype=np.float64)
        if arr.ndim != 2 or arr.shape[1] != 2:
            raise ValueError(f"knots must have shape (n, 2), got {arr.shape}")
        if arr.shape[0] < 2:
            raise ValueError(f"A spline needs at least 2 knots, got {arr.shape[0]}")
        arr.flags.writeable = False

        self._knots: NDArray[np.float64] = arr
        self._closed: bool = bool(closed)
        self._curves: Tuple[CubicCurve, ...] = self._build_curves(arr, self._closed)

        end_lengths = np.array([c.end_length for c in self._curves], dtype=np.float64)
        start_lengths = np.array([c.start_length for c in self._curves], dtype=np.float64)
        end_lengths.flags.writeable = False
        start_lengths.flags.writeable = False
        self._end_lengths: NDArray[np.float64] = end_lengths
        self._start_lengths: NDArray[np.float64] = start_lengths
        self._length: float = self._curves[-1].end_length

        logger.debug(
            "Spline built: %d knots, %d curves, closed=%s, length=%g",
            len(arr),
            len(self._curves),
            self._closed,
            self._length,
        )

    @staticmethod
    def _build_curves(knots: NDArray[np.float64], closed: bool) -> Tuple[CubicCurve, ...]:
        """Solve both axes and create the curves in one forward pass, accumulating the length."""
        xs, cx1, cx2 = ControlPointSolver.solve(knots[:, 0], closed)
        ys, cy1, cy2 = ControlPointSolver.solve(knots[:, 1], closed)

        count = len(cx1)
        curves: List[CubicCurve] = []
        start_length = 0.0
        for i in range(count):
            c = CubicCurve(
                (xs[i], ys[i]),
                (cx1[i], cy1[i]),
                (cx2[i], cy2[i]),
                (xs[i + 1], ys[i + 1]),
                index=i,
                start_length=start_length,
                segment_offset=i / (count - 1) if count > 1 else 0.0,
            )
            start_length = c.end_length
            curves.append(c)
        return tuple(curves)

    ###########################################################################
    # Properties
    ###########################################################################

    @property
    def knots(self) -> NDArray[np.float64]:
        """Read-only (n, 2) array of the knots the spline passes through."""
        return self._knots

    @property
    def closed(self) -> bool:
        """bool: True if the last knot connects back to the first."""
        return self._closed

    @property
    def curves(self) -> Tuple[CubicCurve, ...]:
        """The curves making up the spline, in order."""
        return self._curves

    @property
    def segment_count(self) -> int:
        """int: number of curves."""
        return len(self._curves)

    @property
    def end_t(self) -> float:
        """float: the value of t at the end of the spline (reachable)."""
        return float(len(self._curves))

    @property
    def length(self) -> float:
        """float: total length of the spline."""
        return self._length

    @property
    def start_lengths(self) -> NDArray[np.float64]:
        """Spline length up to the start of each curve (read-only array)."""
        return self._start_lengths

    @property
    def end_lengths(self) -> NDArray[np.float64]:
        """Spline length up to the end of each curve (read-only array, non-decreasing)."""
        return self._end_lengths

    def __len__(self) -> int:
        return len(self._curves)

    ###########################################################################
    # Global parameter
    ###########################################################################

    def _index_offset(self, t: float) -> Tuple[int, float]:
        """
        Map global t to (curve index, curve parameter).
        t is clamped to [0, end_t]; t == end_t maps to the end of the last curve.
        """
        t = min(max(float(t), 0.0), self.end_t)
        i = min(int(math.floor(t)), len(self._curves) - 1)
        return i, t - i

    def x(self, t: float = 0.0) -> float:
        """x coordinate at t in the range [0, end_t]."""
        i, o = self._index_offset(t)
        return self._curves[i].x(o)

    def y(self, t: float = 0.0) -> float:
        """y coordinate at t in the range [0, end_t]."""
        i, o = self._index_offset(t)
        return self._curves[i].y(o)

    def point(self, t: float = 0.0) -> Point:
        """Point at t in the range [0, end_t]."""
        i, o = self._index_offset(t)
        return self._curves[i].point(o)

    def first_derivative(self, t: float = 0.0) -> Point:
        """Component-wise first derivative (with respect to the curve parameter) at t."""
        i, o = self._index_offset(t)
        return self._curves[i].first_derivative(o)

    def second_derivative(self, t: float = 0.0) -> Point:
        """Component-wise second derivative (with respect to the curve parameter) at t."""
        i, o = self._index_offset(t)
        return self._curves[i].second_derivative(o)

    def curvature(self, t: float = 0.0) -> float:
        """
        Curvature at t, the inverse of the instantaneous radius.
        Positive when the spline turns left, +/-inf or nan where the derivative vanishes.
        """
        i, o = self._index_offset(t)
        return self._curves[i].curvature(o)

    def tangent(self, t: float = 0.0) -> Point:
        """Unit tangent at t in the direction of increasing t."""
        i, o = self._index_offset(t)
        return self._curves[i].tangent(o)

    def normal(self, t: float = 0.0) -> Point:
        """Unit normal at t, pointing to the left of the tangent direction."""
        i, o = self._index_offset(t)
        return self._curves[i].normal(o)

    def point_transform(self, t: float = 0.0) -> str:
        """
        Transform string that translates to the point at t and rotates along the tangent.
        This is analogous to a particle travelling along the spline at position t.
        """
        i, o = self._index_offset(t)
        return self._curves[i].point_transform(o)

    ###########################################################################
    # Arc length
    ###########################################################################

    def length_at(self, t: Optional[float] = None) -> float:
        """Length of the spline from its start up to t (defaults to end_t)."""
        if t is None:
            t = self.end_t
        i, o = self._index_offset(t)
        c = self._curves[i]
        return c.start_length + c.length_at(o)

    def _curve_index_at_length(self, z: float) -> int:
        """
        Index of the curve containing length z (binary search over end_lengths).
        A z equal to a cumulative length belongs to the earlier curve.
        """
        i = int(np.searchsorted(self._end_lengths, z, side="left"))
        return min(i, len(self._curves) - 1)

    def point_at_length(self, z: float = 0.0) -> Point:
        """
        Point at length z along the spline, z clamped to [0, length].

        This is much more expensive than point(t). If used frequently, consider
        normalize()-ing the spline and using point(t) instead.
        """
        z = min(max(float(z), 0.0), self._length)
        c = self._curves[self._curve_index_at_length(z)]
        return c.point_at_length(z - c.start_length)

    ###########################################################################
    # Derived splines
    ###########################################################################

    def normalize(
        self, curve_length: Optional[float] = None, curve_count: Optional[int] = None
    ) -> Spline:
        """
        Compute a new spline with the same shape whose knots are evenly spaced by length.
        t of the result is approximately proportional to the length along the spline,
        so point(t) can replace the expensive point_at_length(z).

        Example:
            s1 = Spline([[0, 0], [1, 0], [30, 0]])  # non-uniform linear spline
            s1.x(0), s1.x(1), s1.x(2)               # 0, 1, 30
            s2 = s1.normalize(3)                    # t increases by 1 every 3 units
            s2.x(0), s2.x(1), s2.x(2)               # 0, 3, 6

        Args:
            curve_length (Optional[float]): length of each curve. Defaults to length / curve_count
                if a curve_count is given, else 1.
            curve_count (Optional[int]): number of curves of the result, ignored when a
                curve_length is given. Defaults to ceil(length / curve_length).
                A closed result has at least 2 curves.

        Returns:
            Spline: the resampled spline, closed like this one
        """
        if curve_count is not None and curve_count < 1:
            raise ValueError(f"curve_count must be at least 1, got {curve_count}")
        if curve_length is not None:
            if curve_length <= 0:
                raise ValueError(f"curve_length must be positive, got {curve_length}")
            curve_count = max(1, math.ceil(self._length / curve_length))
        elif curve_count is not None:
            curve_length = self._length / curve_count if self._length > 0 else 1.0
        else:
            curve_length = 1.0
            curve_count = max(1, math.ceil(self._length))

        if self._closed:
            # a closed spline needs 2 knots, spread them over the whole loop
            if curve_count < 2:
                curve_count = 2
                curve_length = self._length / 2
            points = [self.point_at_length(d * curve_length) for d in range(curve_count)]
        else:
            points = [self.point_at_length(d * curve_length) for d in range(curve_count + 1)]
            # the last knot is always the end point of this spline
            points[-1] = self.point(self.end_t)
        return Spline(points, self._closed)

    def transform_affine(self, affine_trafo: Sequence[Union[int, float]]) -> Spline:
        """
        Transform the spline using the given affine transformation [a00, a01, a10, a11, b0, b1].
        The control point solver is linear, so transforming the knots gives the same curves
        as transforming all control points.

        Args:
            affine_trafo (List[float]): Affine transformation [a00, a01, a10, a11, b0, b1]

        Returns:
            Spline: The transformed spline
        """
        knots = [GeomMath.transform_point(affine_trafo, knot) for knot in self._knots]
        return Spline(knots, self._closed)

    def polygonize(self, steps: int = POLYGONIZE_STEPS) -> NDArray[np.float64]:
        """
        Polygonize all curves with _steps_ line segments each.

        Returns:
            NDArray[np.float64] of shape (segment_count * steps + 1, 2); shared end points
            between consecutive curves appear once
        """
        if steps < 1:
            raise ValueError(f"steps must be at least 1, got {steps}")
        result = np.empty((len(self._curves) * steps + 1, 2), dtype=np.float64)
        for i, c in enumerate(self._curves):
            result[i * steps : (i + 1) * steps + 1] = c.polygonize(steps)
        return result

    ###########################################################################
    # Serialization
    ###########################################################################

    def stroke(self) -> str:
        """SVG path string that draws the spline."""
        return " ".join(c.stroke() for c in self._curves)

    def fill(self, width: float) -> str:
        """SVG path string of filled quadrilaterals of the given _width_ along the spline."""
        return " ".join(c.fill(width) for c in self._curves)

    def __str__(self) -> str:
        return " ".join(str(c) for c in self._curves)

    def __repr__(self) -> str:
        return f"Spline(knots={self._knots.tolist()}, closed={self._closed})"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Spline:
        """Create a Spline instance from a dictionary with keys "knots" and "closed"."""
        if "knots" not in data:
            raise ValueError("Spline data needs a 'knots' entry")
        return cls(knots=data["knots"], closed=bool(data.get("closed", False)))

    def to_dict(self) -> Dict[str, Any]:
        """Convert the Spline instance to a dictionary."""
        return {
            "knots": self._knots.tolist(),
            "closed": self._closed,
        }


def spline(knots: KnotsLike, closed: bool = False) -> Spline:
    """
    Convenience function for the Spline constructor.

    Args:
        knots: points the spline goes through smoothly
        closed: connect the end of the spline back to its start point

    Returns:
        Spline
    """
    return Spline(knots, closed)
