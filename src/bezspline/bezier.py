"""Cubic Bezier curve evaluation, arc length and differential geometry."""

from __future__ import annotations

import logging
from typing import Optional, Sequence, Union

import numpy as np
from numpy.typing import NDArray

from bezspline.consts import (
    FIND_T_BISECTION_ITERATIONS,
    FIND_T_MAX_ITERATIONS,
    FIND_T_TOLERANCE,
    GAUSS_LEGENDRE_ORDER,
)
from bezspline.geom import GeomMath, Point
from bezspline.svgpath import SvgPathFormat

logger = logging.getLogger(__name__)

# Pre-computed Gauss-Legendre abscissae and weights on [-1, 1] (symmetric pairs)
_GAUSS_LEGENDRE_NODES: NDArray[np.float64]
_GAUSS_LEGENDRE_WEIGHTS: NDArray[np.float64]
_GAUSS_LEGENDRE_NODES, _GAUSS_LEGENDRE_WEIGHTS = np.polynomial.legendre.leggauss(
    GAUSS_LEGENDRE_ORDER
)

PointLike = Union[Sequence[float], NDArray[np.float64]]


###############################################################################
# CubicCurve
###############################################################################
class CubicCurve:
    """
    A single cubic Bezier segment defined by 4 control points.

    p0 and p3 are the end points (knots), p1 and p2 the handles.
    The curve parameter t runs from 0 (at p0) to 1 (at p3). Evaluation methods accept any t
    and extrapolate the polynomial, only the length related methods clamp t to [0, 1].

    The spline annotations (index, start_length, end_length, segment_offset) are
    fixed at construction. A standalone curve uses the defaults.
    """

    __slots__ = (
        "_p0",
        "_p1",
        "_p2",
        "_p3",
        "_xs",
        "_ys",
        "_length",
        "_index",
        "_start_length",
        "_segment_offset",
    )

    def __init__(
        # pylint: disable=too-many-arguments
        self,
        p0: PointLike,
        p1: PointLike,
        p2: PointLike,
        p3: PointLike,
        *,
        index: int = 0,
        start_length: float = 0.0,
        segment_offset: float = 0.0,
    ):
        """Initialize the curve and compute its length.

        Args:
            p0: start point
            p1: first control point
            p2: second control point
            p3: end point
            index: position of the curve inside its spline
            start_length: spline length up to p0
            segment_offset: fractional position of the curve inside its spline (index based)
        """
        self._p0 = Point.from_sequence(p0)
        self._p1 = Point.from_sequence(p1)
        self._p2 = Point.from_sequence(p2)
        self._p3 = Point.from_sequence(p3)
        self._xs: NDArray[np.float64] = np.array(
            [self._p0.x, self._p1.x, self._p2.x, self._p3.x], dtype=np.float64
        )
        self._ys: NDArray[np.float64] = np.array(
            [self._p0.y, self._p1.y, self._p2.y, self._p3.y], dtype=np.float64
        )
        self._index = int(index)
        self._start_length = float(start_length)
        self._segment_offset = float(segment_offset)
        self._length = self.length_at(1.0)

    ###########################################################################
    # Properties
    ###########################################################################

    @property
    def p0(self) -> Point:
        """Point: start point."""
        return self._p0

    @property
    def p1(self) -> Point:
        """Point: first control point."""
        return self._p1

    @property
    def p2(self) -> Point:
        """Point: second control point."""
        return self._p2

    @property
    def p3(self) -> Point:
        """Point: end point."""
        return self._p3

    @property
    def control_points(self) -> NDArray[np.float64]:
        """Control points as a new (4, 2) array."""
        return np.column_stack((self._xs, self._ys))

    @property
    def length(self) -> float:
        """float: arc length of the whole curve, equal to length_at(1)."""
        return self._length

    @property
    def index(self) -> int:
        """int: position of the curve inside its spline."""
        return self._index

    @property
    def start_length(self) -> float:
        """float: spline length up to the start of this curve."""
        return self._start_length

    @property
    def end_length(self) -> float:
        """float: spline length up to the end of this curve."""
        return self._start_length + self._length

    @property
    def segment_offset(self) -> float:
        """float: index / (segment_count - 1), not length based."""
        return self._segment_offset

    ###########################################################################
    # Evaluation
    ###########################################################################

    def x(self, t: float = 0.0) -> float:
        """x coordinate at parameter t (not clamped)."""
        omt = 1 - t
        return (
            omt**3 * self._p0.x
            + 3 * omt**2 * t * self._p1.x
            + 3 * omt * t**2 * self._p2.x
            + t**3 * self._p3.x
        )

    def y(self, t: float = 0.0) -> float:
        """y coordinate at parameter t (not clamped)."""
        omt = 1 - t
        return (
            omt**3 * self._p0.y
            + 3 * omt**2 * t * self._p1.y
            + 3 * omt * t**2 * self._p2.y
            + t**3 * self._p3.y
        )

    def point(self, t: float = 0.0) -> Point:
        """Point at parameter t (not clamped)."""
        return Point(self.x(t), self.y(t))

    def first_derivative(self, t: float = 0.0) -> Point:
        """Component-wise first derivative with respect to t."""
        omt = 1 - t
        p0, p1, p2, p3 = self._p0, self._p1, self._p2, self._p3
        return Point(
            3 * omt**2 * (p1.x - p0.x) + 6 * omt * t * (p2.x - p1.x) + 3 * t**2 * (p3.x - p2.x),
            3 * omt**2 * (p1.y - p0.y) + 6 * omt * t * (p2.y - p1.y) + 3 * t**2 * (p3.y - p2.y),
        )

    def second_derivative(self, t: float = 0.0) -> Point:
        """Component-wise second derivative with respect to t."""
        omt = 1 - t
        p0, p1, p2, p3 = self._p0, self._p1, self._p2, self._p3
        return Point(
            6 * omt * (p2.x - 2 * p1.x + p0.x) + 6 * t * (p3.x - 2 * p2.x + p1.x),
            6 * omt * (p2.y - 2 * p1.y + p0.y) + 6 * t * (p3.y - 2 * p2.y + p1.y),
        )

    def curvature(self, t: float = 0.0) -> float:
        """
        Signed curvature (1/R of the osculating circle) at parameter t.

        Where the first derivative vanishes (cusp, coincident control points) the result
        is +/-inf or nan.
        """
        d1 = self.first_derivative(t)
        d2 = self.second_derivative(t)
        cross = np.float64(d1.x * d2.y - d1.y * d2.x)
        speed2 = np.float64(d1.x * d1.x + d1.y * d1.y)
        with np.errstate(divide="ignore", invalid="ignore"):
            return float(cross / speed2**1.5)

    def tangent(self, t: float = 0.0) -> Point:
        """Unit tangent in direction of increasing t, zero vector where the derivative vanishes."""
        d1 = self.first_derivative(t)
        d = GeomMath.norm(d1) or 1.0
        return Point(d1.x / d, d1.y / d)

    def normal(self, t: float = 0.0) -> Point:
        """Unit normal pointing to the left of the tangent direction."""
        return GeomMath.left_perpendicular(self.tangent(t))

    ###########################################################################
    # Arc length
    ###########################################################################

    @staticmethod
    def _base3(t: NDArray[np.float64], ps: NDArray[np.float64]) -> NDArray[np.float64]:
        """Hodograph of one axis: derivative of the Bernstein polynomial with coefficients _ps_."""
        t1 = -3 * ps[0] + 9 * ps[1] - 9 * ps[2] + 3 * ps[3]
        t2 = t * t1 + 6 * ps[0] - 12 * ps[1] + 6 * ps[2]
        return t * t2 - 3 * ps[0] + 3 * ps[1]

    def length_at(self, t: float = 1.0) -> float:
        """
        Arc length from the start of the curve up to parameter t.
        t is clamped to [0, 1]. The integral of the hodograph norm over [0, t] is evaluated
        with a fixed Gauss-Legendre rule, which is exact for straight segments with uniform
        speed and accurate enough for smooth geometry.

        Args:
            t (float): curve parameter. Defaults to 1.

        Returns:
            float: length along the curve
        """
        t = min(max(float(t), 0.0), 1.0)
        t2 = t / 2
        ct = t2 * _GAUSS_LEGENDRE_NODES + t2
        speed = np.hypot(self._base3(ct, self._xs), self._base3(ct, self._ys))
        return float(t2 * np.dot(_GAUSS_LEGENDRE_WEIGHTS, speed))

    def _find_t(self, target: float, guess: Optional[float] = None) -> float:
        """
        Parameter t at which the arc length equals _target_.

        A damped fixed-point iteration moves the guess by half of the relative length error
        until the error drops below FIND_T_TOLERANCE. If that does not happen within
        FIND_T_MAX_ITERATIONS steps a bisection on [0, 1] takes over, which is bounded by
        FIND_T_BISECTION_ITERATIONS steps; the best estimate is returned either way.

        Args:
            target (float): length along the curve, clamped to [0, length]
            guess (Optional[float]): start value, defaults to target / length

        Returns:
            float: the curve parameter
        """
        length = self._length
        if length <= 0.0:
            return 0.0
        target = min(max(float(target), 0.0), length)
        if guess is None:
            guess = target / length

        for _ in range(FIND_T_MAX_ITERATIONS):
            error = (self.length_at(guess) - target) / length
            if abs(error) < FIND_T_TOLERANCE:
                return guess
            guess = min(max(guess - error / 2, 0.0), 1.0)

        logger.debug(
            "Damped search for length %g did not converge after %d steps, bisecting",
            target,
            FIND_T_MAX_ITERATIONS,
        )
        lower, upper = 0.0, 1.0
        for _ in range(FIND_T_BISECTION_ITERATIONS):
            guess = (lower + upper) / 2
            error = (self.length_at(guess) - target) / length
            if abs(error) < FIND_T_TOLERANCE:
                break
            if error < 0:
                lower = guess
            else:
                upper = guess
        return guess

    def point_at_length(self, z: float = 0.0) -> Point:
        """Point at arc length _z_ from the start, z clamped to [0, length]."""
        return self.point(self._find_t(z))

    ###########################################################################
    # Polygonization
    ###########################################################################

    def polygonize(self, steps: int) -> NDArray[np.float64]:
        """
        Evaluate the curve at steps+1 evenly spaced parameters (t = 0, 1/steps, ..., 1).
        Uses vectorized NumPy evaluation of the Bernstein basis.

        Args:
            steps: Number of line segments to divide the curve into

        Returns:
            NDArray[np.float64] of shape (steps+1, 2) containing the points (x, y)
        """
        if steps < 1:
            raise ValueError(f"steps must be at least 1, got {steps}")

        t = np.linspace(0, 1, steps + 1, dtype=np.float64)

        # Cubic Bezier basis functions
        omt = 1 - t
        omt2 = omt**2
        omt3 = omt2 * omt
        t2 = t**2
        t3 = t2 * t
        basis = np.column_stack((omt3, 3 * omt2 * t, 3 * omt * t2, t3))

        result = np.empty((steps + 1, 2), dtype=np.float64)
        result[:, 0] = basis @ self._xs
        result[:, 1] = basis @ self._ys
        # End points are exact
        result[0] = self._p0
        result[-1] = self._p3
        return result

    ###########################################################################
    # Serialization
    ###########################################################################

    def stroke(self) -> str:
        """SVG path string drawing this curve: "M x0,y0 C x1,y1 x2,y2 x3,y3"."""
        return SvgPathFormat.cubic(self._p0, self._p1, self._p2, self._p3)

    def fill(self, width: float) -> str:
        """SVG path string of a closed quadrilateral of the given _width_ along the chord p0 -> p3."""
        return SvgPathFormat.ribbon(self._p0, self.normal(0.0), self._p3, self.normal(1.0), width)

    def point_transform(self, t: float = 0.0) -> str:
        """
        Transform string moving to the point at parameter t, rotated along the tangent.
        Analogous to a particle travelling along the curve.
        """
        return SvgPathFormat.point_transform(self.point(t), self.tangent(t))

    def __str__(self) -> str:
        return SvgPathFormat.control_points((self._p0, self._p1, self._p2, self._p3))

    def __repr__(self) -> str:
        return (
            f"CubicCurve({tuple(self._p0)}, {tuple(self._p1)}, {tuple(self._p2)}, {tuple(self._p3)}, "
            f"index={self._index}, start_length={self._start_length}, "
            f"segment_offset={self._segment_offset})"
        )


def curve(points: Sequence[PointLike]) -> CubicCurve:
    """Convenience factory: CubicCurve from a sequence of exactly 4 points."""
    if len(points) != 4:
        raise ValueError(f"A cubic curve needs exactly 4 points, got {len(points)}")
    p0, p1, p2, p3 = points
    return CubicCurve(p0, p1, p2, p3)

