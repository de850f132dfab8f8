"""Control point computation for smooth cubic Bezier splines through given knots."""

from __future__ import annotations

from typing import Sequence, Tuple, Union

import numpy as np
from numpy.typing import NDArray

from bezspline.consts import CLOSED_SPLINE_PADDING

AxisValues = Union[Sequence[float], NDArray[np.float64]]


###############################################################################
# ControlPointSolver
###############################################################################
class ControlPointSolver:
    """
    Derive the inner control points of a cubic Bezier spline, one axis at a time.

    For knots K[0..n] (n segments) the first control points p1 solve the tridiagonal system
        2 p1[0]   +   p1[1]                 = K[0] + 2 K[1]
          p1[i-1] + 4 p1[i] +   p1[i+1]     = 4 K[i] + 2 K[i+1]      (0 < i < n-1)
        2 p1[n-2] + 7 p1[n-1]               = 8 K[n-1] + K[n]
    and the second control points follow from C1 continuity at the inner knots:
        p2[i]   = 2 K[i+1] - p1[i+1]      (i < n-1)
        p2[n-1] = (K[n] + p1[n-1]) / 2
    """

    @staticmethod
    def solve_open(knots: AxisValues) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
        """
        Compute the control point coordinates of an open spline with the Thomas algorithm, O(n).

        Args:
            knots: knot coordinates of one axis, at least 2 values

        Returns:
            Tuple[NDArray, NDArray]: (p1, p2), each with one value per segment
        """
        k = np.asarray(knots, dtype=np.float64)
        if k.ndim != 1 or len(k) < 2:
            raise ValueError(f"Need a flat sequence of at least 2 knot values, got shape {k.shape}")
        n = len(k) - 1

        a = np.ones(n, dtype=np.float64)
        b = np.full(n, 4.0, dtype=np.float64)
        c = np.ones(n, dtype=np.float64)
        r = np.empty(n, dtype=np.float64)

        # left most segment
        a[0], b[0], c[0] = 0.0, 2.0, 1.0
        r[0] = k[0] + 2 * k[1]

        # internal segments
        r[1 : n - 1] = 4 * k[1 : n - 1] + 2 * k[2:n]

        # right most segment (overrides the first row for a single segment)
        a[n - 1], b[n - 1], c[n - 1] = 2.0, 7.0, 0.0
        r[n - 1] = 8 * k[n - 1] + k[n]

        # forward elimination
        for i in range(1, n):
            m = a[i] / b[i - 1]
            b[i] = b[i] - m * c[i - 1]
            r[i] = r[i] - m * r[i - 1]

        # back substitution
        p1 = np.empty(n, dtype=np.float64)
        p1[n - 1] = r[n - 1] / b[n - 1]
        for i in range(n - 2, -1, -1):
            p1[i] = (r[i] - c[i] * p1[i + 1]) / b[i]

        p2 = np.empty(n, dtype=np.float64)
        p2[: n - 1] = 2 * k[1:n] - p1[1:n]
        p2[n - 1] = 0.5 * (k[n] + p1[n - 1])

        return p1, p2

    @staticmethod
    def solve_closed(
        knots: AxisValues,
    ) -> Tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
        """
        Compute the control point coordinates of a closed spline (last knot connects to the first).

        The open system is solved on the knots padded with CLOSED_SPLINE_PADDING wrapped
        values on each side, then the segments starting at the original knots are kept.
        This approximates periodic continuity; the influence of the open end conditions
        decays quickly over the padding.

        Args:
            knots: knot coordinates of one axis, at least 2 values

        Returns:
            Tuple[NDArray, NDArray, NDArray]: (knots, p1, p2) where knots has the first value
            appended again, p1 and p2 have one value per segment (= number of input knots)
        """
        k = np.asarray(knots, dtype=np.float64)
        if k.ndim != 1 or len(k) < 2:
            raise ValueError(f"Need a flat sequence of at least 2 knot values, got shape {k.shape}")
        m = len(k)
        pad = CLOSED_SPLINE_PADDING

        padded = k[np.arange(-pad, m + pad) % m]
        p1, p2 = ControlPointSolver.solve_open(padded)

        return padded[pad : pad + m + 1], p1[pad : pad + m], p2[pad : pad + m]

    @staticmethod
    def solve(
        knots: AxisValues, closed: bool = False
    ) -> Tuple[NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]]:
        """
        Compute the control point coordinates of an open or closed spline.

        Returns:
            Tuple[NDArray, NDArray, NDArray]: (knots, p1, p2) with len(knots) == len(p1) + 1
        """
        if closed:
            return ControlPointSolver.solve_closed(knots)
        k = np.asarray(knots, dtype=np.float64)
        p1, p2 = ControlPointSolver.solve_open(k)
        return k, p1, p2
