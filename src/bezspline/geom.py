"""Handling 2D points and vectors"""

from __future__ import annotations

import math
from typing import NamedTuple, Sequence, Tuple, Union


###############################################################################
# Point
###############################################################################
class Point(NamedTuple):
    """Immutable 2D coordinate pair, also used for vectors (derivatives, tangents, normals)."""

    x: float
    y: float

    @classmethod
    def from_sequence(cls, values: Sequence[Union[int, float]]) -> Point:
        """Create a Point from any sequence holding exactly two numbers.

        Args:
            values: sequence (tuple, list, numpy array) of length 2

        Returns:
            Point: the point with float coordinates
        """
        if len(values) != 2:
            raise ValueError(f"A point needs exactly 2 coordinates, got {len(values)}")
        return cls(float(values[0]), float(values[1]))


###############################################################################
# GeomMath
###############################################################################
class GeomMath:
    """Class to provide various static methods related to geometry handling."""

    @staticmethod
    def transform_point(
        affine_trafo: Sequence[Union[int, float]], point: Sequence[Union[int, float]]
    ) -> Tuple[float, float]:
        """
        Perform an affine transformation on the given 2D point.

        The given _affine_trafo_ is a list of 6 floats, performing an affine transformation.
        The transformation is defined as:
            | x' | = | a00 a01 b0 |   | x |
            | y' | = | a10 a11 b1 | * | y |
            | 1  | = |  0   0  1  |   | 1 |
        with
            affine_trafo = [a00, a01, a10, a11, b0, b1]

        Args:
            affine_trafo (Tuple/List[float]): Affine transformation - [a00, a01, a10, a11, b0, b1]
            point (Tuple/List[float]): 2D point - (x, y)

        Returns:
            Tuple[float, float]: the transformed point
        """
        x_new = float(affine_trafo[0] * point[0] + affine_trafo[1] * point[1] + affine_trafo[4])
        y_new = float(affine_trafo[2] * point[0] + affine_trafo[3] * point[1] + affine_trafo[5])
        return (x_new, y_new)

    @staticmethod
    def norm(vector: Sequence[float]) -> float:
        """Euclidean length of a 2D vector."""
        return math.sqrt(vector[0] * vector[0] + vector[1] * vector[1])

    @staticmethod
    def left_perpendicular(vector: Sequence[float]) -> Point:
        """Rotate a 2D vector by +90 degrees, i.e. (x, y) -> (-y, x)."""
        return Point(-vector[1], vector[0])
