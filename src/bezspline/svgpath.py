"""Rendering curves as SVG path strings and SVG/CSS transform strings"""

from __future__ import annotations

import math
from typing import Sequence


class SvgPathFormat:
    """
    This class provides a collection of static methods that turn curve geometry into strings.
    Numbers are written in their natural decimal form (no fixed precision), points as "x,y".
    Formats:
        cubic:            M x0,y0 C x1,y1 x2,y2 x3,y3   (no blank after a command letter)
        ribbon:           M ... L ... L ... L ... Z     (no blanks at all)
        point_transform:  translate(x,y) rotate(degrees)
    """

    @staticmethod
    def number(value: float) -> str:
        """
        Write _value_ in its shortest natural decimal form.
        Integral values lose their fractional part (1.0 -> "1", -0.0 -> "0"),
        all other finite values use the shortest representation that round-trips.

        Args:
            value (float): the number to write

        Returns:
            str: the decimal string
        """
        value = float(value)
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)

    @staticmethod
    def coordinates(x: float, y: float) -> str:
        """Write a point as "x,y"."""
        return f"{SvgPathFormat.number(x)},{SvgPathFormat.number(y)}"

    @staticmethod
    def cubic(
        p0: Sequence[float], p1: Sequence[float], p2: Sequence[float], p3: Sequence[float]
    ) -> str:
        """
        SVG path of a single cubic Bezier curve: a MoveTo to _p0_ followed by a CubicBezierTo.

        Returns:
            str: e.g. "M0,-1 C0.5,-0.7 1.02,-0.42 1,0"
        """
        coords = SvgPathFormat.coordinates
        return (
            f"M{coords(p0[0], p0[1])} "
            f"C{coords(p1[0], p1[1])} {coords(p2[0], p2[1])} {coords(p3[0], p3[1])}"
        )

    @staticmethod
    def ribbon(
        # pylint: disable=too-many-arguments,too-many-positional-arguments
        p0: Sequence[float],
        n0: Sequence[float],
        p3: Sequence[float],
        n3: Sequence[float],
        width: float,
    ) -> str:
        """
        SVG path of a closed quadrilateral around the chord _p0_ -> _p3_.
        Each end point is offset by +/- width/2 along its own normal (_n0_ resp. _n3_).

        Args:
            p0: start point
            n0: unit normal at the start point
            p3: end point
            n3: unit normal at the end point
            width (float): full width of the ribbon

        Returns:
            str: "M...L...L...L...Z"
        """
        w2 = width / 2
        coords = SvgPathFormat.coordinates
        return (
            f"M{coords(p0[0] - n0[0] * w2, p0[1] - n0[1] * w2)}"
            f"L{coords(p0[0] + n0[0] * w2, p0[1] + n0[1] * w2)}"
            f"L{coords(p3[0] + n3[0] * w2, p3[1] + n3[1] * w2)}"
            f"L{coords(p3[0] - n3[0] * w2, p3[1] - n3[1] * w2)}Z"
        )

    @staticmethod
    def point_transform(point: Sequence[float], tangent: Sequence[float]) -> str:
        """
        SVG/CSS transform that moves the origin to _point_ and rotates the x-axis
        along _tangent_ (angle in degrees).
        """
        angle = math.degrees(math.atan2(tangent[1], tangent[0]))
        return (
            f"translate({SvgPathFormat.coordinates(point[0], point[1])}) "
            f"rotate({SvgPathFormat.number(angle)})"
        )

    @staticmethod
    def control_points(points: Sequence[Sequence[float]]) -> str:
        """Write a list of points as "[[x0, y0], [x1, y1], ...]"."""
        number = SvgPathFormat.number
        return "[" + ", ".join(f"[{number(p[0])}, {number(p[1])}]" for p in points) + "]"
