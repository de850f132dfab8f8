"""Test module for Spline in bezspline.spline

The tests are run using pytest.
These tests ensure that spline assembly, global parametrization, length lookup,
resampling and serialization remain working correctly after changes and refactoring.
"""

import math
import re

import numpy as np
import pytest

from bezspline.bezier import CubicCurve
from bezspline.spline import Spline, spline

LINE = [[0, 0], [1, 0], [2, 0], [3, 0]]
ZIGZAG = [[0, 0], [1, 1], [2, 0], [3, 1]]
DIAMOND = [[0, -1], [1, 0], [0, 1], [-1, 0]]
SQUARE = [[0, 0], [1, 0], [1, 1], [0, 1]]

# Control points of the diamond are multiples of 1/45 (see test_control_points), as rounded
# by the Thomas algorithm in double precision
DIAMOND_STROKE = (
    "M0,-1 C0.5111111111111111,-0.7111111111111111 1.0222222222222221,-0.4222222222222222 1,0 "
    "M1,0 C0.9777777777777777,0.4222222222222222 0.4222222222222222,0.9777777777777779 0,1 "
    "M0,1 C-0.4222222222222222,1.0222222222222221 -0.7111111111111111,0.5111111111111111 -1,0"
)

_NUMBER = re.compile(r"-?\d+(?:\.\d+)?(?:e[-+]?\d+)?")


def split_path(path_string):
    """Split a path string into its number-free skeleton and its numbers."""
    numbers = [float(n) for n in _NUMBER.findall(path_string)]
    return _NUMBER.sub("#", path_string), numbers


###############################################################################
# Construction
###############################################################################


class TestConstruction:
    """Test building splines from knots."""

    def test_create_spline(self):
        """Test the factory function."""
        s = spline(LINE)

        assert isinstance(s, Spline)
        assert all(isinstance(c, CubicCurve) for c in s.curves)
        assert not s.closed

    def test_end_t_matches_number_of_curves(self):
        """Test that end_t is one less than the number of knots."""
        s = spline([[0, 0], [1, 0], [2, 0]])

        assert s.segment_count == 2
        assert len(s) == 2
        assert s.end_t == 2.0

    def test_curves_connect_knots(self):
        """Test that curve i runs from knot i to knot i+1."""
        s = spline(ZIGZAG)

        for i, c in enumerate(s.curves):
            assert c.p0 == tuple(s.knots[i])
            assert c.p3 == tuple(s.knots[i + 1])

    def test_annotations(self):
        """Test index, cumulative lengths and segment offsets of the curves."""
        s = spline(ZIGZAG)

        for i, c in enumerate(s.curves):
            assert c.index == i
            assert c.segment_offset == pytest.approx(i / 2)
        assert s.curves[0].start_length == 0.0
        for prev, c in zip(s.curves, s.curves[1:]):
            assert c.start_length == prev.end_length
        assert np.all(np.diff(s.end_lengths) >= 0)
        assert np.array_equal(s.start_lengths[1:], s.end_lengths[:-1])

    def test_single_curve_segment_offset(self):
        """Test the segment offset of a spline with one curve."""
        s = spline([[0, 0], [1, 1]])

        assert s.curves[0].segment_offset == 0.0

    def test_knots_are_read_only(self):
        """Test that the knot array cannot be modified."""
        s = spline(LINE)

        with pytest.raises(ValueError):
            s.knots[0, 0] = 5.0

    def test_input_is_copied(self):
        """Test that changing the input array does not change the spline."""
        knots = np.array(LINE, dtype=np.float64)
        s = spline(knots)
        knots[0, 0] = 5.0

        assert s.knots[0, 0] == 0.0

    @pytest.mark.parametrize("knots", [[], [[0, 0]], [[0, 0, 0], [1, 1, 1]], [0, 1, 2]])
    def test_invalid_knots(self, knots):
        """Test that less than 2 knots or a wrong shape is rejected."""
        with pytest.raises(ValueError):
            spline(knots)


###############################################################################
# Global parameter
###############################################################################


class TestGlobalParameter:
    """Test mapping of the global parameter t onto the curves."""

    def test_straight_spline(self):
        """Test length and x(t) of evenly spaced collinear knots."""
        s = spline(LINE)

        assert s.length == pytest.approx(3.0)
        for t in range(4):
            assert s.x(t) == t
            assert s.y(t) == 0

    def test_passes_through_knots_exactly(self):
        """Test that point(k) is knot k for every integer k including end_t."""
        s = spline(ZIGZAG)

        for k in range(s.segment_count + 1):
            assert s.point(k) == tuple(s.knots[k])

    def test_end_t_reaches_last_knot(self):
        """Test that the upper bound of t is inclusive."""
        s = spline(ZIGZAG)

        assert s.point(s.end_t) == (3.0, 1.0)
        assert s.first_derivative(s.end_t) == s.curves[-1].first_derivative(1.0)

    def test_integer_t_starts_next_curve(self):
        """Test that an integer t below end_t maps to the start of the next curve."""
        s = spline(ZIGZAG)

        assert s.first_derivative(1) == s.curves[1].first_derivative(0.0)
        assert s.curvature(2) == s.curves[2].curvature(0.0)

    def test_t_is_clamped(self):
        """Test that t outside [0, end_t] is clamped."""
        s = spline(ZIGZAG)

        assert s.point(-5) == s.point(0)
        assert s.point(100) == s.point(s.end_t)
        assert s.tangent(-1) == s.tangent(0)

    def test_delegation(self):
        """Test that all t-queries use the right curve and local parameter."""
        s = spline(ZIGZAG)
        c = s.curves[1]

        assert s.x(1.25) == c.x(0.25)
        assert s.y(1.25) == c.y(0.25)
        assert s.point(1.25) == c.point(0.25)
        assert s.first_derivative(1.25) == c.first_derivative(0.25)
        assert s.second_derivative(1.25) == c.second_derivative(0.25)
        assert s.curvature(1.25) == c.curvature(0.25)
        assert s.tangent(1.25) == c.tangent(0.25)
        assert s.normal(1.25) == c.normal(0.25)
        assert s.point_transform(1.25) == c.point_transform(0.25)

    def test_first_derivative_is_continuous(self):
        """Test C1 continuity at the inner knots."""
        s = spline(ZIGZAG)

        for i in range(1, s.segment_count):
            left = s.curves[i - 1].first_derivative(1.0)
            right = s.curves[i].first_derivative(0.0)
            assert np.allclose(left, right)


###############################################################################
# Arc length
###############################################################################


class TestLength:
    """Test length computation and length-based lookup."""

    def test_length_of_single_segment(self):
        """Test the length of a straight two-knot spline."""
        s = spline([[0, 0], [1, 1]])

        assert s.length == pytest.approx(math.sqrt(2), abs=1e-4)

    def test_length_is_sum_of_curves(self):
        """Test that the total length adds up the curve lengths."""
        s = spline(ZIGZAG)

        assert s.length == pytest.approx(sum(c.length for c in s.curves))
        assert s.length == s.curves[-1].end_length

    def test_length_at(self):
        """Test cumulative length at integer and fractional t."""
        s = spline(ZIGZAG)

        assert s.length_at(0) == 0.0
        assert s.length_at(1) == s.curves[1].start_length
        assert s.length_at(1.5) == pytest.approx(s.curves[0].length + s.curves[1].length_at(0.5))
        assert s.length_at(s.end_t) == s.length
        assert s.length_at() == s.length

    def test_length_at_is_clamped(self):
        """Test that t outside [0, end_t] is clamped."""
        s = spline(ZIGZAG)

        assert s.length_at(-1) == s.length_at(0)
        assert s.length_at(s.end_t + 1) == s.length_at(s.end_t)

    def test_point_at_length_straight(self):
        """Test the point at length on a straight line."""
        s = spline(LINE)

        for z in [0.0, 0.5, 1.0, 1.75, 2.5, 3.0]:
            assert np.allclose(s.point_at_length(z), (z, 0.0), atol=1e-3)

    def test_point_at_length_end_points(self):
        """Test point at length zero and at the full length."""
        s = spline(ZIGZAG)

        assert np.allclose(s.point_at_length(0), (0, 0), atol=1e-3)
        assert np.allclose(s.point_at_length(s.length), (3, 1), atol=1e-3)

    def test_point_at_length_is_clamped(self):
        """Test that z outside [0, length] is clamped."""
        s = spline(ZIGZAG)

        assert s.point_at_length(-1) == s.point_at_length(0)
        assert s.point_at_length(s.length + 1) == s.point_at_length(s.length)

    def test_boundary_length_goes_to_earlier_curve(self):
        """Test that a length equal to a cumulative curve length selects the earlier curve."""
        s = spline(ZIGZAG)

        # pylint: disable=protected-access
        assert s._curve_index_at_length(0.0) == 0
        assert s._curve_index_at_length(s.end_lengths[0]) == 0
        assert s._curve_index_at_length(s.end_lengths[1]) == 1
        assert s._curve_index_at_length(s.length) == s.segment_count - 1
        assert s.point_at_length(s.end_lengths[0]) == tuple(s.knots[1])

    def test_point_at_length_inside_curve(self):
        """Test that point_at_length delegates with the local length."""
        s = spline(ZIGZAG)
        z = s.end_lengths[0] + 0.3 * s.curves[1].length

        assert s.point_at_length(z) == s.curves[1].point_at_length(z - s.curves[1].start_length)

    def test_repeated_knots(self):
        """Test that repeated knots do not break lookups."""
        s = spline([[0, 0], [1, 0], [1, 0], [2, 0]])

        assert s.point(2) == (1.0, 0.0)
        assert np.allclose(s.point_at_length(s.end_lengths[0]), (1.0, 0.0))
        assert np.allclose(s.point_at_length(s.length), (2.0, 0.0), atol=1e-3)

    def test_zero_length_spline(self):
        """Test a spline whose knots all coincide."""
        s = spline([[1, 1], [1, 1], [1, 1]])

        assert s.length == 0.0
        assert s.point_at_length(5) == (1.0, 1.0)
        assert s.normalize().point(0) == (1.0, 1.0)


###############################################################################
# Closed splines
###############################################################################


class TestClosed:
    """Test splines whose end connects back to the start."""

    def test_closed_has_one_curve_per_knot(self):
        """Test the number of curves and the end of the last curve."""
        s = spline(SQUARE, closed=True)

        assert s.closed
        assert s.segment_count == 4
        assert s.end_t == 4.0
        assert s.curves[-1].p3 == tuple(s.knots[0])
        assert s.point(s.end_t) == s.point(0)

    def test_closed_passes_through_knots(self):
        """Test that point(k) is knot k modulo the knot count."""
        s = spline(SQUARE, closed=True)

        for k in range(s.segment_count + 1):
            assert s.point(k) == tuple(s.knots[k % len(s.knots)])

    def test_closed_is_nearly_smooth_at_start(self):
        """Test first derivative continuity where the loop closes."""
        s = spline(SQUARE, closed=True)

        assert np.allclose(s.first_derivative(s.end_t), s.first_derivative(0), atol=1e-4)

    def test_closed_square_is_symmetric(self):
        """Test that all curves of a closed square have the same length."""
        s = spline(SQUARE, closed=True)

        assert np.allclose([c.length for c in s.curves], s.length / 4, rtol=1e-4)

    def test_closed_two_knots(self):
        """Test a closed spline through 2 knots."""
        s = spline([[0, 0], [2, 0]], closed=True)

        assert s.segment_count == 2
        assert s.point(1) == (2.0, 0.0)
        assert s.point(2) == (0.0, 0.0)


###############################################################################
# Derived splines
###############################################################################


class TestDerived:
    """Test normalize, transform_affine and polygonize."""

    def test_normalize_keeps_end_points(self):
        """Test that resampling keeps the first and last knot."""
        s = spline([[0, 0], [1, 0], [30, 0]])
        n = s.normalize(3)

        assert n.x(0) == s.knots[0, 0]
        assert round(n.x(n.end_t)) == s.knots[-1, 0]
        assert n.segment_count == math.ceil(s.length / 3)

    def test_normalize_default(self):
        """Test the default curve length of 1."""
        s = spline(ZIGZAG)
        n = s.normalize()

        assert n.x(0) == s.x(0)
        assert round(n.x(n.end_t)) == s.knots[-1, 0]
        assert n.segment_count == math.ceil(s.length)
        assert not n.closed

    def test_normalize_spaces_knots_by_length(self):
        """Test that the knots of the result are evenly spaced along a straight line."""
        s = spline(LINE)
        n = s.normalize(curve_count=6)

        assert n.segment_count == 6
        assert np.allclose(n.knots[:, 0], np.arange(7) * 0.5, atol=1e-3)

    def test_normalize_curve_count(self):
        """Test resampling into a given number of curves."""
        s = spline(ZIGZAG)
        n = s.normalize(curve_count=5)

        assert n.segment_count == 5
        assert n.point(0) == s.point(0)
        assert np.allclose(n.point(n.end_t), s.point(s.end_t))

    def test_normalize_closed(self):
        """Test that a closed spline stays closed with the requested curve count."""
        s = spline(SQUARE, closed=True)
        n = s.normalize(curve_count=8)

        assert n.closed
        assert n.segment_count == 8
        assert n.point(0) == s.point(0)

    @pytest.mark.parametrize("kwargs", [{"curve_count": 1}, {"curve_length": 10.0}])
    def test_normalize_closed_to_one_curve(self, kwargs):
        """Test that a closed loop resampled to a single curve keeps 2 distinct knots."""
        s = spline(SQUARE, closed=True)
        n = s.normalize(**kwargs)

        assert n.closed
        assert n.segment_count == 2
        assert n.point(0) == s.point(0)
        assert np.allclose(n.knots[1], s.point_at_length(s.length / 2))
        assert n.length > 1.0
        # 2 knots on a loop give a straight curve there and back
        assert n.length == pytest.approx(2 * math.dist(n.knots[0], n.knots[1]), rel=1e-3)

    def test_normalize_curve_length_overrides_count(self):
        """Test that an explicit curve length decides the number of curves."""
        s = spline(LINE)
        n = s.normalize(0.4, 2)

        assert n.segment_count == 8
        assert np.allclose(n.knots, s.normalize(0.4).knots)
        assert np.allclose(n.knots[:, 0], [0, 0.4, 0.8, 1.2, 1.6, 2.0, 2.4, 2.8, 3.0], atol=1e-3)

    def test_normalize_returns_new_spline(self):
        """Test that the original spline is unchanged."""
        s = spline(ZIGZAG)
        knots = s.knots.copy()
        n = s.normalize(0.25)

        assert n is not s
        assert np.array_equal(s.knots, knots)

    @pytest.mark.parametrize("kwargs", [{"curve_length": 0}, {"curve_length": -1.0}, {"curve_count": 0}])
    def test_normalize_invalid(self, kwargs):
        """Test that non-positive arguments are rejected."""
        with pytest.raises(ValueError):
            spline(ZIGZAG).normalize(**kwargs)

    def test_transform_affine_translation(self):
        """Test that translating the knots translates all control points."""
        s = spline(ZIGZAG)
        moved = s.transform_affine([1, 0, 0, 1, 5.0, 10.0])

        for c, m in zip(s.curves, moved.curves):
            assert np.allclose(m.control_points, c.control_points + (5.0, 10.0))
        assert moved.length == pytest.approx(s.length)

    def test_transform_affine_scale(self):
        """Test that scaling by 2 doubles the length."""
        s = spline(ZIGZAG, closed=True)
        scaled = s.transform_affine([2, 0, 0, 2, 0, 0])

        assert scaled.closed
        assert scaled.length == pytest.approx(2 * s.length)

    def test_polygonize(self):
        """Test the shape of the polygon and the knots on it."""
        s = spline(ZIGZAG)
        result = s.polygonize(4)

        assert result.shape == (s.segment_count * 4 + 1, 2)
        for k in range(s.segment_count + 1):
            assert np.array_equal(result[k * 4], s.knots[k])
        assert np.allclose(result[6], s.point(1.5))


###############################################################################
# Serialization
###############################################################################


class TestSerialization:
    """Test path strings and dictionaries."""

    def test_stroke_golden(self):
        """Test the path of the diamond against its known control points."""
        assert spline(DIAMOND).stroke() == DIAMOND_STROKE

    def test_stroke_joins_curves(self):
        """Test that the spline path is the curve paths joined by a blank."""
        s = spline(ZIGZAG)

        assert s.stroke() == " ".join(c.stroke() for c in s.curves)
        assert s.stroke().count("M") == s.segment_count

    def test_stroke_straight(self):
        """Test the exact path of a straight spline with simple control points."""
        s = spline([[0, 0], [3, 0], [6, 0]])
        skeleton, numbers = split_path(s.stroke())

        assert skeleton == "M#,# C#,# #,# #,# M#,# C#,# #,# #,#"
        assert numbers == pytest.approx([0, 0, 1, 0, 2, 0, 3, 0, 3, 0, 4, 0, 5, 0, 6, 0])

    def test_fill(self):
        """Test the ribbon path of a straight spline."""
        s = spline(LINE)

        assert s.fill(2) == " ".join(c.fill(2) for c in s.curves)
        assert s.fill(2).startswith("M0,-1L0,1L1,1L1,-1Z ")

    def test_str(self):
        """Test the text form listing the control points of all curves."""
        s = spline([[0, 0], [1, 1]])

        assert str(s) == str(s.curves[0])
        assert str(s).startswith("[[0, 0], ")

    def test_dict_round_trip(self):
        """Test to_dict and from_dict."""
        s = spline(SQUARE, closed=True)
        data = s.to_dict()

        assert data == {"knots": [[0.0, 0.0], [1.0, 0.0], [1.0, 1.0], [0.0, 1.0]], "closed": True}
        restored = Spline.from_dict(data)
        assert restored.closed
        assert restored.stroke() == s.stroke()

    def test_from_dict_missing_knots(self):
        """Test that knots are mandatory."""
        with pytest.raises(ValueError):
            Spline.from_dict({"closed": False})
