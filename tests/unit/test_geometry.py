"""Unit tests for curve flattening and scanline ink spans."""

import pytest

from graffitizer.core.geometry import (
    bezier_flatten,
    flatten_contour,
    ink_spans,
    polygon_bounds,
    vertical_crossings,
)
from graffitizer.domain import Contour, Point, PointType


def square(x0: float, y0: float, x1: float, y1: float) -> list[Point]:
    return [Point(x0, y0), Point(x1, y0), Point(x1, y1), Point(x0, y1)]


class TestBezierFlatten:
    """Tests for bezier_flatten."""

    def test_line_is_unchanged(self):
        """Test a two-point segment is returned as is."""
        points = [Point(0, 0), Point(10, 10)]
        assert bezier_flatten(points) == points

    def test_quadratic_keeps_endpoints(self):
        """Test the flattened quadratic starts and ends on the curve endpoints."""
        start, control, end = Point(0, 0), Point(50, 100), Point(100, 0)
        result = bezier_flatten([start, control, end], tolerance=0.5)
        assert result[0] == start
        assert result[-1].to_tuple() == pytest.approx(end.to_tuple())
        assert len(result) > 3

    def test_cubic_stays_inside_hull(self):
        """Test cubic samples stay within the control polygon's box."""
        points = [Point(0, 0), Point(0, 100), Point(100, 100), Point(100, 0)]
        result = bezier_flatten(points, tolerance=0.25)
        for p in result:
            assert 0 <= p.x <= 100
            assert 0 <= p.y <= 100
        # Peak of this symmetric cubic is at 3/4 of the control height
        assert max(p.y for p in result) == pytest.approx(75, abs=0.5)

    def test_tighter_tolerance_adds_points(self):
        """Test a smaller tolerance produces a finer approximation."""
        points = [Point(0, 0), Point(50, 100), Point(100, 0)]
        coarse = bezier_flatten(points, tolerance=5.0)
        fine = bezier_flatten(points, tolerance=0.1)
        assert len(fine) > len(coarse)

    def test_invalid_point_count(self):
        """Test segments with too many points are rejected."""
        with pytest.raises(ValueError, match="2-4 points"):
            bezier_flatten([Point(0, 0)] * 5)


class TestFlattenContour:
    """Tests for flatten_contour."""

    def test_flat_contour(self):
        """Test polygons pass through untouched."""
        contour = Contour(points=square(0, 0, 10, 10))
        assert flatten_contour(contour) == square(0, 0, 10, 10)

    def test_empty_contour(self):
        """Test empty contours flatten to nothing."""
        assert flatten_contour(Contour(points=[])) == []

    def test_quadratic_contour(self):
        """Test a contour with a quadratic bulge is expanded into on-curve points."""
        contour = Contour(
            points=[
                Point(0, 0),
                Point(100, 0),
                Point(50, 100, PointType.OFF_CURVE_QUAD),
            ]
        )
        polygon = flatten_contour(contour, tolerance=0.5)
        assert all(p.point_type == PointType.ON_CURVE for p in polygon)
        assert polygon[0] == Point(0, 0)
        assert polygon[-1] != polygon[0]
        assert max(p.y for p in polygon) == pytest.approx(50, abs=0.5)

    def test_implied_quadratic_midpoints(self):
        """Test consecutive quadratic controls pass through their midpoint."""
        contour = Contour(
            points=[
                Point(0, 0),
                Point(0, 100, PointType.OFF_CURVE_QUAD),
                Point(100, 100, PointType.OFF_CURVE_QUAD),
                Point(100, 0),
            ]
        )
        polygon = flatten_contour(contour, tolerance=0.1)
        assert any(p.to_tuple() == pytest.approx((50, 100)) for p in polygon)

    def test_cubic_contour(self):
        """Test cubic control pairs are flattened."""
        contour = Contour(
            points=[
                Point(0, 0),
                Point(0, 100, PointType.OFF_CURVE_CUBIC),
                Point(100, 100, PointType.OFF_CURVE_CUBIC),
                Point(100, 0),
            ]
        )
        polygon = flatten_contour(contour, tolerance=0.25)
        assert len(polygon) > 4
        assert max(p.y for p in polygon) == pytest.approx(75, abs=0.5)


class TestScanline:
    """Tests for vertical crossings and ink spans."""

    def test_polygon_bounds(self):
        """Test bounds across several polygons."""
        bounds = polygon_bounds([square(0, 0, 10, 10), square(20, -5, 30, 5)])
        assert bounds == (0, -5, 30, 10)

    def test_polygon_bounds_empty(self):
        """Test bounds of nothing is None."""
        assert polygon_bounds([]) is None

    def test_square_span(self):
        """Test a square has one span covering its height."""
        assert ink_spans([square(0, 0, 10, 10)], 5) == [(0, 10)]

    def test_outside_has_no_span(self):
        """Test columns left or right of the shape are empty."""
        assert ink_spans([square(0, 0, 10, 10)], 15) == []

    def test_ring_has_two_spans(self):
        """Test a counter produces a gap under the even-odd rule."""
        polygons = [square(0, 0, 10, 10), square(3, 3, 7, 7)]
        assert ink_spans(polygons, 5) == [(0, 3), (7, 10)]

    def test_vertex_on_line_counted_once(self):
        """Test a vertex exactly on the scanline does not double count."""
        triangle = [Point(0, 10), Point(5, 0), Point(10, 10)]
        crossings = vertical_crossings([triangle], 5)
        assert len(crossings) == 2

    def test_degenerate_polygons_ignored(self):
        """Test polygons with fewer than three vertices are skipped."""
        assert vertical_crossings([[Point(0, 0), Point(10, 10)]], 5) == []
