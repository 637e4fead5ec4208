"""Geometric operations for glyph ink analysis.

This module provides the math behind glyph occupancy profiles:
- Bezier curve flattening (recursive subdivision)
- Contour flattening into closed polygons
- Vertical scanline crossings and ink spans (even-odd fill rule)

All functions are pure and stateless.
"""

import math

from graffitizer.domain import Contour, Point, PointType

_MAX_DEPTH = 16


def _midpoint(a: Point, b: Point) -> Point:
    return Point((a.x + b.x) / 2, (a.y + b.y) / 2)


def _flatten_quadratic(
    p0: Point, p1: Point, p2: Point, tolerance: float, depth: int
) -> list[Point]:
    curve_mid = Point(
        0.25 * p0.x + 0.5 * p1.x + 0.25 * p2.x,
        0.25 * p0.y + 0.5 * p1.y + 0.25 * p2.y,
    )
    chord_mid = _midpoint(p0, p2)
    deviation = math.hypot(curve_mid.x - chord_mid.x, curve_mid.y - chord_mid.y)
    if depth >= _MAX_DEPTH or deviation <= tolerance:
        return [p0, p2]

    left = _flatten_quadratic(p0, _midpoint(p0, p1), curve_mid, tolerance, depth + 1)
    right = _flatten_quadratic(curve_mid, _midpoint(p1, p2), p2, tolerance, depth + 1)
    return left[:-1] + right


def _flatten_cubic(
    p0: Point, p1: Point, p2: Point, p3: Point, tolerance: float, depth: int
) -> list[Point]:
    # De Casteljau split at t=0.5
    q1 = _midpoint(p0, p1)
    q2 = _midpoint(p1, p2)
    q3 = _midpoint(p2, p3)
    r1 = _midpoint(q1, q2)
    r2 = _midpoint(q2, q3)
    mid = _midpoint(r1, r2)

    chord_mid = _midpoint(p0, p3)
    deviation = math.hypot(mid.x - chord_mid.x, mid.y - chord_mid.y)
    if depth >= _MAX_DEPTH or deviation <= tolerance:
        return [p0, p3]

    left = _flatten_cubic(p0, q1, r1, mid, tolerance, depth + 1)
    right = _flatten_cubic(mid, r2, q3, p3, tolerance, depth + 1)
    return left[:-1] + right


def bezier_flatten(points: list[Point], tolerance: float = 0.5) -> list[Point]:
    """Convert a Bezier segment to line segments using recursive subdivision.

    Args:
        points: Segment points (2 for a line, 3 for quadratic, 4 for cubic)
        tolerance: Maximum distance from true curve

    Returns:
        List of points forming line segments that approximate the curve

    Raises:
        ValueError: If points list is not of length 2 to 4
    """
    if len(points) == 2:
        return list(points)
    elif len(points) == 3:
        return _flatten_quadratic(points[0], points[1], points[2], tolerance, 0)
    elif len(points) == 4:
        return _flatten_cubic(points[0], points[1], points[2], points[3], tolerance, 0)
    else:
        raise ValueError(f"Expected 2-4 points for Bezier curve, got {len(points)}")


def flatten_contour(contour: Contour, tolerance: float = 0.5) -> list[Point]:
    """Flatten a contour into a closed polygon of on-curve points.

    Consecutive quadratic control points imply an on-curve point halfway
    between them, as in TrueType outlines.

    Args:
        contour: Contour whose first point is on the curve
        tolerance: Maximum distance from true curve

    Returns:
        Polygon vertices; the closing edge back to the first vertex is implicit
    """
    points = contour.points
    if not points:
        return []
    if contour.is_flat():
        return list(points)

    polygon: list[Point] = [points[0]]
    current = points[0]
    pending: list[Point] = []

    # Walk the outline once, closing back onto the start point
    for point in [*points[1:], points[0]]:
        if point.point_type == PointType.ON_CURVE:
            if not pending:
                segment = [current, point]
            elif pending[0].point_type == PointType.OFF_CURVE_CUBIC:
                segment = [current, *pending[:2], point]
            else:
                # Expand implied on-curve points between quadratic controls
                for control, following in zip(pending, pending[1:]):
                    implied = _midpoint(control, following)
                    polygon.extend(bezier_flatten([current, control, implied], tolerance)[1:])
                    current = implied
                segment = [current, pending[-1], point]
            polygon.extend(bezier_flatten(segment, tolerance)[1:])
            current = point
            pending = []
        else:
            pending.append(point)

    # Closing segment ends on the start point, which is already the first vertex
    if len(polygon) > 1 and polygon[-1] == polygon[0]:
        polygon.pop()
    return polygon


def polygon_bounds(polygons: list[list[Point]]) -> tuple[float, float, float, float] | None:
    """Bounding box of a set of polygons.

    Returns:
        Tuple of (min_x, min_y, max_x, max_y), or None when there are no vertices
    """
    xs = [p.x for polygon in polygons for p in polygon]
    ys = [p.y for polygon in polygons for p in polygon]
    if not xs:
        return None
    return (min(xs), min(ys), max(xs), max(ys))


def vertical_crossings(polygons: list[list[Point]], x: float) -> list[float]:
    """Find where polygon edges cross the vertical line at ``x``.

    Edges are treated as half-open in x so a vertex on the line is counted
    once.

    Returns:
        Sorted y coordinates of the crossings
    """
    crossings: list[float] = []
    for polygon in polygons:
        n = len(polygon)
        if n < 3:
            continue
        for i in range(n):
            a = polygon[i]
            b = polygon[(i + 1) % n]
            if (a.x <= x < b.x) or (b.x <= x < a.x):
                t = (x - a.x) / (b.x - a.x)
                crossings.append(a.y + t * (b.y - a.y))
    crossings.sort()
    return crossings


def ink_spans(polygons: list[list[Point]], x: float) -> list[tuple[float, float]]:
    """Vertical ink intervals at ``x`` under the even-odd fill rule.

    Returns:
        List of (top, bottom) intervals with top < bottom
    """
    crossings = vertical_crossings(polygons, x)
    spans = []
    for top, bottom in zip(crossings[0::2], crossings[1::2]):
        if bottom > top:
            spans.append((top, bottom))
    return spans
