"""Outline primitives produced when glyph markup is drawn.

Coordinates are in glyph box units with y growing downward, as in SVG.
"""

from dataclasses import dataclass
from enum import Enum, auto


class PointType(Enum):
    """Whether a point lies on the outline or steers a curve."""

    ON_CURVE = auto()
    OFF_CURVE_QUAD = auto()
    OFF_CURVE_CUBIC = auto()


@dataclass(frozen=True, slots=True)
class Point:
    x: float
    y: float
    point_type: PointType = PointType.ON_CURVE

    def to_tuple(self) -> tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Contour:
    """One closed subpath of a drawn glyph.

    Attributes:
        points: Points in drawing order; control points carry their curve type
    """

    points: list[Point]

    def is_flat(self) -> bool:
        """True when the subpath has no curve control points."""
        return all(p.point_type is PointType.ON_CURVE for p in self.points)

    def bounding_box(self) -> tuple[float, float, float, float]:
        """(min_x, min_y, max_x, max_y) of all points, control points included.

        Curves never leave the hull of their control points, so the box always
        holds the drawn outline. An empty contour has a zero box at the origin.
        """
        if not self.points:
            return (0.0, 0.0, 0.0, 0.0)
        xs = [p.x for p in self.points]
        ys = [p.y for p in self.points]
        return (min(xs), min(ys), max(xs), max(ys))

    def intersects_box(self, size: float) -> bool:
        """Whether the bounding box overlaps the square glyph box ``[0, size]``."""
        min_x, min_y, max_x, max_y = self.bounding_box()
        return max_x > 0 and min_x < size and max_y > 0 and min_y < size
