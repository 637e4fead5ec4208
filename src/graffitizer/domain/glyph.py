"""Processed glyph representation.

A processed glyph is the immutable result of analyzing one character's
outline markup: its tight ink box inside the normalized glyph box and a
per-column occupancy profile used for overlap analysis.
"""

import dataclasses
from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class GlyphBounds:
    """Tight ink box in glyph-local coordinates.

    Attributes:
        left: First ink column
        right: Column just past the last ink column
        top: Topmost ink row
        bottom: Bottommost ink row
    """

    left: float
    right: float
    top: float
    bottom: float

    @property
    def width(self) -> float:
        """Horizontal ink extent."""
        return self.right - self.left

    @property
    def height(self) -> float:
        """Vertical ink extent."""
        return self.bottom - self.top


@dataclass(frozen=True, slots=True)
class ColumnRange:
    """Vertical ink extent of one pixel column.

    Attributes:
        top: First inked row in the column
        bottom: Last inked row in the column
        density: Share of rows between top and bottom that carry ink
    """

    top: float
    bottom: float
    density: float

    def intersects(self, other: "ColumnRange") -> bool:
        """Check whether two columns share any vertical span."""
        return min(self.bottom, other.bottom) - max(self.top, other.top) > 0


@dataclass(frozen=True, slots=True)
class GlyphContext:
    """Positional context used to pick a glyph variant.

    Attributes:
        is_first: Character starts the text
        is_last: Character ends the text
        use_alternate_variant: Prefer the alternate drawing of the letter
    """

    is_first: bool = False
    is_last: bool = False
    use_alternate_variant: bool = False


@dataclass(frozen=True)
class ProcessedGlyph:
    """A glyph ready for layout.

    Attributes:
        letter: The character this glyph draws
        raw_markup: SVG markup of the glyph as delivered by the glyph source
        bounds: Tight ink box in glyph-local coordinates
        occupancy: One ColumnRange per column of the glyph box
        width: Width of the glyph box
        height: Height of the glyph box
        scale: Scale applied when the glyph is drawn
        rotation: Stylistic tilt in degrees applied when drawn
        is_space: True for whitespace, which only reserves horizontal space
    """

    letter: str
    raw_markup: str
    bounds: GlyphBounds
    occupancy: tuple[ColumnRange, ...] = field(default=(), repr=False)
    width: float = 200.0
    height: float = 200.0
    scale: float = 1.0
    rotation: float = 0.0
    is_space: bool = False

    @property
    def ink_width(self) -> float:
        """Width of the ink box."""
        return self.bounds.width

    def column(self, x: int) -> ColumnRange | None:
        """Get the occupancy sample of a column, or None when out of range."""
        if 0 <= x < len(self.occupancy):
            return self.occupancy[x]
        return None

    def with_rotation(self, degrees: float) -> "ProcessedGlyph":
        """Return a copy of this glyph tilted by the given angle."""
        return dataclasses.replace(self, rotation=degrees)
