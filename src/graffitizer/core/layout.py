"""Glyph positioning and bounding-box calculations.

This module places processed glyphs on a single horizontal line:
- compute_layout: left edges of every glyph and the content box
- effect_inflated_bounds: box large enough to hold the effect layers
- scale_coefficient / presentation_fit_scale: viewport fitting

Layout is pure; overlap values come from an injected callable so any
OverlapStrategy (or a test double) can drive it.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass

from graffitizer.config import ViewportConfig
from graffitizer.domain import CustomizationOptions, ProcessedGlyph

OverlapFn = Callable[[ProcessedGlyph, ProcessedGlyph], float]


@dataclass(frozen=True, slots=True)
class BoundingBox:
    """Axis-aligned box.

    Attributes:
        min_x: Left edge
        min_y: Top edge
        max_x: Right edge
        max_y: Bottom edge
    """

    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        """Horizontal extent."""
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        """Vertical extent."""
        return self.max_y - self.min_y

    def union(self, other: "BoundingBox") -> "BoundingBox":
        """Smallest box containing both boxes."""
        return BoundingBox(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def inflate(self, amount: float) -> "BoundingBox":
        """Grow all four edges outward by ``amount``."""
        return BoundingBox(
            self.min_x - amount,
            self.min_y - amount,
            self.max_x + amount,
            self.max_y + amount,
        )

    def extend(self, dx: float, dy: float) -> "BoundingBox":
        """Grow the box only on the side each offset points to."""
        return BoundingBox(
            self.min_x + min(dx, 0.0),
            self.min_y + min(dy, 0.0),
            self.max_x + max(dx, 0.0),
            self.max_y + max(dy, 0.0),
        )

    def to_tuple(self) -> tuple[float, float, float, float]:
        """Convert to (min_x, min_y, max_x, max_y)."""
        return (self.min_x, self.min_y, self.max_x, self.max_y)


EMPTY_BOX = BoundingBox(0.0, 0.0, 0.0, 0.0)


@dataclass(frozen=True)
class LayoutResult:
    """Output of the positioning pass.

    Attributes:
        positions: X offset of each glyph box
        overlaps: Overlap used between glyph i-1 and glyph i (first entry is 0)
        bounds: Union of all glyph ink boxes at their positions
        container_scale: Normalization factor ``min(1, target_width / width)``
    """

    positions: tuple[float, ...]
    overlaps: tuple[float, ...]
    bounds: BoundingBox
    container_scale: float

    @property
    def content_width(self) -> float:
        """Width of the content box."""
        return self.bounds.width

    @property
    def content_height(self) -> float:
        """Height of the content box."""
        return self.bounds.height


def compute_layout(
    glyphs: Sequence[ProcessedGlyph],
    overlap_fn: OverlapFn,
    target_width: float = 1000.0,
) -> LayoutResult:
    """Position glyphs left to right.

    The first glyph's ink starts at x=0. Each following glyph starts where
    the previous glyph's ink ends, pulled back by the overlap fraction of the
    previous ink width. For overlaps in [0, 1] the ink starts
    (``position + bounds.left``) never decrease; the positions themselves
    are box offsets and step back when a glyph has a wider left bearing.

    Args:
        glyphs: Glyphs in reading order
        overlap_fn: Overlap fraction for an adjacent (previous, current) pair
        target_width: Content width at which the container scale reaches 1

    Returns:
        LayoutResult with one position per glyph
    """
    if not glyphs:
        return LayoutResult(positions=(), overlaps=(), bounds=EMPTY_BOX, container_scale=1.0)

    positions = [-glyphs[0].bounds.left]
    overlaps = [0.0]
    cursor = 0.0

    for prev, curr in zip(glyphs, glyphs[1:]):
        overlap = overlap_fn(prev, curr)
        cursor += prev.ink_width * (1.0 - overlap)
        overlaps.append(overlap)
        positions.append(cursor - curr.bounds.left)

    boxes = [
        BoundingBox(
            x + glyph.bounds.left,
            glyph.bounds.top,
            x + glyph.bounds.right,
            glyph.bounds.bottom,
        )
        for glyph, x in zip(glyphs, positions)
    ]
    bounds = boxes[0]
    for box in boxes[1:]:
        bounds = bounds.union(box)

    container_scale = min(1.0, target_width / bounds.width) if bounds.width > 0 else 1.0
    return LayoutResult(
        positions=tuple(positions),
        overlaps=tuple(overlaps),
        bounds=bounds,
        container_scale=container_scale,
    )


def effect_inflated_bounds(base: BoundingBox, options: CustomizationOptions) -> BoundingBox:
    """Box that contains the content plus every enabled effect layer.

    Two inflation paths are combined as a union: the base box padded by the
    stamp half-width and the shield width, and, when the shadow is on, the
    base box first extended towards the shadow offset and then padded the
    same way.

    Args:
        base: Content box from the layout pass
        options: Active customization options

    Returns:
        Inflated box; never smaller than ``base``
    """
    padding = 0.0
    if options.stamp_enabled:
        padding += options.stamp_width / 2
    if options.shield_enabled:
        padding += options.shield_width

    inflated = base.inflate(padding)
    if options.shadow_effect_enabled:
        shadowed = base.extend(options.shadow_offset_x, options.shadow_offset_y)
        inflated = inflated.union(shadowed.inflate(padding))
    return inflated


def visible_letter_count(glyphs: Sequence[ProcessedGlyph]) -> int:
    """Count glyphs that are not whitespace."""
    return sum(1 for glyph in glyphs if not glyph.is_space)


def scale_coefficient(letter_count: int, config: ViewportConfig | None = None) -> float:
    """Fit multiplier for a text of ``letter_count`` visible letters.

    Short words get a smaller multiplier so they do not fill the viewport.
    """
    config = config or ViewportConfig()
    if letter_count <= config.short_word_max_letters:
        return config.short_base + config.short_per_letter * letter_count
    if letter_count <= config.medium_word_max_letters:
        return config.medium_coefficient
    return config.long_coefficient


def presentation_fit_scale(
    content_width: float,
    content_height: float,
    viewport_width: float,
    viewport_height: float,
    letter_count: int,
    fallback: float = 1.0,
    config: ViewportConfig | None = None,
) -> float:
    """Scale that fits the content into the viewport.

    Args:
        content_width: Width of the (effect-inflated) content box
        content_height: Height of the (effect-inflated) content box
        viewport_width: Available width
        viewport_height: Available height
        letter_count: Visible letters, spaces excluded
        fallback: Returned when any dimension is zero, normally the container scale
        config: Viewport tiers for the coefficient

    Returns:
        Presentation scale
    """
    if min(content_width, content_height, viewport_width, viewport_height) <= 0:
        return fallback
    fit = min(viewport_width / content_width, viewport_height / content_height)
    return fit * scale_coefficient(letter_count, config)
