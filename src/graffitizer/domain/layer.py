"""Renderable layers produced by the compositor."""

from dataclasses import dataclass
from enum import Enum


class LayerKind(str, Enum):
    """Effect layer kinds in ascending stacking order."""

    SHIELD = "shield"
    SHADOW_SHIELD = "shadow-shield"
    SHADOW = "shadow"
    STAMP = "stamp"
    MAIN = "main"

    @property
    def rank(self) -> int:
        """Stacking rank of this kind (1 = bottom)."""
        return _KIND_RANKS[self]


_KIND_RANKS = {kind: rank for rank, kind in enumerate(LayerKind, start=1)}


def _fmt(value: float) -> str:
    return f"{value:.3f}".rstrip("0").rstrip(".") or "0"


@dataclass(frozen=True, slots=True)
class Transform:
    """Placement of a glyph layer.

    Attributes:
        x: Horizontal translation
        y: Vertical translation
        scale: Uniform scale
        rotation: Rotation in degrees around the glyph box center
        pivot: Point the rotation turns around, in local coordinates
    """

    x: float = 0.0
    y: float = 0.0
    scale: float = 1.0
    rotation: float = 0.0
    pivot: tuple[float, float] = (0.0, 0.0)

    def to_svg(self) -> str:
        """Render as an SVG ``transform`` attribute value."""
        parts = [f"translate({_fmt(self.x)},{_fmt(self.y)})"]
        if self.scale != 1.0:
            parts.append(f"scale({_fmt(self.scale)})")
        if self.rotation:
            px, py = self.pivot
            parts.append(f"rotate({_fmt(self.rotation)},{_fmt(px)},{_fmt(py)})")
        return " ".join(parts)


@dataclass(frozen=True)
class Layer:
    """One renderable redraw of a glyph.

    Attributes:
        kind: Effect this layer draws
        z_order: Global stacking position; higher draws on top
        glyph_index: Index of the glyph in the rendered text
        letter: Character of the glyph
        transform: Placement of the layer
        markup: Sanitized SVG markup of the redraw
        is_placeholder: True when the glyph failed and an empty stand-in is drawn
    """

    kind: LayerKind
    z_order: int
    glyph_index: int
    letter: str
    transform: Transform
    markup: str
    is_placeholder: bool = False
