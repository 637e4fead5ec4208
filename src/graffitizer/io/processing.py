"""Glyph markup processing.

Turns raw glyph SVG markup into a ProcessedGlyph:

1. The markup is sanitized and its viewBox mapped onto the square glyph box
2. Every shape is drawn through fontTools' SVG path parser into a RecordingPen
3. The recorded outlines are flattened and scanned column by column to get
   the ink bounds and the per-column occupancy used by overlap analysis

Elements marked as shadow or shine artwork are not part of the ink.
"""

import math
import re
import xml.etree.ElementTree as ET
from html import escape

from fontTools.misc.transform import Identity, Transform
from fontTools.pens.recordingPen import RecordingPen
from fontTools.pens.transformPen import TransformPen
from fontTools.svgLib.path import parse_path
from fontTools.svgLib.path.shapes import PathBuilder

from graffitizer.config import LayoutConfig
from graffitizer.core.geometry import flatten_contour, ink_spans
from graffitizer.core.sanitizer import SVG_NS, MarkupSanitizer, local_name, resolve_viewbox
from graffitizer.domain import (
    ColumnRange,
    Contour,
    GlyphBounds,
    Point,
    PointType,
    ProcessedGlyph,
)
from graffitizer.exceptions import GlyphProcessingError, MarkupError

SHAPE_TAGS = frozenset({"path", "rect", "circle", "ellipse", "line", "polyline", "polygon"})
EFFECT_CLASSES = frozenset({"shadow-effect", "shine-effect"})

_TRANSFORM_RE = re.compile(r"(matrix|translate|scale|rotate|skewX|skewY)\s*\(([^)]*)\)")
_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_EMPTY_COLUMN = ColumnRange(top=0.0, bottom=0.0, density=0.0)


def _numbers(text: str) -> list[float]:
    return [float(n) for n in _NUMBER_RE.findall(text)]


def parse_transform(value: str | None) -> Transform:
    """Parse an SVG ``transform`` attribute into a fontTools Transform.

    Functions apply right to left, as in SVG.

    Raises:
        ValueError: If a transform function has the wrong number of arguments
    """
    result = Identity
    if not value:
        return result

    for name, raw_args in _TRANSFORM_RE.findall(value):
        args = _numbers(raw_args)
        if name == "matrix":
            if len(args) != 6:
                raise ValueError(f"matrix() takes 6 arguments, got {len(args)}")
            result = result.transform(args)
        elif name == "translate" and args:
            result = result.translate(args[0], args[1] if len(args) > 1 else 0.0)
        elif name == "scale" and args:
            result = result.scale(args[0], args[1] if len(args) > 1 else None)
        elif name == "rotate" and args:
            angle = math.radians(args[0])
            if len(args) >= 3:
                cx, cy = args[1], args[2]
                result = result.translate(cx, cy).rotate(angle).translate(-cx, -cy)
            else:
                result = result.rotate(angle)
        elif name == "skewX" and args:
            result = result.skew(x=math.radians(args[0]))
        elif name == "skewY" and args:
            result = result.skew(y=math.radians(args[0]))
        else:
            raise ValueError(f"{name}() requires arguments")
    return result


def viewbox_transform(root: ET.Element, size: float) -> Transform:
    """Map the markup's viewBox onto a ``size`` square, centered and uniform.

    Falls back to the width/height attributes, then to the box itself.
    """
    min_x, min_y, width, height = resolve_viewbox(root, size)
    scale = min(size / width, size / height)
    dx = (size - width * scale) / 2 - min_x * scale
    dy = (size - height * scale) / 2 - min_y * scale
    return Identity.translate(dx, dy).scale(scale)


def _is_effect(element: ET.Element) -> bool:
    return bool(EFFECT_CLASSES.intersection((element.get("class") or "").split()))


def draw_markup(root: ET.Element, pen: RecordingPen, size: float) -> None:
    """Draw every non-effect shape of an SVG tree onto a pen in glyph box coordinates."""

    def walk(element: ET.Element, inherited: Transform) -> None:
        if _is_effect(element) or local_name(element.tag) == "defs":
            return
        current = inherited.transform(parse_transform(element.get("transform")))

        if local_name(element.tag) in SHAPE_TAGS:
            # PathBuilder only understands matrix() transforms, so it gets a bare copy
            attrib = {k: v for k, v in element.attrib.items() if k != "transform"}
            bare = ET.Element(element.tag, attrib)
            builder = PathBuilder()
            if builder.add_path_from_element(bare) and builder.paths:
                parse_path(builder.paths[-1], TransformPen(pen, current))

        for child in element:
            walk(child, current)

    walk(root, viewbox_transform(root, size))


def contours_from_recording(recording: list[tuple[str, tuple]]) -> list[Contour]:
    """Convert RecordingPen operations into contours.

    Open paths are treated as closed; they only matter for their filled area.
    """
    contours: list[Contour] = []
    points: list[Point] = []

    def flush() -> None:
        if len(points) >= 2:
            contours.append(Contour(points=list(points)))
        points.clear()

    for operator, args in recording:
        if operator == "moveTo":
            flush()
            points.append(Point(*args[0]))
        elif operator == "lineTo":
            points.append(Point(*args[0]))
        elif operator in ("curveTo", "qCurveTo"):
            kind = (
                PointType.OFF_CURVE_CUBIC if operator == "curveTo" else PointType.OFF_CURVE_QUAD
            )
            *controls, end = args
            points.extend(Point(x, y, kind) for x, y in controls)
            if end is not None:
                points.append(Point(*end))
        elif operator in ("closePath", "endPath"):
            flush()
    flush()
    return contours


def column_occupancy(
    contours: list[Contour],
    size: int,
    tolerance: float = 0.5,
) -> tuple[ColumnRange, ...]:
    """Sample the vertical ink extent and density of every column of the glyph box."""
    # Even-odd parity is unaffected by outlines wholly outside the box
    polygons = [
        flatten_contour(contour, tolerance) for contour in contours if contour.intersects_box(size)
    ]
    polygons = [polygon for polygon in polygons if len(polygon) >= 3]

    columns: list[ColumnRange] = []
    for x in range(size):
        spans = [
            (max(top, 0.0), min(bottom, float(size)))
            for top, bottom in ink_spans(polygons, x + 0.5)
        ]
        spans = [(top, bottom) for top, bottom in spans if bottom > top]
        if not spans:
            columns.append(_EMPTY_COLUMN)
            continue
        top = spans[0][0]
        bottom = max(b for _, b in spans)
        inked = sum(b - t for t, b in spans)
        columns.append(ColumnRange(top=top, bottom=bottom, density=inked / (bottom - top)))
    return tuple(columns)


def ink_bounds(occupancy: tuple[ColumnRange, ...]) -> GlyphBounds | None:
    """Tight box around the inked columns, or None when nothing is inked."""
    inked = [x for x, column in enumerate(occupancy) if column.bottom > column.top]
    if not inked:
        return None
    return GlyphBounds(
        left=float(inked[0]),
        right=float(inked[-1] + 1),
        top=min(occupancy[x].top for x in inked),
        bottom=max(occupancy[x].bottom for x in inked),
    )


def process_markup(
    markup: str,
    letter: str,
    config: LayoutConfig | None = None,
    sanitizer: MarkupSanitizer | None = None,
) -> ProcessedGlyph:
    """Analyze glyph markup.

    Args:
        markup: Raw SVG markup of the glyph
        letter: Character the glyph draws
        config: Layout configuration (glyph box size, flattening tolerance)
        sanitizer: Sanitizer used to clean the markup before drawing

    Returns:
        ProcessedGlyph with ink bounds and column occupancy

    Raises:
        GlyphProcessingError: If the markup is unusable or contains no ink
    """
    config = config or LayoutConfig()
    sanitizer = sanitizer or MarkupSanitizer()
    size = config.glyph_size

    try:
        root = sanitizer.sanitize_tree(markup)
    except MarkupError as e:
        raise GlyphProcessingError(letter, str(e)) from e

    pen = RecordingPen()
    try:
        draw_markup(root, pen, size)
    except (ValueError, TypeError, NotImplementedError, ZeroDivisionError) as e:
        raise GlyphProcessingError(letter, f"cannot draw outline: {e}") from e

    occupancy = column_occupancy(contours_from_recording(pen.value), size, config.flatten_tolerance)
    bounds = ink_bounds(occupancy)
    if bounds is None:
        raise GlyphProcessingError(letter, "glyph has no ink")

    return ProcessedGlyph(
        letter=letter,
        raw_markup=markup,
        bounds=bounds,
        occupancy=occupancy,
        width=float(size),
        height=float(size),
    )


def create_space_glyph(width: float = 70.0, size: int = 200) -> ProcessedGlyph:
    """Whitespace glyph that reserves ``width`` and draws nothing."""
    return ProcessedGlyph(
        letter=" ",
        raw_markup=(
            f'<svg xmlns="{SVG_NS}" width="{width:g}" height="{size}" '
            f'viewBox="0 0 {width:g} {size}"></svg>'
        ),
        bounds=GlyphBounds(left=0.0, right=width, top=0.0, bottom=float(size)),
        width=width,
        height=float(size),
        is_space=True,
    )


def create_placeholder_markup(letter: str, size: int = 200) -> str:
    """Markup drawn for characters without a glyph: a rounded box with the character."""
    inset = size / 4
    return (
        f'<svg xmlns="{SVG_NS}" width="{size}" height="{size}" viewBox="0 0 {size} {size}">'
        f'<rect x="{inset:g}" y="{inset:g}" width="{size / 2:g}" height="{size / 2:g}" '
        f'rx="{size / 20:g}" fill="#f0f0f0" stroke="#cccccc" stroke-width="2"/>'
        f'<text x="{size / 2:g}" y="{size * 0.6:g}" fill="#999999">{escape(letter)}</text>'
        "</svg>"
    )


