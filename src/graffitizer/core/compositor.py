"""Layer compositing for positioned glyphs.

Every non-space glyph is redrawn once per enabled effect. The redraws are
stacked globally by kind, so for example every shield sits below every
shadow, and all main glyph layers sit above all effect layers:

    shield -> shadow-shield -> shadow -> stamp -> main

Glyph markup may mark elements with ``class="shadow-effect"`` (artwork meant
for the shadow) or ``class="shine-effect"`` (highlights shown on the main
layer). Effect redraws strip both kinds.

Composition is isolated per glyph: a failure is reported through the
RenderLogger and that glyph alone is replaced by an empty placeholder.
"""

import copy
import logging
import traceback
import xml.etree.ElementTree as ET
from collections.abc import Callable, Sequence

from graffitizer.core.sanitizer import (
    EMPTY_PLACEHOLDER,
    MarkupSanitizer,
    local_name,
    resolve_viewbox,
    serialize,
)
from graffitizer.domain import CustomizationOptions, Layer, LayerKind, ProcessedGlyph, Transform
from graffitizer.exceptions import MarkupSanitizationError, MarkupValidationError
from graffitizer.utils.logging import RenderLogger

logger = logging.getLogger(__name__)

SHAPE_ELEMENTS = frozenset({"path", "rect", "circle", "ellipse", "line", "polyline", "polygon"})
SHADOW_CLASS = "shadow-effect"
SHINE_CLASS = "shine-effect"

_STROKE_ATTRIBUTES = ("stroke", "stroke-width", "stroke-linejoin", "stroke-linecap", "paint-order")
_PAINT_PROPERTIES = ("fill", "stroke", "paint-order")


def _fmt(value: float) -> str:
    return f"{value:g}"


def _has_class(element: ET.Element, name: str) -> bool:
    return name in (element.get("class") or "").split()


def _is_effect(element: ET.Element) -> bool:
    return _has_class(element, SHADOW_CLASS) or _has_class(element, SHINE_CLASS)


def _remove_where(root: ET.Element, predicate: Callable[[ET.Element], bool]) -> None:
    for parent in list(root.iter()):
        for child in list(parent):
            if predicate(child):
                parent.remove(child)


def _shapes(root: ET.Element) -> list[ET.Element]:
    return [el for el in root.iter() if local_name(el.tag) in SHAPE_ELEMENTS]


def _is_body_shape(element: ET.Element) -> bool:
    return local_name(element.tag) in SHAPE_ELEMENTS and not _has_class(element, SHADOW_CLASS)


def _set_stroke(element: ET.Element, color: str, width: float) -> None:
    element.set("stroke", color)
    element.set("stroke-width", _fmt(width))
    element.set("stroke-linejoin", "round")
    element.set("stroke-linecap", "round")


def _clear_stroke(element: ET.Element) -> None:
    for name in _STROKE_ATTRIBUTES:
        element.attrib.pop(name, None)


def _drop_paint_style(element: ET.Element) -> None:
    """Remove fill and stroke declarations from an inline style.

    Style declarations win over presentation attributes, so they would
    override the paint each layer sets.
    """
    style = element.attrib.pop("style", None)
    if not style:
        return
    kept = [
        declaration.strip()
        for declaration in style.split(";")
        if declaration.strip()
        and not declaration.split(":", 1)[0].strip().lower().startswith(_PAINT_PROPERTIES)
    ]
    if kept:
        element.set("style", ";".join(kept))


def fit_to_glyph_box(root: ET.Element, width: float, height: float) -> None:
    """Size an SVG root so its user space maps onto the glyph box.

    The viewBox is resolved the same way markup processing resolves it, and
    the default uniform centered fit applies.
    """
    box = resolve_viewbox(root, min(width, height))
    root.set("viewBox", " ".join(_fmt(value) for value in box))
    root.set("width", _fmt(width))
    root.set("height", _fmt(height))
    root.attrib.pop("preserveAspectRatio", None)
    root.attrib.pop("x", None)
    root.attrib.pop("y", None)


def _outline(root: ET.Element, color: str, width: float) -> ET.Element:
    """Stroke-only redraw of every non-effect shape."""
    redraw = copy.deepcopy(root)
    _remove_where(redraw, _is_effect)
    for shape in _shapes(redraw):
        _drop_paint_style(shape)
        shape.set("fill", "none")
        _set_stroke(shape, color, width)
    return redraw


def shield_stroke_width(options: CustomizationOptions) -> float:
    """Stroke width of the shield redraw.

    The shield surrounds the stamp, so it is as wide as the stamp plus the
    shield width on either side.
    """
    stamp = options.stamp_width if options.stamp_enabled else 0.0
    return stamp + 2 * options.shield_width


class LayerCompositor:
    """Turns positioned glyphs and customization options into layers.

    Args:
        sanitizer: Sanitizer applied to every glyph's raw markup
        reporter: Receives per-glyph failures
    """

    def __init__(
        self,
        sanitizer: MarkupSanitizer | None = None,
        reporter: RenderLogger | None = None,
    ) -> None:
        self.reporter = reporter or RenderLogger()
        self.sanitizer = sanitizer or MarkupSanitizer(reporter=self.reporter)

    def compose(
        self,
        glyphs: Sequence[ProcessedGlyph],
        positions: Sequence[float],
        options: CustomizationOptions,
    ) -> list[Layer]:
        """Produce every layer for the glyphs, sorted by z-order.

        Args:
            glyphs: Glyphs in reading order
            positions: X offset of each glyph, as computed by the layout
            options: Customization snapshot

        Returns:
            Layers in ascending z-order

        Raises:
            ValueError: If glyphs and positions differ in length
        """
        if len(glyphs) != len(positions):
            raise ValueError(
                f"Got {len(glyphs)} glyphs but {len(positions)} positions"
            )

        count = len(glyphs)
        layers: list[Layer] = []
        for index, (glyph, x) in enumerate(zip(glyphs, positions)):
            if glyph.is_space:
                self.reporter.log_space(index)
                continue

            try:
                glyph_layers = self.compose_glyph(index, glyph, x, options, count)
            except (MarkupValidationError, MarkupSanitizationError) as e:
                self.reporter.log_markup_rejected(glyph.letter, e.reason)
                glyph_layers = [self._placeholder(index, glyph, x, count)]
            except Exception as e:
                self.reporter.log_glyph_error(glyph.letter, e, traceback.format_exc())
                glyph_layers = [self._placeholder(index, glyph, x, count)]
            else:
                self.reporter.log_glyph_rendered(index, glyph.letter, len(glyph_layers))

            layers.extend(glyph_layers)

        layers.sort(key=lambda layer: layer.z_order)
        return layers

    def compose_glyph(
        self,
        index: int,
        glyph: ProcessedGlyph,
        x: float,
        options: CustomizationOptions,
        count: int = 1,
    ) -> list[Layer]:
        """Produce the layers of a single glyph.

        Raises:
            MarkupValidationError: If the glyph markup is invalid
            MarkupSanitizationError: If the glyph markup cannot be cleaned
        """
        root = self.sanitizer.sanitize_tree(glyph.raw_markup)
        fit_to_glyph_box(root, glyph.width, glyph.height)
        root.set("overflow", "visible")

        base = self._transform(glyph, x)
        shifted = self._transform(
            glyph, x + options.shadow_offset_x, options.shadow_offset_y
        )

        redraws: list[tuple[LayerKind, Transform, ET.Element]] = []
        if options.shield_enabled:
            shield = _outline(root, options.shield_color, shield_stroke_width(options))
            redraws.append((LayerKind.SHIELD, base, shield))
            if options.shadow_effect_enabled:
                redraws.append((LayerKind.SHADOW_SHIELD, shifted, copy.deepcopy(shield)))

        if options.shadow_effect_enabled:
            redraws.append((LayerKind.SHADOW, shifted, self._shadow(root, options)))

        if options.stamp_enabled:
            stamp = _outline(root, options.stamp_color, options.stamp_width)
            redraws.append((LayerKind.STAMP, base, stamp))

        redraws.append((LayerKind.MAIN, base, self._main(root, options)))

        return [
            Layer(
                kind=kind,
                z_order=self.z_order(kind, index, count),
                glyph_index=index,
                letter=glyph.letter,
                transform=transform,
                markup=serialize(tree),
            )
            for kind, transform, tree in redraws
        ]

    @staticmethod
    def z_order(kind: LayerKind, index: int, count: int) -> int:
        """Global stacking position of a glyph's layer of the given kind."""
        return (kind.rank - 1) * count + index

    def _transform(self, glyph: ProcessedGlyph, x: float, y: float = 0.0) -> Transform:
        return Transform(
            x=x,
            y=y,
            scale=glyph.scale,
            rotation=glyph.rotation,
            pivot=(glyph.width / 2, glyph.height / 2),
        )

    def _shadow(self, root: ET.Element, options: CustomizationOptions) -> ET.Element:
        redraw = copy.deepcopy(root)
        _remove_where(redraw, lambda el: _has_class(el, SHINE_CLASS))

        # Dedicated shadow artwork replaces the glyph body when present
        dedicated = [el for el in redraw.iter() if _has_class(el, SHADOW_CLASS)]
        if dedicated:
            _remove_where(redraw, _is_body_shape)

        for shape in _shapes(redraw):
            _drop_paint_style(shape)
            shape.set("fill", options.stamp_color)
            if options.stamp_enabled:
                _set_stroke(shape, options.stamp_color, options.stamp_width / 2)
            else:
                _clear_stroke(shape)
        return redraw

    def _main(self, root: ET.Element, options: CustomizationOptions) -> ET.Element:
        redraw = copy.deepcopy(root)
        _remove_where(redraw, lambda el: _has_class(el, SHADOW_CLASS))
        if not options.shine_enabled:
            _remove_where(redraw, lambda el: _has_class(el, SHINE_CLASS))

        for shape in _shapes(redraw):
            _drop_paint_style(shape)
            if _has_class(shape, SHINE_CLASS):
                shape.set("fill", options.shine_color)
                shape.set("fill-opacity", _fmt(options.shine_opacity))
                continue

            shape.set("fill", options.fill_color if options.fill_enabled else "#000000")
            if options.stroke_enabled:
                _set_stroke(shape, options.stroke_color, options.stroke_width)
                shape.set("paint-order", "stroke fill")
            else:
                _clear_stroke(shape)
        return redraw

    def _placeholder(self, index: int, glyph: ProcessedGlyph, x: float, count: int) -> Layer:
        return Layer(
            kind=LayerKind.MAIN,
            z_order=self.z_order(LayerKind.MAIN, index, count),
            glyph_index=index,
            letter=glyph.letter,
            transform=self._transform(glyph, x),
            markup=EMPTY_PLACEHOLDER,
            is_placeholder=True,
        )


class MemoizedCompositor:
    """Reuses the last composited layers while the visual inputs are unchanged.

    The cache key is the glyph sequence (letters and markup), the positions
    compared within ``tolerance``, and ``options.visual_key()``. Bookkeeping
    fields such as the preset id never force a re-composite.
    """

    def __init__(
        self,
        compositor: LayerCompositor | None = None,
        tolerance: float = 0.1,
    ) -> None:
        self.compositor = compositor or LayerCompositor()
        self.tolerance = tolerance
        self.hits = 0
        self.misses = 0
        self._glyph_key: tuple[tuple[str, str], ...] | None = None
        self._positions: tuple[float, ...] = ()
        self._options_key: tuple[object, ...] | None = None
        self._layers: list[Layer] = []

    def compose(
        self,
        glyphs: Sequence[ProcessedGlyph],
        positions: Sequence[float],
        options: CustomizationOptions,
    ) -> list[Layer]:
        """Compose layers, returning the cached list when nothing visual changed."""
        glyph_key = tuple((g.letter, g.raw_markup) for g in glyphs)
        options_key = options.visual_key()

        if (
            glyph_key == self._glyph_key
            and options_key == self._options_key
            and self._positions_match(positions)
        ):
            self.hits += 1
            logger.debug("Reusing composited layers for %d glyphs", len(glyphs))
            return list(self._layers)

        self.misses += 1
        self._layers = self.compositor.compose(glyphs, positions, options)
        self._glyph_key = glyph_key
        self._options_key = options_key
        self._positions = tuple(positions)
        return list(self._layers)

    def invalidate(self) -> None:
        """Drop the cached layers."""
        self._glyph_key = None
        self._options_key = None
        self._positions = ()
        self._layers = []

    def _positions_match(self, positions: Sequence[float]) -> bool:
        if len(positions) != len(self._positions):
            return False
        return all(abs(a - b) <= self.tolerance for a, b in zip(positions, self._positions))
