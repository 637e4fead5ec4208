"""Render pipeline.

GraffitiRenderer ties the pieces together for one text:

1. Normalize the text and fetch one glyph per character from a GlyphSource
2. Process the markup into glyphs, adding rotation from the rule tables
3. Lay the glyphs out with the configured overlap strategy
4. Inflate the content box for the enabled effects and fit it to the viewport
5. Composite the layers (memoized across renders)

Missing or broken glyphs never abort a render: they are reported through
the RenderLogger and drawn as placeholders.
"""

import re
import time
import traceback
from collections.abc import Callable
from dataclasses import dataclass

from graffitizer.config import GraffitizerSettings, get_default_settings
from graffitizer.core.compositor import LayerCompositor, MemoizedCompositor
from graffitizer.core.history import HistoryManager, OptionsChange
from graffitizer.core.layout import (
    BoundingBox,
    LayoutResult,
    compute_layout,
    effect_inflated_bounds,
    presentation_fit_scale,
    visible_letter_count,
)
from graffitizer.core.overlap import OverlapStrategy, create_strategy
from graffitizer.core.sanitizer import MarkupSanitizer
from graffitizer.domain import (
    DEFAULT_OPTIONS,
    CustomizationOptions,
    GlyphContext,
    Layer,
    ProcessedGlyph,
    RuleTables,
    default_rule_tables,
)
from graffitizer.exceptions import GlyphError, GlyphNotFoundError
from graffitizer.io import (
    GlyphSource,
    create_placeholder_markup,
    create_space_glyph,
    process_markup,
)
from graffitizer.utils.logging import RenderLogger

_UNSUPPORTED_CHARS = re.compile(r"[^a-z0-9 ]")


def normalize_text(text: str) -> str:
    """Trim, lower-case and drop characters without glyphs."""
    return _UNSUPPORTED_CHARS.sub("", text.strip().lower())


@dataclass(frozen=True)
class RenderResult:
    """Everything needed to draw one rendered text.

    Attributes:
        text: Normalized text that was rendered
        options: Customization snapshot used
        glyphs: Processed glyphs in reading order
        layout: Positions and content box
        layers: Composited layers in z-order
        inflated_bounds: Content box grown to hold every effect
        fit_scale: Presentation scale fitting the inflated box into the viewport
    """

    text: str
    options: CustomizationOptions
    glyphs: tuple[ProcessedGlyph, ...]
    layout: LayoutResult
    layers: tuple[Layer, ...]
    inflated_bounds: BoundingBox
    fit_scale: float

    @property
    def letter_count(self) -> int:
        """Glyphs that are not whitespace."""
        return visible_letter_count(self.glyphs)

    @property
    def placeholder_count(self) -> int:
        """Glyphs drawn as placeholders."""
        return sum(1 for layer in self.layers if layer.is_placeholder)


class GraffitiRenderer:
    """Renders text with a glyph source, rule tables and settings.

    Example:
        renderer = GraffitiRenderer(DirectoryGlyphSource(Path("glyphs")))
        result = renderer.render("hello", get_preset("SLAP").options)
    """

    def __init__(
        self,
        source: GlyphSource,
        settings: GraffitizerSettings | None = None,
        tables: RuleTables | None = None,
        reporter: RenderLogger | None = None,
    ) -> None:
        """Initialize the renderer.

        Args:
            source: Supplies raw glyph markup
            settings: Application settings (defaults if None)
            tables: Overlap reference data (shipped defaults if None)
            reporter: Receives per-glyph failures and statistics
        """
        self.source = source
        self.settings = settings or get_default_settings()
        self.tables = tables or default_rule_tables()
        self.reporter = reporter or RenderLogger()
        self.strategy: OverlapStrategy = create_strategy(self.tables, self.settings.overlap)
        self.sanitizer = MarkupSanitizer(reporter=self.reporter)
        self.compositor = MemoizedCompositor(
            LayerCompositor(self.sanitizer, self.reporter),
            tolerance=self.settings.layout.position_tolerance,
        )
        self._glyph_cache: dict[tuple[str, GlyphContext], ProcessedGlyph] = {}
        self.last_result: RenderResult | None = None

    def context_for(self, text: str, index: int) -> GlyphContext:
        """Positional context of the character at ``index``."""
        letter = text[index]
        return GlyphContext(
            is_first=not text[:index].strip(),
            is_last=not text[index + 1 :].strip(),
            use_alternate_variant=index > 0 and text[index - 1] == letter,
        )

    def load_glyph(self, letter: str, context: GlyphContext) -> ProcessedGlyph:
        """Fetch and process one glyph, falling back to a placeholder."""
        key = (letter, context)
        if key in self._glyph_cache:
            return self._glyph_cache[key]

        layout = self.settings.layout
        try:
            markup = self.source.fetch_glyph(letter, context)
            glyph = process_markup(markup, letter, layout, self.sanitizer)
        except GlyphNotFoundError as e:
            self.reporter.log_glyph_missing(letter, e)
            glyph = self._placeholder_glyph(letter)
        except GlyphError as e:
            self.reporter.log_glyph_error(letter, e, traceback.format_exc())
            glyph = self._placeholder_glyph(letter)

        self._glyph_cache[key] = glyph
        return glyph

    def _placeholder_glyph(self, letter: str) -> ProcessedGlyph:
        size = self.settings.layout.glyph_size
        return process_markup(
            create_placeholder_markup(letter, size), letter, self.settings.layout, self.sanitizer
        )

    def prepare_glyphs(self, text: str) -> list[ProcessedGlyph]:
        """Processed glyphs for normalized text, rotated by the rule tables."""
        layout = self.settings.layout
        glyphs: list[ProcessedGlyph] = []
        for index, letter in enumerate(text):
            if letter == " ":
                glyphs.append(create_space_glyph(layout.space_width, layout.glyph_size))
                continue

            glyph = self.load_glyph(letter, self.context_for(text, index))
            if index > 0 and text[index - 1] != " ":
                rotation = self.strategy.rotation(text[index - 1], letter)
                if rotation:
                    glyph = glyph.with_rotation(rotation)
            glyphs.append(glyph)
        return glyphs

    def render(self, text: str, options: CustomizationOptions | None = None) -> RenderResult:
        """Render text with the given customization options.

        Args:
            text: Raw input text; normalized before rendering
            options: Customization snapshot (CLASSIC preset if None)

        Returns:
            RenderResult with glyphs, layout, layers and presentation scale
        """
        options = options or DEFAULT_OPTIONS
        start = time.perf_counter()
        self.reporter.reset()
        self.reporter.stats.start_time = time.time()

        normalized = normalize_text(text)
        glyphs = self.prepare_glyphs(normalized)
        self.reporter.log_render_start(normalized, len(glyphs))

        layout = compute_layout(glyphs, self.strategy.overlap, self.settings.layout.target_width)
        inflated = effect_inflated_bounds(layout.bounds, options) if glyphs else layout.bounds

        viewport = self.settings.viewport
        fit_scale = presentation_fit_scale(
            inflated.width,
            inflated.height,
            viewport.width,
            viewport.height,
            visible_letter_count(glyphs),
            fallback=layout.container_scale,
            config=viewport,
        )
        self.reporter.log_layout(
            layout.content_width, layout.content_height, layout.container_scale, fit_scale
        )

        layers = self.compositor.compose(glyphs, layout.positions, options)

        self.reporter.stats.end_time = time.time()
        self.reporter.log_render_complete(len(layers), (time.perf_counter() - start) * 1000)

        result = RenderResult(
            text=normalized,
            options=options,
            glyphs=tuple(glyphs),
            layout=layout,
            layers=tuple(layers),
            inflated_bounds=inflated,
            fit_scale=fit_scale,
        )
        self.last_result = result
        return result

    def attach(self, manager: HistoryManager) -> Callable[[], None]:
        """Re-render whenever the history manager changes the visible state.

        Transient drag frames are rendered like any other change.

        Returns:
            Callable that detaches the renderer again
        """

        def on_change(change: OptionsChange) -> None:
            self.render(change.input_text, change.options)

        return manager.subscribe(on_change)
