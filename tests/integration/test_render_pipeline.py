"""Integration tests for rendering text from a glyph directory to SVG."""

import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from graffitizer.config import GraffitizerSettings, OverlapConfig, OverlapMode
from graffitizer.core.history import HistoryManager
from graffitizer.core.pipeline import GraffitiRenderer, normalize_text
from graffitizer.core.sanitizer import SVG_NS, svg_tag
from graffitizer.domain import DEFAULT_OPTIONS, LayerKind, default_rule_tables, get_preset
from graffitizer.io import DirectoryGlyphSource, SvgWriter
from graffitizer.utils.logging import RenderLogger

# Ink width of each standard glyph
GLYPH_WIDTHS = {"h": 100, "e": 80, "l": 60, "o": 100, "a": 90, "v": 90}


def rect_glyph(width: int, extra: str = "") -> str:
    x = (200 - width) // 2
    return (
        f'<svg xmlns="{SVG_NS}" width="200" height="200" viewBox="0 0 200 200">'
        f'<rect x="{x}" y="40" width="{width}" height="120"/>{extra}</svg>'
    )


@pytest.fixture
def glyph_dir(tmp_path: Path) -> Path:
    """Glyph directory with rectangles of known widths plus a few variants."""
    root = tmp_path / "glyphs"
    (root / "last").mkdir(parents=True)
    for letter, width in GLYPH_WIDTHS.items():
        (root / f"{letter}.svg").write_text(rect_glyph(width), encoding="utf-8")
    (root / "l2.svg").write_text(rect_glyph(40), encoding="utf-8")
    (root / "last" / "o.svg").write_text(rect_glyph(120), encoding="utf-8")
    return root


@pytest.fixture
def renderer(glyph_dir: Path) -> GraffitiRenderer:
    return GraffitiRenderer(DirectoryGlyphSource(glyph_dir), reporter=RenderLogger())


class TestRender:
    """Tests for GraffitiRenderer.render."""

    def test_hello(self, renderer: GraffitiRenderer):
        """Test a word renders every glyph with every CLASSIC layer."""
        result = renderer.render("hello")

        assert result.text == "hello"
        assert result.letter_count == 5
        assert len(result.layers) == 5 * 5
        assert result.placeholder_count == 0
        assert all(a < b for a, b in zip(result.layout.positions, result.layout.positions[1:]))
        assert renderer.reporter.stats.glyph_count == 5

    def test_layers_stack_by_kind(self, renderer: GraffitiRenderer):
        """Test all shields come before all main layers in the output."""
        result = renderer.render("hello")
        kinds = [layer.kind for layer in result.layers]
        assert kinds[:5] == [LayerKind.SHIELD] * 5
        assert kinds[-5:] == [LayerKind.MAIN] * 5

    def test_overlaps_follow_rules(self, renderer: GraffitiRenderer):
        """Test every adjacent overlap stays inside its rule range."""
        result = renderer.render("hello")
        tables = default_rule_tables()
        for prev, overlap in zip(result.text, result.layout.overlaps[1:]):
            rule = tables.rule_for(prev)
            assert rule.min_overlap <= overlap <= rule.max_overlap

    def test_inflated_bounds_contain_content(self, renderer: GraffitiRenderer):
        """Test the effect box always holds the content box."""
        result = renderer.render("hello")
        assert result.inflated_bounds.union(result.layout.bounds) == result.inflated_bounds
        assert result.fit_scale > 0

    def test_text_normalized(self, renderer: GraffitiRenderer):
        """Test input is trimmed, lower-cased and stripped of unsupported characters."""
        assert normalize_text("  He!!o  ") == "heo"
        assert renderer.render("  HE!!O ").text == "heo"

    def test_empty_text(self, renderer: GraffitiRenderer):
        """Test empty text renders nothing at the container scale."""
        result = renderer.render("")
        assert result.layers == ()
        assert result.fit_scale == result.layout.container_scale

    def test_alternate_for_repeated_letter(self, renderer: GraffitiRenderer):
        """Test a letter that repeats its predecessor uses the alternate drawing."""
        glyphs = renderer.render("hello").glyphs
        assert glyphs[2].ink_width == 60
        assert glyphs[3].ink_width == 40

    def test_last_variant(self, renderer: GraffitiRenderer):
        """Test the final letter uses its last-position drawing."""
        glyphs = renderer.render("oho").glyphs
        assert glyphs[0].ink_width == 100
        assert glyphs[2].ink_width == 120

    def test_context(self, renderer: GraffitiRenderer):
        """Test positional context ignores surrounding spaces."""
        context = renderer.context_for("a b", 0)
        assert context.is_first and not context.is_last
        context = renderer.context_for("a b", 2)
        assert context.is_last and not context.is_first

    def test_rotation(self, renderer: GraffitiRenderer):
        """Test rotation rules tilt the following glyph."""
        result = renderer.render("av")
        assert result.glyphs[0].rotation == 0
        assert result.glyphs[1].rotation == 5
        main = [layer for layer in result.layers if layer.kind == LayerKind.MAIN]
        assert "rotate(5,100,100)" in main[1].transform.to_svg()

    def test_space_breaks_rotation(self, renderer: GraffitiRenderer):
        """Test letters after a space are never tilted."""
        result = renderer.render("a v")
        assert result.glyphs[1].is_space
        assert result.glyphs[2].rotation == 0
        assert result.layout.overlaps == (0.0, 0.0, 0.0)
        assert renderer.reporter.stats.space_count == 1

    def test_missing_letter_placeholder(self, renderer: GraffitiRenderer):
        """Test a letter without a glyph is drawn as a placeholder."""
        result = renderer.render("hez")

        assert len(result.glyphs) == 3
        assert "<text" in result.glyphs[2].raw_markup
        assert renderer.reporter.stats.placeholder_count == 1
        assert renderer.reporter.stats.errors[0][0] == "z"
        assert {layer.letter for layer in result.layers} == {"h", "e", "z"}

    def test_broken_glyph_placeholder(self, glyph_dir: Path):
        """Test unusable glyph markup is reported and replaced."""
        (glyph_dir / "e.svg").write_text("<svg><rect></svg>", encoding="utf-8")
        reporter = RenderLogger()
        renderer = GraffitiRenderer(DirectoryGlyphSource(glyph_dir), reporter=reporter)

        result = renderer.render("he")

        assert reporter.stats.error_count == 1
        assert reporter.stats.placeholder_count == 1
        assert len([layer for layer in result.layers if layer.letter == "e"]) == 5

    def test_rerender_reuses_layers(self, renderer: GraffitiRenderer):
        """Test an identical render is served from the compositor memo."""
        first = renderer.render("hello")
        second = renderer.render("hello")
        assert first.layers == second.layers
        assert renderer.compositor.hits == 1

    def test_preset_changes_layers(self, renderer: GraffitiRenderer):
        """Test SLAP draws no shadow layers."""
        result = renderer.render("hello", get_preset("SLAP").options)
        kinds = {layer.kind for layer in result.layers}
        assert kinds == {LayerKind.SHIELD, LayerKind.STAMP, LayerKind.MAIN}

    def test_analytical_mode(self, glyph_dir: Path):
        """Test the analytical strategy renders within the rule ranges."""
        settings = GraffitizerSettings(overlap=OverlapConfig(mode=OverlapMode.ANALYTICAL))
        renderer = GraffitiRenderer(DirectoryGlyphSource(glyph_dir), settings)
        result = renderer.render("hello")
        for overlap in result.layout.overlaps[1:]:
            assert 0.1 <= overlap <= 0.3


class TestHistoryIntegration:
    """Tests for a renderer attached to a history manager."""

    def test_renders_on_every_change(self, renderer: GraffitiRenderer):
        """Test discrete edits, drag frames and restores all re-render."""
        manager = HistoryManager(input_text="hello")
        detach = renderer.attach(manager)

        manager.apply_preset("SLAP")
        assert renderer.last_result is not None
        assert renderer.last_result.options.preset_id == "SLAP"

        manager.update_drag({"stamp_width": 120})
        assert renderer.last_result.options.stamp_width == 120
        manager.end_drag()

        manager.undo()
        assert renderer.last_result.options == get_preset("SLAP").options

        detach()
        manager.set_input_text("other")
        assert renderer.last_result.text == "hello"

    def test_text_edit_renders_new_text(self, renderer: GraffitiRenderer):
        """Test text edits render the new text."""
        manager = HistoryManager(input_text="he")
        renderer.attach(manager)
        manager.set_input_text("hole")
        assert renderer.last_result is not None
        assert renderer.last_result.text == "hole"


class TestSvgOutput:
    """Tests for writing rendered text."""

    def test_written_document(self, renderer: GraffitiRenderer, tmp_path: Path):
        """Test the written file holds one group per layer and no scripts."""
        options = DEFAULT_OPTIONS.merged({"background_enabled": True})
        result = renderer.render("hello", options)
        path = SvgWriter(800, 450).write(result, tmp_path)

        assert path.name == "HELLO_GRAFFITI.svg"
        root = ET.parse(path).getroot()
        assert root.tag == svg_tag("svg")
        assert root[0].tag == svg_tag("rect")
        groups = root.findall(f"{svg_tag('g')}/{svg_tag('g')}")
        assert len(groups) == len(result.layers)
        assert "script" not in path.read_text(encoding="utf-8")
