"""Unit tests for the SVG document writer."""

import xml.etree.ElementTree as ET
from pathlib import Path

import pytest

from graffitizer.core.layout import BoundingBox, LayoutResult
from graffitizer.core.pipeline import RenderResult
from graffitizer.core.sanitizer import SVG_NS, svg_tag
from graffitizer.domain import DEFAULT_OPTIONS, Layer, LayerKind, Transform
from graffitizer.exceptions import ExportError
from graffitizer.io import SvgWriter, get_output_path

LAYER_MARKUP = f'<svg xmlns="{SVG_NS}"><path d="M0 0 H10 V10 Z"/></svg>'


def make_result(text: str = "hello", background: bool = False) -> RenderResult:
    options = DEFAULT_OPTIONS.merged(
        {"background_enabled": background, "background_color": "#f00000"}
    )
    tilted = Transform(x=10, rotation=5, pivot=(100, 100))
    layers = (
        Layer(LayerKind.SHIELD, 0, 0, "h", Transform(x=10), LAYER_MARKUP),
        Layer(LayerKind.MAIN, 1, 0, "h", tilted, LAYER_MARKUP),
    )
    return RenderResult(
        text=text,
        options=options,
        glyphs=(),
        layout=LayoutResult((0.0,), (0.0,), BoundingBox(0, 0, 100, 50), 1.0),
        layers=layers,
        inflated_bounds=BoundingBox(0, 0, 200, 100),
        fit_scale=2.0,
    )


class TestGetOutputPath:
    """Tests for get_output_path."""

    def test_naming_convention(self):
        """Test words are upper-cased and joined with underscores."""
        assert get_output_path("hello world") == Path("HELLO_WORLD_GRAFFITI.svg")

    def test_directory(self, tmp_path: Path):
        """Test the file goes into the given directory."""
        assert get_output_path("abc", tmp_path) == tmp_path / "ABC_GRAFFITI.svg"

    @pytest.mark.parametrize("text", ["", "   ", "!!!"])
    def test_untitled(self, text: str):
        """Test texts without usable characters get a fallback name."""
        assert get_output_path(text).name == "UNTITLED_GRAFFITI.svg"

    def test_long_text_truncated(self):
        """Test long names are cut before the suffix."""
        name = get_output_path("a" * 100).name
        assert name == "A" * 60 + "_GRAFFITI.svg"

    def test_path_characters_removed(self):
        """Test separators cannot escape the output directory."""
        assert get_output_path("../etc/passwd").name == "ETCPASSWD_GRAFFITI.svg"


class TestSvgWriter:
    """Tests for SvgWriter."""

    def test_document_canvas(self):
        """Test the root is a viewport-sized SVG canvas."""
        root = SvgWriter(800, 450).build_document(make_result())
        assert root.tag == svg_tag("svg")
        assert root.get("width") == "800"
        assert root.get("height") == "450"
        assert root.get("viewBox") == "0 0 800 450"

    def test_content_centered_and_scaled(self):
        """Test the content group centers the inflated box at the fit scale."""
        root = SvgWriter(800, 450).build_document(make_result())
        content = root.find(f"{{{SVG_NS}}}g")
        assert content is not None
        assert content.get("id") == "graffiti-content"
        assert content.get("transform") == "translate(400,225) scale(2) translate(-100,-50)"

    def test_layers_in_order(self):
        """Test every layer becomes a group in z-order with its transform."""
        root = SvgWriter().build_document(make_result())
        groups = root.findall(f"{{{SVG_NS}}}g/{{{SVG_NS}}}g")
        assert [g.get("class") for g in groups] == ["layer-shield", "layer-main"]
        assert groups[1].get("transform") == "translate(10,0) rotate(5,100,100)"
        assert groups[0][0].tag == svg_tag("svg")

    def test_background(self):
        """Test an enabled background is drawn first, full size."""
        root = SvgWriter().build_document(make_result(background=True))
        rect = root[0]
        assert rect.tag == svg_tag("rect")
        assert rect.get("fill") == "#f00000"
        assert rect.get("width") == "100%"

    def test_no_background(self):
        """Test a disabled background draws nothing."""
        root = SvgWriter().build_document(make_result(background=False))
        assert root.find(svg_tag("rect")) is None

    def test_to_string(self):
        """Test the serialized document carries an XML declaration."""
        text = SvgWriter().to_string(make_result())
        assert text.startswith('<?xml version="1.0" encoding="UTF-8"?>')
        assert f'xmlns="{SVG_NS}"' in text

    def test_write_generated_name(self, tmp_path: Path):
        """Test writing into a directory uses the generated name."""
        path = SvgWriter().write(make_result("hi there"), tmp_path)
        assert path == tmp_path / "HI_THERE_GRAFFITI.svg"
        root = ET.parse(path).getroot()
        assert root.tag == svg_tag("svg")

    def test_write_explicit_path(self, tmp_path: Path):
        """Test an explicit output path wins and missing directories are created."""
        target = tmp_path / "out" / "custom.svg"
        path = SvgWriter().write(make_result(), tmp_path, output_path=target)
        assert path == target
        assert target.read_text(encoding="utf-8").startswith("<?xml")

    def test_write_failure(self, tmp_path: Path):
        """Test write failures raise ExportError."""
        blocker = tmp_path / "file"
        blocker.write_text("x", encoding="utf-8")
        with pytest.raises(ExportError) as exc_info:
            SvgWriter().write(make_result(), output_path=blocker / "x.svg")
        assert exc_info.value.path == str(blocker / "x.svg")
