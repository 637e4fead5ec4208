"""Unit tests for glyph markup processing."""

import pytest

from graffitizer.config import LayoutConfig
from graffitizer.core.sanitizer import SVG_NS
from graffitizer.domain import Contour, Point, PointType
from graffitizer.exceptions import GlyphProcessingError
from graffitizer.io.processing import (
    column_occupancy,
    contours_from_recording,
    create_placeholder_markup,
    create_space_glyph,
    parse_transform,
    process_markup,
)


def svg(body: str, view_box: str = "0 0 200 200") -> str:
    return f'<svg xmlns="{SVG_NS}" viewBox="{view_box}">{body}</svg>'


def square(x0: float, y0: float, x1: float, y1: float) -> Contour:
    return Contour(points=[Point(x0, y0), Point(x1, y0), Point(x1, y1), Point(x0, y1)])


class TestParseTransform:
    """Tests for SVG transform parsing."""

    def test_empty(self):
        """Test a missing transform is the identity."""
        assert parse_transform(None).transformPoint((3, 4)) == (3, 4)
        assert parse_transform("").transformPoint((3, 4)) == (3, 4)

    def test_translate_then_scale(self):
        """Test functions apply right to left."""
        transform = parse_transform("translate(10, 0) scale(2)")
        assert transform.transformPoint((1, 1)) == pytest.approx((12, 2))

    def test_rotate_about_point(self):
        """Test rotation around an explicit center."""
        transform = parse_transform("rotate(90 100 100)")
        assert transform.transformPoint((100, 50)) == pytest.approx((150, 100))

    def test_matrix(self):
        """Test matrix() takes six terms."""
        transform = parse_transform("matrix(1 0 0 1 5 6)")
        assert transform.transformPoint((0, 0)) == pytest.approx((5, 6))
        with pytest.raises(ValueError, match="6 arguments"):
            parse_transform("matrix(1 0 0 1 5)")

    def test_missing_arguments(self):
        """Test transform functions without arguments are rejected."""
        with pytest.raises(ValueError, match="requires arguments"):
            parse_transform("rotate()")


class TestProcessMarkup:
    """Tests for process_markup."""

    def test_rect_bounds(self):
        """Test a rectangle's ink box matches its geometry."""
        glyph = process_markup(svg('<rect x="20" y="40" width="100" height="120"/>'), "a")

        assert glyph.letter == "a"
        assert glyph.bounds.left == 20
        assert glyph.bounds.right == 120
        assert glyph.bounds.top == pytest.approx(40)
        assert glyph.bounds.bottom == pytest.approx(160)
        assert glyph.ink_width == 100
        assert len(glyph.occupancy) == 200
        assert glyph.occupancy[50].density == pytest.approx(1.0)
        assert glyph.occupancy[10].density == 0.0

    def test_raw_markup_kept(self):
        """Test the original markup travels with the glyph."""
        markup = svg('<path d="M10 10 H90 V90 H10 Z"/>')
        assert process_markup(markup, "b").raw_markup == markup

    def test_view_box_scaled_to_glyph_box(self):
        """Test a smaller viewBox is scaled up into the glyph box."""
        glyph = process_markup(
            svg('<rect x="10" y="20" width="50" height="60"/>', view_box="0 0 100 100"), "a"
        )
        assert (glyph.bounds.left, glyph.bounds.right) == (20, 120)
        assert glyph.bounds.top == pytest.approx(40)
        assert glyph.bounds.bottom == pytest.approx(160)

    def test_wide_view_box_centered(self):
        """Test a non-square viewBox keeps its aspect ratio and is centered."""
        glyph = process_markup(
            svg('<rect x="0" y="0" width="400" height="200"/>', view_box="0 0 400 200"), "a"
        )
        assert (glyph.bounds.left, glyph.bounds.right) == (0, 200)
        assert glyph.bounds.top == pytest.approx(50)
        assert glyph.bounds.bottom == pytest.approx(150)

    def test_group_transform(self):
        """Test transforms on ancestors move the ink."""
        glyph = process_markup(
            svg('<g transform="translate(30,0)"><rect x="0" y="40" width="50" height="120"/></g>'),
            "a",
        )
        assert (glyph.bounds.left, glyph.bounds.right) == (30, 80)

    def test_circle(self):
        """Test curved shapes are flattened before sampling."""
        glyph = process_markup(svg('<circle cx="100" cy="100" r="50"/>'), "o")
        assert glyph.bounds.left == pytest.approx(50, abs=1)
        assert glyph.bounds.right == pytest.approx(150, abs=1)
        assert glyph.bounds.top == pytest.approx(50, abs=1)
        assert glyph.bounds.bottom == pytest.approx(150, abs=1)

    def test_effect_artwork_is_not_ink(self):
        """Test shadow and shine artwork do not count towards the ink box."""
        glyph = process_markup(
            svg(
                '<rect x="20" y="40" width="100" height="120"/>'
                '<rect class="shadow-effect" x="0" y="0" width="200" height="200"/>'
                '<rect class="shine-effect" x="150" y="0" width="40" height="40"/>'
            ),
            "a",
        )
        assert (glyph.bounds.left, glyph.bounds.right) == (20, 120)

    def test_custom_glyph_size(self):
        """Test the glyph box size comes from the layout configuration."""
        glyph = process_markup(
            svg('<rect x="0" y="0" width="200" height="200"/>'), "a", LayoutConfig(glyph_size=100)
        )
        assert glyph.width == 100
        assert glyph.bounds.right == 100

    def test_no_ink(self):
        """Test markup without any shapes is an error."""
        with pytest.raises(GlyphProcessingError, match="no ink"):
            process_markup(svg("<g/>"), "a")

    def test_only_effects_is_no_ink(self):
        """Test markup with only effect artwork has no ink."""
        with pytest.raises(GlyphProcessingError):
            process_markup(svg('<rect class="shadow-effect" width="10" height="10"/>'), "a")

    def test_invalid_markup(self):
        """Test unparseable markup is reported as a processing error."""
        with pytest.raises(GlyphProcessingError) as exc_info:
            process_markup("<svg><rect></svg>", "q")
        assert exc_info.value.letter == "q"

    def test_broken_shape(self):
        """Test shapes missing required geometry are reported."""
        with pytest.raises(GlyphProcessingError, match="cannot draw"):
            process_markup(svg('<rect x="0" y="0"/>'), "a")


class TestOccupancy:
    """Tests for recording conversion and column sampling."""

    def test_contours_from_recording(self):
        """Test pen operations become contours with typed points."""
        recording = [
            ("moveTo", ((0, 0),)),
            ("lineTo", ((10, 0),)),
            ("qCurveTo", ((10, 10), (0, 10))),
            ("closePath", ()),
            ("moveTo", ((20, 20),)),
            ("curveTo", ((25, 20), (30, 25), (30, 30))),
            ("endPath", ()),
        ]
        contours = contours_from_recording(recording)

        assert len(contours) == 2
        assert [p.point_type for p in contours[0].points] == [
            PointType.ON_CURVE,
            PointType.ON_CURVE,
            PointType.OFF_CURVE_QUAD,
            PointType.ON_CURVE,
        ]
        assert contours[1].points[1].point_type == PointType.OFF_CURVE_CUBIC

    def test_implied_on_curve_end(self):
        """Test all-off-curve quadratic runs without an end point are kept."""
        recording = [
            ("moveTo", ((0, 0),)),
            ("qCurveTo", ((10, 0), (10, 10), None)),
            ("closePath", ()),
        ]
        contours = contours_from_recording(recording)
        assert len(contours[0].points) == 3

    def test_ring_density(self):
        """Test a counter lowers the density of the columns it crosses."""
        columns = column_occupancy([square(0, 0, 10, 10), square(3, 3, 7, 7)], size=12)
        assert columns[5].top == 0
        assert columns[5].bottom == 10
        assert columns[5].density == pytest.approx(0.6)
        assert columns[1].density == pytest.approx(1.0)
        assert columns[11].density == 0.0

    def test_ink_clipped_to_box(self):
        """Test ink outside the glyph box is ignored."""
        columns = column_occupancy([square(0, -50, 5, 300)], size=10)
        assert columns[2].top == 0
        assert columns[2].bottom == 10

    def test_outline_outside_box_ignored(self):
        """Test an outline wholly above the box does not disturb the ink below it."""
        columns = column_occupancy([square(2, -30, 8, -20), square(0, 2, 10, 8)], size=10)
        assert columns[5].top == 2
        assert columns[5].bottom == 8
        assert columns[5].density == pytest.approx(1.0)


class TestSyntheticGlyphs:
    """Tests for space and placeholder glyphs."""

    def test_space_glyph(self):
        """Test the space glyph reserves its width and draws nothing."""
        space = create_space_glyph(width=55)
        assert space.is_space
        assert space.ink_width == 55
        assert space.occupancy == ()

    def test_placeholder_markup_processes(self):
        """Test the placeholder is itself a usable glyph."""
        markup = create_placeholder_markup("<")
        assert "&lt;" in markup
        glyph = process_markup(markup, "<")
        assert glyph.bounds.left == pytest.approx(50, abs=1)
        assert glyph.bounds.right == pytest.approx(150, abs=1)
