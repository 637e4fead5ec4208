"""Integration tests for the command-line interface."""

import json
import xml.etree.ElementTree as ET
from pathlib import Path

import pytest
from typer.testing import CliRunner

from graffitizer import __version__
from graffitizer.cli.app import app, build_options, parse_assignments
from graffitizer.core.sanitizer import SVG_NS
from graffitizer.exceptions import OptionsError, PresetNotFoundError

runner = CliRunner()


def rect_glyph(width: int) -> str:
    x = (200 - width) // 2
    return (
        f'<svg xmlns="{SVG_NS}" viewBox="0 0 200 200">'
        f'<rect x="{x}" y="40" width="{width}" height="120"/></svg>'
    )


@pytest.fixture
def glyph_dir(tmp_path: Path) -> Path:
    root = tmp_path / "glyphs"
    root.mkdir()
    for letter, width in {"h": 100, "i": 40, "a": 90, "v": 90}.items():
        (root / f"{letter}.svg").write_text(rect_glyph(width), encoding="utf-8")
    return root


class TestAssignments:
    """Tests for --set parsing and option building."""

    def test_parse_assignments(self):
        """Test dashes become underscores and values are kept as strings."""
        changes = parse_assignments(["stamp-width=60", " shine_enabled = true "])
        assert changes == {"stamp_width": "60", "shine_enabled": "true"}

    @pytest.mark.parametrize("assignment", ["stamp_width", "=5"])
    def test_invalid_assignment(self, assignment: str):
        """Test assignments need a key and an equals sign."""
        with pytest.raises(OptionsError, match="key=value"):
            parse_assignments([assignment])

    def test_build_options_from_preset(self):
        """Test overrides are applied on top of the preset and detach from it."""
        options = build_options("SLAP", ["stamp_width=60", "shadow-effect-enabled=false"])
        assert options.stamp_width == 60
        assert options.shadow_effect_enabled is False
        assert options.background_color == "#f00000"
        assert options.preset_id is None

    def test_build_options_plain_preset(self):
        """Test a preset without overrides keeps its id."""
        assert build_options("IGLOO", []).preset_id == "IGLOO"

    def test_build_options_unknown_preset(self):
        """Test unknown presets raise."""
        with pytest.raises(PresetNotFoundError):
            build_options("NOPE", [])


class TestRenderCommand:
    """Tests for the render command."""

    def test_render(self, glyph_dir: Path, tmp_path: Path):
        """Test rendering writes a parseable SVG document."""
        output = tmp_path / "hi.svg"
        result = runner.invoke(
            app, ["render", "Hi", "--glyphs", str(glyph_dir), "-o", str(output)]
        )

        assert result.exit_code == 0, result.output
        assert output.is_file()
        assert ET.parse(output).getroot().tag == f"{{{SVG_NS}}}svg"
        assert "Complete" in result.output

    def test_render_with_overrides(self, glyph_dir: Path, tmp_path: Path):
        """Test preset and --set values reach the written layers."""
        output = tmp_path / "slap.svg"
        result = runner.invoke(
            app,
            [
                "render",
                "hiha",
                "-g",
                str(glyph_dir),
                "--preset",
                "SLAP",
                "--set",
                "stamp-width=30",
                "-o",
                str(output),
                "--quiet",
            ],
        )
        assert result.exit_code == 0, result.output
        text = output.read_text(encoding="utf-8")
        assert 'stroke-width="30"' in text
        assert 'fill="#f00000"' in text

    def test_render_analytical_verbose(self, glyph_dir: Path, tmp_path: Path):
        """Test analytical mode with per-pair overlap output."""
        output = tmp_path / "av.svg"
        result = runner.invoke(
            app,
            ["render", "av", "-g", str(glyph_dir), "-m", "analytical", "-v", "-o", str(output)],
        )
        assert result.exit_code == 0, result.output
        assert "av" in result.output
        assert output.is_file()

    def test_render_missing_letter(self, glyph_dir: Path, tmp_path: Path):
        """Test missing letters are reported but do not fail the render."""
        output = tmp_path / "hz.svg"
        result = runner.invoke(app, ["render", "hz", "-g", str(glyph_dir), "-o", str(output)])
        assert result.exit_code == 0, result.output
        assert output.is_file()

    def test_render_with_rules_file(self, glyph_dir: Path, tmp_path: Path):
        """Test a rules file is loaded for rendering."""
        rules = tmp_path / "rules.json"
        rules.write_text(json.dumps({"lookup": {"h": {"i": 0.25}}}), encoding="utf-8")
        output = tmp_path / "hi.svg"
        result = runner.invoke(
            app, ["render", "hi", "-g", str(glyph_dir), "-r", str(rules), "-o", str(output)]
        )
        assert result.exit_code == 0, result.output

    def test_quiet_has_no_header(self, glyph_dir: Path, tmp_path: Path):
        """Test quiet mode prints no banner."""
        output = tmp_path / "hi.svg"
        result = runner.invoke(
            app, ["render", "hi", "-g", str(glyph_dir), "-o", str(output), "-q"]
        )
        assert result.exit_code == 0, result.output
        assert "Graffitizer" not in result.output

    @pytest.mark.parametrize(
        "args,message",
        [
            (["render", "hi", "-v", "-q"], "--verbose"),
            (["render", "hi", "--mode", "fuzzy"], "Invalid mode"),
            (["render", "!!!"], "Nothing to render"),
            (["render", "hi"], "glyph source"),
        ],
    )
    def test_render_usage_errors(self, args: list[str], message: str):
        """Test invalid invocations exit with code 1 and an explanation."""
        result = runner.invoke(app, args)
        assert result.exit_code == 1
        assert message in result.output

    def test_both_sources(self, glyph_dir: Path, tmp_path: Path):
        """Test a directory and a font cannot be combined."""
        result = runner.invoke(
            app, ["render", "hi", "-g", str(glyph_dir), "-f", str(tmp_path / "x.ttf")]
        )
        assert result.exit_code == 1
        assert "glyph source" in result.output

    def test_missing_font(self, tmp_path: Path):
        """Test a missing font file exits with code 1."""
        result = runner.invoke(app, ["render", "hi", "-f", str(tmp_path / "x.ttf")])
        assert result.exit_code == 1
        assert "not found" in result.output

    def test_missing_glyph_directory(self, tmp_path: Path):
        """Test a missing glyph directory exits with code 1."""
        result = runner.invoke(app, ["render", "hi", "-g", str(tmp_path / "nope")])
        assert result.exit_code == 1

    @pytest.mark.parametrize(
        "extra,message",
        [
            (["--preset", "NOPE"], "not found"),
            (["--set", "stamp_width"], "key=value"),
            (["--set", "sparkle=1"], "Unknown option"),
            (["--set", "fill_color=red"], "Invalid option"),
        ],
    )
    def test_option_errors(self, glyph_dir: Path, extra: list[str], message: str):
        """Test invalid presets and overrides exit with code 1."""
        result = runner.invoke(app, ["render", "hi", "-g", str(glyph_dir), *extra])
        assert result.exit_code == 1
        assert message in result.output

    def test_invalid_rules_file(self, glyph_dir: Path, tmp_path: Path):
        """Test a broken rules file exits with code 1."""
        rules = tmp_path / "rules.json"
        rules.write_text("[]", encoding="utf-8")
        result = runner.invoke(app, ["render", "hi", "-g", str(glyph_dir), "-r", str(rules)])
        assert result.exit_code == 1


class TestOtherCommands:
    """Tests for presets, build-lookup and --version."""

    def test_version(self):
        """Test --version prints the version."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_presets(self):
        """Test every preset is listed."""
        result = runner.invoke(app, ["presets"])
        assert result.exit_code == 0
        for name in ("CLASSIC", "SLAP", "IGLOO", "SUNKIST", "CONCRETE"):
            assert name in result.output

    def test_build_lookup(self, glyph_dir: Path, tmp_path: Path):
        """Test the lookup table covers every ordered pair and feeds render."""
        rules = tmp_path / "out" / "rules.json"
        result = runner.invoke(app, ["build-lookup", "-g", str(glyph_dir), "-o", str(rules)])
        assert result.exit_code == 0, result.output

        data = json.loads(rules.read_text(encoding="utf-8"))
        assert set(data["lookup"]) == {"a", "h", "i", "v"}
        assert all(len(row) == 4 for row in data["lookup"].values())
        assert data["exceptions"]["a"] == ["v", "w", "y"]

        output = tmp_path / "hi.svg"
        result = runner.invoke(
            app, ["render", "hi", "-g", str(glyph_dir), "-r", str(rules), "-o", str(output)]
        )
        assert result.exit_code == 0, result.output

    def test_build_lookup_skips_broken_glyphs(self, glyph_dir: Path, tmp_path: Path):
        """Test unusable glyphs are left out of the table."""
        (glyph_dir / "i.svg").write_text("<svg/>", encoding="utf-8")
        rules = tmp_path / "rules.json"
        result = runner.invoke(app, ["build-lookup", "-g", str(glyph_dir), "-o", str(rules)])
        assert result.exit_code == 0, result.output
        assert "skipped" in result.output
        assert "i" not in json.loads(rules.read_text(encoding="utf-8"))["lookup"]

    def test_build_lookup_empty_source(self, tmp_path: Path):
        """Test a source without glyphs exits with code 1."""
        empty = tmp_path / "empty"
        empty.mkdir()
        result = runner.invoke(
            app, ["build-lookup", "-g", str(empty), "-o", str(tmp_path / "rules.json")]
        )
        assert result.exit_code == 1
        assert "no usable glyphs" in result.output
