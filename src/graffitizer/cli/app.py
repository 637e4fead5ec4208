"""CLI application entry point for graffitizer.

This module provides the main CLI interface using Typer.
"""

from pathlib import Path
from typing import Annotated, Any

import typer

from graffitizer import __version__
from graffitizer.cli.output import (
    console,
    print_error,
    print_glyph_problems,
    print_header,
    print_layout_info,
    print_lookup_summary,
    print_overlaps,
    print_presets,
    print_source_info,
    print_step,
    print_success,
)
from graffitizer.config import (
    GraffitizerSettings,
    LoggingConfig,
    OverlapConfig,
    OverlapMode,
    ViewportConfig,
)
from graffitizer.core.overlap import build_lookup_table
from graffitizer.core.pipeline import GraffitiRenderer, normalize_text
from graffitizer.domain import (
    DEFAULT_OPTIONS,
    STYLE_PRESETS,
    CustomizationOptions,
    GlyphContext,
    ProcessedGlyph,
    RuleTables,
    default_rule_tables,
    get_preset,
)
from graffitizer.exceptions import GlyphError, GraffitizerError, OptionsError
from graffitizer.io import (
    DirectoryGlyphSource,
    FontGlyphSource,
    GlyphSource,
    SvgWriter,
    load_rule_tables,
    process_markup,
    save_rule_tables,
)
from graffitizer.utils.logging import RenderLogger, configure_logging

# Create the Typer app
app = typer.Typer(
    name="graffitizer",
    help="Render text as layered graffiti-style SVG artwork.",
    add_completion=False,
    no_args_is_help=True,
)

GlyphsOption = Annotated[
    Path | None,
    typer.Option(
        "--glyphs",
        "-g",
        help="Directory of glyph SVG files (<letter>.svg, <letter>2.svg, first/, last/)",
    ),
]
FontOption = Annotated[
    Path | None,
    typer.Option(
        "--font",
        "-f",
        help="TTF/OTF font to take glyph outlines from",
    ),
]
RulesOption = Annotated[
    Path | None,
    typer.Option(
        "--rules",
        "-r",
        help="JSON rule-table file (overlap rules, rotations, lookup values)",
    ),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Graffitizer[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Render text as layered graffiti-style SVG artwork."""


def parse_assignments(assignments: list[str]) -> dict[str, Any]:
    """Turn ``key=value`` strings into option changes.

    Dashes in keys are accepted in place of underscores. Values stay strings;
    CustomizationOptions converts them to the field types.

    Raises:
        OptionsError: If an assignment has no ``=`` or an empty key
    """
    changes: dict[str, Any] = {}
    for assignment in assignments:
        key, sep, value = assignment.partition("=")
        key = key.strip().replace("-", "_")
        if not sep or not key:
            raise OptionsError(f"Expected key=value, got '{assignment}'")
        changes[key] = value.strip()
    return changes


def build_options(preset: str | None, assignments: list[str]) -> CustomizationOptions:
    """Options from an optional preset with ``--set`` overrides applied."""
    options = get_preset(preset).options if preset else DEFAULT_OPTIONS
    changes = parse_assignments(assignments)
    if changes:
        # Explicit overrides detach the options from the preset
        options = options.merged({**changes, "preset_id": None})
    return options


def _open_source(glyphs: Path | None, font: Path | None, glyph_size: int) -> GlyphSource:
    """Create the glyph source selected on the command line."""
    if (glyphs is None) == (font is None):
        print_error(
            "Exactly one glyph source is required",
            details="Pass either --glyphs DIR or --font FILE.",
        )
        raise typer.Exit(code=1)

    if glyphs is not None:
        return DirectoryGlyphSource(glyphs)

    if font is None or not font.is_file():
        raise FileNotFoundError(f"Font file not found: {font}")
    source = FontGlyphSource(font, size=glyph_size)
    source.load()
    return source


def _close_source(source: GlyphSource | None) -> None:
    if isinstance(source, FontGlyphSource):
        source.close()


def _load_tables(rules: Path | None) -> RuleTables:
    return load_rule_tables(rules) if rules is not None else default_rule_tables()


@app.command()
def render(
    text: Annotated[
        str,
        typer.Argument(
            help="Text to render (letters, digits and spaces)",
            show_default=False,
        ),
    ],
    glyphs: GlyphsOption = None,
    font: FontOption = None,
    preset: Annotated[
        str | None,
        typer.Option(
            "--preset",
            "-p",
            help="Style preset (CLASSIC|SLAP|IGLOO|SUNKIST|CONCRETE)",
        ),
    ] = None,
    assignments: Annotated[
        list[str] | None,
        typer.Option(
            "--set",
            "-s",
            help="Override a customization option, e.g. --set stamp_width=60 (repeatable)",
        ),
    ] = None,
    mode: Annotated[
        str,
        typer.Option(
            "--mode",
            "-m",
            help="Overlap mode (lookup|analytical)",
        ),
    ] = "lookup",
    rules: RulesOption = None,
    width: Annotated[
        float,
        typer.Option("--width", help="Viewport width", min=1.0),
    ] = 800.0,
    height: Annotated[
        float,
        typer.Option("--height", help="Viewport height", min=1.0),
    ] = 450.0,
    output: Annotated[
        Path | None,
        typer.Option(
            "--output",
            "-o",
            help="Output path (default: {TEXT}_GRAFFITI.svg)",
        ),
    ] = None,
    log_file: Annotated[
        Path | None,
        typer.Option(
            "--log-file",
            help="Write detailed logs to file",
        ),
    ] = None,
    log_level: Annotated[
        str,
        typer.Option(
            "--log-level",
            help="Logging level (DEBUG|INFO|WARNING|ERROR)",
        ),
    ] = "WARNING",
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Verbose console output",
        ),
    ] = False,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
) -> None:
    """Render TEXT to a standalone SVG file.

    Each character is drawn from the glyph source, glyphs are packed with
    per-pair overlap and the enabled effect layers are composited around them.

    Example:
        graffitizer render "hello" --glyphs ./glyphs --preset SLAP

    This will create HELLO_GRAFFITI.svg in the current directory.
    """
    # Validate mutually exclusive options
    if verbose and quiet:
        print_error("Cannot use --verbose and --quiet together")
        raise typer.Exit(code=1)

    try:
        overlap_mode = OverlapMode(mode.lower())
    except ValueError:
        print_error(f"Invalid mode: {mode}", details="Valid values: lookup, analytical")
        raise typer.Exit(code=1)

    normalized = normalize_text(text)
    if not normalized:
        print_error(
            "Nothing to render",
            details="The text must contain at least one letter, digit or space.",
        )
        raise typer.Exit(code=1)

    settings = GraffitizerSettings(
        overlap=OverlapConfig(mode=overlap_mode),
        viewport=ViewportConfig(width=width, height=height),
        logging=LoggingConfig(
            log_file=log_file,
            log_level=log_level if not quiet else "WARNING",
        ),
    )
    configure_logging(
        log_file=settings.logging.log_file,
        console_level=settings.logging.log_level,
        file_level=settings.logging.file_log_level,
        quiet=quiet,
    )

    if not quiet:
        print_header(__version__)

    source: GlyphSource | None = None
    try:
        options = build_options(preset, assignments or [])
        tables = _load_tables(rules)

        if not quiet:
            print_step("Loading glyphs")
        source = _open_source(glyphs, font, settings.layout.glyph_size)
        if not quiet:
            print_source_info(
                source=str(glyphs or font),
                source_type="directory" if glyphs is not None else "font",
                letter_count=len(source.available_letters()),
            )
            print_step("Rendering")

        reporter = RenderLogger()
        renderer = GraffitiRenderer(source, settings, tables, reporter)
        result = renderer.render(normalized, options)

        if not quiet:
            inflated = result.inflated_bounds
            print_layout_info(
                letter_count=result.letter_count,
                width=inflated.width,
                height=inflated.height,
                fit_scale=result.fit_scale,
                mode=overlap_mode.value,
            )
            if verbose:
                print_overlaps(result.text, list(result.layout.overlaps))
            if reporter.stats.errors:
                print_glyph_problems(reporter.stats)

        writer = SvgWriter(width, height)
        path = writer.write(result, Path("."), output)

        if not quiet:
            print_success(
                output_path=str(path),
                file_size=_format_file_size(path),
                stats=reporter.stats,
                layers=len(result.layers),
            )

    except FileNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except GraffitizerError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except typer.Exit:
        # Re-raise typer.Exit to allow clean exits
        raise
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)
    finally:
        _close_source(source)


@app.command()
def presets() -> None:
    """List the built-in style presets."""
    print_presets(list(STYLE_PRESETS))


@app.command("build-lookup")
def build_lookup(
    output: Annotated[
        Path,
        typer.Option(
            "--output",
            "-o",
            help="Rule-table file to write",
        ),
    ],
    glyphs: GlyphsOption = None,
    font: FontOption = None,
    rules: RulesOption = None,
    precision: Annotated[
        int,
        typer.Option("--precision", help="Decimal places kept per value", min=1, max=6),
    ] = 3,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Minimal console output",
        ),
    ] = False,
) -> None:
    """Precompute the pairwise overlap table for a glyph set.

    Every ordered pair of available letters is measured with the analytical
    strategy and the result is saved with the rule tables, ready for
    ``render --mode lookup --rules FILE``.
    """
    settings = GraffitizerSettings()
    source: GlyphSource | None = None
    try:
        tables = _load_tables(rules)
        source = _open_source(glyphs, font, settings.layout.glyph_size)

        if not quiet:
            print_step("Measuring glyphs")

        processed = _process_available(source, settings)
        if not processed:
            print_error("The glyph source has no usable glyphs")
            raise typer.Exit(code=1)

        lookup = build_lookup_table(processed, tables, settings.overlap, precision)
        path = save_rule_tables(tables.with_lookup(lookup), output)

        if not quiet:
            pairs = sum(len(row) for row in lookup.values())
            print_lookup_summary(str(path), len(processed), pairs)

    except FileNotFoundError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except GraffitizerError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except typer.Exit:
        raise
    except Exception as e:
        print_error(f"Unexpected error: {e}")
        raise typer.Exit(code=1)
    finally:
        _close_source(source)


def _process_available(
    source: GlyphSource, settings: GraffitizerSettings
) -> dict[str, ProcessedGlyph]:
    """Process the standard variant of every letter the source provides.

    Letters whose markup cannot be processed are left out of the table.
    """
    processed: dict[str, ProcessedGlyph] = {}
    for letter in source.available_letters():
        try:
            markup = source.fetch_glyph(letter, GlyphContext())
            processed[letter] = process_markup(markup, letter, settings.layout)
        except GlyphError as e:
            console.print(f"  [yellow]skipped {letter}[/yellow]: {e}")
    return processed


def _format_file_size(path: Path) -> str:
    """Format file size in human-readable form.

    Args:
        path: Path to file

    Returns:
        Human-readable file size (e.g., "12 KB")
    """
    try:
        size_bytes = path.stat().st_size
    except OSError:
        return "unknown"
    if size_bytes < 1024:
        return f"{size_bytes} B"
    elif size_bytes < 1024 * 1024:
        return f"{size_bytes / 1024:.0f} KB"
    else:
        return f"{size_bytes / (1024 * 1024):.1f} MB"


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
