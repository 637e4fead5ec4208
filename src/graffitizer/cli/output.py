"""Rich console output helpers for the CLI.

This module provides user-friendly console output using Rich library
with tables, step indicators and formatted messages.
"""

from rich.console import Console
from rich.table import Table
from rich.text import Text

from graffitizer.domain import StylePreset
from graffitizer.utils.logging import RenderStats

console = Console()

# Unicode symbols for consistent visual language
SYM_STEP = "▸"  # Step indicator
SYM_OK = "✓"  # Success
SYM_ERR = "✗"  # Error
SYM_DOT = "·"  # Separator/secondary info


def print_header(version: str) -> None:
    """Print application header.

    Args:
        version: Application version string
    """
    console.print(f"\n[bold]Graffitizer[/bold] v{version}")
    console.print("─" * 44)


def print_step(message: str) -> None:
    """Print a processing step indicator.

    Args:
        message: Step description message
    """
    console.print(f"\n{SYM_STEP} {message}")


def print_source_info(source: str, source_type: str, letter_count: int) -> None:
    """Print glyph source information.

    Args:
        source: Path to the glyph directory or font
        source_type: "directory" or "font"
        letter_count: Number of supported characters the source provides
    """
    # Use Text to safely handle paths with special characters
    line = Text("  ")
    line.append(source)
    line.append(f" ({source_type})")
    console.print(line)
    console.print(f"  {letter_count} letters available")


def print_layout_info(
    letter_count: int,
    width: float,
    height: float,
    fit_scale: float,
    mode: str,
) -> None:
    """Print layout summary.

    Args:
        letter_count: Visible letters rendered
        width: Effect-inflated content width
        height: Effect-inflated content height
        fit_scale: Presentation scale applied to the content
        mode: Overlap mode used
    """
    console.print(
        f"  {letter_count} letters {SYM_DOT} {width:.0f}×{height:.0f} "
        f"{SYM_DOT} scale {fit_scale:.3f} {SYM_DOT} {mode} overlap"
    )


def print_overlaps(letters: str, overlaps: list[float]) -> None:
    """Print the overlap chosen for each adjacent pair (verbose mode).

    ``overlaps[i]`` belongs to the pair ending at ``letters[i]``; the first
    entry has no pair.
    """
    for index in range(1, min(len(letters), len(overlaps))):
        pair = f"{letters[index - 1]}{letters[index]}".replace(" ", "␣")
        console.print(f"  {pair}  {overlaps[index]:.3f}")


def _format_time(seconds: float) -> str:
    """Format seconds into human-readable time string."""
    if seconds < 1:
        return f"{seconds * 1000:.0f}ms"
    elif seconds < 60:
        return f"{seconds:.1f}s"
    else:
        mins = int(seconds // 60)
        secs = seconds % 60
        return f"{mins}m {secs:.1f}s"


def print_success(output_path: str, file_size: str, stats: RenderStats, layers: int) -> None:
    """Print success message with summary.

    Args:
        output_path: Path to output file
        file_size: Human-readable file size string
        stats: Statistics of the render
        layers: Number of layers written
    """
    console.print(
        f"\n[bold green]{SYM_OK} Complete[/bold green] in {_format_time(stats.duration_seconds)}"
    )

    line = Text("  ")
    line.append(output_path, style="bold")
    line.append(f" ({file_size})")
    console.print(line)

    problems = stats.placeholder_count + stats.rejected_markup_count
    problem_style = "red" if problems > 0 else "green"
    console.print(
        f"  {stats.glyph_count} glyphs {SYM_DOT} {layers} layers {SYM_DOT} "
        f"[{problem_style}]{stats.placeholder_count} placeholders[/{problem_style}]"
    )


def print_glyph_problems(stats: RenderStats) -> None:
    """List characters that were drawn as placeholders or had markup rejected."""
    for letter, reason in stats.errors:
        line = Text(f"  {SYM_ERR} {letter}: ", style="yellow")
        line.append(reason)
        console.print(line)


def print_presets(presets: list[StylePreset]) -> None:
    """Print a table of style presets."""
    table = Table(show_header=True, header_style="bold", box=None, pad_edge=False)
    table.add_column("Preset")
    table.add_column("Fill")
    table.add_column("Stamp")
    table.add_column("Shield")
    table.add_column("Shadow")

    for preset in presets:
        options = preset.options
        fill = options.fill_color if options.fill_enabled else "-"
        stamp = f"{options.stamp_color} {options.stamp_width:g}" if options.stamp_enabled else "-"
        shield = (
            f"{options.shield_color} {options.shield_width:g}" if options.shield_enabled else "-"
        )
        shadow = (
            f"{options.shadow_offset_x:g},{options.shadow_offset_y:g}"
            if options.shadow_effect_enabled
            else "-"
        )
        table.add_row(preset.id, fill, stamp, shield, shadow)

    console.print(table)


def print_lookup_summary(output_path: str, letters: int, pairs: int) -> None:
    """Print the result of building a lookup table."""
    console.print(f"\n[bold green]{SYM_OK} Lookup table written[/bold green]")
    line = Text("  ")
    line.append(output_path, style="bold")
    console.print(line)
    console.print(f"  {letters} letters {SYM_DOT} {pairs} pairs")


def print_error(message: str, details: str | None = None) -> None:
    """Print error message.

    Args:
        message: Main error message
        details: Optional detailed error information
    """
    # Messages may quote user input, so they are appended as plain text
    line = Text.from_markup(f"\n[bold red]{SYM_ERR} Error:[/bold red] ")
    line.append(message)
    console.print(line)
    if details:
        console.print(Text(f"  {details}"))
