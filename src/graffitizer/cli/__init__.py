"""Command-line interface for graffitizer.

This module provides the CLI using Typer with rich output for
user-friendly feedback.

Key features:
- Rendering text to standalone SVG files
- Style presets and per-option overrides
- Precomputing overlap lookup tables for a glyph set
- Verbose/quiet output modes
"""

from graffitizer.cli.app import cli, main

__all__ = ["cli", "main"]
