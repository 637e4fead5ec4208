"""Glyph and document I/O for graffitizer.

This module handles everything that crosses the process boundary: reading
glyph markup from directories or fonts, turning markup into processed
glyphs, loading and saving rule tables, and writing finished SVG documents.

Key classes:
- DirectoryGlyphSource: Glyph SVG files in a directory
- FontGlyphSource: Glyph outlines of a TTF/OTF font
- SvgWriter: Standalone SVG document output

Key functions:
- process_markup: Ink bounds and column occupancy of glyph markup
- load_rule_tables / save_rule_tables: JSON rule-table files
"""

from graffitizer.io.glyph_source import DirectoryGlyphSource, FontGlyphSource, GlyphSource
from graffitizer.io.processing import (
    create_placeholder_markup,
    create_space_glyph,
    process_markup,
)
from graffitizer.io.rules_file import load_rule_tables, save_rule_tables
from graffitizer.io.writer import SvgWriter, get_output_path

__all__ = [
    "DirectoryGlyphSource",
    "FontGlyphSource",
    "GlyphSource",
    "SvgWriter",
    "create_placeholder_markup",
    "create_space_glyph",
    "get_output_path",
    "load_rule_tables",
    "process_markup",
    "save_rule_tables",
]
