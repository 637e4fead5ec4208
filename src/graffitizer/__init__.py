"""Graffitizer - Render text as layered graffiti-style vector compositions.

Graffitizer maps each character of a short string to a pre-authored glyph
outline, packs the glyphs with per-pair overlap, and composites optional
effect layers (shield, shadow, stamp outline, fill, shine) into a single SVG.

Example:
    $ graffitizer render "hello" --glyphs ./glyphs/straight

This will create HELLO_GRAFFITI.svg using the CLASSIC style preset.
"""

__version__ = "0.1.0"
__author__ = "Graffitizer Contributors"

__all__ = ["__author__", "__version__"]
