"""Domain models for graffitizer.

This module contains the models describing glyphs, overlap rules,
customization options and the layers produced for rendering. All models are:

- Immutable (frozen dataclasses or frozen pydantic models)
- Free of rendering or I/O concerns
- Safe to share between the renderer and the history manager

Key classes:
- ProcessedGlyph: A glyph with its ink bounds and column occupancy
- RuleTables: Overlap rules, exception pairs, rotations and lookup values
- CustomizationOptions: Effect toggles, colors and sizes
- StylePreset: A named options snapshot
- Layer: One positioned, sanitized glyph redraw
"""

from graffitizer.domain.contour import Contour, Point, PointType
from graffitizer.domain.glyph import ColumnRange, GlyphBounds, GlyphContext, ProcessedGlyph
from graffitizer.domain.layer import Layer, LayerKind, Transform
from graffitizer.domain.options import CustomizationOptions
from graffitizer.domain.presets import DEFAULT_OPTIONS, STYLE_PRESETS, StylePreset, get_preset
from graffitizer.domain.rules import (
    OverlapRule,
    RotationRule,
    RuleTables,
    default_rule_tables,
    normalize_letter,
)

__all__: list[str] = [
    # Enums
    "PointType",
    "LayerKind",
    # Geometry
    "Point",
    "Contour",
    # Glyphs
    "ColumnRange",
    "GlyphBounds",
    "GlyphContext",
    "ProcessedGlyph",
    # Rules
    "OverlapRule",
    "RotationRule",
    "RuleTables",
    "default_rule_tables",
    "normalize_letter",
    # Options
    "CustomizationOptions",
    "StylePreset",
    "STYLE_PRESETS",
    "DEFAULT_OPTIONS",
    "get_preset",
    # Rendering
    "Layer",
    "Transform",
]
