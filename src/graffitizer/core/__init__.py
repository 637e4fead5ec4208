"""Core rendering algorithms for graffitizer.

This module contains the algorithms for:

- Geometry operations (curve flattening, scanline ink spans)
- Overlap resolution between adjacent glyphs (lookup or analytical)
- Layout (positions, effect-inflated bounds, viewport fit)
- Markup sanitization and layer compositing
- Customization history (discrete and continuous edits, undo/redo)

Everything except the history manager is stateless and pure. The render
pipeline that combines these with glyph I/O lives in
``graffitizer.core.pipeline``.

Key classes:
- OverlapStrategy: LookupStrategy and AnalyticalStrategy
- MarkupSanitizer: Whitelist SVG sanitizer
- LayerCompositor: Effect layers for positioned glyphs
- HistoryManager: Undo/redo state machine for customization options
"""

from graffitizer.core.compositor import LayerCompositor, MemoizedCompositor
from graffitizer.core.geometry import bezier_flatten, flatten_contour, ink_spans
from graffitizer.core.history import (
    CommitDrag,
    DiscreteUpdate,
    DraggingUpdate,
    HistoryEntry,
    HistoryManager,
    HistoryState,
    OptionsChange,
    TextUpdate,
)
from graffitizer.core.layout import (
    BoundingBox,
    LayoutResult,
    compute_layout,
    effect_inflated_bounds,
    presentation_fit_scale,
    scale_coefficient,
)
from graffitizer.core.overlap import (
    AnalyticalStrategy,
    LookupStrategy,
    OverlapStrategy,
    build_lookup_table,
    create_strategy,
    rotation_adjustment,
    rule_based_overlap,
)
from graffitizer.core.sanitizer import EMPTY_PLACEHOLDER, MarkupSanitizer

__all__ = [
    # Overlap
    "AnalyticalStrategy",
    "LookupStrategy",
    "OverlapStrategy",
    "build_lookup_table",
    "create_strategy",
    "rotation_adjustment",
    "rule_based_overlap",
    # Layout
    "BoundingBox",
    "LayoutResult",
    "compute_layout",
    "effect_inflated_bounds",
    "presentation_fit_scale",
    "scale_coefficient",
    # Compositing
    "EMPTY_PLACEHOLDER",
    "LayerCompositor",
    "MarkupSanitizer",
    "MemoizedCompositor",
    # History
    "CommitDrag",
    "DiscreteUpdate",
    "DraggingUpdate",
    "HistoryEntry",
    "HistoryManager",
    "HistoryState",
    "OptionsChange",
    "TextUpdate",
    # Geometry
    "bezier_flatten",
    "flatten_contour",
    "ink_spans",
]
