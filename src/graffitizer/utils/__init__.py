"""Utility functions for graffitizer.

This module provides:

- Logging setup and configuration
- Render statistics and the per-glyph error reporter
"""

from graffitizer.utils.logging import (
    RenderLogger,
    RenderStats,
    configure_logging,
    get_logger,
)

__all__ = [
    "RenderLogger",
    "RenderStats",
    "configure_logging",
    "get_logger",
]
