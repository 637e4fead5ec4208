"""Configuration management for graffitizer.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- OverlapConfig: Overlap resolution mode and analytical tuning
- LayoutConfig: Glyph normalization and positioning settings
- ViewportConfig: Presentation viewport and fit coefficients
- HistoryConfig: Undo/redo history settings
- LoggingConfig: Logging settings
- GraffitizerSettings: Main application settings
"""

from graffitizer.config.settings import (
    GraffitizerSettings,
    HistoryConfig,
    LayoutConfig,
    LoggingConfig,
    OverlapConfig,
    OverlapMode,
    ViewportConfig,
    get_default_settings,
)

__all__ = [
    "GraffitizerSettings",
    "HistoryConfig",
    "LayoutConfig",
    "LoggingConfig",
    "OverlapConfig",
    "OverlapMode",
    "ViewportConfig",
    "get_default_settings",
]
