"""Configuration settings for Graffitizer."""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, model_validator


class OverlapMode(str, Enum):
    """How adjacent glyph overlap is resolved."""

    LOOKUP = "lookup"
    ANALYTICAL = "analytical"


class OverlapConfig(BaseModel):
    """Configuration for the overlap resolver."""

    mode: OverlapMode = Field(
        default=OverlapMode.LOOKUP,
        description="Precomputed pair table with rule fallback, or column analysis",
    )
    exception_dampening: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Multiplier applied to the overlap target of known problem pairs",
    )
    analytical_step: float = Field(
        default=0.005,
        gt=0.0,
        le=0.1,
        description="Overlap decrement between analytical candidates",
    )
    column_step: int = Field(
        default=2,
        ge=1,
        le=10,
        description="Sample every Nth column when testing for collisions",
    )
    density_threshold: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Columns with ink density at or below this never count as colliding",
    )
    max_collision_ratio: float = Field(
        default=0.25,
        ge=0.0,
        le=1.0,
        description="Largest share of colliding columns an accepted overlap may have",
    )


class LayoutConfig(BaseModel):
    """Configuration for glyph processing and positioning."""

    glyph_size: int = Field(
        default=200,
        ge=16,
        le=2000,
        description="Side of the square box every glyph is normalized into",
    )
    space_width: float = Field(
        default=70.0,
        ge=0.0,
        description="Horizontal space reserved by a space character",
    )
    target_width: float = Field(
        default=1000.0,
        gt=0.0,
        description="Content width above which the container scale drops below 1",
    )
    position_tolerance: float = Field(
        default=0.1,
        ge=0.0,
        description="Position jitter ignored when deciding whether to re-composite",
    )
    flatten_tolerance: float = Field(
        default=0.5,
        gt=0.0,
        le=10.0,
        description="Maximum deviation when flattening curves for occupancy analysis",
    )


class ViewportConfig(BaseModel):
    """Viewport and presentation-scale configuration.

    The fit coefficient is a step function of the number of visible letters:
    short words get ``short_base + short_per_letter * n``, medium words a flat
    ``medium_coefficient`` and longer text ``long_coefficient``.
    """

    width: float = Field(default=800.0, gt=0.0, description="Viewport width")
    height: float = Field(default=450.0, gt=0.0, description="Viewport height")
    short_word_max_letters: int = Field(default=4, ge=0)
    short_base: float = Field(default=0.5, gt=0.0, le=2.0)
    short_per_letter: float = Field(default=0.03, ge=0.0, le=1.0)
    medium_word_max_letters: int = Field(default=8, ge=0)
    medium_coefficient: float = Field(default=0.7, gt=0.0, le=2.0)
    long_coefficient: float = Field(default=0.7, gt=0.0, le=2.0)

    @model_validator(mode="after")
    def _check_tiers(self) -> "ViewportConfig":
        if self.medium_word_max_letters < self.short_word_max_letters:
            raise ValueError("medium_word_max_letters must not be below short_word_max_letters")
        return self


class HistoryConfig(BaseModel):
    """Configuration for the customization history."""

    max_entries: int | None = Field(
        default=100,
        ge=2,
        description="Oldest entries are dropped beyond this length (None = unlimited)",
    )
    record_initial_state: bool = Field(
        default=True,
        description="Seed the history with the starting state so the first edit can be undone",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class GraffitizerSettings(BaseModel):
    """Main application settings."""

    overlap: OverlapConfig = Field(default_factory=OverlapConfig)
    layout: LayoutConfig = Field(default_factory=LayoutConfig)
    viewport: ViewportConfig = Field(default_factory=ViewportConfig)
    history: HistoryConfig = Field(default_factory=HistoryConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> GraffitizerSettings:
    """Get default application settings."""
    return GraffitizerSettings()
