"""Customization options controlling the effect layers.

CustomizationOptions is an immutable pydantic model. Every edit produces a new
snapshot through ``merged()``, so history entries and renderers never share a
mutable object with the editor.
"""

from collections.abc import Mapping
from typing import Any, ClassVar

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    field_validator,
)

from graffitizer.exceptions import OptionsError

HEX_COLOR_PATTERN = r"^#(?:[0-9a-fA-F]{3}|[0-9a-fA-F]{6})$"


class CustomizationOptions(BaseModel):
    """Effect toggles, colors and sizes for one rendering.

    Numeric fields are clamped into their valid range instead of rejected, so
    a slider that overshoots still produces a usable snapshot. Field defaults
    reproduce the CLASSIC look.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", allow_inf_nan=False)

    # Valid (min, max) of each numeric field
    NUMERIC_RANGES: ClassVar[dict[str, tuple[float, float]]] = {
        "stroke_width": (0.0, 200.0),
        "stamp_width": (25.0, 200.0),
        "shield_width": (1.0, 250.0),
        "shine_opacity": (0.0, 1.0),
        "shadow_offset_x": (-30.0, 70.0),
        "shadow_offset_y": (-50.0, 50.0),
    }

    background_enabled: bool = False
    background_color: str = Field(default="#ffffff", pattern=HEX_COLOR_PATTERN)

    fill_enabled: bool = True
    fill_color: str = Field(default="#ffffff", pattern=HEX_COLOR_PATTERN)

    stroke_enabled: bool = False
    stroke_color: str = Field(default="#ff0000", pattern=HEX_COLOR_PATTERN)
    stroke_width: float = 45.0

    stamp_enabled: bool = True
    stamp_color: str = Field(default="#000000", pattern=HEX_COLOR_PATTERN)
    stamp_width: float = 80.0

    shine_enabled: bool = False
    shine_color: str = Field(default="#ffffff", pattern=HEX_COLOR_PATTERN)
    shine_opacity: float = 1.0

    shadow_effect_enabled: bool = True
    shadow_offset_x: float = 4.0
    shadow_offset_y: float = 8.0

    shield_enabled: bool = True
    shield_color: str = Field(default="#22c0f2", pattern=HEX_COLOR_PATTERN)
    shield_width: float = 60.0

    preset_id: str | None = Field(
        default=None,
        description="Preset the options were last loaded from; bookkeeping only",
    )

    @field_validator(
        "stroke_width",
        "stamp_width",
        "shield_width",
        "shine_opacity",
        "shadow_offset_x",
        "shadow_offset_y",
        mode="after",
    )
    @classmethod
    def _clamp(cls, value: float, info: ValidationInfo) -> float:
        low, high = cls.NUMERIC_RANGES[info.field_name]
        return min(max(value, low), high)

    @field_validator(
        "background_color",
        "fill_color",
        "stroke_color",
        "stamp_color",
        "shine_color",
        "shield_color",
        mode="after",
    )
    @classmethod
    def _lower_color(cls, value: str) -> str:
        return value.lower()

    def merged(self, changes: Mapping[str, Any]) -> "CustomizationOptions":
        """Return a new snapshot with the given fields replaced.

        Args:
            changes: Field name to new value

        Returns:
            Validated copy of these options with the changes applied

        Raises:
            OptionsError: If a key is unknown or a value fails validation
        """
        unknown = sorted(set(changes) - set(type(self).model_fields))
        if unknown:
            raise OptionsError(f"Unknown option(s): {', '.join(unknown)}")

        try:
            return type(self).model_validate({**self.model_dump(), **changes})
        except ValidationError as e:
            raise OptionsError(f"Invalid option value: {e}") from e

    def visual_key(self) -> tuple[Any, ...]:
        """Values of every field that affects rendered output.

        Bookkeeping fields such as ``preset_id`` are excluded, so two
        snapshots that differ only there share a key.
        """
        return tuple(
            getattr(self, name) for name in type(self).model_fields if name != "preset_id"
        )
