"""Named style presets.

Every preset starts from the same base settings and overrides a handful of
fields. CLASSIC doubles as the default look.
"""

from dataclasses import dataclass
from typing import Any

from graffitizer.domain.options import CustomizationOptions
from graffitizer.exceptions import PresetNotFoundError


@dataclass(frozen=True)
class StylePreset:
    """A named set of customization options.

    Attributes:
        id: Stable identifier, also stored as ``preset_id`` on applied options
        name: Display name
        options: Complete options snapshot the preset applies
    """

    id: str
    name: str
    options: CustomizationOptions

    def changes(self) -> dict[str, Any]:
        """Option fields to merge when applying this preset."""
        return self.options.model_dump(exclude={"preset_id"})


_BASE_SETTINGS: dict[str, Any] = {
    "background_enabled": False,
    "background_color": "#ffffff",
    "fill_enabled": True,
    "fill_color": "#ffffff",
    "stroke_enabled": False,
    "stroke_color": "#ff0000",
    "stroke_width": 45,
    "stamp_enabled": True,
    "stamp_color": "#000000",
    "stamp_width": 60,
    "shine_enabled": False,
    "shine_color": "#ffffff",
    "shine_opacity": 1,
    "shadow_effect_enabled": False,
    "shadow_offset_x": 0,
    "shadow_offset_y": 0,
    "shield_enabled": True,
    "shield_color": "#22c0f2",
    "shield_width": 40,
}


def _preset(preset_id: str, **overrides: Any) -> StylePreset:
    options = CustomizationOptions(**{**_BASE_SETTINGS, **overrides, "preset_id": preset_id})
    return StylePreset(id=preset_id, name=preset_id, options=options)


STYLE_PRESETS: tuple[StylePreset, ...] = (
    _preset(
        "CLASSIC",
        stamp_width=80,
        shadow_effect_enabled=True,
        shadow_offset_x=4,
        shadow_offset_y=8,
        shield_width=60,
    ),
    _preset(
        "SLAP",
        background_enabled=True,
        background_color="#f00000",
        stamp_width=50,
        shield_color="#ffffff",
        shield_width=50,
    ),
    _preset(
        "IGLOO",
        background_enabled=True,
        background_color="#0a2e52",
        stamp_color="#00aeff",
        stamp_width=40,
        shield_color="#002171",
        shield_width=15,
    ),
    _preset(
        "SUNKIST",
        background_enabled=True,
        background_color="#ffeb3b",
        fill_color="#ff430a",
        stamp_color="#fff176",
        stamp_width=60,
        shield_color="#ff430a",
        shield_width=15,
    ),
    _preset(
        "CONCRETE",
        background_enabled=True,
        background_color="#212121",
        fill_color="#e0e0e0",
        stamp_width=40,
        shield_color="#f44336",
        shield_width=30,
        shadow_effect_enabled=True,
        shadow_offset_x=-12,
        shadow_offset_y=12,
    ),
)


def get_preset(preset_id: str) -> StylePreset:
    """Look up a preset by identifier (case-insensitive).

    Raises:
        PresetNotFoundError: If no preset has this identifier
    """
    wanted = preset_id.upper()
    for preset in STYLE_PRESETS:
        if preset.id == wanted:
            return preset
    raise PresetNotFoundError(preset_id)


DEFAULT_OPTIONS: CustomizationOptions = get_preset("CLASSIC").options
