"""Glyph sources.

A glyph source maps a character and its positional context to raw SVG
markup. Two sources are provided:

- DirectoryGlyphSource: a directory of hand-drawn SVG files
- FontGlyphSource: outlines of a TTF/OTF font rendered to SVG paths

Directory layout::

    glyphs/
      a.svg          standard drawing
      a2.svg         alternate drawing (optional)
      first/a.svg    drawing used at the start of the text (optional)
      last/a.svg     drawing used at the end of the text (optional)
"""

import string
from pathlib import Path
from typing import Protocol, runtime_checkable

from fontTools.misc.transform import Identity
from fontTools.pens.svgPathPen import SVGPathPen
from fontTools.pens.transformPen import TransformPen
from fontTools.ttLib import TTFont

from graffitizer.core.sanitizer import SVG_NS
from graffitizer.domain import GlyphContext, normalize_letter
from graffitizer.exceptions import GlyphNotFoundError

SUPPORTED_CHARACTERS = string.ascii_lowercase + string.digits


@runtime_checkable
class GlyphSource(Protocol):
    """Anything that can supply glyph markup for a character."""

    def fetch_glyph(self, letter: str, context: GlyphContext) -> str:
        """Return raw SVG markup for a character.

        Raises:
            GlyphNotFoundError: If no glyph exists for the character
        """
        ...

    def available_letters(self) -> list[str]:
        """Characters this source can draw."""
        ...


class DirectoryGlyphSource:
    """Reads glyph SVG files from a directory.

    Variant priority follows the text position: a first-letter drawing wins
    at the start of the text, then a last-letter drawing at the end, then an
    alternate drawing when requested, then the standard drawing.

    Example:
        source = DirectoryGlyphSource(Path("glyphs"))
        markup = source.fetch_glyph("a", GlyphContext(is_first=True))
    """

    def __init__(self, root: Path) -> None:
        """Initialize the source.

        Args:
            root: Directory holding the glyph files

        Raises:
            FileNotFoundError: If the directory does not exist
        """
        if not root.is_dir():
            raise FileNotFoundError(f"Glyph directory not found: {root}")
        self._root = root
        self._cache: dict[Path, str] = {}

    @property
    def root(self) -> Path:
        """Directory holding the glyph files."""
        return self._root

    def candidate_paths(self, letter: str, context: GlyphContext) -> list[Path]:
        """Files to try for a character, most specific first."""
        key = normalize_letter(letter)
        candidates = []
        if context.is_first:
            candidates.append(self._root / "first" / f"{key}.svg")
        if context.is_last:
            candidates.append(self._root / "last" / f"{key}.svg")
        if context.use_alternate_variant:
            candidates.append(self._root / f"{key}2.svg")
        candidates.append(self._root / f"{key}.svg")
        return candidates

    def fetch_glyph(self, letter: str, context: GlyphContext) -> str:
        """Return the markup of the best matching file.

        Raises:
            GlyphNotFoundError: If no candidate file exists or can be read
        """
        for path in self.candidate_paths(letter, context):
            if path in self._cache:
                return self._cache[path]
            if path.is_file():
                try:
                    markup = path.read_text(encoding="utf-8")
                except (OSError, UnicodeDecodeError) as e:
                    raise GlyphNotFoundError(letter, str(path)) from e
                self._cache[path] = markup
                return markup
        raise GlyphNotFoundError(letter, str(self._root))

    def available_letters(self) -> list[str]:
        """Characters with a standard drawing in the directory."""
        return sorted(
            path.stem
            for path in self._root.glob("*.svg")
            if len(path.stem) == 1 and path.stem in SUPPORTED_CHARACTERS
        )


class FontGlyphSource:
    """Renders font outlines as glyph markup.

    Glyphs are scaled so the font's ascender-to-descender span fills the
    glyph box and centered horizontally on their advance width. Contextual
    variants use the common ``.init``, ``.fina`` and ``.alt`` name suffixes.

    Example:
        with FontGlyphSource(Path("font.ttf")) as source:
            markup = source.fetch_glyph("a", GlyphContext())
    """

    def __init__(self, font_path: Path, size: int = 200) -> None:
        """Initialize the font source.

        Args:
            font_path: Path to the TTF or OTF font file
            size: Side of the glyph box the outlines are scaled into
        """
        self._font_path = font_path
        self._size = size
        self._font: TTFont | None = None

    def load(self) -> None:
        """Load the font file.

        Raises:
            FileNotFoundError: If font file does not exist
        """
        self._font = self._open()

    def _open(self) -> TTFont:
        if not self._font_path.exists():
            raise FileNotFoundError(f"Font file not found: {self._font_path}")
        return TTFont(str(self._font_path))

    def close(self) -> None:
        """Close the font file and free resources."""
        if self._font is not None:
            self._font.close()
            self._font = None

    def __enter__(self) -> "FontGlyphSource":
        """Context manager entry."""
        self.load()
        return self

    def __exit__(self, _exc_type: object, _exc_val: object, _exc_tb: object) -> None:
        """Context manager exit."""
        self.close()

    def _loaded_font(self) -> TTFont:
        if self._font is None:
            self._font = self._open()
        return self._font

    def glyph_name(self, letter: str, context: GlyphContext) -> str | None:
        """Name of the font glyph used for a character, or None if unmapped."""
        font = self._loaded_font()
        cmap = font.getBestCmap() or {}
        base = cmap.get(ord(letter)) or cmap.get(ord(letter.upper()))
        if base is None:
            return None

        names = set(font.getGlyphOrder())
        suffixes = []
        if context.is_first:
            suffixes.append(".init")
        if context.is_last:
            suffixes.append(".fina")
        if context.use_alternate_variant:
            suffixes.append(".alt")
        for suffix in suffixes:
            if f"{base}{suffix}" in names:
                return f"{base}{suffix}"
        return base

    def fetch_glyph(self, letter: str, context: GlyphContext) -> str:
        """Render the glyph outline of a character as SVG markup.

        Raises:
            GlyphNotFoundError: If the font has no outline for the character
        """
        font = self._loaded_font()
        name = self.glyph_name(normalize_letter(letter), context)
        if name is None:
            raise GlyphNotFoundError(letter, str(self._font_path))

        glyph_set = font.getGlyphSet()
        glyph = glyph_set[name]

        ascender, descender = self._vertical_metrics(font)
        scale = self._size / (ascender - descender)
        offset_x = (self._size - glyph.width * scale) / 2
        # Font units are y-up; SVG is y-down
        transform = Identity.translate(offset_x, ascender * scale).scale(scale, -scale)

        svg_pen = SVGPathPen(glyph_set)
        glyph.draw(TransformPen(svg_pen, transform))
        commands = svg_pen.getCommands()
        if not commands:
            raise GlyphNotFoundError(letter, str(self._font_path))

        size = self._size
        return (
            f'<svg xmlns="{SVG_NS}" width="{size}" height="{size}" '
            f'viewBox="0 0 {size} {size}"><path d="{commands}"/></svg>'
        )

    def available_letters(self) -> list[str]:
        """Supported characters mapped in the font."""
        font = self._loaded_font()
        cmap = font.getBestCmap() or {}
        return [
            char
            for char in SUPPORTED_CHARACTERS
            if ord(char) in cmap or ord(char.upper()) in cmap
        ]

    @staticmethod
    def _vertical_metrics(font: TTFont) -> tuple[float, float]:
        if "hhea" in font:
            hhea = font["hhea"]
            if hhea.ascent > hhea.descent:  # type: ignore[attr-defined]
                return float(hhea.ascent), float(hhea.descent)  # type: ignore[attr-defined]
        upm = font["head"].unitsPerEm  # type: ignore[attr-defined]
        return upm * 0.8, -upm * 0.2
