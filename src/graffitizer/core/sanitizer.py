"""Glyph markup validation and sanitization.

Glyph markup comes from outside the renderer and is treated as untrusted.
Parsing goes through defusedxml so DTDs, entity expansion and external
references are refused before any tree is built. The parsed tree is then
reduced to a whitelist of SVG elements and attributes, and attribute values
carrying script URLs, external ``url(...)`` references or embedded data are
dropped.

Sanitized output is always serialized in the SVG namespace.
"""

import logging
import re
import xml.etree.ElementTree as ET
from collections.abc import Iterable

import defusedxml.ElementTree as DefusedET
from defusedxml import DefusedXmlException

from graffitizer.exceptions import MarkupSanitizationError, MarkupValidationError
from graffitizer.utils.logging import RenderLogger

logger = logging.getLogger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
ET.register_namespace("", SVG_NS)

ALLOWED_ELEMENTS = frozenset(
    {
        "svg",
        "path",
        "rect",
        "circle",
        "ellipse",
        "line",
        "polyline",
        "polygon",
        "g",
        "defs",
        "title",
        "desc",
        "text",
    }
)

ALLOWED_ATTRIBUTES = frozenset(
    {
        # Core
        "id",
        "class",
        "style",
        "transform",
        # Presentation
        "fill",
        "stroke",
        "stroke-width",
        "opacity",
        # Dimensions
        "x",
        "y",
        "width",
        "height",
        "viewBox",
        "preserveAspectRatio",
        # Shapes
        "d",
        "pathLength",
        "cx",
        "cy",
        "r",
        "rx",
        "points",
    }
)

EMPTY_PLACEHOLDER = (
    f'<svg xmlns="{SVG_NS}" width="200" height="200" viewBox="0 0 200 200"></svg>'
)

_UNSAFE_VALUE_PATTERNS = (
    re.compile(r"javascript\s*:", re.IGNORECASE),
    re.compile(r"vbscript\s*:", re.IGNORECASE),
    re.compile(r"data:[^;,]*;base64", re.IGNORECASE),
    re.compile(r"url\s*\(\s*['\"]?(?!#)", re.IGNORECASE),
)
_UNSAFE_STYLE_PATTERN = re.compile(r"(javascript|expression|calc|url)\s*\(.*?\)", re.IGNORECASE)
_SCRIPT_URL_PATTERN = re.compile(r"javascript\s*:[^;]*;?", re.IGNORECASE)
_NUMBER_PATTERN = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")


def resolve_viewbox(root: ET.Element, size: float) -> tuple[float, float, float, float]:
    """User-space box of an SVG root as (min_x, min_y, width, height).

    Falls back to the width/height attributes, then to a ``size`` square.
    """
    box = [float(n) for n in _NUMBER_PATTERN.findall(root.get("viewBox", ""))]
    if len(box) == 4 and box[2] > 0 and box[3] > 0:
        return (box[0], box[1], box[2], box[3])

    width = _NUMBER_PATTERN.findall(root.get("width", ""))[:1]
    height = _NUMBER_PATTERN.findall(root.get("height", ""))[:1]
    w = float(width[0]) if width else size
    h = float(height[0]) if height else size
    if w <= 0 or h <= 0:
        return (0.0, 0.0, size, size)
    return (0.0, 0.0, w, h)


def local_name(tag: str) -> str:
    """Strip the ``{namespace}`` prefix ElementTree puts on qualified names."""
    return tag.rsplit("}", 1)[-1]


def _namespace(tag: str) -> str | None:
    if tag.startswith("{"):
        return tag[1:].split("}", 1)[0]
    return None


def svg_tag(name: str) -> str:
    """Qualified ElementTree tag for an SVG element name."""
    return f"{{{SVG_NS}}}{name}"


class MarkupSanitizer:
    """Whitelist-based SVG sanitizer.

    Args:
        allowed_elements: Element local names that survive sanitization
        allowed_attributes: Attribute names that survive sanitization
        reporter: Receives rejected markup in ``sanitize_or_placeholder``
    """

    def __init__(
        self,
        allowed_elements: Iterable[str] = ALLOWED_ELEMENTS,
        allowed_attributes: Iterable[str] = ALLOWED_ATTRIBUTES,
        reporter: RenderLogger | None = None,
    ) -> None:
        self.allowed_elements = frozenset(allowed_elements)
        self.allowed_attributes = frozenset(allowed_attributes)
        self.reporter = reporter

    def parse(self, markup: str) -> ET.Element:
        """Parse markup into an element tree without trusting it.

        Raises:
            MarkupValidationError: If the markup is not well-formed, uses a
                DTD or entities, or its root is not ``svg``
        """
        if not markup or not markup.strip():
            raise MarkupValidationError("markup is empty")

        try:
            root = DefusedET.fromstring(markup, forbid_dtd=True)
        except DefusedXmlException as e:
            raise MarkupValidationError(f"forbidden construct: {type(e).__name__}") from e
        except ET.ParseError as e:
            raise MarkupValidationError(f"not well-formed: {e}") from e

        if local_name(root.tag) != "svg" or _namespace(root.tag) not in (None, SVG_NS):
            raise MarkupValidationError(f"root element is '{local_name(root.tag)}', not 'svg'")
        return root

    def validate(self, markup: str) -> bool:
        """Check that markup is well-formed with an ``svg`` root element."""
        try:
            self.parse(markup)
        except MarkupValidationError as e:
            logger.debug("Markup failed validation: %s", e.reason)
            return False
        return True

    def sanitize_tree(self, markup: str) -> ET.Element:
        """Parse and clean markup, returning the cleaned root element.

        Raises:
            MarkupValidationError: If the markup fails validation
            MarkupSanitizationError: If the tree cannot be cleaned
        """
        root = self.parse(markup)
        try:
            self._clean(root)
        except (TypeError, ValueError, AttributeError) as e:
            raise MarkupSanitizationError(str(e)) from e
        return root

    def sanitize(self, markup: str) -> str:
        """Return a cleaned copy of the markup.

        Raises:
            MarkupValidationError: If the markup fails validation
            MarkupSanitizationError: If the tree cannot be cleaned or serialized
        """
        root = self.sanitize_tree(markup)
        return serialize(root)

    def sanitize_or_placeholder(self, markup: str, letter: str | None = None) -> str:
        """Sanitize markup, degrading to an empty placeholder on failure.

        Never raises for bad markup; the failure is reported instead.
        """
        try:
            return self.sanitize(markup)
        except (MarkupValidationError, MarkupSanitizationError) as e:
            self._report(letter, e.reason)
            return EMPTY_PLACEHOLDER

    def _report(self, letter: str | None, reason: str) -> None:
        if self.reporter is not None:
            self.reporter.log_markup_rejected(letter, reason)
        else:
            logger.warning("Glyph markup rejected (letter=%s): %s", letter, reason)

    def _clean(self, element: ET.Element) -> None:
        element.tag = svg_tag(local_name(element.tag))
        self._clean_attributes(element)

        for child in list(element):
            if not isinstance(child.tag, str):
                element.remove(child)
                continue
            name = local_name(child.tag)
            if _namespace(child.tag) not in (None, SVG_NS) or name not in self.allowed_elements:
                logger.debug("Removed disallowed element: %s", child.tag)
                element.remove(child)
            else:
                self._clean(child)

    def _clean_attributes(self, element: ET.Element) -> None:
        for name, value in list(element.attrib.items()):
            if (
                _namespace(name) is not None
                or name not in self.allowed_attributes
                or name.lower().startswith("on")
            ):
                logger.debug("Removed disallowed attribute: %s", name)
                del element.attrib[name]
                continue

            if name == "style":
                cleaned = _SCRIPT_URL_PATTERN.sub("", _UNSAFE_STYLE_PATTERN.sub("", value))
                if cleaned != value:
                    logger.debug("Removed unsafe style content on <%s>", local_name(element.tag))
                    element.set(name, cleaned)
                continue

            if any(pattern.search(value) for pattern in _UNSAFE_VALUE_PATTERNS):
                logger.debug("Removed unsafe value of attribute: %s", name)
                del element.attrib[name]


def serialize(root: ET.Element) -> str:
    """Serialize an element tree as namespaced SVG text.

    Raises:
        MarkupSanitizationError: If the tree cannot be serialized
    """
    try:
        return ET.tostring(root, encoding="unicode")
    except (TypeError, ValueError) as e:
        raise MarkupSanitizationError(f"serialization failed: {e}") from e
