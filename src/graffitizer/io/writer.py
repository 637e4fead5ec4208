"""SVG document writer for rendered compositions.

This module provides the SvgWriter class, which assembles composited layers
into a standalone SVG document and writes it to disk.
"""

import re
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import TYPE_CHECKING

import defusedxml.ElementTree as DefusedET

from graffitizer.core.sanitizer import svg_tag
from graffitizer.exceptions import ExportError

if TYPE_CHECKING:
    from graffitizer.core.pipeline import RenderResult

MAX_NAME_LENGTH = 60
FILE_SUFFIX = "_GRAFFITI.svg"


def _fmt(value: float) -> str:
    return f"{value:.3f}".rstrip("0").rstrip(".") or "0"


def get_output_path(text: str, directory: Path = Path(".")) -> Path:
    """Generate output path with the graffiti naming convention.

    Converts: "hello world" -> HELLO_WORLD_GRAFFITI.svg

    Args:
        text: Rendered text
        directory: Directory the file goes into

    Returns:
        Path inside ``directory``
    """
    name = re.sub(r"\s+", "_", text.strip().upper())
    name = re.sub(r"[^\w-]", "", name)[:MAX_NAME_LENGTH]
    return directory / f"{name or 'UNTITLED'}{FILE_SUFFIX}"


class SvgWriter:
    """Builds and saves standalone SVG documents.

    The document is a viewport-sized canvas with an optional background
    rectangle and one content group, centered and scaled by the fit scale,
    holding one ``<g>`` per layer in z-order.

    Example:
        writer = SvgWriter(800, 450)
        path = writer.write(result, Path("out"))
    """

    def __init__(self, width: float = 800.0, height: float = 450.0) -> None:
        """Initialize the writer.

        Args:
            width: Document (viewport) width
            height: Document (viewport) height
        """
        self.width = width
        self.height = height

    def build_document(self, result: "RenderResult") -> ET.Element:
        """Assemble the document tree for a render result."""
        root = ET.Element(
            svg_tag("svg"),
            {
                "width": _fmt(self.width),
                "height": _fmt(self.height),
                "viewBox": f"0 0 {_fmt(self.width)} {_fmt(self.height)}",
            },
        )

        options = result.options
        if options.background_enabled:
            ET.SubElement(
                root,
                svg_tag("rect"),
                {
                    "width": "100%",
                    "height": "100%",
                    "fill": options.background_color,
                },
            )

        bounds = result.inflated_bounds
        center_x = bounds.min_x + bounds.width / 2
        center_y = bounds.min_y + bounds.height / 2
        content = ET.SubElement(
            root,
            svg_tag("g"),
            {
                "id": "graffiti-content",
                "transform": (
                    f"translate({_fmt(self.width / 2)},{_fmt(self.height / 2)}) "
                    f"scale({_fmt(result.fit_scale)}) "
                    f"translate({_fmt(-center_x)},{_fmt(-center_y)})"
                ),
            },
        )

        for layer in result.layers:
            group = ET.SubElement(
                content,
                svg_tag("g"),
                {
                    "class": f"layer-{layer.kind.value}",
                    "transform": layer.transform.to_svg(),
                },
            )
            group.append(DefusedET.fromstring(layer.markup))

        return root

    def to_string(self, result: "RenderResult") -> str:
        """Serialize the document with an XML declaration."""
        root = self.build_document(result)
        body = ET.tostring(root, encoding="unicode")
        return f'<?xml version="1.0" encoding="UTF-8"?>\n{body}'

    def write(
        self,
        result: "RenderResult",
        directory: Path = Path("."),
        output_path: Path | None = None,
    ) -> Path:
        """Write the document to disk.

        Args:
            result: Render result to write
            directory: Directory for the generated file name
            output_path: Explicit destination, overriding the generated name

        Returns:
            Path of the written file

        Raises:
            ExportError: If the file cannot be written
        """
        path = output_path or get_output_path(result.text, directory)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            ET.ElementTree(self.build_document(result)).write(
                path, encoding="utf-8", xml_declaration=True
            )
        except OSError as e:
            raise ExportError(str(path), str(e)) from e
        return path
