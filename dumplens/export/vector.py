"""SVG parsing and vector export."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Union

from dumplens.utils.error_handling import ErrorContext, ExportError
from dumplens.utils.logging import get_logger

logger = get_logger(__name__)

SVG_NS = "http://www.w3.org/2000/svg"
XLINK_NS = "http://www.w3.org/1999/xlink"
XML_DECLARATION = '<?xml version="1.0" encoding="UTF-8" standalone="no"?>\n'

ET.register_namespace("", SVG_NS)
ET.register_namespace("xlink", XLINK_NS)


def local_name(tag: str) -> str:
    """Strip the ``{namespace}`` prefix from an element tag."""
    return tag.rsplit("}", 1)[-1]


def parse_svg(svg: str) -> ET.Element:
    """Parse an SVG document and return its root element.

    Raises:
        ExportError: if the document is not well-formed or not an SVG
    """
    try:
        root = ET.fromstring(svg.encode("utf-8"))
    except ET.ParseError as e:
        raise ExportError(
            f"Invalid SVG document: {e}",
            context=ErrorContext(operation="parse_svg"),
            original_exception=e,
        ) from e

    if local_name(root.tag) != "svg":
        raise ExportError(
            f"Expected an <svg> root element, got <{local_name(root.tag)}>",
            context=ErrorContext(operation="parse_svg"),
        )
    return root


def _qualify(root: ET.Element) -> None:
    for element in root.iter():
        if isinstance(element.tag, str) and not element.tag.startswith("{"):
            element.tag = f"{{{SVG_NS}}}{element.tag}"


def serialize_svg(svg: str) -> str:
    """Return a standalone, namespace-qualified SVG document."""
    root = parse_svg(svg)
    _qualify(root)
    return XML_DECLARATION + ET.tostring(root, encoding="unicode")


def save_svg(svg: str, path: Union[str, Path]) -> Path:
    """Write the serialized SVG document to ``path``."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(serialize_svg(svg), encoding="utf-8")
    logger.info(f"Saved SVG export to {path}")
    return path
