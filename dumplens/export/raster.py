"""Raster (PNG) export of rendered diagrams.

Primary path:
1. Intrinsic bounds of the SVG plus fixed padding
2. Export scale from the quality default, clamped to the canvas limits
3. Background fill across the padded region, then the cloned content
   (root transform/style dropped) rasterised with cairosvg

Fallback path: the on-screen size at a fixed multiplier with a plain
background fill. If that fails too, ``ExportError`` is raised and callers
should offer the SVG export instead.
"""

from __future__ import annotations

import copy
import math
import os
import tempfile
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Optional, Tuple, Union

import cairosvg
from pydantic import BaseModel, Field

from dumplens.config.loader import get_config
from dumplens.utils.error_handling import ErrorContext, ExportError
from dumplens.utils.logging import get_logger

from .svg_bounds import Bounds, intrinsic_bounds
from .vector import SVG_NS, parse_svg

logger = get_logger(__name__)

DEFAULT_EXPORT_SCALE = 2.0
EXPORT_PADDING = 40
MAX_CANVAS_EDGE = 16384
MAX_CANVAS_AREA = 268_435_456
FALLBACK_SCALE = 2.0


class ExportConfig(BaseModel):
    """Raster export settings (``export`` section of config.yaml)."""
    default_scale: float = Field(default=DEFAULT_EXPORT_SCALE, gt=0)
    padding: float = Field(default=EXPORT_PADDING, ge=0)
    background: str = "#ffffff"
    max_canvas_edge: int = Field(default=MAX_CANVAS_EDGE, gt=0)
    max_canvas_area: int = Field(default=MAX_CANVAS_AREA, gt=0)
    fallback_scale: float = Field(default=FALLBACK_SCALE, gt=0)

    model_config = {"frozen": True, "extra": "ignore"}

    @classmethod
    def from_config(cls) -> "ExportConfig":
        return cls(**get_config("export"))


class RasterExport(BaseModel):
    """Encoded PNG plus the geometry it was produced with."""
    png: bytes
    width: int
    height: int
    scale: float
    used_fallback: bool = False

    model_config = {"frozen": True}


def compute_export_scale(
    width: float,
    height: float,
    preferred: float = DEFAULT_EXPORT_SCALE,
    max_edge: int = MAX_CANVAS_EDGE,
    max_area: int = MAX_CANVAS_AREA,
) -> float:
    """Rasterisation scale for a ``width`` x ``height`` region.

    Starts from ``max(preferred, 1.0)`` and is clamped down so that neither
    output edge exceeds ``max_edge`` and the pixel area stays within
    ``max_area``. The canvas limits take precedence over the 1x floor.

    Raises:
        ValueError: if either dimension is not positive
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Export region must be positive, got {width}x{height}")

    scale = max(preferred, 1.0)
    scale = min(scale, max_edge / width, max_edge / height)
    scale = min(scale, math.sqrt(max_area / (width * height)))
    return scale


def _output_size(width: float, height: float, scale: float) -> Tuple[int, int]:
    return max(1, math.floor(width * scale)), max(1, math.floor(height * scale))


def _export_document(root: ET.Element, bounds: Bounds, background: str) -> str:
    """Standalone SVG with a background rect under deep copies of the content."""
    viewbox = f"{bounds.x:g} {bounds.y:g} {bounds.width:g} {bounds.height:g}"
    wrapper = ET.Element(f"{{{SVG_NS}}}svg", {
        "viewBox": viewbox,
        "width": f"{bounds.width:g}",
        "height": f"{bounds.height:g}",
    })
    ET.SubElement(wrapper, f"{{{SVG_NS}}}rect", {
        "x": f"{bounds.x:g}",
        "y": f"{bounds.y:g}",
        "width": f"{bounds.width:g}",
        "height": f"{bounds.height:g}",
        "fill": background,
    })
    content = ET.SubElement(wrapper, f"{{{SVG_NS}}}g")
    for child in root:
        content.append(copy.deepcopy(child))
    return ET.tostring(wrapper, encoding="unicode")


class RasterExporter:
    """Rasterises SVG diagrams to PNG."""

    def __init__(self, config: Optional[ExportConfig] = None):
        self.config = config or ExportConfig.from_config()

    def export(self, svg: str, display_size: Optional[Tuple[float, float]] = None) -> RasterExport:
        """Rasterise ``svg``; falls back to the on-screen size on failure.

        Args:
            svg: Rendered SVG document
            display_size: On-screen (width, height) of the rendered image,
                used by the fallback path

        Raises:
            ExportError: if both the primary and the fallback path fail
        """
        try:
            return self._export_primary(svg)
        except Exception as e:
            logger.warning(f"Primary PNG export failed, using fallback: {e}")

        try:
            return self._export_fallback(svg, display_size)
        except Exception as e:
            raise ExportError(
                "PNG export failed; try exporting as SVG instead",
                context=ErrorContext(operation="export_png", additional_context={"display_size": display_size}),
                original_exception=e,
            ) from e

    def _export_primary(self, svg: str) -> RasterExport:
        cfg = self.config
        root = parse_svg(svg)
        bounds = intrinsic_bounds(root).padded(cfg.padding)
        scale = compute_export_scale(
            bounds.width, bounds.height,
            preferred=cfg.default_scale,
            max_edge=cfg.max_canvas_edge,
            max_area=cfg.max_canvas_area,
        )
        width, height = _output_size(bounds.width, bounds.height, scale)

        document = _export_document(root, bounds, cfg.background)
        png = cairosvg.svg2png(
            bytestring=document.encode("utf-8"),
            output_width=width,
            output_height=height,
        )
        logger.info(f"Exported PNG {width}x{height} at scale {scale:.3f}")
        return RasterExport(png=png, width=width, height=height, scale=scale)

    def _export_fallback(self, svg: str, display_size: Optional[Tuple[float, float]]) -> RasterExport:
        cfg = self.config
        if display_size is None:
            bounds = intrinsic_bounds(svg)
            display_size = (bounds.width, bounds.height)

        display_width, display_height = display_size
        if display_width <= 0 or display_height <= 0:
            raise ValueError(f"Display size must be positive, got {display_width}x{display_height}")

        width, height = _output_size(display_width, display_height, cfg.fallback_scale)
        png = cairosvg.svg2png(
            bytestring=svg.encode("utf-8"),
            output_width=width,
            output_height=height,
            background_color=cfg.background,
        )
        logger.info(f"Exported PNG {width}x{height} with fallback method")
        return RasterExport(png=png, width=width, height=height, scale=cfg.fallback_scale, used_fallback=True)


def save_png(export: RasterExport, path: Union[str, Path]) -> Path:
    """Write a PNG export to ``path`` through a temporary file.

    The temporary file is removed whether or not the write succeeds.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, suffix=".png.tmp")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(export.png)
        os.replace(tmp_name, path)
        logger.info(f"Saved PNG export to {path}")
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
    return path
