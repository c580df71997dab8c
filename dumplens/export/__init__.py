"""Vector and raster export of rendered diagrams."""

from .vector import SVG_NS, parse_svg, serialize_svg, save_svg
from .svg_bounds import Bounds, intrinsic_bounds, geometry_bounds
from .raster import (
    DEFAULT_EXPORT_SCALE,
    EXPORT_PADDING,
    MAX_CANVAS_EDGE,
    MAX_CANVAS_AREA,
    ExportConfig,
    RasterExport,
    RasterExporter,
    compute_export_scale,
    save_png,
)

__all__ = [
    "SVG_NS",
    "parse_svg",
    "serialize_svg",
    "save_svg",
    "Bounds",
    "intrinsic_bounds",
    "geometry_bounds",
    "DEFAULT_EXPORT_SCALE",
    "EXPORT_PADDING",
    "MAX_CANVAS_EDGE",
    "MAX_CANVAS_AREA",
    "ExportConfig",
    "RasterExport",
    "RasterExporter",
    "compute_export_scale",
    "save_png",
]
