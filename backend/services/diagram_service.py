"""Diagram service - renders and exports ER diagrams."""

from typing import Optional, Tuple
import logging

from dumplens.export import RasterExport, RasterExporter, serialize_svg
from dumplens.render import DiagramRenderer, GraphvizRenderer

logger = logging.getLogger(__name__)


class DiagramService:
    """Renders diagram text to SVG and exports rendered SVG."""

    def __init__(
        self,
        renderer: Optional[DiagramRenderer] = None,
        exporter: Optional[RasterExporter] = None,
    ):
        self.renderer = renderer or GraphvizRenderer()
        self.exporter = exporter or RasterExporter()

    async def render_svg(self, diagram_text: str) -> str:
        """Render diagram text to an SVG document.

        Raises:
            RenderError: if the engine rejects the text
        """
        return await self.renderer.render(diagram_text)

    def export_svg(self, svg: str) -> bytes:
        """Standalone SVG file contents."""
        return serialize_svg(svg).encode("utf-8")

    def export_png(self, svg: str, display_size: Optional[Tuple[float, float]] = None) -> RasterExport:
        """Rasterise an SVG, falling back to the display size if needed.

        Raises:
            ExportError: if both rasterisation paths fail
        """
        export = self.exporter.export(svg, display_size=display_size)
        method = "fallback" if export.used_fallback else "primary"
        logger.info(f"PNG export ({method}): {export.width}x{export.height}")
        return export
