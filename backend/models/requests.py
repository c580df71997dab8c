"""Request models for API endpoints."""

from pydantic import BaseModel, Field
from typing import Optional, Tuple


class RenderRequest(BaseModel):
    """Request to render diagram text to SVG."""
    diagram_text: str = Field(..., min_length=1, description="ER diagram text starting with 'erDiagram'")


class SvgExportRequest(BaseModel):
    """Request to export a rendered diagram as an SVG file."""
    svg: str = Field(..., min_length=1, description="Rendered SVG document")
    filename: str = Field("diagram", pattern=r"^[\w\-. ]{1,100}$")


class PngExportRequest(BaseModel):
    """Request to export a rendered diagram as a PNG file."""
    svg: str = Field(..., min_length=1, description="Rendered SVG document")
    filename: str = Field("diagram", pattern=r"^[\w\-. ]{1,100}$")
    display_width: Optional[float] = Field(None, gt=0, description="On-screen width, used by the fallback")
    display_height: Optional[float] = Field(None, gt=0, description="On-screen height, used by the fallback")

    @property
    def display_size(self) -> Optional[Tuple[float, float]]:
        if self.display_width and self.display_height:
            return (self.display_width, self.display_height)
        return None
