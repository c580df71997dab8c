"""Diagram rendering and export endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from backend.dependencies import get_diagram_service
from backend.models.requests import PngExportRequest, RenderRequest, SvgExportRequest
from backend.models.responses import RenderErrorResponse
from backend.services.diagram_service import DiagramService
from dumplens.utils.error_handling import ErrorContext, ExportError, RenderError, log_error_with_context

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/diagrams", tags=["diagrams"])


@router.post("/render")
async def render_diagram(
    request: RenderRequest,
    diagram_service: DiagramService = Depends(get_diagram_service),
):
    """
    Render diagram text to SVG.

    On failure returns 422 with the error message and the raw diagram text
    so the client can show both.
    """
    try:
        svg = await diagram_service.render_svg(request.diagram_text)
    except RenderError as e:
        log_error_with_context(e, ErrorContext(operation="render_diagram"), level="warning")
        body = RenderErrorResponse(error=e.message, diagram_text=request.diagram_text)
        return JSONResponse(status_code=422, content=body.model_dump())

    return Response(content=svg, media_type="image/svg+xml")


@router.post("/export/svg")
async def export_svg(
    request: SvgExportRequest,
    diagram_service: DiagramService = Depends(get_diagram_service),
):
    """Download a rendered diagram as a standalone SVG file."""
    try:
        content = diagram_service.export_svg(request.svg)
    except ExportError as e:
        raise HTTPException(status_code=400, detail=e.message)

    return Response(
        content=content,
        media_type="image/svg+xml",
        headers={"Content-Disposition": f'attachment; filename="{request.filename}.svg"'},
    )


@router.post("/export/png")
async def export_png(
    request: PngExportRequest,
    diagram_service: DiagramService = Depends(get_diagram_service),
):
    """
    Download a rendered diagram as a PNG file.

    ``X-Export-Method`` tells whether the primary or the fallback
    rasterisation was used.
    """
    try:
        # Rasterisation is CPU-bound and runs off the event loop
        export = await run_in_threadpool(
            diagram_service.export_png, request.svg, display_size=request.display_size
        )
    except ExportError as e:
        log_error_with_context(e, ErrorContext(operation="export_png"))
        raise HTTPException(status_code=500, detail=e.message)

    return Response(
        content=export.png,
        media_type="image/png",
        headers={
            "Content-Disposition": f'attachment; filename="{request.filename}.png"',
            "X-Export-Method": "fallback" if export.used_fallback else "primary",
        },
    )
