"""Zoom/pan/fullscreen viewport over rendered diagrams."""

from .viewport import (
    MIN_SCALE,
    MAX_SCALE,
    ZOOM_FACTOR,
    DiagramViewport,
    Point,
    ViewportState,
    clamp_scale,
)

__all__ = [
    "MIN_SCALE",
    "MAX_SCALE",
    "ZOOM_FACTOR",
    "DiagramViewport",
    "Point",
    "ViewportState",
    "clamp_scale",
]
