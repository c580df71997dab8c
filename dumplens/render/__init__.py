"""Diagram rendering through an external engine (Graphviz)."""

from .config import (
    THEMES,
    RendererConfig,
    initialize_renderer,
    get_renderer_config,
    reset_renderer,
)
from .graphviz_renderer import DiagramRenderer, GraphvizRenderer, erdocument_to_graphviz

__all__ = [
    "THEMES",
    "RendererConfig",
    "initialize_renderer",
    "get_renderer_config",
    "reset_renderer",
    "DiagramRenderer",
    "GraphvizRenderer",
    "erdocument_to_graphviz",
]
