"""Process-wide renderer configuration.

The rendering engine is configured once at startup with
``initialize_renderer()``; render calls read the stored configuration and
never re-initialise it.
"""

from __future__ import annotations

from typing import Dict, Literal, Optional

from pydantic import BaseModel

from dumplens.config.loader import get_config
from dumplens.utils.error_handling import ErrorContext, RendererConfigError
from dumplens.utils.logging import get_logger

logger = get_logger(__name__)


THEMES: Dict[str, Dict[str, str]] = {
    "default": {
        "background": "white",
        "header_fill": "#ECECFF",
        "body_fill": "#FFFFFF",
        "border": "#9370DB",
        "font_color": "#333333",
        "edge_color": "#333333",
    },
    "neutral": {
        "background": "white",
        "header_fill": "#EEEEEE",
        "body_fill": "#FFFFFF",
        "border": "#999999",
        "font_color": "#333333",
        "edge_color": "#666666",
    },
    "dark": {
        "background": "#333333",
        "header_fill": "#1F2020",
        "body_fill": "#2B2B2B",
        "border": "#CCCCCC",
        "font_color": "#F0F0F0",
        "edge_color": "#CCCCCC",
    },
    "forest": {
        "background": "white",
        "header_fill": "#CDE498",
        "body_fill": "#FFFFFF",
        "border": "#13540C",
        "font_color": "#333333",
        "edge_color": "#13540C",
    },
}


class RendererConfig(BaseModel):
    """Settings handed to the rendering engine."""
    engine: str = "dot"
    theme: Literal["default", "neutral", "dark", "forest"] = "default"
    rankdir: Literal["LR", "RL", "TB", "BT"] = "LR"
    font_name: str = "Helvetica"
    font_size: int = 11
    node_sep: float = 0.6
    rank_sep: float = 0.9
    pad: float = 0.25
    entity_padding: int = 4

    model_config = {"frozen": True, "extra": "ignore"}

    @classmethod
    def from_config(cls) -> "RendererConfig":
        """Build from the ``renderer`` section of config.yaml."""
        return cls(**get_config("renderer"))

    @property
    def palette(self) -> Dict[str, str]:
        return THEMES[self.theme]


_renderer_config: Optional[RendererConfig] = None


def initialize_renderer(config: Optional[RendererConfig] = None) -> RendererConfig:
    """Set the global renderer configuration.

    Calling again with an equal configuration is a no-op.

    Raises:
        RendererConfigError: if already initialised with a different configuration
    """
    global _renderer_config
    config = config or RendererConfig.from_config()

    if _renderer_config is not None:
        if _renderer_config == config:
            return _renderer_config
        raise RendererConfigError(
            "Renderer is already initialized with a different configuration",
            context=ErrorContext(
                operation="initialize_renderer",
                additional_context={"current": _renderer_config.model_dump(), "requested": config.model_dump()},
            ),
        )

    _renderer_config = config
    logger.info(f"Renderer initialized: engine={config.engine}, theme={config.theme}, rankdir={config.rankdir}")
    return config


def get_renderer_config() -> RendererConfig:
    """Return the global renderer configuration.

    Raises:
        RendererConfigError: if ``initialize_renderer()`` has not been called
    """
    if _renderer_config is None:
        raise RendererConfigError(
            "Renderer is not initialized; call initialize_renderer() at startup",
            context=ErrorContext(operation="get_renderer_config"),
        )
    return _renderer_config


def reset_renderer() -> None:
    """Forget the global configuration (shutdown and tests)."""
    global _renderer_config
    _renderer_config = None
