"""Interactive viewport over a rendered diagram.

Holds zoom/pan/fullscreen state and the currently displayed SVG. Rendering
is delegated to a ``DiagramRenderer``; each render request is tagged with a
version and its result is applied only if no newer request was submitted
in the meantime.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from dumplens.export.svg_bounds import intrinsic_bounds
from dumplens.render.graphviz_renderer import DiagramRenderer
from dumplens.utils.logging import get_logger

logger = get_logger(__name__)

MIN_SCALE = 0.1
MAX_SCALE = 5.0
ZOOM_FACTOR = 1.25
WHEEL_ZOOM_OUT = 0.9
WHEEL_ZOOM_IN = 1.1
FIT_MAX_SCALE = 2.0


class Point(BaseModel):
    x: float = 0.0
    y: float = 0.0

    model_config = {"frozen": True}


class ViewportState(BaseModel):
    """Serializable snapshot of a viewport."""
    scale: float
    position: Point
    is_dragging: bool
    is_fullscreen: bool
    has_svg: bool
    error: Optional[str] = None
    raw_text: Optional[str] = None
    version: int = 0


def clamp_scale(scale: float) -> float:
    return min(MAX_SCALE, max(MIN_SCALE, scale))


class DiagramViewport:
    """Zoom, pan and fullscreen state for one rendered diagram."""

    def __init__(self, renderer: DiagramRenderer):
        self._renderer = renderer
        self.scale: float = 1.0
        self.position = Point()
        self.is_dragging = False
        self.drag_start = Point()
        self.is_fullscreen = False

        self.svg: Optional[str] = None
        self.error: Optional[str] = None
        self.raw_text: Optional[str] = None

        self._text: Optional[str] = None
        self._version = 0

    @property
    def text(self) -> Optional[str]:
        """Diagram text of the latest render request."""
        return self._text

    @property
    def version(self) -> int:
        return self._version

    # ---- Rendering ----

    async def render(self, text: str) -> bool:
        """Render ``text`` and display the result.

        A failed render shows the error message and the raw text instead of
        an image. A result whose request has since been superseded is
        dropped.

        Returns:
            True if this call's result was applied
        """
        self._version += 1
        version = self._version
        self._text = text

        try:
            svg = await self._renderer.render(text)
        except Exception as e:
            if version != self._version:
                logger.debug(f"Discarding stale render failure (version {version}, latest {self._version})")
                return False
            logger.warning(f"Diagram render failed: {e}")
            self.svg = None
            self.error = str(e)
            self.raw_text = text
            return False

        if version != self._version:
            logger.debug(f"Discarding stale render result (version {version}, latest {self._version})")
            return False

        self.svg = svg
        self.error = None
        self.raw_text = None
        self.reset_view()
        return True

    # ---- Zoom ----

    def zoom_in(self) -> float:
        self.scale = clamp_scale(self.scale * ZOOM_FACTOR)
        return self.scale

    def zoom_out(self) -> float:
        self.scale = clamp_scale(self.scale / ZOOM_FACTOR)
        return self.scale

    def on_wheel(self, delta_y: float) -> float:
        """Scrolling down (positive delta) zooms out, scrolling up zooms in."""
        factor = WHEEL_ZOOM_OUT if delta_y > 0 else WHEEL_ZOOM_IN
        self.scale = clamp_scale(self.scale * factor)
        return self.scale

    # ---- Drag ----

    def pointer_down(self, x: float, y: float) -> None:
        self.is_dragging = True
        self.drag_start = Point(x=x - self.position.x, y=y - self.position.y)

    def pointer_move(self, x: float, y: float) -> None:
        if not self.is_dragging:
            return
        self.position = Point(x=x - self.drag_start.x, y=y - self.drag_start.y)

    def pointer_up(self) -> None:
        self.is_dragging = False

    def pointer_leave(self) -> None:
        self.is_dragging = False

    # ---- View ----

    def fit_to_screen(
        self,
        container_width: float,
        container_height: float,
        rendered_width: Optional[float] = None,
        rendered_height: Optional[float] = None,
    ) -> float:
        """Scale the diagram to fit the container, capped at 2x.

        ``rendered_width``/``rendered_height`` are the current on-screen
        size (already multiplied by ``scale``). Without them the SVG's
        intrinsic size is used.
        """
        if rendered_width and rendered_height:
            content_width = rendered_width / self.scale
            content_height = rendered_height / self.scale
        elif self.svg is not None:
            bounds = intrinsic_bounds(self.svg)
            content_width, content_height = bounds.width, bounds.height
        else:
            return self.scale

        if content_width <= 0 or content_height <= 0:
            return self.scale

        self.scale = clamp_scale(min(
            container_width / content_width,
            container_height / content_height,
            FIT_MAX_SCALE,
        ))
        self.position = Point()
        return self.scale

    def reset_view(self) -> None:
        self.scale = 1.0
        self.position = Point()

    # ---- Fullscreen ----

    def toggle_fullscreen(self) -> bool:
        self.is_fullscreen = not self.is_fullscreen
        return self.is_fullscreen

    def exit_fullscreen(self) -> None:
        self.is_fullscreen = False

    def handle_key(self, key: str) -> bool:
        """Keyboard shortcuts, live only in fullscreen.

        Returns:
            True if the key was handled
        """
        if not self.is_fullscreen:
            return False
        if key == "Escape":
            self.exit_fullscreen()
        elif key in ("+", "="):
            self.zoom_in()
        elif key == "-":
            self.zoom_out()
        elif key == "0":
            self.reset_view()
        else:
            return False
        return True

    def state(self) -> ViewportState:
        return ViewportState(
            scale=self.scale,
            position=self.position,
            is_dragging=self.is_dragging,
            is_fullscreen=self.is_fullscreen,
            has_svg=self.svg is not None,
            error=self.error,
            raw_text=self.raw_text,
            version=self._version,
        )
