"""WebSocket event models for viewport sessions."""

from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

from dumplens.viewport import ViewportState


ViewportCommandType = Literal[
    "render",
    "zoom_in",
    "zoom_out",
    "wheel",
    "pointer_down",
    "pointer_move",
    "pointer_up",
    "pointer_leave",
    "fit_to_screen",
    "reset_view",
    "toggle_fullscreen",
    "key",
    "ping",
]


class ViewportCommand(BaseModel):
    """Command sent by the client to drive its viewport."""
    type: ViewportCommandType
    text: Optional[str] = None
    delta_y: Optional[float] = None
    x: Optional[float] = None
    y: Optional[float] = None
    key: Optional[str] = None
    container_width: Optional[float] = None
    container_height: Optional[float] = None
    rendered_width: Optional[float] = None
    rendered_height: Optional[float] = None


class ViewportStateEvent(BaseModel):
    """Event carrying the viewport state after a command."""
    type: Literal["viewport_state"] = "viewport_state"
    data: "ViewportStateData"


class ViewportStateData(BaseModel):
    """Data for viewport state event."""
    session_id: str
    seq: int
    ts: datetime
    command: str
    state: ViewportState
    svg: Optional[str] = None


class ErrorEvent(BaseModel):
    """Event for a command that could not be handled."""
    type: Literal["error"] = "error"
    data: "ErrorData"


class ErrorData(BaseModel):
    """Data for error event."""
    session_id: str
    seq: int
    ts: datetime
    message: str
    error_type: str


# Update forward references
ViewportStateEvent.model_rebuild()
ErrorEvent.model_rebuild()
