"""WebSocket handler for interactive viewport sessions."""

import asyncio
import logging
from datetime import datetime, UTC
from typing import Set

from fastapi import WebSocket, WebSocketDisconnect, Depends
from pydantic import ValidationError

from backend.dependencies import get_websocket_manager, get_diagram_service
from backend.models.websocket_events import (
    ErrorData,
    ErrorEvent,
    ViewportCommand,
    ViewportStateData,
    ViewportStateEvent,
)
from backend.services.diagram_service import DiagramService
from backend.utils.websocket_manager import WebSocketManager
from dumplens.viewport import DiagramViewport

logger = logging.getLogger(__name__)


async def send_state(ws_manager: WebSocketManager, session_id: str, viewport: DiagramViewport, command: str):
    """Send the current viewport state to every connection of the session."""
    event = ViewportStateEvent(
        data=ViewportStateData(
            session_id=session_id,
            seq=0,  # set by send_event
            ts=datetime.now(UTC),
            command=command,
            state=viewport.state(),
            svg=viewport.svg,
        )
    )
    await ws_manager.send_event(session_id, event.model_dump())


async def send_error(ws_manager: WebSocketManager, session_id: str, message: str, error_type: str):
    event = ErrorEvent(
        data=ErrorData(
            session_id=session_id,
            seq=0,  # set by send_event
            ts=datetime.now(UTC),
            message=message,
            error_type=error_type,
        )
    )
    await ws_manager.send_event(session_id, event.model_dump())


async def _render_and_report(
    ws_manager: WebSocketManager,
    session_id: str,
    viewport: DiagramViewport,
    text: str,
):
    # render() takes its version before its first await
    version = viewport.version + 1
    applied = await viewport.render(text)
    # A superseded render reports nothing; the newer one will
    if applied or viewport.version == version:
        await send_state(ws_manager, session_id, viewport, "render")


def apply_command(viewport: DiagramViewport, command: ViewportCommand) -> None:
    """Apply a synchronous viewport command.

    Raises:
        ValueError: if a required field is missing
    """
    kind = command.type
    if kind == "zoom_in":
        viewport.zoom_in()
    elif kind == "zoom_out":
        viewport.zoom_out()
    elif kind == "wheel":
        if command.delta_y is None:
            raise ValueError("wheel requires delta_y")
        viewport.on_wheel(command.delta_y)
    elif kind in ("pointer_down", "pointer_move"):
        if command.x is None or command.y is None:
            raise ValueError(f"{kind} requires x and y")
        if kind == "pointer_down":
            viewport.pointer_down(command.x, command.y)
        else:
            viewport.pointer_move(command.x, command.y)
    elif kind == "pointer_up":
        viewport.pointer_up()
    elif kind == "pointer_leave":
        viewport.pointer_leave()
    elif kind == "fit_to_screen":
        if command.container_width is None or command.container_height is None:
            raise ValueError("fit_to_screen requires container_width and container_height")
        viewport.fit_to_screen(
            command.container_width,
            command.container_height,
            command.rendered_width,
            command.rendered_height,
        )
    elif kind == "reset_view":
        viewport.reset_view()
    elif kind == "toggle_fullscreen":
        viewport.toggle_fullscreen()
    elif kind == "key":
        if not command.key:
            raise ValueError("key requires key")
        viewport.handle_key(command.key)


async def viewport_websocket_endpoint(
    websocket: WebSocket,
    session_id: str,
    ws_manager: WebSocketManager = Depends(get_websocket_manager),
    diagram_service: DiagramService = Depends(get_diagram_service),
):
    """
    WebSocket endpoint driving a server-side diagram viewport.

    Client sends JSON commands (render, zoom_in, zoom_out, wheel,
    pointer_down/move/up/leave, fit_to_screen, reset_view,
    toggle_fullscreen, key, ping) and receives:
    - viewport_state events after every command
    - error events for malformed commands
    """
    await ws_manager.connect(websocket, session_id)
    viewport = ws_manager.get_viewport(session_id, lambda: DiagramViewport(diagram_service.renderer))
    render_tasks: Set[asyncio.Task] = set()

    try:
        await websocket.send_json({
            "type": "connected",
            "data": {
                "session_id": session_id,
                "message": "WebSocket connection established"
            }
        })

        while True:
            try:
                data = await websocket.receive_text()
            except WebSocketDisconnect:
                logger.info(f"WebSocket disconnected by client (session {session_id})")
                break

            try:
                command = ViewportCommand.model_validate_json(data)
            except ValidationError as e:
                logger.warning(f"Invalid viewport command (session {session_id}): {e}")
                await send_error(ws_manager, session_id, "Invalid viewport command", "invalid_command")
                continue

            if command.type == "render":
                if not command.text:
                    await send_error(ws_manager, session_id, "render requires text", "invalid_command")
                    continue
                # Renders run in the background so a newer one can overtake an older one
                task = asyncio.create_task(_render_and_report(ws_manager, session_id, viewport, command.text))
                render_tasks.add(task)
                task.add_done_callback(render_tasks.discard)
                continue

            if command.type != "ping":
                try:
                    apply_command(viewport, command)
                except ValueError as e:
                    await send_error(ws_manager, session_id, str(e), "invalid_command")
                    continue

            await send_state(ws_manager, session_id, viewport, command.type)

    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected (session {session_id})")
    except Exception as e:
        logger.error(f"Error in WebSocket endpoint (session {session_id}): {e}")
        logger.exception("Full traceback:")
    finally:
        for task in render_tasks:
            task.cancel()
        ws_manager.disconnect(session_id, websocket)
