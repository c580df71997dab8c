"""WebSocket connection and viewport session management."""

from typing import Callable, Dict, Set, Optional
from fastapi import WebSocket
from datetime import datetime, UTC
import json
import logging

from dumplens.viewport import DiagramViewport

logger = logging.getLogger(__name__)


class WebSocketManager:
    """Manages WebSocket connections and one viewport per session_id."""

    def __init__(self):
        self.active_connections: Dict[str, Set[WebSocket]] = {}
        self.sequence_numbers: Dict[str, int] = {}
        self.viewports: Dict[str, DiagramViewport] = {}

    async def connect(self, websocket: WebSocket, session_id: str):
        """Accept and register a WebSocket connection."""
        await websocket.accept()

        if session_id not in self.active_connections:
            self.active_connections[session_id] = set()
            self.sequence_numbers[session_id] = 0
            logger.info(f"Created new connection set for session {session_id}")

        self.active_connections[session_id].add(websocket)
        logger.info(f"WebSocket connected for session {session_id} (total connections: {len(self.active_connections[session_id])})")

    def disconnect(self, session_id: str, websocket: Optional[WebSocket] = None):
        """Remove connection(s) for session_id; the viewport goes with the last one."""
        if session_id not in self.active_connections:
            logger.warning(f"Attempted to disconnect session {session_id} but no connections found")
            return

        if websocket:
            self.active_connections[session_id].discard(websocket)
        else:
            self.active_connections[session_id].clear()

        if not self.active_connections[session_id]:
            logger.info(f"No more connections for session {session_id}, cleaning up")
            del self.active_connections[session_id]
            del self.sequence_numbers[session_id]
            self.viewports.pop(session_id, None)

    def get_viewport(self, session_id: str, factory: Callable[[], DiagramViewport]) -> DiagramViewport:
        """Viewport of a session, created on first use."""
        viewport = self.viewports.get(session_id)
        if viewport is None:
            viewport = factory()
            self.viewports[session_id] = viewport
        return viewport

    def _get_next_seq(self, session_id: str) -> int:
        """Get next sequence number for session_id."""
        if session_id not in self.sequence_numbers:
            self.sequence_numbers[session_id] = 0
        self.sequence_numbers[session_id] += 1
        return self.sequence_numbers[session_id]

    async def send_event(self, session_id: str, event: dict):
        """Send event to all connections for session_id."""
        if session_id not in self.active_connections:
            logger.warning(f"No active connections for session {session_id}, cannot send event {event.get('type', 'unknown')}")
            return

        # Add sequence number and timestamp
        if "data" in event and isinstance(event["data"], dict):
            event["data"]["seq"] = self._get_next_seq(session_id)
            if "ts" not in event["data"]:
                event["data"]["ts"] = datetime.now(UTC).isoformat()
            # Convert datetime objects to ISO strings for JSON serialization
            if isinstance(event["data"].get("ts"), datetime):
                event["data"]["ts"] = event["data"]["ts"].isoformat()

        message = json.dumps(event)
        event_type = event.get("type", "unknown")
        logger.debug(f"Sending event '{event_type}' to session {session_id} ({len(message)} bytes)")

        disconnected = set()
        for websocket in self.active_connections[session_id]:
            try:
                await websocket.send_text(message)
            except Exception as e:
                logger.error(f"Error sending WebSocket message to connection: {e}")
                disconnected.add(websocket)

        # Remove disconnected websockets
        for ws in disconnected:
            self.active_connections[session_id].discard(ws)
