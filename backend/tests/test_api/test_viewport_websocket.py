"""Tests for the viewport WebSocket endpoint."""

import asyncio

import pytest

from backend.api.websocket import _render_and_report
from backend.dependencies import get_websocket_manager
from backend.main import app
from dumplens.utils.error_handling import RenderError
from dumplens.viewport import DiagramViewport


@pytest.fixture
def ws_client(client, ws_manager):
    app.dependency_overrides[get_websocket_manager] = lambda: ws_manager
    return client


def _connect(ws_client, session_id: str = "session-1"):
    return ws_client.websocket_connect(f"/ws/viewport/{session_id}")


def test_connect_greeting(ws_client):
    with _connect(ws_client) as ws:
        message = ws.receive_json()
        assert message["type"] == "connected"
        assert message["data"]["session_id"] == "session-1"


def test_commands_report_state(ws_client):
    with _connect(ws_client) as ws:
        ws.receive_json()

        ws.send_json({"type": "zoom_in"})
        event = ws.receive_json()
        assert event["type"] == "viewport_state"
        assert event["data"]["command"] == "zoom_in"
        assert event["data"]["seq"] == 1
        assert event["data"]["state"]["scale"] == pytest.approx(1.25)

        ws.send_json({"type": "pointer_down", "x": 10, "y": 10})
        ws.receive_json()
        ws.send_json({"type": "pointer_move", "x": 30, "y": 15})
        event = ws.receive_json()
        assert event["data"]["state"]["position"] == {"x": 20.0, "y": 5.0}
        assert event["data"]["state"]["is_dragging"] is True

        ws.send_json({"type": "ping"})
        event = ws.receive_json()
        assert event["data"]["command"] == "ping"
        assert event["data"]["seq"] == 4


def test_render_sends_svg(ws_client, sample_svg):
    with _connect(ws_client) as ws:
        ws.receive_json()
        ws.send_json({"type": "zoom_in"})
        ws.receive_json()

        ws.send_json({"type": "render", "text": "erDiagram\n"})
        event = ws.receive_json()

        assert event["data"]["command"] == "render"
        assert event["data"]["svg"] == sample_svg
        assert event["data"]["state"]["has_svg"] is True
        # A successful render resets zoom and pan
        assert event["data"]["state"]["scale"] == 1.0


def test_render_failure_keeps_raw_text(ws_client):
    text = "erDiagram\n    a ??? b\n"
    with _connect(ws_client) as ws:
        ws.receive_json()
        ws.send_json({"type": "render", "text": text})
        event = ws.receive_json()

        state = event["data"]["state"]
        assert event["data"]["svg"] is None
        assert state["has_svg"] is False
        assert "Syntax error" in state["error"]
        assert state["raw_text"] == text


def test_fullscreen_keys(ws_client):
    with _connect(ws_client) as ws:
        ws.receive_json()
        ws.send_json({"type": "toggle_fullscreen"})
        assert ws.receive_json()["data"]["state"]["is_fullscreen"] is True

        ws.send_json({"type": "key", "key": "+"})
        assert ws.receive_json()["data"]["state"]["scale"] == pytest.approx(1.25)

        ws.send_json({"type": "key", "key": "Escape"})
        assert ws.receive_json()["data"]["state"]["is_fullscreen"] is False


def test_invalid_commands(ws_client):
    with _connect(ws_client) as ws:
        ws.receive_json()

        ws.send_text("not json")
        event = ws.receive_json()
        assert event["type"] == "error"
        assert event["data"]["error_type"] == "invalid_command"

        ws.send_json({"type": "explode"})
        assert ws.receive_json()["type"] == "error"

        ws.send_json({"type": "wheel"})
        event = ws.receive_json()
        assert event["type"] == "error"
        assert "delta_y" in event["data"]["message"]

        ws.send_json({"type": "render"})
        assert ws.receive_json()["data"]["message"] == "render requires text"


def test_sessions_have_separate_viewports(ws_client, ws_manager):
    with _connect(ws_client, "a") as ws_a, _connect(ws_client, "b") as ws_b:
        ws_a.receive_json()
        ws_b.receive_json()

        ws_a.send_json({"type": "zoom_in"})
        ws_a.receive_json()
        ws_b.send_json({"type": "ping"})
        event = ws_b.receive_json()

        assert event["data"]["state"]["scale"] == 1.0
        assert set(ws_manager.viewports) == {"a", "b"}


class RecordingManager:
    """Collects the events a render would broadcast."""

    def __init__(self):
        self.events = []

    async def send_event(self, session_id: str, event: dict) -> None:
        self.events.append(event)


class QueuedRenderer:
    """Renders complete in the order the test releases them, not the order requested."""

    def __init__(self):
        self.gates = []

    async def render(self, text: str) -> str:
        gate = asyncio.Event()
        self.gates.append(gate)
        await gate.wait()
        if "???" in text:
            raise RenderError("Syntax error")
        return f"<svg><desc>{len(self.gates)}</desc></svg>"


async def _start_renders(manager, viewport, *texts):
    tasks = []
    for text in texts:
        tasks.append(asyncio.create_task(_render_and_report(manager, "s", viewport, text)))
        await asyncio.sleep(0)
    return tasks


@pytest.mark.asyncio
async def test_superseded_render_with_same_text_is_not_reported():
    renderer = QueuedRenderer()
    viewport = DiagramViewport(renderer)
    manager = RecordingManager()
    first, second = await _start_renders(manager, viewport, "erDiagram\n", "erDiagram\n")

    renderer.gates[0].set()
    await first
    assert manager.events == []

    renderer.gates[1].set()
    await second
    assert len(manager.events) == 1
    assert manager.events[0]["data"]["state"]["has_svg"] is True


@pytest.mark.asyncio
async def test_latest_render_failure_is_reported_once():
    renderer = QueuedRenderer()
    viewport = DiagramViewport(renderer)
    manager = RecordingManager()
    text = "erDiagram\n    a ??? b\n"
    first, second = await _start_renders(manager, viewport, text, text)

    renderer.gates[1].set()
    await second
    renderer.gates[0].set()
    await first

    assert len(manager.events) == 1
    state = manager.events[0]["data"]["state"]
    assert state["error"] == "Syntax error"
    assert state["raw_text"] == text
