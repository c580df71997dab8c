"""Pytest fixtures and configuration."""

from typing import Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient

from backend.main import app
from backend.dependencies import get_diagram_service, get_dump_client, get_schema_service
from backend.services.diagram_service import DiagramService
from backend.services.dump_client import DumpServiceClient
from backend.services.schema_service import SchemaService
from backend.utils.schema_cache import SchemaCache
from backend.utils.websocket_manager import WebSocketManager
from dumplens.export import ExportConfig, RasterExporter
from dumplens.utils.error_handling import RenderError

SAMPLE_SVG = '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 400 200"><rect width="400" height="200"/></svg>'


def _pk(name: str = "id") -> dict:
    return {"name": name, "data_type": "integer", "is_nullable": False, "is_primary_key": True}


def _fk(name: str, source: str, target: str, columns: List[str]) -> dict:
    source_schema, source_table = source.split(".")
    target_schema, target_table = target.split(".")
    return {
        "constraint_name": name,
        "source_schema": source_schema,
        "source_table": source_table,
        "source_columns": columns,
        "target_schema": target_schema,
        "target_table": target_table,
        "target_columns": ["id"],
        "on_delete": "SET NULL",
    }


@pytest.fixture
def sample_schema_payload() -> dict:
    """Schema payload as served by the dump service."""
    return {
        "schema_graph": {
            "tables": [
                {
                    "schema_name": "public",
                    "table_name": "customers",
                    "columns": [_pk(), {"name": "email", "data_type": "text", "is_nullable": False}],
                    "estimated_row_count": 1200,
                },
                {
                    "schema_name": "public",
                    "table_name": "orders",
                    "columns": [_pk(), {"name": "customer_id", "data_type": "integer"}],
                    "estimated_row_count": 5000,
                },
                {
                    "schema_name": "public",
                    "table_name": "order_items",
                    "columns": [{"name": "order_id", "data_type": "integer"}],
                },
                {
                    "schema_name": "billing",
                    "table_name": "invoices",
                    "columns": [_pk(), {"name": "order_id", "data_type": "integer"}],
                },
            ],
            "foreign_keys": [
                _fk("orders_customer_id_fkey", "public.orders", "public.customers", ["customer_id"]),
                _fk("order_items_order_id_fkey", "public.order_items", "public.orders", ["order_id"]),
                _fk("invoices_order_id_fkey", "billing.invoices", "public.orders", ["order_id"]),
            ],
        },
        "mermaid_er": None,
    }


class FakeDumpService:
    """Routes requests of an ``httpx.MockTransport`` to canned responses."""

    def __init__(self, schema_payload: dict):
        self.schema_payload = schema_payload
        self.requests: List[httpx.Request] = []
        self.fail_with: Dict[str, int] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path
        for prefix, status in self.fail_with.items():
            if path.startswith(prefix):
                return httpx.Response(status, json={"detail": "upstream failure"})

        if path == "/api/dumps/dump-1/schema":
            return httpx.Response(200, json=self.schema_payload)
        if path.startswith("/api/dumps/dump-1/tables/"):
            return httpx.Response(200, json={
                "columns": ["id", "email"],
                "rows": [[1, "a@example.com"]],
                "limit": int(request.url.params.get("limit", 100)),
                "offset": int(request.url.params.get("offset", 0)),
            })
        return httpx.Response(404, json={"detail": "not found"})

    def schema_requests(self) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/schema")]


class FakeRenderer:
    """Renders any text containing '???' as a failure, anything else to ``SAMPLE_SVG``."""

    def __init__(self):
        self.calls: List[str] = []

    async def render(self, text: str) -> str:
        self.calls.append(text)
        if "???" in text:
            raise RenderError("Syntax error at line 2, column 7: unexpected '?'")
        return SAMPLE_SVG


@pytest.fixture
def dump_service(sample_schema_payload) -> FakeDumpService:
    return FakeDumpService(sample_schema_payload)


@pytest.fixture
def dump_client(dump_service) -> DumpServiceClient:
    return DumpServiceClient(
        base_url="http://dump-service.test",
        transport=httpx.MockTransport(dump_service.handler),
    )


@pytest.fixture
def schema_service(dump_client) -> SchemaService:
    return SchemaService(client=dump_client, cache=SchemaCache(max_entries=4))


@pytest.fixture
def fake_renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def diagram_service(fake_renderer) -> DiagramService:
    """DiagramService with a fake renderer and the default export settings."""
    return DiagramService(renderer=fake_renderer, exporter=RasterExporter(ExportConfig()))


@pytest.fixture
def ws_manager():
    """Fresh WebSocketManager instance for testing."""
    return WebSocketManager()


@pytest.fixture
def client(dump_client, schema_service, diagram_service):
    """Test client for FastAPI app, wired to the fake dump service and renderer."""
    app.dependency_overrides[get_dump_client] = lambda: dump_client
    app.dependency_overrides[get_schema_service] = lambda: schema_service
    app.dependency_overrides[get_diagram_service] = lambda: diagram_service
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sample_svg() -> str:
    return SAMPLE_SVG
