"""Tests for DumpServiceClient."""

import httpx
import pytest

from backend.services.dump_client import DumpNotFoundError, DumpServiceClient, DumpServiceError
from dumplens.ir.models import FkAction, TableKey


@pytest.mark.asyncio
async def test_fetch_schema(dump_client):
    schema = await dump_client.fetch_schema("dump-1")

    assert schema.whole_graph_text is None
    assert schema.graph.table(TableKey("billing", "invoices")) is not None
    assert schema.graph.foreign_keys[0].on_delete == FkAction.SET_NULL
    await dump_client.close()


@pytest.mark.asyncio
async def test_fetch_schema_forwards_database(dump_client, dump_service):
    await dump_client.fetch_schema("dump-1", database="analytics")
    request = dump_service.requests[-1]

    assert str(request.url) == "http://dump-service.test/api/dumps/dump-1/schema?database=analytics"


@pytest.mark.asyncio
async def test_not_found(dump_client):
    with pytest.raises(DumpNotFoundError) as exc_info:
        await dump_client.fetch_schema("missing")
    assert exc_info.value.status_code == 404


@pytest.mark.asyncio
async def test_upstream_error_status(dump_client, dump_service):
    dump_service.fail_with["/api/dumps/dump-1"] = 500

    with pytest.raises(DumpServiceError) as exc_info:
        await dump_client.fetch_table_rows("dump-1", "public", "customers")
    assert exc_info.value.status_code == 500
    assert not isinstance(exc_info.value, DumpNotFoundError)


@pytest.mark.asyncio
async def test_connection_failure():
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client = DumpServiceClient("http://dump-service.test", transport=httpx.MockTransport(refuse))
    with pytest.raises(DumpServiceError) as exc_info:
        await client.fetch_schema("dump-1")
    assert exc_info.value.status_code is None
    assert "connection refused" in str(exc_info.value)


@pytest.mark.asyncio
async def test_invalid_schema_graph(dump_client, dump_service):
    dump_service.schema_payload = {"schema_graph": {"foreign_keys": [{"constraint_name": "x"}]}}
    with pytest.raises(DumpServiceError):
        await dump_client.fetch_schema("dump-1")


@pytest.mark.asyncio
@pytest.mark.parametrize("response", [
    httpx.Response(200, text="<html>maintenance</html>"),
    httpx.Response(200, json=[{"schema_graph": {}}]),
], ids=["html", "list"])
async def test_malformed_schema_payload(response):
    client = DumpServiceClient("http://dump-service.test", transport=httpx.MockTransport(lambda request: response))

    with pytest.raises(DumpServiceError) as exc_info:
        await client.fetch_schema("dump-1")
    assert not isinstance(exc_info.value, DumpNotFoundError)
    await client.close()


@pytest.mark.asyncio
async def test_malformed_row_payload():
    client = DumpServiceClient(
        "http://dump-service.test",
        transport=httpx.MockTransport(lambda request: httpx.Response(200, json=[[1, "a"]])),
    )

    with pytest.raises(DumpServiceError):
        await client.fetch_table_rows("dump-1", "public", "customers")
    await client.close()


@pytest.mark.asyncio
async def test_fetch_table_rows(dump_client, dump_service):
    data = await dump_client.fetch_table_rows("dump-1", "public", "customers", limit=5, offset=10)

    assert data["rows"] == [[1, "a@example.com"]]
    params = dump_service.requests[-1].url.params
    assert params["schema"] == "public"
    assert params["limit"] == "5"
    assert params["offset"] == "10"
    assert "database" not in params


@pytest.mark.asyncio
async def test_close_resets_client(dump_client):
    first = await dump_client.get_client()
    assert await dump_client.get_client() is first

    await dump_client.close()
    second = await dump_client.get_client()
    assert second is not first
    await dump_client.close()
