"""Tests for SchemaCache and SchemaService."""

import pytest

from backend.services.dump_client import DumpNotFoundError
from backend.services.schema_service import SchemaService
from backend.utils.schema_cache import SchemaCache
from dumplens.ir.models import SchemaGraph, Table


def _graph(*names: str) -> SchemaGraph:
    return SchemaGraph(tables=[Table(schema_name="public", table_name=n) for n in names])


def test_put_and_get():
    cache = SchemaCache()
    entry = cache.put("dump-1", _graph("a"), whole_graph_text="erDiagram\n")

    assert cache.get("dump-1") is entry
    assert entry.whole_graph_text == "erDiagram\n"
    assert entry.fetched_at
    assert cache.get("dump-1", database="other") is None


def test_refetch_replaces_entry():
    cache = SchemaCache()
    first = cache.put("dump-1", _graph("a"))
    second = cache.put("dump-1", _graph("a", "b"))

    assert cache.get("dump-1") is second
    assert second is not first
    assert len(cache) == 1


def test_least_recently_used_is_evicted():
    cache = SchemaCache(max_entries=2)
    cache.put("dump-1", _graph("a"))
    cache.put("dump-2", _graph("b"))
    cache.get("dump-1")
    cache.put("dump-3", _graph("c"))

    assert cache.get("dump-2") is None
    assert cache.get("dump-1") is not None
    assert cache.get("dump-3") is not None


def test_invalidate_and_clear():
    cache = SchemaCache()
    cache.put("dump-1", _graph("a"))
    cache.put("dump-2", _graph("b"))

    assert cache.invalidate("dump-1")
    assert not cache.invalidate("dump-1")
    cache.clear()
    assert len(cache) == 0


@pytest.mark.asyncio
async def test_service_fetches_once(schema_service, dump_service):
    first = await schema_service.get_schema("dump-1")
    second = await schema_service.get_schema("dump-1")

    assert first is second
    assert len(dump_service.schema_requests()) == 1
    assert len(first.graph.tables) == 4


@pytest.mark.asyncio
async def test_service_refresh_refetches(schema_service, dump_service):
    first = await schema_service.get_schema("dump-1")
    second = await schema_service.get_schema("dump-1", refresh=True)

    assert second is not first
    assert len(dump_service.schema_requests()) == 2


@pytest.mark.asyncio
async def test_service_not_found_is_not_cached(schema_service):
    with pytest.raises(DumpNotFoundError):
        await schema_service.get_schema("missing")
    assert len(schema_service.cache) == 0


@pytest.mark.asyncio
async def test_whole_graph_text(schema_service, dump_service):
    generated = await schema_service.get_schema("dump-1")
    assert SchemaService.whole_graph_text(generated).startswith("erDiagram\n")

    dump_service.schema_payload["mermaid_er"] = "erDiagram\n    upstream {\n    }\n"
    supplied = await schema_service.get_schema("dump-1", refresh=True)
    assert SchemaService.whole_graph_text(supplied) == "erDiagram\n    upstream {\n    }\n"
