"""Schema exploration endpoints for a dump."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from backend.dependencies import get_schema_service, get_dump_client
from backend.models.responses import (
    DiagramResponse,
    NeighborhoodResponse,
    RelatedTablesResponse,
    RelationsResponse,
    SchemaResponse,
    TableRef,
    TableRelationsEntry,
    TableRowsResponse,
)
from backend.services.dump_client import DumpNotFoundError, DumpServiceClient, DumpServiceError
from backend.services.schema_service import SchemaService
from backend.utils.schema_cache import CachedSchema
from dumplens.diagram import RelationshipLabel
from dumplens.graph import find_related_tables
from dumplens.ir.models import Table, TableKey, default_schema

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/dumps", tags=["schema"])


def _ref(key: TableKey) -> TableRef:
    return TableRef(schema_name=key.schema_name, table_name=key.table_name)


async def _load_schema(
    service: SchemaService,
    dump_id: str,
    database: Optional[str],
    refresh: bool = False,
) -> CachedSchema:
    try:
        return await service.get_schema(dump_id, database=database, refresh=refresh)
    except DumpNotFoundError:
        raise HTTPException(status_code=404, detail="Dump not found")
    except DumpServiceError as e:
        logger.error(f"Dump service failure for {dump_id}: {e}")
        raise HTTPException(status_code=502, detail=str(e))


def _require_table(schema: CachedSchema, schema_name: str, table_name: str) -> Table:
    table = schema.graph.table(TableKey(schema_name, table_name))
    if table is None:
        raise HTTPException(status_code=404, detail=f"Table {schema_name}.{table_name} not found")
    return table


@router.get("/{dump_id}/schema", response_model=SchemaResponse)
async def get_schema(
    dump_id: str,
    database: Optional[str] = None,
    refresh: bool = False,
    schema_service: SchemaService = Depends(get_schema_service),
):
    """
    Get the schema graph of a dump.

    Includes the whole-graph diagram text (upstream's if supplied, else
    generated), the schema list and the schema selected by default.
    """
    schema = await _load_schema(schema_service, dump_id, database, refresh)
    names = schema.graph.schema_names()
    return SchemaResponse(
        dump_id=dump_id,
        database=database,
        schema_graph=schema.graph,
        mermaid_er=schema_service.whole_graph_text(schema),
        schemas=names,
        default_schema=default_schema(names),
        stats=schema.graph.stats(),
        fetched_at=schema.fetched_at,
    )


@router.get("/{dump_id}/relations", response_model=RelationsResponse)
async def get_relations(
    dump_id: str,
    database: Optional[str] = None,
    schema_service: SchemaService = Depends(get_schema_service),
):
    """Get parents and children of every table."""
    schema = await _load_schema(schema_service, dump_id, database)
    index = schema.view.relation_index
    return RelationsResponse(
        dump_id=dump_id,
        relations=[
            TableRelationsEntry(
                table=_ref(key),
                parents=[_ref(p) for p in rel.parents],
                children=[_ref(c) for c in rel.children],
            )
            for key, rel in index.items()
        ],
    )


@router.get("/{dump_id}/diagram", response_model=DiagramResponse)
async def get_diagram(
    dump_id: str,
    schemas: Optional[List[str]] = Query(None),
    show_all: bool = Query(False, alias="all"),
    label: RelationshipLabel = RelationshipLabel.CONSTRAINT_NAME,
    database: Optional[str] = None,
    schema_service: SchemaService = Depends(get_schema_service),
):
    """
    Get diagram text for a schema selection.

    Without ``schemas`` the default schema is used; ``all=true`` returns the
    whole-graph text instead.
    """
    schema = await _load_schema(schema_service, dump_id, database)
    names = schema.graph.schema_names()

    view = schema.view
    view.select_table(None)
    view.set_label(label)
    view.set_show_all(show_all)
    if show_all:
        return DiagramResponse(
            dump_id=dump_id,
            schemas=names,
            show_all=True,
            diagram_text=view.diagram_text,
        )

    if not schemas:
        selected = default_schema(names)
        schemas = [selected] if selected else []
    view.select_schemas(schemas)

    return DiagramResponse(
        dump_id=dump_id,
        schemas=schemas,
        diagram_text=view.diagram_text,
    )


@router.get("/{dump_id}/tables/{schema_name}/{table_name}/neighborhood", response_model=NeighborhoodResponse)
async def get_neighborhood(
    dump_id: str,
    schema_name: str,
    table_name: str,
    degrees: int = Query(1, ge=1, le=3),
    label: RelationshipLabel = RelationshipLabel.FIRST_SOURCE_COLUMN,
    database: Optional[str] = None,
    schema_service: SchemaService = Depends(get_schema_service),
):
    """Get the tables within ``degrees`` hops of a table and their diagram text."""
    schema = await _load_schema(schema_service, dump_id, database)
    table = _require_table(schema, schema_name, table_name)

    view = schema.view
    view.select_table(table.key, degrees=degrees)
    view.set_label(label)
    neighborhood = view.neighborhood
    return NeighborhoodResponse(
        dump_id=dump_id,
        focal=_ref(table.key),
        degrees=degrees,
        tables=[_ref(k) for k in neighborhood.tables],
        foreign_keys=neighborhood.foreign_keys,
        diagram_text=view.diagram_text,
    )


@router.get("/{dump_id}/tables/{schema_name}/{table_name}/related", response_model=RelatedTablesResponse)
async def get_related_tables(
    dump_id: str,
    schema_name: str,
    table_name: str,
    max_hops: int = Query(2, ge=1, le=5),
    database: Optional[str] = None,
    schema_service: SchemaService = Depends(get_schema_service),
):
    """Get tables reachable from a table, with the constraint path to each."""
    schema = await _load_schema(schema_service, dump_id, database)
    table = _require_table(schema, schema_name, table_name)
    return RelatedTablesResponse(
        dump_id=dump_id,
        focal=_ref(table.key),
        max_hops=max_hops,
        related=find_related_tables(schema.graph, table.key, max_hops),
    )


@router.get("/{dump_id}/tables/{schema_name}/{table_name}/rows", response_model=TableRowsResponse)
async def get_table_rows(
    dump_id: str,
    schema_name: str,
    table_name: str,
    limit: int = Query(100, ge=1, le=1000),
    offset: int = Query(0, ge=0),
    database: Optional[str] = None,
    dump_client: DumpServiceClient = Depends(get_dump_client),
):
    """Get table rows from the dump service."""
    try:
        data = await dump_client.fetch_table_rows(
            dump_id, schema_name, table_name, limit=limit, offset=offset, database=database
        )
    except DumpNotFoundError:
        raise HTTPException(status_code=404, detail="Dump or table not found")
    except DumpServiceError as e:
        logger.error(f"Dump service failure for {dump_id}: {e}")
        raise HTTPException(status_code=502, detail=str(e))

    return TableRowsResponse(
        dump_id=dump_id,
        table=TableRef(schema_name=schema_name, table_name=table_name),
        data=data,
    )
