"""Response models for API endpoints."""

from pydantic import BaseModel
from typing import List, Optional, Dict, Any

from dumplens.graph import RelatedTable
from dumplens.ir.models import SchemaGraph, SchemaStats


class SchemaResponse(BaseModel):
    """Schema graph of a dump plus the whole-graph diagram text."""
    dump_id: str
    database: Optional[str] = None
    schema_graph: SchemaGraph
    mermaid_er: str
    schemas: List[str]
    default_schema: Optional[str] = None
    stats: SchemaStats
    fetched_at: str


class TableRef(BaseModel):
    """A table addressed by schema and name."""
    schema_name: str
    table_name: str


class TableRelationsEntry(BaseModel):
    """Parents and children of one table."""
    table: TableRef
    parents: List[TableRef] = []
    children: List[TableRef] = []


class RelationsResponse(BaseModel):
    """Relation index of a dump."""
    dump_id: str
    relations: List[TableRelationsEntry]


class DiagramResponse(BaseModel):
    """Diagram text for a schema selection."""
    dump_id: str
    schemas: List[str]
    show_all: bool = False
    diagram_text: str


class NeighborhoodResponse(BaseModel):
    """Tables and constraints around a focal table, with diagram text."""
    dump_id: str
    focal: TableRef
    degrees: int
    tables: List[TableRef]
    foreign_keys: List[str]
    diagram_text: str


class RelatedTablesResponse(BaseModel):
    """Tables reachable from a focal table, with relationship paths."""
    dump_id: str
    focal: TableRef
    max_hops: int
    related: List[RelatedTable]


class TableRowsResponse(BaseModel):
    """Table rows passed through from the dump service."""
    dump_id: str
    table: TableRef
    data: Dict[str, Any]


class RenderErrorResponse(BaseModel):
    """Render failure: error message plus the raw text for inspection."""
    error: str
    diagram_text: str
