"""IR (Intermediate Representation) models."""

from .schema_graph import (
    TableKey,
    FkAction,
    Column,
    Table,
    ForeignKey,
    SchemaStats,
    SchemaGraph,
    filter_by_schemas,
    default_schema,
)

__all__ = [
    "TableKey",
    "FkAction",
    "Column",
    "Table",
    "ForeignKey",
    "SchemaStats",
    "SchemaGraph",
    "filter_by_schemas",
    "default_schema",
]
