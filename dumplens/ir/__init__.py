"""IR (Intermediate Representation) models for schema graphs."""

from .models import (
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
