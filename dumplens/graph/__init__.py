"""Relation index and neighborhood traversal over schema graphs."""

from .relations import TableRelations, RelationIndex, build_relation_index, relations_for
from .neighborhood import (
    Neighborhood,
    RelationType,
    RelatedTable,
    find_neighborhood,
    find_related_tables,
)

__all__ = [
    "TableRelations",
    "RelationIndex",
    "build_relation_index",
    "relations_for",
    "Neighborhood",
    "RelationType",
    "RelatedTable",
    "find_neighborhood",
    "find_related_tables",
]
