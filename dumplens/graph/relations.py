"""Parent/child relation index built from a schema graph's foreign keys."""

from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel, Field

from dumplens.ir.models import SchemaGraph, TableKey
from dumplens.utils.logging import get_logger

logger = get_logger(__name__)


class TableRelations(BaseModel):
    """Tables this table references (parents) and tables referencing it (children)."""
    parents: List[TableKey] = Field(default_factory=list)
    children: List[TableKey] = Field(default_factory=list)


RelationIndex = Dict[TableKey, TableRelations]


def _append_unique(keys: List[TableKey], key: TableKey) -> None:
    if key not in keys:
        keys.append(key)


def build_relation_index(graph: SchemaGraph) -> RelationIndex:
    """Compute parents/children for every table in one pass.

    Every table gets an entry, even without foreign keys. A foreign key whose
    source or target table is missing from the graph is skipped.
    """
    index: RelationIndex = {table.key: TableRelations() for table in graph.tables}

    dangling = 0
    for fk in graph.foreign_keys:
        source_key = fk.source_key
        target_key = fk.target_key
        if source_key not in index or target_key not in index:
            dangling += 1
            continue
        _append_unique(index[source_key].parents, target_key)
        _append_unique(index[target_key].children, source_key)

    if dangling:
        logger.debug(f"Skipped {dangling} dangling foreign key(s) while indexing relations")
    return index


def relations_for(index: RelationIndex, key: TableKey) -> TableRelations:
    """Look up a table's relations, empty for unknown tables."""
    return index.get(key) or TableRelations()
