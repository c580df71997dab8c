"""ER diagram text generation for table subsets.

Two entry points share the same serialization rules:

- schema-filtered mode: every table of the selected schemas, every foreign
  key whose both ends are among them;
- neighborhood mode: the tables and constraints found by a bounded traversal
  around one table.

Output is line oriented::

    erDiagram
        public_users {
            integer id PK
        }
        public_users ||--o{ public_orders : "fk_orders_user"
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Optional, Set

from dumplens.diagram.sanitize import entity_id, sanitize_column_name, sanitize_type
from dumplens.graph.neighborhood import find_neighborhood
from dumplens.ir.models import ForeignKey, SchemaGraph, Table, TableKey
from dumplens.utils.logging import get_logger

logger = get_logger(__name__)

DIAGRAM_HEADER = "erDiagram"
MAX_COLUMNS_PER_ENTITY = 15
PK_MARKER = " PK"
NOT_NULL_MARKER = ' "NOT NULL"'


class RelationshipLabel(str, Enum):
    """Text shown on a relationship line."""
    CONSTRAINT_NAME = "constraint_name"
    FIRST_SOURCE_COLUMN = "first_source_column"


def _label_for(fk: ForeignKey, label: RelationshipLabel) -> str:
    if label == RelationshipLabel.CONSTRAINT_NAME:
        return fk.constraint_name
    return fk.source_columns[0] if fk.source_columns else ""


def _entity_lines(table: Table, show_not_null: bool) -> List[str]:
    lines = [f"    {entity_id(table.schema_name, table.table_name)} {{"]
    for col in table.columns[:MAX_COLUMNS_PER_ENTITY]:
        pk_marker = PK_MARKER if col.is_primary_key else ""
        not_null = NOT_NULL_MARKER if show_not_null and not col.is_nullable else ""
        lines.append(
            f"        {sanitize_type(col.data_type)} {sanitize_column_name(col.name)}{pk_marker}{not_null}"
        )
    lines.append("    }")
    return lines


def _relationship_line(fk: ForeignKey, label: RelationshipLabel) -> str:
    source = entity_id(fk.source_schema, fk.source_table)
    target = entity_id(fk.target_schema, fk.target_table)
    return f'    {target} ||--o{{ {source} : "{_label_for(fk, label)}"'


def _render(
    tables: Iterable[Table],
    foreign_keys: Iterable[ForeignKey],
    label: RelationshipLabel,
    show_not_null: bool,
) -> str:
    lines = [DIAGRAM_HEADER]
    for table in tables:
        lines.extend(_entity_lines(table, show_not_null))
    for fk in foreign_keys:
        lines.append(_relationship_line(fk, label))
    return "\n".join(lines) + "\n"


def _edges_within(
    graph: SchemaGraph,
    tables: Set[TableKey],
    constraint_names: Optional[Set[str]] = None,
) -> List[ForeignKey]:
    """Foreign keys with both ends in ``tables``, one per constraint name."""
    emitted: Dict[str, ForeignKey] = {}
    for fk in graph.foreign_keys:
        if constraint_names is not None and fk.constraint_name not in constraint_names:
            continue
        if fk.constraint_name in emitted:
            continue
        if fk.source_key in tables and fk.target_key in tables:
            emitted[fk.constraint_name] = fk
    return list(emitted.values())


def generate_filtered_er_diagram(
    graph: SchemaGraph,
    schemas: Iterable[str],
    label: RelationshipLabel = RelationshipLabel.CONSTRAINT_NAME,
    show_not_null: bool = True,
) -> str:
    """Diagram text for every table whose schema is in ``schemas``.

    Args:
        graph: Full schema graph
        schemas: Selected schema names
        label: Relationship label convention (constraint name by default)
        show_not_null: Annotate non-nullable columns with "NOT NULL"

    Returns:
        Diagram text starting with the ``erDiagram`` header
    """
    selected = set(schemas)
    tables = [t for t in graph.table_index().values() if t.schema_name in selected]
    keys = {t.key for t in tables}
    return _render(tables, _edges_within(graph, keys), label, show_not_null)


def generate_er_diagram(
    graph: SchemaGraph,
    label: RelationshipLabel = RelationshipLabel.CONSTRAINT_NAME,
) -> str:
    """Diagram text for the whole graph."""
    return generate_filtered_er_diagram(graph, graph.schema_names(), label=label)


def generate_neighborhood_er_diagram(
    table: Table,
    graph: SchemaGraph,
    degrees: int,
    label: RelationshipLabel = RelationshipLabel.FIRST_SOURCE_COLUMN,
) -> str:
    """Diagram text for ``table`` and everything within ``degrees`` hops of it.

    Keys found by the traversal that have no table in the graph are skipped,
    as are constraints touching them.
    """
    neighborhood = find_neighborhood(table.key, graph, degrees)
    index = graph.table_index()

    tables: List[Table] = []
    for key in neighborhood.tables:
        found = index.get(key)
        if found is None:
            logger.debug(f"Skipping unknown table {key} in neighborhood of {table.key}")
            continue
        tables.append(found)

    keys = {t.key for t in tables}
    foreign_keys = _edges_within(graph, keys, neighborhood.foreign_key_set)
    return _render(tables, foreign_keys, label, show_not_null=False)
