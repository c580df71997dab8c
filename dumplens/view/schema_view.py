"""Schema explorer state with memoized derived views.

``SchemaView`` holds the current schema graph and the user's selection.
Everything shown from it (relation index, neighborhood, diagram text,
table list) is recomputed from those inputs through single-slot memos, so
swapping the graph never serves a result computed from the old one.
"""

from __future__ import annotations

from typing import FrozenSet, Iterable, List, Optional

from pydantic import BaseModel

from dumplens.diagram.generator import (
    RelationshipLabel,
    generate_er_diagram,
    generate_filtered_er_diagram,
    generate_neighborhood_er_diagram,
)
from dumplens.graph.neighborhood import Neighborhood, find_neighborhood
from dumplens.graph.relations import RelationIndex, build_relation_index
from dumplens.ir.models.schema_graph import SchemaGraph, Table, TableKey, default_schema
from dumplens.utils.logging import get_logger

from .memo import memoize_last

logger = get_logger(__name__)

MIN_DEGREES = 1
MAX_DEGREES = 3


class SchemaSummary(BaseModel):
    schema_name: str
    table_count: int
    estimated_rows: int


def _filter_tables(graph: SchemaGraph, schemas: Optional[FrozenSet[str]], query: str) -> List[Table]:
    needle = query.strip().lower()
    tables = []
    for table in graph.tables:
        if schemas is not None and table.schema_name not in schemas:
            continue
        if needle and needle not in table.table_name.lower() and needle not in str(table.key).lower():
            continue
        tables.append(table)
    return sorted(tables, key=lambda t: (t.schema_name, t.table_name))


def _schema_summaries(graph: SchemaGraph) -> List[SchemaSummary]:
    summaries = []
    for name in graph.schema_names():
        tables = [t for t in graph.tables if t.schema_name == name]
        summaries.append(SchemaSummary(
            schema_name=name,
            table_count=len(tables),
            estimated_rows=sum(t.estimated_row_count or 0 for t in tables),
        ))
    return summaries


class SchemaView:
    """Current graph plus selection, with memoized derived state."""

    def __init__(self, graph: SchemaGraph, whole_graph_text: Optional[str] = None):
        self._graph = graph
        self._whole_graph_text = whole_graph_text

        self.selected_table: Optional[TableKey] = None
        self.degrees = MIN_DEGREES
        self.show_all = False
        self.search_query = ""
        self.label: Optional[RelationshipLabel] = None
        self.selected_schemas: FrozenSet[str] = self._initial_schemas(graph)

        self._relation_index = memoize_last(build_relation_index)
        self._neighborhood = memoize_last(find_neighborhood)
        self._neighborhood_text = memoize_last(generate_neighborhood_er_diagram)
        self._filtered_text = memoize_last(generate_filtered_er_diagram)
        self._whole_text = memoize_last(generate_er_diagram)
        self._tables = memoize_last(_filter_tables)
        self._summaries = memoize_last(_schema_summaries)

    @staticmethod
    def _initial_schemas(graph: SchemaGraph) -> FrozenSet[str]:
        schema = default_schema(graph.schema_names())
        return frozenset([schema]) if schema else frozenset()

    @property
    def graph(self) -> SchemaGraph:
        return self._graph

    def replace_graph(self, graph: SchemaGraph, whole_graph_text: Optional[str] = None) -> None:
        """Swap in a new graph; selections that no longer apply are dropped."""
        self._graph = graph
        self._whole_graph_text = whole_graph_text

        if self.selected_table is not None and graph.table(self.selected_table) is None:
            logger.debug(f"Selected table {self.selected_table} not in new graph; clearing selection")
            self.selected_table = None

        names = set(graph.schema_names())
        kept = self.selected_schemas & names
        self.selected_schemas = frozenset(kept) if kept else self._initial_schemas(graph)

    # ---- Selection ----

    def select_table(self, key: Optional[TableKey], degrees: Optional[int] = None) -> None:
        if key is not None and self._graph.table(key) is None:
            raise KeyError(f"Unknown table {key}")
        self.selected_table = key
        if degrees is not None:
            self.set_degrees(degrees)

    def set_degrees(self, degrees: int) -> None:
        if not MIN_DEGREES <= degrees <= MAX_DEGREES:
            raise ValueError(f"degrees must be between {MIN_DEGREES} and {MAX_DEGREES}, got {degrees}")
        self.degrees = degrees

    def select_schemas(self, schemas: Iterable[str]) -> None:
        self.selected_schemas = frozenset(schemas)

    def set_show_all(self, show_all: bool) -> None:
        self.show_all = show_all

    def set_search(self, query: str) -> None:
        self.search_query = query

    def set_label(self, label: Optional[RelationshipLabel]) -> None:
        """None keeps each diagram mode's own default label."""
        self.label = label

    # ---- Derived state ----

    @property
    def relation_index(self) -> RelationIndex:
        return self._relation_index(self._graph)

    @property
    def neighborhood(self) -> Optional[Neighborhood]:
        if self.selected_table is None:
            return None
        return self._neighborhood(self.selected_table, self._graph, self.degrees)

    @property
    def diagram_text(self) -> str:
        """Text for the current mode: neighborhood, whole graph or schema filter."""
        kwargs = {} if self.label is None else {"label": self.label}
        if self.selected_table is not None:
            table = self._graph.table(self.selected_table)
            if table is not None:
                return self._neighborhood_text(table, self._graph, self.degrees, **kwargs)
        if self.show_all:
            if self._whole_graph_text:
                return self._whole_graph_text
            return self._whole_text(self._graph, **kwargs)
        return self._filtered_text(self._graph, self.selected_schemas, **kwargs)

    @property
    def filtered_tables(self) -> List[Table]:
        schemas = None if self.show_all else self.selected_schemas
        return self._tables(self._graph, schemas, self.search_query)

    @property
    def schema_summaries(self) -> List[SchemaSummary]:
        return self._summaries(self._graph)
